"""Render pipeline lifecycle, animation scenarios and tooltip ownership."""

from __future__ import annotations

import math

import pytest

from donation_charts.charting import ChartSpec, PipelineState, RenderPipeline, SceneSurface, StyleOptions
from donation_charts.charting.geometry import arc_centroid
from donation_charts.charting.types import ArcSlice, Bar, PointMarker
from donation_charts.design.reduced_motion import temporarily_reduced_motion
from donation_charts.services import ChartEvent, EventBus

BAR_SPEC = ChartSpec("bar", values=[3, 7, 2], labels=["A", "B", "C"], title="Donations by category")
LINE_SPEC = ChartSpec(
    "line",
    values={"donations": [4, 8, 6, 10, 7]},
    labels=["Jan", "Feb", "Mar", "Apr", "May"],
    style=StyleOptions(animation_duration_ms=1000),
)


class Host:
    """Pipeline + surface + manual clock bundle."""

    def __init__(self, clock, bus=None):
        self.clock = clock
        self.surface = SceneSurface()
        self.pipeline = RenderPipeline(self.surface, clock=clock, event_bus=bus)

    def at(self, ms):
        self.clock.set(ms)
        return self.pipeline.tick()


def _center(node):
    f = node.final
    if isinstance(f, Bar):
        return f.x + f.width / 2, f.y + f.height / 2
    if isinstance(f, ArcSlice):
        return arc_centroid(f.cx, f.cy, f.inner_radius, f.outer_radius, f.angles)
    return f.cx, f.cy


@pytest.fixture
def host(clock):
    return Host(clock)


def test_initial_state_is_empty(host):
    assert host.pipeline.state is PipelineState.EMPTY
    assert host.pipeline.scene is None
    assert not host.pipeline.is_animating


def test_bar_scenario_tallest_is_b(host):
    assert host.pipeline.render(BAR_SPEC) is PipelineState.RENDERED
    scene = host.pipeline.scene
    assert host.surface.scene is scene
    bars = [n.final for n in scene if isinstance(n.final, Bar)]
    assert max(bars, key=lambda b: b.height).label == "B"
    y_ticks = [float(t.text) for t in scene.ticks if t.anchor == "end"]
    assert max(y_ticks) >= 7


def test_bar_entrance_grows_from_baseline(host):
    host.pipeline.render(BAR_SPEC)
    scene = host.pipeline.scene
    baseline = 300 - 60
    for node in scene:
        assert node.shape.height == 0
        assert node.shape.y == pytest.approx(baseline)
        assert node.shape.value_label_opacity == 0
    host.at(100)
    # cascade: the first bar is moving, the third has not started
    assert scene.node("bar-0").shape.height > 0
    assert scene.node("bar-2").shape.height == 0
    host.at(950)
    for node in scene:
        assert node.shape.height == node.final.height
        assert node.shape.y == node.final.y
    assert scene.node("bar-2").shape.value_label_opacity < 1
    assert host.at(1450) is False
    assert all(n.shape == n.final for n in scene)


def test_line_marker_scenario(host):
    host.pipeline.render(LINE_SPEC)
    scene = host.pipeline.scene
    markers = [n for n in scene if isinstance(n.final, PointMarker)]
    assert len(markers) == 5
    assert all(m.shape.radius == 0 for m in markers)
    line = scene.node("line-0")
    assert line.shape.dash_offset == pytest.approx(line.final.length)
    host.at(1000)
    assert line.shape.dash_offset == 0
    assert all(m.shape.radius == 0 for m in markers)
    host.at(1000 + 4 * 50 + 300)
    assert all(m.shape.radius == 5 for m in markers)
    assert not host.pipeline.is_animating


def test_second_series_is_staggered(host):
    spec = ChartSpec("line", values={"a": [1, 2], "b": [2, 1]}, labels=["x", "y"])
    host.pipeline.render(spec)
    scene = host.pipeline.scene
    host.at(150)
    assert scene.node("line-0").shape.dash_offset < scene.node("line-0").final.length
    assert scene.node("line-1").shape.dash_offset == pytest.approx(scene.node("line-1").final.length)


def test_donut_entrance_sweeps_angles_and_labels_follow(host):
    host.pipeline.render(ChartSpec("donut", values={"a": 50, "b": 50}))
    scene = host.pipeline.scene
    slices = [n for n in scene if isinstance(n.final, ArcSlice)]
    assert all(n.shape.angles == (0.0, 0.0) for n in slices)
    host.at(750)
    assert [n.shape.angles for n in slices] == [n.final.angles for n in slices]
    assert slices[0].shape.label_opacity == 0
    assert scene.node("center-total").shape.opacity > 0
    host.at(1000 + 100 + 750)
    assert all(n.shape.label_opacity == 1 for n in slices)
    assert not host.pipeline.is_animating


@pytest.mark.parametrize(
    "spec",
    [
        ChartSpec("bar", values=[], labels=[]),
        ChartSpec("line", values={"a": [1]}),
        ChartSpec("bar", values=[3, 7, 2], labels=[]),
        ChartSpec("line", values={"a": [1, 2]}, labels=[]),
        ChartSpec("pie", values={"a": 0, "b": 0}),
        ChartSpec("donut", values={}),
    ],
)
def test_empty_data_renders_empty_state(host, spec):
    assert host.pipeline.render(spec) is PipelineState.EMPTY
    assert host.surface.scene.empty
    assert host.surface.scene.nodes == {}
    svg = host.pipeline.to_svg()
    assert "No data available" in svg
    assert "nan" not in svg.lower()
    assert host.pipeline.pointer_move(10, 10) is None
    assert host.surface.overlays == []


def test_rebuilds_never_accumulate_overlays(host):
    specs = [
        BAR_SPEC,
        ChartSpec("pie", values={"a": 1, "b": 2}),
        ChartSpec("bar", values=[1, 2, 3, 4], labels=list("wxyz")),
        ChartSpec("donut", values={"a": 96, "b": 4}),
        LINE_SPEC,
    ] * 4
    for i, spec in enumerate(specs):
        host.pipeline.render(spec)
        node = next(n for n in host.pipeline.scene if n.hoverable)
        assert host.pipeline.pointer_move(*_center(node)) is node
        assert len(host.surface.overlays) == 1
        host.at(i * 10 + 5)
    host.pipeline.render(BAR_SPEC)
    # no hover yet on the latest render
    assert host.surface.overlays == []


def test_dispose_and_new_pipeline_keep_single_overlay(clock):
    surface = SceneSurface()
    for _ in range(5):
        pipeline = RenderPipeline(surface, clock=clock)
        pipeline.render(BAR_SPEC)
        bar = pipeline.scene.node("bar-1")
        pipeline.pointer_move(*_center(bar))
        assert len(surface.overlays) == 1
        pipeline.dispose()
        assert surface.overlays == []
        assert surface.scene is None


def test_dispose_is_idempotent_from_every_state(clock):
    fresh = Host(clock)
    fresh.pipeline.dispose()
    fresh.pipeline.dispose()
    assert fresh.pipeline.state is PipelineState.DISPOSED

    empty = Host(clock)
    empty.pipeline.render(ChartSpec("pie", values={}))
    empty.pipeline.dispose()
    assert empty.pipeline.state is PipelineState.DISPOSED

    rendered = Host(clock)
    rendered.pipeline.render(BAR_SPEC)
    rendered.pipeline.dispose()
    rendered.pipeline.dispose()
    assert rendered.pipeline.state is PipelineState.DISPOSED
    assert not rendered.pipeline.scheduler.busy


def test_render_after_dispose_is_ignored(host):
    host.pipeline.render(BAR_SPEC)
    host.pipeline.dispose()
    assert host.pipeline.render(LINE_SPEC) is PipelineState.DISPOSED
    assert host.surface.scene is None
    assert host.pipeline.tick() is False
    assert "<svg" in host.pipeline.to_svg()


def test_stale_transitions_never_touch_superseded_scene(host):
    host.pipeline.render(BAR_SPEC)
    old_scene = host.pipeline.scene
    host.at(300)
    snapshot = {n.key: n.shape for n in old_scene}
    host.pipeline.render(ChartSpec("bar", values=[1, 1], labels=["x", "y"]))
    host.at(5000)
    assert {n.key: n.shape for n in old_scene} == snapshot
    assert host.pipeline.scene is not old_scene


def test_hover_bar_shows_tooltip_and_dims(host):
    host.pipeline.render(BAR_SPEC)
    host.at(2000)
    node = host.pipeline.scene.node("bar-1")
    x, y = _center(node)
    host.pipeline.pointer_move(x, y)
    state = host.pipeline.tooltip_state
    assert state.visible
    assert state.content == "B\nValue: 7"
    assert state.anchor == (x + 10, y - 28)
    host.at(2200)
    assert node.shape.opacity == pytest.approx(0.8)
    assert host.pipeline.tooltip_state.opacity == pytest.approx(0.9)
    host.pipeline.pointer_leave()
    host.at(2400)
    assert node.shape.opacity == 1.0
    assert host.pipeline.tooltip_state.visible
    host.at(2700)
    assert not host.pipeline.tooltip_state.visible
    assert host.pipeline.hovered is None


def test_pointer_outside_shapes_hides(host):
    host.pipeline.render(BAR_SPEC)
    host.at(2000)
    host.pipeline.pointer_move(*_center(host.pipeline.scene.node("bar-0")))
    assert host.pipeline.pointer_move(1, 1) is None
    host.at(2500)
    assert not host.pipeline.tooltip_state.visible


def test_moving_between_shapes_updates_content(host):
    host.pipeline.render(ChartSpec("pie", values={"foodItems": 3, "toys": 1}))
    host.at(2000)
    first, second = host.pipeline.scene.node("slice-0"), host.pipeline.scene.node("slice-1")
    host.pipeline.pointer_move(*_center(first))
    assert host.pipeline.tooltip_state.content == "Food items\nValue: 3\nPercentage: 75.0%"
    host.pipeline.pointer_move(*_center(second))
    assert host.pipeline.tooltip_state.content.startswith("Toys")
    assert host.pipeline.hovered is second
    host.at(2200)
    assert first.shape.outer_radius == first.final.outer_radius
    assert second.shape.outer_radius == second.final.outer_radius + 10


def test_donut_hover_grows_by_eight(host):
    host.pipeline.render(ChartSpec("donut", values={"a": 60, "b": 40}))
    host.at(3000)
    node = host.pipeline.scene.node("slice-0")
    host.pipeline.pointer_move(*_center(node))
    host.at(3200)
    assert node.shape.outer_radius == node.final.outer_radius + 8


def test_pointer_on_grown_rim_keeps_slice_hovered(host):
    host.pipeline.render(ChartSpec("pie", values={"a": 3, "b": 1}))
    host.at(3000)
    node = host.pipeline.scene.node("slice-0")
    assert host.pipeline.pointer_move(*_center(node)) is node
    host.at(3300)
    f = node.final
    assert node.shape.outer_radius == f.outer_radius + 10
    mid = (f.start_angle + f.end_angle) / 2
    r = f.outer_radius + 5
    x, y = f.cx + r * math.sin(mid), f.cy - r * math.cos(mid)
    assert host.pipeline.pointer_move(x, y) is node
    assert host.pipeline.hovered is node
    assert host.pipeline.tooltip_state.visible
    host.at(3600)
    assert node.shape.outer_radius == f.outer_radius + 10


def test_marker_hover_grows_and_describes_point(host):
    host.pipeline.render(LINE_SPEC)
    host.at(3000)
    marker = host.pipeline.scene.node("marker-0-3")
    host.pipeline.pointer_move(*_center(marker))
    assert host.pipeline.tooltip_state.content == "Donations\nApr: 10"
    host.at(3200)
    assert marker.shape.radius == 8
    host.pipeline.pointer_leave()
    host.at(3400)
    assert marker.shape.radius == 5


def test_tooltips_disabled(host):
    spec = ChartSpec("bar", values=[1, 2], labels=["a", "b"], style=StyleOptions(show_tooltip=False))
    host.pipeline.render(spec)
    node = host.pipeline.scene.node("bar-0")
    assert host.pipeline.pointer_move(*_center(node)) is None
    assert host.pipeline.tooltip is None
    assert host.surface.overlays == []


def test_same_spec_renders_same_colors(host):
    spec = ChartSpec("pie", values={"a": 1, "b": 2, "c": 3})
    host.pipeline.render(spec)
    first = {n.final.label: n.final.fill for n in host.pipeline.scene}
    host.pipeline.render(spec)
    second = {n.final.label: n.final.fill for n in host.pipeline.scene}
    assert first == second


def test_pie_angles_sum_through_pipeline(host):
    host.pipeline.render(ChartSpec("pie", values={"a": 1, "b": 1, "c": 2}))
    slices = [n.final for n in host.pipeline.scene if isinstance(n.final, ArcSlice)]
    assert sum(s.end_angle - s.start_angle for s in slices) == pytest.approx(2 * math.pi)
    assert [s.label for s in slices] == ["c", "a", "b"]


def test_reduced_motion_renders_final_frame_at_once(host):
    with temporarily_reduced_motion():
        host.pipeline.render(BAR_SPEC)
    assert all(n.shape == n.final for n in host.pipeline.scene)
    assert not host.pipeline.is_animating


def test_lifecycle_events(clock):
    bus = EventBus()
    seen = []
    for event in ChartEvent:
        bus.subscribe(event, lambda e: seen.append(e.name))
    host = Host(clock, bus)
    host.pipeline.render(ChartSpec("bar", values=[], labels=[]))
    host.pipeline.render(BAR_SPEC)
    host.at(2000)
    host.pipeline.pointer_move(*_center(host.pipeline.scene.node("bar-0")))
    host.pipeline.pointer_leave()
    host.at(2500)
    host.pipeline.dispose()
    assert seen == [
        "chart_empty",
        "chart_rendered",
        "tooltip_shown",
        "tooltip_hidden",
        "chart_disposed",
    ]


def test_surface_repaints_on_animation_frames(host):
    host.pipeline.render(BAR_SPEC)
    before = host.surface.repaint_count
    host.at(100)
    assert host.surface.repaint_count > before


def test_line_series_titles_keep_their_key(host):
    spec = ChartSpec("line", values={"monthlyTotal": [1, 4, 2]}, labels=["Jan", "Feb", "Mar"])
    host.pipeline.render(spec)
    host.at(3000)
    assert [e.label for e in host.pipeline.scene.legend] == ["MonthlyTotal"]
    marker = host.pipeline.scene.node("marker-0-1")
    host.pipeline.pointer_move(*_center(marker))
    assert host.pipeline.tooltip_state.content == "MonthlyTotal\nFeb: 4"
