"""Chart type registry."""

from __future__ import annotations

import pytest

from donation_charts.charting import ChartSpec, chart_registry
from donation_charts.charting.registry import ChartBuild, ChartRegistry, build_empty_scene
from donation_charts.charting.scene import Scene


def _dummy(spec, style):
    return ChartBuild(scene=Scene(kind=spec.kind, width=style.width, height=style.height), transitions=())


def test_builtin_types_registered():
    assert set(chart_registry.list_types()) >= {"bar", "line", "pie", "donut"}


def test_register_duplicate_chart_type():
    registry = ChartRegistry()
    registry.register("bar", _dummy, "Custom bar")
    with pytest.raises(ValueError):
        registry.register("bar", _dummy, "Duplicate")


def test_unknown_chart_type():
    registry = ChartRegistry()
    with pytest.raises(KeyError):
        registry.build(ChartSpec("pie", values={"a": 1}))


def test_custom_builder_receives_resolved_style():
    registry = ChartRegistry()
    seen = []

    def builder(spec, style):
        seen.append(style)
        return _dummy(spec, style)

    registry.register("pie", builder, "Pie")
    result = registry.build(ChartSpec("pie", values={"a": 1}))
    assert result.scene.kind == "pie"
    assert seen[0].width == 400


def test_build_returns_entrance_transitions():
    result = chart_registry.build(ChartSpec("bar", values=[1, 2], labels=["a", "b"]))
    fields = {(t.target, t.field) for t in result.transitions}
    assert ("bar-0", "height") in fields and ("bar-1", "value_label_opacity") in fields
    delays = {t.target: t.delay_ms for t in result.transitions if t.field == "height"}
    assert delays == {"bar-0": 0, "bar-1": 100}


def test_empty_scene_is_short_and_flagged():
    scene = build_empty_scene(ChartSpec("line", values={}, labels=[], title="Trend"))
    assert scene.empty
    assert scene.height == 120
    assert scene.title == "Trend"
