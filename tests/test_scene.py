"""Scene graph hit testing and surface bookkeeping."""

import math

import pytest

from donation_charts.charting.scene import Scene
from donation_charts.charting.surface import SceneSurface
from donation_charts.charting.types import ArcSlice, Bar, PointMarker


def _slice(key, start, end, inner=0.0):
    return ArcSlice(
        key=key, label=key, value=1.0, percentage="50.0%", cx=100, cy=100,
        inner_radius=inner, outer_radius=50, angles=(start, end), fill="#10B981",
    )


def test_duplicate_keys_rejected():
    scene = Scene(kind="bar", width=100, height=100)
    bar = Bar("bar-0", "A", 1.0, 10, 10, 20, 50, "#10B981")
    scene.add(bar, hoverable=True)
    with pytest.raises(ValueError):
        scene.add(bar)


def test_arc_hit_test_uses_clockwise_angles():
    scene = Scene(kind="donut", width=200, height=200)
    scene.add(_slice("right", 0, math.pi, inner=30), hoverable=True)
    scene.add(_slice("left", math.pi, 2 * math.pi, inner=30), hoverable=True)
    assert scene.hit_test(140, 100).key == "right"
    assert scene.hit_test(60, 100).key == "left"
    # inside the hole and outside the ring
    assert scene.hit_test(100, 100) is None
    assert scene.hit_test(100, 10) is None


def test_marker_hit_radius_has_minimum():
    scene = Scene(kind="line", width=200, height=200)
    scene.add(PointMarker("m", "s", "Jan", 1.0, 0, 50, 50, 0.0, "#10B981"), hoverable=True)
    assert scene.hit_test(56, 50).key == "m"
    assert scene.hit_test(60, 50) is None


def test_set_field_replaces_shape_but_keeps_final():
    scene = Scene(kind="bar", width=100, height=100)
    scene.add(Bar("bar-0", "A", 1.0, 10, 10, 20, 50, "#10B981"))
    scene.set_field("bar-0", "height", 5.0)
    node = scene.node("bar-0")
    assert node.shape.height == 5.0 and node.final.height == 50
    scene.set_field("missing", "height", 1.0)  # ignored


def test_surface_overlay_bookkeeping():
    surface = SceneSurface()
    pings = []
    surface.add_repaint_listener(lambda: pings.append(1))
    overlay = surface.create_overlay()
    assert surface.overlays == [overlay]
    surface.destroy_overlay(overlay)
    surface.destroy_overlay(overlay)
    assert surface.overlays == [] and not overlay.alive
    assert len(pings) == 2
