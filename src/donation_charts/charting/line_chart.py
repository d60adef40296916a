"""Line chart builder (donation trends over time).

Each series draws itself by animating its stroke dash offset from the path
length down to zero while the area underneath fades in. Series start
``series * 200ms`` apart; the point markers pop in one by one after their
line has finished drawing.
"""

from __future__ import annotations

from ..config import settings
from .geometry import layout_lines
from .registry import ChartBuild, register_chart_type
from .scene import Scene
from .types import ChartSpec, ResolvedStyle, Transition


def build_line_chart(spec: ChartSpec, style: ResolvedStyle) -> ChartBuild:
    layout = layout_lines(spec.values, spec.labels or (), style)
    scene = Scene(
        kind="line",
        width=style.width,
        height=style.height,
        title=spec.title,
        grid=layout.grid,
        ticks=layout.ticks,
        legend=layout.legend if style.show_legend else (),
    )
    duration = style.animation_duration_ms
    transitions = []
    for s, line in enumerate(layout.lines):
        scene.add(line)
        delay = s * settings.SERIES_STAGGER_MS
        transitions.append(
            Transition(line.key, "dash_offset", line.length, 0.0, delay, duration, easing="linear")
        )
        transitions.append(Transition(line.key, "area_opacity", 0.0, 1.0, delay, duration))
    # markers paint above every line
    for s, markers in enumerate(layout.markers):
        for marker in markers:
            scene.add(marker, hoverable=True)
            delay = duration + s * settings.SERIES_STAGGER_MS + marker.index * settings.MARKER_STAGGER_MS
            transitions.append(
                Transition(marker.key, "radius", 0.0, marker.radius, delay, settings.MARKER_GROW_MS)
            )
    return ChartBuild(scene=scene, transitions=tuple(transitions))


register_chart_type("line", build_line_chart, "Cardinal-spline series over a point axis")
