"""Pie and donut chart builders.

Both sweep every slice open from angle 0 to its final ``(start, end)`` pair.
Pie percentage labels fade in once the sweep is under way; donut outer labels
and leader lines follow one after another, and the donut's center total
fades in ahead of its caption.
"""

from __future__ import annotations

from ..config import settings
from .geometry import layout_arcs
from .registry import ChartBuild, register_chart_type
from .scene import Scene
from .types import ChartSpec, ResolvedStyle, Transition


def _build_radial(spec: ChartSpec, style: ResolvedStyle, *, donut: bool) -> ChartBuild:
    layout = layout_arcs(spec.values, style, donut=donut)
    scene = Scene(
        kind=spec.kind,
        width=style.width,
        height=style.height,
        title=spec.title,
        legend=layout.legend if style.show_legend else (),
        legend_placement="side",
    )
    duration = style.animation_duration_ms
    transitions = []
    for i, arc in enumerate(layout.slices):
        scene.add(arc, hoverable=True)
        transitions.append(Transition(arc.key, "angles", (0.0, 0.0), arc.angles, 0.0, duration))
        if arc.label_text is None:
            continue
        if donut:
            label_delay = settings.DONUT_LABEL_DELAY_MS + i * settings.DONUT_LABEL_STAGGER_MS
        else:
            label_delay = settings.SLICE_LABEL_DELAY_MS
        transitions.append(Transition(arc.key, "label_opacity", 0.0, 1.0, label_delay, duration))
    for mark, delay in zip(layout.center_text, settings.DONUT_CENTER_DELAYS_MS):
        scene.add(mark)
        transitions.append(Transition(mark.key, "opacity", 0.0, 1.0, delay, duration))
    return ChartBuild(scene=scene, transitions=tuple(transitions))


def build_pie_chart(spec: ChartSpec, style: ResolvedStyle) -> ChartBuild:
    return _build_radial(spec, style, donut=False)


def build_donut_chart(spec: ChartSpec, style: ResolvedStyle) -> ChartBuild:
    return _build_radial(spec, style, donut=True)


register_chart_type("pie", build_pie_chart, "Full-disc slices sized by share of the total")
register_chart_type("donut", build_donut_chart, "Ring slices with outer labels and a center total")
