"""Bar chart builder (donation totals per category).

Bars grow up from the baseline with a cascading ``index * 100ms`` delay; the
value label above each bar fades in 500ms after its bar starts.
"""

from __future__ import annotations

from ..config import settings
from .geometry import LegendEntry, assign_colors, layout_bars
from .registry import ChartBuild, register_chart_type
from .scene import Scene
from .types import ChartSpec, ResolvedStyle, Transition


def build_bar_chart(spec: ChartSpec, style: ResolvedStyle) -> ChartBuild:
    labels = spec.labels or ()
    layout = layout_bars(spec.values, labels, style)
    scene = Scene(
        kind="bar",
        width=style.width,
        height=style.height,
        title=spec.title,
        grid=layout.grid,
        ticks=layout.ticks,
    )
    if style.show_legend:
        colors = assign_colors(labels, style.color_palette)
        scene.legend = tuple(LegendEntry(lbl, colors[lbl]) for lbl in colors)
        scene.legend_placement = "side"
    duration = style.animation_duration_ms
    transitions = []
    for i, bar in enumerate(layout.bars):
        scene.add(bar, hoverable=True)
        delay = i * settings.BAR_STAGGER_MS
        transitions += [
            Transition(bar.key, "y", layout.baseline, bar.y, delay, duration),
            Transition(bar.key, "height", 0.0, bar.height, delay, duration),
            Transition(
                bar.key, "value_label_opacity", 0.0, 1.0, delay + settings.BAR_LABEL_DELAY_MS, duration
            ),
        ]
    return ChartBuild(scene=scene, transitions=tuple(transitions))


register_chart_type("bar", build_bar_chart, "Vertical bars over a categorical axis")
