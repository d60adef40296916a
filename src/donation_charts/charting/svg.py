"""SVG serialization of a scene.

``render_svg`` paints whatever the scene currently holds (the animated
``shape`` of every node, not its final geometry), so calling it mid-animation
yields a frame. The output is a standalone document: gradient ``<defs>``, a
rounded white card, guides, shapes, labels, the legend and, when visible, the
tooltip overlay.

Gradient tints follow the dashboard look: bars and areas fade toward the
baseline, pie/donut slices get a radial highlight brightened from their fill
(matplotlib parses and scales the color).
"""

from __future__ import annotations

import html
from typing import Dict, List, Optional

from matplotlib import colors as mcolors

from ..config import settings
from .geometry import _fmt, arc_path, format_value
from .scene import Scene
from .types import ArcSlice, Bar, LineSegmentSet, PointMarker, TextMark, TooltipState

__all__ = ["render_svg", "brighter"]

SVG_NS = "http://www.w3.org/2000/svg"
FONT = "font-family=\"Inter, Helvetica, Arial, sans-serif\""


def brighter(color: str, k: float) -> str:
    """Scale each channel by ``(1 / 0.7) ** k`` (clamped), like d3's ``brighter``."""
    factor = (1 / 0.7) ** k
    r, g, b = mcolors.to_rgb(color)
    return mcolors.to_hex((min(r * factor, 1.0), min(g * factor, 1.0), min(b * factor, 1.0))).upper()


def _esc(text: str) -> str:
    return html.escape(str(text), quote=True)


class _Defs:
    """Collects one gradient per (kind, color) pair."""

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def linear(self, color: str, low: float, high: float, prefix: str) -> str:
        gid = f"{prefix}-{color.lstrip('#').lower()}"
        if gid not in self._items:
            self._items[gid] = (
                f'<linearGradient id="{gid}" x1="0" y1="1" x2="0" y2="0">'
                f'<stop offset="0%" stop-color="{color}" stop-opacity="{_fmt(low)}"/>'
                f'<stop offset="100%" stop-color="{color}" stop-opacity="{_fmt(high)}"/>'
                "</linearGradient>"
            )
        return f"url(#{gid})"

    def radial(self, color: str, k: float, prefix: str) -> str:
        gid = f"{prefix}-{color.lstrip('#').lower()}"
        if gid not in self._items:
            self._items[gid] = (
                f'<radialGradient id="{gid}" cx="30%" cy="30%">'
                f'<stop offset="0%" stop-color="{brighter(color, k)}"/>'
                f'<stop offset="100%" stop-color="{color}"/>'
                "</radialGradient>"
            )
        return f"url(#{gid})"

    def render(self) -> str:
        return "<defs>" + "".join(self._items.values()) + "</defs>"


def _bar(bar: Bar, defs: _Defs) -> List[str]:
    fill = defs.linear(bar.fill, 0.8, 1.0, "bar-gradient")
    cx = bar.x + bar.width / 2
    return [
        f'<rect class="bar" data-key="{bar.key}" data-label="{_esc(bar.label)}" x="{_fmt(bar.x)}" '
        f'y="{_fmt(bar.y)}" width="{_fmt(bar.width)}" height="{_fmt(bar.height)}" rx="4" ry="4" '
        f'fill="{fill}" opacity="{_fmt(bar.opacity)}"/>',
        f'<text class="value-label" data-key="{bar.key}" x="{_fmt(cx)}" y="{_fmt(bar.y - 5)}" '
        f'text-anchor="middle" font-size="12" font-weight="600" fill="#374151" '
        f'opacity="{_fmt(bar.value_label_opacity)}">{format_value(bar.value)}</text>',
    ]


def _arc(arc: ArcSlice, defs: _Defs, donut: bool) -> List[str]:
    fill = defs.radial(arc.fill, 0.3 if donut else 0.5, "donut-gradient" if donut else "pie-gradient")
    d = arc_path(arc.cx, arc.cy, arc.inner_radius, arc.outer_radius, arc.angles)
    out = [
        f'<path class="slice" data-key="{arc.key}" data-label="{_esc(arc.label)}" d="{d}" '
        f'fill="{fill}" stroke="{arc.stroke}" stroke-width="2" opacity="{_fmt(arc.opacity)}"/>'
    ]
    if arc.label_text is None:
        return out
    if arc.leader_line is not None:
        (x1, y1), (x2, y2) = arc.leader_line
        out.append(
            f'<line class="leader-line" data-key="{arc.key}" x1="{_fmt(x1)}" y1="{_fmt(y1)}" '
            f'x2="{_fmt(x2)}" y2="{_fmt(y2)}" stroke="#9CA3AF" stroke-width="1" '
            f'opacity="{_fmt(arc.label_opacity)}"/>'
        )
    lx, ly = arc.label_position
    color = "#374151" if donut else "#FFFFFF"
    out.append(
        f'<text class="slice-label" data-key="{arc.key}" x="{_fmt(lx)}" y="{_fmt(ly)}" '
        f'dy="0.35em" text-anchor="{arc.label_anchor}" font-size="12" font-weight="600" '
        f'fill="{color}" opacity="{_fmt(arc.label_opacity)}">{_esc(arc.label_text)}</text>'
    )
    return out


def _line(line: LineSegmentSet, defs: _Defs) -> List[str]:
    area_fill = defs.linear(line.stroke, 0.1, 0.3, "area-gradient")
    return [
        f'<path class="area" data-key="{line.key}" d="{line.area_path}" fill="{area_fill}" '
        f'opacity="{_fmt(line.area_opacity)}"/>',
        f'<path class="line" data-key="{line.key}" data-series="{_esc(line.series)}" d="{line.path}" '
        f'fill="none" stroke="{line.stroke}" stroke-width="{_fmt(line.stroke_width)}" '
        f'stroke-linecap="round" stroke-dasharray="{_fmt(line.length)}" '
        f'stroke-dashoffset="{_fmt(line.dash_offset)}"/>',
    ]


def _marker(marker: PointMarker) -> List[str]:
    return [
        f'<circle class="marker" data-key="{marker.key}" data-series="{_esc(marker.series)}" '
        f'cx="{_fmt(marker.cx)}" cy="{_fmt(marker.cy)}" r="{_fmt(marker.radius)}" '
        f'fill="{marker.fill}" stroke="{marker.stroke}" stroke-width="2" opacity="{_fmt(marker.opacity)}"/>'
    ]


def _text(mark: TextMark) -> List[str]:
    return [
        f'<text class="center-text" data-key="{mark.key}" x="{_fmt(mark.x)}" y="{_fmt(mark.y)}" '
        f'text-anchor="middle" font-size="{mark.font_size}" font-weight="{mark.weight}" '
        f'fill="{mark.fill}" opacity="{_fmt(mark.opacity)}">{_esc(mark.text)}</text>'
    ]


def _legend(scene: Scene) -> List[str]:
    out = ['<g class="legend">']
    if scene.legend_placement == "side":
        x0, y0 = scene.width + 20, 40.0
        for i, entry in enumerate(scene.legend):
            y = y0 + i * 24
            out.append(f'<rect x="{_fmt(x0)}" y="{_fmt(y)}" width="12" height="12" rx="3" fill="{entry.color}"/>')
            text = entry.label if entry.detail is None else f"{entry.label}: {entry.detail}"
            out.append(
                f'<text class="legend-label" x="{_fmt(x0 + 20)}" y="{_fmt(y + 10)}" font-size="12" '
                f'fill="#374151">{_esc(text)}</text>'
            )
    else:
        top, right, _bottom, _left = settings.CARTESIAN_MARGIN
        x0 = scene.width - right - 150
        for i, entry in enumerate(scene.legend):
            y = top + 20 + i * 20
            out.append(f'<rect x="{_fmt(x0)}" y="{_fmt(y)}" width="15" height="3" rx="2" fill="{entry.color}"/>')
            out.append(
                f'<text class="legend-label" x="{_fmt(x0 + 20)}" y="{_fmt(y + 6)}" font-size="12" '
                f'font-weight="500" fill="#374151">{_esc(entry.label)}</text>'
            )
    out.append("</g>")
    return out


def _tooltip(state: TooltipState) -> List[str]:
    lines = state.content.split("\n") if state.content else []
    x, y = state.anchor
    width = max((len(line) for line in lines), default=0) * 7 + 24
    height = len(lines) * 16 + 16
    out = [
        f'<g class="tooltip" opacity="{_fmt(state.opacity)}" transform="translate({_fmt(x)},{_fmt(y)})">',
        f'<rect width="{width}" height="{height}" rx="6" fill="#000000" fill-opacity="0.8"/>',
    ]
    for i, line in enumerate(lines):
        weight = "bold" if i == 0 else "normal"
        out.append(
            f'<text x="12" y="{20 + i * 16}" font-size="12" font-weight="{weight}" '
            f'fill="#FFFFFF">{_esc(line)}</text>'
        )
    out.append("</g>")
    return out


def render_svg(scene: Optional[Scene], tooltip: Optional[TooltipState] = None) -> str:
    """Serialize ``scene`` (and the tooltip overlay, when showing) to an SVG string.

    ``scene=None`` (nothing mounted) yields an empty document.
    """
    if scene is None:
        return f'<svg xmlns="{SVG_NS}" width="0" height="0"></svg>'
    width, height = scene.canvas_width, scene.height
    head = (
        f'<svg xmlns="{SVG_NS}" class="chart chart-{scene.kind}" width="{_fmt(width)}" '
        f'height="{_fmt(height)}" viewBox="0 0 {_fmt(width)} {_fmt(height)}" {FONT}>'
    )
    body: List[str] = []
    if scene.title:
        body.append(f"<title>{_esc(scene.title)}</title>")
    body.append(
        f'<rect class="background" width="{_fmt(width)}" height="{_fmt(height)}" rx="12" ry="12" '
        f'fill="#FFFFFF"/>'
    )
    defs = _Defs()
    if scene.empty:
        body.append(
            f'<text class="empty-state" x="{_fmt(width / 2)}" y="{_fmt(height / 2)}" '
            f'text-anchor="middle" font-size="14" fill="#6B7280">{_esc(settings.EMPTY_STATE_TEXT)}</text>'
        )
    else:
        body.append('<g class="grid">')
        for g in scene.grid:
            body.append(
                f'<line x1="{_fmt(g.x1)}" y1="{_fmt(g.y1)}" x2="{_fmt(g.x2)}" y2="{_fmt(g.y2)}" '
                f'stroke="{g.stroke}" stroke-width="1" opacity="{_fmt(g.opacity)}"/>'
            )
        body.append("</g>")
        body.append('<g class="ticks">')
        for t in scene.ticks:
            body.append(
                f'<text class="tick" x="{_fmt(t.x)}" y="{_fmt(t.y)}" dy="0.32em" text-anchor="{t.anchor}" '
                f'font-size="11" fill="#6B7280">{_esc(t.text)}</text>'
            )
        body.append("</g>")
        body.append('<g class="shapes">')
        donut = scene.kind == "donut"
        for node in scene:
            shape = node.shape
            if isinstance(shape, Bar):
                body.extend(_bar(shape, defs))
            elif isinstance(shape, ArcSlice):
                body.extend(_arc(shape, defs, donut))
            elif isinstance(shape, LineSegmentSet):
                body.extend(_line(shape, defs))
            elif isinstance(shape, PointMarker):
                body.extend(_marker(shape))
            elif isinstance(shape, TextMark):
                body.extend(_text(shape))
        body.append("</g>")
        if scene.legend:
            body.extend(_legend(scene))
    if tooltip is not None and (tooltip.visible or tooltip.opacity > 0):
        body.extend(_tooltip(tooltip))
    return head + defs.render() + "".join(body) + "</svg>"
