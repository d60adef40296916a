"""Shape geometry for bar, pie/donut and line charts.

Turns normalized ``ChartSpec`` values plus a ``ResolvedStyle`` into final
shape descriptors in absolute svg coordinates (margins already applied), the
static guides (grid lines, tick labels) and legend entries. Nothing here is
animated; the chart builders derive entrance transitions from these final shapes.

Conventions:
 - Angles are radians, 0 at twelve o'clock, increasing clockwise.
 - Colors follow first-seen order of categories/series:
   ``palette[index % len(palette)]``.
 - Pie/donut slices are ordered by descending value; equal values keep their
   input order (``sorted`` is stable).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import settings
from .scales import BandScale, LinearScale, PointScale, linear_scale_for_values, make_band_scale, make_point_scale
from .types import ArcSlice, Bar, LineSegmentSet, Point, PointMarker, ResolvedStyle, TextMark

__all__ = [
    "GuideLine",
    "TickLabel",
    "LegendEntry",
    "PlotArea",
    "BarLayout",
    "RadialLayout",
    "LineLayout",
    "humanize_label",
    "series_title",
    "tooltip_title",
    "format_value",
    "percentage_text",
    "assign_colors",
    "plot_area",
    "layout_bars",
    "layout_arcs",
    "layout_lines",
    "arc_path",
    "arc_centroid",
    "cardinal_path",
    "area_path",
    "path_length",
]

TAU = 2 * math.pi


@dataclass(frozen=True)
class GuideLine:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str = "#E5E7EB"
    opacity: float = 0.7


@dataclass(frozen=True)
class TickLabel:
    x: float
    y: float
    text: str
    anchor: str = "middle"


@dataclass(frozen=True)
class LegendEntry:
    label: str
    color: str
    detail: Optional[str] = None


@dataclass(frozen=True)
class PlotArea:
    left: float
    top: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


# Text helpers ----------------------------------------------------------


def humanize_label(key: str) -> str:
    """``"foodItems"`` -> ``"food items"``."""
    return re.sub(r"([A-Z])", r" \1", key).lower().strip()


def tooltip_title(key: str) -> str:
    text = humanize_label(key)
    return text[:1].upper() + text[1:]


def series_title(key: str) -> str:
    """Line series keep their key as-is, first letter capitalized."""
    return key[:1].upper() + key[1:]


def format_value(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def percentage_text(value: float, total: float) -> str:
    return f"{value / total * 100:.1f}%"


def assign_colors(keys: Iterable[str], palette: Sequence[str]) -> Dict[str, str]:
    """Map each distinct key to a palette color by first-seen position."""
    out: Dict[str, str] = {}
    for key in keys:
        if key not in out:
            out[key] = palette[len(out) % len(palette)]
    return out


def _fmt(n: float) -> str:
    text = f"{n:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


# Cartesian (bar / line) ------------------------------------------------


def plot_area(style: ResolvedStyle) -> PlotArea:
    top, right, bottom, left = settings.CARTESIAN_MARGIN
    return PlotArea(
        left=float(left),
        top=float(top),
        width=max(style.width - left - right, 1.0),
        height=max(style.height - top - bottom, 1.0),
    )


def _y_guides(area: PlotArea, y: LinearScale) -> Tuple[List[GuideLine], List[TickLabel]]:
    lines: List[GuideLine] = []
    labels: List[TickLabel] = []
    for tick in y.ticks():
        py = area.top + y(tick)
        lines.append(GuideLine(area.left, py, area.left + area.width, py))
        labels.append(TickLabel(area.left - 9, py, format_value(tick), anchor="end"))
    return lines, labels


@dataclass(frozen=True)
class BarLayout:
    area: PlotArea
    x: BandScale
    y: LinearScale
    bars: Tuple[Bar, ...]
    grid: Tuple[GuideLine, ...]
    ticks: Tuple[TickLabel, ...]
    baseline: float


def layout_bars(values: Sequence[float], labels: Sequence[str], style: ResolvedStyle) -> BarLayout:
    area = plot_area(style)
    x = make_band_scale(labels, 0.0, area.width, settings.BAND_PADDING)
    y = linear_scale_for_values(values, area.height, 0.0)
    baseline = area.top + y(y.domain[0])
    colors = assign_colors(labels, style.color_palette)
    bars = []
    for i, (value, label) in enumerate(zip(values, labels)):
        slot = x.slot_at(i)
        top = area.top + y(value)
        bars.append(
            Bar(
                key=f"bar-{i}",
                label=label,
                value=value,
                x=area.left + slot.start,
                y=min(top, baseline),
                width=slot.width,
                height=abs(baseline - top),
                fill=colors[label],
            )
        )
    grid, ticks = _y_guides(area, y)
    x_ticks = [
        TickLabel(area.left + x.slot_at(i).center, area.bottom + 18, label)
        for i, label in enumerate(labels)
    ]
    return BarLayout(
        area=area,
        x=x,
        y=y,
        bars=tuple(bars),
        grid=tuple(grid),
        ticks=tuple(ticks + x_ticks),
        baseline=baseline,
    )


# Pie / donut -----------------------------------------------------------


def _polar(cx: float, cy: float, r: float, angle: float) -> Point:
    return cx + r * math.sin(angle), cy - r * math.cos(angle)


def arc_centroid(cx: float, cy: float, inner: float, outer: float, angles: Tuple[float, float]) -> Point:
    return _polar(cx, cy, (inner + outer) / 2, (angles[0] + angles[1]) / 2)


def arc_path(cx: float, cy: float, inner: float, outer: float, angles: Tuple[float, float]) -> str:
    """SVG path for an annular sector; empty string for a zero-span arc."""
    a0, a1 = angles
    if a1 < a0:
        a0, a1 = a1, a0
    span = a1 - a0
    if span <= 1e-9 or outer <= 0:
        return ""
    if span >= TAU - 1e-9:
        # full ring: two half arcs (an svg arc cannot start and end on the same point)
        mid = a0 + math.pi
        ox0, oy0 = _polar(cx, cy, outer, a0)
        ox1, oy1 = _polar(cx, cy, outer, mid)
        d = (
            f"M{_fmt(ox0)},{_fmt(oy0)}A{_fmt(outer)},{_fmt(outer)},0,1,1,{_fmt(ox1)},{_fmt(oy1)}"
            f"A{_fmt(outer)},{_fmt(outer)},0,1,1,{_fmt(ox0)},{_fmt(oy0)}"
        )
        if inner > 0:
            ix0, iy0 = _polar(cx, cy, inner, a0)
            ix1, iy1 = _polar(cx, cy, inner, mid)
            d += (
                f"M{_fmt(ix0)},{_fmt(iy0)}A{_fmt(inner)},{_fmt(inner)},0,1,0,{_fmt(ix1)},{_fmt(iy1)}"
                f"A{_fmt(inner)},{_fmt(inner)},0,1,0,{_fmt(ix0)},{_fmt(iy0)}"
            )
        return d + "Z"
    large = 1 if span > math.pi else 0
    ox0, oy0 = _polar(cx, cy, outer, a0)
    ox1, oy1 = _polar(cx, cy, outer, a1)
    d = f"M{_fmt(ox0)},{_fmt(oy0)}A{_fmt(outer)},{_fmt(outer)},0,{large},1,{_fmt(ox1)},{_fmt(oy1)}"
    if inner > 0:
        ix1, iy1 = _polar(cx, cy, inner, a1)
        ix0, iy0 = _polar(cx, cy, inner, a0)
        d += f"L{_fmt(ix1)},{_fmt(iy1)}A{_fmt(inner)},{_fmt(inner)},0,{large},0,{_fmt(ix0)},{_fmt(iy0)}"
    else:
        d += f"L{_fmt(cx)},{_fmt(cy)}"
    return d + "Z"


@dataclass(frozen=True)
class RadialLayout:
    cx: float
    cy: float
    outer_radius: float
    inner_radius: float
    total: float
    slices: Tuple[ArcSlice, ...]
    center_text: Tuple[TextMark, ...]
    legend: Tuple[LegendEntry, ...]


def layout_arcs(
    pairs: Sequence[Tuple[str, float]], style: ResolvedStyle, *, donut: bool
) -> RadialLayout:
    """Partition the circle among ``pairs`` (category, value).

    A zero total yields no slices; the caller renders the empty state.
    """
    cleaned = [(k, max(v, 0.0)) for k, v in pairs]
    total = sum(v for _k, v in cleaned)
    cx, cy = style.width / 2, style.height / 2
    outer = max(min(style.width, style.height) / 2 - settings.RADIAL_MARGIN, 1.0)
    inner = outer * settings.DONUT_INNER_RATIO if donut else 0.0
    colors = assign_colors((k for k, _v in cleaned), style.color_palette)
    legend = tuple(
        LegendEntry(
            label=humanize_label(k),
            color=colors[k],
            detail=f"{format_value(v)} ({percentage_text(v, total)})" if total else format_value(v),
        )
        for k, v in cleaned
    )
    if total == 0:
        return RadialLayout(cx, cy, outer, inner, 0.0, (), (), legend)

    ordered = sorted(cleaned, key=lambda kv: -kv[1])
    slices = []
    running = 0.0
    for i, (key, value) in enumerate(ordered):
        start = running / total * TAU
        running += value
        end = running / total * TAU
        pct = percentage_text(value, total)
        show_label = value > total * settings.SLICE_LABEL_MIN_SHARE
        mid = (start + end) / 2
        if donut:
            label_text = f"{humanize_label(key)} ({pct})" if show_label else None
            position = _polar(cx, cy, outer + 30, mid)
            leader = (_polar(cx, cy, outer + 10, mid), position) if show_label else None
            anchor = "end" if mid > math.pi else "start"
        else:
            label_text = pct if show_label else None
            position = arc_centroid(cx, cy, inner, outer, (start, end))
            leader = None
            anchor = "middle"
        slices.append(
            ArcSlice(
                key=f"slice-{i}",
                label=key,
                value=value,
                percentage=pct,
                cx=cx,
                cy=cy,
                inner_radius=inner,
                outer_radius=outer,
                angles=(start, end),
                fill=colors[key],
                label_text=label_text,
                label_position=position,
                label_anchor=anchor,
                leader_line=leader,
            )
        )
    center: Tuple[TextMark, ...] = ()
    if donut and style.show_center_text:
        center = (
            TextMark("center-total", format_value(total), cx, cy - 10, font_size=24, weight="bold"),
            TextMark("center-caption", "Total", cx, cy + 15, font_size=12, fill="#6B7280"),
        )
    return RadialLayout(cx, cy, outer, inner, total, tuple(slices), center, legend)


# Lines -----------------------------------------------------------------


def _cardinal_segments(points: Sequence[Point], tension: float = 0.0) -> List[Tuple[Point, Point, Point]]:
    """Cubic bezier (c1, c2, end) segments of a cardinal spline through ``points``.

    End segments mirror their neighbour so the curve starts and ends with a
    tangent along the first/last chord.
    """
    k = (1 - tension) / 6
    n = len(points)
    out = []
    for i in range(n - 1):
        p0 = points[i - 1] if i > 0 else points[i + 1]
        p1, p2 = points[i], points[i + 1]
        p3 = points[i + 2] if i + 2 < n else points[i]
        c1 = (p1[0] + k * (p2[0] - p0[0]), p1[1] + k * (p2[1] - p0[1]))
        c2 = (p2[0] + k * (p1[0] - p3[0]), p2[1] + k * (p1[1] - p3[1]))
        out.append((c1, c2, p2))
    return out


def cardinal_path(points: Sequence[Point], tension: float = 0.0) -> str:
    if not points:
        return ""
    x0, y0 = points[0]
    d = f"M{_fmt(x0)},{_fmt(y0)}"
    if len(points) == 2:
        return d + f"L{_fmt(points[1][0])},{_fmt(points[1][1])}"
    for c1, c2, end in _cardinal_segments(points, tension):
        d += (
            f"C{_fmt(c1[0])},{_fmt(c1[1])},{_fmt(c2[0])},{_fmt(c2[1])},"
            f"{_fmt(end[0])},{_fmt(end[1])}"
        )
    return d


def area_path(points: Sequence[Point], baseline: float, tension: float = 0.0) -> str:
    if not points:
        return ""
    top = cardinal_path(points, tension)
    return top + f"L{_fmt(points[-1][0])},{_fmt(baseline)}L{_fmt(points[0][0])},{_fmt(baseline)}Z"


def path_length(points: Sequence[Point], tension: float = 0.0, samples: int = 16) -> float:
    """Approximate arc length of the cardinal spline by flattening each segment."""
    if len(points) < 2:
        return 0.0
    if len(points) == 2:
        return math.dist(points[0], points[1])
    total = 0.0
    start = points[0]
    for c1, c2, end in _cardinal_segments(points, tension):
        prev = start
        for step in range(1, samples + 1):
            t = step / samples
            mt = 1 - t
            x = mt**3 * start[0] + 3 * mt * mt * t * c1[0] + 3 * mt * t * t * c2[0] + t**3 * end[0]
            y = mt**3 * start[1] + 3 * mt * mt * t * c1[1] + 3 * mt * t * t * c2[1] + t**3 * end[1]
            total += math.dist(prev, (x, y))
            prev = (x, y)
        start = end
    return total


@dataclass(frozen=True)
class LineLayout:
    area: PlotArea
    x: PointScale
    y: LinearScale
    lines: Tuple[LineSegmentSet, ...]
    markers: Tuple[Tuple[PointMarker, ...], ...]
    grid: Tuple[GuideLine, ...]
    ticks: Tuple[TickLabel, ...]
    legend: Tuple[LegendEntry, ...]
    baseline: float


def layout_lines(
    series: Sequence[Tuple[str, Sequence[float]]], labels: Sequence[str], style: ResolvedStyle
) -> LineLayout:
    area = plot_area(style)
    x = make_point_scale(labels, 0.0, area.width)
    y = linear_scale_for_values((v for _name, vals in series for v in vals), area.height, 0.0)
    baseline = area.top + y(y.domain[0])
    colors = assign_colors((name for name, _vals in series), style.color_palette)
    lines = []
    markers = []
    for s, (name, vals) in enumerate(series):
        pts = tuple((area.left + x.at(i), area.top + y(v)) for i, v in enumerate(vals))
        lines.append(
            LineSegmentSet(
                key=f"line-{s}",
                series=name,
                points=pts,
                path=cardinal_path(pts),
                area_path=area_path(pts, baseline),
                length=path_length(pts),
                stroke=colors[name],
            )
        )
        markers.append(
            tuple(
                PointMarker(
                    key=f"marker-{s}-{i}",
                    series=name,
                    label=labels[i],
                    value=v,
                    index=i,
                    cx=px,
                    cy=py,
                    radius=settings.MARKER_RADIUS,
                    fill=colors[name],
                )
                for i, (v, (px, py)) in enumerate(zip(vals, pts))
            )
        )
    grid, ticks = _y_guides(area, y)
    for i, label in enumerate(labels):
        px = area.left + x.at(i)
        grid.append(GuideLine(px, area.top, px, area.bottom, stroke="#F3F4F6", opacity=0.5))
        ticks.append(TickLabel(px, area.bottom + 18, label))
    legend = tuple(LegendEntry(series_title(name), colors[name]) for name, _vals in series)
    return LineLayout(
        area=area,
        x=x,
        y=y,
        lines=tuple(lines),
        markers=tuple(markers),
        grid=tuple(grid),
        ticks=tuple(ticks),
        legend=legend,
        baseline=baseline,
    )
