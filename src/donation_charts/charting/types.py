"""Core charting types.

Everything here is a value: ``ChartSpec`` and ``StyleOptions`` describe what
the caller wants drawn, shape descriptors describe what the engine paints,
``Transition`` describes one timed property change and ``TooltipState`` the
hover overlay. None of them carries behaviour; the pipeline and scheduler own
all state changes and produce new values via ``dataclasses.replace``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union

from matplotlib.colors import to_hex

from ..config import settings

__all__ = [
    "CHART_KINDS",
    "Point",
    "StyleOptions",
    "ResolvedStyle",
    "ChartSpec",
    "Bar",
    "ArcSlice",
    "LineSegmentSet",
    "PointMarker",
    "TextMark",
    "ShapeDescriptor",
    "Transition",
    "TooltipState",
]

CHART_KINDS = ("bar", "line", "pie", "donut")

Point = Tuple[float, float]


def _number(value: Any, where: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"{where}: expected a number, got {type(value).__name__}")
    out = float(value)
    if not math.isfinite(out):
        raise ValueError(f"{where}: value must be finite, got {value!r}")
    return out


def _normalize_palette(colors: Iterable[str]) -> Tuple[str, ...]:
    out = []
    for c in colors:
        try:
            out.append(to_hex(c, keep_alpha=False).upper())
        except ValueError as e:
            raise ValueError(f"Invalid palette color: {c!r}") from e
    if not out:
        raise ValueError("color_palette must contain at least one color")
    return tuple(out)


@dataclass(frozen=True)
class ResolvedStyle:
    """``StyleOptions`` with every field filled in for a specific chart kind."""

    width: float
    height: float
    color_palette: Tuple[str, ...]
    show_tooltip: bool
    show_legend: bool
    show_center_text: bool
    animation_duration_ms: float

    def color_at(self, index: int) -> str:
        return self.color_palette[index % len(self.color_palette)]


@dataclass(frozen=True)
class StyleOptions:
    """Caller style hints. ``None`` means "use the default for the chart kind"."""

    width: Optional[float] = None
    height: Optional[float] = None
    color_palette: Optional[Tuple[str, ...]] = None
    show_tooltip: Optional[bool] = None
    show_legend: Optional[bool] = None
    show_center_text: Optional[bool] = None
    animation_duration_ms: Optional[float] = None

    def __post_init__(self) -> None:
        if self.color_palette is not None:
            object.__setattr__(self, "color_palette", _normalize_palette(self.color_palette))
        for name in ("width", "height", "animation_duration_ms"):
            value = getattr(self, name)
            if value is None:
                continue
            value = _number(value, name)
            if value < 0 or (name != "animation_duration_ms" and value == 0):
                raise ValueError(f"{name} must be positive, got {value}")
            object.__setattr__(self, name, value)

    def resolve(self, kind: str) -> ResolvedStyle:
        width, height, duration, palette = settings.KIND_DEFAULTS[kind]
        return ResolvedStyle(
            width=self.width if self.width is not None else float(width),
            height=self.height if self.height is not None else float(height),
            color_palette=self.color_palette or _normalize_palette(palette),
            show_tooltip=True if self.show_tooltip is None else self.show_tooltip,
            show_legend=(kind in ("line", "pie")) if self.show_legend is None else self.show_legend,
            show_center_text=True if self.show_center_text is None else self.show_center_text,
            animation_duration_ms=(
                float(duration) if self.animation_duration_ms is None else self.animation_duration_ms
            ),
        )


CategoryValues = Tuple[Tuple[str, float], ...]
SeriesValues = Tuple[Tuple[str, Tuple[float, ...]], ...]


@dataclass(frozen=True)
class ChartSpec:
    """Immutable description of one chart render.

    ``values`` shape depends on ``kind``:
     - ``bar``: sequence of numbers aligned with ``labels`` (a mapping is
       accepted too; its keys become the labels when none are given)
     - ``pie`` / ``donut``: mapping category -> number (or a sequence aligned
       with ``labels``; without labels the categories are named
       ``Category 1``, ``Category 2``, ...)
     - ``line``: mapping series name -> sequence of numbers aligned with
       ``labels`` (the x axis)

    Containers are normalized to tuples on construction so specs compare and
    hash by value.
    """

    kind: str
    values: Any = ()
    labels: Optional[Tuple[str, ...]] = None
    style: StyleOptions = field(default_factory=StyleOptions)
    title: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in CHART_KINDS:
            raise KeyError(f"Unknown chart kind: {self.kind}")
        labels = None if self.labels is None else tuple(str(lbl) for lbl in self.labels)
        values = self.values if self.values is not None else ()
        if self.kind == "bar":
            if isinstance(values, Mapping):
                if labels is None:
                    labels = tuple(str(k) for k in values.keys())
                values = tuple(values.values())
            norm: Any = tuple(_number(v, f"values[{i}]") for i, v in enumerate(values))
            if labels and norm and len(labels) != len(norm):
                raise ValueError(
                    f"bar chart needs one label per value ({len(labels)} labels, {len(norm)} values)"
                )
        elif self.kind in ("pie", "donut"):
            if isinstance(values, Mapping):
                pairs: Sequence[Tuple[Any, Any]] = list(values.items())
            else:
                seq = list(values)
                if labels is None:
                    labels = tuple(f"Category {i + 1}" for i in range(len(seq)))
                elif len(labels) != len(seq):
                    raise ValueError(f"{self.kind} chart values need a label per value")
                pairs = list(zip(labels, seq))
            norm = tuple((str(k), _number(v, f"values[{k!r}]")) for k, v in pairs)
        else:
            if not isinstance(values, Mapping):
                raise TypeError("line chart values must map series name -> sequence of numbers")
            series = []
            for name, seq in values.items():
                points = tuple(_number(v, f"values[{name!r}][{i}]") for i, v in enumerate(seq))
                if labels and len(points) != len(labels):
                    raise ValueError(
                        f"series {name!r} has {len(points)} points for {len(labels)} labels"
                    )
                series.append((str(name), points))
            norm = tuple(series)
        object.__setattr__(self, "values", norm)
        object.__setattr__(self, "labels", labels)

    # Convenience -----------------------------------------------------
    @property
    def resolved_style(self) -> ResolvedStyle:
        return self.style.resolve(self.kind)

    @property
    def is_empty(self) -> bool:
        """True when the spec has nothing drawable (empty values/labels or a zero pie total)."""
        if not self.values:
            return True
        if self.kind in ("bar", "line"):
            return not self.labels
        return sum(max(v, 0.0) for _k, v in self.values) == 0


# Shape descriptors ---------------------------------------------------


@dataclass(frozen=True)
class Bar:
    key: str
    label: str
    value: float
    x: float
    y: float
    width: float
    height: float
    fill: str
    opacity: float = 1.0
    value_label_opacity: float = 1.0


@dataclass(frozen=True)
class ArcSlice:
    key: str
    label: str
    value: float
    percentage: str
    cx: float
    cy: float
    inner_radius: float
    outer_radius: float
    angles: Tuple[float, float]
    fill: str
    stroke: str = "#FFFFFF"
    opacity: float = 1.0
    # Percentage text; None when the slice is too small to label
    label_text: Optional[str] = None
    label_position: Point = (0.0, 0.0)
    label_anchor: str = "middle"
    label_opacity: float = 1.0
    leader_line: Optional[Tuple[Point, Point]] = None

    @property
    def start_angle(self) -> float:
        return self.angles[0]

    @property
    def end_angle(self) -> float:
        return self.angles[1]


@dataclass(frozen=True)
class LineSegmentSet:
    key: str
    series: str
    points: Tuple[Point, ...]
    path: str
    area_path: str
    length: float
    stroke: str
    stroke_width: float = 3.0
    dash_offset: float = 0.0
    area_opacity: float = 1.0


@dataclass(frozen=True)
class PointMarker:
    key: str
    series: str
    label: str
    value: float
    index: int
    cx: float
    cy: float
    radius: float
    fill: str
    stroke: str = "#FFFFFF"
    opacity: float = 1.0


@dataclass(frozen=True)
class TextMark:
    key: str
    text: str
    x: float
    y: float
    font_size: int = 12
    weight: str = "normal"
    fill: str = "#1F2937"
    opacity: float = 1.0


ShapeDescriptor = Union[Bar, ArcSlice, LineSegmentSet, PointMarker, TextMark]


@dataclass(frozen=True)
class Transition:
    """One timed change of a single shape field from ``start`` to ``end``.

    ``target`` is the scene node key, ``field`` the descriptor attribute.
    Tuple values (e.g. arc ``angles``) interpolate jointly.
    """

    target: str
    field: str
    start: Any
    end: Any
    delay_ms: float = 0.0
    duration_ms: float = 0.0
    easing: str = "cubic-in-out"


@dataclass(frozen=True)
class TooltipState:
    visible: bool = False
    content: str = ""
    anchor: Point = (0.0, 0.0)
    opacity: float = 0.0
