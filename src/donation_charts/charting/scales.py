"""Scales: map data domains to pixel ranges.

Three kinds are provided:

 - ``LinearScale``: continuous numeric domain -> continuous pixel range, with
   optional "nice" expansion of the domain to 1/2/5 x 10^n tick boundaries.
 - ``BandScale``: ordered categories -> equal-width padded slots (bars).
 - ``PointScale``: ordered categories -> evenly spaced coordinates (line x).

Scales never raise on degenerate input. An empty numeric domain or empty
category list produces a constant mapping at the range midpoint; a
single-value numeric domain is widened by one unit. Deciding whether a chart
has anything to draw is the pipeline's job, not the scale's.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from ..config.settings import NICE_TICK_COUNT

__all__ = [
    "LinearScale",
    "BandScale",
    "BandSlot",
    "PointScale",
    "Scale",
    "make_linear_scale",
    "make_band_scale",
    "make_point_scale",
    "linear_scale_for_values",
    "nice_domain",
    "tick_values",
]

_E10 = math.sqrt(50)
_E5 = math.sqrt(10)
_E2 = math.sqrt(2)


def _tick_increment(start: float, stop: float, count: int) -> float:
    """Return the tick step for ``[start, stop]``.

    Positive results are the step itself; negative results ``-n`` encode a
    fractional step of ``1/n`` so decimal steps stay exact.
    """
    step = (stop - start) / max(0, count)
    if step <= 0 or not math.isfinite(step):
        return 0.0
    power = math.floor(math.log10(step))
    error = step / 10**power
    if error >= _E10:
        factor = 10
    elif error >= _E5:
        factor = 5
    elif error >= _E2:
        factor = 2
    else:
        factor = 1
    if power >= 0:
        return factor * 10**power
    return -(10 ** -power) / factor


def nice_domain(start: float, stop: float, count: int = NICE_TICK_COUNT) -> Tuple[float, float]:
    """Expand ``[start, stop]`` outward to round tick boundaries."""
    previous = None
    for _ in range(10):
        step = _tick_increment(start, stop, count)
        if step == previous or step == 0:
            break
        if step > 0:
            start = math.floor(start / step) * step
            stop = math.ceil(stop / step) * step
        else:
            start = math.ceil(start * step) / step
            stop = math.floor(stop * step) / step
        previous = step
    return start, stop


def tick_values(start: float, stop: float, count: int = NICE_TICK_COUNT) -> List[float]:
    """Return round tick values within ``[start, stop]`` (inclusive)."""
    if stop < start:
        start, stop = stop, start
    if start == stop:
        return [start]
    step = _tick_increment(start, stop, count)
    if step == 0:
        return []
    if step > 0:
        lo, hi = math.ceil(start / step), math.floor(stop / step)
        return [i * step for i in range(lo, hi + 1)]
    inv = -step
    lo, hi = math.ceil(start * inv), math.floor(stop * inv)
    return [i / inv for i in range(lo, hi + 1)]


@dataclass(frozen=True)
class LinearScale:
    domain: Tuple[float, float]
    range: Tuple[float, float]
    degenerate: bool = False

    def __call__(self, value: float) -> float:
        r0, r1 = self.range
        if self.degenerate:
            return (r0 + r1) / 2
        d0, d1 = self.domain
        t = (value - d0) / (d1 - d0)
        # endpoint-exact form of r0 + t * (r1 - r0)
        return r0 * (1 - t) + r1 * t

    def ticks(self, count: int = NICE_TICK_COUNT) -> List[float]:
        if self.degenerate:
            return []
        return tick_values(self.domain[0], self.domain[1], count)


@dataclass(frozen=True)
class BandSlot:
    start: float
    width: float

    @property
    def center(self) -> float:
        return self.start + self.width / 2


@dataclass(frozen=True)
class BandScale:
    categories: Tuple[str, ...]
    range: Tuple[float, float]
    padding: float

    @property
    def step(self) -> float:
        if not self.categories:
            return 0.0
        return (self.range[1] - self.range[0]) / len(self.categories)

    @property
    def bandwidth(self) -> float:
        return self.step * (1 - self.padding)

    def _index(self) -> Dict[str, int]:
        # first occurrence wins for duplicated labels
        out: Dict[str, int] = {}
        for i, c in enumerate(self.categories):
            out.setdefault(c, i)
        return out

    def slot_at(self, index: int) -> BandSlot:
        step = self.step
        inset = step * self.padding / 2
        return BandSlot(start=self.range[0] + index * step + inset, width=self.bandwidth)

    def __call__(self, category: str) -> BandSlot:
        idx = self._index().get(category)
        if idx is None:
            mid = (self.range[0] + self.range[1]) / 2
            return BandSlot(start=mid, width=0.0)
        return self.slot_at(idx)

    def center(self, category: str) -> float:
        return self(category).center


@dataclass(frozen=True)
class PointScale:
    categories: Tuple[str, ...]
    range: Tuple[float, float]

    def at(self, index: int) -> float:
        r0, r1 = self.range
        n = len(self.categories)
        if n <= 1:
            return (r0 + r1) / 2
        return r0 + index * (r1 - r0) / (n - 1)

    def __call__(self, category: str) -> float:
        try:
            return self.at(self.categories.index(category))
        except ValueError:
            return (self.range[0] + self.range[1]) / 2


Scale = Union[LinearScale, BandScale, PointScale]


def make_linear_scale(
    domain_min: float,
    domain_max: float,
    range_low: float,
    range_high: float,
    nice_ticks: bool = False,
) -> LinearScale:
    if domain_min > domain_max:
        domain_min, domain_max = domain_max, domain_min
    if domain_max == domain_min:
        domain_max = domain_min + 1
    if nice_ticks:
        domain_min, domain_max = nice_domain(domain_min, domain_max)
    return LinearScale(domain=(float(domain_min), float(domain_max)), range=(range_low, range_high))


def linear_scale_for_values(
    values: Iterable[float],
    range_low: float,
    range_high: float,
    *,
    nice_ticks: bool = True,
    zero_based: bool = True,
) -> LinearScale:
    """Scale covering ``values`` (from 0 when ``zero_based``); empty input -> midpoint scale."""
    vals = list(values)
    if not vals:
        return LinearScale(domain=(0.0, 1.0), range=(range_low, range_high), degenerate=True)
    lo = min(vals)
    hi = max(vals)
    if zero_based:
        lo = min(lo, 0.0)
        hi = max(hi, 0.0) or 1.0
    return make_linear_scale(lo, hi, range_low, range_high, nice_ticks)


def make_band_scale(
    categories: Sequence[str], range_low: float, range_high: float, padding_fraction: float
) -> BandScale:
    padding = min(max(float(padding_fraction), 0.0), 1.0)
    return BandScale(categories=tuple(categories), range=(range_low, range_high), padding=padding)


def make_point_scale(categories: Sequence[str], range_low: float, range_high: float) -> PointScale:
    return PointScale(categories=tuple(categories), range=(range_low, range_high))
