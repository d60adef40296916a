"""Easing curves for chart transitions.

Easings are referenced by name on a ``Transition`` (``"linear"``,
``"cubic-in-out"``, ``"cubic-out"``) or given as a CSS-like
``cubic-bezier(x1, y1, x2, y2)`` string. ``resolve_easing`` turns either form
into a plain ``float -> float`` function mapping progress ``t`` in [0, 1] to
eased progress. No Qt imports; easing is evaluated by the scheduler itself.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Dict, Tuple

__all__ = [
    "CubicBezier",
    "EasingFn",
    "DEFAULT_EASING",
    "parse_cubic_bezier",
    "cubic_bezier_easing",
    "resolve_easing",
]

CubicBezier = Tuple[float, float, float, float]
EasingFn = Callable[[float], float]

DEFAULT_EASING = "cubic-in-out"


def _linear(t: float) -> float:
    return t


def _cubic_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


def _cubic_out(t: float) -> float:
    t -= 1
    return t * t * t + 1


_NAMED: Dict[str, EasingFn] = {
    "linear": _linear,
    "cubic-in-out": _cubic_in_out,
    "cubic-out": _cubic_out,
}


def parse_cubic_bezier(spec: str) -> CubicBezier:
    """Parse a CSS-like cubic-bezier string into a numeric tuple.

    Expected format: 'cubic-bezier(x1, y1, x2, y2)'. Whitespace tolerated.
    """
    s = spec.strip().lower()
    if not s.startswith("cubic-bezier(") or not s.endswith(")"):
        raise ValueError(f"Invalid cubic-bezier format: {spec}")
    inner = s[len("cubic-bezier(") : -1]
    parts = [p.strip() for p in inner.split(",")]
    if len(parts) != 4:
        raise ValueError(f"cubic-bezier requires 4 components, got {len(parts)}: {spec}")
    try:
        x1, y1, x2, y2 = (float(p) for p in parts)
    except ValueError as e:
        raise ValueError(f"Non-numeric cubic-bezier value in {spec}") from e
    if not (0.0 <= x1 <= 1.0 and 0.0 <= x2 <= 1.0):
        raise ValueError(f"cubic-bezier x components must be within [0, 1]: {spec}")
    return x1, y1, x2, y2


def cubic_bezier_easing(x1: float, y1: float, x2: float, y2: float) -> EasingFn:
    """Build an easing function for the curve through (0,0), (x1,y1), (x2,y2), (1,1).

    Solves x(s) = t for the curve parameter with Newton iterations, falling back
    to bisection when the derivative flattens out.
    """

    def _coord(s: float, a: float, b: float) -> float:
        # B(s) with P0=0, P3=1
        return 3 * a * s * (1 - s) ** 2 + 3 * b * s * s * (1 - s) + s**3

    def _slope(s: float, a: float, b: float) -> float:
        return 3 * a * (1 - s) ** 2 + 6 * (b - a) * s * (1 - s) + 3 * (1 - b) * s * s

    def _ease(t: float) -> float:
        if t <= 0.0:
            return 0.0
        if t >= 1.0:
            return 1.0
        s = t
        for _ in range(8):
            err = _coord(s, x1, x2) - t
            if abs(err) < 1e-7:
                return _coord(s, y1, y2)
            d = _slope(s, x1, x2)
            if abs(d) < 1e-6:
                break
            s -= err / d
        lo, hi = 0.0, 1.0
        s = t
        for _ in range(50):
            x = _coord(s, x1, x2)
            if abs(x - t) < 1e-7:
                break
            if x < t:
                lo = s
            else:
                hi = s
            s = (lo + hi) / 2
        return _coord(s, y1, y2)

    return _ease


@lru_cache(maxsize=64)
def resolve_easing(name: str) -> EasingFn:
    """Return the easing function for a named easing or cubic-bezier string."""
    fn = _NAMED.get(name.strip().lower())
    if fn is not None:
        return fn
    if name.strip().lower().startswith("cubic-bezier("):
        return cubic_bezier_easing(*parse_cubic_bezier(name))
    raise KeyError(f"Unknown easing: {name}")
