"""Reduced motion preference for chart animations.

Single source of truth for whether chart entrance and hover animations should
play. When reduced motion is on, every transition collapses to an instant
jump to its end value (durations and delays become 0), so a chart is fully
drawn on the first tick.

Patterns:
- Module level state guarded by a setter/getter; operations are idempotent.
- Environment bootstrap: ``DONATION_CHARTS_REDUCED_MOTION=1`` (or "true",
  "yes", "on", case-insensitive) enables reduced motion at import time.

Public API:
- set_reduced_motion(enabled: bool) -> None
- is_reduced_motion() -> bool
- adjust_duration(ms, minimum_ms=0) -> float
- temporarily_reduced_motion(force: bool = True) -> context manager
"""

from __future__ import annotations

import contextlib
import os
from typing import Iterator

from ..config.settings import REDUCED_MOTION_ENV

__all__ = [
    "set_reduced_motion",
    "is_reduced_motion",
    "adjust_duration",
    "temporarily_reduced_motion",
]

_reduced_motion_enabled: bool = False

_env_value = os.getenv(REDUCED_MOTION_ENV, "").strip().lower()
if _env_value in {"1", "true", "yes", "on"}:
    _reduced_motion_enabled = True


def set_reduced_motion(enabled: bool) -> None:
    global _reduced_motion_enabled
    _reduced_motion_enabled = bool(enabled)


def is_reduced_motion() -> bool:
    return _reduced_motion_enabled


def adjust_duration(ms: float, minimum_ms: float = 0) -> float:
    """Return ``ms`` (clamped to >= 0), or ``minimum_ms`` when motion is reduced."""
    if minimum_ms < 0:
        minimum_ms = 0
    if ms < 0:
        ms = 0
    return minimum_ms if _reduced_motion_enabled else ms


@contextlib.contextmanager
def temporarily_reduced_motion(force: bool = True) -> Iterator[None]:
    """Temporarily force reduced motion on (default) or off."""
    prev = _reduced_motion_enabled
    try:
        set_reduced_motion(True if force else False)
        yield
    finally:
        set_reduced_motion(prev)
