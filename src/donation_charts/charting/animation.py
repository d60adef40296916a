"""Animation scheduler.

Single-threaded, clock-driven interpolation of ``Transition`` values. The
scheduler never sleeps or spawns threads: a host (Qt timer, test, export) calls
``tick(now_ms)`` and every running transition applies its eased value for that
instant through the ``apply`` callback it was scheduled with. One-shot timers
(``call_later``) share the same clock, which is how the tooltip fade-out delay
is implemented.

Lifecycle rules:
 - ``schedule`` applies the start value immediately so shapes never flash
   their final state before the first tick.
 - A transition scheduled for a ``(target, field)`` slot that is still running
   replaces the running one (the replaced handle is cancelled).
 - ``cancel_all`` cancels every transition and timer. Cancelled handles never
   call their ``apply``/callback again, even if a host still holds them.
 - When reduced motion is on, delays and durations collapse to 0 and the end
   value is applied on schedule.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..design.motion import resolve_easing
from ..design.reduced_motion import adjust_duration
from .types import Transition

__all__ = [
    "ApplyFn",
    "ManualClock",
    "TransitionHandle",
    "TimerHandle",
    "AnimationScheduler",
    "interpolate",
]

log = logging.getLogger(__name__)

ApplyFn = Callable[[Transition, Any], None]


def _default_clock() -> float:
    return perf_counter() * 1000.0


class ManualClock:
    """Deterministic millisecond clock for headless hosts and tests."""

    def __init__(self, start_ms: float = 0.0) -> None:
        self._now = float(start_ms)

    def __call__(self) -> float:
        return self._now

    def advance(self, ms: float) -> float:
        if ms < 0:
            raise ValueError("clock cannot move backwards")
        self._now += ms
        return self._now

    def set(self, now_ms: float) -> None:
        if now_ms < self._now:
            raise ValueError("clock cannot move backwards")
        self._now = float(now_ms)


def interpolate(start: Any, end: Any, t: float) -> Any:
    """Interpolate numbers, or tuples of numbers element-wise with the same ``t``."""
    if isinstance(start, tuple) and isinstance(end, tuple) and len(start) == len(end):
        return tuple(interpolate(a, b, t) for a, b in zip(start, end))
    if isinstance(start, (int, float)) and isinstance(end, (int, float)):
        if t >= 1.0:
            return end
        return start + (end - start) * t
    # non-numeric values switch at the end
    return end if t >= 1.0 else start


@dataclass(eq=False)
class TransitionHandle:
    transition: Transition
    apply: ApplyFn
    scheduled_at: float
    delay_ms: float
    duration_ms: float
    cancelled: bool = False
    finished: bool = False

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.finished)

    def cancel(self) -> None:
        self.cancelled = True

    def step(self, now_ms: float) -> bool:
        """Apply the value for ``now_ms``; return True once finished."""
        if not self.active:
            return True
        elapsed = now_ms - self.scheduled_at - self.delay_ms
        if elapsed < 0:
            return False
        if self.duration_ms <= 0:
            progress = 1.0
        else:
            progress = min(elapsed / self.duration_ms, 1.0)
        eased = 1.0 if progress >= 1.0 else resolve_easing(self.transition.easing)(progress)
        tr = self.transition
        self.apply(tr, interpolate(tr.start, tr.end, eased))
        if progress >= 1.0:
            self.finished = True
        return self.finished


@dataclass(eq=False)
class TimerHandle:
    due_at: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if not self.pending:
            return
        self.fired = True
        self.callback()


class AnimationScheduler:
    """Owns every in-flight transition and timer of one render pipeline."""

    def __init__(self, clock: Optional[Callable[[], float]] = None) -> None:
        self._clock = clock or _default_clock
        self._transitions: List[TransitionHandle] = []
        self._slots: Dict[Tuple[str, str], TransitionHandle] = {}
        self._timers: List[TimerHandle] = []
        self.generation = 0

    def now(self) -> float:
        return self._clock()

    # Scheduling ------------------------------------------------------
    def schedule(self, transition: Transition, apply: ApplyFn) -> TransitionHandle:
        slot = (transition.target, transition.field)
        previous = self._slots.get(slot)
        if previous is not None and previous.active:
            previous.cancel()
        handle = TransitionHandle(
            transition=transition,
            apply=apply,
            scheduled_at=self.now(),
            delay_ms=adjust_duration(transition.delay_ms),
            duration_ms=adjust_duration(transition.duration_ms),
        )
        self._slots[slot] = handle
        if handle.delay_ms <= 0 and handle.duration_ms <= 0:
            apply(transition, transition.end)
            handle.finished = True
            return handle
        apply(transition, transition.start)
        self._transitions.append(handle)
        return handle

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(due_at=self.now() + max(delay_ms, 0.0), callback=callback)
        self._timers.append(handle)
        return handle

    # Driving ---------------------------------------------------------
    def tick(self, now_ms: Optional[float] = None) -> bool:
        """Advance everything to ``now_ms`` (default: clock). Return True while work remains."""
        now = self.now() if now_ms is None else now_ms
        generation = self.generation
        for handle in list(self._transitions):
            if generation != self.generation:
                # an apply callback cancelled this scheduler mid-tick
                break
            handle.step(now)
        self._transitions = [h for h in self._transitions if h.active]
        due = sorted((t for t in self._timers if t.pending and t.due_at <= now), key=lambda t: t.due_at)
        for timer in due:
            if generation != self.generation:
                break
            timer.fire()
        self._timers = [t for t in self._timers if t.pending]
        return self.busy

    def cancel_all(self) -> int:
        """Cancel every transition and timer; return how many were still pending."""
        pending = [h for h in self._transitions if h.active] + [t for t in self._timers if t.pending]
        for item in pending:
            item.cancel()
        self._transitions.clear()
        self._timers.clear()
        self._slots.clear()
        self.generation += 1
        if pending:
            log.debug("cancelled %d pending transitions/timers", len(pending))
        return len(pending)

    # Introspection ---------------------------------------------------
    @property
    def busy(self) -> bool:
        return any(h.active for h in self._transitions) or any(t.pending for t in self._timers)

    @property
    def active_transitions(self) -> List[TransitionHandle]:
        return [h for h in self._transitions if h.active]

    @property
    def pending_timers(self) -> List[TimerHandle]:
        return [t for t in self._timers if t.pending]
