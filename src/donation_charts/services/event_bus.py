"""Chart lifecycle event bus.

Synchronous publish/subscribe used by ``RenderPipeline`` to announce lifecycle
changes (rendered, empty, disposed, tooltip shown/hidden) to whatever hosts
the chart: a dashboard view updating a caption, tests asserting teardown
order, diagnostics panels.

Goals:
 - No Qt dependency
 - Error isolation: a failing handler never breaks the publish cycle or the
   render that published it (failures are logged and kept in ``errors``)
 - One-shot (once) subscriptions and unsubscribe handles
 - Optional tracing ring buffer of recent events
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from time import perf_counter
from typing import Any, Deque, Dict, List, Protocol, Tuple

__all__ = [
    "ChartEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
    "TraceEntry",
]

log = logging.getLogger(__name__)


class ChartEvent(str, Enum):
    CHART_RENDERED = "chart_rendered"
    CHART_EMPTY = "chart_empty"
    CHART_DISPOSED = "chart_disposed"
    TOOLTIP_SHOWN = "tooltip_shown"
    TOOLTIP_HIDDEN = "tooltip_hidden"


@dataclass
class Event:
    name: str
    payload: Any
    timestamp: float


class EventHandler(Protocol):  # noqa: D401
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True

    def cancel(self) -> None:
        self.active = False


@dataclass(frozen=True)
class TraceEntry:
    name: str
    timestamp: float
    summary: str


def _key(name: str | ChartEvent) -> str:
    return name.value if isinstance(name, ChartEvent) else name


class EventBus:
    """Synchronous event dispatcher with optional tracing.

    Handlers run in subscription order on the publishing call stack. The
    subscriber list is snapshotted before dispatch so handlers may subscribe
    or unsubscribe while an event is being delivered.
    """

    DEFAULT_TRACE_CAPACITY = 50

    def __init__(self) -> None:
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, Exception]] = []
        self._tracing_enabled: bool = False
        self._traces: Deque[Tuple[str, float, str]] = deque(maxlen=self.DEFAULT_TRACE_CAPACITY)

    # Subscription management -----------------------------------------
    def subscribe(
        self, name: str | ChartEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_key(name), handler=handler, once=once)
        self._subs.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        bucket = self._subs.get(sub.event)
        if bucket and sub in bucket:
            bucket.remove(sub)
            if not bucket:
                self._subs.pop(sub.event, None)
        sub.active = False

    def clear(self) -> None:
        self._subs.clear()
        self._errors.clear()

    # Publishing --------------------------------------------------------
    def publish(self, name: str | ChartEvent, payload: Any = None) -> Event:
        key = _key(name)
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        if self._tracing_enabled:
            text = "-" if payload is None else str(payload)
            summary = text if len(text) <= 40 else text[:37] + "..."
            self._traces.append((evt.name, evt.timestamp, summary))
        finished: List[Subscription] = []
        for sub in list(self._subs.get(key, ())):
            if not sub.active:
                continue
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                log.warning("Handler for %s failed: %s", key, exc)
                self._errors.append((evt, exc))
            if sub.once:
                finished.append(sub)
        for sub in finished:
            self.unsubscribe(sub)
        return evt

    # Introspection -----------------------------------------------------
    def subscriber_count(self, name: str | ChartEvent) -> int:
        return len(self._subs.get(_key(name), ()))

    @property
    def errors(self) -> list[tuple[Event, Exception]]:
        return list(self._errors)

    # Tracing -----------------------------------------------------------
    def enable_tracing(self, enabled: bool = True, *, capacity: int | None = None) -> None:
        self._tracing_enabled = enabled
        if capacity is not None and capacity != self._traces.maxlen:
            self._traces = deque(self._traces, maxlen=capacity)

    def recent_trace_entries(self) -> list[TraceEntry]:
        return [TraceEntry(name=n, timestamp=ts, summary=s) for (n, ts, s) in self._traces]
