"""Service layer exports (event bus)."""

from .event_bus import ChartEvent, Event, EventBus, Subscription  # noqa: F401
