"""
Event system for lazy-hydrate.

This module provides event handling and pub/sub capabilities:
- AsyncEventEmitter: Async-compatible event emitter, also used as DOM event target
- EventBus: Global event bus for hydration lifecycle events
- Typed events for gates, hydration and resources

Example:
    ```python
    from lazy_hydrate.events import EventBus, EventType, on_event

    bus = EventBus.get_instance()

    @on_event(EventType.HYDRATION_COMPLETE)
    async def on_hydrated(event):
        print(f"Hydrated {event.data['manifest']}")

    bus.on(
        EventType.HYDRATION_FAILED,
        lambda e: print(f"Failed: {e.data['error']}"),
    )
    ```
"""

from .bus import (
    # Types and enums
    EventType,
    EventPriority,
    Event,
    HandlerEntry,
    # Type aliases
    EventHandler,
    AsyncEventHandler,
    EventFilter,
    # Classes
    AsyncEventEmitter,
    EventBus,
    # Functions
    get_event_bus,
    # Decorators
    on_event,
)

from .types import (
    DOMEvent,
    GateArmedEvent,
    GateFiredEvent,
    HydrationStartedEvent,
    HydrationCompleteEvent,
    HydrationSkippedEvent,
    HydrationFailedEvent,
    ResourceEvent,
)


__all__ = [
    # Core types
    "EventType",
    "EventPriority",
    "Event",
    "HandlerEntry",
    # Type aliases
    "EventHandler",
    "AsyncEventHandler",
    "EventFilter",
    # Emitters
    "AsyncEventEmitter",
    "EventBus",
    # Functions
    "get_event_bus",
    # Decorators
    "on_event",
    # DOM events
    "DOMEvent",
    # Gate events
    "GateArmedEvent",
    "GateFiredEvent",
    # Hydration events
    "HydrationStartedEvent",
    "HydrationCompleteEvent",
    "HydrationSkippedEvent",
    "HydrationFailedEvent",
    # Resource events
    "ResourceEvent",
]
