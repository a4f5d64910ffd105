"""
Async Event Bus for lazy-hydrate.

Provides async/await support for event handling with typed events,
priorities and event filtering. The same emitter class backs the
process-wide hydration bus and the per-document DOM event target.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

# Type aliases for clarity
EventHandler = Callable[..., Any]
AsyncEventHandler = Callable[..., Awaitable[Any]]
EventFilter = Callable[["Event"], bool]


class EventPriority(int, Enum):
    """Priority levels for event handlers."""

    LOW = 0
    NORMAL = 50
    HIGH = 100
    CRITICAL = 200


class EventType(str, Enum):
    """Standard event types used throughout the library."""

    # DOM events
    CLICK = "click"
    SCROLL = "scroll"
    RESIZE = "resize"
    LAYOUT = "layout"

    # Gate events
    GATE_ARMED = "gate.armed"
    GATE_FIRED = "gate.fired"

    # Hydration lifecycle
    HYDRATION_STARTED = "hydration.started"
    HYDRATION_COMPLETE = "hydration.complete"
    HYDRATION_SKIPPED = "hydration.skipped"
    HYDRATION_FAILED = "hydration.failed"

    # Resource events
    RESOURCE_FETCHED = "resource.fetched"
    RESOURCE_EXECUTED = "resource.executed"


def _event_key(event: Union[str, EventType]) -> str:
    return event.value if isinstance(event, EventType) else event


@dataclass
class Event:
    """Base event class with timestamp support and propagation control."""

    type: Union[EventType, str]
    data: Any = None
    timestamp: float = field(default_factory=time.time)
    source: Optional[str] = None
    target: Any = None
    propagation_stopped: bool = field(default=False, repr=False)

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = time.time()

    def stop_propagation(self) -> None:
        """Stop the event from propagating to other handlers."""
        self.propagation_stopped = True


@dataclass
class HandlerEntry:
    """Wrapper for event handlers with priority and filter support."""

    handler: EventHandler
    priority: EventPriority = EventPriority.NORMAL
    filter: Optional[EventFilter] = None

    def matches(self, event: Event) -> bool:
        """Check if this handler should handle the event."""
        if self.filter is None:
            return True
        try:
            return self.filter(event)
        except Exception:
            return False


class AsyncEventEmitter:
    """Async event emitter supporting both sync and async handlers.

    Features:
    - Priority-based handler ordering
    - Event filtering
    - Event propagation control
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[HandlerEntry]] = {}
        self._once_handlers: dict[str, list[HandlerEntry]] = {}
        self._error_handler: Optional[Callable[[Exception, str], None]] = None

    def on(
        self,
        event: Union[str, EventType],
        handler: EventHandler,
        *,
        priority: EventPriority = EventPriority.NORMAL,
        filter: Optional[EventFilter] = None,
    ) -> "AsyncEventEmitter":
        """Register an event handler.

        Args:
            event: Event type to listen for.
            handler: Handler function (sync or async).
            priority: Handler priority (higher runs first).
            filter: Optional filter function.

        Returns:
            Self for chaining.
        """
        key = _event_key(event)
        entries = self._handlers.setdefault(key, [])
        entries.append(HandlerEntry(handler=handler, priority=priority, filter=filter))
        # Sort by priority (descending)
        entries.sort(key=lambda e: e.priority, reverse=True)
        return self

    def once(
        self,
        event: Union[str, EventType],
        handler: EventHandler,
        *,
        priority: EventPriority = EventPriority.NORMAL,
        filter: Optional[EventFilter] = None,
    ) -> "AsyncEventEmitter":
        """Register a one-time event handler.

        Args:
            event: Event type to listen for.
            handler: Handler function (sync or async).
            priority: Handler priority.
            filter: Optional filter function.

        Returns:
            Self for chaining.
        """
        key = _event_key(event)
        entries = self._once_handlers.setdefault(key, [])
        entries.append(HandlerEntry(handler=handler, priority=priority, filter=filter))
        entries.sort(key=lambda e: e.priority, reverse=True)
        return self

    def off(
        self,
        event: Union[str, EventType],
        handler: Optional[EventHandler] = None,
    ) -> "AsyncEventEmitter":
        """Remove an event handler.

        Args:
            event: Event type.
            handler: Specific handler to remove, or None to remove all.

        Returns:
            Self for chaining.
        """
        key = _event_key(event)
        if handler is None:
            self._handlers.pop(key, None)
            self._once_handlers.pop(key, None)
        else:
            if key in self._handlers:
                self._handlers[key] = [
                    e for e in self._handlers[key] if e.handler is not handler
                ]
            if key in self._once_handlers:
                self._once_handlers[key] = [
                    e for e in self._once_handlers[key] if e.handler is not handler
                ]
        return self

    def set_error_handler(
        self,
        handler: Callable[[Exception, str], None],
    ) -> "AsyncEventEmitter":
        """Set a custom error handler for handler exceptions.

        Args:
            handler: Function receiving the exception and event key.

        Returns:
            Self for chaining.
        """
        self._error_handler = handler
        return self

    def _collect(self, key: str, event_obj: Optional[Event]) -> list[HandlerEntry]:
        """Snapshot the handlers for key, consuming matching once-handlers."""
        handlers = self._handlers.get(key, [])[:]
        once_handlers = self._once_handlers.get(key, [])
        if event_obj is None:
            fired = once_handlers
            remaining: list[HandlerEntry] = []
        else:
            fired = [e for e in once_handlers if e.matches(event_obj)]
            remaining = [e for e in once_handlers if not e.matches(event_obj)]
        if remaining:
            self._once_handlers[key] = remaining
        else:
            self._once_handlers.pop(key, None)
        return sorted(handlers + fired, key=lambda e: e.priority, reverse=True)

    def _report(self, exc: Exception, key: str) -> None:
        if self._error_handler:
            self._error_handler(exc, key)
        else:
            logger.error(f"Error in event handler for {key}: {exc}")

    async def emit(
        self,
        event: Union[str, EventType, Event],
        *args: Any,
        **kwargs: Any,
    ) -> bool:
        """Emit an event to all registered handlers (async).

        Args:
            event: Event type, string, or Event object.
            *args: Arguments to pass to handlers.
            **kwargs: Keyword arguments to pass to handlers.

        Returns:
            True if any handler was called.
        """
        event_obj: Optional[Event] = None
        if isinstance(event, Event):
            key = _event_key(event.type)
            event_obj = event
            args = (event_obj,) + args
        else:
            key = _event_key(event)

        handled = False
        for entry in self._collect(key, event_obj):
            # Check filter
            if event_obj is not None and not entry.matches(event_obj):
                continue

            # Check propagation
            if event_obj is not None and event_obj.propagation_stopped:
                break

            try:
                if asyncio.iscoroutinefunction(entry.handler):
                    await entry.handler(*args, **kwargs)
                else:
                    entry.handler(*args, **kwargs)
                handled = True
            except Exception as e:
                self._report(e, key)

        return handled

    def emit_sync(
        self,
        event: Union[str, EventType, Event],
        *args: Any,
        **kwargs: Any,
    ) -> bool:
        """Emit an event synchronously (only calls sync handlers).

        Args:
            event: Event type, string, or Event object.
            *args: Arguments to pass to handlers.
            **kwargs: Keyword arguments to pass to handlers.

        Returns:
            True if any handler was called.
        """
        event_obj: Optional[Event] = None
        if isinstance(event, Event):
            key = _event_key(event.type)
            event_obj = event
            args = (event_obj,) + args
        else:
            key = _event_key(event)

        handled = False
        for entry in self._collect(key, event_obj):
            if event_obj is not None and not entry.matches(event_obj):
                continue
            if event_obj is not None and event_obj.propagation_stopped:
                break
            if asyncio.iscoroutinefunction(entry.handler):
                continue
            try:
                entry.handler(*args, **kwargs)
                handled = True
            except Exception as e:
                self._report(e, key)

        return handled

    def listener_count(self, event: Union[str, EventType]) -> int:
        """Get the number of listeners for an event."""
        key = _event_key(event)
        count = len(self._handlers.get(key, []))
        count += len(self._once_handlers.get(key, []))
        return count

    def remove_all_listeners(
        self,
        event: Optional[Union[str, EventType]] = None,
    ) -> "AsyncEventEmitter":
        """Remove all listeners, optionally for a specific event."""
        if event is None:
            self._handlers.clear()
            self._once_handlers.clear()
        else:
            key = _event_key(event)
            self._handlers.pop(key, None)
            self._once_handlers.pop(key, None)
        return self

    async def wait_for(
        self,
        event: Union[str, EventType],
        *,
        timeout: Optional[float] = None,
        predicate: Optional[Callable[..., bool]] = None,
    ) -> Any:
        """Wait for an event to be emitted.

        Args:
            event: Event type to wait for.
            timeout: Maximum time to wait in seconds.
            predicate: Optional function to filter which events to accept.

        Returns:
            Event data when matched.
        """
        future: asyncio.Future = asyncio.get_running_loop().create_future()

        def handler(*args, **kwargs):
            if future.done():
                return
            if predicate is not None:
                try:
                    if not predicate(*args, **kwargs):
                        return
                except Exception:
                    return
            if args:
                future.set_result(args[0] if len(args) == 1 else args)
            else:
                future.set_result(kwargs if kwargs else None)

        self.on(event, handler)

        try:
            return await asyncio.wait_for(future, timeout=timeout)
        finally:
            self.off(event, handler)


class EventBus(AsyncEventEmitter):
    """Global async event bus for hydration lifecycle events.

    Singleton pattern lets the dispatcher, gates and loader publish
    progress without direct coupling to whoever is listening.
    """

    _instance: Optional["EventBus"] = None

    def __new__(cls) -> "EventBus":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._handlers = {}
            cls._instance._once_handlers = {}
            cls._instance._error_handler = None
        return cls._instance

    def __init__(self) -> None:
        # State lives on the singleton; __new__ already initialized it.
        pass

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (mainly for testing)."""
        if cls._instance is not None:
            cls._instance._handlers.clear()
            cls._instance._once_handlers.clear()
            cls._instance._error_handler = None
        cls._instance = None

    @classmethod
    def get_instance(cls) -> "EventBus":
        """Get the singleton instance."""
        return cls()


def get_event_bus() -> EventBus:
    """Get the global event bus instance."""
    return EventBus.get_instance()


def on_event(
    event: Union[str, EventType],
    *,
    priority: EventPriority = EventPriority.NORMAL,
    bus: Optional[AsyncEventEmitter] = None,
) -> Callable[[EventHandler], EventHandler]:
    """Decorator to register a function as an event handler.

    Args:
        event: Event type to listen for.
        priority: Handler priority.
        bus: Event emitter to register on (defaults to global bus).

    Example:
        @on_event(EventType.HYDRATION_COMPLETE)
        async def handle_hydrated(event):
            print(f"Hydrated: {event.data}")
    """
    def decorator(func: EventHandler) -> EventHandler:
        target = bus or get_event_bus()
        target.on(event, func, priority=priority)
        return func
    return decorator


__all__ = [
    # Types
    "EventType",
    "EventPriority",
    "Event",
    "HandlerEntry",
    # Type aliases
    "EventHandler",
    "AsyncEventHandler",
    "EventFilter",
    # Classes
    "AsyncEventEmitter",
    "EventBus",
    # Functions
    "get_event_bus",
    # Decorators
    "on_event",
]
