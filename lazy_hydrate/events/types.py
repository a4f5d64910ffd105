"""
Typed events for lazy-hydrate.

Provides strongly-typed event classes for gate and hydration progress.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from .bus import Event, EventType


# DOM Events

@dataclass
class DOMEvent(Event):
    """Event dispatched on a document element (click, scroll, ...)."""

    type: Any = field(default=EventType.CLICK)


# Gate Events

@dataclass
class GateArmedEvent(Event):
    """Event emitted when a trigger gate starts waiting on an element."""

    type: EventType = field(default=EventType.GATE_ARMED)
    gate: str = ""

    def __post_init__(self):
        super().__post_init__()
        if self.data is None:
            self.data = {"gate": self.gate}


@dataclass
class GateFiredEvent(Event):
    """Event emitted when a trigger gate resolves for an element."""

    type: EventType = field(default=EventType.GATE_FIRED)
    gate: str = ""

    def __post_init__(self):
        super().__post_init__()
        if self.data is None:
            self.data = {"gate": self.gate}


# Hydration Events

@dataclass
class HydrationStartedEvent(Event):
    """Event emitted when every gate fired and loading begins."""

    type: EventType = field(default=EventType.HYDRATION_STARTED)
    manifest: str = ""
    urls: List[str] = field(default_factory=list)

    def __post_init__(self):
        super().__post_init__()
        if self.data is None:
            self.data = {"manifest": self.manifest, "urls": self.urls}


@dataclass
class HydrationCompleteEvent(Event):
    """Event emitted when a component finished loading."""

    type: EventType = field(default=EventType.HYDRATION_COMPLETE)
    manifest: str = ""
    load_time_ms: float = 0.0

    def __post_init__(self):
        super().__post_init__()
        if self.data is None:
            self.data = {"manifest": self.manifest, "load_time_ms": self.load_time_ms}


@dataclass
class HydrationSkippedEvent(Event):
    """Event emitted when a triggered element carries no manifest."""

    type: EventType = field(default=EventType.HYDRATION_SKIPPED)


@dataclass
class HydrationFailedEvent(Event):
    """Event emitted when a component failed to load."""

    type: EventType = field(default=EventType.HYDRATION_FAILED)
    manifest: str = ""
    error: Optional[BaseException] = None

    def __post_init__(self):
        super().__post_init__()
        if self.data is None:
            self.data = {"manifest": self.manifest, "error": str(self.error)}


# Resource Events

@dataclass
class ResourceEvent(Event):
    """Event emitted after a resource was fetched or executed."""

    type: EventType = field(default=EventType.RESOURCE_FETCHED)
    url: str = ""
    kind: str = ""

    def __post_init__(self):
        super().__post_init__()
        if self.data is None:
            self.data = {"url": self.url, "kind": self.kind}
