"""
Core data models for lazy-hydrate.

This module defines the structures passed between the classifier, the
component loader, the trigger gates and the dispatcher.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Optional

from lazy_hydrate.errors import UnsupportedResourceKind

if TYPE_CHECKING:
    from lazy_hydrate.dom import DOMElement
    from lazy_hydrate.dom.document import Document
    from lazy_hydrate.session import Session


class ResourceKind(str, Enum):
    """Kinds of deferred resources.

    - SCRIPT: fetched first to prime the cache, then inserted as a module script
    - STYLE: inserted as a stylesheet link, fire-and-forget
    - FRAGMENT: fetched as HTML and appended into the target element
    - UNKNOWN: suffix was readable but maps to no kind
    """

    SCRIPT = "script"
    STYLE = "style"
    FRAGMENT = "fragment"
    UNKNOWN = "unknown"


class HydrationState(str, Enum):
    """Lifecycle of a hydratable element."""

    IDLE = "idle"
    ARMED = "armed"
    ALL_FIRED = "all_fired"
    LOADING = "loading"
    DONE = "done"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (HydrationState.DONE, HydrationState.FAILED, HydrationState.SKIPPED)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned box in CSS pixels."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def expand(self, margin: float) -> "Rect":
        """Grow the box by margin on every side."""
        return Rect(
            self.x - margin,
            self.y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )

    def intersects(self, other: "Rect") -> bool:
        """Check overlap; edge-adjacent boxes count as intersecting."""
        return (
            self.x <= other.right
            and other.x <= self.right
            and self.y <= other.bottom
            and other.y <= self.bottom
        )


@dataclass
class LoadContext:
    """Everything an operation needs to act on the host document."""

    document: "Document"
    element: "DOMElement"
    session: Optional["Session"] = None
    base_url: Optional[str] = None


OperationFunc = Callable[[str, LoadContext], Awaitable[Any]]


class Operation(ABC):
    """A fetch or execute step of a resource.

    Either a BoundOperation (invokable) or an UnsupportedOperation; check
    is_supported before relying on invocation succeeding.
    """

    is_supported: bool = False

    @abstractmethod
    async def invoke(self, context: LoadContext) -> Any:
        """Run the step for context.element."""


class BoundOperation(Operation):
    """Operation bound to a resource URL."""

    is_supported = True

    def __init__(self, func: OperationFunc, url: str) -> None:
        self.func = func
        self.url = url

    async def invoke(self, context: LoadContext) -> Any:
        return await self.func(self.url, context)

    def __repr__(self) -> str:
        return f"<BoundOperation {self.func.__name__} {self.url!r}>"


class UnsupportedOperation(Operation):
    """Placeholder for a resource kind without fetch/execute behavior."""

    def __init__(self, url: str, suffix: str) -> None:
        self.url = url
        self.suffix = suffix

    async def invoke(self, context: LoadContext) -> Any:
        raise UnsupportedResourceKind(self.url, self.suffix)

    def __repr__(self) -> str:
        return f"<UnsupportedOperation {self.suffix!r} {self.url!r}>"


@dataclass
class ResourceDescriptor:
    """Classified, operation-bound representation of one manifest URL."""

    kind: ResourceKind
    url: str
    fetch: Operation
    execute: Optional[Operation] = None


@dataclass
class Component:
    """One hydration unit: a target element and its ordered descriptors."""

    context: LoadContext
    descriptors: list[ResourceDescriptor] = field(default_factory=list)

    @property
    def element(self) -> "DOMElement":
        return self.context.element

    def of_kind(self, kind: ResourceKind) -> list[ResourceDescriptor]:
        """Descriptors of a kind, in manifest order."""
        return [d for d in self.descriptors if d.kind == kind]


@dataclass
class HydrationRecord:
    """Per-element bookkeeping kept by the dispatcher."""

    element: "DOMElement"
    markers: list[str] = field(default_factory=list)
    state: HydrationState = HydrationState.IDLE
    error: Optional[BaseException] = None
    armed_at: Optional[float] = None
    finished_at: Optional[float] = None

    def transition(self, state: HydrationState) -> None:
        if self.state.is_terminal:
            raise RuntimeError(
                f"Cannot leave terminal state {self.state.value} for {state.value}"
            )
        self.state = state
        if state == HydrationState.ARMED:
            self.armed_at = time.time()
        elif state.is_terminal:
            self.finished_at = time.time()

    @property
    def elapsed_ms(self) -> Optional[float]:
        if self.armed_at is None or self.finished_at is None:
            return None
        return (self.finished_at - self.armed_at) * 1000


__all__ = [
    "ResourceKind",
    "HydrationState",
    "Rect",
    "LoadContext",
    "Operation",
    "OperationFunc",
    "BoundOperation",
    "UnsupportedOperation",
    "ResourceDescriptor",
    "Component",
    "HydrationRecord",
]
