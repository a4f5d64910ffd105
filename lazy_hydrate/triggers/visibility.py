"""
Visibility trigger gate.

One IntersectionObserver per gate watches every armed element. Elements are
registered under their manifest string; when an element comes within the
root margin of the viewport it is unobserved and its registrations resolve.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Optional

from lazy_hydrate.config.defaults import DEFAULT_MANIFEST_ATTRIBUTE, DEFAULT_ROOT_MARGIN
from lazy_hydrate.events.bus import EventType
from lazy_hydrate.models import Rect
from lazy_hydrate.triggers.base import TriggerGate

if TYPE_CHECKING:
    from lazy_hydrate.dom import DOMElement, Subscription
    from lazy_hydrate.dom.document import Document

logger = logging.getLogger(__name__)


@dataclass
class IntersectionEntry:
    """Intersection state of one observed element."""

    target: "DOMElement"
    is_intersecting: bool
    bounding_box: Optional[Rect] = None


IntersectionCallback = Callable[[list[IntersectionEntry]], None]


class IntersectionObserver:
    """Viewport intersection tracking for a Document.

    Entries are delivered when an element is first observed and whenever its
    intersecting state changes. The viewport is grown by root_margin on every
    side before testing, so elements qualify slightly before they scroll in.
    """

    def __init__(
        self,
        document: "Document",
        callback: IntersectionCallback,
        root_margin: float = DEFAULT_ROOT_MARGIN,
    ) -> None:
        self._document = document
        self._callback = callback
        self._root_margin = root_margin
        self._targets: dict["DOMElement", Optional[bool]] = {}
        self._subscriptions: list["Subscription"] = [
            document.add_document_listener(event_type, self._on_geometry_change)
            for event_type in (EventType.SCROLL, EventType.RESIZE, EventType.LAYOUT)
        ]

    @property
    def root_margin(self) -> float:
        return self._root_margin

    @property
    def observed(self) -> list["DOMElement"]:
        return list(self._targets)

    def is_observing(self, element: "DOMElement") -> bool:
        return element in self._targets

    def observe(self, element: "DOMElement") -> None:
        if element in self._targets:
            return
        self._targets[element] = None
        self.check([element])

    def unobserve(self, element: "DOMElement") -> None:
        self._targets.pop(element, None)

    def disconnect(self) -> None:
        """Stop observing everything and drop document listeners."""
        self._targets.clear()
        for subscription in self._subscriptions:
            subscription.detach()
        self._subscriptions.clear()

    def is_intersecting(self, element: "DOMElement") -> bool:
        box = self._document.bounding_box(element)
        if box is None:
            return False
        return box.intersects(self._document.viewport.expand(self._root_margin))

    def check(self, targets: Optional[Iterable["DOMElement"]] = None) -> list[IntersectionEntry]:
        """Recompute intersections and deliver entries whose state changed.

        Returns:
            The delivered entries.
        """
        candidates = list(self._targets) if targets is None else list(targets)
        entries: list[IntersectionEntry] = []
        for element in candidates:
            if element not in self._targets:
                continue
            intersecting = self.is_intersecting(element)
            if self._targets[element] is intersecting:
                continue
            self._targets[element] = intersecting
            entries.append(
                IntersectionEntry(
                    target=element,
                    is_intersecting=intersecting,
                    bounding_box=self._document.bounding_box(element),
                )
            )
        if entries:
            self._callback(entries)
        return entries

    def notify(self, entries: Iterable[IntersectionEntry]) -> None:
        """Deliver externally computed entries for observed elements."""
        delivered = [e for e in entries if e.target in self._targets]
        for entry in delivered:
            self._targets[entry.target] = entry.is_intersecting
        if delivered:
            self._callback(delivered)

    def _on_geometry_change(self, event: object) -> None:
        self.check()


@dataclass
class Registration:
    """A pending visibility wait for one element."""

    key: str
    element: "DOMElement"
    future: asyncio.Future


class RegistrationRegistry:
    """Pending visibility registrations grouped by manifest key.

    Several registrations may share a key; they are kept in arming order.
    """

    def __init__(self) -> None:
        self._entries: dict[str, list[Registration]] = {}

    def add(self, registration: Registration) -> None:
        self._entries.setdefault(registration.key, []).append(registration)

    def pending(self, key: str) -> list[Registration]:
        return list(self._entries.get(key, []))

    def take(self, key: str, element: "DOMElement") -> list[Registration]:
        """Remove and return the registrations of element under key."""
        registrations = self._entries.get(key, [])
        taken = [r for r in registrations if r.element == element]
        remaining = [r for r in registrations if r.element != element]
        if remaining:
            self._entries[key] = remaining
        else:
            self._entries.pop(key, None)
        return taken

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return sum(len(v) for v in self._entries.values())

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class VisibilityGate(TriggerGate):
    """Gate resolving when an element nears the viewport."""

    name = "visibility"

    def __init__(
        self,
        document: "Document",
        root_margin: float = DEFAULT_ROOT_MARGIN,
        manifest_attribute: str = DEFAULT_MANIFEST_ATTRIBUTE,
    ) -> None:
        self._manifest_attribute = manifest_attribute
        self._registry = RegistrationRegistry()
        self._observer = IntersectionObserver(document, self._on_intersection, root_margin)

    @property
    def observer(self) -> IntersectionObserver:
        return self._observer

    @property
    def registry(self) -> RegistrationRegistry:
        return self._registry

    def key_for(self, element: "DOMElement") -> str:
        return element.get(self._manifest_attribute) or ""

    def observe(self, element: "DOMElement") -> None:
        """Watch element without registering a waiter for it."""
        self._observer.observe(element)

    def arm(self, element: "DOMElement") -> Awaitable[None]:
        future = asyncio.get_running_loop().create_future()
        self._registry.add(Registration(self.key_for(element), element, future))
        self._observer.observe(element)
        return future

    def _on_intersection(self, entries: list[IntersectionEntry]) -> None:
        for entry in entries:
            if not entry.is_intersecting:
                continue
            element = entry.target
            self._observer.unobserve(element)
            key = self.key_for(element)
            registrations = self._registry.take(key, element)
            if not registrations:
                logger.debug(f"No visibility registration for {key!r}, dropping")
                continue
            logger.debug(f"Resolving visibility for {key!r}")
            for registration in registrations:
                if not registration.future.done():
                    registration.future.set_result(None)
