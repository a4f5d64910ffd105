"""
Host document for lazy-hydrate.

Wraps a parsed lxml document and adds the pieces of a live page the
hydration core depends on: element event listeners, layout boxes and a
scrollable viewport.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Union

from lxml.html import HtmlElement, document_fromstring, tostring

from lazy_hydrate.dom import DOMElement, DOMParser
from lazy_hydrate.events.bus import AsyncEventEmitter, Event, EventType
from lazy_hydrate.events.types import DOMEvent
from lazy_hydrate.models import Rect

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT = Rect(0, 0, 1920, 1080)


class Subscription:
    """Handle for an element event listener.

    detach() removes the listener; calling it again is a no-op.
    """

    def __init__(
        self,
        emitter: AsyncEventEmitter,
        event_type: str,
        handler: Callable[..., Any],
    ) -> None:
        self._emitter = emitter
        self._event_type = event_type
        self._handler = handler
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def detach(self) -> None:
        if not self._active:
            return
        self._active = False
        self._emitter.off(self._event_type, self._handler)


class Document:
    """In-memory HTML document acting as the hydration host.

    Example:
        doc = Document.from_html('<div class="click" data-srcset="a.js"></div>')
        el = doc.query_all(".click")[0]
        sub = doc.add_event_listener(el, "click", handler)
        await doc.dispatch_event(el, "click")
    """

    def __init__(
        self,
        root: HtmlElement,
        *,
        url: Optional[str] = None,
        viewport: Optional[Rect] = None,
    ) -> None:
        self._root = root
        self._url = url
        self._viewport = viewport or DEFAULT_VIEWPORT
        self._boxes: dict[DOMElement, Rect] = {}
        self._events = AsyncEventEmitter()

    @classmethod
    def from_html(
        cls,
        html: str,
        *,
        url: Optional[str] = None,
        viewport: Optional[Rect] = None,
    ) -> "Document":
        """Parse a full HTML document; missing head/body are synthesized."""
        return cls(document_fromstring(html), url=url, viewport=viewport)

    @property
    def url(self) -> Optional[str]:
        return self._url

    @property
    def root(self) -> DOMElement:
        return DOMElement(self._root)

    @property
    def head(self) -> DOMElement:
        head = self._root.find("head")
        if head is None:
            head = self._root.makeelement("head", {})
            self._root.insert(0, head)
        return DOMElement(head)

    @property
    def body(self) -> DOMElement:
        body = self._root.find("body")
        if body is None:
            body = self._root.makeelement("body", {})
            self._root.append(body)
        return DOMElement(body)

    @property
    def events(self) -> AsyncEventEmitter:
        """Event target carrying every DOM event of this document."""
        return self._events

    # Tree

    def query_all(self, selector: str) -> list[DOMElement]:
        """Query the whole document with a CSS selector."""
        return self.root.css(selector)

    def create_element(
        self,
        tag: str,
        attrs: Optional[dict[str, str]] = None,
    ) -> DOMElement:
        """Create a detached element owned by this document."""
        return DOMElement(self._root.makeelement(tag, attrs or {}))

    def append_child(self, parent: DOMElement, child: DOMElement) -> DOMElement:
        parent.append(child)
        return child

    def append_html(self, parent: DOMElement, html: str) -> list[DOMElement]:
        """Parse html and append the resulting nodes into parent.

        Returns:
            The appended elements, in order.
        """
        appended: list[DOMElement] = []
        for node in DOMParser.parse_html_fragment(html):
            if isinstance(node, str):
                self._append_text(parent, node)
            else:
                parent.append(node)
                appended.append(node)
        return appended

    def _append_text(self, parent: DOMElement, text: str) -> None:
        children = list(parent.node)
        if children:
            last = children[-1]
            last.tail = (last.tail or "") + text
        else:
            parent.node.text = (parent.node.text or "") + text

    def to_html(self) -> str:
        return tostring(self._root, encoding="unicode")

    # Events

    def add_event_listener(
        self,
        element: DOMElement,
        event_type: Union[str, EventType],
        handler: Callable[..., Any],
    ) -> Subscription:
        """Listen for event_type dispatched on element or its descendants."""
        key = event_type.value if isinstance(event_type, EventType) else event_type
        self._events.on(
            key,
            handler,
            filter=lambda e: e.target is not None and element.contains(e.target),
        )
        return Subscription(self._events, key, handler)

    def add_document_listener(
        self,
        event_type: Union[str, EventType],
        handler: Callable[..., Any],
    ) -> Subscription:
        """Listen for document-wide events such as scroll and layout."""
        key = event_type.value if isinstance(event_type, EventType) else event_type
        self._events.on(key, handler)
        return Subscription(self._events, key, handler)

    async def dispatch_event(
        self,
        element: DOMElement,
        event_type: Union[str, EventType],
        data: Any = None,
    ) -> bool:
        """Dispatch an event at element; it bubbles to ancestor listeners.

        Returns:
            True if any listener handled the event.
        """
        logger.debug(f"Dispatching {event_type} on {element!r}")
        return await self._events.emit(DOMEvent(type=event_type, data=data, target=element))

    # Layout

    @property
    def viewport(self) -> Rect:
        return self._viewport

    def set_bounding_box(self, element: DOMElement, box: Rect) -> None:
        """Record element's layout box in document coordinates."""
        self._boxes[element] = box
        self._events.emit_sync(Event(type=EventType.LAYOUT, target=element))

    def bounding_box(self, element: DOMElement) -> Optional[Rect]:
        return self._boxes.get(element)

    def scroll_to(self, x: float = 0.0, y: float = 0.0) -> None:
        """Move the viewport origin to (x, y)."""
        self._viewport = Rect(x, y, self._viewport.width, self._viewport.height)
        self._events.emit_sync(Event(type=EventType.SCROLL, data={"x": x, "y": y}))

    def resize(self, width: float, height: float) -> None:
        """Change the viewport size, keeping its origin."""
        self._viewport = Rect(self._viewport.x, self._viewport.y, width, height)
        self._events.emit_sync(
            Event(type=EventType.RESIZE, data={"width": width, "height": height})
        )

    def __repr__(self) -> str:
        return f"<Document url={self._url!r}>"
