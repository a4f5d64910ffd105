"""
DOM module for lazy-hydrate.

This module provides:
- DOMElement: lxml element wrapper with identity-based equality
- DOMParser: HTML document and fragment parsing using lxml
- Document: host document with event targets, layout boxes and a viewport
"""

from typing import Any, Iterator, Optional, Union

from lxml.html import HtmlElement


class DOMElement:
    """Wrapper around lxml element for convenient DOM manipulation.

    Two wrappers compare equal when they wrap the same underlying node, so
    DOMElement can be used as a dictionary key for per-element state.
    """

    def __init__(self, element: HtmlElement) -> None:
        self._element = element

    @property
    def node(self) -> HtmlElement:
        """Get the underlying lxml element."""
        return self._element

    @property
    def tag(self) -> str:
        """Get the element's tag name."""
        return self._element.tag

    @property
    def text(self) -> Optional[str]:
        """Get the element's text content."""
        return self._element.text

    @property
    def attrib(self) -> dict[str, str]:
        """Get all attributes as a dictionary."""
        return dict(self._element.attrib)

    @property
    def classes(self) -> list[str]:
        """Get the class list in document order."""
        return (self._element.get("class") or "").split()

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get an attribute value."""
        return self._element.get(key, default)

    def set(self, key: str, value: str) -> None:
        """Set an attribute value."""
        self._element.set(key, value)

    def text_content(self) -> str:
        """Get all text content including descendants."""
        return "".join(self._element.itertext())

    def css(self, selector: str) -> list["DOMElement"]:
        """Query descendants using CSS selector."""
        from lxml.cssselect import CSSSelector

        sel = CSSSelector(selector)
        return [DOMElement(el) for el in sel(self._element)]

    def css_first(self, selector: str) -> Optional["DOMElement"]:
        """Get the first element matching CSS selector."""
        results = self.css(selector)
        return results[0] if results else None

    def xpath(self, path: str) -> list[Union["DOMElement", str, Any]]:
        """Query using XPath expression."""
        results = self._element.xpath(path)
        return [
            DOMElement(el) if isinstance(el, HtmlElement) else el for el in results
        ]

    def children(self) -> list["DOMElement"]:
        """Get all direct element children."""
        return [DOMElement(el) for el in self._element if isinstance(el, HtmlElement)]

    def parent(self) -> Optional["DOMElement"]:
        """Get the parent element."""
        parent = self._element.getparent()
        return DOMElement(parent) if parent is not None else None

    def ancestors(self) -> Iterator["DOMElement"]:
        """Iterate from this element up to the root, self included."""
        node = self._element
        while node is not None:
            yield DOMElement(node)
            node = node.getparent()

    def contains(self, other: "DOMElement") -> bool:
        """Check whether other is this element or one of its descendants."""
        return any(a == self for a in other.ancestors())

    def append(self, child: "DOMElement") -> None:
        """Append child as the last child of this element."""
        self._element.append(child.node)

    def to_string(self, encoding: str = "unicode") -> str:
        """Serialize element to HTML string."""
        from lxml.html import tostring

        return tostring(self._element, encoding=encoding)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DOMElement):
            return NotImplemented
        return self._element is other._element

    def __hash__(self) -> int:
        return hash(self._element)

    def __repr__(self) -> str:
        ident = self.get("id")
        if ident:
            return f"<DOMElement tag={self.tag!r} id={ident!r}>"
        return f"<DOMElement tag={self.tag!r}>"


class DOMParser:
    """HTML document parser.

    Uses lxml for fast and robust parsing of HTML documents.
    """

    @staticmethod
    def parse_html(html: str) -> DOMElement:
        """Parse an HTML string into a full document tree."""
        from lxml.html import document_fromstring

        return DOMElement(document_fromstring(html))

    @staticmethod
    def parse_html_fragment(html: str) -> list[Union[DOMElement, str]]:
        """Parse an HTML fragment into detached nodes.

        Leading text, if any, is returned as a plain string first.
        """
        from lxml.html import fragments_fromstring

        nodes = fragments_fromstring(html)
        return [n if isinstance(n, str) else DOMElement(n) for n in nodes]


from lazy_hydrate.dom.document import Document, Subscription  # noqa: E402


__all__ = [
    "DOMElement",
    "DOMParser",
    "Document",
    "Subscription",
]
