"""
Resource classification for lazy-hydrate.

Maps manifest URLs to resource kinds through an explicit suffix table and
binds the matching fetch/execute operations.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional
from urllib.parse import urljoin, urlsplit

from lazy_hydrate.config.defaults import MANIFEST_SEPARATOR
from lazy_hydrate.errors import MalformedResourceUrl
from lazy_hydrate.loader.operations import (
    execute_script,
    fetch_script,
    insert_stylesheet,
    load_fragment,
)
from lazy_hydrate.models import (
    BoundOperation,
    LoadContext,
    OperationFunc,
    ResourceDescriptor,
    ResourceKind,
    UnsupportedOperation,
)

logger = logging.getLogger(__name__)

SUFFIX_KINDS: dict[str, ResourceKind] = {
    ".js": ResourceKind.SCRIPT,
    ".css": ResourceKind.STYLE,
    ".html": ResourceKind.FRAGMENT,
}

# kind -> (fetch, execute)
KIND_OPERATIONS: dict[ResourceKind, tuple[OperationFunc, Optional[OperationFunc]]] = {
    ResourceKind.SCRIPT: (fetch_script, execute_script),
    ResourceKind.STYLE: (insert_stylesheet, None),
    ResourceKind.FRAGMENT: (load_fragment, None),
}


def parse_manifest(value: str, separator: str = MANIFEST_SEPARATOR) -> list[str]:
    """Split a manifest attribute into its ordered URLs.

    Whitespace around entries is stripped and empty entries are dropped.
    """
    return [item.strip() for item in value.split(separator) if item.strip()]


def resource_suffix(url: str) -> str:
    """Return the lowercased filename extension of url's path.

    Query string and fragment are ignored.

    Raises:
        MalformedResourceUrl: If the last path segment has no alphanumeric
            extension.
    """
    path = urlsplit(url).path
    filename = path.rsplit("/", 1)[-1]
    _, dot, extension = filename.rpartition(".")
    if not dot or not extension or not (extension.isascii() and extension.isalnum()):
        raise MalformedResourceUrl(url)
    return "." + extension.lower()


class ResourceClassifier:
    """Turns manifest URLs into operation-bound descriptors.

    Example:
        classifier = ResourceClassifier()
        descriptor = classifier.classify("app.js", context)
        await descriptor.fetch.invoke(context)
    """

    def __init__(self, suffixes: Optional[dict[str, ResourceKind]] = None) -> None:
        """Initialize classifier.

        Args:
            suffixes: Extra suffix-to-kind entries layered over SUFFIX_KINDS.
        """
        self._suffixes = dict(SUFFIX_KINDS)
        if suffixes:
            self._suffixes.update({k.lower(): v for k, v in suffixes.items()})

    def kind_of(self, url: str) -> ResourceKind:
        """Classify url without binding operations."""
        return self._suffixes.get(resource_suffix(url), ResourceKind.UNKNOWN)

    def classify(self, url: str, context: LoadContext) -> ResourceDescriptor:
        """Build the descriptor for a single URL.

        Raises:
            MalformedResourceUrl: If url has no extension.
        """
        if context.base_url:
            url = urljoin(context.base_url, url)

        suffix = resource_suffix(url)
        kind = self._suffixes.get(suffix, ResourceKind.UNKNOWN)

        if kind == ResourceKind.UNKNOWN:
            logger.debug(f"No operations for suffix {suffix!r} ({url})")
            return ResourceDescriptor(
                kind=kind,
                url=url,
                fetch=UnsupportedOperation(url, suffix),
                execute=UnsupportedOperation(url, suffix),
            )

        fetch, execute = KIND_OPERATIONS[kind]
        return ResourceDescriptor(
            kind=kind,
            url=url,
            fetch=BoundOperation(fetch, url),
            execute=BoundOperation(execute, url) if execute is not None else None,
        )

    def classify_all(
        self,
        urls: Iterable[str],
        context: LoadContext,
    ) -> list[ResourceDescriptor]:
        """Classify a whole manifest in order.

        A malformed URL aborts the whole manifest; no descriptor is returned.
        """
        return [self.classify(url, context) for url in urls]


_default_classifier = ResourceClassifier()


def classify(url: str, context: LoadContext) -> ResourceDescriptor:
    """Classify url with the default suffix table."""
    return _default_classifier.classify(url, context)


__all__ = [
    "SUFFIX_KINDS",
    "KIND_OPERATIONS",
    "ResourceClassifier",
    "classify",
    "parse_manifest",
    "resource_suffix",
]
