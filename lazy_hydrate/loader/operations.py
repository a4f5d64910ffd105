"""
Resource operations for lazy-hydrate.

Each operation takes the resource URL and an explicit LoadContext and
performs one fetch or execute step against the host document.
"""

from __future__ import annotations

import logging

from curl_cffi import CurlError
from lxml.etree import ParserError

from lazy_hydrate.config.defaults import FRAGMENT_FETCH_HEADERS, SCRIPT_FETCH_HEADERS
from lazy_hydrate.errors import ResourceLoadFailed
from lazy_hydrate.models import LoadContext
from lazy_hydrate.session import HTTPError, Response, Session

logger = logging.getLogger(__name__)


def _require_session(url: str, context: LoadContext) -> Session:
    if context.session is None:
        raise ResourceLoadFailed(url, message="no fetch session configured")
    return context.session


async def _get(url: str, context: LoadContext, headers: dict[str, str]) -> Response:
    session = _require_session(url, context)
    try:
        return await session.get(url, headers=headers)
    except CurlError as e:
        raise ResourceLoadFailed(url, e) from e


async def fetch_script(url: str, context: LoadContext) -> None:
    """Prime the fetch cache with the script bytes.

    The response is opaque to us: neither status nor body is inspected.
    """
    logger.debug(f"Fetching script {url}")
    await _get(url, context, SCRIPT_FETCH_HEADERS)


async def execute_script(url: str, context: LoadContext) -> None:
    """Insert a module script pointing at url into the document head."""
    document = context.document
    script = document.create_element("script", {"type": "module", "src": url})
    document.append_child(document.head, script)
    logger.debug(f"Executing script {url}")


async def insert_stylesheet(url: str, context: LoadContext) -> None:
    """Insert a stylesheet link into the document head."""
    document = context.document
    link = document.create_element(
        "link",
        {"rel": "stylesheet", "type": "text/css", "href": url},
    )
    document.append_child(document.head, link)
    logger.debug(f"Loading stylesheet {url}")


async def load_fragment(url: str, context: LoadContext) -> None:
    """Fetch an HTML fragment and append its nodes into the target element."""
    response = await _get(url, context, FRAGMENT_FETCH_HEADERS)
    try:
        response.raise_for_status()
    except HTTPError as e:
        raise ResourceLoadFailed(url, e) from e

    try:
        appended = context.document.append_html(context.element, response.text)
    except (ParserError, ValueError) as e:
        raise ResourceLoadFailed(url, e, message="fragment could not be parsed") from e
    served = f" via {response.url}" if response.url != url else ""
    logger.debug(f"Loaded fragment {url}{served} ({len(appended)} elements)")


__all__ = [
    "fetch_script",
    "execute_script",
    "insert_stylesheet",
    "load_fragment",
]
