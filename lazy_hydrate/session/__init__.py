"""
HTTP session module for lazy-hydrate.

This module provides the fetch substrate used by resource operations:
- Session: Async HTTP client built on curl_cffi
- Response: HTTP response wrapper
- HTTPError: raised by Response.raise_for_status

Example usage:
    from lazy_hydrate.session import Session

    async with Session() as session:
        response = await session.get("https://example.com/frag.html")
        response.raise_for_status()
        print(response.text)
"""

from lazy_hydrate.session.client import Session
from lazy_hydrate.session.response import HTTPError, Response

__all__ = [
    "Session",
    "Response",
    "HTTPError",
]
