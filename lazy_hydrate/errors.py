"""
Error types for lazy-hydrate.

Every failure raised while classifying or loading a component derives from
HydrationError so callers can catch the whole family at once.
"""

from typing import Optional


class HydrationError(Exception):
    """Base class for hydration failures."""

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        super().__init__(message)
        self.url = url


class MalformedResourceUrl(HydrationError):
    """Raised when a manifest URL carries no filename extension."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Resource URL has no recognizable suffix: {url!r}", url)


class UnsupportedResourceKind(HydrationError):
    """Raised when an operation of an unknown resource kind is invoked."""

    def __init__(self, url: str, suffix: str) -> None:
        super().__init__(
            f"Unsupported resource kind {suffix!r} for {url!r}",
            url,
        )
        self.suffix = suffix


class ResourceLoadFailed(HydrationError):
    """Raised when fetching, parsing or executing a resource fails."""

    def __init__(
        self,
        url: str,
        cause: Optional[BaseException] = None,
        message: Optional[str] = None,
    ) -> None:
        detail = message or (str(cause) if cause is not None else "unknown error")
        super().__init__(f"Failed to load {url!r}: {detail}", url)
        self.cause = cause


__all__ = [
    "HydrationError",
    "MalformedResourceUrl",
    "UnsupportedResourceKind",
    "ResourceLoadFailed",
]
