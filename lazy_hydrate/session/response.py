"""
Fetched resource bodies.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from curl_cffi.requests import Response as CurlResponse


class Response:
    """Body and status of one resource fetch.

    Resource operations only read the status, the final URL and the decoded
    body; everything else stays on the underlying curl_cffi response.
    """

    def __init__(self, raw_response: "CurlResponse") -> None:
        self._response = raw_response

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status_code < 300

    @property
    def reason(self) -> str:
        return self._response.reason or ""

    @property
    def url(self) -> str:
        """Where the body was finally served from, after redirects."""
        return str(self._response.url)

    @property
    def text(self) -> str:
        return self._response.text

    def raise_for_status(self) -> None:
        """Reject non-2xx bodies before they reach the document.

        Raises:
            HTTPError: If the status is outside 2xx.
        """
        if not self.ok:
            raise HTTPError(f"HTTP {self.status_code} for {self.url}: {self.reason}", response=self)

    def __repr__(self) -> str:
        return f"<Response [{self.status_code}] {self.url}>"


class HTTPError(Exception):
    """A resource came back with a non-2xx status."""

    def __init__(self, message: str, response: Response) -> None:
        super().__init__(message)
        self.response = response
