"""Shared fixtures for lazy-hydrate tests."""

import asyncio
from typing import Optional
from unittest.mock import MagicMock

import pytest

from lazy_hydrate.dom.document import Document
from lazy_hydrate.events.bus import EventBus
from lazy_hydrate.session import Response


class FakeSession:
    """Stand-in for Session that serves canned bodies.

    gates holds asyncio.Event objects that a request waits on before
    completing; log records request start/end in order.
    """

    def __init__(
        self,
        bodies: Optional[dict[str, str]] = None,
        statuses: Optional[dict[str, int]] = None,
        errors: Optional[dict[str, Exception]] = None,
    ) -> None:
        self.bodies = bodies or {}
        self.statuses = statuses or {}
        self.errors = errors or {}
        self.redirects: dict[str, str] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple[str, Optional[dict[str, str]]]] = []
        self.log: list[str] = []

    def hold(self, url: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[url] = gate
        return gate

    async def get(self, url: str, *, headers=None, **kwargs) -> Response:
        self.calls.append((url, headers))
        self.log.append(f"start:{url}")
        gate = self.gates.get(url)
        if gate is not None:
            await gate.wait()
        await asyncio.sleep(0)
        self.log.append(f"end:{url}")
        if url in self.errors:
            raise self.errors[url]

        raw = MagicMock()
        raw.status_code = self.statuses.get(url, 200)
        raw.reason = "OK" if raw.status_code < 400 else "Error"
        raw.url = self.redirects.get(url, url)
        raw.text = self.bodies.get(url, "")
        return Response(raw)

    @property
    def urls(self) -> list[str]:
        return [url for url, _ in self.calls]


BASE = "https://example.com/"

PAGE = """
<html>
  <head><title>page</title></head>
  <body>
    <div id="card" class="click" data-srcset="card.html,card.js,card.css">
      <button id="open">Open</button>
    </div>
  </body>
</html>
"""


@pytest.fixture(autouse=True)
def reset_event_bus():
    """Give every test a fresh global event bus."""
    EventBus.reset()
    yield
    EventBus.reset()


@pytest.fixture
def fake_session():
    return FakeSession(
        bodies={
            BASE + "card.html": '<section class="card-body"><p>Card</p></section>',
        }
    )


@pytest.fixture
def document():
    return Document.from_html(PAGE, url=BASE)
