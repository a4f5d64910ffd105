"""
Interaction trigger gate.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Optional

from lazy_hydrate.config.defaults import DEFAULT_INTERACTION_EVENT
from lazy_hydrate.triggers.base import TriggerGate

if TYPE_CHECKING:
    from lazy_hydrate.dom import DOMElement, Subscription
    from lazy_hydrate.dom.document import Document
    from lazy_hydrate.events.bus import Event

logger = logging.getLogger(__name__)


class InteractionGate(TriggerGate):
    """Gate resolving on the first qualifying interaction with an element.

    The listener is detached inside its own resolution path, so later
    interactions reach nothing.
    """

    name = "interaction"

    def __init__(
        self,
        document: "Document",
        event_type: str = DEFAULT_INTERACTION_EVENT,
    ) -> None:
        self._document = document
        self._event_type = event_type

    @property
    def event_type(self) -> str:
        return self._event_type

    def arm(self, element: "DOMElement") -> Awaitable[None]:
        future = asyncio.get_running_loop().create_future()
        subscription: Optional["Subscription"] = None

        def on_interaction(event: "Event") -> None:
            assert subscription is not None
            subscription.detach()
            if not future.done():
                logger.debug(f"Interaction {self._event_type} on {element!r}")
                future.set_result(None)

        subscription = self._document.add_event_listener(
            element, self._event_type, on_interaction
        )
        return future
