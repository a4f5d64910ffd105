"""
Idle trigger gate.

All elements armed on one IdleGate share a single idle notification: the
first arm() requests it, every caller waits on the same future, and the
request is never repeated.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Awaitable, Callable, Optional

from lazy_hydrate.config.defaults import DEFAULT_IDLE_DELAY
from lazy_hydrate.triggers.base import TriggerGate

if TYPE_CHECKING:
    from lazy_hydrate.dom import DOMElement

logger = logging.getLogger(__name__)


class IdleSource(ABC):
    """Platform hook delivering idle notifications."""

    @abstractmethod
    def request_idle_callback(self, callback: Callable[[], None]) -> None:
        """Call callback once, the next time the host is idle."""
        ...


class LoopIdleSource(IdleSource):
    """Idle source backed by the running asyncio loop.

    The callback runs delay seconds later, after the loop has worked through
    everything already scheduled ahead of it.
    """

    def __init__(self, delay: float = DEFAULT_IDLE_DELAY) -> None:
        self._delay = delay

    def request_idle_callback(self, callback: Callable[[], None]) -> None:
        loop = asyncio.get_running_loop()
        if self._delay > 0:
            loop.call_later(self._delay, callback)
        else:
            loop.call_soon(callback)


class ManualIdleSource(IdleSource):
    """Idle source fired explicitly by the host."""

    def __init__(self) -> None:
        self._callbacks: list[Callable[[], None]] = []
        self.requests = 0

    @property
    def pending(self) -> int:
        return len(self._callbacks)

    def request_idle_callback(self, callback: Callable[[], None]) -> None:
        self.requests += 1
        self._callbacks.append(callback)

    def fire(self) -> int:
        """Deliver the idle notification to every pending callback.

        Returns:
            Number of callbacks invoked.
        """
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()
        return len(callbacks)


class IdleGate(TriggerGate):
    """Gate resolving at the first idle notification of the page."""

    name = "idle"

    def __init__(self, source: Optional[IdleSource] = None) -> None:
        self._source = source or LoopIdleSource()
        self._signal: Optional[asyncio.Future] = None

    @property
    def armed(self) -> bool:
        return self._signal is not None

    @property
    def fired(self) -> bool:
        return self._signal is not None and self._signal.done()

    def arm(self, element: Optional["DOMElement"] = None) -> Awaitable[None]:
        if self._signal is None:
            self._signal = asyncio.get_running_loop().create_future()
            self._source.request_idle_callback(self._on_idle)
            logger.debug("Requested idle callback")
        # Waiters share one future; shield it so one cancelled waiter
        # does not cancel the signal for everyone else.
        return asyncio.shield(self._signal)

    def _on_idle(self) -> None:
        if self._signal is not None and not self._signal.done():
            logger.debug("Idle signal fired")
            self._signal.set_result(None)
