"""
Trigger gate base class for lazy-hydrate.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Awaitable

if TYPE_CHECKING:
    from lazy_hydrate.dom import DOMElement


class TriggerGate(ABC):
    """Abstract one-shot signal source gating when hydration may begin.

    arm() must be called from a running event loop. The returned awaitable
    resolves exactly once, when the gate's condition holds for the element.
    """

    name: str = "gate"

    @abstractmethod
    def arm(self, element: "DOMElement") -> Awaitable[None]:
        """Start waiting on element.

        Returns:
            Awaitable resolving when the condition fires.
        """
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
