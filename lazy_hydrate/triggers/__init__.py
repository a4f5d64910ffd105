"""
Trigger gates for lazy-hydrate.

Each gate produces a one-shot awaitable per element:
- IdleGate: the page's first idle notification, shared by every element
- InteractionGate: the first qualifying interaction with the element
- VisibilityGate: the element coming within the root margin of the viewport
"""

from lazy_hydrate.triggers.base import TriggerGate
from lazy_hydrate.triggers.idle import IdleGate, IdleSource, LoopIdleSource, ManualIdleSource
from lazy_hydrate.triggers.interaction import InteractionGate
from lazy_hydrate.triggers.visibility import (
    IntersectionEntry,
    IntersectionObserver,
    Registration,
    RegistrationRegistry,
    VisibilityGate,
)

__all__ = [
    "TriggerGate",
    "IdleGate",
    "IdleSource",
    "LoopIdleSource",
    "ManualIdleSource",
    "InteractionGate",
    "VisibilityGate",
    "IntersectionObserver",
    "IntersectionEntry",
    "Registration",
    "RegistrationRegistry",
]
