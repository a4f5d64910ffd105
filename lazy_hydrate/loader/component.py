"""
Component loader for lazy-hydrate.

Runs the fetch and execute phases of a component:

1. stylesheets are inserted in the background and never awaited
2. fragment fetches and script fetches run concurrently and all settle
3. only then do script executes run, concurrently

Scripts may therefore rely on markup from any fragment of the same component.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence

from lazy_hydrate.errors import HydrationError, ResourceLoadFailed
from lazy_hydrate.events.bus import AsyncEventEmitter, EventType
from lazy_hydrate.events.types import ResourceEvent
from lazy_hydrate.models import Component, LoadContext, ResourceDescriptor, ResourceKind

logger = logging.getLogger(__name__)


class ComponentLoader:
    """Loads the resources of one component at a time.

    A single loader can be shared by many components; it only keeps the set
    of in-flight background stylesheet tasks.

    Example:
        loader = ComponentLoader()
        await loader.load(component)
    """

    def __init__(self, bus: Optional[AsyncEventEmitter] = None) -> None:
        """Initialize ComponentLoader.

        Args:
            bus: Emitter receiving RESOURCE_FETCHED/RESOURCE_EXECUTED events.
        """
        self._bus = bus
        self._background: set[asyncio.Task] = set()

    @property
    def pending_styles(self) -> int:
        """Number of stylesheet tasks still running."""
        return len(self._background)

    async def load(self, component: Component) -> None:
        """Hydrate component.

        Raises:
            ResourceLoadFailed: If a fragment/script fetch or a script
                execute failed.
            UnsupportedResourceKind: If the component holds a resource of
                unknown kind.
        """
        context = component.context
        styles = component.of_kind(ResourceKind.STYLE)
        fragments = component.of_kind(ResourceKind.FRAGMENT)
        scripts = component.of_kind(ResourceKind.SCRIPT)
        unknown = component.of_kind(ResourceKind.UNKNOWN)

        for descriptor in styles:
            self._launch_style(descriptor, context)

        fetches = [*fragments, *scripts, *unknown]
        results = await asyncio.gather(
            *(self._fetch(d, context) for d in fetches),
            return_exceptions=True,
        )
        self._raise_first_failure(fetches, results, "fetch")
        logger.debug(f"Fetched {len(fragments)} fragments and {len(scripts)} scripts")

        executes = [d for d in scripts if d.execute is not None]
        results = await asyncio.gather(
            *(self._execute(d, context) for d in executes),
            return_exceptions=True,
        )
        self._raise_first_failure(executes, results, "execute")
        logger.debug(f"Finished hydration of {component.element!r}")

    async def drain(self) -> None:
        """Wait until every background stylesheet task has finished."""
        while self._background:
            await asyncio.gather(*list(self._background))

    def _launch_style(self, descriptor: ResourceDescriptor, context: LoadContext) -> None:
        task = asyncio.ensure_future(self._run_style(descriptor, context))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _run_style(self, descriptor: ResourceDescriptor, context: LoadContext) -> None:
        # Styling is best-effort: failures are logged and never propagate.
        try:
            await descriptor.fetch.invoke(context)
        except Exception as e:
            logger.debug(f"Ignoring stylesheet failure for {descriptor.url}: {e}")
            return
        await self._publish(EventType.RESOURCE_FETCHED, descriptor, context)

    async def _fetch(self, descriptor: ResourceDescriptor, context: LoadContext) -> None:
        await descriptor.fetch.invoke(context)
        await self._publish(EventType.RESOURCE_FETCHED, descriptor, context)

    async def _execute(self, descriptor: ResourceDescriptor, context: LoadContext) -> None:
        assert descriptor.execute is not None
        await descriptor.execute.invoke(context)
        await self._publish(EventType.RESOURCE_EXECUTED, descriptor, context)

    async def _publish(
        self,
        event_type: EventType,
        descriptor: ResourceDescriptor,
        context: LoadContext,
    ) -> None:
        if self._bus is None:
            return
        await self._bus.emit(
            ResourceEvent(
                type=event_type,
                url=descriptor.url,
                kind=descriptor.kind.value,
                target=context.element,
            )
        )

    @staticmethod
    def _raise_first_failure(
        descriptors: Sequence[ResourceDescriptor],
        results: Sequence[Any],
        phase: str,
    ) -> None:
        failures = [
            (d, r) for d, r in zip(descriptors, results) if isinstance(r, BaseException)
        ]
        if not failures:
            return

        for descriptor, error in failures:
            logger.debug(f"{phase} failed for {descriptor.url}: {error!r}")

        descriptor, error = failures[0]
        if isinstance(error, (HydrationError, asyncio.CancelledError)):
            raise error
        raise ResourceLoadFailed(descriptor.url, error) from error


__all__ = ["ComponentLoader"]
