"""
Hydration dispatcher for lazy-hydrate.

Finds every element carrying a trigger marker, arms one gate per marker and,
once all of them have fired, loads the element's manifest.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Optional

from lazy_hydrate.config.options import HydrationOptions, LazyHydrateConfig
from lazy_hydrate.dom import DOMElement
from lazy_hydrate.dom.document import Document
from lazy_hydrate.events.bus import AsyncEventEmitter, get_event_bus
from lazy_hydrate.events.types import (
    GateArmedEvent,
    GateFiredEvent,
    HydrationCompleteEvent,
    HydrationFailedEvent,
    HydrationSkippedEvent,
    HydrationStartedEvent,
)
from lazy_hydrate.loader.classifier import ResourceClassifier, parse_manifest
from lazy_hydrate.loader.component import ComponentLoader
from lazy_hydrate.models import Component, HydrationRecord, HydrationState, LoadContext
from lazy_hydrate.session import Session
from lazy_hydrate.triggers.base import TriggerGate
from lazy_hydrate.triggers.idle import IdleGate, IdleSource, LoopIdleSource
from lazy_hydrate.triggers.interaction import InteractionGate
from lazy_hydrate.triggers.visibility import VisibilityGate

logger = logging.getLogger(__name__)


class HydrationDispatcher:
    """Wires trigger gates to component loading for one document.

    Example:
        document = Document.from_html(html, url="https://example.com/")
        async with Session() as session:
            dispatcher = HydrationDispatcher(document, session=session)
            dispatcher.scan()
            await document.dispatch_event(button, "click")
            records = await dispatcher.wait()
    """

    def __init__(
        self,
        document: Document,
        *,
        session: Optional[Session] = None,
        options: Optional[HydrationOptions] = None,
        config: Optional[LazyHydrateConfig] = None,
        idle_source: Optional[IdleSource] = None,
        classifier: Optional[ResourceClassifier] = None,
        loader: Optional[ComponentLoader] = None,
        bus: Optional[AsyncEventEmitter] = None,
    ) -> None:
        """Initialize HydrationDispatcher.

        Args:
            document: Host document to scan and hydrate.
            session: Fetch substrate handed to resource operations.
            options: Markers, manifest attribute and gate settings.
            config: Loaded configuration. Supplies options when none are
                given, and a session built from config.session when no
                session is given; that session is closed by close().
            idle_source: Idle notification source; defaults to the event loop.
            classifier: Resource classifier.
            loader: Component loader.
            bus: Emitter for lifecycle events; defaults to the global bus.
        """
        if options is None and config is not None:
            options = config.hydration
        self._owns_session = session is None and config is not None
        if self._owns_session:
            session = Session.from_options(config.session)

        self._document = document
        self._session = session
        self._options = options or HydrationOptions()
        self._classifier = classifier or ResourceClassifier()
        self._bus = bus if bus is not None else get_event_bus()
        self._loader = loader or ComponentLoader(bus=self._bus)

        opts = self._options
        self._visibility = VisibilityGate(
            document,
            root_margin=opts.root_margin,
            manifest_attribute=opts.manifest_attribute,
        )
        self._gates: dict[str, TriggerGate] = {
            opts.idle_marker: IdleGate(idle_source or LoopIdleSource(opts.idle_delay)),
            opts.interaction_marker: InteractionGate(document, opts.interaction_event),
            opts.visibility_marker: self._visibility,
        }
        self._records: dict[DOMElement, HydrationRecord] = {}
        self._tasks: dict[DOMElement, asyncio.Task] = {}

    @classmethod
    def from_config(
        cls,
        document: Document,
        config: LazyHydrateConfig,
        **kwargs: Any,
    ) -> "HydrationDispatcher":
        """Build a dispatcher whose options and session come from config."""
        return cls(document, config=config, **kwargs)

    @property
    def document(self) -> Document:
        return self._document

    @property
    def options(self) -> HydrationOptions:
        return self._options

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def gates(self) -> dict[str, TriggerGate]:
        """Gates keyed by the marker class selecting them."""
        return dict(self._gates)

    @property
    def records(self) -> list[HydrationRecord]:
        return list(self._records.values())

    def record_for(self, element: DOMElement) -> Optional[HydrationRecord]:
        return self._records.get(element)

    def markers_of(self, element: DOMElement) -> list[str]:
        """Marker classes carried by element, in class-attribute order."""
        seen: list[str] = []
        for name in element.classes:
            if name in self._gates and name not in seen:
                seen.append(name)
        return seen

    def candidates(self) -> list[DOMElement]:
        """Every element carrying at least one marker, in document order."""
        selector = ", ".join(f".{marker}" for marker in self._gates)
        return self._document.query_all(selector)

    def scan(self) -> list[HydrationRecord]:
        """Arm gates for every not-yet-seen candidate element.

        Must be called from a running event loop.

        Returns:
            Records of the newly armed elements.
        """
        armed = []
        for element in self.candidates():
            if element not in self._records:
                armed.append(self._arm(element))
        return armed

    def _arm(self, element: DOMElement) -> HydrationRecord:
        markers = self.markers_of(element)
        record = HydrationRecord(element=element, markers=markers)
        self._records[element] = record

        # Gates are armed right away so no trigger between now and the
        # task's first step is missed.
        waits = []
        for marker in markers:
            gate = self._gates[marker]
            waits.append(self._watch(gate, element, gate.arm(element)))
        record.transition(HydrationState.ARMED)

        task = asyncio.ensure_future(self._hydrate(element, waits))
        task.add_done_callback(self._log_task_failure)
        self._tasks[element] = task
        logger.debug(f"Armed {markers} on {element!r}")
        return record

    async def hydrate(self, element: DOMElement) -> HydrationState:
        """Arm element if needed and wait for its hydration to finish.

        Raises:
            HydrationError: If classification or loading fails.
        """
        if element not in self._records:
            self._arm(element)
        return await asyncio.shield(self._tasks[element])

    async def wait(self) -> list[HydrationRecord]:
        """Wait for every scheduled hydration to settle.

        Failures stay on their records; they never abort siblings.
        """
        await asyncio.gather(*self._tasks.values(), return_exceptions=True)
        return self.records

    async def close(self) -> None:
        """Stop watching the document and release an owned session.

        Pending hydrations keep their current state; elements waiting on
        visibility will no longer fire.
        """
        self._visibility.observer.disconnect()
        if self._owns_session and self._session is not None:
            await self._session.close()

    async def __aenter__(self) -> "HydrationDispatcher":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _hydrate(
        self,
        element: DOMElement,
        waits: list[Awaitable[None]],
    ) -> HydrationState:
        record = self._records[element]
        await asyncio.gather(*waits)
        record.transition(HydrationState.ALL_FIRED)

        manifest = element.get(self._options.manifest_attribute)
        if manifest is None:
            logger.debug(f"No manifest on {element!r}, skipping")
            record.transition(HydrationState.SKIPPED)
            await self._bus.emit(HydrationSkippedEvent(target=element))
            return record.state

        urls = parse_manifest(manifest)
        record.transition(HydrationState.LOADING)
        await self._bus.emit(HydrationStartedEvent(manifest=manifest, urls=urls, target=element))

        started = time.perf_counter()
        try:
            context = LoadContext(
                document=self._document,
                element=element,
                session=self._session,
                base_url=self._options.base_url or self._document.url,
            )
            component = Component(
                context=context,
                descriptors=self._classifier.classify_all(urls, context),
            )
            await self._loader.load(component)
        except Exception as e:
            record.error = e
            record.transition(HydrationState.FAILED)
            await self._bus.emit(HydrationFailedEvent(manifest=manifest, error=e, target=element))
            raise

        record.transition(HydrationState.DONE)
        await self._bus.emit(
            HydrationCompleteEvent(
                manifest=manifest,
                load_time_ms=(time.perf_counter() - started) * 1000,
                target=element,
            )
        )
        return record.state

    async def _watch(
        self,
        gate: TriggerGate,
        element: DOMElement,
        fired: Awaitable[None],
    ) -> None:
        await self._bus.emit(GateArmedEvent(gate=gate.name, target=element))
        await fired
        await self._bus.emit(GateFiredEvent(gate=gate.name, target=element))

    @staticmethod
    def _log_task_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.warning(f"Hydration failed: {error}")


async def hydrate_document(
    document: Document,
    *,
    session: Optional[Session] = None,
    options: Optional[HydrationOptions] = None,
    config: Optional[LazyHydrateConfig] = None,
    idle_source: Optional[IdleSource] = None,
) -> HydrationDispatcher:
    """Create a dispatcher for document and arm every candidate element.

    Returns:
        The dispatcher; await its wait() to collect results and close() it
        when done.
    """
    dispatcher = HydrationDispatcher(
        document,
        session=session,
        options=options,
        config=config,
        idle_source=idle_source,
    )
    dispatcher.scan()
    return dispatcher
