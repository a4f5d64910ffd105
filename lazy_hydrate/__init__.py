"""
lazy-hydrate: deferred resource loading for page components.

Elements opt in with marker classes and a resource manifest:

    <div class="lazy click" data-srcset="card.html,card.js,card.css"></div>

Each marker selects a trigger gate (idle, click, lazy). Once every gate of an
element has fired, its stylesheets are inserted in the background, fragments
and scripts are fetched concurrently, and scripts are executed last so they
can rely on the fragment markup.

Basic usage:
    from lazy_hydrate import Document, HydrationDispatcher, Session

    document = Document.from_html(html, url="https://example.com/")
    async with Session() as session:
        dispatcher = HydrationDispatcher(document, session=session)
        dispatcher.scan()
        ...
        records = await dispatcher.wait()

From configuration (file, LAZY_HYDRATE_* variables, overrides):
    from lazy_hydrate import HydrationDispatcher, load_config

    async with HydrationDispatcher(document, config=load_config()) as dispatcher:
        dispatcher.scan()
        records = await dispatcher.wait()
"""

__version__ = "0.1.0"
__license__ = "MIT"

from lazy_hydrate.errors import (
    HydrationError,
    MalformedResourceUrl,
    ResourceLoadFailed,
    UnsupportedResourceKind,
)

from lazy_hydrate.models import (
    BoundOperation,
    Component,
    HydrationRecord,
    HydrationState,
    LoadContext,
    Operation,
    Rect,
    ResourceDescriptor,
    ResourceKind,
    UnsupportedOperation,
)

from lazy_hydrate.dom import (
    Document,
    DOMElement,
    DOMParser,
    Subscription,
)

from lazy_hydrate.session import (
    HTTPError,
    Response,
    Session,
)

from lazy_hydrate.events import (
    Event,
    EventBus,
    EventType,
    get_event_bus,
    on_event,
)

from lazy_hydrate.loader import (
    ComponentLoader,
    ResourceClassifier,
    classify,
    parse_manifest,
)

from lazy_hydrate.triggers import (
    IdleGate,
    IdleSource,
    InteractionGate,
    IntersectionObserver,
    LoopIdleSource,
    ManualIdleSource,
    TriggerGate,
    VisibilityGate,
)

from lazy_hydrate.config import (
    HydrationOptions,
    LazyHydrateConfig,
    SessionOptions,
    load_config,
)

from lazy_hydrate.dispatcher import HydrationDispatcher, hydrate_document

__all__ = [
    # Version
    "__version__",
    # Errors
    "HydrationError",
    "MalformedResourceUrl",
    "UnsupportedResourceKind",
    "ResourceLoadFailed",
    # Models
    "ResourceKind",
    "HydrationState",
    "Rect",
    "LoadContext",
    "Operation",
    "BoundOperation",
    "UnsupportedOperation",
    "ResourceDescriptor",
    "Component",
    "HydrationRecord",
    # DOM
    "Document",
    "DOMElement",
    "DOMParser",
    "Subscription",
    # Session
    "Session",
    "Response",
    "HTTPError",
    # Events
    "Event",
    "EventBus",
    "EventType",
    "get_event_bus",
    "on_event",
    # Loading
    "ResourceClassifier",
    "ComponentLoader",
    "classify",
    "parse_manifest",
    # Triggers
    "TriggerGate",
    "IdleGate",
    "IdleSource",
    "LoopIdleSource",
    "ManualIdleSource",
    "InteractionGate",
    "VisibilityGate",
    "IntersectionObserver",
    # Config
    "LazyHydrateConfig",
    "HydrationOptions",
    "SessionOptions",
    "load_config",
    # Dispatch
    "HydrationDispatcher",
    "hydrate_document",
]
