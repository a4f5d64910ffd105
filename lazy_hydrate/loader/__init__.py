"""
Resource loading for lazy-hydrate.

- ResourceClassifier: URL -> ResourceDescriptor with bound operations
- ComponentLoader: ordered fetch/execute phases for one component
- operations: the fetch/execute steps for scripts, stylesheets and fragments
"""

from lazy_hydrate.loader.classifier import (
    KIND_OPERATIONS,
    SUFFIX_KINDS,
    ResourceClassifier,
    classify,
    parse_manifest,
    resource_suffix,
)
from lazy_hydrate.loader.component import ComponentLoader
from lazy_hydrate.loader.operations import (
    execute_script,
    fetch_script,
    insert_stylesheet,
    load_fragment,
)

__all__ = [
    "ResourceClassifier",
    "ComponentLoader",
    "classify",
    "parse_manifest",
    "resource_suffix",
    "SUFFIX_KINDS",
    "KIND_OPERATIONS",
    "fetch_script",
    "execute_script",
    "insert_stylesheet",
    "load_fragment",
]
