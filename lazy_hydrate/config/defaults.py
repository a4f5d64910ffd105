"""
Default configuration values for lazy-hydrate.

This module contains all default values used throughout the configuration system.
"""

from typing import Any, Optional

# Marker classes selecting trigger gates
DEFAULT_IDLE_MARKER = "idle"
DEFAULT_INTERACTION_MARKER = "click"
DEFAULT_VISIBILITY_MARKER = "lazy"

# Manifest
DEFAULT_MANIFEST_ATTRIBUTE = "data-srcset"
MANIFEST_SEPARATOR = ","

# Gate defaults
DEFAULT_INTERACTION_EVENT = "click"
DEFAULT_ROOT_MARGIN = 100.0
DEFAULT_IDLE_DELAY = 0.0

# Session defaults
DEFAULT_IMPERSONATE = "chrome120"
DEFAULT_FETCH_TIMEOUT: Optional[float] = None
DEFAULT_VERIFY_SSL = True

# Default HTTP headers
DEFAULT_HEADERS: dict[str, str] = {
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
}

# Per-kind request headers
SCRIPT_FETCH_HEADERS: dict[str, str] = {
    "Sec-Fetch-Mode": "no-cors",
    "Sec-Fetch-Dest": "script",
}
FRAGMENT_FETCH_HEADERS: dict[str, str] = {
    "Accept": "text/html",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Dest": "empty",
}

# File config defaults
DEFAULT_CONFIG_FILENAME = "lazy-hydrate.config"
DEFAULT_CONFIG_EXTENSIONS = [".json", ".yaml", ".yml", ".ini", ".toml"]
DEFAULT_CONFIG_SEARCH_PATHS = [
    ".",
    "~/.config/lazy-hydrate",
]

# Environment variable prefix
ENV_PREFIX = "LAZY_HYDRATE_"


def get_default_hydration_config() -> dict[str, Any]:
    """Get default hydration configuration as a dictionary."""
    return {
        "idle_marker": DEFAULT_IDLE_MARKER,
        "interaction_marker": DEFAULT_INTERACTION_MARKER,
        "visibility_marker": DEFAULT_VISIBILITY_MARKER,
        "manifest_attribute": DEFAULT_MANIFEST_ATTRIBUTE,
        "interaction_event": DEFAULT_INTERACTION_EVENT,
        "root_margin": DEFAULT_ROOT_MARGIN,
        "idle_delay": DEFAULT_IDLE_DELAY,
    }


def get_default_session_config() -> dict[str, Any]:
    """Get default session configuration as a dictionary."""
    return {
        "impersonate": DEFAULT_IMPERSONATE,
        "timeout": DEFAULT_FETCH_TIMEOUT,
        "verify_ssl": DEFAULT_VERIFY_SSL,
        "headers": DEFAULT_HEADERS.copy(),
    }
