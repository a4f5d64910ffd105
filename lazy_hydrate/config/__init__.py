"""
Configuration module for lazy-hydrate.

This module provides:
- Strongly-typed option classes (HydrationOptions, SessionOptions)
- Configuration file loading (JSON, YAML, INI, TOML)
- Environment variable support
- Validation and type checking via Pydantic

Example usage:
    from lazy_hydrate.config import LazyHydrateConfig, HydrationOptions, load_config

    # Load from file with environment overrides and hand it to a dispatcher
    config = load_config("lazy-hydrate.config.json")
    dispatcher = HydrationDispatcher(document, config=config)

    # Create programmatically
    config = LazyHydrateConfig(
        hydration=HydrationOptions(root_margin=200, manifest_attribute="data-res"),
    )

Environment variables:
    LAZY_HYDRATE_ROOT_MARGIN=200
    LAZY_HYDRATE_MANIFEST_ATTRIBUTE=data-res
    LAZY_HYDRATE_SESSION_TIMEOUT=15
"""

from .defaults import (
    DEFAULT_IDLE_MARKER,
    DEFAULT_INTERACTION_EVENT,
    DEFAULT_INTERACTION_MARKER,
    DEFAULT_MANIFEST_ATTRIBUTE,
    DEFAULT_ROOT_MARGIN,
    DEFAULT_VISIBILITY_MARKER,
    ENV_PREFIX,
    FRAGMENT_FETCH_HEADERS,
    MANIFEST_SEPARATOR,
    SCRIPT_FETCH_HEADERS,
    get_default_hydration_config,
    get_default_session_config,
)
from .env import (
    env_variables,
    get_env,
    get_env_bool,
    get_env_float,
    get_env_key,
    load_env_config,
    parse_headers,
)
from .loader import (
    ConfigLoader,
    ConfigurationError,
    find_config_file,
    load_config,
    load_file,
    merge_configs,
    save_config,
)
from .options import (
    HydrationOptions,
    LazyHydrateConfig,
    SessionOptions,
)

__all__ = [
    # Main configuration class
    "LazyHydrateConfig",
    # Option classes
    "HydrationOptions",
    "SessionOptions",
    # Loader functions
    "load_config",
    "load_file",
    "save_config",
    "find_config_file",
    "merge_configs",
    "ConfigLoader",
    "ConfigurationError",
    # Environment functions
    "get_env",
    "get_env_bool",
    "get_env_float",
    "get_env_key",
    "load_env_config",
    "env_variables",
    "parse_headers",
    "ENV_PREFIX",
    # Default values
    "DEFAULT_IDLE_MARKER",
    "DEFAULT_INTERACTION_MARKER",
    "DEFAULT_VISIBILITY_MARKER",
    "DEFAULT_MANIFEST_ATTRIBUTE",
    "DEFAULT_INTERACTION_EVENT",
    "DEFAULT_ROOT_MARGIN",
    "MANIFEST_SEPARATOR",
    "SCRIPT_FETCH_HEADERS",
    "FRAGMENT_FETCH_HEADERS",
    "get_default_hydration_config",
    "get_default_session_config",
]
