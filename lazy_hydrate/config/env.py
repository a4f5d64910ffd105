"""
Environment variable support for lazy-hydrate configuration.

Variable names follow the option models: a hydration field reads
LAZY_HYDRATE_<FIELD> and a session field reads LAZY_HYDRATE_SESSION_<FIELD>.

    LAZY_HYDRATE_ROOT_MARGIN=200
    LAZY_HYDRATE_VISIBILITY_MARKER=in-view
    LAZY_HYDRATE_SESSION_VERIFY_SSL=false
    LAZY_HYDRATE_SESSION_HEADERS="X-Client=docs,Accept=text/html"

Values are handed to the models as strings; pydantic coerces numbers and
booleans during validation. Header maps are the one exception.
"""

import os
from typing import Any, Optional

from .defaults import ENV_PREFIX
from .options import HydrationOptions, SessionOptions

# Config section -> (model, infix between the prefix and the field name)
SECTIONS: dict[str, tuple[type, str]] = {
    "hydration": (HydrationOptions, ""),
    "session": (SessionOptions, "SESSION_"),
}

_TRUTHY = frozenset({"1", "true", "yes", "on"})


def get_env_key(key: str, prefix: str = ENV_PREFIX) -> str:
    """Environment variable name for a dotted config key.

    "hydration.root_margin" -> "LAZY_HYDRATE_ROOT_MARGIN"
    "session.proxy" -> "LAZY_HYDRATE_SESSION_PROXY"
    """
    section, _, name = key.partition(".")
    if section in SECTIONS and name:
        infix = SECTIONS[section][1]
    else:
        infix, name = "", key
    return f"{prefix}{infix}{name}".upper().replace(".", "_").replace("-", "_")


def parse_headers(value: str) -> dict[str, str]:
    """Parse "Name=value,Other=value" into a header map."""
    headers = {}
    for pair in value.split(","):
        name, sep, content = pair.partition("=")
        if sep and name.strip():
            headers[name.strip()] = content.strip()
    return headers


def get_env(key: str, default: Optional[str] = None, prefix: str = ENV_PREFIX) -> Optional[str]:
    """Raw value of the variable for key, or default when unset."""
    return os.environ.get(get_env_key(key, prefix), default)


def get_env_bool(key: str, default: bool = False, prefix: str = ENV_PREFIX) -> bool:
    value = get_env(key, prefix=prefix)
    if value is None:
        return default
    return value.strip().lower() in _TRUTHY


def get_env_float(key: str, default: float = 0.0, prefix: str = ENV_PREFIX) -> float:
    """Float value of the variable for key.

    Raises:
        ValueError: If the variable is set but not a number.
    """
    value = get_env(key, prefix=prefix)
    return default if value is None else float(value)


def env_variables(prefix: str = ENV_PREFIX) -> dict[str, str]:
    """Every recognized variable name, keyed by dotted config key."""
    return {
        f"{section}.{name}": get_env_key(f"{section}.{name}", prefix)
        for section, (model, _) in SECTIONS.items()
        for name in model.model_fields
    }


def load_env_config(prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Collect the set variables into a nested config dictionary.

    Sections with no variable set are left out.
    """
    result: dict[str, Any] = {}
    for key, variable in env_variables(prefix).items():
        value = os.environ.get(variable)
        if value is None:
            continue
        section, name = key.split(".", 1)
        result.setdefault(section, {})[name] = (
            parse_headers(value) if name == "headers" else value
        )
    return result
