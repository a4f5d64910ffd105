"""
Configuration file loading for lazy-hydrate.

Sources are layered from lowest to highest precedence: built-in defaults, a
config file (JSON, YAML, TOML or INI), LAZY_HYDRATE_* environment variables
and programmatic overrides. The merged dictionary is validated once by
LazyHydrateConfig.
"""

import configparser
import json
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional, Union

import yaml
from pydantic import ValidationError

from .defaults import (
    DEFAULT_CONFIG_EXTENSIONS,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_CONFIG_SEARCH_PATHS,
)
from .env import load_env_config
from .options import LazyHydrateConfig

PathLike = Union[str, Path]


class ConfigurationError(Exception):
    """Raised when configuration cannot be read or does not validate."""


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _read_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def _read_toml(path: Path) -> Any:
    return tomllib.loads(path.read_text(encoding="utf-8"))


def _read_ini(path: Path) -> dict[str, Any]:
    # Values stay strings; model validation coerces them.
    parser = configparser.ConfigParser()
    parser.read_string(path.read_text(encoding="utf-8"), source=str(path))
    return {section: dict(parser[section]) for section in parser.sections()}


READERS: dict[str, Callable[[Path], Any]] = {
    ".json": _read_json,
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".toml": _read_toml,
    ".ini": _read_ini,
}

_DECODE_ERRORS = (
    json.JSONDecodeError,
    yaml.YAMLError,
    tomllib.TOMLDecodeError,
    configparser.Error,
)


def load_file(path: PathLike) -> dict[str, Any]:
    """Read one configuration file, picking the reader by extension.

    Raises:
        ConfigurationError: If the format is unknown, the file is missing,
            it does not decode, or its top level is not a mapping.
    """
    path = Path(path)
    reader = READERS.get(path.suffix.lower())
    if reader is None:
        raise ConfigurationError(f"Unsupported configuration format: {path.suffix or path.name}")
    if not path.is_file():
        raise ConfigurationError(f"Configuration file not found: {path}")

    try:
        data = reader(path)
    except _DECODE_ERRORS as e:
        raise ConfigurationError(f"Invalid configuration file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")
    return data


def find_config_file(
    search_paths: Optional[list[str]] = None,
    filename: str = DEFAULT_CONFIG_FILENAME,
) -> Optional[Path]:
    """First existing <dir>/<filename><ext>, directories searched in order."""
    for directory in search_paths or DEFAULT_CONFIG_SEARCH_PATHS:
        base = Path(directory).expanduser()
        for extension in DEFAULT_CONFIG_EXTENSIONS:
            candidate = base / f"{filename}{extension}"
            if candidate.is_file():
                return candidate
    return None


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge nested dictionaries into a new one; later values win.

    Inputs are left untouched.
    """
    merged: dict[str, Any] = {}
    for config in configs:
        for key, value in config.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = merge_configs(current, value)
            else:
                merged[key] = value
    return merged


class ConfigLoader:
    """Builds a LazyHydrateConfig from every configured source.

    Example:
        loader = ConfigLoader("lazy-hydrate.config.yaml")
        config = loader.load(overrides={"hydration": {"root_margin": 0}})
        dispatcher = HydrationDispatcher(document, config=config)
    """

    def __init__(
        self,
        config_file: Optional[PathLike] = None,
        search_paths: Optional[list[str]] = None,
        load_env: bool = True,
        auto_find: bool = True,
    ):
        """Initialize ConfigLoader.

        Args:
            config_file: Explicit file; disables the search when given.
            search_paths: Directories searched for lazy-hydrate.config.*.
            load_env: Whether LAZY_HYDRATE_* variables are applied.
            auto_find: Whether to search when no explicit file is given.
        """
        self.config_file = Path(config_file) if config_file else None
        self.search_paths = search_paths
        self.load_env = load_env
        self.auto_find = auto_find

    def resolve_file(self) -> Optional[Path]:
        if self.config_file is not None:
            return self.config_file
        if self.auto_find:
            return find_config_file(self.search_paths)
        return None

    def sources(self, overrides: Optional[dict[str, Any]] = None) -> list[dict[str, Any]]:
        """Configuration layers, lowest precedence first."""
        layers = []
        path = self.resolve_file()
        if path is not None:
            layers.append(load_file(path))
        if self.load_env:
            layers.append(load_env_config())
        if overrides:
            layers.append(overrides)
        return layers

    def load(self, overrides: Optional[dict[str, Any]] = None) -> LazyHydrateConfig:
        """Merge every layer and validate the result.

        Raises:
            ConfigurationError: If a file cannot be read or the merged
                values fail validation.
        """
        merged = merge_configs(*self.sources(overrides))
        try:
            return LazyHydrateConfig.model_validate(merged)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e


def load_config(
    config_file: Optional[PathLike] = None,
    overrides: Optional[dict[str, Any]] = None,
    load_env: bool = True,
) -> LazyHydrateConfig:
    """Shortcut for ConfigLoader(config_file, load_env=load_env).load(overrides)."""
    return ConfigLoader(config_file=config_file, load_env=load_env).load(overrides)


def _write_json(data: dict[str, Any], path: Path) -> None:
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")


def _write_yaml(data: dict[str, Any], path: Path) -> None:
    path.write_text(yaml.safe_dump(data, default_flow_style=False), encoding="utf-8")


WRITERS: dict[str, Callable[[dict[str, Any], Path], None]] = {
    "json": _write_json,
    "yaml": _write_yaml,
    "yml": _write_yaml,
}


def save_config(
    config: LazyHydrateConfig,
    path: PathLike,
    format: Optional[str] = None,
) -> None:
    """Write config as JSON or YAML.

    The format defaults to the file extension.

    Raises:
        ConfigurationError: If the format cannot be written.
    """
    path = Path(path)
    name = (format or path.suffix.lstrip(".")).lower()
    writer = WRITERS.get(name)
    if writer is None:
        raise ConfigurationError(f"Unsupported output format: {name or path.name}")
    writer(config.to_dict(), path)
