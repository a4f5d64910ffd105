"""
Configuration options classes for lazy-hydrate.

This module provides strongly-typed option classes for hydration and
session configuration with validation and type checking.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator

from .defaults import (
    DEFAULT_FETCH_TIMEOUT,
    DEFAULT_HEADERS,
    DEFAULT_IDLE_DELAY,
    DEFAULT_IDLE_MARKER,
    DEFAULT_IMPERSONATE,
    DEFAULT_INTERACTION_EVENT,
    DEFAULT_INTERACTION_MARKER,
    DEFAULT_MANIFEST_ATTRIBUTE,
    DEFAULT_ROOT_MARGIN,
    DEFAULT_VERIFY_SSL,
    DEFAULT_VISIBILITY_MARKER,
)


class HydrationOptions(BaseModel):
    """Options controlling which elements hydrate and when."""

    idle_marker: str = Field(
        DEFAULT_IDLE_MARKER, min_length=1, description="Class selecting the idle gate"
    )
    interaction_marker: str = Field(
        DEFAULT_INTERACTION_MARKER,
        min_length=1,
        description="Class selecting the interaction gate",
    )
    visibility_marker: str = Field(
        DEFAULT_VISIBILITY_MARKER,
        min_length=1,
        description="Class selecting the visibility gate",
    )
    manifest_attribute: str = Field(
        DEFAULT_MANIFEST_ATTRIBUTE,
        min_length=1,
        description="Attribute holding the comma-separated resource URLs",
    )
    interaction_event: str = Field(
        DEFAULT_INTERACTION_EVENT,
        min_length=1,
        description="DOM event type that counts as an interaction",
    )
    root_margin: float = Field(
        DEFAULT_ROOT_MARGIN,
        ge=0,
        description="Viewport lookahead margin in pixels",
    )
    idle_delay: float = Field(
        DEFAULT_IDLE_DELAY,
        ge=0,
        description="Seconds the loop idle source waits before signalling",
    )
    base_url: Optional[str] = Field(
        None, description="Base URL for resolving relative manifest URLs"
    )

    @model_validator(mode="after")
    def check_distinct_markers(self) -> "HydrationOptions":
        """Each marker must select exactly one gate."""
        markers = [self.idle_marker, self.interaction_marker, self.visibility_marker]
        if len(set(markers)) != len(markers):
            raise ValueError(f"Trigger markers must be distinct: {markers}")
        return self

    @property
    def markers(self) -> list[str]:
        """Marker classes in idle, interaction, visibility order."""
        return [self.idle_marker, self.interaction_marker, self.visibility_marker]

    def merge(self, other: "HydrationOptions") -> "HydrationOptions":
        """Merge with another HydrationOptions, other takes precedence."""
        data = self.model_dump(exclude_none=True)
        data.update(other.model_dump(exclude_none=True, exclude_defaults=True))
        return HydrationOptions(**data)


class SessionOptions(BaseModel):
    """HTTP session options for resource fetches."""

    impersonate: Optional[str] = Field(
        DEFAULT_IMPERSONATE, description="Browser to impersonate (curl_cffi)"
    )
    timeout: Optional[float] = Field(
        DEFAULT_FETCH_TIMEOUT,
        gt=0,
        description="Request timeout in seconds; None waits indefinitely",
    )
    verify_ssl: bool = Field(DEFAULT_VERIFY_SSL, description="Verify SSL certificates")
    proxy: Optional[str] = Field(None, description="Proxy URL")
    headers: dict[str, str] = Field(
        default_factory=lambda: DEFAULT_HEADERS.copy(),
        description="Default request headers",
    )

    def merge(self, other: "SessionOptions") -> "SessionOptions":
        """Merge with another SessionOptions, other takes precedence."""
        data = self.model_dump(exclude_none=True)
        other_data = other.model_dump(exclude_none=True, exclude_defaults=True)
        # Merge headers specially
        if "headers" in other_data:
            data["headers"] = {**data.get("headers", {}), **other_data["headers"]}
            del other_data["headers"]
        data.update(other_data)
        return SessionOptions(**data)


class LazyHydrateConfig(BaseModel):
    """Main configuration class combining all options."""

    hydration: HydrationOptions = Field(
        default_factory=HydrationOptions, description="Hydration options"
    )
    session: SessionOptions = Field(
        default_factory=SessionOptions, description="Session options"
    )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LazyHydrateConfig":
        """Create configuration from dictionary."""
        return cls(**data)

    def merge(self, other: "LazyHydrateConfig") -> "LazyHydrateConfig":
        """Merge with another LazyHydrateConfig, other takes precedence."""
        return LazyHydrateConfig(
            hydration=self.hydration.merge(other.hydration),
            session=self.session.merge(other.session),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(exclude_none=True)
