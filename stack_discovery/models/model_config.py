"""Configuration models for clients, scoring and discovery runs."""

import os
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from stack_discovery.consts import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CACHE_EXPIRY_SECONDS,
    DEFAULT_MAX_TOOLS_PER_SOURCE,
    DEFAULT_MIN_POPULARITY_THRESHOLD,
    ENV_DISCOVERY_SOURCES,
    USER_AGENT,
)
from stack_discovery.exceptions import ConfigurationError
from stack_discovery.models.model_tool import SourceType


class RateLimitConfig(BaseModel):
    """Sliding-window request budget for one client."""

    max_requests: int = Field(gt=0, description="Requests allowed per window")
    window_seconds: float = Field(gt=0.0, description="Window length in seconds")


class ClientConfig(BaseModel):
    """Connection settings for one external source."""

    base_url: str
    rate_limit: RateLimitConfig
    timeout_seconds: float = Field(default=10.0, gt=0.0)
    headers: dict[str, str] = Field(default_factory=lambda: {"User-Agent": USER_AGENT})
    api_key: str | None = Field(default=None, repr=False)


class ScoringWeights(BaseModel):
    """Signal weights for the popularity composite.

    All weights must sum to 1.0.
    """

    stars: float = Field(default=0.3, ge=0.0, le=1.0)
    forks: float = Field(default=0.15, ge=0.0, le=1.0)
    downloads: float = Field(default=0.3, ge=0.0, le=1.0)
    recency: float = Field(default=0.15, ge=0.0, le=1.0)
    documentation: float = Field(default=0.1, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def weights_sum_to_one(self) -> "ScoringWeights":
        """Validate that weights sum to 1.0."""
        total = self.stars + self.forks + self.downloads + self.recency + self.documentation
        if abs(total - 1.0) > 0.001:
            msg = f"Weights must sum to 1.0, got {total}"
            raise ValueError(msg)
        return self


def _default_enabled_sources() -> list[str]:
    """Sources from DISCOVERY_SOURCES (comma-separated), else every source."""
    env_sources = os.getenv(ENV_DISCOVERY_SOURCES, "").strip()
    if env_sources:
        return [s.strip().lower() for s in env_sources.split(",") if s.strip()]
    return [s.value for s in SourceType]


class DiscoveryConfig(BaseModel):
    """Plain-data knobs for a discovery run.

    Accepts camelCase keys (``maxToolsPerSource``) as well as snake_case.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    enabled_sources: list[SourceType] = Field(
        default_factory=_default_enabled_sources, min_length=1, validate_default=True
    )
    max_tools_per_source: int = Field(default=DEFAULT_MAX_TOOLS_PER_SOURCE, ge=1)
    min_popularity_threshold: float = Field(
        default=DEFAULT_MIN_POPULARITY_THRESHOLD, ge=0.0, le=100.0
    )
    include_prerelease: bool = False
    cache_expiry_seconds: int = Field(default=DEFAULT_CACHE_EXPIRY_SECONDS, ge=0)
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1)

    @classmethod
    def build(
        cls,
        overrides: "DiscoveryConfig | Mapping[str, Any] | None" = None,
        base: "DiscoveryConfig | None" = None,
    ) -> "DiscoveryConfig":
        """Merge partial overrides onto a base config, failing fast on bad values.

        Args:
            overrides: A full config, a partial mapping of fields, or None.
            base: Config to merge onto. Defaults to the built-in defaults.

        Returns:
            Validated DiscoveryConfig.

        Raises:
            ConfigurationError: If any merged field is invalid.
        """
        if isinstance(overrides, DiscoveryConfig):
            return overrides

        merged: dict[str, Any] = {}
        for key, value in (overrides or {}).items():
            field_name = _field_name_for(key)
            if field_name is None:
                raise ConfigurationError(f"Unknown discovery config field: {key!r}")
            merged[field_name] = value

        try:
            if base is None:
                return cls.model_validate(merged)
            return cls.model_validate({**base.model_dump(), **merged})
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"Invalid discovery config: {problems}") from e


def _field_name_for(key: str) -> str | None:
    """Resolve a snake_case name or camelCase alias to the field name."""
    for name, field in DiscoveryConfig.model_fields.items():
        if key in (name, field.alias):
            return name
    return None
