from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from stack_discovery.models.common import _utc_now


class SourceType(str, Enum):
    """Supported discovery sources."""

    NPM = "npm"
    PYPI = "pypi"
    GITHUB = "github"
    DOCKER = "docker"


class DifficultyLevel(str, Enum):
    """Learning-curve estimate for a tool."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class PricingModel(str, Enum):
    """Pricing tiers produced by cost estimation."""

    FREE = "free"
    FREEMIUM = "freemium"
    PAID = "paid"
    ENTERPRISE = "enterprise"


class ToolEvaluation(BaseModel):
    """A user's evaluation attached to a discovered tool by the surrounding layer."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    user_id: str | None = None
    discovered_tool_id: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5, description="1-5 stars")
    notes: str | None = None
    status: str = Field(
        default="evaluating",
        description="'evaluating' | 'approved' | 'rejected' | 'added_to_stack'",
    )
    integration_complexity: str | None = Field(default=None, description="'low' | 'medium' | 'high'")
    estimated_implementation_time: str | None = None
    compatibility_notes: str | None = None
    decision_reason: str | None = None
    alternative_tools: list[str] = Field(default_factory=list)
    evaluated_at: datetime | None = None
    updated_at: datetime | None = None


class RawToolRecord(BaseModel):
    """Source-agnostic tool record produced by an adapter, before enrichment.

    Field names are snake_case; camelCase aliases (``sourceType``,
    ``githubStars``...) are accepted so records from the web layer validate as-is.
    Metric counts stay ``None`` when the source does not expose them.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Identification
    name: str = Field(min_length=1, description="Display name from source")
    description: str = Field(default="", description="Short description from source")
    category: str = Field(default="library", description="Category guessed by the adapter")
    sub_category: str | None = None
    source_type: SourceType = Field(description="Source platform")
    source_id: str | None = Field(
        default=None, description="Package name, repository path or image name"
    )

    # Links
    source_url: str | None = None
    repository_url: str | None = None
    documentation_url: str | None = None
    homepage_url: str | None = None

    # Technology
    languages: list[str] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)

    # Raw metrics
    github_stars: int | None = Field(default=None, ge=0)
    github_forks: int | None = Field(default=None, ge=0)
    npm_weekly_downloads: int | None = Field(default=None, ge=0)
    docker_pulls: int | None = Field(default=None, ge=0)
    package_downloads: int | None = Field(default=None, ge=0)

    # Metadata
    license: str | None = None
    version: str | None = None
    last_updated: datetime | None = None
    discovered_at: datetime = Field(default_factory=_utc_now)

    # Scores (adapter estimate, replaced by enrichment)
    popularity_score: float | None = Field(default=None, ge=0.0)
    trending_score: float | None = Field(default=None, ge=0.0)
    quality_score: float | None = Field(default=None, ge=0.0, le=100.0)
    difficulty_level: DifficultyLevel | None = None

    # Cost
    pricing_model: str | None = None
    cost_category: str | None = None
    estimated_monthly_cost: float | None = Field(default=None, ge=0.0)

    evaluation: ToolEvaluation | None = None

    @field_validator("languages", "frameworks", "tags", "keywords", mode="before")
    @classmethod
    def _drop_empty_entries(cls, value: object) -> object:
        """Treat None as an empty list and drop blank entries."""
        if value is None:
            return []
        if isinstance(value, list | tuple):
            return [item for item in value if isinstance(item, str) and item.strip()]
        return value

    @field_validator("name", "source_id", "description", mode="before")
    @classmethod
    def _blank_to_default(cls, value: object, info: ValidationInfo) -> object:
        """Blank strings carry no information."""
        if isinstance(value, str) and not value.strip():
            return "" if info.field_name == "description" else None
        if value is None and info.field_name == "description":
            return ""
        return value

    @field_validator("last_updated", "discovered_at", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        """Naive timestamps are taken as UTC."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @property
    def dedup_key(self) -> tuple[str, str]:
        """Key used to collapse the same tool reported twice by one source."""
        return self.name.lower(), self.source_type.value
