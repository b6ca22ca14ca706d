"""Canonical, presentation-ready tool summaries and response envelopes."""

from datetime import datetime

from pydantic import BaseModel, Field

from stack_discovery.models.model_tool import ToolEvaluation


class Provenance(BaseModel):
    """Where a tool was discovered."""

    source_type: str
    source_id: str
    source_url: str | None = None
    repository_url: str | None = None
    documentation_url: str | None = None
    homepage_url: str | None = None


class Badges(BaseModel):
    """Short labels rendered next to a tool."""

    pricing: str = Field(default="unknown", description="Pricing tier or 'unknown'")
    difficulty: str | None = None
    is_trending_up: bool = False


class ToolMetrics(BaseModel):
    """Metrics bundle. Counts are None when the source does not expose them."""

    github_stars: int | None = None
    github_forks: int | None = None
    weekly_downloads: int | None = None
    docker_pulls: int | None = None
    package_downloads: int | None = None
    trending: float = 0.0
    popularity: float = 0.0
    quality: float = 0.0
    estimated_monthly_cost: float | None = None
    relevance: float | None = Field(default=None, description="Search relevance, search results only")


class TechStack(BaseModel):
    """Technology descriptors."""

    languages: list[str] = Field(default_factory=list)
    frameworks: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)


class DiscoveryToolDto(BaseModel):
    """Canonical tool summary handed to the web layer."""

    id: str = Field(description="'{source_type}:{source_id}'")
    slug: str
    name: str
    description: str | None = None
    category: str
    sub_category: str | None = None
    version: str | None = None
    license: str | None = None
    provenance: Provenance
    badges: Badges = Field(default_factory=Badges)
    metrics: ToolMetrics = Field(default_factory=ToolMetrics)
    tech: TechStack = Field(default_factory=TechStack)
    evaluation: ToolEvaluation | None = None
    discovered_at: datetime | None = None
    last_updated: datetime | None = None


class RecommendationsResponse(BaseModel):
    """Personalized recommendations with the reasoning behind them."""

    recommendations: list[DiscoveryToolDto] = Field(default_factory=list)
    reasoning: list[str] = Field(default_factory=list)
    based_on_stack: list[str] = Field(default_factory=list)
    confidence_score: float = Field(default=0.0, ge=0.0, le=100.0)
    categories: list[str] = Field(default_factory=list)


class SourceStatus(BaseModel):
    """Outcome of one source during an aggregated call."""

    source: str
    ok: bool
    record_count: int = Field(default=0, ge=0)
    error: str | None = None
    duration_seconds: float = Field(default=0.0, ge=0.0)
