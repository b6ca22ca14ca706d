"""Canonical mapping from raw records to presentation DTOs."""

import re
import uuid
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from stack_discovery.consts import TRENDING_BADGE_THRESHOLD
from stack_discovery.exceptions import EngineInputError
from stack_discovery.models.model_dto import (
    Badges,
    DiscoveryToolDto,
    Provenance,
    TechStack,
    ToolMetrics,
)
from stack_discovery.models.model_tool import RawToolRecord

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase, collapse non-alphanumerics to single dashes."""
    return _SLUG_RE.sub("-", value.lower()).strip("-")


def _coerce(record: RawToolRecord | Mapping[str, Any]) -> RawToolRecord:
    if isinstance(record, RawToolRecord):
        return record
    try:
        return RawToolRecord.model_validate(dict(record))
    except ValidationError as e:
        raise EngineInputError(f"Invalid tool record: {e}") from e


def map_to_discovery_tool_dto(
    record: RawToolRecord | Mapping[str, Any],
    *,
    popularity: float | None = None,
    relevance: float | None = None,
) -> DiscoveryToolDto:
    """Build the canonical DTO for a record.

    ``id`` and ``slug`` depend only on (source_type, source_id). Without a
    source id a random suffix is generated, so those two fields differ
    between calls.

    Args:
        record: A RawToolRecord, or a mapping with snake_case or camelCase keys.
        popularity: Overrides the record's popularity (recommendations).
        relevance: Search relevance to expose in the metrics.

    Raises:
        EngineInputError: If a mapping cannot be validated as a record.
    """
    record = _coerce(record)
    source_type = record.source_type.value

    if record.source_id:
        source_id = record.source_id
        tool_id = f"{source_type}:{source_id}"
        slug = slugify(f"{source_id}-{source_type}")
    else:
        suffix = uuid.uuid4().hex
        source_id = suffix
        tool_id = f"{source_type}:{suffix}"
        slug = slugify(f"{record.name}-{suffix[:8]}-{source_type}")

    trending = record.trending_score or 0.0

    return DiscoveryToolDto(
        id=tool_id,
        slug=slug,
        name=record.name,
        description=record.description or None,
        category=record.category,
        sub_category=record.sub_category,
        version=record.version,
        license=record.license,
        provenance=Provenance(
            source_type=source_type,
            source_id=source_id,
            source_url=record.source_url,
            repository_url=record.repository_url,
            documentation_url=record.documentation_url,
            homepage_url=record.homepage_url,
        ),
        badges=Badges(
            pricing=record.pricing_model or "unknown",
            difficulty=record.difficulty_level.value if record.difficulty_level else None,
            is_trending_up=trending >= TRENDING_BADGE_THRESHOLD,
        ),
        metrics=ToolMetrics(
            github_stars=record.github_stars,
            github_forks=record.github_forks,
            weekly_downloads=(
                record.npm_weekly_downloads
                if record.npm_weekly_downloads is not None
                else record.package_downloads
            ),
            docker_pulls=record.docker_pulls,
            package_downloads=record.package_downloads,
            trending=trending,
            popularity=popularity if popularity is not None else record.popularity_score or 0.0,
            quality=record.quality_score or 0.0,
            estimated_monthly_cost=record.estimated_monthly_cost,
            relevance=relevance,
        ),
        tech=TechStack(
            languages=list(record.languages),
            frameworks=list(record.frameworks),
            tags=list(record.tags),
            keywords=list(record.keywords),
        ),
        evaluation=record.evaluation,
        discovered_at=record.discovered_at,
        last_updated=record.last_updated,
    )
