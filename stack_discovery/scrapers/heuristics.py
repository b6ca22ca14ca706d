"""Declarative per-source heuristics used while transforming native payloads.

Each adapter describes its short taxonomy, its popularity signals and its
difficulty vocabulary as data; the functions here evaluate them.
"""

import math
from dataclasses import dataclass, field
from datetime import UTC, datetime

from stack_discovery.models.model_tool import DifficultyLevel

RECENT_UPDATE_DAYS = 30
RECENT_UPDATE_BONUS = 10.0
STALE_UPDATE_DAYS = 90
STALE_UPDATE_BONUS = 5.0


@dataclass(frozen=True)
class TaxonomyBucket:
    """One bucket of a source's short taxonomy.

    A record lands in the bucket when any of its keywords equals one of
    ``keywords``, its name contains one of ``name_terms``, its description
    contains one of ``description_terms``, or its primary language is in
    ``languages``.
    """

    category: str
    keywords: frozenset[str] = frozenset()
    name_terms: tuple[str, ...] = ()
    description_terms: tuple[str, ...] = ()
    languages: frozenset[str] = frozenset()


@dataclass(frozen=True)
class LogSignal:
    """Log-scaled popularity points: ``cap`` points once the value reaches ``full_at``."""

    cap: float
    full_at: float

    def points(self, value: int | None) -> float:
        if not value or value <= 0:
            return 0.0
        return self.cap * min(1.0, math.log10(value + 1) / math.log10(self.full_at + 1))


@dataclass(frozen=True)
class DifficultyVocabulary:
    """Terms voting for the expert or beginner side."""

    expert: tuple[str, ...]
    beginner: tuple[str, ...]
    default: DifficultyLevel = field(default=DifficultyLevel.INTERMEDIATE)


def categorize(
    buckets: tuple[TaxonomyBucket, ...],
    default: str,
    name: str,
    description: str = "",
    keywords: list[str] | None = None,
    language: str | None = None,
) -> str:
    """Return the first bucket the record matches, else ``default``."""
    name = name.lower()
    description = (description or "").lower()
    lowered_keywords = {k.lower() for k in keywords or []}
    language = (language or "").lower()

    for bucket in buckets:
        if lowered_keywords & bucket.keywords:
            return bucket.category
        if any(term in name for term in bucket.name_terms):
            return bucket.category
        if any(term in description for term in bucket.description_terms):
            return bucket.category
        if language and language in bucket.languages:
            return bucket.category
    return default


def recency_bonus(last_updated: datetime | None, now: datetime | None = None) -> float:
    """+10 for updates within 30 days, +5 within 90 days, else 0."""
    if last_updated is None:
        return 0.0
    now = now or datetime.now(UTC)
    age_days = (now - last_updated).total_seconds() / 86400
    if age_days < RECENT_UPDATE_DAYS:
        return RECENT_UPDATE_BONUS
    if age_days < STALE_UPDATE_DAYS:
        return STALE_UPDATE_BONUS
    return 0.0


def estimate_popularity(
    signals: list[tuple[LogSignal, int | None]],
    last_updated: datetime | None = None,
    now: datetime | None = None,
    base: float = 0.0,
) -> float:
    """Sum log-scaled points for the metrics a source exposes, plus recency, capped at 100."""
    score = base + sum(signal.points(value) for signal, value in signals)
    score += recency_bonus(last_updated, now)
    return round(min(100.0, max(0.0, score)), 1)


def vote_difficulty(
    vocabulary: DifficultyVocabulary,
    name: str,
    description: str = "",
    keywords: list[str] | None = None,
) -> DifficultyLevel:
    """Count expert and beginner terms in the text; the side with more hits wins."""
    text = " ".join([name, description or "", *(keywords or [])]).lower()
    expert_votes = sum(1 for term in vocabulary.expert if term in text)
    beginner_votes = sum(1 for term in vocabulary.beginner if term in text)

    if expert_votes > beginner_votes:
        return DifficultyLevel.EXPERT
    if beginner_votes > expert_votes:
        return DifficultyLevel.BEGINNER
    return vocabulary.default


def parse_timestamp(value: object) -> datetime | None:
    """Parse an ISO-8601 timestamp from an API payload into an aware datetime."""
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def split_keywords(value: object) -> list[str]:
    """Normalize a keyword field that may be a list or a comma-separated string."""
    if isinstance(value, list):
        return [str(k).strip() for k in value if str(k).strip()]
    if isinstance(value, str):
        return [k.strip() for k in value.split(",") if k.strip()]
    return []
