"""Ranking, relevance, deduplication and recommendation heuristics.

Everything here is pure and works on enriched records.
"""

import re
from collections import Counter
from collections.abc import Iterable, Sequence
from typing import Final

from stack_discovery.consts import RECOMMENDATION_REASONING_SAMPLE
from stack_discovery.models.model_tool import DifficultyLevel, RawToolRecord

QUALITY_RANK_WEIGHT: Final[float] = 0.3

# Relevance points
EXACT_NAME_POINTS: Final[float] = 100.0
NAME_CONTAINS_POINTS: Final[float] = 50.0
QUERY_CONTAINS_NAME_POINTS: Final[float] = 30.0
DESCRIPTION_POINTS: Final[float] = 20.0
KEYWORD_POINTS: Final[float] = 10.0
CATEGORY_POINTS: Final[float] = 15.0

# Recommendation multipliers
CATEGORY_BOOST: Final[float] = 1.3
LANGUAGE_BOOST: Final[float] = 1.2
TEAM_SIZE_BOOST: Final[float] = 1.1
INDUSTRY_BOOST: Final[float] = 1.15

HIGH_POPULARITY: Final[float] = 70.0
MAX_REASONS: Final[int] = 3

# Name fragment -> category, first match wins
STACK_CATEGORY_VOCABULARY: Final[tuple[tuple[str, tuple[str, ...]], ...]] = (
    ("frontend", ("react", "vue", "angular", "svelte")),
    ("backend", ("express", "fastify", "koa", "django", "flask")),
    ("database", ("postgres", "mysql", "mongo", "redis")),
    ("devops", ("docker", "kubernetes", "jenkins", "github")),
    ("testing", ("jest", "cypress", "mocha", "pytest")),
)
DEFAULT_STACK_CATEGORY: Final[str] = "library"

COMPLEMENTARY_CATEGORIES: Final[dict[str, tuple[str, ...]]] = {
    "frontend": ("testing", "devops", "monitoring"),
    "backend": ("database", "cache", "monitoring", "devops"),
    "database": ("backup", "monitoring", "analytics"),
    "devops": ("monitoring", "security", "testing"),
    "testing": ("monitoring", "devops"),
    "monitoring": ("analytics", "alerting"),
}

TEAM_SIZE_DIFFICULTY: Final[dict[str, DifficultyLevel]] = {
    "solo": DifficultyLevel.BEGINNER,
    "small": DifficultyLevel.BEGINNER,
    "medium": DifficultyLevel.INTERMEDIATE,
    "large": DifficultyLevel.EXPERT,
    "enterprise": DifficultyLevel.EXPERT,
}

INDUSTRY_KEYWORDS: Final[dict[str, frozenset[str]]] = {
    "fintech": frozenset({"security", "crypto", "payment", "financial"}),
    "healthcare": frozenset({"health", "medical", "hipaa", "fhir", "security"}),
    "ecommerce": frozenset({"payment", "commerce", "cart", "checkout", "shop"}),
    "gaming": frozenset({"game", "graphics", "multiplayer", "realtime"}),
    "media": frozenset({"video", "audio", "streaming", "image"}),
}

PRERELEASE_RE: Final = re.compile(
    r"^v?\d+(?:\.\d+)*(?:-[0-9a-z.-]+|\.?(?:alpha|beta|pre|rc|dev|a|b)\.?\d*)", re.IGNORECASE
)


def score_of(value: float | None) -> float:
    return value if value is not None else 0.0


def combined_score(record: RawToolRecord) -> float:
    """Trending sort key: popularity plus 0.3 x quality."""
    return score_of(record.popularity_score) + score_of(record.quality_score) * QUALITY_RANK_WEIGHT


def is_prerelease(version: str | None) -> bool:
    """True for versions like ``1.0.0-beta.1`` or ``2.0rc1``."""
    return bool(version) and PRERELEASE_RE.match(version.strip()) is not None


def deduplicate(records: Iterable[RawToolRecord]) -> list[RawToolRecord]:
    """Collapse records sharing (lowercased name, source type); first one wins."""
    seen: set[tuple[str, str]] = set()
    unique: list[RawToolRecord] = []
    for record in records:
        if record.dedup_key not in seen:
            seen.add(record.dedup_key)
            unique.append(record)
    return unique


def rank_trending(
    records: Iterable[RawToolRecord], min_popularity: float, limit: int
) -> list[RawToolRecord]:
    """Drop records under the popularity floor, sort by combined score, truncate."""
    kept = [r for r in records if score_of(r.popularity_score) >= min_popularity]
    return sorted(kept, key=combined_score, reverse=True)[:limit]


def relevance_score(record: RawToolRecord, query: str) -> float:
    """Text relevance of a record for a free-text query."""
    query = query.strip().lower()
    if not query:
        return 0.0
    name = record.name.lower()

    score = 0.0
    if name == query:
        score += EXACT_NAME_POINTS
    elif query in name:
        score += NAME_CONTAINS_POINTS
    elif name in query:
        score += QUERY_CONTAINS_NAME_POINTS

    if query in record.description.lower():
        score += DESCRIPTION_POINTS

    for keyword in record.keywords:
        keyword = keyword.lower()
        if query in keyword or keyword in query:
            score += KEYWORD_POINTS

    if query in record.category.lower():
        score += CATEGORY_POINTS
    return score


def rank_search(
    records: Iterable[RawToolRecord], query: str, limit: int
) -> list[tuple[RawToolRecord, float]]:
    """Sort by relevance, then popularity, both descending."""
    scored = [(record, relevance_score(record, query)) for record in records]
    scored.sort(key=lambda pair: (pair[1], score_of(pair[0].popularity_score)), reverse=True)
    return scored[:limit]


def infer_stack_category(tool_name: str) -> str:
    """Guess the category of a tool the user already runs from its name."""
    name = tool_name.lower()
    for category, fragments in STACK_CATEGORY_VOCABULARY:
        if any(fragment in name for fragment in fragments):
            return category
    return DEFAULT_STACK_CATEGORY


def complementary_categories(user_stack: Iterable[str]) -> list[str]:
    """Categories that pair well with the user's stack, in first-seen order."""
    result: dict[str, None] = {}
    for tool in user_stack:
        for category in COMPLEMENTARY_CATEGORIES.get(infer_stack_category(tool), ()):
            result.setdefault(category)
    return list(result)


def matches_languages(record: RawToolRecord, user_languages: Sequence[str]) -> bool:
    wanted = [lang.lower() for lang in user_languages if lang]
    return any(u in lang.lower() for lang in record.languages for u in wanted)


def context_score(
    record: RawToolRecord,
    user_categories: Sequence[str],
    user_languages: Sequence[str],
    team_size: str | None = None,
    industry: str | None = None,
) -> float:
    """Popularity adjusted to the user's context. Not clamped."""
    score = score_of(record.popularity_score)

    if record.category in user_categories:
        score *= CATEGORY_BOOST

    if matches_languages(record, user_languages):
        score *= LANGUAGE_BOOST

    preferred = TEAM_SIZE_DIFFICULTY.get((team_size or "").lower())
    if preferred is not None and record.difficulty_level == preferred:
        score *= TEAM_SIZE_BOOST

    industry_terms = INDUSTRY_KEYWORDS.get((industry or "").lower())
    if industry_terms and any(k.lower() in industry_terms for k in record.keywords):
        score *= INDUSTRY_BOOST
    return score


def recommendation_reasoning(
    ranked: Sequence[tuple[RawToolRecord, float]], user_stack: Sequence[str]
) -> list[str]:
    """Up to three human-readable reasons for the recommendation set."""
    sample = ranked[:RECOMMENDATION_REASONING_SAMPLE]
    reasons: list[str] = []

    if sample:
        top, top_score = sample[0]
        reasons.append(
            f"{top.name} is trending in {top.category} with a popularity score of "
            f"{min(100.0, top_score):.1f}"
        )

        category, count = Counter(record.category for record, _ in sample).most_common(1)[0]
        reasons.append(
            f"{count} tools recommended in {category} category based on your preferences"
        )

    if user_stack:
        reasons.append(
            f"Recommendations complement your existing stack: {', '.join(user_stack[:3])}"
        )
    return reasons[:MAX_REASONS]


def confidence_score(ranked: Sequence[tuple[RawToolRecord, float]], user_stack: Sequence[str]) -> float:
    """Fixed heuristic in [0, 100]; 0 when there are no candidates."""
    if not ranked:
        return 0.0

    confidence = 50.0
    high = sum(1 for _, score in ranked if min(100.0, score) > HIGH_POPULARITY)
    confidence += min(30, high * 3)
    confidence += min(20, len({record.category for record, _ in ranked}) * 2)
    if len(user_stack) > 3:
        confidence += 10
    return min(100.0, confidence)
