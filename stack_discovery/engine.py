"""Discovery engine: enrichment, ranking and recommendation over aggregated sources.

Flow for every call:
1. Aggregate raw records from the enabled sources
2. Enrich each record (category, popularity, quality, difficulty, cost)
3. Filter pre-releases and deduplicate
4. Rank for the call (trending, search or recommendations)
5. Map to DTOs
"""

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

import httpx

from stack_discovery import ranking
from stack_discovery.aggregator import SourceAggregator, parse_source_types
from stack_discovery.categorization.category_rules import CategoryRule
from stack_discovery.categorization.classifier import CategoryClassifier
from stack_discovery.consts import RECOMMENDATION_LIMIT
from stack_discovery.evaluators.base import BaseEvaluator
from stack_discovery.evaluators.cost import estimate_cost
from stack_discovery.evaluators.difficulty import assess_difficulty
from stack_discovery.evaluators.popularity import PopularityEvaluator
from stack_discovery.evaluators.quality import QualityEvaluator
from stack_discovery.exceptions import EngineInputError
from stack_discovery.mapping import map_to_discovery_tool_dto
from stack_discovery.models.model_config import DiscoveryConfig, ScoringWeights
from stack_discovery.models.model_dto import (
    DiscoveryToolDto,
    RecommendationsResponse,
    SourceStatus,
)
from stack_discovery.models.model_tool import RawToolRecord, SourceType

logger = logging.getLogger(__name__)

ConfigOverrides = DiscoveryConfig | Mapping[str, Any] | None


class DiscoveryEngine:
    """Top-level entry point for trending, search and recommendations.

    The engine owns its aggregator unless one is injected. Use it as an async
    context manager, or call :meth:`aclose`, to release HTTP connections.
    """

    def __init__(
        self,
        config: ConfigOverrides = None,
        aggregator: SourceAggregator | None = None,
        github_token: str | None = None,
        category_rules: Sequence[CategoryRule] | None = None,
        weights: ScoringWeights | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the engine.

        Args:
            config: Default discovery config, full or partial.
            aggregator: Pre-built aggregator. Built from ``config`` if omitted.
            github_token: GitHub token for the built aggregator. None = env.
            category_rules: Rule set for reclassification. Defaults to the
                            built-in rules.
            weights: Popularity signal weights.
            transport: httpx transport for the built aggregator.

        Raises:
            ConfigurationError: If the config is invalid.
        """
        self.config = DiscoveryConfig.build(config)
        self.aggregator = aggregator or SourceAggregator(
            enabled_sources=self.config.enabled_sources,
            github_token=github_token,
            cache_expiry_seconds=self.config.cache_expiry_seconds,
            transport=transport,
        )
        self.classifier = CategoryClassifier(category_rules)
        self.popularity: BaseEvaluator = PopularityEvaluator(weights)
        self.quality: BaseEvaluator = QualityEvaluator()

    async def __aenter__(self) -> "DiscoveryEngine":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.aggregator.aclose()

    def clear_caches(self) -> None:
        self.aggregator.clear_all_caches()

    @property
    def last_source_statuses(self) -> list[SourceStatus]:
        """Per-source outcome of the most recent call."""
        return self.aggregator.last_statuses

    def enrich_record(self, record: RawToolRecord, now: datetime | None = None) -> RawToolRecord:
        """Return a copy of the record with engine scores applied.

        Category, popularity, quality, difficulty and cost are recomputed.
        The adapter's own trending estimate is kept.
        """
        now = now or datetime.now(UTC)
        cost = estimate_cost(record)
        return record.model_copy(
            update={
                "category": self.classifier.classify(record),
                "popularity_score": self.popularity.evaluate(record, now),
                "quality_score": self.quality.evaluate(record, now),
                "difficulty_level": assess_difficulty(record),
                "pricing_model": cost.pricing_model.value,
                "estimated_monthly_cost": cost.estimated_monthly_cost,
                "cost_category": cost.cost_category,
            }
        )

    def _prepare(
        self, records: Iterable[RawToolRecord], config: DiscoveryConfig
    ) -> list[RawToolRecord]:
        """Enrich, drop pre-releases when configured, deduplicate."""
        now = datetime.now(UTC)
        enriched = [self.enrich_record(record, now) for record in records]

        if not config.include_prerelease:
            before = len(enriched)
            enriched = [r for r in enriched if not ranking.is_prerelease(r.version)]
            if len(enriched) != before:
                logger.debug(f"Dropped {before - len(enriched)} pre-release records")

        return ranking.deduplicate(enriched)

    async def _trending_records(
        self,
        config: DiscoveryConfig,
        categories: Sequence[str] | None,
        keep: Callable[[RawToolRecord], bool] | None = None,
    ) -> list[RawToolRecord]:
        """Fetch, optionally filter on source metadata, then enrich and rank.

        ``keep`` sees the records as the adapters built them, before the
        classifier replaces their category.
        """
        result = await self.aggregator.discover_trending(
            categories=categories,
            sources=config.enabled_sources,
            limit=config.batch_size,
        )
        records = result.records
        if keep is not None:
            records = [r for r in records if keep(r)]
        prepared = self._prepare(records, config)
        return ranking.rank_trending(
            prepared, config.min_popularity_threshold, config.max_tools_per_source
        )

    async def discover_trending_tools(
        self,
        config: ConfigOverrides = None,
        categories: Sequence[str] | None = None,
    ) -> list[DiscoveryToolDto]:
        """Trending tools across the enabled sources, best first.

        Args:
            config: Per-call overrides merged onto the engine config.
            categories: Keep only records whose source category is listed.

        Raises:
            ConfigurationError: If the merged config is invalid.
            AllSourcesFailedError: If every source failed.
        """
        final_config = DiscoveryConfig.build(config, base=self.config)
        logger.info(f"Discovering trending tools (categories={list(categories or [])})")

        records = await self._trending_records(final_config, categories)
        logger.info(f"Discovered {len(records)} trending tools")
        return [map_to_discovery_tool_dto(record) for record in records]

    async def search_tools(
        self,
        query: str,
        source_types: Iterable[str | SourceType] | None = None,
        config: ConfigOverrides = None,
    ) -> list[DiscoveryToolDto]:
        """Search the selected sources and rank by relevance, then popularity.

        Raises:
            EngineInputError: If the query is blank.
            ConfigurationError: If the merged config or a source name is invalid.
            AllSourcesFailedError: If every queried source failed.
        """
        if not query or not query.strip():
            raise EngineInputError("Search query must not be empty")
        final_config = DiscoveryConfig.build(config, base=self.config)

        allowed = set(final_config.enabled_sources)
        if source_types is not None:
            allowed &= set(parse_source_types(source_types))
        selected = [s for s in final_config.enabled_sources if s in allowed]

        logger.info(f"Searching {query!r} in {[s.value for s in selected]}")
        if not selected:
            return []

        result = await self.aggregator.search(query, source_types=selected)
        prepared = self._prepare(result.records, final_config)
        ranked = ranking.rank_search(prepared, query, final_config.max_tools_per_source)

        logger.info(f"Found {len(ranked)} tools for query: {query}")
        return [map_to_discovery_tool_dto(record, relevance=score) for record, score in ranked]

    async def generate_recommendations(
        self,
        user_stack: Sequence[str],
        user_categories: Sequence[str],
        user_languages: Sequence[str],
        team_size: str | None = None,
        industry: str | None = None,
    ) -> RecommendationsResponse:
        """Recommend tools for a user's stack, preferences and context.

        Candidates are trending tools in the preferred categories plus the
        categories complementing the stack. Complementary-only candidates
        must match one of the user's languages when languages are given.

        Raises:
            AllSourcesFailedError: If every source failed.
        """
        user_stack = list(user_stack)
        user_categories = list(user_categories)
        user_languages = list(user_languages)

        complementary = ranking.complementary_categories(user_stack)
        targets = list(dict.fromkeys([*user_categories, *complementary]))
        logger.info(
            f"Generating recommendations (stack={user_stack}, categories={targets}, "
            f"languages={user_languages}, team_size={team_size}, industry={industry})"
        )

        def keep(record: RawToolRecord) -> bool:
            # Source category: the one the candidates were selected by
            return (
                record.category in user_categories
                or record.category not in complementary
                or ranking.matches_languages(record, user_languages)
            )

        candidates = await self._trending_records(
            self.config, targets or None, keep if user_languages else None
        )

        scored = [
            (r, ranking.context_score(r, user_categories, user_languages, team_size, industry))
            for r in candidates
        ]
        scored.sort(key=lambda pair: pair[1], reverse=True)
        top = scored[:RECOMMENDATION_LIMIT]

        return RecommendationsResponse(
            recommendations=[
                map_to_discovery_tool_dto(record, popularity=round(min(100.0, score), 1))
                for record, score in top
            ],
            reasoning=ranking.recommendation_reasoning(scored, user_stack),
            based_on_stack=user_stack,
            confidence_score=ranking.confidence_score(scored, user_stack),
            categories=list(dict.fromkeys(record.category for record, _ in top)),
        )
