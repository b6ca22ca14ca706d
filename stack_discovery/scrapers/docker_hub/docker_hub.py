"""Docker Hub image search adapter.

Official images live under the ``library`` namespace.
"""

import logging
from datetime import datetime
from typing import Any

from stack_discovery.consts import (
    DOCKER_HUB_BASE_URL,
    DOCKER_HUB_MAX_REQUESTS,
    DOCKER_HUB_REPO_CACHE_TTL,
    DOCKER_HUB_SEARCH_CACHE_TTL,
    DOCKER_HUB_TIMEOUT_SECONDS,
    DOCKER_HUB_TRENDING_SEEDS,
    DOCKER_HUB_WINDOW_SECONDS,
    SEARCH_RESULTS_LIMIT,
)
from stack_discovery.models.model_config import ClientConfig, RateLimitConfig
from stack_discovery.models.model_tool import RawToolRecord, SourceType
from stack_discovery.scrapers.base_scraper import BaseSourceAdapter
from stack_discovery.scrapers.heuristics import (
    DifficultyVocabulary,
    LogSignal,
    TaxonomyBucket,
    categorize,
    estimate_popularity,
    parse_timestamp,
    vote_difficulty,
)

logger = logging.getLogger(__name__)

DOCKER_HUB_TAXONOMY = (
    TaxonomyBucket(
        "database",
        name_terms=("database", "postgres", "mysql", "mongo", "redis", "mariadb"),
    ),
    TaxonomyBucket(
        "infrastructure",
        name_terms=("web", "nginx", "apache", "traefik"),
        description_terms=("web server", "proxy"),
    ),
    TaxonomyBucket(
        "runtime",
        name_terms=("node", "python", "java", "golang", "ruby"),
        description_terms=("runtime",),
    ),
)
DOCKER_HUB_DEFAULT_CATEGORY = "container"

DOCKER_HUB_PULLS_SIGNAL = LogSignal(cap=50.0, full_at=1_000_000)
DOCKER_HUB_STARS_SIGNAL = LogSignal(cap=20.0, full_at=100)

DOCKER_HUB_DIFFICULTY = DifficultyVocabulary(
    expert=("alpine", "minimal", "advanced"),
    beginner=("official", "simple", "getting started"),
)


def _hub_url(name: str, is_official: bool) -> str:
    if is_official and "/" not in name:
        return f"https://hub.docker.com/_/{name}"
    return f"https://hub.docker.com/r/{name}"


class DockerHubAdapter(BaseSourceAdapter):
    """Docker Hub search adapter."""

    source_type = SourceType.DOCKER
    trending_seeds = tuple(DOCKER_HUB_TRENDING_SEEDS)

    def default_client_config(self) -> ClientConfig:
        return ClientConfig(
            base_url=DOCKER_HUB_BASE_URL,
            rate_limit=RateLimitConfig(
                max_requests=DOCKER_HUB_MAX_REQUESTS, window_seconds=DOCKER_HUB_WINDOW_SECONDS
            ),
            timeout_seconds=DOCKER_HUB_TIMEOUT_SECONDS,
        )

    async def search(self, query: str, limit: int = SEARCH_RESULTS_LIMIT) -> list[RawToolRecord]:
        data = await self.client.request(
            "/search/repositories/",
            params={"query": query, "page_size": limit, "page": 1},
            cache_key=f"docker-search-{query}-{limit}",
            cache_ttl=DOCKER_HUB_SEARCH_CACHE_TTL,
        )
        return self._transform_all((data or {}).get("results", [])[:limit])

    async def get_repository_info(self, namespace: str, repository: str) -> dict[str, Any]:
        return await self.client.request(
            f"/repositories/{namespace}/{repository}/",
            cache_key=f"docker-{namespace}-{repository}",
            cache_ttl=DOCKER_HUB_REPO_CACHE_TTL,
        )

    def transform_to_raw_record(
        self, native: dict[str, Any], now: datetime | None = None, **extra: Any
    ) -> RawToolRecord:
        name = native.get("repo_name") or native.get("name") or ""
        description = native.get("short_description") or native.get("description") or ""
        pulls = native.get("pull_count")
        stars = native.get("star_count")
        is_official = bool(native.get("is_official"))
        last_updated = parse_timestamp(native.get("last_updated"))
        hub_url = _hub_url(name, is_official)

        return RawToolRecord(
            name=name,
            description=description,
            category=categorize(
                DOCKER_HUB_TAXONOMY, DOCKER_HUB_DEFAULT_CATEGORY, name, description
            ),
            source_type=SourceType.DOCKER,
            source_id=name,
            source_url=hub_url,
            repository_url=native.get("source_url"),
            homepage_url=hub_url,
            docker_pulls=pulls,
            last_updated=last_updated,
            tags=["official"] if is_official else [],
            popularity_score=estimate_popularity(
                [(DOCKER_HUB_PULLS_SIGNAL, pulls), (DOCKER_HUB_STARS_SIGNAL, stars)],
                last_updated=last_updated,
                now=now,
            ),
            difficulty_level=vote_difficulty(DOCKER_HUB_DIFFICULTY, name, description),
            pricing_model="free",
            cost_category="free",
        )
