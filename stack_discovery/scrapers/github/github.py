"""GitHub repository search adapter.

Trending is approximated per seed topic: repositories created in the last
week, sorted by stars. One extra seed pulls the most starred curated
"awesome" lists. A token raises the hourly budget from 60 to 5000.
"""

import logging
import os
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from stack_discovery.consts import (
    ENV_GITHUB_TOKEN,
    GITHUB_AWESOME_CACHE_TTL,
    GITHUB_AWESOME_PER_PAGE,
    GITHUB_AWESOME_QUERY,
    GITHUB_AWESOME_SEED,
    GITHUB_BASE_URL,
    GITHUB_MAX_REQUESTS_ANONYMOUS,
    GITHUB_MAX_REQUESTS_AUTHENTICATED,
    GITHUB_REPO_CACHE_TTL,
    GITHUB_SEARCH_CACHE_TTL,
    GITHUB_TIMEOUT_SECONDS,
    GITHUB_TRENDING_SEEDS,
    GITHUB_TRENDING_WINDOW_DAYS,
    GITHUB_WINDOW_SECONDS,
    SEARCH_RESULTS_LIMIT,
    TRENDING_RESULTS_PER_SEED,
    USER_AGENT,
)
from stack_discovery.models.model_config import ClientConfig, RateLimitConfig
from stack_discovery.models.model_tool import RawToolRecord, SourceType
from stack_discovery.scrapers.base_scraper import BaseSourceAdapter
from stack_discovery.scrapers.client.http_client import RateLimitedClient
from stack_discovery.scrapers.heuristics import (
    DifficultyVocabulary,
    LogSignal,
    TaxonomyBucket,
    categorize,
    estimate_popularity,
    parse_timestamp,
    vote_difficulty,
)
from stack_discovery.storage.cache.base import Cache

logger = logging.getLogger(__name__)

GITHUB_TAXONOMY = (
    TaxonomyBucket(
        "frontend",
        keywords=frozenset({"react", "vue", "angular", "frontend"}),
        name_terms=("ui",),
        description_terms=("frontend",),
    ),
    TaxonomyBucket(
        "backend",
        keywords=frozenset({"api", "backend"}),
        description_terms=("server", "api"),
        languages=frozenset({"go", "rust"}),
    ),
    TaxonomyBucket(
        "devops",
        keywords=frozenset({"devops", "kubernetes", "docker"}),
        name_terms=("deploy",),
        description_terms=("deployment",),
    ),
    TaxonomyBucket(
        "database",
        keywords=frozenset({"database"}),
        name_terms=("db",),
        description_terms=("database",),
    ),
    TaxonomyBucket(
        "machine-learning",
        keywords=frozenset({"machine-learning", "ai", "deep-learning"}),
        description_terms=("machine learning",),
    ),
)
GITHUB_DEFAULT_CATEGORY = "library"

GITHUB_STARS_SIGNAL = LogSignal(cap=50.0, full_at=10_000)
GITHUB_FORKS_SIGNAL = LogSignal(cap=20.0, full_at=1_000)

GITHUB_DIFFICULTY = DifficultyVocabulary(
    expert=("advanced", "expert", "complex", "low-level"),
    beginner=("beginner", "starter", "simple", "tutorial"),
)


class GitHubAdapter(BaseSourceAdapter):
    """GitHub search API adapter."""

    source_type = SourceType.GITHUB
    trending_seeds = tuple(GITHUB_TRENDING_SEEDS)

    def __init__(
        self,
        client: RateLimitedClient | None = None,
        *,
        token: str | None = None,
        cache: Cache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize GitHub adapter.

        Args:
            client: Pre-built client.
            token: API token. None = read from env (GITHUB_TOKEN).
            cache: Response cache for the created client.
            transport: httpx transport for the created client.
        """
        # Token resolution: explicit param > env var > anonymous
        self.token = token if token is not None else os.getenv(ENV_GITHUB_TOKEN) or None
        logger.info(f"GitHub adapter: {'authenticated' if self.token else 'anonymous'} access")
        super().__init__(client, cache=cache, transport=transport)

    def default_client_config(self) -> ClientConfig:
        max_requests = (
            GITHUB_MAX_REQUESTS_AUTHENTICATED if self.token else GITHUB_MAX_REQUESTS_ANONYMOUS
        )
        return ClientConfig(
            base_url=GITHUB_BASE_URL,
            rate_limit=RateLimitConfig(
                max_requests=max_requests, window_seconds=GITHUB_WINDOW_SECONDS
            ),
            timeout_seconds=GITHUB_TIMEOUT_SECONDS,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/vnd.github+json",
            },
            api_key=self.token,
        )

    async def search_repositories(
        self,
        query: str,
        per_page: int,
        cache_key: str,
        cache_ttl: float = GITHUB_SEARCH_CACHE_TTL,
    ) -> list[dict[str, Any]]:
        data = await self.client.request(
            "/search/repositories",
            params={"q": query, "sort": "stars", "order": "desc", "per_page": per_page},
            cache_key=cache_key,
            cache_ttl=cache_ttl,
        )
        return (data or {}).get("items", [])

    async def get_repository_info(self, owner: str, repo: str) -> dict[str, Any]:
        """Fetch one repository document."""
        return await self.client.request(
            f"/repos/{owner}/{repo}",
            cache_key=f"github-repo-{owner}-{repo}",
            cache_ttl=GITHUB_REPO_CACHE_TTL,
        )

    async def get_awesome_lists(self) -> list[dict[str, Any]]:
        """Most starred curated "awesome" repositories."""
        return await self.search_repositories(
            GITHUB_AWESOME_QUERY,
            per_page=GITHUB_AWESOME_PER_PAGE,
            cache_key="github-awesome-lists",
            cache_ttl=GITHUB_AWESOME_CACHE_TTL,
        )

    async def _fetch_seed(self, seed: str) -> list[RawToolRecord]:
        if seed == GITHUB_AWESOME_SEED:
            items = await self.get_awesome_lists()
            return self._transform_all(items[:TRENDING_RESULTS_PER_SEED])

        since = (datetime.now(UTC) - timedelta(days=GITHUB_TRENDING_WINDOW_DAYS)).date()
        items = await self.search_repositories(
            f"{seed} created:>{since.isoformat()}",
            per_page=TRENDING_RESULTS_PER_SEED,
            cache_key=f"github-trending-{seed}-{since.isoformat()}",
        )
        return self._transform_all(items)

    async def search(self, query: str, limit: int = SEARCH_RESULTS_LIMIT) -> list[RawToolRecord]:
        items = await self.search_repositories(
            query, per_page=min(limit, 100), cache_key=f"github-search-{query}-{limit}"
        )
        return self._transform_all(items[:limit])

    def transform_to_raw_record(
        self, native: dict[str, Any], now: datetime | None = None, **extra: Any
    ) -> RawToolRecord:
        name = native.get("name") or ""
        description = native.get("description") or ""
        topics = [t for t in native.get("topics") or [] if isinstance(t, str)]
        language = native.get("language")
        html_url = native.get("html_url")
        stars = native.get("stargazers_count")
        forks = native.get("forks_count")
        last_updated = parse_timestamp(native.get("pushed_at") or native.get("updated_at"))

        return RawToolRecord(
            name=name,
            description=description,
            category=categorize(
                GITHUB_TAXONOMY, GITHUB_DEFAULT_CATEGORY, name, description, topics, language
            ),
            source_type=SourceType.GITHUB,
            source_id=native.get("full_name"),
            source_url=html_url,
            repository_url=html_url,
            documentation_url=native.get("homepage") or html_url,
            homepage_url=native.get("homepage") or None,
            github_stars=stars,
            github_forks=forks,
            license=(native.get("license") or {}).get("name"),
            last_updated=last_updated,
            languages=[language.lower()] if language else [],
            tags=topics,
            keywords=topics,
            popularity_score=estimate_popularity(
                [(GITHUB_STARS_SIGNAL, stars), (GITHUB_FORKS_SIGNAL, forks)],
                last_updated=last_updated,
                now=now,
            ),
            difficulty_level=vote_difficulty(GITHUB_DIFFICULTY, name, description, topics),
            pricing_model="free",
            cost_category="free",
        )
