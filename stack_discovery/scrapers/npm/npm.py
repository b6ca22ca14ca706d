"""npm registry adapter.

Search goes through ``/-/v1/search``; weekly downloads come from the separate
downloads API, one lookup per result. A failed downloads lookup leaves the
count unknown instead of dropping the package.
"""

import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

from stack_discovery.consts import (
    NPM_BASE_URL,
    NPM_DOWNLOADS_CACHE_TTL,
    NPM_DOWNLOADS_URL,
    NPM_MAX_REQUESTS,
    NPM_PACKAGE_CACHE_TTL,
    NPM_SEARCH_CACHE_TTL,
    NPM_TIMEOUT_SECONDS,
    NPM_TRENDING_SEEDS,
    NPM_WINDOW_SECONDS,
    SEARCH_RESULTS_LIMIT,
)
from stack_discovery.exceptions import TransientSourceError
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
    split_keywords,
    vote_difficulty,
)

logger = logging.getLogger(__name__)

NPM_TAXONOMY = (
    TaxonomyBucket(
        "frontend",
        keywords=frozenset({"react", "vue", "angular", "frontend", "ui", "component"}),
        name_terms=("react", "vue", "angular"),
    ),
    TaxonomyBucket(
        "backend",
        keywords=frozenset({"express", "api", "server", "backend", "koa", "fastify"}),
        name_terms=("express", "api"),
        description_terms=("server",),
    ),
    TaxonomyBucket(
        "database",
        keywords=frozenset({"database", "db", "mongo", "sql", "orm"}),
        name_terms=("mongo", "sql"),
        description_terms=("database",),
    ),
    TaxonomyBucket(
        "devops",
        keywords=frozenset({"build", "webpack", "vite", "rollup", "babel", "eslint"}),
        name_terms=("webpack", "build"),
        description_terms=("build",),
    ),
    TaxonomyBucket(
        "testing",
        keywords=frozenset({"test", "testing", "jest", "mocha", "cypress"}),
        name_terms=("test",),
        description_terms=("test",),
    ),
)
NPM_DEFAULT_CATEGORY = "library"

NPM_DOWNLOADS_SIGNAL = LogSignal(cap=50.0, full_at=1_000_000)
# Packages hosted on GitHub get a flat bonus; stars need a separate API call.
NPM_GITHUB_REPO_BONUS = 10.0

NPM_DIFFICULTY = DifficultyVocabulary(
    expert=("webpack", "babel", "advanced", "complex", "compiler"),
    beginner=("simple", "easy", "beginner", "starter"),
)

# Keyword or name fragment -> framework tag
NPM_FRAMEWORK_MARKERS = {
    "react": "react",
    "vue": "vue",
    "angular": "angular",
    "node": "nodejs",
}


def _repository_url(package: dict[str, Any]) -> str | None:
    links = package.get("links") or {}
    if links.get("repository"):
        return links["repository"]
    repository = package.get("repository")
    if isinstance(repository, dict) and repository.get("url"):
        return repository["url"]
    if isinstance(repository, str) and repository:
        return repository
    return package.get("homepage") or links.get("homepage")


def _license_name(package: dict[str, Any]) -> str | None:
    license_info = package.get("license")
    if isinstance(license_info, dict):
        return license_info.get("type")
    return license_info or None


def _detect_frameworks(name: str, keywords: list[str]) -> list[str]:
    haystack = [name.lower(), *(k.lower() for k in keywords)]
    return [
        framework
        for marker, framework in NPM_FRAMEWORK_MARKERS.items()
        if any(marker in item for item in haystack)
    ]


class NpmAdapter(BaseSourceAdapter):
    """npm registry adapter."""

    source_type = SourceType.NPM
    trending_seeds = tuple(NPM_TRENDING_SEEDS)

    def default_client_config(self) -> ClientConfig:
        return ClientConfig(
            base_url=NPM_BASE_URL,
            rate_limit=RateLimitConfig(
                max_requests=NPM_MAX_REQUESTS, window_seconds=NPM_WINDOW_SECONDS
            ),
            timeout_seconds=NPM_TIMEOUT_SECONDS,
        )

    async def search(self, query: str, limit: int = SEARCH_RESULTS_LIMIT) -> list[RawToolRecord]:
        data = await self.client.request(
            "/-/v1/search",
            params={"text": query, "size": limit},
            cache_key=f"npm-search-{query}-{limit}",
            cache_ttl=NPM_SEARCH_CACHE_TTL,
        )

        records = []
        for obj in (data or {}).get("objects", [])[:limit]:
            package = obj.get("package") if isinstance(obj, dict) else None
            if not isinstance(package, dict):
                logger.warning("npm: search result without package payload, skipping")
                continue
            downloads = await self.get_weekly_downloads(package.get("name"))
            record = self._transform_one(package, downloads=downloads)
            if record is not None:
                records.append(record)
        return records

    async def get_package_info(self, package_name: str) -> dict[str, Any]:
        """Fetch the registry packument (all versions, dist-tags, time)."""
        return await self.client.request(
            f"/{quote(package_name, safe='@')}",
            cache_key=f"npm-{package_name}",
            cache_ttl=NPM_PACKAGE_CACHE_TTL,
        )

    async def get_weekly_downloads(self, package_name: str | None) -> int | None:
        """Weekly download count, or None when the lookup fails."""
        if not package_name:
            return None
        try:
            data = await self.client.request(
                f"{NPM_DOWNLOADS_URL}/last-week/{quote(package_name, safe='@')}",
                cache_key=f"npm-downloads-{package_name}-last-week",
                cache_ttl=NPM_DOWNLOADS_CACHE_TTL,
            )
        except TransientSourceError as e:
            logger.warning(f"npm: downloads lookup failed for {package_name}: {e}")
            return None
        downloads = (data or {}).get("downloads")
        return downloads if isinstance(downloads, int) else None

    def transform_to_raw_record(
        self,
        native: dict[str, Any],
        downloads: int | None = None,
        now: datetime | None = None,
        **extra: Any,
    ) -> RawToolRecord:
        name = native.get("name") or ""
        description = native.get("description") or ""
        keywords = split_keywords(native.get("keywords"))
        links = native.get("links") or {}
        homepage = native.get("homepage") or links.get("homepage")
        repository_url = _repository_url(native)
        time_info = native.get("time") or {}
        last_updated = parse_timestamp(
            native.get("date") or time_info.get("modified") or time_info.get("created")
        )

        popularity = estimate_popularity(
            [(NPM_DOWNLOADS_SIGNAL, downloads)], last_updated=last_updated, now=now
        )
        if repository_url and "github.com" in repository_url:
            popularity = min(100.0, popularity + NPM_GITHUB_REPO_BONUS)

        return RawToolRecord(
            name=name,
            description=description,
            category=categorize(NPM_TAXONOMY, NPM_DEFAULT_CATEGORY, name, description, keywords),
            source_type=SourceType.NPM,
            source_id=name,
            source_url=links.get("npm") or f"https://www.npmjs.com/package/{name}",
            repository_url=repository_url,
            documentation_url=homepage,
            homepage_url=homepage,
            npm_weekly_downloads=downloads,
            package_downloads=downloads,
            version=native.get("version") or (native.get("dist-tags") or {}).get("latest"),
            license=_license_name(native),
            last_updated=last_updated,
            languages=["javascript", "typescript"],
            frameworks=_detect_frameworks(name, keywords),
            tags=keywords,
            keywords=keywords,
            popularity_score=popularity,
            difficulty_level=vote_difficulty(NPM_DIFFICULTY, name, description, keywords),
            pricing_model="free",
            cost_category="free",
        )
