"""PyPI adapter.

PyPI has no search API, so search is an exact project lookup of the query
and its normalized name; a 404 means no result.
"""

import logging
import re
from datetime import datetime
from typing import Any

from stack_discovery.consts import (
    PYPI_BASE_URL,
    PYPI_MAX_REQUESTS,
    PYPI_PACKAGE_CACHE_TTL,
    PYPI_TIMEOUT_SECONDS,
    PYPI_TRENDING_SEEDS,
    PYPI_WINDOW_SECONDS,
    SEARCH_RESULTS_LIMIT,
)
from stack_discovery.exceptions import SourceHTTPError
from stack_discovery.models.model_config import ClientConfig, RateLimitConfig
from stack_discovery.models.model_tool import RawToolRecord, SourceType
from stack_discovery.scrapers.base_scraper import BaseSourceAdapter
from stack_discovery.scrapers.heuristics import (
    DifficultyVocabulary,
    TaxonomyBucket,
    categorize,
    estimate_popularity,
    parse_timestamp,
    split_keywords,
    vote_difficulty,
)

logger = logging.getLogger(__name__)

PYPI_TAXONOMY = (
    TaxonomyBucket(
        "machine-learning",
        name_terms=("ml", "tensorflow", "torch"),
        description_terms=("machine learning", "neural"),
    ),
    TaxonomyBucket(
        "backend",
        name_terms=("django", "flask", "fastapi"),
        description_terms=("web framework",),
    ),
    TaxonomyBucket(
        "data-science",
        name_terms=("pandas", "numpy", "scipy"),
        description_terms=("data", "analysis"),
    ),
    TaxonomyBucket(
        "testing",
        name_terms=("test",),
        description_terms=("test",),
    ),
)
PYPI_DEFAULT_CATEGORY = "library"

# The JSON API exposes no download counts: every project starts from a base
# score and widely adopted names get a fixed bonus.
PYPI_BASE_POPULARITY = 20.0
PYPI_WELL_KNOWN_BONUS = 50.0
PYPI_WELL_KNOWN = frozenset({"requests", "numpy", "pandas", "flask", "django"})

PYPI_DIFFICULTY = DifficultyVocabulary(
    expert=("tensorflow", "torch", "advanced", "low-level"),
    beginner=("simple", "easy", "beginner"),
)

_NORMALIZE_RE = re.compile(r"[-_.]+")


def normalize_project_name(name: str) -> str:
    """PEP 503 normalized project name."""
    return _NORMALIZE_RE.sub("-", name).lower()


def _project_url(info: dict[str, Any], *labels: str) -> str | None:
    project_urls = info.get("project_urls") or {}
    lowered = {str(k).lower(): v for k, v in project_urls.items() if v}
    for label in labels:
        if label in lowered:
            return lowered[label]
    return None


def _release_timestamp(native: dict[str, Any], version: str | None) -> datetime | None:
    files = (native.get("releases") or {}).get(version or "") or native.get("urls") or []
    if not files:
        return None
    return parse_timestamp(files[0].get("upload_time_iso_8601"))


def _license_name(info: dict[str, Any]) -> str | None:
    license_text = info.get("license_expression") or info.get("license")
    if not license_text:
        return None
    # Some projects paste the whole license text into this field
    first_line = license_text.strip().splitlines()[0]
    return first_line[:100] or None


class PyPIAdapter(BaseSourceAdapter):
    """PyPI JSON API adapter."""

    source_type = SourceType.PYPI
    trending_seeds = tuple(PYPI_TRENDING_SEEDS)

    def default_client_config(self) -> ClientConfig:
        return ClientConfig(
            base_url=PYPI_BASE_URL,
            rate_limit=RateLimitConfig(
                max_requests=PYPI_MAX_REQUESTS, window_seconds=PYPI_WINDOW_SECONDS
            ),
            timeout_seconds=PYPI_TIMEOUT_SECONDS,
        )

    async def get_package_info(self, package_name: str) -> dict[str, Any]:
        """Fetch the project JSON document."""
        return await self.client.request(
            f"/{package_name}/json",
            cache_key=f"pypi-{package_name}",
            cache_ttl=PYPI_PACKAGE_CACHE_TTL,
        )

    async def _fetch_seed(self, seed: str) -> list[RawToolRecord]:
        record = self._transform_one(await self.get_package_info(seed))
        return [record] if record is not None else []

    async def search(self, query: str, limit: int = SEARCH_RESULTS_LIMIT) -> list[RawToolRecord]:
        query = query.strip()
        if not query:
            return []

        candidates = list(dict.fromkeys([query, normalize_project_name(query)]))
        records: list[RawToolRecord] = []
        seen: set[str] = set()
        for candidate in candidates:
            try:
                native = await self.get_package_info(candidate)
            except SourceHTTPError as e:
                if e.status_code == 404:
                    logger.debug(f"pypi: no project named {candidate!r}")
                    continue
                raise
            record = self._transform_one(native)
            if record is not None and normalize_project_name(record.name) not in seen:
                seen.add(normalize_project_name(record.name))
                records.append(record)
        return records[:limit]

    def transform_to_raw_record(
        self, native: dict[str, Any], now: datetime | None = None, **extra: Any
    ) -> RawToolRecord:
        info = native.get("info") or {}
        name = info.get("name") or ""
        summary = info.get("summary") or ""
        keywords = split_keywords(info.get("keywords"))
        version = info.get("version")
        last_updated = _release_timestamp(native, version)

        homepage = info.get("home_page") or _project_url(info, "homepage", "home")
        repository_url = (
            _project_url(info, "source", "source code", "repository", "github") or homepage
        )
        documentation_url = (
            info.get("docs_url") or _project_url(info, "documentation", "docs") or homepage
        )

        category = categorize(PYPI_TAXONOMY, PYPI_DEFAULT_CATEGORY, name, summary, keywords)
        if category == PYPI_DEFAULT_CATEGORY and any(
            "Framework ::" in c or "Internet :: WWW" in c for c in info.get("classifiers") or []
        ):
            category = "backend"

        base = PYPI_BASE_POPULARITY
        if name.lower() in PYPI_WELL_KNOWN:
            base += PYPI_WELL_KNOWN_BONUS

        return RawToolRecord(
            name=name,
            description=summary,
            category=category,
            source_type=SourceType.PYPI,
            source_id=name,
            source_url=info.get("package_url") or f"https://pypi.org/project/{name}/",
            repository_url=repository_url,
            documentation_url=documentation_url,
            homepage_url=homepage,
            version=version,
            license=_license_name(info),
            last_updated=last_updated,
            languages=["python"],
            tags=keywords,
            keywords=keywords,
            popularity_score=estimate_popularity(
                [], last_updated=last_updated, now=now, base=base
            ),
            difficulty_level=vote_difficulty(PYPI_DIFFICULTY, name, summary, keywords),
            pricing_model="free",
            cost_category="free",
        )
