"""Fan-out over the enabled source adapters with per-source failure isolation."""

import asyncio
import logging
import os
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field

import httpx

from stack_discovery.consts import (
    ENV_DISCOVERY_SOURCES,
    SEARCH_RESULTS_LIMIT,
    TRENDING_RESULTS_LIMIT,
)
from stack_discovery.exceptions import AllSourcesFailedError, ConfigurationError, DiscoveryError
from stack_discovery.models.model_dto import SourceStatus
from stack_discovery.models.model_tool import RawToolRecord, SourceType
from stack_discovery.scrapers import (
    BaseSourceAdapter,
    DockerHubAdapter,
    GitHubAdapter,
    NpmAdapter,
    PyPIAdapter,
)
from stack_discovery.storage.cache.memory_cache import MemoryCache

logger = logging.getLogger(__name__)

ADAPTER_CLASSES: dict[SourceType, type[BaseSourceAdapter]] = {
    SourceType.NPM: NpmAdapter,
    SourceType.PYPI: PyPIAdapter,
    SourceType.GITHUB: GitHubAdapter,
    SourceType.DOCKER: DockerHubAdapter,
}


@dataclass
class AggregationResult:
    """Merged records plus the per-source outcome of one call."""

    records: list[RawToolRecord] = field(default_factory=list)
    statuses: list[SourceStatus] = field(default_factory=list)

    @property
    def failed_sources(self) -> list[str]:
        return [s.source for s in self.statuses if not s.ok]


def parse_source_types(values: Iterable[str | SourceType]) -> list[SourceType]:
    """Convert source names to SourceType, rejecting unknown names."""
    parsed: list[SourceType] = []
    for value in values:
        try:
            name = value.value if isinstance(value, SourceType) else str(value)
            source = SourceType(name.strip().lower())
        except ValueError as e:
            valid = ", ".join(s.value for s in SourceType)
            raise ConfigurationError(f"Unknown source {value!r} (valid: {valid})") from e
        if source not in parsed:
            parsed.append(source)
    return parsed


def resolve_enabled_sources(enabled_sources: Iterable[str | SourceType] | None) -> list[SourceType]:
    """Resolve enabled sources: explicit param > DISCOVERY_SOURCES env > all sources."""
    if enabled_sources is not None:
        return parse_source_types(enabled_sources)

    env_sources = os.getenv(ENV_DISCOVERY_SOURCES, "").strip()
    if env_sources:
        return parse_source_types(s for s in env_sources.split(",") if s.strip())
    return list(SourceType)


class SourceAggregator:
    """Runs adapter calls concurrently and merges their records.

    Each adapter runs as its own task. A failing adapter contributes no
    records and a failed SourceStatus; the call only fails when every
    queried source failed.
    """

    def __init__(
        self,
        adapters: list[BaseSourceAdapter] | None = None,
        enabled_sources: Iterable[str | SourceType] | None = None,
        github_token: str | None = None,
        cache_expiry_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the aggregator.

        Args:
            adapters: Pre-built adapters. When given, ``enabled_sources`` only
                      filters them.
            enabled_sources: Sources to build. None = read from env
                             (DISCOVERY_SOURCES), else all.
            github_token: GitHub API token. None = read from env (GITHUB_TOKEN).
            cache_expiry_seconds: Upper bound on every adapter cache TTL.
            transport: httpx transport shared by the built adapters.
        """
        sources = resolve_enabled_sources(enabled_sources)

        if adapters is not None:
            self._adapters = [a for a in adapters if a.source_type in sources]
        else:
            self._adapters = [
                self._build_adapter(source, github_token, cache_expiry_seconds, transport)
                for source in sources
            ]
        self._last_statuses: list[SourceStatus] = []
        logger.info(f"Aggregator: {len(self._adapters)} sources: {self.enabled_sources}")

    @staticmethod
    def _build_adapter(
        source: SourceType,
        github_token: str | None,
        cache_expiry_seconds: float | None,
        transport: httpx.AsyncBaseTransport | None,
    ) -> BaseSourceAdapter:
        cache = MemoryCache(max_ttl=cache_expiry_seconds)
        if source is SourceType.GITHUB:
            return GitHubAdapter(token=github_token, cache=cache, transport=transport)
        return ADAPTER_CLASSES[source](cache=cache, transport=transport)

    @property
    def adapters(self) -> list[BaseSourceAdapter]:
        return list(self._adapters)

    @property
    def enabled_sources(self) -> list[SourceType]:
        return [a.source_type for a in self._adapters]

    @property
    def last_statuses(self) -> list[SourceStatus]:
        """Per-source outcome of the most recent call."""
        return list(self._last_statuses)

    def _select(self, sources: Iterable[str | SourceType] | None) -> list[BaseSourceAdapter]:
        if sources is None:
            return list(self._adapters)
        wanted = parse_source_types(sources)
        return [a for a in self._adapters if a.source_type in wanted]

    async def _run_adapter(
        self,
        adapter: BaseSourceAdapter,
        call: Callable[[BaseSourceAdapter], Awaitable[list[RawToolRecord]]],
        operation: str,
    ) -> tuple[list[RawToolRecord], SourceStatus]:
        source = adapter.source_type.value
        started = time.monotonic()
        try:
            records = await call(adapter)
        except DiscoveryError as e:
            logger.error(f"{source}: {operation} failed: {e}")
            error = str(e)
        except Exception as e:
            logger.exception(f"{source}: unexpected error during {operation}")
            error = f"{type(e).__name__}: {e}"
        else:
            status = SourceStatus(
                source=source,
                ok=True,
                record_count=len(records),
                duration_seconds=time.monotonic() - started,
            )
            return records, status

        status = SourceStatus(
            source=source, ok=False, error=error, duration_seconds=time.monotonic() - started
        )
        return [], status

    async def _fan_out(
        self,
        adapters: list[BaseSourceAdapter],
        call: Callable[[BaseSourceAdapter], Awaitable[list[RawToolRecord]]],
        operation: str,
    ) -> AggregationResult:
        outcomes = await asyncio.gather(
            *(self._run_adapter(adapter, call, operation) for adapter in adapters)
        )

        result = AggregationResult()
        for records, status in outcomes:
            result.records.extend(records)
            result.statuses.append(status)
        self._last_statuses = list(result.statuses)

        if result.statuses and all(not s.ok for s in result.statuses):
            raise AllSourcesFailedError(
                operation, {s.source: s.error or "unknown error" for s in result.statuses}
            )
        return result

    async def discover_trending(
        self,
        categories: Iterable[str] | None = None,
        sources: Iterable[str | SourceType] | None = None,
        limit: int = TRENDING_RESULTS_LIMIT,
    ) -> AggregationResult:
        """Fetch trending records from every selected source.

        Args:
            categories: Keep only records whose adapter category is listed.
                        None or empty = keep everything.
            sources: Restrict to these sources. None = all enabled.
            limit: Per-source record cap.

        Raises:
            AllSourcesFailedError: If every queried source failed.
        """
        result = await self._fan_out(
            self._select(sources), lambda a: a.fetch_trending(limit), "trending discovery"
        )

        wanted = set(categories or [])
        if wanted:
            before = len(result.records)
            result.records = [r for r in result.records if r.category in wanted]
            logger.debug(f"Category filter kept {len(result.records)}/{before} records")

        logger.info(f"Trending discovery: {len(result.records)} records")
        return result

    async def search(
        self,
        query: str,
        source_types: Iterable[str | SourceType] | None = None,
        limit: int = SEARCH_RESULTS_LIMIT,
    ) -> AggregationResult:
        """Search the selected sources.

        Raises:
            AllSourcesFailedError: If every queried source failed.
        """
        result = await self._fan_out(
            self._select(source_types), lambda a: a.search(query, limit), "search"
        )
        logger.info(f"Search {query!r}: {len(result.records)} records")
        return result

    def clear_all_caches(self) -> None:
        for adapter in self._adapters:
            adapter.clear_cache()

    async def aclose(self) -> None:
        await asyncio.gather(*(adapter.aclose() for adapter in self._adapters))
