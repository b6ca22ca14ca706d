"""Base adapter abstract class defining the source adapter contract."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any

import httpx
from pydantic import ValidationError

from stack_discovery.consts import (
    SEARCH_RESULTS_LIMIT,
    TRENDING_RESULTS_LIMIT,
    TRENDING_RESULTS_PER_SEED,
)
from stack_discovery.exceptions import TransientSourceError
from stack_discovery.models.model_config import ClientConfig
from stack_discovery.models.model_tool import RawToolRecord, SourceType
from stack_discovery.scrapers.client.http_client import RateLimitedClient
from stack_discovery.storage.cache.base import Cache

logger = logging.getLogger(__name__)


class BaseSourceAdapter(ABC):
    """Abstract base class for all source adapters.

    An adapter owns one RateLimitedClient and turns the source's native
    payloads into RawToolRecord objects. Item-level problems are logged and
    skipped; client-level failures propagate.
    """

    source_type: SourceType
    trending_seeds: tuple[str, ...] = ()

    def __init__(
        self,
        client: RateLimitedClient | None = None,
        *,
        cache: Cache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the adapter.

        Args:
            client: Pre-built client. When omitted, one is created from
                    ``default_client_config()``.
            cache: Response cache for the created client.
            transport: httpx transport for the created client.
        """
        self.client = client or RateLimitedClient(
            self.source_type.value,
            self.default_client_config(),
            cache=cache,
            transport=transport,
        )

    @abstractmethod
    def default_client_config(self) -> ClientConfig:
        """Base URL, request budget and timeout of the source."""
        ...

    @abstractmethod
    def transform_to_raw_record(self, native: dict[str, Any], **extra: Any) -> RawToolRecord:
        """Map one native payload to a RawToolRecord. Pure.

        Raises:
            ValidationError: If the payload lacks a usable name.
        """
        ...

    @abstractmethod
    async def search(self, query: str, limit: int = SEARCH_RESULTS_LIMIT) -> list[RawToolRecord]:
        """Query the source's native search or lookup endpoint."""
        ...

    async def _fetch_seed(self, seed: str) -> list[RawToolRecord]:
        """Records contributed by one trending seed term."""
        return await self.search(seed, TRENDING_RESULTS_PER_SEED)

    async def fetch_trending(self, limit: int = TRENDING_RESULTS_LIMIT) -> list[RawToolRecord]:
        """Fan the seed terms through the source and return at most ``limit`` records.

        A failing seed is logged and skipped. If no seed succeeds, the last
        error is raised so the source is reported as failed, not empty.
        """
        records: list[RawToolRecord] = []
        last_error: TransientSourceError | None = None
        succeeded = 0

        for seed in self.trending_seeds:
            if len(records) >= limit:
                break
            try:
                batch = await self._fetch_seed(seed)
            except TransientSourceError as e:
                logger.warning(f"{self.source_type.value}: trending seed {seed!r} failed: {e}")
                last_error = e
                continue
            succeeded += 1
            records.extend(batch)

        if succeeded == 0 and last_error is not None:
            raise last_error

        logger.info(f"{self.source_type.value}: {len(records[:limit])} trending records")
        return records[:limit]

    def _transform_all(self, natives: Iterable[Any], **extra: Any) -> list[RawToolRecord]:
        """Transform a batch, dropping payloads that cannot become records."""
        records = []
        for native in natives:
            record = self._transform_one(native, **extra)
            if record is not None:
                records.append(record)
        return records

    def _transform_one(self, native: Any, **extra: Any) -> RawToolRecord | None:
        if not isinstance(native, dict):
            logger.warning(f"{self.source_type.value}: skipping non-object payload")
            return None
        try:
            return self.transform_to_raw_record(native, **extra)
        except ValidationError as e:
            logger.warning(
                f"{self.source_type.value}: dropping malformed record "
                f"{native.get('name')!r}: {e.error_count()} validation error(s)"
            )
            return None

    def clear_cache(self) -> None:
        """Discard cached responses."""
        self.client.clear_cache()

    async def aclose(self) -> None:
        """Release the HTTP connection pool."""
        await self.client.aclose()
