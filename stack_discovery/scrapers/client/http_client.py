"""Rate-limited, cached JSON client shared by the source adapters."""

import logging
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from stack_discovery.consts import DEFAULT_CACHE_TTL
from stack_discovery.exceptions import (
    SourceConnectionError,
    SourceHTTPError,
    SourceRateLimitError,
    SourceTimeoutError,
)
from stack_discovery.models.model_config import ClientConfig
from stack_discovery.scrapers.client.rate_limiter import SlidingWindowRateLimiter
from stack_discovery.storage.cache.base import Cache
from stack_discovery.storage.cache.memory_cache import MemoryCache

logger = logging.getLogger(__name__)


def _parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header given as seconds or an HTTP date."""
    if not value:
        return None
    value = value.strip()
    try:
        return max(0.0, float(value))
    except ValueError:
        pass
    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=UTC)
    return max(0.0, (retry_at - datetime.now(UTC)).total_seconds())


class RateLimitedClient:
    """GET-only JSON client with a sliding-window budget and a TTL cache.

    Cache hits skip both the network and the limiter. Errors are translated
    into the ``TransientSourceError`` family; nothing is retried here.
    """

    def __init__(
        self,
        source: str,
        config: ClientConfig,
        limiter: SlidingWindowRateLimiter | None = None,
        cache: Cache | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            source: Source name used in logs, errors and as the cache category.
            config: Base URL, budget, timeout and default headers.
            limiter: Limiter to use. Built from ``config.rate_limit`` if omitted.
            cache: Response cache. A fresh MemoryCache if omitted.
            transport: Optional httpx transport, e.g. ``httpx.MockTransport``.
        """
        self.source = source
        self.config = config
        self.limiter = limiter or SlidingWindowRateLimiter(
            config.rate_limit.max_requests, config.rate_limit.window_seconds
        )
        self.cache = cache if cache is not None else MemoryCache()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json", **self.config.headers}
            if self.config.api_key:
                headers["Authorization"] = f"Bearer {self.config.api_key}"
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                timeout=httpx.Timeout(self.config.timeout_seconds),
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def request(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        cache_key: str | None = None,
        cache_ttl: float = DEFAULT_CACHE_TTL,
    ) -> Any:
        """GET ``endpoint`` and return the decoded JSON body.

        Args:
            endpoint: Path relative to the base URL, or an absolute URL.
            params: Query parameters.
            headers: Extra headers for this request.
            cache_key: When given, the response is cached under this key.
            cache_ttl: Seconds the cached response stays valid.

        Raises:
            SourceRateLimitError: On 429.
            SourceHTTPError: On any other non-2xx status.
            SourceTimeoutError: When the request exceeds the timeout.
            SourceConnectionError: On transport failures.
        """
        if cache_key is not None:
            cached = self.cache.get(cache_key, self.source)
            if cached is not None:
                logger.debug(f"Cache hit: {self.source} {cache_key}")
                return cached

        await self.limiter.acquire()
        client = await self._get_client()

        try:
            response = await client.get(endpoint, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise SourceTimeoutError(
                f"{self.source}: request to {endpoint} timed out after "
                f"{self.config.timeout_seconds}s",
                source=self.source,
            ) from e
        except httpx.TransportError as e:
            raise SourceConnectionError(
                f"{self.source}: request to {endpoint} failed: {e}", source=self.source
            ) from e

        if response.status_code == 429:
            retry_after = _parse_retry_after(response.headers.get("Retry-After"))
            logger.warning(f"{self.source}: rate limited (429), retry after {retry_after}")
            raise SourceRateLimitError(
                f"{self.source}: rate limited on {endpoint}",
                retry_after=retry_after,
                source=self.source,
            )
        if not response.is_success:
            raise SourceHTTPError(
                response.status_code,
                f"{self.source}: HTTP {response.status_code} for {endpoint}",
                source=self.source,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise SourceHTTPError(
                response.status_code,
                f"{self.source}: invalid JSON from {endpoint}",
                source=self.source,
            ) from e

        if cache_key is not None:
            self.cache.put(cache_key, data, self.source, ttl=cache_ttl)
        return data

    def clear_cache(self) -> None:
        """Discard every cached response of this client."""
        self.cache.clear(self.source)

    async def aclose(self) -> None:
        """Close the pooled HTTP connection."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
