"""In-process TTL cache used by the rate-limited clients."""

import logging
import time
from collections.abc import Callable
from typing import Any, NamedTuple

from stack_discovery.consts import DEFAULT_CACHE_TTL
from stack_discovery.storage.cache.base import Cache

logger = logging.getLogger(__name__)


class _Entry(NamedTuple):
    value: Any
    expires_at: float


class MemoryCache(Cache):
    """Dictionary-backed cache with lazy expiry.

    Expired entries are evicted when they are looked up. A ``max_ttl`` caps
    every TTL passed to :meth:`put`, so one knob bounds how stale any entry
    can get.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_CACHE_TTL,
        max_ttl: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self.max_ttl = max_ttl
        self._clock = clock
        self._entries: dict[tuple[str, str], _Entry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _live_entry(self, key: str, category: str) -> _Entry | None:
        entry = self._entries.get((category, key))
        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            logger.debug(f"Cache expired for key={key} in category={category}")
            del self._entries[(category, key)]
            return None
        return entry

    def get(self, key: str, category: str = "default") -> Any | None:
        entry = self._live_entry(key, category)
        return entry.value if entry is not None else None

    def exists(self, key: str, category: str = "default") -> bool:
        # A cached None is still an entry
        return self._live_entry(key, category) is not None

    def put(
        self, key: str, value: Any, category: str = "default", ttl: float | None = None
    ) -> None:
        effective_ttl = ttl if ttl is not None else self.default_ttl
        if self.max_ttl is not None:
            effective_ttl = min(effective_ttl, self.max_ttl)

        self._entries[(category, key)] = _Entry(value, self._clock() + effective_ttl)
        logger.debug(f"Cached key={key} in category={category} (ttl={effective_ttl}s)")

    def delete(self, key: str, category: str = "default") -> bool:
        return self._entries.pop((category, key), None) is not None

    def clear(self, category: str | None = None) -> int:
        if category is None:
            count = len(self._entries)
            self._entries.clear()
            return count

        keys = [k for k in self._entries if k[0] == category]
        for k in keys:
            del self._entries[k]
        return len(keys)
