"""Abstract base class for response caches.

Entries carry an expiry; an expired entry is never returned.
"""

from abc import ABC, abstractmethod
from typing import Any


class Cache(ABC):
    """Key/value cache with per-entry TTL, organized by category."""

    @abstractmethod
    def get(self, key: str, category: str = "default") -> Any | None:
        """Return the cached value, or None when missing or expired."""
        ...

    @abstractmethod
    def put(
        self, key: str, value: Any, category: str = "default", ttl: float | None = None
    ) -> None:
        """Store a value.

        Args:
            key: Caller-chosen cache key.
            value: Decoded response to keep.
            category: Namespace the key lives in.
            ttl: Seconds until expiry. None uses the cache's default TTL.
        """
        ...

    @abstractmethod
    def delete(self, key: str, category: str = "default") -> bool:
        """Remove an entry. Returns True if something was removed."""
        ...

    def exists(self, key: str, category: str = "default") -> bool:
        """True if a live entry is stored under key."""
        return self.get(key, category) is not None

    @abstractmethod
    def clear(self, category: str | None = None) -> int:
        """Drop entries in one category, or everything when category is None.

        Returns:
            Number of entries cleared.
        """
        ...
