"""Tests for the in-memory TTL cache."""

from stack_discovery.storage.cache.memory_cache import MemoryCache


class TestMemoryCache:
    """Tests for MemoryCache."""

    def test_miss(self, fake_clock) -> None:
        cache = MemoryCache(clock=fake_clock)
        assert cache.get("missing") is None
        assert not cache.exists("missing")

    def test_hit_before_expiry(self, fake_clock) -> None:
        cache = MemoryCache(clock=fake_clock)
        cache.put("key", {"a": 1}, ttl=60)
        fake_clock.advance(59)
        assert cache.get("key") == {"a": 1}
        assert cache.exists("key")

    def test_cached_none_exists(self, fake_clock) -> None:
        cache = MemoryCache(clock=fake_clock)
        cache.put("key", None, ttl=60)
        assert cache.exists("key")
        fake_clock.advance(60)
        assert not cache.exists("key")
        assert len(cache) == 0

    def test_expired_entry_is_evicted_on_lookup(self, fake_clock) -> None:
        cache = MemoryCache(clock=fake_clock)
        cache.put("key", "value", ttl=60)
        fake_clock.advance(60)
        assert cache.get("key") is None
        assert len(cache) == 0

    def test_default_ttl(self, fake_clock) -> None:
        cache = MemoryCache(default_ttl=5, clock=fake_clock)
        cache.put("key", "value")
        fake_clock.advance(4)
        assert cache.get("key") == "value"
        fake_clock.advance(1)
        assert cache.get("key") is None

    def test_max_ttl_caps_requested_ttl(self, fake_clock) -> None:
        cache = MemoryCache(max_ttl=10, clock=fake_clock)
        cache.put("key", "value", ttl=3600)
        fake_clock.advance(11)
        assert cache.get("key") is None

    def test_categories_are_separate(self, fake_clock) -> None:
        cache = MemoryCache(clock=fake_clock)
        cache.put("key", "npm", category="npm")
        cache.put("key", "pypi", category="pypi")
        assert cache.get("key", "npm") == "npm"
        assert cache.get("key", "pypi") == "pypi"

    def test_clear_category(self, fake_clock) -> None:
        cache = MemoryCache(clock=fake_clock)
        cache.put("a", 1, category="npm")
        cache.put("b", 2, category="npm")
        cache.put("c", 3, category="pypi")

        assert cache.clear("npm") == 2
        assert cache.get("a", "npm") is None
        assert cache.get("c", "pypi") == 3

    def test_clear_all(self, fake_clock) -> None:
        cache = MemoryCache(clock=fake_clock)
        cache.put("a", 1, category="npm")
        cache.put("b", 2)
        assert cache.clear() == 2
        assert len(cache) == 0

    def test_delete(self, fake_clock) -> None:
        cache = MemoryCache(clock=fake_clock)
        cache.put("a", 1)
        assert cache.delete("a")
        assert not cache.delete("a")
