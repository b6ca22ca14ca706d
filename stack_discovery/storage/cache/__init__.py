from stack_discovery.storage.cache.base import Cache
from stack_discovery.storage.cache.memory_cache import MemoryCache

__all__ = ["Cache", "MemoryCache"]
