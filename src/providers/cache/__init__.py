"""Cache providers.

MemoryCacheProvider is a process-local TTL cache used for values that are
cheap to lose, like the catalog provider's access token.  For multi-worker
deployments a Redis adapter implementing ICacheProvider can be swapped in.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
