"""Cache layer for the data service.

Provides Redis caching with the cache-aside pattern:
- Named caches with a fixed registry, TTL and key prefix per cache
- Explicit CacheResult outcomes instead of swallowed exceptions
- Bounded connection pool so a stalled backend degrades, never blocks
"""

from k8sdemo.cache.keys import CacheKeys
from k8sdemo.cache.manager import (
    ALL_DATA_ITEMS,
    COLLECTION_KEY,
    DATA_ITEMS,
    CacheManager,
    NamedCache,
    default_caches,
)
from k8sdemo.cache.redis import RedisCacheStore, close_redis, get_redis
from k8sdemo.cache.result import CacheResult, CacheStatus
from k8sdemo.cache.store import BackendUnavailable, CacheStore, PingResult

__all__ = [
    # Keys and results
    "CacheKeys",
    "CacheResult",
    "CacheStatus",
    # Store
    "CacheStore",
    "BackendUnavailable",
    "PingResult",
    "RedisCacheStore",
    "get_redis",
    "close_redis",
    # Manager
    "CacheManager",
    "NamedCache",
    "default_caches",
    "DATA_ITEMS",
    "ALL_DATA_ITEMS",
    "COLLECTION_KEY",
]
