"""Shared FastAPI dependencies.

The cache manager is built once per process with the fixed cache registry;
stores come from persistence.db and services are built per request.
"""

from __future__ import annotations

from fastapi import Depends

from k8sdemo.cache.keys import CacheKeys
from k8sdemo.cache.manager import CacheManager, default_caches
from k8sdemo.cache.redis import RedisCacheStore, get_redis
from k8sdemo.config import settings
from k8sdemo.persistence.db import get_store
from k8sdemo.persistence.repositories import PersistentStore
from k8sdemo.services.cache_admin import CacheAdmin
from k8sdemo.services.data_service import DataService

_cache_manager: CacheManager | None = None


async def get_cache_manager() -> CacheManager:
    """Get or create the process-wide cache manager."""
    global _cache_manager
    if _cache_manager is None:
        _cache_manager = CacheManager(
            store=RedisCacheStore(await get_redis()),
            keys=CacheKeys(settings.cache_key_prefix),
            caches=default_caches(settings.cache_ttl_ms),
        )
    return _cache_manager


def reset_cache_manager() -> None:
    """Drop the cache manager so the next request rebuilds it."""
    global _cache_manager
    _cache_manager = None


async def get_data_service(
    store: PersistentStore = Depends(get_store),
    cache: CacheManager = Depends(get_cache_manager),
) -> DataService:
    """Get the cache-aside data service for this request."""
    return DataService(store, cache)


async def get_cache_admin(cache: CacheManager = Depends(get_cache_manager)) -> CacheAdmin:
    """Get the cache administration service."""
    return CacheAdmin(cache)
