"""Administrative cache operations.

Reads and mutates cache state directly through the CacheManager, bypassing
the data service. Unlike the data path, an unreachable backend is reported
to the caller here (as BackendUnavailable) because the admin surface exists
to show cache state.
"""

from __future__ import annotations

import logging
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field

from k8sdemo.cache.manager import CacheManager
from k8sdemo.cache.result import CacheResult
from k8sdemo.cache.store import BackendUnavailable
from k8sdemo.core.errors import InvalidArgument, NotFound
from k8sdemo.core.model import now_millis

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CacheStats(_CamelModel):
    """Per-cache sizes plus backend reachability."""

    cache_count: int = Field(alias="cacheCount")
    cache_names: list[str] = Field(alias="cacheNames")
    cache_sizes: dict[str, int] = Field(alias="cacheSizes")
    redis_connected: bool = Field(alias="redisConnected")
    timestamp: int
    error: str | None = None


class CacheKeyListing(_CamelModel):
    """Cached entity keys grouped by cache name."""

    cache_keys: dict[str, list[str]] = Field(alias="cacheKeys")
    total_keys: int = Field(alias="totalKeys")


class KeySearchResult(_CamelModel):
    """Keys matching a search pattern, grouped by cache name."""

    pattern: str
    matching_keys: dict[str, list[str]] = Field(alias="matchingKeys")
    total_matches: int = Field(alias="totalMatches")


class BackendInfo(_CamelModel):
    """Backend ping outcome and key count under the global prefix."""

    connected: bool
    ping_response: str | None = Field(default=None, alias="pingResponse")
    latency_ms: float = Field(alias="latencyMs")
    total_keys: int | None = Field(default=None, alias="totalKeys")
    message: str | None = None
    error: str | None = None
    timestamp: int


class TtlUpdate(_CamelModel):
    """Confirmation of a TTL re-arm."""

    success: bool
    cache_name: str = Field(alias="cacheName")
    key: str
    ttl: int
    message: str


def _unwrap(result: CacheResult[T], operation: str) -> T:
    """Return the value of an OK result or raise BackendUnavailable."""
    if result.is_ok and result.value is not None:
        return result.value
    raise BackendUnavailable(operation, detail=result.error)


def _require_text(value: str | None, what: str) -> str:
    """Reject blank input; non-blank input is returned as given."""
    if value is None or not value.strip():
        raise InvalidArgument(f"{what} must not be empty")
    return value


class CacheAdmin:
    """Introspection and manual control of the named caches."""

    def __init__(self, cache: CacheManager):
        self.cache = cache

    async def stats(self) -> CacheStats:
        """Size of every registered cache and backend reachability.

        A cache whose size cannot be read reports -1 instead of failing
        the whole call.
        """
        ping = await self.cache.ping()
        sizes: dict[str, int] = {}
        for cache_name in self.cache.cache_names:
            result = await self.cache.size_of(cache_name)
            if result.is_ok:
                sizes[cache_name] = result.value_or(0)
            else:
                logger.warning("Could not get size for cache '%s': %s", cache_name, result.error)
                sizes[cache_name] = -1

        stats = CacheStats(
            cache_count=len(self.cache.cache_names),
            cache_names=self.cache.cache_names,
            cache_sizes=sizes,
            redis_connected=ping.healthy,
            timestamp=now_millis(),
            error=None if ping.healthy else f"Failed to reach cache backend: {ping.error}",
        )
        logger.info("Retrieved cache statistics: %d caches", stats.cache_count)
        return stats

    async def list_keys(self) -> CacheKeyListing:
        """Every cached entity key, grouped by cache name.

        Caches with no entries are omitted.
        """
        grouped: dict[str, list[str]] = {}
        for cache_name in self.cache.cache_names:
            keys = _unwrap(await self.cache.keys_of(cache_name), "keys")
            if keys:
                grouped[cache_name] = sorted(keys)

        total = sum(len(keys) for keys in grouped.values())
        logger.info("Retrieved cache keys for %d caches", len(grouped))
        return CacheKeyListing(cache_keys=grouped, total_keys=total)

    async def search_keys(self, pattern: str | None) -> KeySearchResult:
        """Entity keys containing ``pattern`` across all caches.

        Raises:
            InvalidArgument: If the pattern is empty
        """
        fragment = _require_text(pattern, "Pattern")
        grouped: dict[str, list[str]] = {}
        for cache_name in self.cache.cache_names:
            keys = _unwrap(await self.cache.search(cache_name, fragment), "search")
            if keys:
                grouped[cache_name] = sorted(keys)

        total = sum(len(keys) for keys in grouped.values())
        logger.info("Found %d keys matching pattern '%s'", total, fragment)
        return KeySearchResult(pattern=fragment, matching_keys=grouped, total_matches=total)

    async def clear_all(self) -> int:
        """Clear every registered cache and return the number of keys removed."""
        cleared = _unwrap(await self.cache.clear_all(), "clear")
        logger.info("Cleared %d caches (%d keys)", len(self.cache.cache_names), cleared)
        return cleared

    async def clear(self, cache_name: str) -> int:
        """Clear one cache.

        Raises:
            NotFound: If the cache name is not registered
        """
        cleared = _unwrap(await self.cache.clear(cache_name), "clear")
        logger.info("Cleared cache '%s' (%d keys)", cache_name, cleared)
        return cleared

    async def evict(self, cache_name: str, key: str | None) -> None:
        """Evict one entry.

        Raises:
            InvalidArgument: If the key is empty
            NotFound: If the cache name is not registered or the key is absent
        """
        entity_key = _require_text(key, "Key")
        existed = _unwrap(await self.cache.evict(cache_name, entity_key), "evict")
        if not existed:
            raise NotFound("Cache key", f"{cache_name}/{entity_key}")
        logger.info("Evicted key '%s' from cache '%s'", entity_key, cache_name)

    async def set_ttl(self, cache_name: str, key: str | None, ttl_seconds: int | None) -> bool:
        """Re-arm the expiry of an existing entry without changing its value.

        Returns:
            True if the TTL was updated, False if the key is not cached

        Raises:
            InvalidArgument: If the key is empty or the TTL is not positive
            NotFound: If the cache name is not registered
        """
        if ttl_seconds is None or ttl_seconds <= 0:
            raise InvalidArgument("TTL must be a positive integer")
        entity_key = _require_text(key, "Key")

        result = await self.cache.expire(cache_name, entity_key, ttl_seconds)
        if result.is_miss:
            logger.warning("Failed to update TTL for key '%s' in cache '%s'", entity_key, cache_name)
            return False
        _unwrap(result, "expire")
        logger.info(
            "Updated TTL for key '%s' in cache '%s' to %ds", entity_key, cache_name, ttl_seconds
        )
        return True

    async def backend_info(self) -> BackendInfo:
        """Ping the backend and count keys under the global prefix."""
        ping = await self.cache.ping()
        if not ping.healthy:
            logger.error("Cache backend unreachable: %s", ping.error)
            return BackendInfo(
                connected=False,
                latency_ms=round(ping.latency_ms, 2),
                error=f"Failed to connect to cache backend: {ping.error}",
                timestamp=now_millis(),
            )

        total = await self.cache.total_keys()
        info = BackendInfo(
            connected=True,
            ping_response=ping.response,
            latency_ms=round(ping.latency_ms, 2),
            total_keys=total.value if total.is_ok else None,
            message="Cache backend is connected and operational",
            error=None if total.is_ok else f"Failed to count keys: {total.error}",
            timestamp=now_millis(),
        )
        logger.info("Cache backend is connected, total keys: %s", info.total_keys)
        return info
