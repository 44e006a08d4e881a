"""Named cache registry and cache manager.

The registry is fixed when the manager is constructed; there is no ad hoc
cache creation at runtime. Every operation returns a CacheResult, so backend
failures are logged here and never raised to callers.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from k8sdemo.cache.keys import SEPARATOR, CacheKeys
from k8sdemo.cache.result import CacheResult
from k8sdemo.cache.store import BackendUnavailable, CacheStore, PingResult
from k8sdemo.core.errors import NotFound
from k8sdemo.core.model import decode_item, decode_items, encode_item, encode_items

logger = logging.getLogger(__name__)

T = TypeVar("T")

DATA_ITEMS = "dataItems"
ALL_DATA_ITEMS = "allDataItems"

# Fixed entity key for caches holding a single collection value
COLLECTION_KEY = "all"


@dataclass(frozen=True)
class NamedCache:
    """A registered cache: name, TTL and the value codec it stores."""

    name: str
    ttl_ms: int
    encode: Callable[[Any], bytes]
    decode: Callable[[bytes], Any]

    def __post_init__(self) -> None:
        if not self.name or SEPARATOR in self.name:
            raise ValueError(f"Invalid cache name: {self.name!r}")
        if self.ttl_ms <= 0:
            raise ValueError(f"Cache '{self.name}' needs a positive TTL")


def default_caches(ttl_ms: int) -> list[NamedCache]:
    """The two caches of the data service, sharing the default TTL."""
    return [
        NamedCache(DATA_ITEMS, ttl_ms, encode=encode_item, decode=decode_item),
        NamedCache(ALL_DATA_ITEMS, ttl_ms, encode=encode_items, decode=decode_items),
    ]


class CacheManager:
    """Get/put/evict/clear per named cache on top of a CacheStore."""

    def __init__(self, store: CacheStore, keys: CacheKeys, caches: Iterable[NamedCache]):
        self.store = store
        self.keys = keys
        self._caches: dict[str, NamedCache] = {}
        for cache in caches:
            if cache.name in self._caches:
                raise ValueError(f"Duplicate cache name: {cache.name}")
            self._caches[cache.name] = cache

    @property
    def cache_names(self) -> list[str]:
        return list(self._caches)

    def require(self, cache_name: str) -> NamedCache:
        """Look up a registered cache or raise NotFound."""
        cache = self._caches.get(cache_name)
        if cache is None:
            raise NotFound("Cache", cache_name)
        return cache

    async def _run(
        self, operation: str, cache_name: str, key: str, awaitable: Awaitable[T]
    ) -> CacheResult[T]:
        try:
            value = await awaitable
        except BackendUnavailable as e:
            logger.warning(
                "Cache %s error for cache '%s' and key '%s': %s",
                operation.upper(),
                cache_name,
                key,
                e,
            )
            logger.debug("Cache %s error details", operation.upper(), exc_info=e)
            return CacheResult.unavailable(e.detail)
        return CacheResult.ok(value)

    # -------------------------------------------------------------------------
    # Entry operations
    # -------------------------------------------------------------------------

    async def read(self, cache_name: str, entity_key: str) -> CacheResult[Any]:
        """Read and decode one entry.

        Undecodable bytes are evicted and reported as a miss.
        """
        cache = self.require(cache_name)
        key = self.keys.key(cache_name, entity_key)
        result = await self._run("get", cache_name, entity_key, self.store.get(key))
        if not result.is_ok:
            return result
        if result.value is None:
            logger.debug("Cache MISS: %s[%s]", cache_name, entity_key)
            return CacheResult.miss()
        try:
            value = cache.decode(result.value)
        except ValueError as e:
            logger.warning("Discarding undecodable entry %s[%s]: %s", cache_name, entity_key, e)
            await self.evict(cache_name, entity_key)
            return CacheResult.miss()
        logger.debug("Cache HIT: %s[%s]", cache_name, entity_key)
        return CacheResult.ok(value)

    async def write(self, cache_name: str, entity_key: str, value: Any) -> CacheResult[None]:
        """Encode and store one entry with the cache's TTL (best effort)."""
        cache = self.require(cache_name)
        if value is None:
            raise ValueError("Null values are never cached")
        key = self.keys.key(cache_name, entity_key)
        result = await self._run(
            "put", cache_name, entity_key, self.store.put(key, cache.encode(value), cache.ttl_ms)
        )
        if result.is_ok:
            logger.debug("Cache PUT: %s[%s] ttl=%dms", cache_name, entity_key, cache.ttl_ms)
        return result

    async def evict(self, cache_name: str, entity_key: str) -> CacheResult[bool]:
        """Delete one entry. The value tells whether the key existed."""
        self.require(cache_name)
        key = self.keys.key(cache_name, entity_key)
        result = await self._run("evict", cache_name, entity_key, self.store.delete(key))
        if result.is_ok:
            logger.debug("Cache EVICT: %s[%s]", cache_name, entity_key)
        return result

    async def expire(
        self, cache_name: str, entity_key: str, ttl_seconds: int
    ) -> CacheResult[bool]:
        """Re-arm the TTL of one entry. MISS if the key is absent."""
        self.require(cache_name)
        key = self.keys.key(cache_name, entity_key)
        result = await self._run(
            "expire", cache_name, entity_key, self.store.expire(key, ttl_seconds)
        )
        if result.is_ok and not result.value:
            return CacheResult.miss()
        return result

    # -------------------------------------------------------------------------
    # Whole-cache operations
    # -------------------------------------------------------------------------

    async def clear(self, cache_name: str) -> CacheResult[int]:
        """Delete every entry of a cache and return how many were removed."""
        self.require(cache_name)
        result = await self._run(
            "clear",
            cache_name,
            "*",
            self.store.delete_matching(self.keys.cache_pattern(cache_name)),
        )
        if result.is_ok:
            logger.debug("Cache CLEAR: %s (%s entries)", cache_name, result.value)
        return result

    async def clear_all(self) -> CacheResult[int]:
        """Clear every registered cache.

        Caches that could be reached are still cleared when another fails;
        the result is UNAVAILABLE if any of them failed.
        """
        total = 0
        errors: list[str] = []
        for cache_name in self._caches:
            result = await self.clear(cache_name)
            if result.is_unavailable:
                errors.append(result.error or cache_name)
            else:
                total += result.value_or(0)
        if errors:
            return CacheResult.unavailable("; ".join(errors))
        return CacheResult.ok(total)

    async def keys_of(self, cache_name: str) -> CacheResult[set[str]]:
        """Entity keys currently cached, with the cache prefix stripped."""
        self.require(cache_name)
        result = await self._run(
            "keys",
            cache_name,
            "*",
            self.store.keys_matching(self.keys.cache_pattern(cache_name)),
        )
        if not result.is_ok:
            return result
        return CacheResult.ok(self._strip(cache_name, result.value or set()))

    async def search(self, cache_name: str, fragment: str) -> CacheResult[set[str]]:
        """Entity keys of a cache containing ``fragment`` (wildcards allowed)."""
        self.require(cache_name)
        result = await self._run(
            "search",
            cache_name,
            fragment,
            self.store.keys_matching(self.keys.search_pattern(cache_name, fragment)),
        )
        if not result.is_ok:
            return result
        return CacheResult.ok(self._strip(cache_name, result.value or set()))

    async def size_of(self, cache_name: str) -> CacheResult[int]:
        """Approximate number of entries; a snapshot, not transactional."""
        result = await self.keys_of(cache_name)
        if not result.is_ok:
            return CacheResult.unavailable(result.error or "unavailable")
        return CacheResult.ok(len(result.value or ()))

    async def total_keys(self) -> CacheResult[int]:
        """Number of keys under the global prefix, across all caches."""
        result = await self._run(
            "keys",
            "*",
            "*",
            self.store.keys_matching(self.keys.namespace_pattern()),
        )
        if not result.is_ok:
            return CacheResult.unavailable(result.error or "unavailable")
        return CacheResult.ok(len(result.value or ()))

    async def ping(self) -> PingResult:
        return await self.store.ping()

    def _strip(self, cache_name: str, keys: set[str]) -> set[str]:
        stripped = set()
        for key in keys:
            entity_key = self.keys.entity_key(cache_name, key)
            if entity_key is not None:
                stripped.add(entity_key)
        return stripped
