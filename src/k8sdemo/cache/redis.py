"""Redis cache store implementation.

Provides async Redis operations behind the CacheStore contract.
Connections come from a bounded blocking pool: callers wait at most
``redis_pool_timeout`` seconds for a free connection, and each round trip is
bounded by the socket timeout, so a stalled backend surfaces as
BackendUnavailable instead of blocking a request.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING, TypeVar, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

from k8sdemo.cache.store import BackendUnavailable, CacheStore, PingResult
from k8sdemo.config import settings

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Module-level connection pool and client
_pool: redis.BlockingConnectionPool | None = None
_redis_client: Redis | None = None

# Failures that mean "backend unreachable", never "key absent"
BACKEND_ERRORS: tuple[type[BaseException], ...] = (RedisError, OSError, asyncio.TimeoutError)

SCAN_BATCH = 100


def create_pool() -> redis.BlockingConnectionPool:
    """Create the bounded connection pool from settings."""
    return redis.BlockingConnectionPool(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password,
        max_connections=settings.redis_pool_max_connections,
        timeout=settings.redis_pool_timeout,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_connect_timeout,
        decode_responses=False,  # We're storing bytes
    )


async def get_redis() -> Redis:
    """Get or create the Redis client.

    Uses connection pooling for efficient connection management.
    """
    global _pool, _redis_client
    if _redis_client is None:
        _pool = create_pool()
        _redis_client = redis.Redis(connection_pool=_pool)
        logger.info(
            "Configured Redis pool host=%s port=%s max_connections=%s",
            settings.redis_host,
            settings.redis_port,
            settings.redis_pool_max_connections,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global _pool, _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
    if _pool is not None:
        await _pool.disconnect()
        _pool = None


async def warm_pool(client: Redis, connections: int) -> int:
    """Open ``connections`` pooled connections up front.

    Concurrent pings each check out a distinct connection; on release they
    stay idle in the pool. Returns how many pings succeeded. Never raises.
    """
    if connections <= 0:
        return 0
    results = await asyncio.gather(
        *(cast(Awaitable[bool], client.ping()) for _ in range(connections)),
        return_exceptions=True,
    )
    warmed = sum(1 for r in results if r is True)
    if warmed < connections:
        logger.warning("Redis pool warm-up opened %d of %d connections", warmed, connections)
    return warmed


class RedisCacheStore(CacheStore):
    """CacheStore over a redis-py asyncio client."""

    def __init__(self, client: Redis, operation_timeout: float | None = None):
        self.client = client
        self.operation_timeout = operation_timeout or (
            settings.redis_pool_timeout + settings.redis_socket_timeout
        )

    async def _call(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Run one backend call, translating transport failures."""
        try:
            return await asyncio.wait_for(awaitable, timeout=self.operation_timeout)
        except BACKEND_ERRORS as e:
            raise BackendUnavailable(operation, e) from e

    async def get(self, key: str) -> bytes | None:
        return cast(bytes | None, await self._call("get", self.client.get(key)))

    async def put(self, key: str, value: bytes, ttl_ms: int) -> None:
        await self._call("put", self.client.set(key, value, px=ttl_ms))

    async def delete(self, key: str) -> bool:
        deleted = await self._call("delete", self.client.delete(key))
        return int(deleted) > 0

    async def _scan(self, pattern: str) -> list[bytes | str]:
        # SCAN avoids blocking the server on large keyspaces
        return [key async for key in self.client.scan_iter(match=pattern, count=SCAN_BATCH)]

    async def _delete_all(self, pattern: str) -> int:
        keys = await self._scan(pattern)
        deleted = 0
        for start in range(0, len(keys), SCAN_BATCH):
            deleted += int(await self.client.delete(*keys[start : start + SCAN_BATCH]))
        return deleted

    async def delete_matching(self, pattern: str) -> int:
        return await self._call("delete_matching", self._delete_all(pattern))

    async def keys_matching(self, pattern: str) -> set[str]:
        keys = await self._call("keys_matching", self._scan(pattern))
        return {k.decode() if isinstance(k, bytes) else k for k in keys}

    async def expire(self, key: str, ttl_seconds: int) -> bool:
        return bool(await self._call("expire", self.client.expire(key, ttl_seconds)))

    async def ping(self) -> PingResult:
        """Check Redis connectivity."""
        start = time.monotonic()
        try:
            await self._call("ping", cast(Awaitable[bool], self.client.ping()))
        except BackendUnavailable as e:
            latency = (time.monotonic() - start) * 1000
            return PingResult(healthy=False, latency_ms=latency, error=e.detail)
        latency = (time.monotonic() - start) * 1000
        return PingResult(healthy=True, latency_ms=latency, response="PONG")
