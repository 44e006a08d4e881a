"""Integration fixtures: a Redis container shared by the session.

Tests here are skipped when Docker is unavailable.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Iterator

import pytest
import pytest_asyncio
import redis.asyncio as redis
from docker.errors import DockerException

from k8sdemo.cache.keys import CacheKeys
from k8sdemo.cache.manager import CacheManager, default_caches
from k8sdemo.cache.redis import RedisCacheStore
from tests.integration.docker_utils import (
    REDIS_IMAGE,
    DockerService,
    docker_client,
    run_container,
    wait_for_redis,
)


def pytest_collection_modifyitems(items):
    for item in items:
        if "integration" in item.path.parts:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def redis_container() -> Iterator[DockerService]:
    """Start a Redis container or skip if Docker is unavailable."""
    try:
        client = docker_client()
        client.ping()
    except DockerException as exc:
        pytest.skip(f"Docker not available: {exc}")
    with run_container(client, REDIS_IMAGE, ports={"6379/tcp": None}) as service:
        yield service
    client.close()


@pytest_asyncio.fixture
async def redis_client(redis_container: DockerService) -> AsyncIterator[redis.Redis]:
    client = redis.Redis(host=redis_container.host, port=redis_container.port(6379))
    await wait_for_redis(client)
    yield client
    await client.flushdb()
    await client.aclose()


@pytest.fixture
def redis_store(redis_client: redis.Redis) -> RedisCacheStore:
    return RedisCacheStore(redis_client, operation_timeout=2.0)


@pytest.fixture
def redis_cache(redis_store: RedisCacheStore) -> CacheManager:
    return CacheManager(redis_store, CacheKeys("k8sdemo-it"), default_caches(60_000))
