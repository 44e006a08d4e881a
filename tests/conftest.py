"""Shared fixtures: in-memory cache backend, store and services."""

from __future__ import annotations

import pytest

from k8sdemo.cache.keys import CacheKeys
from k8sdemo.cache.manager import CacheManager, default_caches
from k8sdemo.services.cache_admin import CacheAdmin
from k8sdemo.services.data_service import DataService
from tests.doubles import (
    TEST_PREFIX,
    TEST_TTL_MS,
    FakeClock,
    InMemoryCacheStore,
    InMemoryPersistentStore,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: tests that need Docker-backed services")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_store(clock: FakeClock) -> InMemoryCacheStore:
    return InMemoryCacheStore(clock)


@pytest.fixture
def cache_keys() -> CacheKeys:
    return CacheKeys(TEST_PREFIX)


@pytest.fixture
def cache_manager(cache_store: InMemoryCacheStore, cache_keys: CacheKeys) -> CacheManager:
    return CacheManager(cache_store, cache_keys, default_caches(TEST_TTL_MS))


@pytest.fixture
def persistent_store() -> InMemoryPersistentStore:
    return InMemoryPersistentStore()


@pytest.fixture
def data_service(
    persistent_store: InMemoryPersistentStore, cache_manager: CacheManager
) -> DataService:
    return DataService(persistent_store, cache_manager)


@pytest.fixture
def cache_admin(cache_manager: CacheManager) -> CacheAdmin:
    return CacheAdmin(cache_manager)
