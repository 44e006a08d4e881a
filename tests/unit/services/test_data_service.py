"""Tests for the cache-aside DataService."""

from __future__ import annotations

import pytest

from k8sdemo.cache.manager import ALL_DATA_ITEMS, COLLECTION_KEY, DATA_ITEMS, CacheManager
from k8sdemo.core.errors import NotFound, PersistenceError
from k8sdemo.core.model import DataItem, DataItemUpdate
from k8sdemo.services.data_service import DataService
from tests.doubles import InMemoryCacheStore, InMemoryPersistentStore

ITEM_KEY = "k8sdemo:dataItems:{}"
COLLECTION = "k8sdemo:allDataItems:all"


def _item(item_id: str, name: str = "Sample Item", timestamp: int = 1_000) -> DataItem:
    return DataItem(id=item_id, name=name, description="desc", timestamp=timestamp)


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_caches_item_and_drops_collection(
        self,
        data_service: DataService,
        cache_manager: CacheManager,
        cache_store: InMemoryCacheStore,
    ) -> None:
        await cache_manager.write(ALL_DATA_ITEMS, COLLECTION_KEY, [_item("old")])

        saved = await data_service.create(_item("1"))

        assert saved.id == "1"
        assert ITEM_KEY.format("1") in cache_store.data
        assert COLLECTION not in cache_store.data

    @pytest.mark.asyncio
    async def test_create_generates_id(
        self, data_service: DataService, persistent_store: InMemoryPersistentStore
    ) -> None:
        saved = await data_service.create(DataItem(name="no id"))

        assert saved.id
        assert saved.id in persistent_store.items

    @pytest.mark.asyncio
    async def test_create_with_cache_down_still_persists(
        self,
        data_service: DataService,
        cache_store: InMemoryCacheStore,
        persistent_store: InMemoryPersistentStore,
    ) -> None:
        cache_store.available = False

        saved = await data_service.create(_item("1"))

        assert saved.id == "1"
        assert "1" in persistent_store.items


class TestRead:
    @pytest.mark.asyncio
    async def test_second_read_is_served_from_cache(
        self, data_service: DataService, persistent_store: InMemoryPersistentStore
    ) -> None:
        persistent_store.items["1"] = _item("1")

        first = await data_service.get("1")
        second = await data_service.get("1")

        assert first == second == _item("1")
        assert persistent_store.calls["find_by_id"] == 1

    @pytest.mark.asyncio
    async def test_absent_item_is_not_cached(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        assert await data_service.get("nope") is None
        assert await data_service.get("nope") is None

        assert persistent_store.calls["find_by_id"] == 2
        assert cache_store.data == {}

    @pytest.mark.asyncio
    async def test_read_with_cache_down_falls_back_to_store(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        persistent_store.items["1"] = _item("1")
        cache_store.available = False

        assert await data_service.get("1") == _item("1")
        assert await data_service.get("1") == _item("1")
        assert persistent_store.calls["find_by_id"] == 2

    @pytest.mark.asyncio
    async def test_get_all_caches_collection(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        persistent_store.items["1"] = _item("1")
        persistent_store.items["2"] = _item("2", timestamp=2_000)

        first = await data_service.get_all()
        second = await data_service.get_all()

        assert [i.id for i in first] == ["1", "2"]
        assert second == first
        assert persistent_store.calls["find_all"] == 1
        assert COLLECTION in cache_store.data

    @pytest.mark.asyncio
    async def test_empty_collection_is_not_cached(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        assert await data_service.get_all() == []
        persistent_store.items["1"] = _item("1")

        assert [i.id for i in await data_service.get_all()] == ["1"]
        assert persistent_store.calls["find_all"] == 2


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_refreshes_item_and_drops_collection(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        persistent_store.items["1"] = _item("1", name="before")
        await data_service.get("1")
        await data_service.get_all()

        updated = await data_service.update("1", DataItemUpdate(name="after", description="new"))

        assert updated.name == "after"
        assert updated.timestamp > 1_000
        assert COLLECTION not in cache_store.data
        cached = await data_service.get("1")
        assert cached is not None and cached.name == "after"
        assert persistent_store.calls["find_by_id"] == 2  # initial miss and update only

    @pytest.mark.asyncio
    async def test_update_missing_item_raises(self, data_service: DataService) -> None:
        with pytest.raises(NotFound):
            await data_service.update("nope", DataItemUpdate(name="x"))


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_evicts_both_caches(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        persistent_store.items["1"] = _item("1")
        await data_service.get("1")
        await data_service.get_all()

        assert await data_service.delete("1") is True

        assert cache_store.data == {}
        assert await data_service.get("1") is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(
        self, data_service: DataService, cache_store: InMemoryCacheStore
    ) -> None:
        assert await data_service.delete("nope") is False
        assert await data_service.delete("nope") is False
        assert cache_store.data == {}

    @pytest.mark.asyncio
    async def test_delete_existing_twice(
        self, data_service: DataService, persistent_store: InMemoryPersistentStore
    ) -> None:
        persistent_store.items["1"] = _item("1")

        assert await data_service.delete("1") is True
        assert await data_service.delete("1") is False
        assert "1" not in persistent_store.items

    @pytest.mark.asyncio
    async def test_missing_item_still_evicts_stale_entry(
        self, data_service: DataService, cache_manager: CacheManager, cache_store: InMemoryCacheStore
    ) -> None:
        await cache_manager.write(DATA_ITEMS, "ghost", _item("ghost"))

        assert await data_service.delete("ghost") is False
        assert ITEM_KEY.format("ghost") not in cache_store.data

    @pytest.mark.asyncio
    async def test_store_failure_propagates_after_eviction(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        persistent_store.items["1"] = _item("1")
        await data_service.get("1")

        async def broken(item_id: str) -> None:
            raise PersistenceError("Database delete failed")

        persistent_store.delete_by_id = broken  # type: ignore[method-assign]

        with pytest.raises(PersistenceError):
            await data_service.delete("1")
        assert ITEM_KEY.format("1") not in cache_store.data


class TestCacheDown:
    """Every operation succeeds against the store while the cache is unreachable."""

    @pytest.fixture(autouse=True)
    def _cache_down(self, cache_store: InMemoryCacheStore) -> None:
        cache_store.available = False

    @pytest.mark.asyncio
    async def test_get_skips_write_back(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        persistent_store.items["1"] = _item("1")

        assert await data_service.get("1") == _item("1")
        assert cache_store.calls["get"] == 1
        assert cache_store.calls["put"] == 0

    @pytest.mark.asyncio
    async def test_get_all_reads_store_without_write_back(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        persistent_store.items["1"] = _item("1")
        persistent_store.items["2"] = _item("2", timestamp=2_000)

        assert [i.id for i in await data_service.get_all()] == ["1", "2"]
        assert [i.id for i in await data_service.get_all()] == ["1", "2"]
        assert persistent_store.calls["find_all"] == 2
        assert cache_store.calls["put"] == 0

    @pytest.mark.asyncio
    async def test_update_persists(
        self, data_service: DataService, persistent_store: InMemoryPersistentStore
    ) -> None:
        persistent_store.items["1"] = _item("1", name="before")

        updated = await data_service.update("1", DataItemUpdate(name="after"))

        assert updated.name == "after"
        assert persistent_store.items["1"].name == "after"

    @pytest.mark.asyncio
    async def test_delete_existing_twice(
        self, data_service: DataService, persistent_store: InMemoryPersistentStore
    ) -> None:
        persistent_store.items["1"] = _item("1")

        assert await data_service.delete("1") is True
        assert await data_service.delete("1") is False
        assert persistent_store.items == {}

    @pytest.mark.asyncio
    async def test_stale_entries_gone_after_recovery(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        """Nothing written while the cache was down is served once it returns."""
        persistent_store.items["1"] = _item("1")
        await data_service.get("1")
        await data_service.get_all()

        cache_store.available = True

        assert cache_store.data == {}
        assert await data_service.get("1") == _item("1")
        assert persistent_store.calls["find_by_id"] == 2

class TestCount:
    @pytest.mark.asyncio
    async def test_count_always_hits_store(
        self, data_service: DataService, persistent_store: InMemoryPersistentStore
    ) -> None:
        persistent_store.items["1"] = _item("1")

        assert await data_service.count() == 1
        assert await data_service.count() == 1
        assert persistent_store.calls["count"] == 2


class TestScenario:
    @pytest.mark.asyncio
    async def test_create_read_delete_with_cache(
        self,
        data_service: DataService,
        persistent_store: InMemoryPersistentStore,
        cache_store: InMemoryCacheStore,
    ) -> None:
        """Create, read twice, list, delete and read again."""
        created = await data_service.create(_item("42", name="Kubernetes Demo"))
        assert (await data_service.get("42")) == created
        assert (await data_service.get("42")) == created
        assert persistent_store.calls["find_by_id"] == 0

        assert [i.id for i in await data_service.get_all()] == ["42"]
        assert set(cache_store.data) == {ITEM_KEY.format("42"), COLLECTION}

        assert await data_service.delete("42") is True
        assert await data_service.get("42") is None
        assert cache_store.data == {}
