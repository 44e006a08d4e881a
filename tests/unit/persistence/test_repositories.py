"""Tests for the SQL persistent store against in-memory SQLite."""

from __future__ import annotations

from collections.abc import AsyncIterator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from k8sdemo.core.errors import PersistenceError
from k8sdemo.core.model import DataItem
from k8sdemo.persistence.repositories import SqlDataItemStore
from k8sdemo.persistence.seed import SAMPLE_ITEMS, seed_sample_data
from k8sdemo.persistence.tables import Base


@pytest_asyncio.fixture
async def session() -> AsyncIterator[AsyncSession]:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def store(session: AsyncSession) -> SqlDataItemStore:
    return SqlDataItemStore(session)


class TestSqlDataItemStore:
    @pytest.mark.asyncio
    async def test_save_and_find(self, store: SqlDataItemStore) -> None:
        item = DataItem(id="1", name="Sample Item 1", description="d", timestamp=10)

        saved = await store.save(item)

        assert saved == item
        assert await store.find_by_id("1") == item

    @pytest.mark.asyncio
    async def test_save_replaces_existing(self, store: SqlDataItemStore) -> None:
        await store.save(DataItem(id="1", name="before", timestamp=10))
        await store.save(DataItem(id="1", name="after", timestamp=20))

        found = await store.find_by_id("1")

        assert found is not None and found.name == "after"
        assert await store.count() == 1

    @pytest.mark.asyncio
    async def test_save_requires_id(self, store: SqlDataItemStore) -> None:
        with pytest.raises(ValueError):
            await store.save(DataItem(name="no id"))

    @pytest.mark.asyncio
    async def test_find_missing(self, store: SqlDataItemStore) -> None:
        assert await store.find_by_id("nope") is None
        assert await store.exists_by_id("nope") is False

    @pytest.mark.asyncio
    async def test_find_all_ordered_by_timestamp(self, store: SqlDataItemStore) -> None:
        await store.save(DataItem(id="b", name="second", timestamp=20))
        await store.save(DataItem(id="a", name="first", timestamp=10))

        assert [i.id for i in await store.find_all()] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_delete(self, store: SqlDataItemStore) -> None:
        await store.save(DataItem(id="1", name="x", timestamp=1))

        await store.delete_by_id("1")

        assert await store.exists_by_id("1") is False
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_database_error_wrapped(
        self, store: SqlDataItemStore, session: AsyncSession
    ) -> None:
        session.execute = AsyncMock(  # type: ignore[method-assign]
            side_effect=OperationalError("SELECT", {}, Exception("database is locked"))
        )

        with pytest.raises(PersistenceError, match="read"):
            await store.find_all()


class TestSeed:
    @pytest.mark.asyncio
    async def test_seeds_empty_store(self, store: SqlDataItemStore) -> None:
        assert await seed_sample_data(store) == len(SAMPLE_ITEMS)

        names = [i.name for i in await store.find_all()]
        assert sorted(names) == ["Kubernetes Demo", "Sample Item 1", "Sample Item 2"]

    @pytest.mark.asyncio
    async def test_existing_data_untouched(self, store: SqlDataItemStore) -> None:
        await store.save(DataItem(id="mine", name="mine", timestamp=1))

        assert await seed_sample_data(store) == 0
        assert await store.count() == 1
