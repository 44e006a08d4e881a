"""Persistent store contract and its SQLAlchemy implementation.

The store is the system of record: every cache write happens after a
successful commit here, so losing the cache never loses data. Database
failures are raised as PersistenceError and never masked.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from k8sdemo.core.errors import PersistenceError
from k8sdemo.core.model import DataItem
from k8sdemo.persistence.tables import DataItemTable


class PersistentStore(ABC):
    """CRUD contract over DataItems, keyed by id."""

    @abstractmethod
    async def save(self, item: DataItem) -> DataItem:
        """Insert or replace an item. The item must carry an id."""
        ...

    @abstractmethod
    async def find_by_id(self, item_id: str) -> DataItem | None:
        ...

    @abstractmethod
    async def find_all(self) -> list[DataItem]:
        ...

    @abstractmethod
    async def exists_by_id(self, item_id: str) -> bool:
        ...

    @abstractmethod
    async def delete_by_id(self, item_id: str) -> None:
        ...

    @abstractmethod
    async def count(self) -> int:
        ...


def _to_model(row: DataItemTable) -> DataItem:
    return DataItem(
        id=row.id,
        name=row.name,
        description=row.description,
        timestamp=row.timestamp,
    )


class SqlDataItemStore(PersistentStore):
    """PersistentStore backed by the ``data_items`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def _guard(self, operation: str) -> AsyncIterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise PersistenceError(f"Database {operation} failed: {e}") from e

    async def save(self, item: DataItem) -> DataItem:
        if not item.id:
            raise ValueError("Cannot save an item without an id")
        async with self._guard("save"):
            row = await self.session.merge(
                DataItemTable(
                    id=item.id,
                    name=item.name,
                    description=item.description,
                    timestamp=item.timestamp,
                )
            )
            await self.session.commit()
            return _to_model(row)

    async def find_by_id(self, item_id: str) -> DataItem | None:
        async with self._guard("read"):
            row = await self.session.get(DataItemTable, item_id)
            return _to_model(row) if row is not None else None

    async def find_all(self) -> list[DataItem]:
        async with self._guard("read"):
            stmt = select(DataItemTable).order_by(DataItemTable.timestamp, DataItemTable.id)
            result = await self.session.execute(stmt)
            return [_to_model(row) for row in result.scalars()]

    async def exists_by_id(self, item_id: str) -> bool:
        async with self._guard("read"):
            stmt = select(DataItemTable.id).where(DataItemTable.id == item_id)
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none() is not None

    async def delete_by_id(self, item_id: str) -> None:
        async with self._guard("delete"):
            await self.session.execute(delete(DataItemTable).where(DataItemTable.id == item_id))
            await self.session.commit()

    async def count(self) -> int:
        async with self._guard("count"):
            total = await self.session.scalar(select(func.count()).select_from(DataItemTable))
            return int(total or 0)
