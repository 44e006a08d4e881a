"""Database engine and store scopes for the system of record.

The engine is built lazily from settings and shared by the process. Callers
never handle sessions directly: they get a ``SqlDataItemStore`` bound to a
fresh session, which commits its own writes, and the scope only closes it.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from k8sdemo.config import settings
from k8sdemo.persistence.repositories import SqlDataItemStore

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the engine for ``settings.database_url``."""
    global _engine
    if _engine is None:
        _engine = create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_pre_ping=True,
        )
        logger.info("Database engine created (pool size %d)", settings.db_pool_size)
    return _engine


def _sessions() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


@asynccontextmanager
async def store_scope() -> AsyncIterator[SqlDataItemStore]:
    """A store on its own session, closed on exit.

    Usage:
        async with store_scope() as store:
            await store.count()
    """
    async with _sessions()() as session:
        yield SqlDataItemStore(session)


async def get_store() -> AsyncGenerator[SqlDataItemStore, None]:
    """FastAPI dependency yielding a per-request store."""
    async with store_scope() as store:
        yield store


async def init_db() -> None:
    """Create the data_items table if it does not exist."""
    from k8sdemo.persistence.tables import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine; the next call to get_engine rebuilds it."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def health_check() -> bool:
    """Run ``SELECT 1`` and report whether the database answered."""
    try:
        async with _sessions()() as session:
            await session.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed: %s", e)
        return False
    return True
