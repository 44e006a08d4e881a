"""Sample data initializer.

Populates an empty data_items table with three demo rows on startup.
Existing data is never touched.
"""

from __future__ import annotations

import logging

from k8sdemo.core.model import DataItem
from k8sdemo.observability.logging import LogContext
from k8sdemo.persistence.db import store_scope
from k8sdemo.persistence.repositories import PersistentStore

logger = logging.getLogger(__name__)

SAMPLE_ITEMS: tuple[tuple[str, str, str], ...] = (
    ("1", "Sample Item 1", "This is a sample item stored in PostgreSQL"),
    ("2", "Sample Item 2", "Another sample item from database"),
    ("3", "Kubernetes Demo", "Demo item for Kubernetes deployment"),
)


async def seed_sample_data(store: PersistentStore) -> int:
    """Insert the sample items if the store is empty.

    Returns:
        Number of items inserted (0 when data already exists)
    """
    if await store.count() > 0:
        logger.info("Database already contains data, skipping sample data")
        return 0

    for item_id, name, description in SAMPLE_ITEMS:
        await store.save(DataItem(id=item_id, name=name, description=description))

    logger.info("Initialized %d sample items", len(SAMPLE_ITEMS))
    return len(SAMPLE_ITEMS)


async def seed_database() -> int:
    """Run the sample-data initializer on its own store.

    Log records are tagged with request id ``seed``.
    """
    with LogContext(request_id="seed"):
        async with store_scope() as store:
            return await seed_sample_data(store)
