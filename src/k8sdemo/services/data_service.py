"""Cache-aside service for DataItems.

Wraps PersistentStore calls with explicit cache steps:

| Operation | Persistent store            | Cache                                   |
|-----------|-----------------------------|-----------------------------------------|
| create    | save                        | put dataItems[id], clear allDataItems   |
| get       | find_by_id on miss          | read dataItems[id], populate on miss    |
| get_all   | find_all on miss            | read allDataItems, populate if non-empty|
| update    | find_by_id, merge, save     | put dataItems[id], clear allDataItems   |
| delete    | exists_by_id, delete_by_id  | evict dataItems[id] and allDataItems    |
| count     | count                       | never cached                            |

Store writes always complete before the cache is touched, and cache results
are only inspected for a hit: an unreachable backend behaves like a miss on
reads (with no write-back) and a skipped step on writes. Store failures
propagate unchanged.
"""

from __future__ import annotations

import logging
import time
from uuid import uuid4

from k8sdemo.cache.manager import ALL_DATA_ITEMS, COLLECTION_KEY, DATA_ITEMS, CacheManager
from k8sdemo.core.errors import NotFound
from k8sdemo.core.model import DataItem, DataItemUpdate, now_millis
from k8sdemo.persistence.repositories import PersistentStore

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class DataService:
    """Read-through, write-through access to DataItems."""

    def __init__(self, store: PersistentStore, cache: CacheManager):
        self.store = store
        self.cache = cache

    async def create(self, item: DataItem) -> DataItem:
        """Persist a new item, assigning an id when absent, then cache it."""
        start = time.monotonic()
        item_id = item.id or str(uuid4())
        saved = await self.store.save(item.model_copy(update={"id": item_id}))

        await self.cache.write(DATA_ITEMS, item_id, saved)
        await self.cache.clear(ALL_DATA_ITEMS)

        logger.info(
            "Created item with ID '%s' and updated cache (duration: %dms)",
            item_id,
            _elapsed_ms(start),
        )
        return saved

    async def get(self, item_id: str) -> DataItem | None:
        """Read one item, from cache when possible."""
        cached = await self.cache.read(DATA_ITEMS, item_id)
        if cached.is_ok:
            return cached.value

        start = time.monotonic()
        item = await self.store.find_by_id(item_id)
        if item is None:
            logger.debug("Item with ID '%s' not found in database", item_id)
            return None

        if not cached.is_unavailable:
            await self.cache.write(DATA_ITEMS, item_id, item)
        logger.info(
            "Retrieved item '%s' from database (duration: %dms)", item_id, _elapsed_ms(start)
        )
        return item

    async def get_all(self) -> list[DataItem]:
        """Read every item. An empty result is never cached."""
        cached = await self.cache.read(ALL_DATA_ITEMS, COLLECTION_KEY)
        if cached.is_ok and cached.value:
            return list(cached.value)

        start = time.monotonic()
        items = await self.store.find_all()
        if items and not cached.is_unavailable:
            await self.cache.write(ALL_DATA_ITEMS, COLLECTION_KEY, items)
        logger.info(
            "Retrieved %d items from database (duration: %dms)", len(items), _elapsed_ms(start)
        )
        return items

    async def update(self, item_id: str, patch: DataItemUpdate) -> DataItem:
        """Merge mutable fields into an existing item.

        Raises:
            NotFound: If no item has this id
        """
        start = time.monotonic()
        existing = await self.store.find_by_id(item_id)
        if existing is None:
            logger.warning("Attempted to update non-existent item with ID '%s'", item_id)
            raise NotFound("DataItem", item_id)

        merged = existing.model_copy(
            update={
                "name": patch.name,
                "description": patch.description,
                "timestamp": now_millis(),
            }
        )
        saved = await self.store.save(merged)

        await self.cache.write(DATA_ITEMS, item_id, saved)
        await self.cache.clear(ALL_DATA_ITEMS)

        logger.info(
            "Updated item with ID '%s' and refreshed cache (duration: %dms)",
            item_id,
            _elapsed_ms(start),
        )
        return saved

    async def delete(self, item_id: str) -> bool:
        """Delete an item. Returns False if it did not exist.

        Both cache entries are evicted whatever the store outcome.
        """
        start = time.monotonic()
        try:
            if not await self.store.exists_by_id(item_id):
                logger.debug("Attempted to delete non-existent item with ID '%s'", item_id)
                return False
            await self.store.delete_by_id(item_id)
        finally:
            await self.cache.evict(DATA_ITEMS, item_id)
            await self.cache.evict(ALL_DATA_ITEMS, COLLECTION_KEY)

        logger.info(
            "Deleted item with ID '%s' and evicted from cache (duration: %dms)",
            item_id,
            _elapsed_ms(start),
        )
        return True

    async def count(self) -> int:
        """Item count straight from the store; never cached."""
        total = await self.store.count()
        logger.debug("Retrieved item count: %d", total)
        return total
