"""Persistence layer: the system of record.

This module provides:
- Async engine and per-scope stores
- SQLAlchemy ORM model for data items
- PersistentStore contract and its SQL implementation
- Sample data seeding
"""

from k8sdemo.persistence.db import close_db, get_engine, get_store, init_db, store_scope
from k8sdemo.persistence.repositories import PersistentStore, SqlDataItemStore
from k8sdemo.persistence.seed import SAMPLE_ITEMS, seed_database, seed_sample_data
from k8sdemo.persistence.tables import DataItemTable

__all__ = [
    # DB
    "get_engine",
    "get_store",
    "store_scope",
    "init_db",
    "close_db",
    # Tables
    "DataItemTable",
    # Stores
    "PersistentStore",
    "SqlDataItemStore",
    # Seeding
    "SAMPLE_ITEMS",
    "seed_sample_data",
    "seed_database",
]
