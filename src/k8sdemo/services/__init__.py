"""Application services: cache-aside data access and cache administration."""

from k8sdemo.services.cache_admin import CacheAdmin
from k8sdemo.services.data_service import DataService

__all__ = ["CacheAdmin", "DataService"]
