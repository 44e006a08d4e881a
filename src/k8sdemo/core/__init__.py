"""Domain model and error taxonomy."""

from k8sdemo.core.errors import InvalidArgument, NotFound, PersistenceError
from k8sdemo.core.model import DataItem, DataItemUpdate

__all__ = [
    "DataItem",
    "DataItemUpdate",
    "NotFound",
    "InvalidArgument",
    "PersistenceError",
]
