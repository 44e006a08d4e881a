"""Explicit outcome of a cache operation.

Callers branch on the status instead of relying on swallowed exceptions:
- OK: a read found a value, or a write/evict/clear completed
- MISS: the key is absent (absence is never stored as a cached null)
- UNAVAILABLE: the backend could not be reached; ``error`` says why
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class CacheStatus(str, Enum):
    """Status of a cache operation."""

    OK = "ok"
    MISS = "miss"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class CacheResult(Generic[T]):
    """Value or absence or backend failure, never an exception."""

    status: CacheStatus
    value: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, value: T) -> CacheResult[T]:
        return cls(CacheStatus.OK, value=value)

    @classmethod
    def miss(cls) -> CacheResult[T]:
        return cls(CacheStatus.MISS)

    @classmethod
    def unavailable(cls, error: str) -> CacheResult[T]:
        return cls(CacheStatus.UNAVAILABLE, error=error)

    @property
    def is_ok(self) -> bool:
        return self.status is CacheStatus.OK

    @property
    def is_miss(self) -> bool:
        return self.status is CacheStatus.MISS

    @property
    def is_unavailable(self) -> bool:
        return self.status is CacheStatus.UNAVAILABLE

    def value_or(self, default: T) -> T:
        """Return the value on OK, otherwise ``default``."""
        if self.status is CacheStatus.OK and self.value is not None:
            return self.value
        return default
