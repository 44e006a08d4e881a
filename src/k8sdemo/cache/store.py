"""Base cache store interface.

Defines the contract over the remote key/value backend. Every operation is a
single bounded round trip; any transport failure or timeout is raised as
BackendUnavailable and is never conflated with an absent key.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class BackendUnavailable(Exception):
    """The cache backend is unreachable or timed out."""

    def __init__(
        self,
        operation: str,
        cause: BaseException | None = None,
        detail: str | None = None,
    ):
        self.operation = operation
        self.cause = cause
        if detail is None:
            detail = f"{type(cause).__name__}: {cause}" if cause is not None else "unavailable"
        self.detail = detail
        super().__init__(f"Cache backend unavailable during {operation} ({detail})")


@dataclass
class PingResult:
    """Outcome of a backend health probe."""

    healthy: bool
    latency_ms: float
    response: str | None = None
    error: str | None = None


class CacheStore(ABC):
    """Abstract base class for cache backends."""

    @abstractmethod
    async def get(self, key: str) -> bytes | None:
        """Return the stored bytes, or None if the key is absent."""
        ...

    @abstractmethod
    async def put(self, key: str, value: bytes, ttl_ms: int) -> None:
        """Store bytes under key, overwriting any value and resetting its TTL."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if deleted, False if the key was absent
        """
        ...

    @abstractmethod
    async def delete_matching(self, pattern: str) -> int:
        """Delete every key matching a glob pattern and return how many."""
        ...

    @abstractmethod
    async def keys_matching(self, pattern: str) -> set[str]:
        """Return every key matching a glob pattern."""
        ...

    @abstractmethod
    async def expire(self, key: str, ttl_seconds: int) -> bool:
        """Re-arm the expiry of an existing key without touching its value.

        Returns:
            True if the TTL was set, False if the key was absent
        """
        ...

    @abstractmethod
    async def ping(self) -> PingResult:
        """Probe backend health. Never raises."""
        ...
