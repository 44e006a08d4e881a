"""Domain error taxonomy.

Cache backend failures are not part of this module: they are represented by
``k8sdemo.cache.store.BackendUnavailable`` and never leave the cache layer.
"""

from __future__ import annotations


class NotFound(LookupError):
    """Requested entity, cache name or cache key does not exist."""

    def __init__(self, resource_type: str, identifier: str):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} not found: {identifier}")


class InvalidArgument(ValueError):
    """Malformed input such as an empty pattern or a non-positive TTL."""


class PersistenceError(RuntimeError):
    """The system of record failed; fatal to the current request."""
