"""Cache key schema.

Key format: {prefix}:{cache_name}:{entity_key}

Where:
- prefix: global namespace (default "k8sdemo") shared by every cache
- cache_name: registered cache name, never containing the separator
- entity_key: entity identifier, or a fixed sentinel for collection caches

One separator is used everywhere, including TTL updates; the entity key is
everything after the second separator so ids containing ":" stay distinct.
"""

from __future__ import annotations

import re

SEPARATOR = ":"

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def escape_glob(value: str) -> str:
    """Escape Redis glob metacharacters so the value matches literally."""
    return _GLOB_SPECIAL.sub(r"\\\1", value)


class CacheKeys:
    """Cache key generator following one naming convention."""

    def __init__(self, prefix: str):
        if not prefix or SEPARATOR in prefix:
            raise ValueError(f"Invalid cache key prefix: {prefix!r}")
        self.prefix = prefix

    def cache_prefix(self, cache_name: str) -> str:
        """Prefix shared by every key of a named cache."""
        return f"{self.prefix}{SEPARATOR}{cache_name}{SEPARATOR}"

    def key(self, cache_name: str, entity_key: str) -> str:
        """Full key for one entry of a named cache."""
        return self.cache_prefix(cache_name) + entity_key

    def cache_pattern(self, cache_name: str) -> str:
        """Pattern matching every key of a named cache.

        Use with SCAN for enumeration and bulk deletes.
        """
        return escape_glob(self.cache_prefix(cache_name)) + "*"

    def search_pattern(self, cache_name: str, fragment: str) -> str:
        """Pattern matching entity keys of a cache that contain ``fragment``.

        The fragment is passed through unescaped so callers may use wildcards.
        """
        return f"{escape_glob(self.cache_prefix(cache_name))}*{fragment}*"

    def namespace_pattern(self) -> str:
        """Pattern matching every key under the global prefix."""
        return escape_glob(self.prefix + SEPARATOR) + "*"

    def entity_key(self, cache_name: str, key: str) -> str | None:
        """Strip the cache prefix from a full key.

        Returns None if the key does not belong to the named cache.
        """
        prefix = self.cache_prefix(cache_name)
        if not key.startswith(prefix):
            return None
        return key[len(prefix) :]
