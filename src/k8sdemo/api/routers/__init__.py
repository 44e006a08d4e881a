"""API routers."""

from k8sdemo.api.routers import cache, data, health, system

__all__ = ["cache", "data", "health", "system"]
