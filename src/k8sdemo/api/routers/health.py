"""Health check endpoints.

Kubernetes-compatible probes:
- /health       - Full report of database and cache
- /health/live  - Liveness probe (OK while the process runs)
- /health/ready - Readiness probe

The database is the system of record, so a database failure is unhealthy.
The cache is advisory: an unreachable cache only degrades the service and
the pod keeps receiving traffic.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from k8sdemo.api.deps import get_cache_manager
from k8sdemo.cache.manager import CacheManager
from k8sdemo.persistence.db import health_check as db_health_check

router = APIRouter(tags=["Health"])

CHECK_TIMEOUT = 5.0  # seconds


class HealthStatus(str, Enum):
    """Health check status."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Health status of a single component."""

    name: str
    status: HealthStatus
    latency_ms: float
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "status": self.status.value,
            "latency_ms": round(self.latency_ms, 2),
        }
        if self.message:
            result["message"] = self.message
        return result


async def check_database() -> ComponentHealth:
    """Check database connectivity."""
    start = time.monotonic()
    try:
        healthy = await asyncio.wait_for(db_health_check(), timeout=CHECK_TIMEOUT)
        message = None if healthy else "Database check failed"
    except asyncio.TimeoutError:
        healthy, message = False, "Database check timed out"
    return ComponentHealth(
        name="database",
        status=HealthStatus.HEALTHY if healthy else HealthStatus.UNHEALTHY,
        latency_ms=(time.monotonic() - start) * 1000,
        message=message,
    )


async def check_cache(cache: CacheManager) -> ComponentHealth:
    """Ping the cache backend; failure degrades rather than fails."""
    ping = await cache.ping()
    return ComponentHealth(
        name="cache",
        status=HealthStatus.HEALTHY if ping.healthy else HealthStatus.DEGRADED,
        latency_ms=ping.latency_ms,
        message=None if ping.healthy else ping.error or "Cache check failed",
    )


def overall_status(components: list[ComponentHealth]) -> HealthStatus:
    if any(c.status == HealthStatus.UNHEALTHY for c in components):
        return HealthStatus.UNHEALTHY
    if any(c.status == HealthStatus.DEGRADED for c in components):
        return HealthStatus.DEGRADED
    return HealthStatus.HEALTHY


async def _report(cache: CacheManager) -> JSONResponse:
    components = list(await asyncio.gather(check_database(), check_cache(cache)))
    status = overall_status(components)
    return JSONResponse(
        content={"status": status.value, "components": [c.to_dict() for c in components]},
        status_code=503 if status == HealthStatus.UNHEALTHY else 200,
    )


@router.get("/health")
async def full_health(cache: CacheManager = Depends(get_cache_manager)) -> JSONResponse:
    """Full health report.

    Returns 503 only when the database is down; a cache outage is reported
    as ``degraded`` with 200.
    """
    return await _report(cache)


@router.get("/health/live")
async def live() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(cache: CacheManager = Depends(get_cache_manager)) -> JSONResponse:
    """Readiness probe: 200 while the database answers, 503 otherwise."""
    return await _report(cache)
