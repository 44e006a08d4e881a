"""Service greeting, information and configuration endpoints."""

from __future__ import annotations

import socket

from fastapi import APIRouter, Depends

from k8sdemo.api.deps import get_data_service
from k8sdemo.config import settings
from k8sdemo.core.model import now_millis
from k8sdemo.services.data_service import DataService

router = APIRouter(prefix="/api", tags=["System"])

CONFIG_SOURCE = "ConfigMap and Environment Variables"


@router.get("/hello")
async def hello() -> dict[str, object]:
    return {
        "message": f"Hello from {settings.app_name} on Kubernetes!",
        "timestamp": now_millis(),
        "hostname": socket.gethostname(),
    }


@router.get("/info")
async def info(service: DataService = Depends(get_data_service)) -> dict[str, object]:
    return {
        "application": settings.app_name,
        "version": settings.version,
        "environment": settings.env,
        "hostname": socket.gethostname(),
        "itemCount": await service.count(),
    }


@router.get("/config")
async def config() -> dict[str, object]:
    """Effective runtime configuration as injected by the deployment."""
    return {
        "environment": settings.env,
        "version": settings.version,
        "featureEnabled": settings.feature_enabled,
        "source": CONFIG_SOURCE,
    }
