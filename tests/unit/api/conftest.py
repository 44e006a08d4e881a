"""Fixtures for router tests: the real app with in-memory dependencies."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from k8sdemo.api.app import create_app
from k8sdemo.api.deps import get_cache_admin, get_cache_manager, get_data_service
from k8sdemo.cache.manager import CacheManager
from k8sdemo.services.cache_admin import CacheAdmin
from k8sdemo.services.data_service import DataService


@pytest.fixture
def app(
    cache_manager: CacheManager, data_service: DataService, cache_admin: CacheAdmin
) -> FastAPI:
    app = create_app()
    app.dependency_overrides[get_cache_manager] = lambda: cache_manager
    app.dependency_overrides[get_data_service] = lambda: data_service
    app.dependency_overrides[get_cache_admin] = lambda: cache_admin
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Client without lifespan, so no database or Redis is contacted."""
    return TestClient(app, raise_server_exceptions=False)
