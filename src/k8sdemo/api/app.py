"""FastAPI application factory.

Creates the application with:
- Data item CRUD under /api/data, served cache-aside
- Cache administration under /api/cache
- Service info and Kubernetes health probes
- Lifecycle management for the database and the Redis pool
- Uniform JSON error bodies
- ORJSON for fast JSON serialization
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.types import ExceptionHandler

from k8sdemo import __version__
from k8sdemo.api.deps import reset_cache_manager
from k8sdemo.api.errors import (
    ApiError,
    api_error_handler,
    backend_unavailable_handler,
    generic_exception_handler,
    invalid_argument_handler,
    not_found_handler,
    persistence_error_handler,
    validation_error_handler,
)
from k8sdemo.api.middleware import CorrelationMiddleware
from k8sdemo.api.routers import cache, data, health, system
from k8sdemo.cache.redis import close_redis, get_redis, warm_pool
from k8sdemo.cache.store import BackendUnavailable
from k8sdemo.config import settings
from k8sdemo.core.errors import InvalidArgument, NotFound, PersistenceError
from k8sdemo.observability import configure_logging
from k8sdemo.persistence.db import close_db, init_db
from k8sdemo.persistence.seed import seed_database

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application lifecycle.

    On startup:
    - Configure structured logging
    - Create tables and seed sample data into an empty database
    - Open the Redis pool and warm it to its idle floor

    On shutdown:
    - Close the Redis pool
    - Close database connections

    An unreachable Redis never blocks startup; the service runs uncached.
    """
    configure_logging(
        json_format=settings.env != "dev",
        level=settings.log_level,
    )

    logger.info("Starting %s %s (%s)", settings.app_name, settings.version, settings.env)
    await init_db()
    if settings.seed_sample_data:
        await seed_database()

    client = await get_redis()
    warmed = await warm_pool(client, settings.redis_pool_min_idle)
    logger.info("Redis pool warmed with %d idle connections", warmed)

    logger.info("%s startup complete", settings.app_name)

    yield

    logger.info("Shutting down %s", settings.app_name)
    reset_cache_manager()
    await close_redis()
    await close_db()
    logger.info("%s shutdown complete", settings.app_name)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="k8sdemo",
        description="Cache-aside data service with cache administration",
        version=__version__,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(ApiError, cast(ExceptionHandler, api_error_handler))
    app.add_exception_handler(NotFound, cast(ExceptionHandler, not_found_handler))
    app.add_exception_handler(InvalidArgument, cast(ExceptionHandler, invalid_argument_handler))
    app.add_exception_handler(
        RequestValidationError, cast(ExceptionHandler, validation_error_handler)
    )
    app.add_exception_handler(
        BackendUnavailable, cast(ExceptionHandler, backend_unavailable_handler)
    )
    app.add_exception_handler(PersistenceError, cast(ExceptionHandler, persistence_error_handler))
    app.add_exception_handler(Exception, cast(ExceptionHandler, generic_exception_handler))

    app.include_router(health.router)
    app.include_router(system.router)
    app.include_router(data.router)
    app.include_router(cache.router)

    return app
