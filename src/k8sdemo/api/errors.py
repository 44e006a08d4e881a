"""Structured error responses.

Every error leaves the API as a JSON object with an ``error`` field:

    {"error": "...", "code": "NotFound", "timestamp": "...", "context": {...}}

Domain errors map 1:1 onto status codes (NotFound 404, InvalidArgument 400,
PersistenceError 500, BackendUnavailable 503). Backend stack traces are
never included.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from k8sdemo.cache.store import BackendUnavailable
from k8sdemo.core.errors import InvalidArgument, NotFound, PersistenceError

logger = logging.getLogger(__name__)


class ErrorBody(BaseModel):
    """JSON body of every error response."""

    model_config = {"extra": "forbid"}

    error: str
    code: str
    timestamp: str
    context: dict[str, Any] | None = None


def error_body(code: str, text: str, context: dict[str, Any] | None = None) -> dict[str, Any]:
    return ErrorBody(
        error=text,
        code=code,
        timestamp=datetime.now(UTC).isoformat(),
        context=context,
    ).model_dump(exclude_none=True)


class ApiError(HTTPException):
    """Base exception for API errors."""

    def __init__(
        self,
        status_code: int,
        code: str,
        text: str,
        context: dict[str, Any] | None = None,
    ):
        self.code = code
        self.text = text
        self.context = context
        super().__init__(status_code=status_code, detail=text)

    def to_body(self) -> dict[str, Any]:
        return error_body(self.code, self.text, self.context)


class NotFoundError(ApiError):
    """Resource not found (404)."""

    def __init__(self, resource_type: str, identifier: str):
        super().__init__(
            status_code=404,
            code="NotFound",
            text=f"{resource_type} not found: {identifier}",
            context={"resource": resource_type, "identifier": identifier},
        )


class BadRequestError(ApiError):
    """Invalid request (400)."""

    def __init__(self, text: str, context: dict[str, Any] | None = None):
        super().__init__(status_code=400, code="InvalidArgument", text=text, context=context)


class ServiceUnavailableError(ApiError):
    """Cache backend unreachable (503)."""

    def __init__(self, text: str, context: dict[str, Any] | None = None):
        super().__init__(
            status_code=503, code="BackendUnavailable", text=text, context=context
        )


class InternalServerError(ApiError):
    """Internal server error (500)."""

    def __init__(self, text: str = "An unexpected error occurred"):
        super().__init__(status_code=500, code="InternalServerError", text=text)


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    """Exception handler for API errors."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return await api_error_handler(request, NotFoundError(exc.resource_type, exc.identifier))


async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    return await api_error_handler(request, BadRequestError(str(exc)))


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and parameters are InvalidArgument, not 422."""
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    return await api_error_handler(
        request, BadRequestError("Invalid request", context={"fields": fields})
    )


async def backend_unavailable_handler(
    request: Request, exc: BackendUnavailable
) -> JSONResponse:
    return await api_error_handler(
        request,
        ServiceUnavailableError(
            f"Cache backend unavailable: {exc.detail}",
            context={"operation": exc.operation},
        ),
    )


async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
    return await api_error_handler(request, InternalServerError("Persistent store failure"))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Exception handler for unexpected errors."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_body("InternalServerError", "An unexpected error occurred"),
    )
