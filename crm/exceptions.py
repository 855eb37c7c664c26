"""Application error taxonomy and the FastAPI handlers that render it."""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import ConnectionFailure
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"
    headers: dict[str, str] | None = None

    def __init__(self, message: str | None = None, details: list[dict[str, Any]] | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class InputValidationError(AppError):
    """Malformed or missing input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class UnauthorizedError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Access denied. No token provided."
    headers = {"WWW-Authenticate": "Bearer"}


class InvalidTokenError(UnauthorizedError):
    default_message = "Invalid token."


class InvalidCredentialsError(UnauthorizedError):
    """Login rejected; reported as a bad request without a bearer challenge."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid credentials"
    headers = None


class ConflictError(AppError):
    """Uniqueness violation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Resource already exists"


class NotFoundError(AppError):
    """Resource absent, or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class UpstreamError(AppError):
    """A dependent external API failed in a way that blocks the operation."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Upstream service error"


class UpstreamNotFoundError(UpstreamError):
    default_message = "Repository not found. Please check the repository path."


class RateLimitedError(UpstreamError):
    default_message = "Rate limit exceeded. Please try again later."


class ServiceUnavailableError(AppError):
    """A datastore is unreachable or its pool is exhausted; safe to retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service temporarily unavailable. Please retry."
    headers = {"Retry-After": "5"}


def error_body(message: str, details: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    """Build the failure envelope."""
    body: dict[str, Any] = {"success": False, "error": message}
    if details:
        body["details"] = details
    return body


def _field_name(loc: tuple[Any, ...] | list[Any]) -> str:
    # Drop the "body"/"path"/"query" prefix FastAPI adds
    parts = [str(part) for part in loc]
    if parts and parts[0] in ("body", "path", "query", "header"):
        parts = parts[1:]
    return ".".join(parts) or "body"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.details),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": _field_name(error.get("loc", ())), "message": error.get("msg", "Invalid value")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(InputValidationError.default_message, details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def datastore_unavailable_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.warning(f"Datastore unavailable during {request.method} {request.url.path}: {exc}")
    error = ServiceUnavailableError()
    return JSONResponse(
        status_code=error.status_code,
        content=error_body(error.message),
        headers=error.headers,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error during {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(AppError.default_message),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach every error handler to the application."""
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(PoolTimeoutError, datastore_unavailable_handler)
    app.add_exception_handler(OperationalError, datastore_unavailable_handler)
    app.add_exception_handler(ConnectionFailure, datastore_unavailable_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
