"""Domain error taxonomy and its HTTP mapping."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import OperationalError

logger = logging.getLogger(__name__)


class BackofficeError(Exception):
    """Base class for errors surfaced to API callers."""

    kind: str = "error"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(BackofficeError):
    kind = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTransitionError(ValidationError):
    """Status change not allowed from the order's current status."""

    kind = "invalid_transition"


class NotFoundError(BackofficeError):
    kind = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class UnauthenticatedError(BackofficeError):
    kind = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(BackofficeError):
    kind = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(BackofficeError):
    """Order was modified concurrently; caller should re-read and retry."""

    kind = "conflict"
    status_code = status.HTTP_409_CONFLICT


class RateLimitedError(BackofficeError):
    kind = "rate_limited"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS


class UnavailableError(BackofficeError):
    """Backing store unreachable or timed out."""

    kind = "unavailable"
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class ConsistencyWarning(BackofficeError):
    """Audit entry could not be written after the order change was applied.

    Never returned to API callers: the lifecycle manager logs it and parks the
    entry in the audit dead-letter table.
    """

    kind = "consistency_warning"

    def __init__(self, message: str, *, order_id: str, operation_id: str) -> None:
        super().__init__(message)
        self.order_id = order_id
        self.operation_id = operation_id


def error_body(kind: str, message: str) -> dict[str, dict[str, str]]:
    return {"error": {"kind": kind, "message": message}}


def register_exception_handlers(app: FastAPI) -> None:
    """Render domain, request validation and store errors as structured JSON bodies."""

    @app.exception_handler(BackofficeError)
    async def _backoffice_error(request: Request, exc: BackofficeError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_body(exc.kind, exc.message))

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(ValidationError.kind, message),
        )

    @app.exception_handler(OperationalError)
    async def _store_unavailable(request: Request, exc: OperationalError) -> JSONResponse:
        logger.error(
            "[STORE] %s %s failed: %s",
            request.method,
            request.url.path,
            exc.orig if exc.orig is not None else exc,
        )
        return JSONResponse(
            status_code=UnavailableError.status_code,
            content=error_body(UnavailableError.kind, "Record store unavailable"),
        )
