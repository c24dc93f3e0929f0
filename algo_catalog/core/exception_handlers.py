"""Global exception handlers for consistent error responses.

Every AppError subclass maps to one HTTP status; anything unexpected becomes a
generic 500 without implementation details. All error bodies share the shape
``{"error": {"code", "message", "request_id", "details"?}}``.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from algo_catalog.core.errors import (
    AppError,
    AuthenticationAppError,
    NotFoundAppError,
    PayloadTooLargeAppError,
    RateLimitAppError,
    StorageAppError,
)
from algo_catalog.core.logging import get_request_id

logger = logging.getLogger(__name__)

ADMIN_REALM = 'Basic realm="Admin"'

# Checked in order; first match wins, so subclasses come before their bases.
_STATUS_BY_ERROR: tuple[tuple[type[AppError], int], ...] = (
    (PayloadTooLargeAppError, 413),
    (AuthenticationAppError, 401),
    (NotFoundAppError, 404),
    (RateLimitAppError, 429),
    (StorageAppError, 500),
)


def status_for(exc: AppError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def error_response(exc: AppError) -> JSONResponse:
    """Render an AppError as the standard JSON error envelope."""
    status_code = status_for(exc)

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    headers: dict[str, str] = {}
    if isinstance(exc, AuthenticationAppError):
        headers["WWW-Authenticate"] = ADMIN_REALM
    if isinstance(exc, RateLimitAppError) and exc.headers:
        headers.update(exc.headers)

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
        headers=headers or None,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format."""
    status_code = status_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )
    return error_response(exc)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure for debugging while returning a generic message, so
    no stack traces reach the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
