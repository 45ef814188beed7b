"""Global exception handlers for consistent error responses.

Design:
- AppError subclasses carry their HTTP status (NotFoundAppError -> 404)
- Unexpected Exception falls back to a generic 500
- Every error body carries the request_id for correlation
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ratecache.core.errors import AppError
from ratecache.core.logging import get_request_id
from ratecache.http.decorator import response_decorator

logger = logging.getLogger(__name__)


def error_body(code: str, message: str, details: dict | None = None) -> dict:
    """Build the ``{"error": {...}}`` envelope shared by every error response."""
    error_content = {
        "code": code,
        "message": message,
        "request_id": get_request_id(),
    }
    if details:
        error_content["details"] = details
    return {"error": error_content}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    The status code comes from the error class (``AppError.status_code``).

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = exc.status_code

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "request_path": request.url.path,
        },
    )

    response = JSONResponse(
        status_code=status_code,
        content=error_body(exc.code, exc.message, dict(exc.details) if exc.details else None),
    )
    # Admitted requests that fail later still report their rate limit budget
    return response_decorator.decorate(response, getattr(request.state, "rate_limit", None))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure for debugging and returns a generic message so no
    implementation details reach the client.
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
        content=error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
