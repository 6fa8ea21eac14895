"""Catly API error handling.

Provides CatlyHttpError and the FastAPI exception handlers that turn every
failure into the shared error envelope.

Global exception handlers:
- CatlyHttpError: Application-specific errors with structured envelope
- HTTPException: FastAPI/Starlette HTTP exceptions (404 routes, 405 methods)
- RequestValidationError: Pydantic validation errors
- Exception: Catch-all for unhandled exceptions (500, no stack traces)
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from catly.api.error_model import get_error_code_for_status, make_error_response

logger = logging.getLogger(__name__)


class CatlyHttpError(Exception):
    """Application-level HTTP error with structured error envelope.

    Attributes:
        status_code: HTTP status code (e.g., 400, 404, 500).
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        details: Optional dict with additional error context.
    """

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details


async def catly_http_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for CatlyHttpError."""
    assert isinstance(exc, CatlyHttpError)

    return make_error_response(
        request,
        code=exc.code,
        message=exc.message,
        http_status=exc.status_code,
        details=exc.details,
    )


async def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for HTTPException (FastAPI and Starlette).

    Maps standard HTTP exceptions to the error envelope.
    """
    assert isinstance(exc, StarletteHTTPException)

    code = get_error_code_for_status(exc.status_code)
    message = str(exc.detail) if exc.detail else f"HTTP {exc.status_code}"

    response = make_error_response(
        request,
        code=code,
        message=message,
        http_status=exc.status_code,
        details=None,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler for RequestValidationError.

    Does not expose raw validation internals to avoid information leakage.
    """
    assert isinstance(exc, RequestValidationError)

    safe_details: list[dict[str, Any]] = []
    for error in exc.errors():
        loc = error.get("loc", ())
        safe_loc = [str(part) for part in loc if part not in ("body", "query", "path")]
        safe_details.append(
            {
                "field": ".".join(safe_loc) if safe_loc else "request",
                "message": error.get("msg", "Validation error"),
            }
        )

    return make_error_response(
        request,
        code="REQUEST_VALIDATION_FAILED",
        message="Request validation failed",
        http_status=422,
        details={"errors": safe_details} if safe_details else None,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler for unhandled exceptions.

    Returns 500 with a safe generic message and logs the exception.
    """
    request_id = getattr(request.state, "request_id", None)

    logger.exception(
        "Unhandled exception: %s",
        type(exc).__name__,
        extra={"request_id": request_id},
    )

    return make_error_response(
        request,
        code="INTERNAL_ERROR",
        message="internal server error",
        http_status=500,
        details=None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the global exception handlers on an application."""
    app.add_exception_handler(CatlyHttpError, catly_http_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
