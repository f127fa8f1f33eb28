"""
Error Handler Middleware - Global exception handling for the API.

Every failure leaves the API in the same shape:

    {"success": false, "error": ..., "error_code": ..., "path": ..., "timestamp": ...}

Sources of failure and how they are translated:

    AppException (chatflow.core.exceptions)   its own error_code / status_code
    HTTPException raised by a route           HTTP status mapped to an error_code
    RequestValidationError                    422 VALIDATION_ERROR
    anything else (provider errors included)  500 INTERNAL_ERROR

`details` is only included in debug mode.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatflow.core.config import get_settings
from chatflow.core.exceptions import AppException

logger = logging.getLogger(__name__)


HTTP_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: "NOT_FOUND",
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_413_REQUEST_ENTITY_TOO_LARGE: "PAYLOAD_TOO_LARGE",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "UNPROCESSABLE_CONTENT",
}


def create_error_response(
    message: str,
    error_code: str = "INTERNAL_ERROR",
    status_code: int = 500,
    details: Optional[dict] = None,
    path: Optional[str] = None
) -> JSONResponse:
    """Build the JSON error body shared by every handler."""
    content = {
        "success": False,
        "error": message,
        "error_code": error_code,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
    if path:
        content["path"] = path

    if details and get_settings().debug:
        content["details"] = details

    return JSONResponse(status_code=status_code, content=content)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Application errors carry their own code and status."""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(f"{exc.error_code} on {request.url.path}: {exc.message}")

    return create_error_response(
        message=exc.message,
        error_code=exc.error_code,
        status_code=exc.status_code,
        details=exc.details,
        path=request.url.path
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error_code = HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR")
    logger.info(f"{error_code} on {request.url.path}: {exc.detail}")

    return create_error_response(
        message=str(exc.detail),
        error_code=error_code,
        status_code=exc.status_code,
        path=request.url.path
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Flatten pydantic errors into "loc -> loc: msg" strings."""
    errors = [
        f"{' -> '.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    logger.info(f"Validation failed on {request.url.path}: {len(errors)} errors")

    return create_error_response(
        message=f"Validation error: {errors[0]}" if errors else "Validation error",
        error_code="VALIDATION_ERROR",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details={"errors": errors},
        path=request.url.path
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Last resort for anything not raised as an AppException.

    Provider errors (httpx, litellm, Deepgram) propagate out of the
    workflow unchanged and end up here.
    """
    logger.error(f"Unexpected error on {request.url.path}: {exc}", exc_info=exc)

    details = {
        "exception_type": type(exc).__name__,
        "traceback": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    }

    return create_error_response(
        message="An unexpected error occurred",
        error_code="INTERNAL_ERROR",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        details=details,
        path=request.url.path
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install all handlers on the application."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
