"""
Error Handler Middleware - Uniform JSON bodies for request-level failures.

Only failures outside an agent run land here (bad request bodies,
unknown routes, dependency wiring errors). A run that fails after the
SSE response has started reports an `error` event on the stream instead.
"""

import logging
import traceback
from typing import Any, Dict, Optional

from fastapi import Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from finresearch.core.config import get_settings
from finresearch.core.exceptions import AppException
from finresearch.models.responses import ErrorResponse

logger = logging.getLogger(__name__)


def create_error_response(
    message: str,
    error_code: str = "INTERNAL_ERROR",
    status_code: int = 500,
    details: Optional[Dict[str, Any]] = None,
    public_details: bool = False
) -> JSONResponse:
    """
    Build an ErrorResponse body.

    Details are only exposed in debug mode unless `public_details` is set
    (validation errors, which the client needs to fix its request).
    """
    show_details = bool(details) and (public_details or get_settings().debug)
    body = ErrorResponse(
        error=message,
        error_code=error_code,
        details=details if show_details else None
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, exclude_none=True)
    )


async def app_exception_handler(
    request: Request,
    exc: AppException
) -> JSONResponse:
    """Map an AppException to its declared status and code."""
    level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(level, f"{request.method} {request.url.path}: {exc.error_code} - {exc.message}")
    return create_error_response(
        message=exc.message,
        error_code=exc.error_code,
        status_code=exc.status_code,
        details=exc.details
    )


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    return create_error_response(
        message=str(exc.detail),
        error_code="HTTP_ERROR",
        status_code=exc.status_code
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Report each invalid field as `loc -> path: message`."""
    errors = [
        f"{' -> '.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    logger.info(f"Rejected {request.method} {request.url.path}: {errors}")

    return create_error_response(
        message="Validation error",
        error_code="VALIDATION_ERROR",
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        details={"errors": errors},
        public_details=True
    )


async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Last resort: log the traceback, hide it unless debugging."""
    traceback_str = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {traceback_str}")

    details = None
    if get_settings().debug:
        details = {
            "exception_type": type(exc).__name__,
            "traceback": traceback_str
        }

    return create_error_response(
        message="An unexpected error occurred",
        error_code="INTERNAL_ERROR",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        details=details
    )
