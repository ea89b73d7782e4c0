"""
Error Handling

Centralized conversion of business exceptions into JSON error responses.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .exceptions import BUSINESS_EXCEPTIONS, handle_business_exception
from ..core.logging_config import get_logger

logger = get_logger(__name__)


async def business_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a business exception with the status code it maps to."""
    http_exception = handle_business_exception(exc)
    if http_exception.status_code >= 500:
        logger.error(f"{type(exc).__name__} for {request.method} {request.url.path}: {exc}")
    else:
        logger.warning(
            f"Business exception for {request.method} {request.url.path}: {http_exception.detail}"
        )

    return JSONResponse(
        status_code=http_exception.status_code,
        content={
            "error": http_exception.detail,
            "status_code": http_exception.status_code,
            "path": request.url.path,
        }
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the business exception handler for every workspace exception type."""
    for exc_class in BUSINESS_EXCEPTIONS:
        app.add_exception_handler(exc_class, business_exception_handler)
