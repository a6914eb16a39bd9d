"""
Global error handling.

Domain exceptions are turned into JSON responses by exception handlers;
ErrorHandlerMiddleware logs every request and catches whatever escapes them.
"""

import time

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from inventory_tracker.utils.logger import get_logger
from inventory_tracker.utils.exceptions import (
    InventoryTrackerError,
    ValidationError,
    NotFoundError,
    InsufficientStockError,
    StorageError,
    ConcurrentModificationError,
)

logger = get_logger(__name__)


def _error_response(status_code: int, error: str, exc: InventoryTrackerError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": exc.message,
            "details": exc.details or None,
        }
    )


async def validation_error_handler(request: Request, exc: ValidationError):
    logger.warning(f"Validation error: {exc}")
    return _error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation Error", exc)


async def not_found_handler(request: Request, exc: NotFoundError):
    logger.info(f"Not found: {exc}")
    return _error_response(status.HTTP_404_NOT_FOUND, "Not Found", exc)


async def insufficient_stock_handler(request: Request, exc: InsufficientStockError):
    logger.warning(f"Insufficient stock: {exc}")
    return _error_response(status.HTTP_409_CONFLICT, "Insufficient Stock", exc)


async def concurrent_modification_handler(request: Request, exc: ConcurrentModificationError):
    logger.warning(f"Concurrent modification: {exc}")
    return _error_response(status.HTTP_409_CONFLICT, "Concurrent Modification", exc)


async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "Storage Error",
            "message": "A storage error occurred"
        }
    )


async def inventory_error_handler(request: Request, exc: InventoryTrackerError):
    logger.error(f"Inventory Tracker error: {exc}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Error", exc)


def register_error_handlers(app: FastAPI) -> None:
    """Map domain exceptions to HTTP responses (most specific class wins)."""
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(InsufficientStockError, insufficient_stock_handler)
    app.add_exception_handler(ConcurrentModificationError, concurrent_modification_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(InventoryTrackerError, inventory_error_handler)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request logging and last-resort error handling.
    """

    async def dispatch(self, request: Request, call_next):
        """Process request with error handling."""
        start_time = time.time()

        try:
            response = await call_next(request)

            duration = time.time() - start_time
            logger.info(
                f"{request.method} {request.url.path} - {response.status_code} - {duration:.3f}s"
            )

            return response

        except Exception as e:
            logger.error(f"Unhandled exception: {e}", exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error": "Internal Server Error",
                    "message": "An unexpected error occurred"
                }
            )
