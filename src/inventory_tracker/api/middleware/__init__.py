"""
FastAPI middleware components.
"""

from .error_handler import ErrorHandlerMiddleware, register_error_handlers

__all__ = [
    "ErrorHandlerMiddleware",
    "register_error_handlers",
]
