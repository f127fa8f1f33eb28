"""
API Middleware - Exception translation for the HTTP layer.
"""

from chatflow.api.middleware.error_handler import (
    create_error_response,
    register_exception_handlers,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler,
)

__all__ = [
    "create_error_response",
    "register_exception_handlers",
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "generic_exception_handler",
]
