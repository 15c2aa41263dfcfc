"""
Middleware package.
"""
from storedash.middleware.error_handler import ErrorHandlerMiddleware
from storedash.middleware.request_id import RequestIdMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RequestIdMiddleware",
]
