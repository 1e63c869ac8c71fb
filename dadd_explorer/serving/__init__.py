"""
Serving Module
"""
from .dependencies import get_gateway
from .middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware

__all__ = [
    "get_gateway",
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "SecurityHeadersMiddleware",
]
