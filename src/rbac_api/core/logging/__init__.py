"""Logging module with structured logging and request tracking."""

from rbac_api.core.logging.middleware import RequestLoggingMiddleware


__all__ = [
    "RequestLoggingMiddleware",
]
