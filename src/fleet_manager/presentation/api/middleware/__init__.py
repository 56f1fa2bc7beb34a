"""Middleware module for the fleet management API."""

from .auth import get_current_user, get_service_factory
from .logging import RequestResponseLoggingMiddleware

__all__ = [
    "get_current_user",
    "get_service_factory",
    "RequestResponseLoggingMiddleware"
]
