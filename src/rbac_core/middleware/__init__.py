"""Middleware package."""

from rbac_core.middleware.error_handler import register_exception_handlers
from rbac_core.middleware.request_id_middleware import RequestIdMiddleware

__all__ = [
    "RequestIdMiddleware",
    "register_exception_handlers",
]
