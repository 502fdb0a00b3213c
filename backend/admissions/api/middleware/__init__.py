"""
API Middleware

Request tagging and the JSON error envelope shared by all routes.

Modules:
    - correlation: X-Correlation-Id propagation and request timing logs
    - error_handlers: DomainError / request validation / fallback handlers
"""

from .correlation import CorrelationIdMiddleware
from .error_handlers import register_error_handlers

__all__ = ["CorrelationIdMiddleware", "register_error_handlers"]
