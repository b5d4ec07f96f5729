"""Resolver API layer - routes, schemas, and middleware."""

from src.api.middleware import ErrorHandlingMiddleware, RequestLoggingMiddleware
from src.api.routes import router
from src.api.schemas import ErrorResponse, HealthResponse, ProviderStatus, ResolveRequest

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "router",
    "ErrorResponse",
    "HealthResponse",
    "ProviderStatus",
    "ResolveRequest",
]
