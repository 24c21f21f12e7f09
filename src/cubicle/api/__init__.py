"""REST API client for the Cubicle backend."""

from .client import (
    ApiClient,
    ApiError,
    AuthRequiredError,
    ForbiddenError,
    NotFoundError,
    ServerValidationError,
)

__all__ = [
    "ApiClient",
    "ApiError",
    "AuthRequiredError",
    "ForbiddenError",
    "NotFoundError",
    "ServerValidationError",
]
