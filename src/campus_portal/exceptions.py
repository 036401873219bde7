"""Error hierarchy shared by the store, the services and the HTTP layer.

Every error carries the HTTP status it maps to so the FastAPI handlers can
turn it into a ``{"message": ...}`` response without a lookup table.
"""

from __future__ import annotations


class PortalError(Exception):
    """Base class for all campus-portal errors."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortalError):
    status_code = 400
    default_message = "Incomplete data"


class UnauthorizedError(PortalError):
    status_code = 401
    default_message = "Invalid username or password"


class UnauthenticatedError(PortalError):
    status_code = 403
    default_message = "Invalid token"


class NotFoundError(PortalError):
    status_code = 404
    default_message = "Not found"


class ConflictError(PortalError):
    status_code = 409
    default_message = "Conflict"


class UnknownCollectionError(PortalError, KeyError):
    """Raised for a collection name outside the fixed document schema."""

    default_message = "Unknown collection"

    def __str__(self) -> str:
        return self.message


__all__ = [
    "PortalError",
    "ValidationError",
    "UnauthorizedError",
    "UnauthenticatedError",
    "NotFoundError",
    "ConflictError",
    "UnknownCollectionError",
]
