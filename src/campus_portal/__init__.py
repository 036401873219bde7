"""Campus portal backend: JSON document store, attachments and token auth behind a FastAPI app."""

from .exceptions import (
    ConflictError,
    NotFoundError,
    PortalError,
    UnauthenticatedError,
    UnauthorizedError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "PortalError",
    "ValidationError",
    "UnauthorizedError",
    "UnauthenticatedError",
    "NotFoundError",
    "ConflictError",
    "__version__",
]
