"""
Utilities module: Exceptions, schemas.
"""

from shared.utils.exceptions import (
    NotFoundError,
    AuthorizationError,
    AuthenticationError,
    ValidationError,
    ConflictError,
)
from shared.utils.schemas import ErrorResponse

__all__ = [
    # exceptions
    "NotFoundError",
    "AuthorizationError",
    "AuthenticationError",
    "ValidationError",
    "ConflictError",
    # schemas
    "ErrorResponse",
]
