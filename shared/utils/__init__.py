"""
Utilities module: Exceptions.
"""

from shared.utils.exceptions import (
    AppException,
    InvalidArgumentError,
    AccessDeniedError,
    NotFoundError,
    DatabaseError,
)

__all__ = [
    "AppException",
    "InvalidArgumentError",
    "AccessDeniedError",
    "NotFoundError",
    "DatabaseError",
]
