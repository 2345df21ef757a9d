"""
Centralized application exceptions for consistent error handling.

Services raise these typed failures; the transport layer translates them
using the ``status_code`` each one carries. They are deliberately plain
exceptions so the persistence core never hands transport objects around.

Usage:
    from shared.utils.exceptions import NotFoundError, InvalidArgumentError

    raise NotFoundError("Reptile", reptile_id)
    raise InvalidArgumentError("Entity creation 'Reptile' with id is not allowed")
    raise AccessDeniedError("Reptile does not belong to the current user")
"""

from typing import Any

from fastapi import status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(Exception):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(detail)
        self.status_code = status_code
        self.detail = detail


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class InvalidArgumentError(AppException):
    """
    Malformed or disallowed input (400).

    Usage:
        raise InvalidArgumentError("Entity update 'Enclosure' with 'null' id is not allowed")
        raise InvalidArgumentError("Unknown sort property", field="colour")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="info",
            **log_context,
        )


# =============================================================================
# 403 Forbidden Errors
# =============================================================================


class AccessDeniedError(AppException):
    """
    Explicit ownership or principal check failed (403).

    Usage:
        raise AccessDeniedError("Enclosure does not belong to the current user")
    """

    def __init__(self, detail: str = "Access denied", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Also raised for records that exist but belong to another owner, so
    scoped lookups never reveal existence.

    Usage:
        raise NotFoundError("Reptile", 123)
        raise NotFoundError("Enclosure", enclosure_id, owner_id=owner_id)
    """

    def __init__(self, entity: str, entity_id: Any = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with id '{entity_id}' not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="info",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )
        self.entity = entity
        self.entity_id = entity_id


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class DatabaseError(AppException):
    """Database operation failed (500)."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            operation=operation,
            **log_context,
        )
