"""
Centralized HTTP exceptions for consistent error handling.
Standardized HTTP status codes and error messages.

Usage:
    from shared.utils.exceptions import NotFoundError, ConflictError, ValidationError

    raise NotFoundError("Order", order_id)
    raise ConflictError("Table 4 is not available", table_id=4)
    raise ValidationError("Order must contain at least one item")
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
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
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        # Log the error with context
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("Order", 123)
        raise NotFoundError("Menu item", item_id, branch_id=branch_id)
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with ID {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


class OrderNotFoundError(NotFoundError):
    """Order not found."""

    def __init__(self, order_id: int | None = None, **log_context: Any):
        super().__init__("Order", order_id, **log_context)


class TableNotFoundError(NotFoundError):
    """Table not found."""

    def __init__(self, table_id: int | None = None, **log_context: Any):
        super().__init__("Table", table_id, **log_context)


class MenuItemNotFoundError(NotFoundError):
    """Menu item referenced by an order line does not exist."""

    def __init__(self, menu_item_id: int | None = None, **log_context: Any):
        super().__init__("Menu item", menu_item_id, **log_context)


# =============================================================================
# 401 / 403 Auth Errors
# =============================================================================


class AuthenticationError(AppException):
    """Missing or invalid credentials (401)."""

    def __init__(self, detail: str = "Invalid or missing token", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            log_level="warning",
            headers={"WWW-Authenticate": "Bearer"},
            **log_context,
        )


class AuthorizationError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise AuthorizationError("delete orders")
        raise AuthorizationError("access this branch", user_id=user_id)
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


class BranchAccessError(AuthorizationError):
    """User doesn't have access to the branch."""

    def __init__(self, branch_id: int | None = None, **log_context: Any):
        super().__init__("access this branch", branch_id=branch_id, **log_context)


class InsufficientRoleError(AuthorizationError):
    """User doesn't have the required role."""

    def __init__(self, required_roles: list[str], **log_context: Any):
        roles_str = ", ".join(required_roles)
        super().__init__(
            f"perform this action (requires role: {roles_str})",
            required_roles=required_roles,
            **log_context,
        )


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Input validation error (400).

    Usage:
        raise ValidationError("Discount percent cannot exceed 100")
        raise ValidationError("Invalid quantity", field="quantity", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).

    Usage:
        raise ConflictError("Table 4 is not available")
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class TableUnavailableError(ConflictError):
    """Table is occupied, reserved, or was taken by a concurrent request."""

    def __init__(self, table_id: int, **log_context: Any):
        super().__init__(f"Table {table_id} is not available", table_id=table_id, **log_context)


class OrderClosedError(ConflictError):
    """Order is completed or cancelled and can no longer change."""

    def __init__(self, order_id: int, current_status: str, **log_context: Any):
        super().__init__(
            f"Order {order_id} is {current_status} and cannot be modified",
            order_id=order_id,
            current_status=current_status,
            **log_context,
        )


class DuplicateEntityError(ConflictError):
    """Entity already exists."""

    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        if identifier:
            detail = f"{entity} '{identifier}' already exists"
        else:
            detail = f"{entity} already exists"

        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


# =============================================================================
# 500 Internal Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).

    Usage:
        raise InternalError("Failed to persist receipt", order_id=123)
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error during {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)
