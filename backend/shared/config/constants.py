"""
Centralized constants for the backend application.
Avoid magic strings and repeated constants.

Usage:
    from shared.config.constants import Roles, OrderStatus, TAX_RATE

    if order.status in OrderStatus.TERMINAL:
        ...
"""

from decimal import Decimal
from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """Staff role constants."""

    OWNER: Final[str] = "owner"
    MANAGER: Final[str] = "manager"
    WAITER: Final[str] = "waiter"

    ALL: Final[list[str]] = [OWNER, MANAGER, WAITER]


# Roles allowed to delete orders
ORDER_DELETE_ROLES: Final[frozenset[str]] = frozenset({Roles.OWNER, Roles.MANAGER})


class Permissions:
    """Per-user permission flags carried in the access token."""

    ACCESS_POS: Final[str] = "access_pos"
    MANAGE_TABLES: Final[str] = "manage_tables"

    ALL: Final[list[str]] = [ACCESS_POS, MANAGE_TABLES]


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PREPARING: Final[str] = "preparing"
    CONFIRMED: Final[str] = "confirmed"
    SERVED: Final[str] = "served"
    COMPLETED: Final[str] = "completed"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [PREPARING, CONFIRMED, SERVED, COMPLETED, CANCELLED]
    ACTIVE: Final[list[str]] = [PREPARING, CONFIRMED, SERVED]
    TERMINAL: Final[list[str]] = [COMPLETED, CANCELLED]


class OrderLineStatus:
    """Order line (item) status constants."""

    ORDERED: Final[str] = "ordered"
    PREPARING: Final[str] = "preparing"
    READY: Final[str] = "ready"
    SERVED: Final[str] = "served"
    CANCELLED: Final[str] = "cancelled"

    ALL: Final[list[str]] = [ORDERED, PREPARING, READY, SERVED, CANCELLED]


class TableStatus:
    """Table status constants."""

    AVAILABLE: Final[str] = "available"
    OCCUPIED: Final[str] = "occupied"
    RESERVED: Final[str] = "reserved"

    ALL: Final[list[str]] = [AVAILABLE, OCCUPIED, RESERVED]


class TableSection:
    """Table section constants."""

    INDOOR: Final[str] = "Indoor"
    OUTDOOR: Final[str] = "Outdoor"

    ALL: Final[list[str]] = [INDOOR, OUTDOOR]


class MenuItemStatus:
    """Menu item status constants."""

    ACTIVE: Final[str] = "active"
    INACTIVE: Final[str] = "inactive"
    FEATURED: Final[str] = "featured"

    # Statuses shown on the POS menu
    SELLABLE: Final[list[str]] = [ACTIVE, FEATURED]


class DiscountType:
    """Order discount type constants."""

    NONE: Final[str] = "none"
    PERCENT: Final[str] = "percent"
    AMOUNT: Final[str] = "amount"

    ALL: Final[list[str]] = [NONE, PERCENT, AMOUNT]


class PaymentMethod:
    """Accepted payment method constants."""

    CASH: Final[str] = "cash"
    CARD: Final[str] = "card"
    MOBILE: Final[str] = "mobile"
    QR: Final[str] = "qr"

    ALL: Final[list[str]] = [CASH, CARD, MOBILE, QR]
    DEFAULT: Final[str] = CASH


# =============================================================================
# Money
# =============================================================================

# Fixed sales tax applied to the discounted subtotal
TAX_RATE: Final[Decimal] = Decimal("0.10")

DEFAULT_CUSTOMER_NAME: Final[str] = "Guest"


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    # Price limits (in cents)
    MAX_PRICE_CENTS: Final[int] = 100_000_00

    # Discount limits
    MAX_DISCOUNT_PERCENT: Final[int] = 100

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 20
    MAX_PAGE_SIZE: Final[int] = 200
