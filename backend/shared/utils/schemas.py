"""
Shared Pydantic schemas used across the application.

Money is exchanged in integer cents, the same unit it is stored in.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# =============================================================================
# Common Types
# =============================================================================

OrderStatus = Literal["preparing", "confirmed", "served", "completed", "cancelled"]
OrderLineStatus = Literal["ordered", "preparing", "ready", "served", "cancelled"]
TableStatus = Literal["available", "occupied", "reserved"]
TableSection = Literal["Indoor", "Outdoor"]
PaymentMethod = Literal["cash", "card", "mobile", "qr"]


class ErrorResponse(BaseModel):
    """Standard error body."""

    detail: str


# =============================================================================
# Order Schemas
# =============================================================================


class OrderLineInput(BaseModel):
    """
    Input for a single order line.
    Quantity and discount checks live in the service so they surface as 400s.
    """

    menu_item_id: int
    quantity: int = 1
    status: OrderLineStatus | None = None


class OrderCreate(BaseModel):
    """Request to open an order on a free table."""

    branch_id: int
    table_id: int
    items: list[OrderLineInput]
    customer_name: str | None = Field(default=None, max_length=200)
    discount_type: str = "none"
    discount_value: float = Field(default=0.0, allow_inf_nan=False)


class OrderUpdate(BaseModel):
    """
    Partial order update. Any combination of fields may be sent.

    - items: replaces every line (prices looked up again)
    - discount_type / discount_value: recompute totals
    - status: direct status assignment
    - paid: mark as paid (forces completed unless status is cancelled)
    """

    items: list[OrderLineInput] | None = None
    discount_type: str | None = None
    discount_value: float | None = Field(default=None, allow_inf_nan=False)
    status: OrderStatus | None = None
    paid: bool | None = None
    payment_method: PaymentMethod | None = None
    customer_name: str | None = Field(default=None, max_length=200)


class OrderLineOutput(BaseModel):
    """Output for a single order line."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    menu_item_id: int
    name: str
    unit_price_cents: int
    quantity: int
    amount_cents: int
    status: OrderLineStatus


class OrderOutput(BaseModel):
    """Output for an order with its lines and totals."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    branch_id: int
    table_id: int
    table_number: int
    customer_name: str
    server_id: int | None = None
    status: OrderStatus
    items: list[OrderLineOutput]
    subtotal_cents: int
    discount_type: str
    discount_value: float
    discount_cents: int
    tax_cents: int
    total_cents: int
    paid: bool
    payment_method: PaymentMethod
    payment_date: datetime | None = None
    modified: bool
    created_at: datetime
    updated_at: datetime | None = None


class OrderListResponse(BaseModel):
    """Paginated order listing."""

    items: list[OrderOutput]
    pagination: dict[str, Any]


# =============================================================================
# Payment / Receipt Schemas
# =============================================================================


class PaymentRequest(BaseModel):
    """Request to settle an order at the POS."""

    order_id: int
    payment_method: PaymentMethod = "cash"
    email: EmailStr | None = None


class ReceiptLineOutput(BaseModel):
    """Copied order line on a receipt."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    quantity: int
    unit_price_cents: int
    amount_cents: int


class ReceiptOutput(BaseModel):
    """Receipt snapshot."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    branch_id: int
    table_number: int
    customer_name: str
    server_id: int | None = None
    lines: list[ReceiptLineOutput]
    subtotal_cents: int
    discount_cents: int
    tax_cents: int
    total_cents: int
    payment_method: PaymentMethod
    email: str | None = None
    sent_to_email: bool
    issued_at: datetime


class PaymentResponse(BaseModel):
    """Result of a POS payment."""

    order: OrderOutput
    receipt: ReceiptOutput


# =============================================================================
# Table Schemas
# =============================================================================


class TableCreate(BaseModel):
    """Request to create a table in a branch."""

    branch_id: int
    number: int = Field(ge=1)
    capacity: int = Field(default=4, ge=1, le=50)
    section: TableSection = "Indoor"


class TableUpdate(BaseModel):
    """Partial table update. Waiters may only send status."""

    number: int | None = Field(default=None, ge=1)
    capacity: int | None = Field(default=None, ge=1, le=50)
    section: TableSection | None = None
    status: TableStatus | None = None


class TableOutput(BaseModel):
    """Output for a table."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    number: int
    capacity: int
    section: TableSection
    status: TableStatus
    occupied_since: datetime | None = None
    current_order_id: int | None = None


# =============================================================================
# POS Schemas
# =============================================================================


class BranchOutput(BaseModel):
    """Branch summary for the POS header."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    restaurant_id: int
    name: str
    address: str | None = None


class MenuItemOutput(BaseModel):
    """Menu item as shown on the POS menu."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    price_cents: int
    category: str | None = None
    status: str


class PosDataResponse(BaseModel):
    """Everything the POS screen needs for one branch."""

    branch: BranchOutput
    tables: list[TableOutput]
    categories: list[str]
    menu_items: list[MenuItemOutput]
    active_orders: list[OrderOutput]
