"""
Order Models: Order, OrderLine.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .receipt import Receipt


class Order(AuditMixin, Base):
    """
    A table order: the aggregate root of the POS lifecycle.

    preparing -> confirmed -> served -> completed, or cancelled from any
    non-terminal state. All money columns are derived from the lines and the
    discount parameters; callers never set them directly.

    The version column is the optimistic concurrency counter: a writer that
    flushes against a stale version gets StaleDataError.
    """

    # "order" is a reserved SQL keyword
    __tablename__ = "pos_order"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    branch_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("branch.id"), nullable=False, index=True
    )
    # No FK: tables can be removed while their order history is kept
    table_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    # Denormalized at creation so receipts and reports survive renumbering
    table_number: Mapped[int] = mapped_column(Integer, nullable=False)
    customer_name: Mapped[str] = mapped_column(Text, default="Guest", nullable=False)
    server_id: Mapped[Optional[int]] = mapped_column(BigInteger, index=True)

    status: Mapped[str] = mapped_column(
        Text, default="preparing", nullable=False, index=True
    )  # preparing, confirmed, served, completed, cancelled

    subtotal_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    discount_type: Mapped[str] = mapped_column(Text, default="none", nullable=False)  # none, percent, amount
    # Percent points for "percent", currency units for "amount"
    discount_value: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    discount_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    tax_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    paid: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    payment_method: Mapped[str] = mapped_column(Text, default="cash", nullable=False)  # cash, card, mobile, qr
    payment_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    modified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint("subtotal_cents >= 0", name="chk_order_subtotal_non_negative"),
        CheckConstraint("total_cents >= 0", name="chk_order_total_non_negative"),
        Index("ix_order_branch_status", "branch_id", "status"),
        Index("ix_order_table_status", "table_id", "status"),
    )

    # Relationships
    items: Mapped[list["OrderLine"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.position",
    )
    receipt: Mapped[Optional["Receipt"]] = relationship(back_populates="order", uselist=False)

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, table={self.table_number}, status='{self.status}')>"


class OrderLine(Base):
    """
    One line of an order. Name and unit price are snapshots of the menu item
    taken when the line was written.
    """

    __tablename__ = "order_line"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("pos_order.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    menu_item_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("menu_item.id"), nullable=False
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(
        Text, default="ordered", nullable=False
    )  # ordered, preparing, ready, served, cancelled

    __table_args__ = (
        CheckConstraint("quantity > 0", name="chk_order_line_quantity_positive"),
        CheckConstraint("unit_price_cents >= 0", name="chk_order_line_price_non_negative"),
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="items")
