"""
Receipt Models: Receipt, ReceiptLine.

Receipts are append-only. Once written, only sent_to_email may change.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, BigIntPK

if TYPE_CHECKING:
    from .order import Order


class Receipt(Base):
    """
    Immutable snapshot of a paid and completed order.
    At most one receipt exists per order (unique order_id).
    """

    __tablename__ = "receipt"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    order_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("pos_order.id"), nullable=False, unique=True
    )
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    branch_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("branch.id"), nullable=False, index=True
    )
    table_number: Mapped[int] = mapped_column(Integer, nullable=False)
    customer_name: Mapped[str] = mapped_column(Text, nullable=False)
    server_id: Mapped[Optional[int]] = mapped_column(BigInteger)

    subtotal_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    discount_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    tax_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    total_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    payment_method: Mapped[str] = mapped_column(Text, nullable=False)

    email: Mapped[Optional[str]] = mapped_column(Text)
    sent_to_email: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    order: Mapped["Order"] = relationship(back_populates="receipt")
    lines: Mapped[list["ReceiptLine"]] = relationship(
        back_populates="receipt",
        cascade="all, delete-orphan",
        order_by="ReceiptLine.position",
    )

    def __repr__(self) -> str:
        return f"<Receipt(id={self.id}, order_id={self.order_id}, total_cents={self.total_cents})>"


class ReceiptLine(Base):
    """Copied order line as it was at the moment of payment."""

    __tablename__ = "receipt_line"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    receipt_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("receipt.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    amount_cents: Mapped[int] = mapped_column(Integer, nullable=False)

    # Relationships
    receipt: Mapped["Receipt"] = relationship(back_populates="lines")
