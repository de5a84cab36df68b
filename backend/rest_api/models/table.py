"""
Table Model: physical table in a branch with its occupancy binding.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .tenant import Branch


class Table(AuditMixin, Base):
    """
    Physical table in a branch.

    While an order is open on it the table is "occupied" and current_order_id
    points at that order. current_order_id is a weak reference (no FK) so the
    order and the table can be written in either order inside one transaction.
    """

    # "table" is a reserved SQL keyword
    __tablename__ = "restaurant_table"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    branch_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("branch.id"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, default=4, nullable=False)
    section: Mapped[str] = mapped_column(Text, default="Indoor", nullable=False)  # Indoor, Outdoor
    status: Mapped[str] = mapped_column(
        Text, default="available", nullable=False
    )  # available, occupied, reserved
    occupied_since: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    current_order_id: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (
        UniqueConstraint("branch_id", "number", name="uq_table_branch_number"),
        Index("ix_table_branch_status", "branch_id", "status"),
    )

    # Relationships
    branch: Mapped["Branch"] = relationship(back_populates="tables")

    def __repr__(self) -> str:
        return f"<Table(id={self.id}, number={self.number}, status='{self.status}')>"
