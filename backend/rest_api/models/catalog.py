"""
Catalog Models: MenuItem.

Menus are edited outside the POS; the order ledger only reads prices.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import AuditMixin, Base, BigIntPK


class MenuItem(AuditMixin, Base):
    """
    A sellable dish or drink.
    branch_id NULL means the item is offered in every branch of the restaurant.
    """

    __tablename__ = "menu_item"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    branch_id: Mapped[Optional[int]] = mapped_column(
        BigInteger, ForeignKey("branch.id"), nullable=True, index=True
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[str] = mapped_column(Text, default="active", nullable=False)  # active, inactive, featured

    __table_args__ = (
        CheckConstraint("price_cents >= 0", name="chk_menu_item_price_non_negative"),
        Index("ix_menu_item_restaurant_status", "restaurant_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<MenuItem(id={self.id}, title='{self.title}', price_cents={self.price_cents})>"
