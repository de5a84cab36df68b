"""
Multi-Tenancy Models: Restaurant and Branch.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from sqlalchemy import BigInteger, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import AuditMixin, Base, BigIntPK

if TYPE_CHECKING:
    from .table import Table


class Restaurant(AuditMixin, Base):
    """
    Top-level tenant. Every branch, menu item, table and order belongs to one.
    Inherits: is_active, created_at, updated_at, *_by_id/email from AuditMixin.
    """

    __tablename__ = "restaurant"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    # Owner user lives in the user service
    owner_id: Mapped[Optional[int]] = mapped_column(BigInteger, index=True)

    # Relationships
    branches: Mapped[list["Branch"]] = relationship(back_populates="restaurant")

    def __repr__(self) -> str:
        return f"<Restaurant(id={self.id}, name='{self.name}')>"


class Branch(AuditMixin, Base):
    """
    A physical restaurant location.
    Each branch has its own tables and orders.
    """

    __tablename__ = "branch"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    restaurant_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("restaurant.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text)
    phone: Mapped[Optional[str]] = mapped_column(Text)

    # Relationships
    restaurant: Mapped["Restaurant"] = relationship(back_populates="branches")
    tables: Mapped[list["Table"]] = relationship(back_populates="branch")

    def __repr__(self) -> str:
        return f"<Branch(id={self.id}, name='{self.name}')>"
