"""
Order Repository - Data access for POS orders.
Eager loading of lines prevents N+1 queries when serializing listings.
"""

from dataclasses import dataclass
from typing import Sequence
from sqlalchemy.orm import Session, selectinload
from sqlalchemy import Select, select

from rest_api.models import Order
from shared.config.constants import Limits, OrderStatus
from .base import BaseRepository, RepositoryFilters


@dataclass
class OrderFilters(RepositoryFilters):
    """Filters specific to orders."""

    status: str | None = None
    statuses: list[str] | None = None
    table_id: int | None = None
    oldest_first: bool = False


class OrderRepository(BaseRepository[Order]):
    """
    Repository for Order entities.

    Guarantees eager loading of items. Newest orders first unless
    oldest_first is set (the active-orders queue).
    """

    @property
    def model(self) -> type[Order]:
        return Order

    def _base_query(self, restaurant_id: int) -> Select:
        return (
            select(Order)
            .where(Order.restaurant_id == restaurant_id)
            .options(selectinload(Order.items))
        )

    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        """Apply order-specific filters."""
        if not isinstance(filters, OrderFilters):
            filters = OrderFilters(**filters.__dict__)

        if filters.status:
            query = query.where(Order.status == filters.status)
        elif filters.statuses:
            query = query.where(Order.status.in_(filters.statuses))

        if filters.table_id:
            query = query.where(Order.table_id == filters.table_id)

        return query

    def find_all(
        self,
        restaurant_id: int,
        filters: RepositoryFilters | None = None,
    ) -> Sequence[Order]:
        filters = filters or OrderFilters()
        oldest_first = isinstance(filters, OrderFilters) and filters.oldest_first
        query = self._apply_common(self._base_query(restaurant_id), filters)
        if oldest_first:
            query = query.order_by(Order.created_at.asc(), Order.id.asc())
        else:
            query = query.order_by(Order.created_at.desc(), Order.id.desc())
        query = query.offset(filters.offset).limit(filters.limit)

        return self._db.execute(query).scalars().unique().all()

    def find_active(self, restaurant_id: int, branch_id: int) -> Sequence[Order]:
        """Open orders of a branch, oldest first."""
        filters = OrderFilters(
            statuses=OrderStatus.ACTIVE,
            branch_id=branch_id,
            oldest_first=True,
            limit=Limits.MAX_PAGE_SIZE,
        )
        return self.find_all(restaurant_id, filters)


def get_order_repository(db: Session) -> OrderRepository:
    """Factory function for OrderRepository."""
    return OrderRepository(db)
