"""
POS Screen Service.

Read-only bundle of what the point-of-sale screen shows for one branch.
"""

from __future__ import annotations

from typing import Any, Sequence

from sqlalchemy.orm import Session

from rest_api.models import Branch, MenuItem
from rest_api.services.domain.menu_catalog import MenuCatalog
from rest_api.services.domain.order_service import OrderService
from rest_api.services.domain.table_registry import TableRegistry
from rest_api.services.permissions import CallerContext


class PosService:
    """Aggregates branch, tables, menu categories and items, and open orders."""

    def __init__(self, db: Session):
        self._db = db
        self._orders = OrderService(db)
        self._tables = TableRegistry(db)
        self._catalog = MenuCatalog(db)

    def screen_data(self, branch_id: int, caller: CallerContext) -> dict[str, Any]:
        active_orders = self._orders.list_active(branch_id, caller)
        tables = self._tables.list_tables(branch_id, caller)
        # list_active already validated the branch and the caller's scope
        branch = self._db.get(Branch, branch_id)
        menu_items = self._catalog.list_sellable(branch.restaurant_id, branch.id)

        return {
            "branch": branch,
            "tables": tables,
            "categories": self._categories(menu_items),
            "menu_items": menu_items,
            "active_orders": active_orders,
        }

    @staticmethod
    def _categories(menu_items: Sequence[MenuItem]) -> list[str]:
        """Distinct categories of the menu, in menu order."""
        return list(dict.fromkeys(item.category for item in menu_items if item.category))
