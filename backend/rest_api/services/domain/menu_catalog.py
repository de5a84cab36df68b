"""
Menu price catalog.

Read-only lookup of menu items by id for the order ledger. Menus are edited
outside the POS.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from rest_api.models import MenuItem
from shared.config.constants import MenuItemStatus
from shared.utils.exceptions import MenuItemNotFoundError


class MenuCatalog:
    """Lookup of menu items visible to one branch."""

    def __init__(self, db: Session):
        self._db = db

    def _branch_scope(self, restaurant_id: int, branch_id: int):
        return select(MenuItem).where(
            MenuItem.restaurant_id == restaurant_id,
            or_(MenuItem.branch_id.is_(None), MenuItem.branch_id == branch_id),
        )

    def find_many(
        self,
        menu_item_ids: Sequence[int],
        restaurant_id: int,
        branch_id: int,
    ) -> dict[int, MenuItem]:
        """
        Resolve every id to its menu item.

        Raises:
            MenuItemNotFoundError: naming the first id that does not resolve.
        """
        wanted = set(menu_item_ids)
        if not wanted:
            return {}

        items = self._db.execute(
            self._branch_scope(restaurant_id, branch_id).where(MenuItem.id.in_(wanted))
        ).scalars().all()
        found = {item.id: item for item in items}

        for menu_item_id in menu_item_ids:
            if menu_item_id not in found:
                raise MenuItemNotFoundError(
                    menu_item_id, restaurant_id=restaurant_id, branch_id=branch_id
                )

        return found

    def list_sellable(self, restaurant_id: int, branch_id: int) -> Sequence[MenuItem]:
        """Items shown on the POS menu, grouped by category then title."""
        return self._db.execute(
            self._branch_scope(restaurant_id, branch_id)
            .where(
                MenuItem.status.in_(MenuItemStatus.SELLABLE),
                MenuItem.is_active.is_(True),
            )
            .order_by(MenuItem.category, MenuItem.title)
        ).scalars().all()
