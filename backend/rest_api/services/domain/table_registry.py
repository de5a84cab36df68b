"""
Table Registry Domain Service.

Owns table occupancy. Binding and releasing are single conditional UPDATEs,
so two requests racing for the same table cannot both win, and a late
release can never free a table that was already handed to another order.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from rest_api.models import Branch, Table
from rest_api.services.permissions import CallerContext
from shared.config.constants import TableStatus
from shared.config.logging import tables_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    AuthorizationError,
    ConflictError,
    DuplicateEntityError,
    NotFoundError,
    TableNotFoundError,
    TableUnavailableError,
)
from shared.utils.schemas import TableCreate, TableUpdate


class TableRegistry:
    """
    Domain service for table occupancy and table management.

    Occupancy methods (bind/release) never commit; they join the caller's
    unit of work. CRUD methods commit their own transaction.
    """

    def __init__(self, db: Session):
        self._db = db

    # =========================================================================
    # Occupancy
    # =========================================================================

    def get(self, table_id: int) -> Table:
        table = self._db.get(Table, table_id)
        if table is None:
            raise TableNotFoundError(table_id)
        return table

    def is_available(self, table_id: int) -> bool:
        return self.get(table_id).status == TableStatus.AVAILABLE

    def bind(self, table_id: int, order_id: int) -> Table:
        """
        Mark a table occupied by an order.

        Raises:
            TableUnavailableError: if the table is not available anymore.
        """
        result = self._db.execute(
            update(Table)
            .where(Table.id == table_id, Table.status == TableStatus.AVAILABLE)
            .values(
                status=TableStatus.OCCUPIED,
                occupied_since=datetime.now(timezone.utc),
                current_order_id=order_id,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise TableUnavailableError(table_id, order_id=order_id)

        table = self._db.get(Table, table_id, populate_existing=True)
        logger.info("Table bound", table_id=table_id, order_id=order_id)
        return table

    def release(self, table_id: int, expected_order_id: int) -> bool:
        """
        Free a table only if it is still bound to expected_order_id.

        Returns:
            True if the table was released. A mismatch (or a missing table)
            is logged and leaves everything untouched.
        """
        result = self._db.execute(
            update(Table)
            .where(Table.id == table_id, Table.current_order_id == expected_order_id)
            .values(
                status=TableStatus.AVAILABLE,
                occupied_since=None,
                current_order_id=None,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            self._db.get(Table, table_id, populate_existing=True)
            logger.info("Table released", table_id=table_id, order_id=expected_order_id)
            return True

        table = self._db.get(Table, table_id)
        if table is None:
            logger.warning(
                "Table not found on release",
                table_id=table_id,
                order_id=expected_order_id,
            )
        else:
            logger.info(
                "Table release skipped",
                table_id=table_id,
                order_id=expected_order_id,
                current_order_id=table.current_order_id,
            )
        return False

    # =========================================================================
    # Table management
    # =========================================================================

    def _get_branch(self, branch_id: int) -> Branch:
        branch = self._db.get(Branch, branch_id)
        if branch is None or not branch.is_active:
            raise NotFoundError("Branch", branch_id)
        return branch

    def _ensure_number_free(self, branch_id: int, number: int, exclude_id: int | None = None) -> None:
        query = select(Table.id).where(Table.branch_id == branch_id, Table.number == number)
        if exclude_id is not None:
            query = query.where(Table.id != exclude_id)
        if self._db.scalar(query) is not None:
            raise DuplicateEntityError("Table", str(number), branch_id=branch_id)

    def _commit_table(self, table: Table) -> None:
        """Commit, mapping a lost race on the unique number to a 409."""
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise DuplicateEntityError("Table", str(table.number), branch_id=table.branch_id)

    def list_tables(
        self,
        branch_id: int,
        caller: CallerContext,
        *,
        section: str | None = None,
        status: str | None = None,
    ) -> Sequence[Table]:
        """List tables of a branch ordered by number."""
        branch = self._get_branch(branch_id)
        caller.require_branch_access(branch.restaurant_id, branch.id)

        query = select(Table).where(Table.branch_id == branch_id, Table.is_active.is_(True))
        if section:
            query = query.where(Table.section == section)
        if status:
            query = query.where(Table.status == status)

        return self._db.execute(query.order_by(Table.number)).scalars().all()

    def get_table(self, table_id: int, caller: CallerContext) -> Table:
        table = self.get(table_id)
        caller.require_branch_access(table.restaurant_id, table.branch_id)
        return table

    def create_table(self, data: TableCreate, caller: CallerContext) -> Table:
        """
        Create a table.

        Raises:
            DuplicateEntityError: if the number is taken in the branch.
        """
        branch = self._get_branch(data.branch_id)
        caller.require_table_management(branch.restaurant_id, branch.id)
        self._ensure_number_free(branch.id, data.number)

        table = Table(
            restaurant_id=branch.restaurant_id,
            branch_id=branch.id,
            number=data.number,
            capacity=data.capacity,
            section=data.section,
            status=TableStatus.AVAILABLE,
        )
        table.set_created_by(caller.user_id, caller.email)
        self._db.add(table)
        self._commit_table(table)
        self._db.refresh(table)

        logger.info("Table created", table_id=table.id, branch_id=branch.id, number=table.number)
        return table

    def update_table(self, table_id: int, data: TableUpdate, caller: CallerContext) -> Table:
        """
        Update table details or status.

        Callers without table management rights may only change status.
        A table bound to an open order stays occupied until the order closes.
        """
        table = self.get_table(table_id, caller)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if not caller.can_manage_tables() and set(changes) - {"status"}:
            raise AuthorizationError("change table details", user_id=caller.user_id, table_id=table_id)

        new_status = changes.get("status")
        if (
            new_status is not None
            and table.current_order_id is not None
            and new_status != TableStatus.OCCUPIED
        ):
            raise ConflictError(
                f"Table {table.number} is bound to order {table.current_order_id}",
                table_id=table_id,
                order_id=table.current_order_id,
            )

        if "number" in changes and changes["number"] != table.number:
            self._ensure_number_free(table.branch_id, changes["number"], exclude_id=table.id)

        for key, value in changes.items():
            setattr(table, key, value)
        if new_status == TableStatus.AVAILABLE:
            table.occupied_since = None
        elif new_status == TableStatus.OCCUPIED and table.occupied_since is None:
            table.occupied_since = datetime.now(timezone.utc)

        table.set_updated_by(caller.user_id, caller.email)
        self._commit_table(table)
        self._db.refresh(table)

        logger.info("Table updated", table_id=table.id, changes=sorted(changes))
        return table

    def delete_table(self, table_id: int, caller: CallerContext) -> None:
        """Delete a table that is not bound to an open order."""
        table = self.get(table_id)
        caller.require_table_management(table.restaurant_id, table.branch_id)

        if table.current_order_id is not None:
            raise ConflictError(
                f"Table {table.number} has an open order",
                table_id=table_id,
                order_id=table.current_order_id,
            )

        self._db.delete(table)
        safe_commit(self._db)
        logger.info("Table deleted", table_id=table_id, branch_id=table.branch_id)
