"""
Order Domain Service.

The order ledger: opens orders on free tables, revises lines and discounts,
moves orders through their status lifecycle and keeps the bound table in
step, all inside one unit of work per operation.

Lifecycle:
    preparing -> confirmed -> served -> completed
    any non-terminal status -> cancelled
    completed and cancelled are terminal
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from rest_api.models import Branch, Order, OrderLine
from rest_api.repositories import OrderFilters, OrderRepository
from rest_api.services.base_service import BaseDomainService
from rest_api.services.domain.menu_catalog import MenuCatalog
from rest_api.services.domain.pricing import (
    OrderTotals,
    compute_totals,
    line_amount_cents,
    subtotal_cents,
)
from rest_api.services.domain.receipt_sink import ReceiptSink
from rest_api.services.domain.table_registry import TableRegistry
from rest_api.services.permissions import CallerContext
from shared.config.constants import (
    DEFAULT_CUSTOMER_NAME,
    DiscountType,
    Limits,
    OrderLineStatus,
    OrderStatus,
    PaymentMethod,
    TableStatus,
)
from shared.config.logging import orders_logger as logger
from shared.utils.exceptions import (
    ConflictError,
    NotFoundError,
    OrderClosedError,
    OrderNotFoundError,
    TableUnavailableError,
    ValidationError,
)
from shared.utils.schemas import OrderCreate, OrderLineInput, OrderUpdate


class OrderService(BaseDomainService):
    """
    Domain service for order lifecycle operations.

    Money fields are always derived here from lines and discount parameters.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self._repo = OrderRepository(db)
        self._catalog = MenuCatalog(db)
        self._tables = TableRegistry(db)
        self._receipts = ReceiptSink(db)

    # =========================================================================
    # Loading
    # =========================================================================

    def _get_branch(self, branch_id: int) -> Branch:
        branch = self._db.get(Branch, branch_id)
        if branch is None or not branch.is_active:
            raise NotFoundError("Branch", branch_id)
        return branch

    def load(self, order_id: int, *, lock: bool = False) -> Order:
        """Load an order, optionally with a row lock. No access check."""
        query = select(Order).where(Order.id == order_id)
        if lock:
            query = query.with_for_update()
        order = self._db.scalar(query)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    def get(self, order_id: int, caller: CallerContext) -> Order:
        order = self.load(order_id)
        caller.require_branch_access(order.restaurant_id, order.branch_id)
        return order

    def list_orders(
        self,
        caller: CallerContext,
        *,
        branch_id: int | None = None,
        table_id: int | None = None,
        status: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> tuple[Sequence[Order], int]:
        """
        List orders visible to the caller, newest first.

        Returns:
            (orders on this page, total matching orders)
        """
        branch_ids: list[int] | None = None
        if branch_id is not None:
            branch = self._get_branch(branch_id)
            caller.require_branch_access(branch.restaurant_id, branch.id)
        elif not caller.is_owner:
            branch_ids = sorted(caller.branch_ids)

        filters = OrderFilters(
            limit=limit,
            offset=offset,
            branch_id=branch_id,
            branch_ids=branch_ids,
            table_id=table_id,
            status=status,
        )
        orders = self._repo.find_all(caller.restaurant_id, filters)
        total = self._repo.count(caller.restaurant_id, filters)
        return orders, total

    def list_active(self, branch_id: int, caller: CallerContext) -> Sequence[Order]:
        """Open orders of a branch, oldest first (service queue order)."""
        branch = self._get_branch(branch_id)
        caller.require_branch_access(branch.restaurant_id, branch.id)
        return self._repo.find_active(branch.restaurant_id, branch.id)

    # =========================================================================
    # Line building and totals
    # =========================================================================

    def _build_lines(
        self,
        items: Sequence[OrderLineInput],
        restaurant_id: int,
        branch_id: int,
    ) -> list[OrderLine]:
        """
        Price a list of line inputs against the live catalog.

        Raises:
            ValidationError: empty list or quantity out of range.
            MenuItemNotFoundError: unknown menu item.
        """
        if not items:
            raise ValidationError("Order must contain at least one item", field="items")

        for item in items:
            if not Limits.MIN_QUANTITY <= item.quantity <= Limits.MAX_QUANTITY:
                raise ValidationError(
                    f"Quantity must be between {Limits.MIN_QUANTITY} and {Limits.MAX_QUANTITY}",
                    field="quantity",
                    menu_item_id=item.menu_item_id,
                    value=item.quantity,
                )

        menu = self._catalog.find_many(
            [item.menu_item_id for item in items], restaurant_id, branch_id
        )

        lines = []
        for position, item in enumerate(items):
            menu_item = menu[item.menu_item_id]
            lines.append(
                OrderLine(
                    position=position,
                    menu_item_id=menu_item.id,
                    name=menu_item.title,
                    unit_price_cents=menu_item.price_cents,
                    quantity=item.quantity,
                    amount_cents=line_amount_cents(menu_item.price_cents, item.quantity),
                    status=item.status or OrderLineStatus.ORDERED,
                )
            )
        return lines

    @staticmethod
    def _apply_totals(order: Order, totals: OrderTotals) -> None:
        order.subtotal_cents = totals.subtotal_cents
        order.discount_cents = totals.discount_cents
        order.tax_cents = totals.tax_cents
        order.total_cents = totals.total_cents

    # =========================================================================
    # Open
    # =========================================================================

    def open(self, data: OrderCreate, caller: CallerContext) -> Order:
        """
        Open an order on a free table and bind the table to it.

        Raises:
            NotFoundError: branch, table or menu item missing.
            ValidationError: table in another branch, empty items, bad discount.
            ConflictError: table not available (including a lost race).
        """
        with self.transaction("open order"):
            branch = self._get_branch(data.branch_id)
            caller.require_pos_access(branch.restaurant_id, branch.id)

            table = self._tables.get(data.table_id)
            if table.branch_id != branch.id:
                raise ValidationError(
                    f"Table {table.id} does not belong to branch {branch.id}",
                    table_id=table.id,
                    branch_id=branch.id,
                )
            if table.status != TableStatus.AVAILABLE:
                raise TableUnavailableError(table.id, status=table.status)

            lines = self._build_lines(data.items, branch.restaurant_id, branch.id)
            discount_value = data.discount_value if data.discount_type != DiscountType.NONE else 0.0
            totals = compute_totals(
                subtotal_cents(line.amount_cents for line in lines),
                data.discount_type,
                discount_value,
            )

            order = Order(
                restaurant_id=branch.restaurant_id,
                branch_id=branch.id,
                table_id=table.id,
                table_number=table.number,
                customer_name=data.customer_name or DEFAULT_CUSTOMER_NAME,
                server_id=caller.user_id,
                status=OrderStatus.PREPARING,
                discount_type=data.discount_type,
                discount_value=discount_value,
                paid=False,
                payment_method=PaymentMethod.DEFAULT,
                modified=False,
                items=lines,
            )
            self._apply_totals(order, totals)
            order.set_created_by(caller.user_id, caller.email)
            self._db.add(order)
            self._db.flush()

            self._tables.bind(table.id, order.id)

        logger.info(
            "Order opened",
            order_id=order.id,
            table_id=order.table_id,
            branch_id=order.branch_id,
            total_cents=order.total_cents,
        )
        return order

    # =========================================================================
    # Lifecycle building blocks (no commit; callers own the transaction)
    # =========================================================================

    def set_status(self, order: Order, status: str) -> None:
        """
        Assign a status. Entering a terminal status releases the table.

        Raises:
            OrderClosedError: the order is already terminal.
        """
        if status == order.status:
            return
        if order.status in OrderStatus.TERMINAL:
            raise OrderClosedError(order.id, order.status, requested_status=status)

        previous = order.status
        order.status = status
        if status in OrderStatus.TERMINAL:
            self._tables.release(order.table_id, order.id)

        logger.info(
            "Order status changed",
            order_id=order.id,
            from_status=previous,
            to_status=status,
        )

    def mark_paid(
        self,
        order: Order,
        payment_method: str | None = None,
        requested_status: str | None = None,
    ) -> None:
        """
        Record payment. The order completes unless the caller explicitly
        cancels it in the same request.
        """
        order.paid = True
        order.payment_method = payment_method or PaymentMethod.DEFAULT
        order.payment_date = datetime.now(timezone.utc)

        target = (
            OrderStatus.CANCELLED
            if requested_status == OrderStatus.CANCELLED
            else OrderStatus.COMPLETED
        )
        self.set_status(order, target)
        logger.info("Order marked paid", order_id=order.id, payment_method=order.payment_method)

    def _revise(self, order: Order, data: OrderUpdate) -> None:
        """
        Replace lines and/or discount and recompute totals.
        Everything is validated before the order is touched.
        """
        items_given = data.items is not None
        discount_given = data.discount_type is not None or data.discount_value is not None
        if not (items_given or discount_given):
            return

        discount_type = data.discount_type if data.discount_type is not None else order.discount_type
        discount_value = data.discount_value if data.discount_value is not None else order.discount_value
        if discount_type == DiscountType.NONE:
            discount_value = 0.0

        if items_given:
            lines = self._build_lines(data.items, order.restaurant_id, order.branch_id)
            subtotal = subtotal_cents(line.amount_cents for line in lines)
        else:
            lines = None
            # Discount-only revisions reuse the stored subtotal
            subtotal = order.subtotal_cents

        totals = compute_totals(subtotal, discount_type, discount_value)

        if lines is not None:
            order.items = lines
        order.discount_type = discount_type
        order.discount_value = discount_value
        self._apply_totals(order, totals)
        order.modified = True

        logger.info(
            "Order revised",
            order_id=order.id,
            items_replaced=items_given,
            total_cents=order.total_cents,
        )

    @staticmethod
    def _is_reassertion(order: Order, data: OrderUpdate) -> bool:
        """True when the update only repeats what a closed order already says."""
        if (
            data.items is not None
            or data.discount_type is not None
            or data.discount_value is not None
            or data.customer_name is not None
        ):
            return False
        if data.status is not None and data.status != order.status:
            return False
        if data.paid is not None and data.paid != order.paid:
            return False
        if data.payment_method is not None and data.payment_method != order.payment_method:
            return False
        return True

    @staticmethod
    def _is_late_payment(order: Order, data: OrderUpdate) -> bool:
        """Paying an order that was completed before it was paid."""
        return (
            order.status == OrderStatus.COMPLETED
            and not order.paid
            and bool(data.paid)
            and data.items is None
            and data.discount_type is None
            and data.discount_value is None
            and data.customer_name is None
            and data.status in (None, OrderStatus.COMPLETED)
        )

    # =========================================================================
    # Update / delete
    # =========================================================================

    def update(self, order_id: int, data: OrderUpdate, caller: CallerContext) -> Order:
        """
        Apply a partial update: revision, status change and/or payment.

        Raises:
            OrderNotFoundError: unknown order.
            OrderClosedError: change requested on a completed/cancelled order.
            ValidationError: empty items, bad quantity or discount.
            ConflictError: concurrent modification.
        """
        with self.transaction("update order"):
            order = self.load(order_id, lock=True)
            caller.require_pos_access(order.restaurant_id, order.branch_id)

            if order.status in OrderStatus.TERMINAL:
                if self._is_reassertion(order, data):
                    return order
                if not self._is_late_payment(order, data):
                    raise OrderClosedError(order.id, order.status)

            self._revise(order, data)

            if data.customer_name is not None:
                order.customer_name = data.customer_name or DEFAULT_CUSTOMER_NAME

            if data.paid:
                self.mark_paid(order, data.payment_method, requested_status=data.status)
            else:
                if data.payment_method is not None:
                    order.payment_method = data.payment_method
                if data.status is not None:
                    self.set_status(order, data.status)

            if order.status == OrderStatus.COMPLETED and order.paid:
                self._receipts.append(order)

            order.set_updated_by(caller.user_id, caller.email)

        return order

    def delete(self, order_id: int, caller: CallerContext) -> None:
        """
        Delete an order that has no receipt. Frees its table if still bound.

        Raises:
            ConflictError: a receipt references the order.
        """
        with self.transaction("delete order"):
            order = self.load(order_id, lock=True)
            caller.require_order_delete(order.restaurant_id, order.branch_id)

            if self._receipts.get_for_order(order.id) is not None:
                raise ConflictError(
                    f"Order {order.id} has a receipt and cannot be deleted",
                    order_id=order.id,
                )

            self._tables.release(order.table_id, order.id)
            self._db.delete(order)

        logger.info("Order deleted", order_id=order_id, user_id=caller.user_id)
