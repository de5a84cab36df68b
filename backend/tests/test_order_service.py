"""
Tests for the order ledger: open, revise, status lifecycle, payment through
update, delete and listings.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm.exc import StaleDataError

from rest_api.models import MenuItem, Order, Receipt, Table
from rest_api.services.domain import OrderService, TableRegistry
from shared.utils.exceptions import (
    AuthorizationError,
    BranchAccessError,
    ConflictError,
    InsufficientRoleError,
    MenuItemNotFoundError,
    OrderClosedError,
    TableUnavailableError,
    ValidationError,
)
from shared.utils.schemas import OrderCreate, OrderUpdate


def _order_count(db) -> int:
    return db.scalar(select(func.count()).select_from(Order))


def _open(db, caller, table, menu, items=None, **kwargs):
    """Open the reference order: 2 x salad (8.99) + 1 x salmon (16.99), 10% off."""
    if items is None:
        items = [
            {"menu_item_id": menu["salad"].id, "quantity": 2},
            {"menu_item_id": menu["salmon"].id, "quantity": 1},
        ]
    data = OrderCreate(
        branch_id=table.branch_id,
        table_id=table.id,
        items=items,
        discount_type=kwargs.pop("discount_type", "percent"),
        discount_value=kwargs.pop("discount_value", 10),
        **kwargs,
    )
    return OrderService(db).open(data, caller)


class TestOpenOrder:
    def test_open_computes_totals_and_binds_table(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        assert order.status == "preparing"
        assert order.customer_name == "Guest"
        assert order.server_id == owner_caller.user_id
        assert order.paid is False
        assert order.payment_method == "cash"
        assert order.modified is False
        assert order.table_number == 1

        assert order.subtotal_cents == 3497
        assert order.discount_cents == 350
        assert order.tax_cents == 315
        assert order.total_cents == 3462

        assert [(line.name, line.quantity, line.amount_cents) for line in order.items] == [
            ("Caesar Salad", 2, 1798),
            ("Grilled Salmon", 1, 1699),
        ]
        assert all(line.status == "ordered" for line in order.items)

        db_session.refresh(seed_table)
        assert seed_table.status == "occupied"
        assert seed_table.current_order_id == order.id
        assert seed_table.occupied_since is not None

    def test_open_uses_customer_name(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu, customer_name="Ana")
        assert order.customer_name == "Ana"

    def test_open_on_occupied_table(self, db_session, owner_caller, seed_table, seed_menu):
        _open(db_session, owner_caller, seed_table, seed_menu)

        with pytest.raises(TableUnavailableError) as exc_info:
            _open(db_session, owner_caller, seed_table, seed_menu)

        assert exc_info.value.status_code == 409
        assert _order_count(db_session) == 1

    def test_open_on_reserved_table(self, db_session, owner_caller, seed_table, seed_menu):
        seed_table.status = "reserved"
        db_session.commit()

        with pytest.raises(TableUnavailableError):
            _open(db_session, owner_caller, seed_table, seed_menu)

    def test_open_with_table_of_other_branch(
        self, db_session, owner_caller, seed_branch, seed_other_table, seed_menu
    ):
        data = OrderCreate(
            branch_id=seed_branch.id,
            table_id=seed_other_table.id,
            items=[{"menu_item_id": seed_menu["salad"].id}],
        )
        with pytest.raises(ValidationError):
            OrderService(db_session).open(data, owner_caller)

    def test_unknown_menu_item_leaves_table_free(self, db_session, owner_caller, seed_table, seed_menu):
        with pytest.raises(MenuItemNotFoundError) as exc_info:
            _open(db_session, owner_caller, seed_table, seed_menu, items=[{"menu_item_id": 999999}])

        assert exc_info.value.status_code == 404
        assert _order_count(db_session) == 0
        db_session.refresh(seed_table)
        assert seed_table.status == "available"
        assert seed_table.current_order_id is None

    def test_empty_items_rejected(self, db_session, owner_caller, seed_table, seed_menu):
        with pytest.raises(ValidationError):
            _open(db_session, owner_caller, seed_table, seed_menu, items=[])

    @pytest.mark.parametrize("quantity", [0, -1, 100])
    def test_quantity_out_of_range(self, db_session, owner_caller, seed_table, seed_menu, quantity):
        items = [{"menu_item_id": seed_menu["salad"].id, "quantity": quantity}]
        with pytest.raises(ValidationError):
            _open(db_session, owner_caller, seed_table, seed_menu, items=items)

    def test_discount_larger_than_subtotal(self, db_session, owner_caller, seed_table, seed_menu):
        with pytest.raises(ValidationError):
            _open(
                db_session, owner_caller, seed_table, seed_menu,
                discount_type="amount", discount_value=100,
            )
        db_session.refresh(seed_table)
        assert seed_table.status == "available"

    def test_waiter_of_other_branch_denied(
        self, db_session, make_caller, seed_other_branch, seed_table, seed_menu
    ):
        caller = make_caller("waiter", [seed_other_branch.id])
        with pytest.raises(BranchAccessError):
            _open(db_session, caller, seed_table, seed_menu)

    def test_waiter_without_pos_permission_denied(
        self, db_session, make_caller, seed_branch, seed_table, seed_menu
    ):
        caller = make_caller("waiter", [seed_branch.id], permissions=[])
        with pytest.raises(AuthorizationError):
            _open(db_session, caller, seed_table, seed_menu)


class TestReviseOrder:
    def test_replace_items_recomputes(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        updated = OrderService(db_session).update(
            order.id,
            OrderUpdate(items=[{"menu_item_id": seed_menu["salmon"].id, "quantity": 1}]),
            owner_caller,
        )

        assert updated.subtotal_cents == 1699
        assert updated.discount_cents == 170
        assert updated.tax_cents == 153
        assert updated.total_cents == 1682
        assert updated.modified is True
        assert len(updated.items) == 1

    def test_lines_keep_price_snapshot(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        salad = db_session.get(MenuItem, seed_menu["salad"].id)
        salad.price_cents = 999
        db_session.commit()

        order = OrderService(db_session).get(order.id, owner_caller)
        assert order.items[0].unit_price_cents == 899
        assert order.subtotal_cents == 3497

        revised = OrderService(db_session).update(
            order.id,
            OrderUpdate(items=[{"menu_item_id": salad.id, "quantity": 1}]),
            owner_caller,
        )
        assert revised.items[0].unit_price_cents == 999

    def test_discount_only_revision(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        updated = OrderService(db_session).update(
            order.id,
            OrderUpdate(discount_type="amount", discount_value=4.97),
            owner_caller,
        )

        assert updated.subtotal_cents == 3497
        assert updated.discount_cents == 497
        assert updated.tax_cents == 300
        assert updated.total_cents == 3300
        assert len(updated.items) == 2

    def test_invalid_revision_leaves_order_untouched(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)
        order_id = order.id

        with pytest.raises(ValidationError):
            OrderService(db_session).update(
                order_id,
                OrderUpdate(
                    items=[{"menu_item_id": seed_menu["salad"].id, "quantity": 1}],
                    discount_type="amount",
                    discount_value=50,
                ),
                owner_caller,
            )

        order = db_session.get(Order, order_id)
        db_session.refresh(order)
        assert order.total_cents == 3462
        assert order.modified is False
        assert len(order.items) == 2

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_non_finite_discount_revision(self, db_session, owner_caller, seed_table, seed_menu, value):
        order = _open(db_session, owner_caller, seed_table, seed_menu)
        order_id = order.id
        # Built without schema validation to reach the service guard
        data = OrderUpdate.model_construct(discount_type="amount", discount_value=value)

        with pytest.raises(ValidationError):
            OrderService(db_session).update(order_id, data, owner_caller)

        order = db_session.get(Order, order_id)
        db_session.refresh(order)
        assert order.total_cents == 3462

    def test_customer_name_update(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        updated = OrderService(db_session).update(order.id, OrderUpdate(customer_name="Luis"), owner_caller)

        assert updated.customer_name == "Luis"
        assert updated.modified is False


class TestStatusLifecycle:
    def test_intermediate_status_keeps_table(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)
        service = OrderService(db_session)

        service.update(order.id, OrderUpdate(status="confirmed"), owner_caller)
        updated = service.update(order.id, OrderUpdate(status="served"), owner_caller)

        assert updated.status == "served"
        db_session.refresh(seed_table)
        assert seed_table.status == "occupied"

    @pytest.mark.parametrize("terminal", ["completed", "cancelled"])
    def test_terminal_status_releases_table(self, db_session, owner_caller, seed_table, seed_menu, terminal):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        updated = OrderService(db_session).update(order.id, OrderUpdate(status=terminal), owner_caller)

        assert updated.status == terminal
        db_session.refresh(seed_table)
        assert seed_table.status == "available"
        assert seed_table.current_order_id is None

    def test_closed_order_rejects_changes(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)
        service = OrderService(db_session)
        service.update(order.id, OrderUpdate(status="cancelled"), owner_caller)

        with pytest.raises(OrderClosedError) as exc_info:
            service.update(order.id, OrderUpdate(status="preparing"), owner_caller)
        assert exc_info.value.status_code == 409

        with pytest.raises(OrderClosedError):
            service.update(
                order.id,
                OrderUpdate(items=[{"menu_item_id": seed_menu["salad"].id}]),
                owner_caller,
            )

    def test_closed_order_accepts_reassertion(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)
        service = OrderService(db_session)
        service.update(order.id, OrderUpdate(status="completed"), owner_caller)

        same = service.update(order.id, OrderUpdate(status="completed"), owner_caller)

        assert same.status == "completed"

    def test_closing_order_keeps_foreign_binding(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)
        registry = TableRegistry(db_session)
        registry.release(seed_table.id, order.id)
        registry.bind(seed_table.id, order.id + 100)
        db_session.commit()

        OrderService(db_session).update(order.id, OrderUpdate(status="completed"), owner_caller)

        db_session.refresh(seed_table)
        assert seed_table.status == "occupied"
        assert seed_table.current_order_id == order.id + 100

    def test_reopening_table_after_close(self, db_session, owner_caller, seed_table, seed_menu):
        first = _open(db_session, owner_caller, seed_table, seed_menu)
        OrderService(db_session).update(first.id, OrderUpdate(status="completed"), owner_caller)

        second = _open(db_session, owner_caller, seed_table, seed_menu)

        db_session.refresh(seed_table)
        assert seed_table.current_order_id == second.id


class TestPaymentThroughUpdate:
    def test_paid_completes_and_issues_receipt(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        updated = OrderService(db_session).update(
            order.id, OrderUpdate(paid=True, payment_method="card"), owner_caller
        )

        assert updated.paid is True
        assert updated.status == "completed"
        assert updated.payment_method == "card"
        assert updated.payment_date is not None

        receipt = db_session.scalar(select(Receipt).where(Receipt.order_id == order.id))
        assert receipt is not None
        assert receipt.total_cents == 3462
        db_session.refresh(seed_table)
        assert seed_table.status == "available"

    def test_paid_with_cancel_keeps_cancelled(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        updated = OrderService(db_session).update(
            order.id, OrderUpdate(paid=True, status="cancelled"), owner_caller
        )

        assert updated.paid is True
        assert updated.status == "cancelled"
        assert db_session.scalar(select(func.count()).select_from(Receipt)) == 0

    def test_late_payment_of_completed_order(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)
        service = OrderService(db_session)
        service.update(order.id, OrderUpdate(status="completed"), owner_caller)

        updated = service.update(order.id, OrderUpdate(paid=True), owner_caller)

        assert updated.paid is True
        assert updated.status == "completed"
        assert db_session.scalar(select(func.count()).select_from(Receipt)) == 1


class TestDeleteOrder:
    def test_waiter_cannot_delete(self, db_session, owner_caller, waiter_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        with pytest.raises(InsufficientRoleError):
            OrderService(db_session).delete(order.id, waiter_caller)

    def test_manager_deletes_and_frees_table(self, db_session, owner_caller, manager_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)

        OrderService(db_session).delete(order.id, manager_caller)

        assert _order_count(db_session) == 0
        db_session.refresh(seed_table)
        assert seed_table.status == "available"

    def test_deleting_old_order_keeps_new_binding(self, db_session, owner_caller, seed_table, seed_menu):
        first = _open(db_session, owner_caller, seed_table, seed_menu)
        first_id = first.id
        OrderService(db_session).update(first_id, OrderUpdate(status="cancelled"), owner_caller)
        second = _open(db_session, owner_caller, seed_table, seed_menu)

        OrderService(db_session).delete(first_id, owner_caller)

        db_session.refresh(seed_table)
        assert seed_table.status == "occupied"
        assert seed_table.current_order_id == second.id
        assert _order_count(db_session) == 1

    def test_paid_order_cannot_be_deleted(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)
        service = OrderService(db_session)
        service.update(order.id, OrderUpdate(paid=True), owner_caller)

        with pytest.raises(ConflictError):
            service.delete(order.id, owner_caller)
        assert _order_count(db_session) == 1


class TestListings:
    def test_waiter_sees_only_own_branch(
        self, db_session, owner_caller, waiter_caller, seed_table, seed_other_table, seed_menu
    ):
        _open(db_session, owner_caller, seed_table, seed_menu)
        _open(db_session, owner_caller, seed_other_table, seed_menu)
        service = OrderService(db_session)

        owner_orders, owner_total = service.list_orders(owner_caller)
        waiter_orders, waiter_total = service.list_orders(waiter_caller)

        assert owner_total == 2
        assert waiter_total == 1
        assert waiter_orders[0].branch_id == seed_table.branch_id

    def test_list_by_foreign_branch_denied(self, db_session, waiter_caller, seed_other_branch):
        with pytest.raises(BranchAccessError):
            OrderService(db_session).list_orders(waiter_caller, branch_id=seed_other_branch.id)

    def test_pagination_and_status_filter(self, db_session, owner_caller, seed_tables, seed_menu):
        orders = [_open(db_session, owner_caller, table, seed_menu) for table in seed_tables]
        service = OrderService(db_session)
        service.update(orders[0].id, OrderUpdate(status="cancelled"), owner_caller)

        page, total = service.list_orders(owner_caller, limit=2, offset=0)
        assert total == 3
        assert [o.id for o in page] == [orders[2].id, orders[1].id]

        cancelled, total = service.list_orders(owner_caller, status="cancelled")
        assert total == 1
        assert cancelled[0].id == orders[0].id

    def test_active_orders_oldest_first(self, db_session, owner_caller, seed_branch, seed_tables, seed_menu):
        orders = [_open(db_session, owner_caller, table, seed_menu) for table in seed_tables]
        OrderService(db_session).update(orders[1].id, OrderUpdate(status="completed"), owner_caller)

        active = OrderService(db_session).list_active(seed_branch.id, owner_caller)

        assert [o.id for o in active] == [orders[0].id, orders[2].id]


class TestTransaction:
    def test_stale_data_maps_to_conflict(self, db_session):
        service = OrderService(db_session)

        with pytest.raises(ConflictError):
            with service.transaction("test operation"):
                raise StaleDataError("row version changed")

    def test_concurrent_version_bump_detected(self, db_session, owner_caller, seed_table, seed_menu):
        order = _open(db_session, owner_caller, seed_table, seed_menu)
        service = OrderService(db_session)
        loaded = service.load(order.id)

        # Another writer commits first
        db_session.execute(
            Order.__table__.update()
            .where(Order.__table__.c.id == order.id)
            .values(version=loaded.version + 1)
        )

        with pytest.raises(ConflictError):
            with service.transaction("update order"):
                loaded.customer_name = "Race"
