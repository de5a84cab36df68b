"""
Payment Domain Service.

Settles an order at the POS: marks it paid, completes it, frees the table
and issues exactly one receipt. The payment itself (cash drawer, card
terminal) happens outside this system.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from rest_api.models import Order, Receipt
from rest_api.services.base_service import BaseDomainService
from rest_api.services.domain.order_service import OrderService
from rest_api.services.domain.receipt_sink import ReceiptSink
from rest_api.services.permissions import CallerContext
from shared.config.constants import OrderStatus, PaymentMethod
from shared.config.logging import pos_logger as logger, mask_email
from shared.utils.exceptions import NotFoundError, OrderClosedError


class PaymentService(BaseDomainService):
    """Domain service for POS payments and receipts."""

    def __init__(self, db: Session):
        super().__init__(db)
        self._orders = OrderService(db)
        self._receipts = ReceiptSink(db)

    def pay(
        self,
        order_id: int,
        caller: CallerContext,
        payment_method: str = PaymentMethod.DEFAULT,
        email: str | None = None,
    ) -> tuple[Order, Receipt]:
        """
        Pay an order and return it with its receipt.

        Paying an order that already has a receipt returns that receipt
        and creates nothing.

        Raises:
            OrderNotFoundError: unknown order.
            OrderClosedError: the order was cancelled.
        """
        with self.transaction("process payment"):
            order = self._orders.load(order_id, lock=True)
            caller.require_pos_access(order.restaurant_id, order.branch_id)

            if order.status == OrderStatus.CANCELLED:
                raise OrderClosedError(order.id, order.status)

            existing = self._receipts.get_for_order(order.id)
            if existing is not None:
                logger.info(
                    "Order already settled",
                    order_id=order.id,
                    receipt_id=existing.id,
                )
                return order, existing

            self._orders.mark_paid(order, payment_method)
            receipt = self._receipts.append(order, email=email)
            if email:
                self._receipts.mark_sent(receipt)
            order.set_updated_by(caller.user_id, caller.email)

        logger.info(
            "Payment processed",
            order_id=order.id,
            receipt_id=receipt.id,
            payment_method=payment_method,
            total_cents=receipt.total_cents,
            email=mask_email(email) if email else None,
        )
        return order, receipt

    def get_receipt(self, order_id: int, caller: CallerContext) -> Receipt:
        """Receipt of an order, if it was paid."""
        order = self._orders.get(order_id, caller)
        receipt = self._receipts.get_for_order(order.id)
        if receipt is None:
            raise NotFoundError("Receipt for order", order.id)
        return receipt
