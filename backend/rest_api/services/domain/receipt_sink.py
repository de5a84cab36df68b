"""
Receipt Sink Domain Service.

Append-only persistence of receipts. A receipt is a deep copy of the order
at payment time; later edits to the order never reach it.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from rest_api.models import Order, Receipt, ReceiptLine
from shared.config.logging import pos_logger as logger, mask_email


class ReceiptSink:
    """Writes and reads receipts. Never commits; joins the caller's unit of work."""

    def __init__(self, db: Session):
        self._db = db

    def get_for_order(self, order_id: int) -> Receipt | None:
        return self._db.scalar(
            select(Receipt)
            .options(selectinload(Receipt.lines))
            .where(Receipt.order_id == order_id)
        )

    def append(self, order: Order, email: str | None = None) -> Receipt:
        """
        Emit the receipt of a paid order.

        Idempotent: if the order already has a receipt, that receipt is
        returned unchanged.
        """
        existing = self.get_for_order(order.id)
        if existing is not None:
            return existing

        receipt = Receipt(
            order=order,
            restaurant_id=order.restaurant_id,
            branch_id=order.branch_id,
            table_number=order.table_number,
            customer_name=order.customer_name,
            server_id=order.server_id,
            subtotal_cents=order.subtotal_cents,
            discount_cents=order.discount_cents,
            tax_cents=order.tax_cents,
            total_cents=order.total_cents,
            payment_method=order.payment_method,
            email=email,
            sent_to_email=False,
            lines=[
                ReceiptLine(
                    position=index,
                    name=line.name,
                    quantity=line.quantity,
                    unit_price_cents=line.unit_price_cents,
                    amount_cents=line.amount_cents,
                )
                for index, line in enumerate(order.items)
            ],
        )
        self._db.add(receipt)
        self._db.flush()

        logger.info(
            "Receipt issued",
            receipt_id=receipt.id,
            order_id=order.id,
            total_cents=receipt.total_cents,
            email=mask_email(email) if email else None,
        )
        return receipt

    def mark_sent(self, receipt: Receipt) -> None:
        """Flag the receipt as handed to the mailer. Delivery happens elsewhere."""
        if receipt.sent_to_email:
            return
        receipt.sent_to_email = True
        logger.info("Receipt queued for email", receipt_id=receipt.id, email=mask_email(receipt.email))
