"""
POS router.
Payment processing, receipts and the point-of-sale screen bundle.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.rate_limit import limiter
from shared.utils.schemas import (
    OrderOutput,
    PaymentRequest,
    PaymentResponse,
    PosDataResponse,
    ReceiptOutput,
)
from rest_api.services.domain import PaymentService, PosService
from rest_api.services.permissions import CallerContext, current_caller


router = APIRouter(prefix="/api/pos", tags=["pos"])


@router.post("/payment", response_model=PaymentResponse)
@limiter.limit(settings.payment_rate_limit)
def process_payment(
    request: Request,
    body: PaymentRequest,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> PaymentResponse:
    """
    Settle an order.

    Marks it paid and completed, frees the table and returns the receipt.
    Repeating the call returns the same receipt.
    """
    order, receipt = PaymentService(db).pay(
        body.order_id,
        caller,
        payment_method=body.payment_method,
        email=str(body.email) if body.email else None,
    )
    return PaymentResponse(
        order=OrderOutput.model_validate(order),
        receipt=ReceiptOutput.model_validate(receipt),
    )


@router.get("/receipts/{order_id}", response_model=ReceiptOutput)
def get_receipt(
    order_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> ReceiptOutput:
    """Receipt of a paid order."""
    receipt = PaymentService(db).get_receipt(order_id, caller)
    return ReceiptOutput.model_validate(receipt)


@router.get("/data", response_model=PosDataResponse)
def get_pos_data(
    branch_id: int = Query(...),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> PosDataResponse:
    """Branch, tables, sellable menu and open orders for the POS screen."""
    data = PosService(db).screen_data(branch_id, caller)
    return PosDataResponse.model_validate(data, from_attributes=True)
