"""
Orders router.
Thin controller over the order ledger: open, list, revise, close and delete
table orders.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    OrderCreate,
    OrderListResponse,
    OrderOutput,
    OrderStatus,
    OrderUpdate,
)
from rest_api.routers._common.pagination import Pagination, get_pagination
from rest_api.services.domain import OrderService
from rest_api.services.permissions import CallerContext, current_caller


router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=OrderOutput, status_code=status.HTTP_201_CREATED)
def create_order(
    body: OrderCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> OrderOutput:
    """
    Open an order on a free table.

    Prices come from the menu at this moment; the table becomes occupied.
    Returns 409 if the table is not available.
    """
    order = OrderService(db).open(body, caller)
    return OrderOutput.model_validate(order)


@router.get("", response_model=OrderListResponse)
def list_orders(
    branch_id: int | None = Query(default=None),
    table_id: int | None = Query(default=None),
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> OrderListResponse:
    """List orders visible to the caller, newest first."""
    orders, total = OrderService(db).list_orders(
        caller,
        branch_id=branch_id,
        table_id=table_id,
        status=status_filter,
        limit=pagination.limit,
        offset=pagination.offset,
    )
    return OrderListResponse(
        items=[OrderOutput.model_validate(o) for o in orders],
        pagination=pagination.to_dict(total=total),
    )


@router.get("/active", response_model=list[OrderOutput])
def list_active_orders(
    branch_id: int = Query(...),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> list[OrderOutput]:
    """Open orders of a branch (preparing, confirmed, served), oldest first."""
    orders = OrderService(db).list_active(branch_id, caller)
    return [OrderOutput.model_validate(o) for o in orders]


@router.get("/{order_id}", response_model=OrderOutput)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> OrderOutput:
    """Get one order with its lines."""
    order = OrderService(db).get(order_id, caller)
    return OrderOutput.model_validate(order)


@router.put("/{order_id}", response_model=OrderOutput)
def update_order(
    order_id: int,
    body: OrderUpdate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> OrderOutput:
    """
    Revise items/discount, change status or mark paid.

    Completed and cancelled orders only accept a repeat of their current state.
    """
    order = OrderService(db).update(order_id, body, caller)
    return OrderOutput.model_validate(order)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_order(
    order_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> None:
    """
    Delete an order. Owners and managers only.

    Refused with 409 once a receipt exists.
    """
    OrderService(db).delete(order_id, caller)
