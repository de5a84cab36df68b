"""
Tables router.
Table management for a branch. Waiters may only change a table's status;
occupancy itself is driven by orders.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    TableCreate,
    TableOutput,
    TableSection,
    TableStatus,
    TableUpdate,
)
from rest_api.services.domain import TableRegistry
from rest_api.services.permissions import CallerContext, current_caller


router = APIRouter(prefix="/api/tables", tags=["tables"])


@router.get("", response_model=list[TableOutput])
def list_tables(
    branch_id: int = Query(...),
    section: TableSection | None = Query(default=None),
    status_filter: TableStatus | None = Query(default=None, alias="status"),
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> list[TableOutput]:
    """Tables of a branch ordered by number."""
    tables = TableRegistry(db).list_tables(
        branch_id, caller, section=section, status=status_filter
    )
    return [TableOutput.model_validate(t) for t in tables]


@router.get("/{table_id}", response_model=TableOutput)
def get_table(
    table_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> TableOutput:
    return TableOutput.model_validate(TableRegistry(db).get_table(table_id, caller))


@router.post("", response_model=TableOutput, status_code=status.HTTP_201_CREATED)
def create_table(
    body: TableCreate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> TableOutput:
    """Create a table. The number must be unique within the branch."""
    return TableOutput.model_validate(TableRegistry(db).create_table(body, caller))


@router.put("/{table_id}", response_model=TableOutput)
def update_table(
    table_id: int,
    body: TableUpdate,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> TableOutput:
    """Update number, capacity, section or status."""
    return TableOutput.model_validate(TableRegistry(db).update_table(table_id, body, caller))


@router.delete("/{table_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_table(
    table_id: int,
    db: Session = Depends(get_db),
    caller: CallerContext = Depends(current_caller),
) -> None:
    """Delete a table that has no open order."""
    TableRegistry(db).delete_table(table_id, caller)
