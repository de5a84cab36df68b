"""
Caller authorization for POS operations.

Usage:
    from rest_api.services.permissions import CallerContext, current_caller

    @router.delete("/{order_id}")
    def delete_order(order_id: int, caller: CallerContext = Depends(current_caller)):
        ...
"""

from .context import CallerContext, current_caller

__all__ = [
    "CallerContext",
    "current_caller",
]
