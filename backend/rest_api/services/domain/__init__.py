"""
Domain Services - Application Layer.

Services contain business logic and orchestrate operations.
They use Repositories for data access.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import OrderService

    # In router
    service = OrderService(db)
    order = service.open(body, caller)
"""

from .menu_catalog import MenuCatalog
from .table_registry import TableRegistry
from .receipt_sink import ReceiptSink
from .order_service import OrderService
from .payment_service import PaymentService
from .pos_service import PosService

__all__ = [
    "MenuCatalog",
    "TableRegistry",
    "ReceiptSink",
    "OrderService",
    "PaymentService",
    "PosService",
]
