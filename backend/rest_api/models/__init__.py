"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and AuditMixin
- tenant: Restaurant, Branch
- catalog: MenuItem
- table: Table
- order: Order, OrderLine
- receipt: Receipt, ReceiptLine
"""

# Base classes
from .base import Base, AuditMixin

# Core tenant models
from .tenant import Restaurant, Branch

# Catalog (menu prices)
from .catalog import MenuItem

# Tables
from .table import Table

# Orders
from .order import Order, OrderLine

# Receipts
from .receipt import Receipt, ReceiptLine

__all__ = [
    # Base
    "Base",
    "AuditMixin",
    # Tenant
    "Restaurant",
    "Branch",
    # Catalog
    "MenuItem",
    # Tables
    "Table",
    # Orders
    "Order",
    "OrderLine",
    # Receipts
    "Receipt",
    "ReceiptLine",
]
