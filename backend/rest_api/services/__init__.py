"""
Services module for business logic.

- domain/: Application services (order ledger, tables, payments, receipts)
- permissions/: CallerContext and authorization checks
- base_service.py: unit-of-work base class

Usage:
    from rest_api.services.domain import OrderService
    service = OrderService(db)
    orders, total = service.list_orders(caller, branch_id=3)
"""
