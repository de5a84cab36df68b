"""
Repository Pattern implementation.
Centralizes data access with guaranteed eager loading.

Usage:
    from rest_api.repositories import OrderRepository, OrderFilters

    repo = OrderRepository(db)
    orders = repo.find_all(restaurant_id=1, filters=OrderFilters(branch_id=5))
    total = repo.count(restaurant_id=1, filters=OrderFilters(branch_id=5))
"""

from .base import BaseRepository, RepositoryFilters
from .order import OrderRepository, OrderFilters, get_order_repository

__all__ = [
    # Base
    "BaseRepository",
    "RepositoryFilters",
    # Order
    "OrderRepository",
    "OrderFilters",
    "get_order_repository",
]
