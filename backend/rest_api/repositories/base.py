"""
Base Repository implementation.
Provides common data access patterns with restaurant (tenant) isolation.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TypeVar, Generic, Sequence
from sqlalchemy.orm import Session
from sqlalchemy import Select, select, func

from shared.config.constants import Limits


ModelT = TypeVar("ModelT")


@dataclass
class RepositoryFilters:
    """Base filters for repository queries."""

    # Pagination
    limit: int = Limits.DEFAULT_PAGE_SIZE
    offset: int = 0

    # Hidden rows
    include_inactive: bool = False

    # Branch filtering
    branch_id: int | None = None
    branch_ids: list[int] | None = None

    def __post_init__(self):
        """Validate and normalize filters."""
        self.limit = min(max(1, self.limit), Limits.MAX_PAGE_SIZE)
        self.offset = max(0, self.offset)


class BaseRepository(ABC, Generic[ModelT]):
    """
    Abstract base repository with common operations.

    Subclasses must implement:
    - model: the SQLAlchemy model class
    - _base_query(): base query with eager loading and ordering
    - _apply_filters(): entity-specific WHERE clauses
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    @abstractmethod
    def model(self) -> type[ModelT]:
        """Return the SQLAlchemy model class."""
        ...

    @abstractmethod
    def _base_query(self, restaurant_id: int) -> Select:
        """
        Return base query with proper eager loading.
        Subclasses must implement this with selectinload/joinedload.
        """
        ...

    @abstractmethod
    def _apply_filters(self, query: Select, filters: RepositoryFilters) -> Select:
        """Apply entity-specific filters to query."""
        ...

    def _apply_common(self, query: Select, filters: RepositoryFilters) -> Select:
        if not filters.include_inactive and hasattr(self.model, "is_active"):
            query = query.where(self.model.is_active.is_(True))

        if filters.branch_id and hasattr(self.model, "branch_id"):
            query = query.where(self.model.branch_id == filters.branch_id)
        elif filters.branch_ids is not None and hasattr(self.model, "branch_id"):
            query = query.where(self.model.branch_id.in_(filters.branch_ids))

        return self._apply_filters(query, filters)

    def find_all(
        self,
        restaurant_id: int,
        filters: RepositoryFilters | None = None,
    ) -> Sequence[ModelT]:
        """
        Find all entities matching filters, paginated.

        Args:
            restaurant_id: Restaurant ID for isolation
            filters: Optional filters

        Returns:
            List of entities
        """
        filters = filters or RepositoryFilters()
        query = self._apply_common(self._base_query(restaurant_id), filters)
        query = query.offset(filters.offset).limit(filters.limit)

        return self._db.execute(query).scalars().unique().all()

    def count(
        self,
        restaurant_id: int,
        filters: RepositoryFilters | None = None,
    ) -> int:
        """
        Count entities matching filters (pagination ignored).

        Args:
            restaurant_id: Restaurant ID for isolation
            filters: Optional filters

        Returns:
            Count of matching entities
        """
        filters = filters or RepositoryFilters()

        query = (
            select(func.count())
            .select_from(self.model)
            .where(self.model.restaurant_id == restaurant_id)
        )
        query = self._apply_common(query, filters)

        return self._db.scalar(query) or 0
