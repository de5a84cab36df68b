"""
Base Service Class for domain services.

Architecture:
    Router (thin) → Service (business logic) → Repository (data access) → Model

Every public mutating operation of a domain service runs inside
`self.transaction(...)`: one Session transaction per operation, committed
with safe_commit, rolled back on any failure.

Usage:
    class OrderService(BaseDomainService):
        def cancel(self, order_id: int) -> Order:
            with self.transaction("cancel order"):
                order = ...
                order.status = "cancelled"
            return order
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from shared.infrastructure.db import safe_commit
from shared.config.logging import get_logger
from shared.utils.exceptions import AppException, ConflictError, DatabaseError

logger = get_logger(__name__)


class BaseDomainService:
    """
    Base class for domain services.

    Provides the session and the unit-of-work wrapper.
    """

    def __init__(self, db: Session):
        self._db = db

    @property
    def db(self) -> Session:
        """Database session."""
        return self._db

    @contextmanager
    def transaction(self, operation: str) -> Iterator[None]:
        """
        Run a block as one unit of work.

        - commits on success
        - rolls back and re-raises AppException subclasses
        - maps lost optimistic-lock races and constraint races to ConflictError
        - maps any other database failure to DatabaseError
        """
        try:
            yield
            safe_commit(self._db)
        except AppException:
            self._db.rollback()
            raise
        except StaleDataError as e:
            self._db.rollback()
            raise ConflictError(
                f"Concurrent modification during {operation}; reload and retry",
                operation=operation,
                error=str(e),
            )
        except IntegrityError as e:
            self._db.rollback()
            raise ConflictError(
                f"Conflicting write during {operation}",
                operation=operation,
                error=str(e.orig),
            )
        except SQLAlchemyError as e:
            self._db.rollback()
            logger.error("Database failure", operation=operation, exc_info=True)
            raise DatabaseError(operation, error=str(e))
