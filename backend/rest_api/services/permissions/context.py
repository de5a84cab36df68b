"""
Caller Context - explicit identity and scope of whoever invokes a POS operation.

Every order/table/payment operation receives a CallerContext instead of
reading ambient auth state. Routers build it from the bearer token claims.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from fastapi import Depends

from shared.config.constants import Roles, Permissions, ORDER_DELETE_ROLES
from shared.config.logging import audit_access_denied
from shared.security.auth import current_user_context
from shared.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BranchAccessError,
    InsufficientRoleError,
)


@dataclass(frozen=True)
class CallerContext:
    """
    Identity and scope of the caller.

    Usage:
        caller = CallerContext.from_claims(claims)
        caller.require_pos_access(order.restaurant_id, order.branch_id)

    Scope rules:
        - owner: every branch of their restaurant, all POS operations
        - manager/waiter: only branches listed in branch_ids and only
          with the access_pos permission for POS mutations
    """

    user_id: int
    restaurant_id: int
    role: str
    branch_ids: frozenset[int] = field(default_factory=frozenset)
    permissions: frozenset[str] = field(default_factory=frozenset)
    email: str | None = None

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "CallerContext":
        """Build a context from verified JWT claims."""
        role = claims.get("role")
        if role not in Roles.ALL:
            raise AuthenticationError("Invalid token: unknown role claim")
        return cls(
            user_id=int(claims["sub"]),
            restaurant_id=int(claims["restaurant_id"]),
            role=role,
            branch_ids=frozenset(int(b) for b in claims.get("branch_ids", [])),
            permissions=frozenset(claims.get("permissions", [])),
            email=claims.get("email"),
        )

    @property
    def is_owner(self) -> bool:
        return self.role == Roles.OWNER

    @property
    def is_manager(self) -> bool:
        return self.role == Roles.MANAGER

    @property
    def is_waiter(self) -> bool:
        return self.role == Roles.WAITER

    def has_permission(self, permission: str) -> bool:
        """Owners implicitly hold every permission."""
        return self.is_owner or permission in self.permissions

    def has_branch_access(self, restaurant_id: int, branch_id: int) -> bool:
        """Check if the caller can see data of a branch."""
        if restaurant_id != self.restaurant_id:
            return False
        if self.is_owner:
            return True
        return branch_id in self.branch_ids

    def require_branch_access(self, restaurant_id: int, branch_id: int) -> None:
        """Raise BranchAccessError if the branch is outside the caller's scope."""
        if not self.has_branch_access(restaurant_id, branch_id):
            audit_access_denied(
                "access branch",
                user_id=self.user_id,
                role=self.role,
                branch_id=branch_id,
                reason="branch outside caller scope",
            )
            raise BranchAccessError(branch_id, user_id=self.user_id)

    def require_pos_access(self, restaurant_id: int, branch_id: int) -> None:
        """Branch scope plus the access_pos permission (POS mutations)."""
        self.require_branch_access(restaurant_id, branch_id)
        if not self.has_permission(Permissions.ACCESS_POS):
            audit_access_denied(
                "use the POS",
                user_id=self.user_id,
                role=self.role,
                branch_id=branch_id,
                reason="missing access_pos permission",
            )
            raise AuthorizationError("use the POS", user_id=self.user_id, branch_id=branch_id)

    def require_order_delete(self, restaurant_id: int, branch_id: int) -> None:
        """Only owners and managers delete orders."""
        self.require_branch_access(restaurant_id, branch_id)
        if self.role not in ORDER_DELETE_ROLES:
            audit_access_denied(
                "delete order",
                user_id=self.user_id,
                role=self.role,
                branch_id=branch_id,
                reason="role not allowed",
            )
            raise InsufficientRoleError(sorted(ORDER_DELETE_ROLES), user_id=self.user_id)

    def can_manage_tables(self) -> bool:
        """Create, renumber and delete tables. Waiters may only flip status."""
        return (
            self.is_owner
            or self.is_manager
            or Permissions.MANAGE_TABLES in self.permissions
        )

    def require_table_management(self, restaurant_id: int, branch_id: int) -> None:
        self.require_branch_access(restaurant_id, branch_id)
        if not self.can_manage_tables():
            audit_access_denied(
                "manage tables",
                user_id=self.user_id,
                role=self.role,
                branch_id=branch_id,
                reason="role not allowed",
            )
            raise AuthorizationError("manage tables", user_id=self.user_id)


def current_caller(
    claims: dict[str, Any] = Depends(current_user_context),
) -> CallerContext:
    """
    FastAPI dependency returning the CallerContext of the request.

    Usage:
        @router.post("/api/orders")
        def create_order(caller: CallerContext = Depends(current_caller)):
            ...
    """
    return CallerContext.from_claims(claims)
