"""
Authentication utilities.
Handles JWT bearer tokens for staff members operating the POS.

Token issuance belongs to the login service; this module only signs tokens
for tooling/tests and verifies the ones presented on each request.
"""

from __future__ import annotations

import time
import uuid
from typing import Any

import jwt
from fastapi import Header

from shared.config.settings import (
    JWT_SECRET,
    JWT_ISSUER,
    JWT_AUDIENCE,
    settings,
)
from shared.config.logging import get_logger
from shared.utils.exceptions import AuthenticationError

logger = get_logger(__name__)


# =============================================================================
# JWT Functions (for staff authentication)
# =============================================================================


def sign_jwt(payload: dict[str, Any], ttl_seconds: int | None = None) -> str:
    """
    Sign a JWT token with the given payload.

    Args:
        payload: Claims to include in the token (sub, restaurant_id, branch_ids,
            role, permissions).
        ttl_seconds: Token lifetime in seconds. Defaults to access token expiry.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_access_token_expire_minutes * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a JWT token.

    Args:
        token: The JWT token string.

    Returns:
        Decoded token claims.

    Raises:
        AuthenticationError: If token is invalid, expired, or lacks required claims.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except jwt.InvalidTokenError as e:
        # Log the actual error, return a generic message to the client
        logger.warning("JWT validation failed", error=str(e))
        raise AuthenticationError("Invalid token")

    if "sub" not in payload:
        raise AuthenticationError("Invalid token: missing subject claim")

    if not isinstance(payload.get("restaurant_id"), int):
        raise AuthenticationError("Invalid token: missing or malformed restaurant_id claim")

    try:
        int(payload["sub"])
    except (ValueError, TypeError):
        raise AuthenticationError("Invalid token: malformed subject claim")

    return payload


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        AuthenticationError: If header is missing or malformed.
    """
    if not authorization:
        raise AuthenticationError("Missing Authorization header")

    if not authorization.startswith("Bearer "):
        raise AuthenticationError(
            "Invalid Authorization header format. Expected: Bearer <token>"
        )

    return authorization.split(" ", 1)[1].strip()


def current_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """
    FastAPI dependency to get the verified JWT claims of the caller.

    Usage:
        @router.get("/protected")
        def protected_endpoint(claims = Depends(current_user_context)):
            user_id = claims["sub"]
            ...

    Returns:
        Dict with: sub (user_id), restaurant_id, branch_ids, role, permissions
    """
    token = get_bearer_token(authorization)
    return verify_jwt(token)
