"""
Security module: Authentication and rate limiting.
"""

from shared.security.auth import (
    sign_jwt,
    verify_jwt,
    get_bearer_token,
    current_user_context,
)
from shared.security.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
)

__all__ = [
    # auth
    "sign_jwt",
    "verify_jwt",
    "get_bearer_token",
    "current_user_context",
    # rate limiting
    "limiter",
    "rate_limit_exceeded_handler",
]
