"""
Request dependencies for authenticated routes.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import Request

from ..integrations.supabase_auth import AuthProviderError, get_auth_client
from .errors import AuthError

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedUser:
    """Identity resolved from a bearer token."""
    id: str
    email: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


def extract_bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(request: Request) -> AuthenticatedUser:
    """
    Resolve the caller from ``Authorization: Bearer <token>``.

    Raises:
        AuthError: No token, or the identity provider rejects it
    """
    token = extract_bearer_token(request)
    if not token:
        raise AuthError("Authorization required")

    try:
        user = await get_auth_client().get_user(token)
    except AuthProviderError as e:
        logger.warning(f"Token verification failed: {e.message}")
        raise AuthError("Invalid authorization")

    if not user:
        raise AuthError("Invalid authorization")

    return AuthenticatedUser(
        id=user["id"],
        email=user.get("email"),
        metadata=user.get("user_metadata") or {},
    )
