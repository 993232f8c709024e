"""
Slowapi-based rate limiting.

Only the sign-up and sign-in routes are limited (AUTH_RATE_LIMIT). Set
RATE_LIMIT_ENABLED=false to switch limiting off, e.g. in tests.
"""
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request
from typing import Optional
import hashlib
import logging

from config import settings

logger = logging.getLogger(__name__)


def get_request_identifier(request: Request) -> str:
    """
    Get unique identifier for rate limiting.

    Priority:
    1. Bearer token (hashed) for authenticated clients
    2. IP address (fallback)
    """
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[len("Bearer "):].strip()
        if token:
            return f"token:{hashlib.sha256(token.encode()).hexdigest()[:16]}"

    return get_remote_address(request)


def create_limiter(redis_url: Optional[str] = None, enabled: bool = True) -> Limiter:
    """
    Create and configure slowapi Limiter.

    Args:
        redis_url: Redis connection URL for distributed rate limiting
        enabled: Whether limits are enforced

    Returns:
        Configured Limiter instance
    """
    if redis_url:
        limiter = Limiter(
            key_func=get_request_identifier,
            storage_uri=redis_url,
            headers_enabled=True,
            enabled=enabled,
        )
        logger.info("Rate limiting configured with Redis backend")
    else:
        # In-memory storage (single instance only)
        limiter = Limiter(
            key_func=get_request_identifier,
            headers_enabled=True,
            enabled=enabled,
        )
        logger.info("Rate limiting using in-memory storage (not distributed)")

    return limiter


limiter = create_limiter(settings.redis_url, enabled=settings.rate_limit_enabled)


def setup_rate_limiting(app, rate_limiter: Optional[Limiter] = None) -> Limiter:
    """
    Attach a limiter and its 429 handler to a FastAPI app.

    Args:
        app: FastAPI application instance
        rate_limiter: Limiter to attach (module limiter by default)
    """
    rate_limiter = rate_limiter or limiter

    app.state.limiter = rate_limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    logger.info(f"Slowapi rate limiting {'enabled' if rate_limiter.enabled else 'disabled'}")
    return rate_limiter
