"""Per-client rate limiting using slowapi."""

from fastapi import Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address

from cookstep.config import settings


def get_rate_limit_key(request: Request) -> str:
    """Clients sending X-API-Key are limited per key, everyone else per address."""
    return request.headers.get("X-API-Key") or get_remote_address(request)


limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=[f"{settings.rate_limit_per_hour}/hour"],
    storage_uri="memory://",
)


def get_rate_limit_exceeded_handler():
    """Get rate limit exceeded handler."""
    return _rate_limit_exceeded_handler


def rate_limit_dependency(request: Request) -> None:
    """
    Rate limit dependency for FastAPI.

    Raises:
        RateLimitExceeded: If rate limit is exceeded
    """
    # No middleware hook is installed, so the default limits are checked here.
    limiter._check_request_limit(request, endpoint_func=None)
