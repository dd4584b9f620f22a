"""Per-client request limits for the authentication endpoints."""

import logging

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from conducky.core.config import settings

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """First X-Forwarded-For hop when proxied, else the peer address."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_client_ip,
    enabled=settings.RATE_LIMIT_ENABLED,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
)

auth_limit = limiter.limit(settings.RATE_LIMIT_AUTH)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("rate limit exceeded for %s on %s", get_client_ip(request), request.url.path)
    return JSONResponse(
        status_code=429,
        content={"detail": "Too many attempts, please try again later."},
    )
