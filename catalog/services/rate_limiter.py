"""
Rate Limiting Service

slowapi limiter shared by every router.

Tiers (see Settings):
- rate_limit_default: catalog reads
- rate_limit_search: /books/search
- rate_limit_write: admin writes
- rate_limit_review_submit: public review submission (2 per 10 minutes)

Limits are keyed on the socket peer address. Forwarding headers sent by
the client are ignored; behind a reverse proxy, uvicorn's proxy header
support rewrites the peer address for the addresses listed in
settings.forwarded_allow_ips only.
"""

import logging

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from catalog.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    storage_uri=settings.rate_limit_storage_uri,
    strategy="fixed-window",
    enabled=settings.rate_limit_enabled,
)


def retry_after_seconds(exc: RateLimitExceeded) -> int:
    """Length of the window of the limit that was hit."""
    return exc.limit.limit.get_expiry()


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 Too Many Requests, with Retry-After set to the limit's window."""
    retry_after = retry_after_seconds(exc)
    logger.warning(
        f"Rate limit {exc.detail} exceeded by {get_remote_address(request)} "
        f"on {request.url.path}"
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": "Too many requests. Please slow down.",
            "detail": str(exc.detail),
        },
        headers={
            "Retry-After": str(retry_after),
            "X-RateLimit-Limit": str(exc.detail),
        },
    )
