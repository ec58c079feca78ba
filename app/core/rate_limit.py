# app/core/rate_limit.py
"""
Per-client request throttling.

Every route gets RATE_LIMIT_DEFAULT through the middleware. Auth endpoints
are decorated with the strict limit and public read-only listings with the
relaxed one.
"""
import logging

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from app.core.config import settings

logger = logging.getLogger(__name__)

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.RATE_LIMIT_DEFAULT],
    enabled=settings.RATE_LIMIT_ENABLED,
)

strict_limit = limiter.limit(settings.RATE_LIMIT_STRICT)
relaxed_limit = limiter.limit(settings.RATE_LIMIT_RELAXED)


# must stay sync: slowapi's middleware calls it without awaiting
def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    logger.warning("rate limit hit by %s on %s %s", get_remote_address(request), request.method, request.url.path)
    return JSONResponse(
        status_code=429,
        content={"detail": f"Rate limit exceeded: {exc.detail}", "error": "rate_limited"},
    )
