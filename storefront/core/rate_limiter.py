"""
Storefront - Rate limiting

slowapi limiter keyed by client address. Only the credential endpoints are
limited: login and registration share the auth window, password reset
requests get a tighter one.

Usage:
    @router.post("/login")
    @limiter.limit(settings.LOGIN_RATE_LIMIT)
    async def login(request: Request, ...):
        ...
"""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from storefront.core.config import settings
from storefront.core.exceptions import ErrorCode
from storefront.core.logging_config import logger

limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    enabled=settings.RATE_LIMIT_ENABLED,
    strategy="fixed-window",
)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """429 failure envelope"""
    logger.warning(
        f"Rate limit hit on {request.url.path}",
        extra={
            "event_type": "rate_limited",
            "client_ip": get_remote_address(request),
            "limit": str(exc.detail),
        }
    )
    return JSONResponse(
        status_code=429,
        content={
            "success": False,
            "message": "Too many requests, please try again later",
            "error": ErrorCode.RATE_LIMITED.value,
        },
    )
