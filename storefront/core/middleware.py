"""
Storefront - HTTP middleware

Request ids and access logging, plus a cap on declared body size so
oversized uploads are refused before they are read.
"""

import time
from typing import Callable, FrozenSet

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from storefront.core.config import settings
from storefront.core.logging_config import (
    generate_request_id,
    logger,
    set_request_id,
    set_user_id,
)

REQUEST_ID_HEADER = "X-Request-ID"

QUIET_PATHS: FrozenSet[str] = frozenset({
    "/health", "/favicon.ico", "/docs", "/redoc", "/openapi.json",
})
QUIET_SUFFIXES = (".js", ".css", ".png", ".jpg", ".gif", ".webp", ".ico")


def should_skip_logging(path: str) -> bool:
    """Health checks, docs and static files are not access-logged"""
    return (
        path in QUIET_PATHS
        or path.startswith(settings.UPLOAD_URL_PREFIX.rstrip("/") + "/")
        or path.endswith(QUIET_SUFFIXES)
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id (taken from X-Request-ID when the client
    sends one), echoes it back with the elapsed time, and writes one
    access-log line per request.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        set_request_id(request_id)
        path = request.url.path
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"{request.method} {path} raised {type(exc).__name__}",
                exc_info=True,
                extra={
                    "event_type": "http_request_error",
                    "http_method": request.method,
                    "http_path": path,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                }
            )
            raise
        else:
            elapsed_ms = (time.perf_counter() - started) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
            if not should_skip_logging(path):
                logger.log_request(
                    request.method,
                    path,
                    response.status_code,
                    elapsed_ms,
                    client_ip=request.client.host if request.client else None,
                )
            return response
        finally:
            set_request_id("")
            set_user_id("")


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject bodies whose Content-Length exceeds ``max_size`` with 413"""

    def __init__(self, app: ASGIApp, max_size: int = 10 * 1024 * 1024):
        super().__init__(app)
        self.max_size = max_size

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isascii() and declared.isdigit() and int(declared) > self.max_size:
            logger.warning(
                "Rejected oversized request body",
                extra={
                    "event_type": "request_too_large",
                    "content_length": int(declared),
                    "max_size": self.max_size,
                    "http_path": request.url.path,
                }
            )
            limit_mb = self.max_size / (1024 * 1024)
            return JSONResponse(
                status_code=413,
                content={
                    "success": False,
                    "message": f"Request body too large (limit {limit_mb:.0f}MB)"
                }
            )
        return await call_next(request)
