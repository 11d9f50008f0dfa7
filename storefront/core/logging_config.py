"""
Storefront - Logging

Plain text with request/user context in development, one JSON object per
line in production. Every module logs through a child of the
``storefront`` logger so the handlers configured here apply everywhere.
"""

import json
import logging
import sys
import traceback
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from storefront.core.config import settings

ROOT_LOGGER_NAME = "storefront"

_request_id: ContextVar[str] = ContextVar("request_id", default="")
_user_id: ContextVar[str] = ContextVar("user_id", default="")


def get_request_id() -> str:
    return _request_id.get()


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id or "")


def get_user_id() -> str:
    return _user_id.get()


def set_user_id(user_id: str) -> None:
    """Attach the authenticated user to log lines of the current request"""
    _user_id.set(user_id or "")


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


# Attributes every LogRecord has; anything else came in through ``extra``
_STANDARD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message", "asctime", "taskName", "request_id", "user_id",
}


class JSONFormatter(logging.Formatter):
    """One JSON document per record, ``extra`` fields inlined"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}:{record.funcName}:{record.lineno}",
        }
        if get_request_id():
            entry["request_id"] = get_request_id()
        if get_user_id():
            entry["user_id"] = get_user_id()

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb),
            }

        entry.update({
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        })
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Human-readable lines carrying the request and user id"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or "-"
        record.user_id = get_user_id() or "-"
        return super().format(record)


class StorefrontLogger(logging.Logger):
    """Logger with helpers for the events the application reports"""

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        level = logging.WARNING if status_code >= 500 else logging.INFO
        self.log(
            level,
            f"{method} {path} -> {status_code} ({duration_ms:.1f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        """Logins, registrations and password changes; failures at WARNING"""
        outcome = "ok" if success else "rejected"
        details = " ".join(part for part in (user_email, reason) if part)
        self.log(
            logging.INFO if success else logging.WARNING,
            f"Auth {event} {outcome}" + (f": {details}" if details else ""),
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_db_error(self, error: Exception, operation: str, **kwargs) -> None:
        """Raw store failure; the text stays in the logs and never reaches clients"""
        self.error(
            f"Store error in {operation}: {type(error).__name__}: {error}",
            exc_info=error,
            extra={
                "event_type": "db_error",
                "db_operation": operation,
                "error_type": type(error).__name__,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None,
                               **kwargs) -> None:
        self.error(
            f"{type(error).__name__} in {context or 'unknown context'}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )


def get_logger(name: str) -> StorefrontLogger:
    """Logger for ``name`` using StorefrontLogger"""
    logging.setLoggerClass(StorefrontLogger)
    named = logging.getLogger(name)
    if not isinstance(named, StorefrontLogger):
        # Created before setup_logging registered the class
        named.__class__ = StorefrontLogger
    return named


def _build_handlers(production: bool) -> List[logging.Handler]:
    if production:
        console_formatter = file_formatter = JSONFormatter()
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s [%(request_id)s] %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s %(levelname)-8s [%(request_id)s] [%(user_id)s] %(name)s:%(lineno)d %(message)s"
        )

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(console_formatter)
    handlers: List[logging.Handler] = [console]

    if settings.LOG_FILE:
        path = Path(settings.LOG_FILE)
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5)
        rotating.setLevel(logging.DEBUG)
        rotating.setFormatter(file_formatter)
        handlers.append(rotating)

    return handlers


def setup_logging() -> StorefrontLogger:
    """(Re)configure the ``storefront`` logger from settings"""
    root = get_logger(ROOT_LOGGER_NAME)
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    root.handlers.clear()

    production = settings.ENVIRONMENT == "production"
    for handler in _build_handlers(production):
        root.addHandler(handler)

    for noisy in ("httpx", "uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root.debug(
        "Logging configured",
        extra={"environment": settings.ENVIRONMENT, "json_logging": production}
    )
    return root


logger: StorefrontLogger = setup_logging()


__all__ = [
    "logger",
    "get_logger",
    "setup_logging",
    "get_request_id",
    "set_request_id",
    "get_user_id",
    "set_user_id",
    "generate_request_id",
    "StorefrontLogger",
]
