"""
Service layer plumbing.

Every public service method is wrapped by ``service_operation``: domain
errors raised inside become failure envelopes, store integrity errors are
classified, and any other store failure becomes STORE_ERROR with a safe
message while the raw error is logged.
"""

import functools
import re
from typing import Any, Awaitable, Callable, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import ErrorCode, StorefrontError
from storefront.core.logging_config import get_logger
from storefront.schemas.common import ServiceResult

logger = get_logger(__name__)

# Substring of the constraint violation -> (message, code)
INTEGRITY_CLASSIFIERS = (
    ("email", ("Email already exists", ErrorCode.DUPLICATE_EMAIL.value)),
    ("sku", ("SKU already exists", ErrorCode.DUPLICATE_SKU.value)),
    ("roles.name", ("Role already exists", ErrorCode.DUPLICATE_ROLE.value)),
)


def classify_integrity_error(error: IntegrityError) -> Tuple[str, str]:
    text = str(error.orig if error.orig is not None else error).lower()
    for needle, outcome in INTEGRITY_CLASSIFIERS:
        if needle in text:
            return outcome
    return "Data violates a store constraint", ErrorCode.VALIDATION_FAILURE.value


_PLAIN_DIGITS = re.compile(r"[0-9]+")


def numeric_id(identifier: Any) -> Optional[int]:
    """``"42"`` -> 42; anything but ASCII digits (slugs, ``"²"``) -> None"""
    text = str(identifier)
    return int(text) if _PLAIN_DIGITS.fullmatch(text) else None


class BaseService:
    """Holds the request's session; services keep no other state"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError as exc:
            logger.log_db_error(exc, "rollback")


def service_operation(failure_message: str):
    """
    Convert everything a service method raises into a ServiceResult.

    Args:
        failure_message: Safe message used when the store itself fails
    """

    def decorator(func: Callable[..., Awaitable[ServiceResult]]):
        @functools.wraps(func)
        async def wrapper(self: BaseService, *args, **kwargs) -> ServiceResult:
            operation = f"{type(self).__name__}.{func.__name__}"
            try:
                return await func(self, *args, **kwargs)
            except StorefrontError as exc:
                await self._rollback()
                logger.info(
                    f"{operation} failed: {exc.code}",
                    extra={"event_type": "service_failure", "error_code": exc.code}
                )
                return ServiceResult.fail(exc.message, exc.code)
            except IntegrityError as exc:
                await self._rollback()
                logger.log_db_error(exc, operation)
                message, code = classify_integrity_error(exc)
                return ServiceResult.fail(message, code)
            except SQLAlchemyError as exc:
                await self._rollback()
                logger.log_db_error(exc, operation)
                return ServiceResult.fail(failure_message, ErrorCode.STORE_ERROR.value)

        return wrapper

    return decorator
