from storefront.schemas.common import (
    EnvelopeResponse,
    FieldErrorDetail,
    RequestPayload,
    ServiceResult,
    ValidationErrorResponse,
)

__all__ = [
    "EnvelopeResponse",
    "FieldErrorDetail",
    "RequestPayload",
    "ServiceResult",
    "ValidationErrorResponse",
]
