"""
Shared schema building blocks: the request payload base class and the
result envelope returned by every service operation.
"""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class RequestPayload(BaseModel):
    """
    Typed shape of an accepted request.

    Constraints and messages live in the rule sets (storefront.validation);
    a payload model only supplies types and defaults once the rules pass.
    """
    model_config = ConfigDict(extra="ignore")


# ==================== Result Envelope ====================

class ServiceResult(BaseModel):
    """Uniform success/failure wrapper returned by every service operation"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, message: str, data: Any = None) -> "ServiceResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, error: str) -> "ServiceResult":
        return cls(success=False, message=message, error=error)


# ==================== Response Schemas ====================

class FieldErrorDetail(BaseModel):
    field: str
    message: str
    value: Optional[Any] = None


class ValidationErrorResponse(BaseModel):
    success: bool = False
    message: str = "Validation failed"
    errors: List[FieldErrorDetail]


class EnvelopeResponse(BaseModel):
    success: bool
    message: str
    data: Optional[Any] = None
    error: Optional[str] = None
