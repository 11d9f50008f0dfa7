"""
Custom Exceptions for Storefront
================================

Raised inside services and request handlers; never sent to clients as-is.
Services convert them into failure envelopes (see services.base), handlers
turn the request-level ones (validation, uploads) into 400 responses.

Usage:
    from storefront.core.exceptions import UserNotFoundError

    if not user:
        raise UserNotFoundError(user_id)
"""

from enum import Enum
from typing import Optional, Any, Dict, List


class ErrorCode(str, Enum):
    """Classification strings surfaced in the ``error`` field of envelopes"""
    USER_NOT_FOUND = "USER_NOT_FOUND"
    ROLE_NOT_FOUND = "ROLE_NOT_FOUND"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    CATEGORY_NOT_FOUND = "CATEGORY_NOT_FOUND"
    REVIEW_NOT_FOUND = "REVIEW_NOT_FOUND"
    DUPLICATE_EMAIL = "DUPLICATE_EMAIL"
    DUPLICATE_ROLE = "DUPLICATE_ROLE"
    DUPLICATE_SKU = "DUPLICATE_SKU"
    ROLE_IN_USE = "ROLE_IN_USE"
    CATEGORY_IN_USE = "CATEGORY_IN_USE"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_RESET_TOKEN = "INVALID_RESET_TOKEN"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    INVALID_TOKEN = "INVALID_TOKEN"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    VALIDATION_FAILURE = "VALIDATION_FAILURE"
    UPLOAD_REJECTED = "UPLOAD_REJECTED"
    RATE_LIMITED = "RATE_LIMITED"
    STORE_ERROR = "STORE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class StorefrontError(Exception):
    """Base exception for all Storefront errors"""

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.INTERNAL_ERROR.value,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(StorefrontError):
    """User authentication failed"""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message, code=ErrorCode.INVALID_CREDENTIALS.value)


class AuthorizationError(StorefrontError):
    """User not authorized for this action"""

    def __init__(self, message: str = "Not authorized"):
        super().__init__(message, code=ErrorCode.NOT_AUTHORIZED.value)


class InvalidResetTokenError(StorefrontError):
    """Password reset token unknown or expired"""

    def __init__(self):
        super().__init__(
            "Password reset token is invalid or has expired",
            code=ErrorCode.INVALID_RESET_TOKEN.value
        )


class InvalidRefreshTokenError(StorefrontError):
    """Refresh token malformed, expired, revoked or owned by a disabled account"""

    def __init__(self):
        super().__init__("Invalid or expired refresh token", code=ErrorCode.INVALID_TOKEN.value)


class InvalidPasswordError(StorefrontError):
    """Current password did not verify"""

    def __init__(self):
        super().__init__("Current password is incorrect", code=ErrorCode.INVALID_PASSWORD.value)


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(StorefrontError):
    """Base class for not found errors"""

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": str(resource_id)}
        )


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: Any):
        super().__init__("User", user_id)


class RoleNotFoundError(ResourceNotFoundError):
    def __init__(self, role_id: Any):
        super().__init__("Role", role_id)


class ProductNotFoundError(ResourceNotFoundError):
    def __init__(self, product_id: Any):
        super().__init__("Product", product_id)


class CategoryNotFoundError(ResourceNotFoundError):
    def __init__(self, category_id: Any):
        super().__init__("Category", category_id)


class ReviewNotFoundError(ResourceNotFoundError):
    def __init__(self, review_id: Any):
        super().__init__("Review", review_id)


# ============================================
# Conflict Errors (409-type)
# ============================================

class ConflictError(StorefrontError):
    """Write would violate a uniqueness or reference rule"""


class DuplicateEmailError(ConflictError):
    def __init__(self, email: str = ""):
        super().__init__(
            "Email already exists",
            code=ErrorCode.DUPLICATE_EMAIL.value,
            details={"email": email} if email else {}
        )


class DuplicateRoleError(ConflictError):
    def __init__(self, name: str):
        super().__init__(
            f"Role '{name}' already exists",
            code=ErrorCode.DUPLICATE_ROLE.value,
            details={"name": name}
        )


class DuplicateSkuError(ConflictError):
    def __init__(self, sku: str):
        super().__init__(
            "SKU already exists",
            code=ErrorCode.DUPLICATE_SKU.value,
            details={"sku": sku}
        )


class ResourceInUseError(ConflictError):
    """Delete blocked because other records still reference the resource"""

    def __init__(self, message: str, code: str, references: int):
        super().__init__(message, code=code, details={"references": references})


# ============================================
# Validation Errors (400-type)
# ============================================

class ValidationError(StorefrontError):
    """Input rejected by a business rule in the service layer"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(message, code=ErrorCode.VALIDATION_FAILURE.value, details=details)


class RequestValidationFailed(StorefrontError):
    """Request payload failed its rule set; carries every field error"""

    def __init__(self, errors: List[Dict[str, Any]], rule_set: str = ""):
        super().__init__(
            "Validation failed",
            code=ErrorCode.VALIDATION_FAILURE.value,
            details={"rule_set": rule_set} if rule_set else {}
        )
        self.errors = errors


class UploadError(StorefrontError):
    """Uploaded file(s) violate a file constraint"""

    def __init__(self, message: str):
        super().__init__(message, code=ErrorCode.UPLOAD_REJECTED.value)


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: StorefrontError) -> Dict[str, Any]:
    """Convert exception to the failure envelope shape"""
    return {
        "success": False,
        "message": error.message,
        "error": error.code
    }
