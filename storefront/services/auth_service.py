"""
Auth Service - authentication flows built on the user facade

Handles:
- Registration and login (JWT access tokens plus stored refresh tokens)
- Access token refresh and logout (refresh token revocation)
- Forgot/reset password with hashed, expiring reset tokens
- Change password and profile updates for the signed-in user
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from storefront.core.config import settings
from storefront.core.exceptions import (
    AuthenticationError,
    InvalidPasswordError,
    InvalidRefreshTokenError,
    InvalidResetTokenError,
    UserNotFoundError,
)
from storefront.core.logging_config import get_logger
from storefront.core.security import (
    TokenDecodeError,
    create_access_token,
    create_refresh_token,
    decode_token,
    generate_reset_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from storefront.models.refresh_token import RefreshToken
from storefront.repositories.user_repository import RefreshTokenRepository, UserRepository
from storefront.schemas.common import ServiceResult
from storefront.schemas.user import LoginResponse, PasswordResetIssued, RefreshedToken, UserResponse
from storefront.services.base import BaseService, service_operation
from storefront.services.user_service import UserService

logger = get_logger(__name__)

PROFILE_FIELDS = ("full_name", "phone", "address")


def _access_token_for(user) -> str:
    return create_access_token({"sub": user.id, "email": user.email, "role": user.role_name})


class AuthService(BaseService):
    """Authentication and self-service account operations"""

    def __init__(self, db):
        super().__init__(db)
        self.users = UserRepository(db)
        self.refresh_tokens = RefreshTokenRepository(db)
        self.user_service = UserService(db)

    async def register(self, data: Dict[str, Any]) -> ServiceResult:
        """Create an account with the default role"""
        payload = {key: value for key, value in data.items() if key != "role_id"}
        result = await self.user_service.create_new_user(payload)
        if result.success:
            logger.log_auth_event("register", True, user_email=payload["email"])
            result.message = "User registered successfully"
        return result

    @service_operation("Login failed")
    async def login(self, email: str, password: str) -> ServiceResult:
        user = await self.users.find_by_email(email)

        # Same answer for unknown email, inactive account and wrong password
        if user is None or not user.is_active or not verify_password(password, user.hashed_password):
            logger.log_auth_event("login", False, user_email=email)
            raise AuthenticationError()

        refresh_token, expires_at = create_refresh_token(user.id)
        await self.refresh_tokens.add(RefreshToken(
            user_id=user.id,
            token_hash=hash_token(refresh_token),
            expires_at=expires_at,
        ))
        user.last_login = datetime.utcnow()
        await self.db.commit()

        token = _access_token_for(user)
        logger.log_auth_event("login", True, user_email=user.email, auth_user_id=user.id)

        return ServiceResult.ok(
            "Login successful",
            LoginResponse(
                access_token=token,
                refresh_token=refresh_token,
                user=UserResponse.model_validate(user),
            ),
        )

    @service_operation("Token refresh failed")
    async def refresh_access_token(self, refresh_token: str) -> ServiceResult:
        """New access token for a stored, unexpired refresh token of an active user"""
        try:
            claims = decode_token(refresh_token)
        except TokenDecodeError as exc:
            raise InvalidRefreshTokenError() from exc
        if claims.get("type") != "refresh" or not claims.get("sub"):
            raise InvalidRefreshTokenError()

        stored = await self.refresh_tokens.find_live(hash_token(refresh_token), claims["sub"])
        user = await self.users.find_by_id(claims["sub"]) if stored else None
        if user is None or not user.is_active:
            raise InvalidRefreshTokenError()

        logger.log_auth_event("refresh", True, user_email=user.email, auth_user_id=user.id)
        return ServiceResult.ok("Token refreshed successfully", RefreshedToken(access_token=_access_token_for(user)))

    @service_operation("Logout failed")
    async def logout(self, user_id: str, refresh_token: Optional[str] = None) -> ServiceResult:
        """Revoke one refresh token, or every one the user holds when none is given"""
        if refresh_token:
            revoked = await self.refresh_tokens.revoke(hash_token(refresh_token), user_id)
        else:
            revoked = await self.refresh_tokens.revoke_all(user_id)
        await self.db.commit()

        logger.info(f"User {user_id} logged out, {revoked} refresh token(s) revoked")
        return ServiceResult.ok("Logged out successfully")

    @service_operation("Failed to process password reset request")
    async def forgot_password(self, email: str) -> ServiceResult:
        """
        Issue a reset token valid for PASSWORD_RESET_EXPIRE_MINUTES.

        Only the SHA-256 digest is stored; the token itself is returned for
        the delivery channel. Unknown emails get the same success message.
        """
        message = "If the email exists, a password reset token has been issued"
        user = await self.users.find_by_email(email)
        if user is None:
            logger.info("Password reset requested for unknown email")
            return ServiceResult.ok(message, PasswordResetIssued())

        token = generate_reset_token()
        expires_at = datetime.utcnow() + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)
        user.reset_token_hash = hash_token(token)
        user.reset_token_expires = expires_at
        await self.db.commit()

        logger.log_auth_event("forgot_password", True, user_email=user.email)
        return ServiceResult.ok(message, PasswordResetIssued(reset_token=token, expires_at=expires_at))

    @service_operation("Password reset failed")
    async def reset_password(self, token: str, password: str) -> ServiceResult:
        user = await self.users.find_by_reset_hash(hash_token(token))
        if user is None or user.reset_token_expires is None or user.reset_token_expires < datetime.utcnow():
            raise InvalidResetTokenError()

        user.hashed_password = get_password_hash(password)
        user.reset_token_hash = None
        user.reset_token_expires = None
        user.updated_at = datetime.utcnow()
        await self.refresh_tokens.revoke_all(user.id)
        await self.db.commit()

        logger.log_auth_event("reset_password", True, user_email=user.email)
        return ServiceResult.ok("Password has been reset successfully")

    @service_operation("Failed to change password")
    async def change_password(self, user_id: str, current_password: str, new_password: str) -> ServiceResult:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if not verify_password(current_password, user.hashed_password):
            raise InvalidPasswordError()

        user.hashed_password = get_password_hash(new_password)
        user.updated_at = datetime.utcnow()
        await self.refresh_tokens.revoke_all(user.id)
        await self.db.commit()

        logger.log_auth_event("change_password", True, user_email=user.email)
        return ServiceResult.ok("Password changed successfully")

    async def get_profile(self, user_id: str) -> ServiceResult:
        result = await self.user_service.get_user_by_id(user_id)
        if result.success:
            result.message = "Profile retrieved successfully"
        return result

    async def update_profile(self, user_id: str, data: Dict[str, Any]) -> ServiceResult:
        """``update_user`` restricted to the profile fields; blanks clear a field"""
        changes = {
            field: (data[field] or None) for field in PROFILE_FIELDS if field in data
        }
        result = await self.user_service.update_user(user_id, changes)
        if result.success:
            result.message = "Profile updated successfully"
        return result
