from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from storefront.schemas.common import RequestPayload


# ==================== Request Payloads ====================

class UserRegister(RequestPayload):
    email: str
    password: str
    full_name: str
    phone: Optional[str] = None
    address: Optional[str] = None


class UserCreate(UserRegister):
    """Administrative create: registration fields plus an explicit role"""
    role_id: Optional[int] = None


class UserUpdate(RequestPayload):
    """Partial update - every field optional"""
    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    role_id: Optional[int] = None
    is_active: Optional[bool] = None


class UserLogin(RequestPayload):
    email: str
    password: str


class ForgotPassword(RequestPayload):
    email: str


class ResetPassword(RequestPayload):
    token: str
    password: str


class RefreshRequest(RequestPayload):
    refresh_token: str


class LogoutRequest(RequestPayload):
    refresh_token: Optional[str] = None


class UpdateProfile(RequestPayload):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class ChangePassword(RequestPayload):
    current_password: str
    new_password: str
    confirm_password: str


# ==================== Response Schemas ====================

class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    role_id: Optional[int] = None
    role_name: Optional[str] = None
    is_active: bool
    email_verified: bool
    created_at: datetime
    updated_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    user: UserResponse


class RefreshedToken(BaseModel):
    access_token: str
    token_type: str = "bearer"


class PasswordResetIssued(BaseModel):
    """Reset token handed to the delivery channel (email sender, admin tooling)"""
    reset_token: Optional[str] = None
    expires_at: Optional[datetime] = None
