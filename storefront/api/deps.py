"""
Request dependencies: services, validated payloads and authentication
"""

import json
from typing import Any, Callable, Dict, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.exceptions import AuthenticationError, AuthorizationError, RequestValidationFailed
from storefront.core.logging_config import set_user_id
from storefront.core.security import decode_token
from storefront.core.types import is_object_id
from storefront.models.user import User
from storefront.repositories.user_repository import UserRepository
from storefront.services import (
    AuthService,
    CategoryService,
    ProductService,
    ReviewService,
    RoleService,
    UploadService,
    UserService,
)
from storefront.validation import validate_or_raise

security = HTTPBearer(auto_error=False)


# ==================== Services ====================

def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_auth_service(db: AsyncSession = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_role_service(db: AsyncSession = Depends(get_db)) -> RoleService:
    return RoleService(db)


def get_category_service(db: AsyncSession = Depends(get_db)) -> CategoryService:
    return CategoryService(db)


def get_product_service(db: AsyncSession = Depends(get_db)) -> ProductService:
    return ProductService(db)


def get_review_service(db: AsyncSession = Depends(get_db)) -> ReviewService:
    return ReviewService(db)


def get_upload_service() -> UploadService:
    return UploadService()


# ==================== Validated payloads ====================

def validated_body(rule_set: str) -> Callable:
    """Dependency returning the normalized JSON body for ``rule_set``"""

    async def dependency(request: Request) -> Dict[str, Any]:
        raw = await request.body()
        try:
            payload = json.loads(raw) if raw else {}
        except ValueError:
            raise RequestValidationFailed(
                [{"field": "", "message": "Request body must be valid JSON", "value": None}],
                rule_set=rule_set,
            )
        return validate_or_raise(rule_set, payload)

    return dependency


def validated_query(rule_set: str) -> Callable:
    """Dependency returning the normalized query string for ``rule_set``"""

    async def dependency(request: Request) -> Dict[str, Any]:
        return validate_or_raise(rule_set, dict(request.query_params))

    return dependency


# ==================== Authentication ====================

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_token(credentials.credentials)
    if payload.get("type") != "access":
        raise AuthenticationError("Invalid token type")

    user_id = payload.get("sub")
    if not is_object_id(user_id):
        raise AuthenticationError("Invalid token payload")

    user = await UserRepository(db).find_by_id(user_id)
    if user is None:
        raise AuthenticationError("User not found")
    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    set_user_id(user.id)
    return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Require the configured admin role"""
    if not is_admin(current_user):
        raise AuthorizationError("Admin access required")
    return current_user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Signed-in user, or None for anonymous callers; a bad token still fails"""
    if credentials is None:
        return None
    return await get_current_user(credentials, db)


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role_name == settings.ADMIN_ROLE_NAME
