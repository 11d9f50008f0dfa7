"""
Authentication API

Registration, login, token refresh and logout, password recovery and the
signed-in user's profile. Credential endpoints are rate limited per client
address.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status

from storefront.api.deps import get_auth_service, get_current_user, validated_body
from storefront.api.responses import json_response
from storefront.core.config import settings
from storefront.core.rate_limiter import limiter
from storefront.models.user import User
from storefront.services import AuthService

router = APIRouter()


@router.post("/register")
@limiter.limit(settings.REGISTER_RATE_LIMIT)
async def register(
    request: Request,
    data: Dict[str, Any] = Depends(validated_body("user.register")),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.register(data)
    return json_response(result, status.HTTP_201_CREATED)


@router.post("/login")
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    data: Dict[str, Any] = Depends(validated_body("user.login")),
    service: AuthService = Depends(get_auth_service)
):
    """Exchange email and password for an access and a refresh token"""
    result = await service.login(data["email"], data["password"])
    return json_response(result)


@router.post("/refresh")
async def refresh_token(
    data: Dict[str, Any] = Depends(validated_body("auth.refresh")),
    service: AuthService = Depends(get_auth_service)
):
    return json_response(await service.refresh_access_token(data["refresh_token"]))


@router.post("/logout")
async def logout(
    data: Dict[str, Any] = Depends(validated_body("auth.logout")),
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    """Revoke the given refresh token, or all of them when the body has none"""
    return json_response(await service.logout(current_user.id, data.get("refresh_token")))


@router.post("/forgot-password")
@limiter.limit(settings.PASSWORD_RESET_RATE_LIMIT)
async def forgot_password(
    request: Request,
    data: Dict[str, Any] = Depends(validated_body("user.forgot_password")),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.forgot_password(data["email"])
    return json_response(result)


@router.post("/reset-password")
async def reset_password(
    data: Dict[str, Any] = Depends(validated_body("user.reset_password")),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.reset_password(data["token"], data["password"])
    return json_response(result)


@router.get("/profile")
async def get_profile(
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.get_profile(current_user.id)
    return json_response(result)


@router.put("/profile")
async def update_profile(
    data: Dict[str, Any] = Depends(validated_body("user.update_profile")),
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.update_profile(current_user.id, data)
    return json_response(result)


@router.put("/change-password")
async def change_password(
    data: Dict[str, Any] = Depends(validated_body("user.change_password")),
    current_user: User = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service)
):
    result = await service.change_password(current_user.id, data["current_password"], data["new_password"])
    return json_response(result)
