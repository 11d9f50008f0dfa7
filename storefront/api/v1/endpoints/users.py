"""
Users Management API (admin only)

User identifiers are 24-character hex strings; anything else does not
match these routes.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, status

import storefront.core.types  # noqa: F401  registers the objectid path convertor
from storefront.api.deps import get_user_service, require_admin, validated_body, validated_query
from storefront.api.responses import json_response
from storefront.models.user import User
from storefront.services import UserService

router = APIRouter()


@router.get("/")
async def list_users(
    query: Dict[str, Any] = Depends(validated_query("query.pagination")),
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """Paginated, newest first; ``search`` matches email and full name"""
    return json_response(await service.list_users_page(query))


@router.post("/")
async def create_user(
    data: Dict[str, Any] = Depends(validated_body("user.create")),
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    result = await service.create_new_user(data)
    return json_response(result, status.HTTP_201_CREATED)


@router.get("/{user_id:objectid}")
async def get_user(
    user_id: str,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    return json_response(await service.get_user_by_id(user_id))


@router.put("/{user_id:objectid}")
async def update_user(
    user_id: str,
    data: Dict[str, Any] = Depends(validated_body("user.update")),
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    return json_response(await service.update_user(user_id, data))


@router.delete("/{user_id:objectid}")
async def delete_user(
    user_id: str,
    admin: User = Depends(require_admin),
    service: UserService = Depends(get_user_service)
):
    """Admins cannot delete their own account"""
    return json_response(await service.delete_user(user_id, acting_user_id=admin.id))
