from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_role_service, require_admin, validated_body
from storefront.api.responses import json_response
from storefront.models.user import User
from storefront.services import RoleService

router = APIRouter()


@router.get("/")
async def list_roles(
    admin: User = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    return json_response(await service.list_roles())


@router.get("/{role_id:int}")
async def get_role(
    role_id: int,
    admin: User = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    return json_response(await service.get_role(role_id))


@router.post("/")
async def create_role(
    data: Dict[str, Any] = Depends(validated_body("role.create")),
    admin: User = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    return json_response(await service.create_role(data), status.HTTP_201_CREATED)


@router.put("/{role_id:int}")
async def update_role(
    role_id: int,
    data: Dict[str, Any] = Depends(validated_body("role.update")),
    admin: User = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    return json_response(await service.update_role(role_id, data))


@router.delete("/{role_id:int}")
async def delete_role(
    role_id: int,
    admin: User = Depends(require_admin),
    service: RoleService = Depends(get_role_service)
):
    """Refused with ROLE_IN_USE while active users hold the role"""
    return json_response(await service.delete_role(role_id))
