"""
Categories API

Reads are public; writes require the admin role. Delete is a soft delete.
Inactive categories are only visible to admins.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from storefront.api.deps import (
    get_category_service,
    get_optional_user,
    is_admin,
    require_admin,
    validated_body,
    validated_query,
)
from storefront.api.responses import json_response
from storefront.core.exceptions import AuthorizationError
from storefront.models.user import User
from storefront.schemas.catalog import CategoryReorder
from storefront.services import CategoryService

router = APIRouter()


def _inactive_allowed(include_inactive: bool, user: Optional[User]) -> bool:
    if include_inactive and not is_admin(user):
        raise AuthorizationError("Admin access required to list inactive categories")
    return include_inactive


@router.get("/")
async def list_categories(
    query: Dict[str, Any] = Depends(validated_query("query.pagination")),
    include_inactive: bool = Query(False),
    user: Optional[User] = Depends(get_optional_user),
    service: CategoryService = Depends(get_category_service)
):
    """Paginated, ``sort_order`` first; ``search`` matches name and description"""
    result = await service.list_categories_page(query, include_inactive=_inactive_allowed(include_inactive, user))
    return json_response(result)


@router.get("/tree")
async def category_tree(service: CategoryService = Depends(get_category_service)):
    """Active categories nested by parent"""
    return json_response(await service.category_tree())


@router.get("/roots")
async def root_categories(service: CategoryService = Depends(get_category_service)):
    return json_response(await service.root_categories())


@router.put("/reorder")
async def reorder_categories(
    payload: CategoryReorder = Body(...),
    admin: User = Depends(require_admin),
    service: CategoryService = Depends(get_category_service)
):
    items = [item.model_dump() for item in payload.categories]
    return json_response(await service.reorder_categories(items))


@router.get("/{category_id:int}/children")
async def child_categories(
    category_id: int,
    include_inactive: bool = Query(False),
    user: Optional[User] = Depends(get_optional_user),
    service: CategoryService = Depends(get_category_service)
):
    result = await service.child_categories(
        category_id, include_inactive=_inactive_allowed(include_inactive, user)
    )
    return json_response(result)


@router.get("/{identifier}")
async def get_category(
    identifier: str,
    user: Optional[User] = Depends(get_optional_user),
    service: CategoryService = Depends(get_category_service)
):
    """Look up by id or slug"""
    return json_response(await service.get_category(identifier, include_inactive=is_admin(user)))


@router.post("/")
async def create_category(
    data: Dict[str, Any] = Depends(validated_body("category.create")),
    admin: User = Depends(require_admin),
    service: CategoryService = Depends(get_category_service)
):
    return json_response(await service.create_category(data), status.HTTP_201_CREATED)


@router.put("/{category_id:int}")
async def update_category(
    category_id: int,
    data: Dict[str, Any] = Depends(validated_body("category.update")),
    admin: User = Depends(require_admin),
    service: CategoryService = Depends(get_category_service)
):
    return json_response(await service.update_category(category_id, data))


@router.delete("/{category_id:int}")
async def delete_category(
    category_id: int,
    admin: User = Depends(require_admin),
    service: CategoryService = Depends(get_category_service)
):
    return json_response(await service.delete_category(category_id))
