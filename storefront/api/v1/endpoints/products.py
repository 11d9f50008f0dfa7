"""
Products API

Listing accepts the product filter query (page, limit, search, category,
status, featured flag, price range, sort). Anonymous and customer callers
only ever see active products. Writes and stock reports require the admin role.
"""
from typing import Any, Dict, Literal, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from storefront.api.deps import (
    get_optional_user,
    get_product_service,
    is_admin,
    require_admin,
    validated_body,
    validated_query,
)
from storefront.api.responses import json_response
from storefront.models.user import User
from storefront.schemas.catalog import ProductBulkUpdate
from storefront.services import ProductService

router = APIRouter()


@router.get("/")
async def list_products(
    filters: Dict[str, Any] = Depends(validated_query("query.product_filter")),
    user: Optional[User] = Depends(get_optional_user),
    service: ProductService = Depends(get_product_service)
):
    """``status`` is honoured for admins; everyone else gets active products"""
    return json_response(await service.list_products(filters, include_hidden=is_admin(user)))


@router.get("/featured")
async def featured_products(
    limit: int = Query(8, ge=1, le=50),
    service: ProductService = Depends(get_product_service)
):
    return json_response(await service.featured_products(limit))


@router.get("/latest")
async def latest_products(
    limit: int = Query(8, ge=1, le=50),
    service: ProductService = Depends(get_product_service)
):
    return json_response(await service.latest_products(limit))


@router.get("/low-stock")
async def low_stock_products(
    threshold: Optional[int] = Query(None, ge=0),
    admin: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    """Products at or below ``threshold`` units (LOW_STOCK_THRESHOLD by default)"""
    return json_response(await service.low_stock_products(threshold))


@router.get("/stats")
async def product_stats(
    admin: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    return json_response(await service.product_stats())


@router.get("/search-documents")
async def search_documents(
    admin: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    """Flat documents for (re)building the external search index"""
    return json_response(await service.search_documents())


@router.get("/{product_id:int}/related")
async def related_products(
    product_id: int,
    limit: int = Query(4, ge=1, le=20),
    service: ProductService = Depends(get_product_service)
):
    return json_response(await service.related_products(product_id, limit))


@router.get("/{identifier}")
async def get_product(
    identifier: str,
    user: Optional[User] = Depends(get_optional_user),
    service: ProductService = Depends(get_product_service)
):
    """Look up by id or slug"""
    return json_response(await service.get_product(identifier, include_hidden=is_admin(user)))


@router.post("/")
async def create_product(
    data: Dict[str, Any] = Depends(validated_body("product.create")),
    admin: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    return json_response(await service.create_product(data), status.HTTP_201_CREATED)


@router.put("/bulk")
async def bulk_update_products(
    payload: ProductBulkUpdate = Body(...),
    admin: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    """Set status, featured flag, category or stock on many products at once"""
    changes = payload.update_data.model_dump(exclude_none=True)
    return json_response(await service.bulk_update_products(payload.product_ids, changes))


@router.put("/{product_id:int}")
async def update_product(
    product_id: int,
    data: Dict[str, Any] = Depends(validated_body("product.update")),
    admin: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    return json_response(await service.update_product(product_id, data))


@router.patch("/{product_id:int}/stock")
async def update_stock(
    product_id: int,
    quantity: int = Body(..., embed=True, ge=0),
    operation: Literal["set", "add", "subtract"] = Body("set", embed=True),
    admin: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    return json_response(await service.update_stock(product_id, quantity, operation))


@router.delete("/{product_id:int}")
async def delete_product(
    product_id: int,
    admin: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service)
):
    return json_response(await service.delete_product(product_id))
