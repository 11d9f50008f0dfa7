from typing import Any, Dict

from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_current_user, get_review_service, validated_body, validated_query
from storefront.api.responses import json_response
from storefront.models.user import User
from storefront.services import ReviewService

router = APIRouter()


@router.get("/product/{product_id:int}")
async def list_reviews(
    product_id: int,
    query: Dict[str, Any] = Depends(validated_query("query.pagination")),
    service: ReviewService = Depends(get_review_service)
):
    """Paginated; sortable by created_at or rating"""
    return json_response(await service.list_reviews(product_id, query))


@router.post("/")
async def create_review(
    data: Dict[str, Any] = Depends(validated_body("review.create")),
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    result = await service.create_review(current_user.id, data)
    return json_response(result, status.HTTP_201_CREATED)


@router.put("/{review_id:int}")
async def update_review(
    review_id: int,
    data: Dict[str, Any] = Depends(validated_body("review.update")),
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    """Only the author may edit a review"""
    return json_response(await service.update_review(review_id, current_user.id, data))


@router.delete("/{review_id:int}")
async def delete_review(
    review_id: int,
    current_user: User = Depends(get_current_user),
    service: ReviewService = Depends(get_review_service)
):
    return json_response(await service.delete_review(review_id, current_user.id))
