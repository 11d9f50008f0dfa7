"""
Review Service - product reviews and the product's average rating
"""

from datetime import datetime
from typing import Any, Dict, Optional

from storefront.core.exceptions import AuthorizationError, ProductNotFoundError, ReviewNotFoundError
from storefront.core.logging_config import get_logger
from storefront.models.product import Product
from storefront.models.review import Review
from storefront.repositories.catalog_repository import ProductRepository, ReviewRepository
from storefront.schemas.catalog import ReviewResponse
from storefront.schemas.common import ServiceResult
from storefront.services.base import BaseService, service_operation
from storefront.utils.pagination import create_paginated_response

logger = get_logger(__name__)


class ReviewService(BaseService):
    """Service for managing reviews; every change refreshes the product rating"""

    def __init__(self, db):
        super().__init__(db)
        self.reviews = ReviewRepository(db)
        self.products = ProductRepository(db)

    async def _product_or_raise(self, product_id: int) -> Product:
        product = await self.products.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def _own_review_or_raise(self, review_id: int, user_id: str) -> Review:
        review = await self.reviews.find_by_id(review_id)
        if review is None:
            raise ReviewNotFoundError(review_id)
        if review.user_id != user_id:
            raise AuthorizationError("Not authorized to modify this review")
        return review

    async def _refresh_rating(self, product_id: int) -> None:
        product = await self._product_or_raise(product_id)
        product.average_rating = await self.reviews.average_rating(product_id)

    @service_operation("Failed to get reviews")
    async def list_reviews(self, product_id: int, query: Optional[Dict[str, Any]] = None) -> ServiceResult:
        """Paginated reviews of one product, newest first unless ``query`` sorts otherwise"""
        query = query or {}
        await self._product_or_raise(product_id)
        reviews, total = await self.reviews.page_for_product(product_id, query)
        return ServiceResult.ok(
            "Reviews retrieved successfully",
            create_paginated_response(
                [ReviewResponse.model_validate(review) for review in reviews],
                total,
                query.get("page", 1),
                query.get("limit", 12),
            ),
        )

    @service_operation("Failed to create review")
    async def create_review(self, user_id: str, data: Dict[str, Any]) -> ServiceResult:
        product = await self._product_or_raise(data["product_id"])

        review = await self.reviews.add(Review(
            product_id=product.id,
            user_id=user_id,
            rating=data["rating"],
            title=data.get("title"),
            comment=data.get("comment"),
        ))
        await self._refresh_rating(product.id)
        await self.db.commit()

        logger.info(f"User {user_id} reviewed product {product.id} ({review.rating}/5)")
        return ServiceResult.ok("Review created successfully", ReviewResponse.model_validate(review))

    @service_operation("Failed to update review")
    async def update_review(self, review_id: int, user_id: str, data: Dict[str, Any]) -> ServiceResult:
        review = await self._own_review_or_raise(review_id, user_id)

        changes = {field: data[field] for field in ("rating", "title", "comment") if field in data}
        if changes:
            changes["updated_at"] = datetime.utcnow()
            await self.reviews.update(review, changes)
            await self._refresh_rating(review.product_id)
            await self.db.commit()

        return ServiceResult.ok("Review updated successfully", ReviewResponse.model_validate(review))

    @service_operation("Failed to delete review")
    async def delete_review(self, review_id: int, user_id: str) -> ServiceResult:
        review = await self._own_review_or_raise(review_id, user_id)
        product_id = review.product_id

        await self.reviews.delete(review)
        await self._refresh_rating(product_id)
        await self.db.commit()

        return ServiceResult.ok("Review deleted successfully")
