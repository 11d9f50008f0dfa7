"""
Product Service - catalog products

Handles:
- Filtered, paginated listing and lookup by id or slug
- Create/update with category, slug and SKU checks
- Stock adjustments and bulk updates
- Storefront shelves: featured, latest, related
- Admin reports: low stock and catalog statistics
- Flat documents for the external search index
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from slugify import slugify

from storefront.core.config import settings
from storefront.core.exceptions import (
    CategoryNotFoundError,
    DuplicateSkuError,
    ProductNotFoundError,
    ValidationError,
)
from storefront.core.logging_config import get_logger
from storefront.models.category import Category
from storefront.models.product import Product, ProductStatus
from storefront.repositories.catalog_repository import CategoryRepository, ProductRepository
from storefront.schemas.catalog import ProductResponse, ProductSearchDocument
from storefront.schemas.common import ServiceResult
from storefront.services.base import BaseService, numeric_id, service_operation
from storefront.utils.pagination import create_paginated_response
logger = get_logger(__name__)

PLAIN_FIELDS = (
    "description", "short_description", "price", "sale_price", "stock_quantity",
    "featured_image", "gallery", "status", "is_featured", "meta_title", "meta_description",
)
STOCK_OPERATIONS = ("set", "add", "subtract")
BULK_FIELDS = ("status", "is_featured", "category_id", "stock_quantity")


def _is_visible(product: Product) -> bool:
    return product.status == ProductStatus.ACTIVE.value


def _responses(products: List[Product]) -> List[ProductResponse]:
    return [ProductResponse.model_validate(product) for product in products]


class ProductService(BaseService):
    """Service for managing products"""

    def __init__(self, db):
        super().__init__(db)
        self.products = ProductRepository(db)
        self.categories = CategoryRepository(db)

    async def _get_or_raise(self, product_id: int) -> Product:
        product = await self.products.find_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def _active_category(self, category_id: int) -> Category:
        category = await self.categories.find_by_id(category_id)
        if category is None or not category.is_active:
            raise CategoryNotFoundError(category_id)
        return category

    async def _unique_slug(self, name: str, exclude_id: Optional[int] = None) -> str:
        base = slugify(name) or "product"
        slug, suffix = base, 1
        while await self.products.slug_exists(slug, exclude_id=exclude_id):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    async def _check_sku(self, sku: Optional[str], exclude_id: Optional[int] = None) -> None:
        if not sku:
            return
        existing = await self.products.find_by_sku(sku)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateSkuError(sku)

    # ==================== READ ====================

    @service_operation("Failed to get products")
    async def list_products(self, filters: Dict[str, Any], include_hidden: bool = False) -> ServiceResult:
        """
        Args:
            filters: Normalized ``query.product_filter`` payload
            include_hidden: Admin view; otherwise only active products are listed
        """
        if not include_hidden:
            filters = {**filters, "status": ProductStatus.ACTIVE.value}

        products, total = await self.products.list_filtered(filters)
        page = create_paginated_response(
            [ProductResponse.model_validate(product) for product in products],
            total,
            filters.get("page", 1),
            filters.get("limit", 12),
        )
        return ServiceResult.ok("Products retrieved successfully", page)

    @service_operation("Failed to get product detail")
    async def get_product(self, identifier: str, include_hidden: bool = False) -> ServiceResult:
        """
        Look up by numeric id or slug; each lookup counts as a view.

        Draft and inactive products only resolve for the admin view.
        """
        product_id = numeric_id(identifier)
        if product_id is not None:
            product = await self.products.find_by_id(product_id)
        else:
            product = await self.products.find_by_slug(str(identifier))
        if product is None or not (include_hidden or _is_visible(product)):
            raise ProductNotFoundError(identifier)

        await self.products.increment_views(product)
        await self.db.commit()

        return ServiceResult.ok("Product retrieved successfully", ProductResponse.model_validate(product))

    @service_operation("Failed to get featured products")
    async def featured_products(self, limit: int = 8) -> ServiceResult:
        products = await self.products.list_active(Product.is_featured.is_(True), limit=limit)
        return ServiceResult.ok("Featured products retrieved successfully", _responses(products))

    @service_operation("Failed to get latest products")
    async def latest_products(self, limit: int = 8) -> ServiceResult:
        products = await self.products.list_active(limit=limit)
        return ServiceResult.ok("Latest products retrieved successfully", _responses(products))

    @service_operation("Failed to get related products")
    async def related_products(self, product_id: int, limit: int = 4) -> ServiceResult:
        """Other active products of the same category, best rated first"""
        product = await self._get_or_raise(product_id)
        if not _is_visible(product):
            raise ProductNotFoundError(product_id)

        related = await self.products.list_active(
            Product.category_id == product.category_id,
            Product.id != product.id,
            order_by=[Product.average_rating.desc(), Product.created_at.desc()],
            limit=limit,
        )
        return ServiceResult.ok("Related products retrieved successfully", _responses(related))

    @service_operation("Failed to get low stock products")
    async def low_stock_products(self, threshold: Optional[int] = None) -> ServiceResult:
        threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold
        products = await self.products.list_low_stock(threshold)
        return ServiceResult.ok(
            "Low stock products retrieved successfully",
            {"threshold": threshold, "count": len(products), "products": _responses(products)},
        )

    @service_operation("Failed to get product statistics")
    async def product_stats(self) -> ServiceResult:
        stats = await self.products.summary(settings.LOW_STOCK_THRESHOLD)
        stats["average_price"] = round(float(stats["average_price"]), 2)
        recent = await self.products.list_active(limit=10)
        return ServiceResult.ok("Product statistics retrieved successfully", {
            "stats": stats,
            "category_distribution": await self.products.category_distribution(),
            "recent_products": _responses(recent),
        })

    @service_operation("Failed to build search documents")
    async def search_documents(self) -> ServiceResult:
        """Every product as the flat document shape the search index consumes"""
        products = await self.products.list_all(order_by=Product.id)
        return ServiceResult.ok(
            "Search documents generated successfully",
            [ProductSearchDocument.model_validate(product) for product in products],
        )

    # ==================== WRITE ====================

    @service_operation("Failed to create product")
    async def create_product(self, data: Dict[str, Any]) -> ServiceResult:
        category = await self._active_category(data["category_id"])
        await self._check_sku(data.get("sku"))

        product = Product(
            name=data["name"],
            slug=await self._unique_slug(data["name"]),
            sku=data.get("sku"),
            category_id=category.id,
            **{field: data[field] for field in PLAIN_FIELDS if field in data},
        )
        product.category = category

        await self.products.add(product)
        await self.db.commit()

        logger.info(f"Created product {product.slug} in category {category.slug}")
        return ServiceResult.ok("Product created successfully", ProductResponse.model_validate(product))

    @service_operation("Failed to update product")
    async def update_product(self, product_id: int, data: Dict[str, Any]) -> ServiceResult:
        product = await self._get_or_raise(product_id)
        changes = {field: data[field] for field in PLAIN_FIELDS if field in data}

        if "category_id" in data:
            category = await self._active_category(data["category_id"])
            changes["category_id"] = category.id
            product.category = category

        if "sku" in data:
            await self._check_sku(data["sku"], exclude_id=product.id)
            changes["sku"] = data["sku"]

        if "name" in data and data["name"] != product.name:
            changes["name"] = data["name"]
            changes["slug"] = await self._unique_slug(data["name"], exclude_id=product.id)

        if changes:
            changes["updated_at"] = datetime.utcnow()
            await self.products.update(product, changes)
            await self.db.commit()
            logger.info(f"Updated product {product.id}: {sorted(changes)}")

        return ServiceResult.ok("Product updated successfully", ProductResponse.model_validate(product))

    @service_operation("Failed to update stock")
    async def update_stock(self, product_id: int, quantity: int, operation: str = "set") -> ServiceResult:
        if operation not in STOCK_OPERATIONS:
            raise ValidationError(f"Operation must be one of {', '.join(STOCK_OPERATIONS)}", field="operation")

        product = await self._get_or_raise(product_id)
        if operation == "add":
            new_quantity = product.stock_quantity + quantity
        elif operation == "subtract":
            new_quantity = product.stock_quantity - quantity
        else:
            new_quantity = quantity

        if new_quantity < 0:
            raise ValidationError("Stock quantity cannot be negative", field="stock_quantity")

        await self.products.update(product, {"stock_quantity": new_quantity, "updated_at": datetime.utcnow()})
        await self.db.commit()

        return ServiceResult.ok("Stock updated successfully", ProductResponse.model_validate(product))

    @service_operation("Failed to bulk update products")
    async def bulk_update_products(self, product_ids: List[int], changes: Dict[str, Any]) -> ServiceResult:
        """
        Apply ``changes`` to every product in ``product_ids``, all or nothing.

        Args:
            product_ids: Products to change; every id must exist
            changes: Subset of BULK_FIELDS; unset keys are left alone
        """
        changes = {field: changes[field] for field in BULK_FIELDS if changes.get(field) is not None}
        if not changes:
            raise ValidationError("Update data is required", field="update_data")

        ids = list(dict.fromkeys(product_ids))
        products = await self.products.find_many(ids)
        missing = sorted(set(ids) - {product.id for product in products})
        if missing:
            raise ProductNotFoundError(missing[0])

        category = None
        if "category_id" in changes:
            category = await self._active_category(changes["category_id"])

        changes["updated_at"] = datetime.utcnow()
        for product in products:
            await self.products.update(product, changes)
            if category is not None:
                product.category = category
        await self.db.commit()

        logger.info(f"Bulk updated {len(products)} products: {sorted(changes)}")
        return ServiceResult.ok(
            f"{len(products)} products updated successfully",
            {"updated": len(products), "products": _responses(sorted(products, key=lambda p: p.id))},
        )

    @service_operation("Failed to delete product")
    async def delete_product(self, product_id: int) -> ServiceResult:
        product = await self._get_or_raise(product_id)
        await self.products.delete(product)
        await self.db.commit()

        logger.info(f"Deleted product {product_id}")
        return ServiceResult.ok("Product deleted successfully")
