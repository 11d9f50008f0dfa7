"""
Catalog repositories: categories, products and reviews
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, func, select

from storefront.models.category import Category
from storefront.models.product import Product, ProductStatus
from storefront.models.review import Review
from storefront.repositories.base import SQLAlchemyRepository

ACTIVE = ProductStatus.ACTIVE.value


class CategoryRepository(SQLAlchemyRepository[Category]):
    model = Category
    search_columns = (Category.name, Category.description)
    sort_columns = {
        "sort_order": Category.sort_order,
        "name": Category.name,
        "created_at": Category.created_at,
    }
    default_sort = ("sort_order", "ASC")

    async def list_ordered(self, include_inactive: bool = False, **filters) -> List[Category]:
        if not include_inactive:
            filters["is_active"] = True
        return await self.list_all(order_by=[Category.sort_order, Category.name], **filters)

    async def find_by_slug(self, slug: str) -> Optional[Category]:
        return await self.find_one_by(slug=slug)

    async def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = select(func.count(Category.id)).where(Category.slug == slug)
        if exclude_id is not None:
            query = query.where(Category.id != exclude_id)
        return bool((await self.db.execute(query)).scalar())

    async def count_active_children(self, category_id: int) -> int:
        return await self.count_by(parent_id=category_id, is_active=True)

    async def count_active_products(self, category_id: int) -> int:
        query = select(func.count(Product.id)).where(
            Product.category_id == category_id,
            Product.status == ACTIVE,
        )
        return (await self.db.execute(query)).scalar() or 0


class ProductRepository(SQLAlchemyRepository[Product]):
    model = Product
    search_columns = (Product.name, Product.short_description)
    sort_columns = {
        "created_at": Product.created_at,
        "name": Product.name,
        "price": Product.price,
        "average_rating": Product.average_rating,
        "stock_quantity": Product.stock_quantity,
    }

    async def find_by_slug(self, slug: str) -> Optional[Product]:
        return await self.find_one_by(slug=slug)

    async def find_by_sku(self, sku: str) -> Optional[Product]:
        return await self.find_one_by(sku=sku)

    async def slug_exists(self, slug: str, exclude_id: Optional[int] = None) -> bool:
        query = select(func.count(Product.id)).where(Product.slug == slug)
        if exclude_id is not None:
            query = query.where(Product.id != exclude_id)
        return bool((await self.db.execute(query)).scalar())

    async def list_filtered(self, filters: Dict[str, Any]) -> Tuple[List[Product], int]:
        """
        Filtered, sorted page of products.

        Args:
            filters: Normalized ``query.product_filter`` payload

        Returns:
            Tuple of (products on the page, total matching count)
        """
        conditions = []
        if filters.get("category_id") is not None:
            conditions.append(Product.category_id == filters["category_id"])
        if filters.get("category_slug"):
            conditions.append(
                Product.category_id.in_(
                    select(Category.id).where(Category.slug == filters["category_slug"])
                )
            )
        if filters.get("status"):
            conditions.append(Product.status == filters["status"])
        if filters.get("is_featured") is not None:
            conditions.append(Product.is_featured.is_(filters["is_featured"]))
        if filters.get("min_price") is not None:
            conditions.append(Product.price >= filters["min_price"])
        if filters.get("max_price") is not None:
            conditions.append(Product.price <= filters["max_price"])

        return await self.list_page(
            filters.get("page", 1),
            filters.get("limit", 12),
            *conditions,
            search=filters.get("search"),
            sort_by=filters.get("sort_by"),
            sort_order=filters.get("sort_order"),
        )

    async def list_active(self, *conditions, order_by=None, limit: int = 8) -> List[Product]:
        query = (
            select(Product)
            .where(Product.status == ACTIVE, *conditions)
            .order_by(*(order_by or [Product.created_at.desc(), Product.id.desc()]))
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_low_stock(self, threshold: int) -> List[Product]:
        query = (
            select(Product)
            .where(Product.stock_quantity <= threshold)
            .order_by(Product.stock_quantity.asc(), Product.id.asc())
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def summary(self, low_stock_threshold: int) -> Dict[str, Any]:
        """Counts by status and stock level plus the price range, in one query"""

        def count_where(condition):
            return func.sum(case((condition, 1), else_=0))

        query = select(
            func.count(Product.id).label("total_products"),
            count_where(Product.status == ACTIVE).label("active_products"),
            count_where(Product.status == ProductStatus.INACTIVE.value).label("inactive_products"),
            count_where(Product.status == ProductStatus.DRAFT.value).label("draft_products"),
            count_where(Product.is_featured.is_(True)).label("featured_products"),
            count_where(Product.stock_quantity == 0).label("out_of_stock"),
            count_where(Product.stock_quantity <= low_stock_threshold).label("low_stock"),
            func.avg(Product.price).label("average_price"),
            func.min(Product.price).label("min_price"),
            func.max(Product.price).label("max_price"),
        )
        row = (await self.db.execute(query)).mappings().one()
        return {key: (value if value is not None else 0) for key, value in row.items()}

    async def category_distribution(self) -> List[Dict[str, Any]]:
        """Active products per active category, largest first"""
        product_count = func.count(Product.id)
        query = (
            select(Category.id, Category.name, product_count.label("product_count"))
            .outerjoin(Product, (Product.category_id == Category.id) & (Product.status == ACTIVE))
            .where(Category.is_active.is_(True))
            .group_by(Category.id, Category.name)
            .order_by(product_count.desc(), Category.name)
        )
        return [dict(row) for row in (await self.db.execute(query)).mappings().all()]

    async def increment_views(self, product: Product) -> Product:
        product.view_count = (product.view_count or 0) + 1
        await self.db.flush()
        return product


class ReviewRepository(SQLAlchemyRepository[Review]):
    model = Review
    sort_columns = {
        "created_at": Review.created_at,
        "rating": Review.rating,
    }

    async def page_for_product(self, product_id: int, query: Dict[str, Any]) -> Tuple[List[Review], int]:
        return await self.list_page(
            query.get("page", 1),
            query.get("limit", 12),
            Review.product_id == product_id,
            sort_by=query.get("sort_by"),
            sort_order=query.get("sort_order"),
        )

    async def product_ids_for_user(self, user_id: str) -> List[int]:
        result = await self.db.execute(
            select(Review.product_id).where(Review.user_id == user_id).distinct()
        )
        return list(result.scalars().all())

    async def average_rating(self, product_id: int) -> float:
        query = select(func.avg(Review.rating)).where(Review.product_id == product_id)
        average = (await self.db.execute(query)).scalar()
        return round(float(average), 2) if average is not None else 0.0
