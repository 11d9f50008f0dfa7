"""
Category Service - category tree with guarded soft delete

Inactive categories are an admin concern: every read takes
``include_inactive`` and only the admin routes pass it through.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from slugify import slugify

from storefront.core.exceptions import (
    CategoryNotFoundError,
    ErrorCode,
    ResourceInUseError,
    ValidationError,
)
from storefront.core.logging_config import get_logger
from storefront.models.category import Category
from storefront.repositories.catalog_repository import CategoryRepository
from storefront.schemas.catalog import CategoryResponse, CategoryTreeNode
from storefront.schemas.common import ServiceResult
from storefront.services.base import BaseService, numeric_id, service_operation
from storefront.utils.pagination import create_paginated_response

logger = get_logger(__name__)

PLAIN_FIELDS = ("description", "image", "sort_order", "is_active")


def _responses(categories: List[Category]) -> List[CategoryResponse]:
    return [CategoryResponse.model_validate(category) for category in categories]


def build_tree(categories: List[Category]) -> List[CategoryTreeNode]:
    """
    Nest a flat, already ordered category list by ``parent_id``.

    Categories whose parent is missing from the list (an inactive parent)
    are dropped along with their subtree.
    """
    nodes = {
        category.id: CategoryTreeNode(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            image=category.image,
            parent_id=category.parent_id,
            sort_order=category.sort_order,
        )
        for category in categories
    }
    roots = []
    for category in categories:
        node = nodes[category.id]
        if category.parent_id is None:
            roots.append(node)
        elif category.parent_id in nodes:
            nodes[category.parent_id].children.append(node)
    return roots


class CategoryService(BaseService):
    """Service for managing categories"""

    def __init__(self, db):
        super().__init__(db)
        self.categories = CategoryRepository(db)

    async def _get_or_raise(self, category_id: int, include_inactive: bool = True) -> Category:
        category = await self.categories.find_by_id(category_id)
        if category is None or not (include_inactive or category.is_active):
            raise CategoryNotFoundError(category_id)
        return category

    async def _unique_slug(self, name: str, exclude_id: Optional[int] = None) -> str:
        base = slugify(name) or "category"
        slug, suffix = base, 1
        while await self.categories.slug_exists(slug, exclude_id=exclude_id):
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    async def _check_parent(self, category: Category, parent: Category) -> None:
        """Refuse a parent that is the category itself or one of its descendants"""
        if parent.id == category.id:
            raise ValidationError("Category cannot be its own parent", field="parent_id")

        seen = {parent.id}
        ancestor_id = parent.parent_id
        while ancestor_id is not None and ancestor_id not in seen:
            if ancestor_id == category.id:
                raise ValidationError(
                    "Category cannot be moved under one of its own subcategories",
                    field="parent_id",
                )
            seen.add(ancestor_id)
            ancestor = await self.categories.find_by_id(ancestor_id)
            ancestor_id = ancestor.parent_id if ancestor else None

    # ==================== READ ====================

    @service_operation("Failed to retrieve categories")
    async def list_categories(self, include_inactive: bool = False) -> ServiceResult:
        categories = await self.categories.list_ordered(include_inactive=include_inactive)
        return ServiceResult.ok("Categories retrieved successfully", _responses(categories))

    @service_operation("Failed to retrieve categories")
    async def list_categories_page(self, query: Dict[str, Any], include_inactive: bool = False) -> ServiceResult:
        """
        Args:
            query: Normalized ``query.pagination`` payload
            include_inactive: Admin view
        """
        conditions = [] if include_inactive else [Category.is_active.is_(True)]
        categories, total = await self.categories.list_page(
            query.get("page", 1),
            query.get("limit", 12),
            *conditions,
            search=query.get("search"),
            sort_by=query.get("sort_by"),
            sort_order=query.get("sort_order"),
        )
        return ServiceResult.ok(
            "Categories retrieved successfully",
            create_paginated_response(_responses(categories), total, query.get("page", 1), query.get("limit", 12)),
        )

    @service_operation("Failed to retrieve category tree")
    async def category_tree(self) -> ServiceResult:
        categories = await self.categories.list_ordered()
        return ServiceResult.ok("Category tree retrieved successfully", build_tree(categories))

    @service_operation("Failed to retrieve root categories")
    async def root_categories(self) -> ServiceResult:
        categories = await self.categories.list_ordered(parent_id=None)
        return ServiceResult.ok("Root categories retrieved successfully", _responses(categories))

    @service_operation("Failed to retrieve subcategories")
    async def child_categories(self, category_id: int, include_inactive: bool = False) -> ServiceResult:
        parent = await self._get_or_raise(category_id, include_inactive=include_inactive)
        children = await self.categories.list_ordered(include_inactive=include_inactive, parent_id=parent.id)
        return ServiceResult.ok("Subcategories retrieved successfully", _responses(children))

    @service_operation("Failed to retrieve category")
    async def get_category(self, identifier: str, include_inactive: bool = False) -> ServiceResult:
        """Look up by numeric id or by slug"""
        category_id = numeric_id(identifier)
        if category_id is not None:
            category = await self.categories.find_by_id(category_id)
        else:
            category = await self.categories.find_by_slug(str(identifier))
        if category is None or not (include_inactive or category.is_active):
            raise CategoryNotFoundError(identifier)
        return ServiceResult.ok("Category retrieved successfully", CategoryResponse.model_validate(category))

    # ==================== WRITE ====================

    @service_operation("Failed to create category")
    async def create_category(self, data: Dict[str, Any]) -> ServiceResult:
        parent = None
        if data.get("parent_id") is not None:
            parent = await self._get_or_raise(data["parent_id"])

        category = Category(
            name=data["name"],
            slug=await self._unique_slug(data["name"]),
            description=data.get("description"),
            image=data.get("image"),
            parent_id=parent.id if parent else None,
            sort_order=data.get("sort_order", 0),
            is_active=data.get("is_active", True),
        )
        category.parent = parent

        await self.categories.add(category)
        await self.db.commit()

        logger.info(f"Created category {category.slug}")
        return ServiceResult.ok("Category created successfully", CategoryResponse.model_validate(category))

    @service_operation("Failed to update category")
    async def update_category(self, category_id: int, data: Dict[str, Any]) -> ServiceResult:
        category = await self._get_or_raise(category_id)
        changes = {field: data[field] for field in PLAIN_FIELDS if field in data}

        if "parent_id" in data:
            if data["parent_id"] == category.id:
                raise ValidationError("Category cannot be its own parent", field="parent_id")
            if data["parent_id"] is None:
                changes["parent_id"] = None
                category.parent = None
            else:
                parent = await self._get_or_raise(data["parent_id"])
                await self._check_parent(category, parent)
                changes["parent_id"] = parent.id
                category.parent = parent

        if "name" in data and data["name"] != category.name:
            changes["name"] = data["name"]
            changes["slug"] = await self._unique_slug(data["name"], exclude_id=category.id)

        if changes:
            changes["updated_at"] = datetime.utcnow()
            await self.categories.update(category, changes)
            await self.db.commit()

        return ServiceResult.ok("Category updated successfully", CategoryResponse.model_validate(category))

    @service_operation("Failed to reorder categories")
    async def reorder_categories(self, items: List[Dict[str, int]]) -> ServiceResult:
        """
        Apply ``[{"id": .., "sort_order": ..}, ...]`` in one transaction.

        Every id must exist; nothing is written otherwise.
        """
        orders = {item["id"]: item["sort_order"] for item in items}
        categories = await self.categories.find_many(list(orders))
        missing = sorted(set(orders) - {category.id for category in categories})
        if missing:
            raise CategoryNotFoundError(missing[0])

        now = datetime.utcnow()
        for category in categories:
            await self.categories.update(category, {"sort_order": orders[category.id], "updated_at": now})
        await self.db.commit()

        logger.info(f"Reordered {len(categories)} categories")
        categories.sort(key=lambda category: (category.sort_order, category.name))
        return ServiceResult.ok("Categories reordered successfully", _responses(categories))

    @service_operation("Failed to delete category")
    async def delete_category(self, category_id: int) -> ServiceResult:
        """Soft delete; refused while active products or active children remain"""
        category = await self._get_or_raise(category_id)

        products = await self.categories.count_active_products(category.id)
        if products:
            raise ResourceInUseError(
                "Cannot delete category that has products",
                code=ErrorCode.CATEGORY_IN_USE.value,
                references=products,
            )

        children = await self.categories.count_active_children(category.id)
        if children:
            raise ResourceInUseError(
                "Cannot delete category that has children",
                code=ErrorCode.CATEGORY_IN_USE.value,
                references=children,
            )

        await self.categories.update(category, {"is_active": False, "updated_at": datetime.utcnow()})
        await self.db.commit()

        logger.info(f"Deactivated category {category.slug}")
        return ServiceResult.ok("Category deleted successfully")
