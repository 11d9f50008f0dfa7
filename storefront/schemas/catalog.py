"""
Catalog schemas: products, categories and reviews
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.schemas.common import RequestPayload

ProductStatusValue = Literal["active", "inactive", "draft"]


# ==================== Product ====================

class ProductCreate(RequestPayload):
    name: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: float
    sale_price: Optional[float] = None
    sku: Optional[str] = None
    stock_quantity: int = 0
    category_id: int
    featured_image: Optional[str] = None
    gallery: Optional[List[str]] = None
    status: ProductStatusValue = "active"
    is_featured: bool = False
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class ProductUpdate(RequestPayload):
    name: Optional[str] = None
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: Optional[float] = None
    sale_price: Optional[float] = None
    sku: Optional[str] = None
    stock_quantity: Optional[int] = None
    category_id: Optional[int] = None
    featured_image: Optional[str] = None
    gallery: Optional[List[str]] = None
    status: Optional[ProductStatusValue] = None
    is_featured: Optional[bool] = None
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None


class ProductBulkChanges(BaseModel):
    status: Optional[ProductStatusValue] = None
    is_featured: Optional[bool] = None
    category_id: Optional[int] = Field(default=None, gt=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)


class ProductBulkUpdate(BaseModel):
    """Same changes applied to every listed product"""
    product_ids: List[int] = Field(min_length=1, max_length=100)
    update_data: ProductBulkChanges


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: float
    sale_price: Optional[float] = None
    final_price: float
    discount_percentage: int
    sku: Optional[str] = None
    stock_quantity: int
    category_id: int
    category_name: Optional[str] = None
    featured_image: Optional[str] = None
    gallery: Optional[List[str]] = None
    status: str
    is_featured: bool
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    view_count: int
    average_rating: float
    created_at: datetime
    updated_at: Optional[datetime] = None


class ProductSearchDocument(BaseModel):
    """Flat product document pushed to the search index"""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: float
    sale_price: Optional[float] = None
    final_price: float
    discount_percentage: int
    category_id: int
    category_name: Optional[str] = None
    category_slug: Optional[str] = None
    is_featured: bool
    view_count: int
    average_rating: float
    created_at: datetime


# ==================== Category ====================

class CategoryCreate(RequestPayload):
    name: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: int = 0
    is_active: bool = True


class CategoryUpdate(RequestPayload):
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    parent_name: Optional[str] = None
    sort_order: int
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


class CategoryTreeNode(BaseModel):
    """Active category with its active descendants nested under ``children``"""
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    sort_order: int
    children: List["CategoryTreeNode"] = Field(default_factory=list)


class CategoryOrder(BaseModel):
    id: int = Field(gt=0)
    sort_order: int = Field(ge=0)


class CategoryReorder(BaseModel):
    categories: List[CategoryOrder] = Field(min_length=1)


# ==================== Review ====================

class ReviewCreate(RequestPayload):
    product_id: int
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None


class ReviewUpdate(RequestPayload):
    rating: Optional[int] = None
    title: Optional[str] = None
    comment: Optional[str] = None


class ReviewResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: int
    user_id: str
    rating: int
    title: Optional[str] = None
    comment: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
