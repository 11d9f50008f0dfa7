"""Query-string payloads for listings"""
from typing import Literal, Optional

from storefront.schemas.common import RequestPayload

SortOrder = Literal["ASC", "DESC", "asc", "desc"]
ProductSortColumn = Literal["created_at", "name", "price", "average_rating", "stock_quantity"]


class PaginationQuery(RequestPayload):
    page: int = 1
    limit: int = 12
    search: Optional[str] = None
    sort_by: Optional[str] = None
    sort_order: Optional[SortOrder] = None


class ProductFilterQuery(RequestPayload):
    page: int = 1
    limit: int = 12
    search: Optional[str] = None
    category_id: Optional[int] = None
    category_slug: Optional[str] = None
    status: Optional[Literal["active", "inactive", "draft"]] = None
    is_featured: Optional[bool] = None
    sort_by: Optional[ProductSortColumn] = None
    sort_order: Optional[SortOrder] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
