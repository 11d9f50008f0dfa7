# Re-export all models for convenient imports
from storefront.models.role import Role
from storefront.models.user import User
from storefront.models.category import Category
from storefront.models.product import Product, ProductStatus
from storefront.models.review import Review
from storefront.models.refresh_token import RefreshToken

__all__ = [
    "Role",
    "User",
    "Category",
    "Product",
    "ProductStatus",
    "Review",
    "RefreshToken",
]
