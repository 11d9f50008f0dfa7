from storefront.services.auth_service import AuthService
from storefront.services.category_service import CategoryService
from storefront.services.product_service import ProductService
from storefront.services.review_service import ReviewService
from storefront.services.role_service import RoleService
from storefront.services.upload_service import UploadService
from storefront.services.user_service import UserService

__all__ = [
    "AuthService",
    "CategoryService",
    "ProductService",
    "ReviewService",
    "RoleService",
    "UploadService",
    "UserService",
]
