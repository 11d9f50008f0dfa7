from storefront.repositories.base import SQLAlchemyRepository
from storefront.repositories.catalog_repository import (
    CategoryRepository,
    ProductRepository,
    ReviewRepository,
)
from storefront.repositories.user_repository import RefreshTokenRepository, RoleRepository, UserRepository

__all__ = [
    "SQLAlchemyRepository",
    "UserRepository",
    "RoleRepository",
    "RefreshTokenRepository",
    "CategoryRepository",
    "ProductRepository",
    "ReviewRepository",
]
