"""
User Service - CRUD facade over users

Handles:
- User creation with best-effort email uniqueness and default role
- Listing, lookup, partial update and hard delete
- Product ratings stay current when a deleted user's reviews cascade away

The email check before insert is advisory only: two concurrent creates can
both pass it. The unique index on users.email is the real guarantee, and a
lost race surfaces as DUPLICATE_EMAIL through the integrity error path.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from storefront.core.config import settings
from storefront.core.exceptions import (
    DuplicateEmailError,
    RoleNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from storefront.core.logging_config import get_logger
from storefront.core.security import get_password_hash
from storefront.models.role import Role
from storefront.models.user import User
from storefront.repositories.catalog_repository import ProductRepository, ReviewRepository
from storefront.repositories.user_repository import RoleRepository, UserRepository
from storefront.schemas.common import ServiceResult
from storefront.schemas.user import UserResponse
from storefront.services.base import BaseService, service_operation
from storefront.utils.pagination import create_paginated_response

logger = get_logger(__name__)

# Columns a caller may set directly; email, password and role are handled separately
PLAIN_FIELDS = ("full_name", "phone", "address", "is_active")


class UserService(BaseService):
    """Service for managing user records"""

    def __init__(self, db):
        super().__init__(db)
        self.users = UserRepository(db)
        self.roles = RoleRepository(db)
        self.products = ProductRepository(db)
        self.reviews = ReviewRepository(db)

    async def _resolve_role(self, role_id: Optional[int]) -> Role:
        if role_id is not None:
            role = await self.roles.find_by_id(role_id)
            if role is None:
                raise RoleNotFoundError(role_id)
            return role

        role = await self.roles.find_by_name(settings.DEFAULT_ROLE_NAME)
        if role is None:
            # Seeded at startup; recreate if someone removed it
            role = await self.roles.add(Role(name=settings.DEFAULT_ROLE_NAME, description="Default role"))
            logger.warning(f"Default role '{settings.DEFAULT_ROLE_NAME}' was missing and has been recreated")
        return role

    async def _get_or_raise(self, user_id: str) -> User:
        user = await self.users.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    # ==================== CRUD ====================

    @service_operation("Failed to create user")
    async def create_new_user(self, data: Dict[str, Any]) -> ServiceResult:
        """
        Create a user from a normalized ``user.register``/``user.create`` payload.

        Returns:
            ServiceResult with the created user, or DUPLICATE_EMAIL without writing
        """
        email = data["email"].strip().lower()
        if await self.users.find_by_email(email):
            raise DuplicateEmailError(email)

        role = await self._resolve_role(data.get("role_id"))

        user = User(
            email=email,
            hashed_password=get_password_hash(data["password"]),
            full_name=data["full_name"],
            phone=data.get("phone"),
            address=data.get("address"),
            role_id=role.id,
            is_active=data.get("is_active", True),
            email_verified=False,
        )
        user.role = role

        await self.users.add(user)
        await self.db.commit()

        logger.info(f"Created user {user.id} with role {role.name}")
        return ServiceResult.ok("User created successfully", UserResponse.model_validate(user))

    @service_operation("Failed to retrieve users")
    async def get_all_users(self) -> ServiceResult:
        users = await self.users.list_newest_first()
        return ServiceResult.ok(
            "Users retrieved successfully",
            [UserResponse.model_validate(user) for user in users],
        )

    @service_operation("Failed to retrieve users")
    async def list_users_page(self, query: Dict[str, Any]) -> ServiceResult:
        """
        Args:
            query: Normalized ``query.pagination`` payload; ``search`` matches email and name
        """
        users, total = await self.users.list_page(
            query.get("page", 1),
            query.get("limit", 12),
            search=query.get("search"),
            sort_by=query.get("sort_by"),
            sort_order=query.get("sort_order"),
        )
        return ServiceResult.ok(
            "Users retrieved successfully",
            create_paginated_response(
                [UserResponse.model_validate(user) for user in users],
                total,
                query.get("page", 1),
                query.get("limit", 12),
            ),
        )

    @service_operation("Failed to retrieve user")
    async def get_user_by_id(self, user_id: str) -> ServiceResult:
        user = await self._get_or_raise(user_id)
        return ServiceResult.ok("User retrieved successfully", UserResponse.model_validate(user))

    @service_operation("Failed to update user")
    async def update_user(self, user_id: str, data: Dict[str, Any]) -> ServiceResult:
        """Apply only the supplied fields; returns the post-update record"""
        user = await self._get_or_raise(user_id)

        changes: Dict[str, Any] = {
            field: data[field] for field in PLAIN_FIELDS if field in data
        }

        if "email" in data:
            email = data["email"].strip().lower()
            if await self.users.email_taken_by_other(email, user.id):
                raise DuplicateEmailError(email)
            changes["email"] = email

        if "password" in data:
            changes["hashed_password"] = get_password_hash(data["password"])

        if "role_id" in data:
            role = await self._resolve_role(data["role_id"])
            changes["role_id"] = role.id
            user.role = role

        if changes:
            changes["updated_at"] = datetime.utcnow()
            await self.users.update(user, changes)
            await self.db.commit()
            logger.info(f"Updated user {user.id}: {sorted(changes)}")

        return ServiceResult.ok("User updated successfully", UserResponse.model_validate(user))

    @service_operation("Failed to delete user")
    async def delete_user(self, user_id: str, acting_user_id: Optional[str] = None) -> ServiceResult:
        """Hard delete; the envelope carries no data"""
        if acting_user_id is not None and acting_user_id == user_id:
            raise ValidationError("Cannot delete your own account", field="id")

        user = await self._get_or_raise(user_id)
        # The user's reviews go with the row; their products need a fresh average
        reviewed = await self.reviews.product_ids_for_user(user.id)

        await self.users.delete(user)
        for product_id in reviewed:
            product = await self.products.find_by_id(product_id)
            if product is not None:
                product.average_rating = await self.reviews.average_rating(product_id)
        await self.db.commit()

        logger.info(f"Deleted user {user_id}")
        return ServiceResult.ok("User deleted successfully")
