"""
Role Service - roles and the guarded delete
"""

from datetime import datetime
from typing import Any, Dict

from storefront.core.exceptions import (
    DuplicateRoleError,
    ErrorCode,
    ResourceInUseError,
    RoleNotFoundError,
)
from storefront.core.logging_config import get_logger
from storefront.models.role import Role
from storefront.repositories.user_repository import RoleRepository
from storefront.schemas.common import ServiceResult
from storefront.schemas.role import RoleResponse
from storefront.services.base import BaseService, service_operation

logger = get_logger(__name__)


class RoleService(BaseService):
    """Service for managing roles"""

    def __init__(self, db):
        super().__init__(db)
        self.roles = RoleRepository(db)

    async def _get_or_raise(self, role_id: int) -> Role:
        role = await self.roles.find_by_id(role_id)
        if role is None:
            raise RoleNotFoundError(role_id)
        return role

    @service_operation("Failed to retrieve roles")
    async def list_roles(self) -> ServiceResult:
        roles = await self.roles.list_all(order_by=Role.name)
        return ServiceResult.ok(
            "Roles retrieved successfully",
            [RoleResponse.model_validate(role) for role in roles],
        )

    @service_operation("Failed to retrieve role")
    async def get_role(self, role_id: int) -> ServiceResult:
        role = await self._get_or_raise(role_id)
        return ServiceResult.ok("Role retrieved successfully", RoleResponse.model_validate(role))

    @service_operation("Failed to create role")
    async def create_role(self, data: Dict[str, Any]) -> ServiceResult:
        if await self.roles.find_by_name(data["name"]):
            raise DuplicateRoleError(data["name"])

        role = await self.roles.add(Role(name=data["name"], description=data.get("description")))
        await self.db.commit()

        logger.info(f"Created role {role.name}")
        return ServiceResult.ok("Role created successfully", RoleResponse.model_validate(role))

    @service_operation("Failed to update role")
    async def update_role(self, role_id: int, data: Dict[str, Any]) -> ServiceResult:
        role = await self._get_or_raise(role_id)

        if "name" in data and data["name"] != role.name:
            existing = await self.roles.find_by_name(data["name"])
            if existing is not None and existing.id != role.id:
                raise DuplicateRoleError(data["name"])

        changes = {field: data[field] for field in ("name", "description") if field in data}
        if changes:
            changes["updated_at"] = datetime.utcnow()
            await self.roles.update(role, changes)
            await self.db.commit()

        return ServiceResult.ok("Role updated successfully", RoleResponse.model_validate(role))

    @service_operation("Failed to delete role")
    async def delete_role(self, role_id: int) -> ServiceResult:
        """Refuse while any active user still holds the role; the role is left intact"""
        role = await self._get_or_raise(role_id)

        in_use = await self.roles.count_active_users(role.id)
        if in_use:
            raise ResourceInUseError(
                "Cannot delete role that is being used by users",
                code=ErrorCode.ROLE_IN_USE.value,
                references=in_use,
            )

        await self.roles.delete(role)
        await self.db.commit()

        logger.info(f"Deleted role {role.name}")
        return ServiceResult.ok("Role deleted successfully")
