from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, select

from storefront.models.refresh_token import RefreshToken
from storefront.models.role import Role
from storefront.models.user import User
from storefront.repositories.base import SQLAlchemyRepository


class UserRepository(SQLAlchemyRepository[User]):
    model = User
    search_columns = (User.email, User.full_name)
    sort_columns = {
        "created_at": User.created_at,
        "email": User.email,
        "full_name": User.full_name,
        "last_login": User.last_login,
    }

    async def list_newest_first(self) -> List[User]:
        return await self.list_all(order_by=[User.created_at.desc(), User.id.desc()])

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.lower())
        )
        return result.scalar_one_or_none()

    async def email_taken_by_other(self, email: str, user_id: str) -> bool:
        existing = await self.find_by_email(email)
        return existing is not None and existing.id != user_id

    async def find_by_reset_hash(self, token_hash: str) -> Optional[User]:
        return await self.find_one_by(reset_token_hash=token_hash)


class RoleRepository(SQLAlchemyRepository[Role]):
    model = Role

    async def find_by_name(self, name: str) -> Optional[Role]:
        return await self.find_one_by(name=name)

    async def count_active_users(self, role_id: int) -> int:
        query = (
            select(func.count(User.id))
            .where(User.role_id == role_id, User.is_active.is_(True))
        )
        return (await self.db.execute(query)).scalar() or 0


class RefreshTokenRepository(SQLAlchemyRepository[RefreshToken]):
    model = RefreshToken

    async def find_live(self, token_hash: str, user_id: str) -> Optional[RefreshToken]:
        """Stored, unexpired token issued to ``user_id``"""
        result = await self.db.execute(
            select(RefreshToken).where(
                RefreshToken.token_hash == token_hash,
                RefreshToken.user_id == user_id,
                RefreshToken.expires_at > datetime.utcnow(),
            )
        )
        return result.scalar_one_or_none()

    async def revoke(self, token_hash: str, user_id: str) -> int:
        result = await self.db.execute(
            delete(RefreshToken).where(RefreshToken.token_hash == token_hash, RefreshToken.user_id == user_id)
        )
        return result.rowcount or 0

    async def revoke_all(self, user_id: str) -> int:
        result = await self.db.execute(delete(RefreshToken).where(RefreshToken.user_id == user_id))
        return result.rowcount or 0
