"""
Base repository: explicit data-access methods over an AsyncSession.

Services never chain ORM queries themselves; anything beyond these methods
lives on the entity repository that needs it.
"""

import logging
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import delete as sa_delete
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.database import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class SQLAlchemyRepository(Generic[ModelT]):
    """CRUD primitives for one mapped model"""

    model: Type[ModelT]
    # Columns matched by ``search`` and the ones a caller may sort by
    search_columns: Sequence[Any] = ()
    sort_columns: Dict[str, Any] = {}
    default_sort: Tuple[str, str] = ("created_at", "DESC")

    def __init__(self, db: AsyncSession):
        self.db = db

    def _filters(self, filters: Dict[str, Any]):
        return [getattr(self.model, name) == value for name, value in filters.items()]

    async def list_all(self, order_by=None, **filters) -> List[ModelT]:
        """All rows matching ``filters``; ``order_by`` takes one or more column expressions"""
        query = select(self.model).where(*self._filters(filters))
        if order_by is not None:
            if not isinstance(order_by, (list, tuple)):
                order_by = [order_by]
            query = query.order_by(*order_by)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def find_by_id(self, entity_id: Any) -> Optional[ModelT]:
        result = await self.db.execute(select(self.model).where(self.model.id == entity_id))
        return result.scalar_one_or_none()

    async def find_many(self, entity_ids: Sequence[Any]) -> List[ModelT]:
        result = await self.db.execute(select(self.model).where(self.model.id.in_(entity_ids)))
        return list(result.scalars().all())

    async def find_one_by(self, **filters) -> Optional[ModelT]:
        result = await self.db.execute(select(self.model).where(*self._filters(filters)).limit(1))
        return result.scalar_one_or_none()

    async def count_by(self, **filters) -> int:
        query = select(func.count()).select_from(self.model).where(*self._filters(filters))
        return (await self.db.execute(query)).scalar() or 0

    async def add(self, entity: ModelT) -> ModelT:
        """Stage a new row and flush so generated ids are available"""
        self.db.add(entity)
        await self.db.flush()
        return entity

    async def update(self, entity: ModelT, changes: Dict[str, Any]) -> ModelT:
        """Apply ``changes`` attribute by attribute and flush"""
        for name, value in changes.items():
            setattr(entity, name, value)
        await self.db.flush()
        return entity

    async def delete(self, entity: ModelT) -> None:
        await self.db.execute(sa_delete(self.model).where(self.model.id == entity.id))
        await self.db.flush()

    def _ordering(self, sort_by: Optional[str], sort_order: Optional[str]) -> list:
        """Unknown sort keys fall back to ``default_sort``"""
        if sort_by not in self.sort_columns:
            sort_by, sort_order = self.default_sort[0], sort_order or self.default_sort[1]
        column = self.sort_columns[sort_by] if sort_by in self.sort_columns else getattr(self.model, sort_by)
        descending = (sort_order or "DESC").upper() == "DESC"
        return [column.desc() if descending else column.asc(), self.model.id.desc()]

    async def list_page(
        self,
        page: int,
        limit: int,
        *conditions,
        search: Optional[str] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> Tuple[List[ModelT], int]:
        """
        One page of rows matching ``conditions``.

        Returns:
            Tuple of (rows on the page, total matching count)
        """
        if search and self.search_columns:
            term = f"%{search}%"
            conditions = (*conditions, or_(*(column.ilike(term) for column in self.search_columns)))

        count_query = select(func.count()).select_from(self.model).where(*conditions)
        total = (await self.db.execute(count_query)).scalar() or 0

        query = (
            select(self.model)
            .where(*conditions)
            .order_by(*self._ordering(sort_by, sort_order))
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total
