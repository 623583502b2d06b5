"""Persistence contract used by the services.

The services never build queries themselves. They talk to a repository
with a small document-store style surface:

    find(filters, sort, skip, limit) -> (items, total)
    find_by_id(id) / create(**fields) / update_by_id(id, fields)
    delete_by_id(id) -> bool / count(filters) -> int

Filters are equality predicates on model columns. Sort keys are column
names, prefixed with "-" for descending order.
"""

import uuid
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.db.models import Base, Task, User

ModelT = TypeVar("ModelT", bound=Base)


class SqlRepository(Generic[ModelT]):
    """Generic async repository over one mapped class."""

    model: type[ModelT]

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Query helpers ───────────────────────────────────

    def _conditions(self, filters: Optional[Mapping[str, Any]]) -> list:
        # None means "not filtered", so optional query params pass straight through.
        return [
            getattr(self.model, field) == value
            for field, value in (filters or {}).items()
            if value is not None
        ]

    def _order_by(self, sort: Sequence[str]) -> list:
        order = []
        for key in sort:
            column = getattr(self.model, key.lstrip("-"))
            order.append(column.desc() if key.startswith("-") else column.asc())
        return order

    # ─── Reads ───────────────────────────────────────────

    async def find(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        sort: Sequence[str] = (),
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[list[ModelT], int]:
        """Return one page of matching rows and the total match count."""
        query = (
            select(self.model)
            .where(*self._conditions(filters))
            .order_by(*self._order_by(sort))
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        items = list(result.scalars().all())
        total = await self.count(filters)
        return items, total

    async def count(self, filters: Optional[Mapping[str, Any]] = None) -> int:
        query = (
            select(func.count())
            .select_from(self.model)
            .where(*self._conditions(filters))
        )
        result = await self.db.execute(query)
        return int(result.scalar_one())

    async def find_by_id(
        self, id_: uuid.UUID, *, for_update: bool = False
    ) -> Optional[ModelT]:
        """Load a row straight from the database, bypassing the identity map.

        for_update takes a row lock on PostgreSQL (SQLite ignores it), held
        until the surrounding transaction commits.
        """
        return await self.db.get(
            self.model, id_, populate_existing=True, with_for_update=for_update
        )

    # ─── Writes ──────────────────────────────────────────

    async def create(self, **fields: Any) -> ModelT:
        obj = self.model(**fields)
        self.db.add(obj)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def update_by_id(
        self, id_: uuid.UUID, fields: Mapping[str, Any]
    ) -> Optional[ModelT]:
        """Apply fields to a freshly locked row. None if the row is gone."""
        obj = await self.find_by_id(id_, for_update=True)
        if obj is None:
            return None
        for field, value in fields.items():
            setattr(obj, field, value)
        await self.db.commit()
        await self.db.refresh(obj)
        return obj

    async def delete_by_id(self, id_: uuid.UUID) -> bool:
        obj = await self.find_by_id(id_, for_update=True)
        if obj is None:
            return False
        await self.db.delete(obj)
        await self.db.commit()
        return True


class UserRepository(SqlRepository[User]):
    model = User

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalars().first()

    async def find_by_ids(self, ids: Iterable[uuid.UUID]) -> dict[uuid.UUID, User]:
        """Batch lookup used to embed owners in admin listings."""
        ids = set(ids)
        if not ids:
            return {}
        result = await self.db.execute(select(User).where(User.id.in_(ids)))
        return {user.id: user for user in result.scalars().all()}


class TaskRepository(SqlRepository[Task]):
    model = Task
