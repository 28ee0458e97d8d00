from __future__ import annotations

from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar

from sqlalchemy import Executable, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository:
    """
    Base class for repositories providing common helpers.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute a SQLAlchemy statement."""
        return await self.session.execute(statement, params or {})

    async def scalars(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return scalars."""
        result = await self.execute(statement, params)
        return result.scalars()

    async def scalar_one_or_none(self, statement: Executable, params: Optional[dict[str, Any]] = None):
        """Execute and return a single scalar or None."""
        result = await self.execute(statement, params)
        return result.scalar_one_or_none()

    async def commit(self) -> None:
        """Commit current transaction."""
        await self.session.commit()

    async def flush(self) -> None:
        """Flush pending changes without committing."""
        await self.session.flush()

    async def add_all(self, entities: Iterable[Any]) -> None:
        """Add multiple entities to session."""
        self.session.add_all(list(entities))

    async def add(self, entity: Any) -> None:
        """Add a single entity to session."""
        self.session.add(entity)


class CrudRepository(BaseRepository, Generic[ModelT]):
    """
    Repository with get/list/create/update/delete for a single mapped class.

    Subclasses set `model` and may override `default_order` or add
    domain-specific queries. Mutating helpers commit unless `commit=False`
    is passed, letting services group several writes in one transaction.
    """

    model: Type[ModelT]
    default_order: Any = None

    def _ordering(self):
        if self.default_order is not None:
            return self.default_order
        return self.model.id.desc()

    async def get(self, entity_id: int) -> Optional[ModelT]:
        # populate_existing reloads attributes (and selectin collections) of
        # instances already present in the identity map.
        stmt = (
            select(self.model)
            .where(self.model.id == entity_id)
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)

    async def list(self, *, limit: int = 100, offset: int = 0, filters: Iterable[Any] = ()) -> List[ModelT]:
        stmt = select(self.model)
        for clause in filters:
            stmt = stmt.where(clause)
        stmt = stmt.order_by(self._ordering()).offset(offset).limit(limit)
        res = await self.scalars(stmt)
        return list(res)

    async def count(self, *, filters: Iterable[Any] = ()) -> int:
        stmt = select(func.count(self.model.id))
        for clause in filters:
            stmt = stmt.where(clause)
        result = await self.execute(stmt)
        return int(result.scalar_one())

    async def create(self, values: dict[str, Any], *, commit: bool = True) -> ModelT:
        entity = self.model(**values)
        await self.add(entity)
        await self.flush()
        if commit:
            await self.commit()
            return (await self.get(entity.id))  # type: ignore
        return entity

    async def update(self, entity: ModelT, values: dict[str, Any], *, commit: bool = True) -> ModelT:
        for key, value in values.items():
            setattr(entity, key, value)
        await self.flush()
        if commit:
            await self.commit()
            return (await self.get(entity.id))  # type: ignore
        return entity

    async def delete(self, entity: ModelT, *, commit: bool = True) -> None:
        await self.session.delete(entity)
        await self.flush()
        if commit:
            await self.commit()
