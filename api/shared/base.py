"""Base classes and common patterns for the application with repository pattern."""
from abc import ABC
from typing import Any, Dict, Generic, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from api.shared.entities.base import BaseEntity
from api.shared.exceptions import ConflictError, DatabaseError

T = TypeVar("T", bound=BaseEntity)


class BaseRepository(ABC, Generic[T]):
    """Base repository with CRUD over natural (possibly composite) keys.

    Subclasses set `model`, `key_fields` (primary key attribute names in
    order) and `order_by` (default list ordering).
    """

    model: Type[T]
    key_fields: Sequence[str]
    order_by: Sequence[str] = ()

    def __init__(self, session: AsyncSession):
        self.session = session

    def _key_clause(self, key: Dict[str, Any]) -> list:
        missing = [name for name in self.key_fields if name not in key]
        if missing:
            raise ValueError(f"{self.model.__name__} key is missing {missing}")
        return [getattr(self.model, name) == key[name] for name in self.key_fields]

    def _ordering(self, order_by: Optional[Sequence[str]]) -> list:
        return [getattr(self.model, name).asc() for name in (order_by or self.order_by)]

    def key_of(self, entity: T) -> Dict[str, Any]:
        """Key fields of an entity as a dictionary."""
        return {name: getattr(entity, name) for name in self.key_fields}

    async def create(self, entity: T) -> T:
        """Insert new entity; duplicate keys raise ConflictError."""
        self.session.add(entity)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(
                f"{self.model.__name__} already exists",
                details={"key": self.key_of(entity), "reason": str(e.orig)},
            ) from e
        return entity

    async def get(self, **key: Any) -> Optional[T]:
        """Get entity by full primary key."""
        stmt = select(self.model).where(*self._key_clause(key))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list(
        self, order_by: Optional[Sequence[str]] = None, **filters: Any
    ) -> List[T]:
        """List entities matching equality filters, in repository order."""
        stmt = select(self.model)

        for field_name, value in filters.items():
            if hasattr(self.model, field_name) and value is not None:
                stmt = stmt.where(getattr(self.model, field_name) == value)

        stmt = stmt.order_by(*self._ordering(order_by))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update_by_key(self, key: Dict[str, Any], **values: Any) -> int:
        """Update the row identified by key; returns rows affected.

        More than one affected row breaks the key invariant and raises
        DatabaseError.
        """
        stmt = (
            update(self.model)
            .where(*self._key_clause(key))
            .values(**values)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return self._checked_rowcount(result.rowcount, "update", key)

    async def delete_by_key(self, **key: Any) -> int:
        """Delete the row identified by key; returns rows affected."""
        stmt = delete(self.model).where(*self._key_clause(key))
        result = await self.session.execute(stmt)
        await self.session.flush()
        return self._checked_rowcount(result.rowcount, "delete", key)

    async def exists(self, **key: Any) -> bool:
        """Check if entity exists."""
        return await self.get(**key) is not None

    def _checked_rowcount(self, rowcount: int, operation: str, key: Dict[str, Any]) -> int:
        if rowcount > 1:
            raise DatabaseError(
                f"expected at most 1 row affected by {operation}, got {rowcount}",
                details={"table": self.model.__tablename__, "key": key},
            )
        return rowcount
