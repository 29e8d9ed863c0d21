"""Shared base entity for all database models."""
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import DeclarativeBase, declared_attr


class BaseEntity(DeclarativeBase):
    """Base class for all database entities.

    Tables use natural (platform-assigned or composite) keys, so no surrogate
    id or timestamp columns are declared here.
    """

    @declared_attr
    def __tablename__(cls) -> str:
        """Generate plural table name from class name."""
        return f"{cls.__name__.lower()}s"

    def to_dict(self) -> dict[str, Any]:
        """Convert entity instance to dictionary."""
        return {
            column.name: getattr(self, column.key)
            for column in self.__table__.columns
        }

    def primary_key(self) -> tuple:
        """Primary key values in column order."""
        return inspect(self).identity or tuple(
            getattr(self, column.key) for column in self.__table__.primary_key.columns
        )

    def __repr__(self) -> str:
        """String representation of the entity."""
        return f"<{self.__class__.__name__}(key={self.primary_key()})>"
