"""Base model with common fields and utilities."""

from sqlalchemy import Column, DateTime, func
from sqlalchemy.orm import declared_attr

from api.config.database import Base


class TimestampMixin:
    """Mixin that adds created_at and updated_at columns."""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime,
            default=func.current_timestamp(),
            nullable=False,
            index=True,
        )

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime,
            onupdate=func.current_timestamp(),
            nullable=True,
        )


class BaseModel(Base):
    """
    Abstract base class for all models.

    Provides a repr keyed on the primary key.
    """

    __abstract__ = True

    def __repr__(self) -> str:
        """String representation of model."""
        pk = self.__mapper__.primary_key[0].name
        return f"<{self.__class__.__name__}({pk}={getattr(self, pk, None)})>"
