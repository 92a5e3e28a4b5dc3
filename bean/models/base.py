"""Declarative base, shared columns and the entity registry"""

from sqlalchemy import Column, DateTime, Uuid, inspect
from sqlalchemy.orm import DeclarativeBase, declared_attr
from sqlalchemy.sql import func
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional
import uuid

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class Base(DeclarativeBase):
    pass

class TimestampedModel:
    """created_at / updated_at, set in Python so ordering keeps microseconds"""

    @declared_attr
    def created_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            server_default=func.now(),
            index=True
        )

    @declared_attr
    def updated_at(cls):
        return Column(
            DateTime(timezone=True),
            nullable=False,
            default=utcnow,
            server_default=func.now(),
            onupdate=utcnow
        )

class UUIDModel:
    """UUID primary key"""

    @declared_attr
    def id(cls):
        return Column(
            Uuid(as_uuid=True),
            primary_key=True,
            default=uuid.uuid4,
            nullable=False
        )

class BaseModel(Base, TimestampedModel, UUIDModel):
    """Every entity: UUID id plus timestamps"""

    __abstract__ = True

    def to_dict(self, exclude: Optional[list] = None) -> Dict[str, Any]:
        """JSON-friendly dict of mapped columns"""
        exclude = exclude or []
        result = {}

        for attr in inspect(self).mapper.column_attrs:
            if attr.key in exclude:
                continue
            value = getattr(self, attr.key)

            if isinstance(value, datetime):
                value = value.isoformat()
            elif isinstance(value, uuid.UUID):
                value = str(value)
            elif isinstance(value, Decimal):
                value = float(value)

            result[attr.key] = value

        return result

    def __repr__(self):
        return f"<{self.__class__.__name__}(id={getattr(self, 'id', None)!r})>"

# Model registry, keyed by entity name
model_registry: Dict[str, type] = {}

def register_model(model_class):
    """Register a model in the registry"""
    model_registry[model_class.__name__] = model_class
    return model_class

__all__ = [
    'Base',
    'BaseModel',
    'TimestampedModel',
    'UUIDModel',
    'register_model',
    'model_registry',
]
