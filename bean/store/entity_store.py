"""
Entity store
Name-keyed CRUD over the registered models

Flows address records by entity name ("Customer", "StoreSale", ...) the same
way for every collection. Writes are flushed but never committed here: the
calling flow owns the transaction and commits once.
"""

from typing import Any, Dict, List, Optional, Type
from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute
import logging
import uuid

from bean.core.exceptions import BadRequestException, NotFoundException
from bean.models import model_registry
from bean.models.base import BaseModel

logger = logging.getLogger(__name__)

class EntityStore:
    """Repository over every registered entity"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Helpers

    def model_for(self, entity: str) -> Type[BaseModel]:
        model = model_registry.get(entity)
        if model is None:
            raise BadRequestException(f"Unknown entity '{entity}'", error_code="UNKNOWN_ENTITY")
        return model

    def _column(self, model: Type[BaseModel], field: str) -> InstrumentedAttribute:
        if field not in model.__mapper__.column_attrs:
            raise BadRequestException(
                f"Unknown field '{field}' on {model.__name__}",
                error_code="UNKNOWN_FIELD"
            )
        return getattr(model, field)

    @staticmethod
    def _coerce_id(record_id: Any) -> Optional[uuid.UUID]:
        if isinstance(record_id, uuid.UUID):
            return record_id
        try:
            return uuid.UUID(str(record_id))
        except (TypeError, ValueError):
            return None

    def _apply_sort(self, model: Type[BaseModel], query, sort: Optional[str]):
        if not sort:
            return query
        descending = sort.startswith("-")
        column = self._column(model, sort.lstrip("-+"))
        return query.order_by(column.desc() if descending else column.asc())

    def _where(self, model: Type[BaseModel], predicate: Dict[str, Any]) -> list:
        clauses = []
        for field, value in predicate.items():
            column = self._column(model, field)
            if value is None:
                clauses.append(column.is_(None))
            elif isinstance(value, (list, tuple, set)):
                clauses.append(column.in_(list(value)))
            else:
                clauses.append(column == value)
        return clauses

    # Operations

    async def create(self, entity: str, fields: Dict[str, Any]) -> BaseModel:
        model = self.model_for(entity)
        for field in fields:
            self._column(model, field)

        record = model(**fields)
        self.db.add(record)
        await self.db.flush()
        return record

    async def get(self, entity: str, record_id: Any, refresh: bool = False) -> Optional[BaseModel]:
        model = self.model_for(entity)
        key = self._coerce_id(record_id)
        if key is None:
            return None
        return await self.db.get(model, key, populate_existing=refresh)

    async def list(
        self,
        entity: str,
        sort: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[BaseModel]:
        return await self.filter(entity, {}, sort=sort, limit=limit)

    async def filter(
        self,
        entity: str,
        predicate: Dict[str, Any],
        sort: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[BaseModel]:
        model = self.model_for(entity)
        query = select(model).where(*self._where(model, predicate))
        query = self._apply_sort(model, query, sort)
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def first(self, entity: str, predicate: Dict[str, Any]) -> Optional[BaseModel]:
        records = await self.filter(entity, predicate, limit=1)
        return records[0] if records else None

    async def update(self, entity: str, record_id: Any, fields: Dict[str, Any]) -> BaseModel:
        record = await self.get(entity, record_id)
        if record is None:
            raise NotFoundException(f"{entity} not found")

        model = type(record)
        for field, value in fields.items():
            self._column(model, field)
            setattr(record, field, value)

        await self.db.flush()
        return record

    async def update_where(
        self,
        entity: str,
        record_id: Any,
        expected: Dict[str, Any],
        fields: Dict[str, Any]
    ) -> bool:
        """
        Conditional write: apply fields only while every expected value
        still holds. Returns False when no row matched.
        """
        model = self.model_for(entity)
        key = self._coerce_id(record_id)
        if key is None:
            return False

        values = {self._column(model, field): value for field, value in fields.items()}
        statement = (
            update(model)
            .where(model.id == key, *self._where(model, expected))
            .values(values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(statement)
        return result.rowcount == 1

    async def increment(
        self,
        entity: str,
        record_id: Any,
        deltas: Dict[str, int],
        minimums: Optional[Dict[str, int]] = None
    ) -> bool:
        """
        Add deltas in SQL (col = col + delta). When minimums are given the
        row is only touched if each column is at least the minimum.
        """
        model = self.model_for(entity)
        key = self._coerce_id(record_id)
        if key is None:
            return False

        values = {}
        for field, delta in deltas.items():
            column = self._column(model, field)
            values[column] = column + delta

        conditions = [model.id == key]
        for field, minimum in (minimums or {}).items():
            conditions.append(self._column(model, field) >= minimum)

        statement = (
            update(model)
            .where(*conditions)
            .values(values)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(statement)
        return result.rowcount == 1

    async def delete(self, entity: str, record_id: Any) -> None:
        model = self.model_for(entity)
        key = self._coerce_id(record_id)
        if key is None:
            raise NotFoundException(f"{entity} not found")

        result = await self.db.execute(
            delete(model).where(model.id == key).execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotFoundException(f"{entity} not found")
        logger.info(f"Deleted {entity} {key}")
