"""SQLAlchemy implementation of EntityStore.

One class serves every entity type: rows map to domain models by column name
(_to_domain / _to_row) and Filter criteria translate to column expressions
(_clause).  Writes run inside the caller's session transaction; save() flushes
so that constraint and concurrency failures surface inside the data-service
call that caused them.  begin_write() wraps each write in a SAVEPOINT, so a
failed write never discards the request's earlier writes.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, and_, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from encounter_tracker.domain.errors import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    StoreError,
    UniqueConstraintError,
)
from encounter_tracker.domain.models.base import Entity
from encounter_tracker.domain.models.query import Criterion, Filter, Operator
from encounter_tracker.domain.repositories.base import EntityStore

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)

# Never rewritten by update(): identity and creation fields.
_IMMUTABLE_COLUMNS = frozenset({"id", "created_at", "version"})


class SqlEntityStore(EntityStore[T], Generic[T]):
    def __init__(self, entity_type: type[T], orm_type: type, session: AsyncSession) -> None:
        self.entity_type = entity_type
        self._orm = orm_type
        self._session = session

    def _to_domain(self, row: Any) -> T:
        return self.entity_type.model_validate(row, from_attributes=True)

    def _to_row(self, entity: T) -> Any:
        return self._orm(**entity.model_dump())

    def _column(self, name: str) -> Any:
        try:
            return getattr(self._orm, name)
        except AttributeError:
            raise ValueError(f"{self._orm.__name__} has no column {name!r}") from None

    def _clause(self, criterion: Criterion) -> ColumnElement[bool]:
        column = self._column(criterion.field)
        value = criterion.value
        if criterion.op is Operator.EQ:
            return column.is_(None) if value is None else column == value
        if criterion.op is Operator.NE:
            return column.is_not(None) if value is None else column != value
        if criterion.op is Operator.LT:
            return column < value
        if criterion.op is Operator.LE:
            return column <= value
        if criterion.op is Operator.GT:
            return column > value
        if criterion.op is Operator.GE:
            return column >= value
        if criterion.op is Operator.CONTAINS:
            return column.contains(value, autoescape=True)
        if criterion.op is Operator.STARTSWITH:
            return column.startswith(value, autoescape=True)
        if criterion.op is Operator.IN:
            return column.in_(list(value))
        raise ValueError(f"Unsupported operator: {criterion.op}")

    def _where(self, stmt: Any, filter: Filter | None) -> Any:
        if filter:
            stmt = stmt.where(and_(*(self._clause(c) for c in filter.criteria)))
        return stmt

    async def get(self, id: UUID, filter: Filter | None = None) -> T | None:
        stmt = self._where(select(self._orm).where(self._orm.id == id), filter)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        row = result.scalar_one_or_none()
        return self._to_domain(row) if row else None

    async def list(
        self,
        filter: Filter | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[T]:
        stmt = self._where(select(self._orm), filter)
        if order_by is not None:
            column = self._column(order_by)
            # id as tie-breaker keeps page windows stable
            stmt = stmt.order_by(column.asc() if ascending else column.desc(), self._orm.id)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return [self._to_domain(row) for row in result.scalars()]

    async def count(self, filter: Filter | None = None) -> int:
        stmt = self._where(select(func.count()).select_from(self._orm), filter)
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return result.scalar_one()

    async def add(self, entity: T) -> T:
        self._session.add(self._to_row(entity))
        return entity

    async def update(self, entity: T) -> T:
        values = {
            name: value
            for name, value in entity.model_dump().items()
            if name not in _IMMUTABLE_COLUMNS
        }
        stmt = (
            update(self._orm)
            .where(self._orm.id == entity.id, self._orm.version == entity.version)
            .values(**values, version=entity.version + 1)
            .execution_options(synchronize_session="fetch")
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as exc:
            raise UniqueConstraintError(f"{self.entity_name} violates a uniqueness constraint") from exc
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        if result.rowcount == 0:
            exists = await self._session.execute(select(self._orm.id).where(self._orm.id == entity.id))
            if exists.scalar_one_or_none() is None:
                raise EntityNotFoundError(self.entity_name, entity.id)
            raise ConcurrencyConflictError(
                f"{self.entity_name} {entity.id} was modified concurrently (version {entity.version} is stale)"
            )
        return entity.model_copy(update={"version": entity.version + 1})

    async def remove(self, id: UUID) -> bool:
        row = await self._session.get(self._orm, id)
        if row is None:
            return False
        await self._session.delete(row)
        return True

    async def save(self) -> None:
        try:
            await self._session.flush()
        except StaleDataError as exc:
            raise ConcurrencyConflictError(str(exc)) from exc
        except IntegrityError as exc:
            logger.info("Integrity error flushing %s: %s", self.entity_name, exc.orig)
            raise UniqueConstraintError(f"{self.entity_name} violates a uniqueness constraint") from exc
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    async def rollback(self) -> None:
        """Roll back the whole session transaction, not just one write."""
        await self._session.rollback()

    @asynccontextmanager
    async def begin_write(self) -> AsyncIterator[None]:
        # Failure rolls back to the savepoint; the outer transaction stays usable.
        try:
            async with self._session.begin_nested():
                yield
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
