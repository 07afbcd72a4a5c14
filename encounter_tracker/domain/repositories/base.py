"""Generic store interface.

EntityStore[T] is the persistence boundary the data service and lookup
repositories are written against.  Concrete implementations live in
encounter_tracker/infrastructure/persistence/ and are bound per entity type at
startup by the registration step.

Design notes:
  - All methods are async to accommodate async database drivers (asyncpg / SQLAlchemy async).
  - T is the domain model type (never an ORM row).
  - Filtering, ordering, and windowing take domain-level Filter criteria and
    field names, so the same calls work against SQL and in-memory stores.
  - add/update/remove stage changes; save() flushes them and is the only point
    where ConcurrencyConflictError or UniqueConstraintError surface.
  - Each write runs inside begin_write().  A failure inside it discards that
    write only; writes that already completed on the same store survive.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Generic, TypeVar
from uuid import UUID

from encounter_tracker.domain.models.base import Entity
from encounter_tracker.domain.models.query import Filter

T = TypeVar("T", bound=Entity)


class EntityStore(ABC, Generic[T]):
    """Typed collection access for one entity type."""

    entity_type: type[T]

    @property
    def entity_name(self) -> str:
        return self.entity_type.__name__

    @abstractmethod
    async def get(self, id: UUID, filter: Filter | None = None) -> T | None:
        """Return the entity with the given id (and matching filter), or None."""

    @abstractmethod
    async def list(
        self,
        filter: Filter | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[T]:
        """Return matching entities, ordered then windowed."""

    @abstractmethod
    async def count(self, filter: Filter | None = None) -> int:
        """Return the number of matching entities."""

    @abstractmethod
    async def add(self, entity: T) -> T:
        """Stage a new entity."""

    @abstractmethod
    async def update(self, entity: T) -> T:
        """Replace the stored record's mutable fields.

        Raises EntityNotFoundError when no record has entity.id and
        ConcurrencyConflictError when entity.version is stale.  Returns the
        entity with its version bumped.
        """

    @abstractmethod
    async def remove(self, id: UUID) -> bool:
        """Stage removal of the record; False when it did not exist."""

    @abstractmethod
    async def save(self) -> None:
        """Flush staged changes to the backing store."""

    @abstractmethod
    async def rollback(self) -> None:
        """Discard staged changes after a failed write."""

    @asynccontextmanager
    async def begin_write(self) -> AsyncIterator[None]:
        """Scope one write; roll back its staged changes if the body raises."""
        try:
            yield
        except BaseException:
            await self.rollback()
            raise
