"""In-memory EntityStore.

InMemoryDatabase plays the role of the shared backing store (one per process
or per test); InMemoryEntityStore is the request-scoped view over one entity
type.  Writes are staged per store and applied by save(), which enforces the
same contracts as the SQL store: unique fields, version checks, and
ConcurrencyConflictError when another writer got there first.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Generic, TypeVar
from uuid import UUID

from encounter_tracker.domain.errors import (
    ConcurrencyConflictError,
    EntityNotFoundError,
    UniqueConstraintError,
)
from encounter_tracker.domain.models.base import Entity, LookupEntity
from encounter_tracker.domain.models.query import Filter
from encounter_tracker.domain.repositories.base import EntityStore

T = TypeVar("T", bound=Entity)


@dataclass
class InMemoryDatabase:
    """Committed records per entity type, plus per-type unique fields.

    Lookup entities get a unique "name" automatically.
    """

    tables: dict[type, dict[UUID, Entity]] = field(default_factory=lambda: defaultdict(dict))
    unique_fields: dict[type, tuple[str, ...]] = field(default_factory=dict)

    def table(self, entity_type: type[T]) -> dict[UUID, T]:
        return self.tables[entity_type]  # type: ignore[return-value]

    def unique_fields_for(self, entity_type: type) -> tuple[str, ...]:
        if entity_type in self.unique_fields:
            return self.unique_fields[entity_type]
        return ("name",) if issubclass(entity_type, LookupEntity) else ()


class InMemoryEntityStore(EntityStore[T], Generic[T]):
    def __init__(self, entity_type: type[T], database: InMemoryDatabase) -> None:
        self.entity_type = entity_type
        self._db = database
        self._pending: list[tuple[str, Entity | UUID]] = []

    def _rows(self) -> list[T]:
        return list(self._db.table(self.entity_type).values())

    async def get(self, id: UUID, filter: Filter | None = None) -> T | None:
        entity = self._db.table(self.entity_type).get(id)
        if entity is None or (filter and not filter.matches(entity)):
            return None
        return entity

    async def list(
        self,
        filter: Filter | None = None,
        order_by: str | None = None,
        ascending: bool = True,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[T]:
        rows = [e for e in self._rows() if not filter or filter.matches(e)]
        if order_by is not None:
            rows.sort(key=lambda e: str(e.id))
            # None sorts first ascending, like NULLS FIRST
            rows.sort(
                key=lambda e: (getattr(e, order_by) is not None, getattr(e, order_by)),
                reverse=not ascending,
            )
        rows = rows[offset:]
        return rows if limit is None else rows[:limit]

    async def count(self, filter: Filter | None = None) -> int:
        return sum(1 for e in self._rows() if not filter or filter.matches(e))

    async def add(self, entity: T) -> T:
        self._pending.append(("add", entity))
        return entity

    async def update(self, entity: T) -> T:
        stored = self._db.table(self.entity_type).get(entity.id)
        if stored is None:
            raise EntityNotFoundError(self.entity_name, entity.id)
        if stored.version != entity.version:
            raise ConcurrencyConflictError(
                f"{self.entity_name} {entity.id} was modified concurrently (version {entity.version} is stale)"
            )
        bumped = entity.model_copy(
            update={"version": entity.version + 1, "created_at": stored.created_at}
        )
        self._pending.append(("update", bumped))
        return bumped

    async def remove(self, id: UUID) -> bool:
        if id not in self._db.table(self.entity_type):
            return False
        self._pending.append(("remove", id))
        return True

    async def save(self) -> None:
        table = self._db.table(self.entity_type)
        staged = dict(table)
        for action, item in self._pending:
            if action == "remove":
                staged.pop(item, None)  # type: ignore[arg-type]
                continue
            entity: Entity = item  # type: ignore[assignment]
            current = staged.get(entity.id)
            if action == "add" and current is not None:
                raise UniqueConstraintError(f"{self.entity_name} {entity.id} already exists", "id")
            if action == "update":
                if current is None:
                    raise EntityNotFoundError(self.entity_name, entity.id)
                if current.version != entity.version - 1:
                    raise ConcurrencyConflictError(
                        f"{self.entity_name} {entity.id} was modified concurrently"
                    )
            self._check_unique(staged, entity)
            staged[entity.id] = entity
        table.clear()
        table.update(staged)
        self._pending.clear()

    async def rollback(self) -> None:
        self._pending.clear()

    def _check_unique(self, staged: dict[UUID, Entity], entity: Entity) -> None:
        for name in self._db.unique_fields_for(self.entity_type):
            value = getattr(entity, name)
            if any(other.id != entity.id and getattr(other, name) == value for other in staged.values()):
                raise UniqueConstraintError(
                    f"{self.entity_name} with {name} {value!r} already exists", name
                )
