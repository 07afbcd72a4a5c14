"""EntityStore-backed implementation of LookupRepository.

Lookup types are also served by a data service over the same store, so every
successful write here drops the point and listing entries that service may
have cached.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Generic, TypeVar
from uuid import UUID

from encounter_tracker.domain.errors import EntityNotFoundError
from encounter_tracker.domain.models.base import LookupEntity, utc_now, validate_entity
from encounter_tracker.domain.models.query import Filter
from encounter_tracker.domain.repositories.base import EntityStore
from encounter_tracker.domain.repositories.lookup import LookupRepository
from encounter_tracker.domain.services.caching import EntityCache

L = TypeVar("L", bound=LookupEntity)


class EntityLookupRepository(LookupRepository[L], Generic[L]):
    def __init__(
        self,
        store: EntityStore[L],
        cache: EntityCache | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._cache = cache
        self._clock = clock

    async def list_active(self) -> list[L]:
        return await self._store.list(Filter.equals(is_active=True), order_by="name")

    async def list_all(self) -> list[L]:
        return await self._store.list(order_by="name")

    async def get_by_id(self, id: UUID) -> L | None:
        return await self._store.get(id)

    async def create(self, entity: L) -> L:
        now = self._clock()
        stamped = validate_entity(entity.model_copy(update={"created_at": now, "updated_at": now}))
        async with self._store.begin_write():
            await self._store.add(stamped)
            await self._store.save()
        await self._invalidate(None)
        return stamped

    async def update(self, entity: L) -> L:
        stored = await self._store.get(entity.id)
        if stored is None:
            raise EntityNotFoundError(self._store.entity_name, entity.id)
        now = self._clock()
        if now <= stored.updated_at:
            now = stored.updated_at + timedelta(microseconds=1)
        changed = validate_entity(
            stored.model_copy(update={"name": entity.name, "is_active": entity.is_active, "updated_at": now})
        )
        async with self._store.begin_write():
            updated = await self._store.update(changed)
            await self._store.save()
        await self._invalidate(entity.id)
        return updated

    async def delete(self, id: UUID) -> None:
        async with self._store.begin_write():
            if not await self._store.remove(id):
                return
            await self._store.save()
        await self._invalidate(id)

    async def _invalidate(self, id: UUID | None) -> None:
        if self._cache is None:
            return
        if id is not None:
            await self._cache.forget_entity(self._store.entity_name, id)
        await self._cache.invalidate_listings(self._store.entity_name)
