"""Cache boundary and the entity-aware cache used by data services.

Cache is the backend contract: get-if-present, set with absolute + sliding
expiration, remove by exact key.  No enumeration or wildcard removal is
assumed, so EntityCache records every listing key it writes per entity type
and invalidates exactly those keys.  A tracked key is forgotten once its
absolute expiration has passed, so read-only types do not accumulate keys.

EntityCache is process-wide (one per service registry) and shared by every
request-scoped data service.  It never decides access: callers re-check
authorization on every hit.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Callable
from datetime import timedelta
from typing import Any
from uuid import UUID

from encounter_tracker.domain.models.base import Entity

from .options import DataServiceOptions

logger = logging.getLogger(__name__)


class Cache(ABC):
    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the cached value, or None when absent or expired."""

    @abstractmethod
    async def set(
        self,
        key: str,
        value: Any,
        absolute_expiration: timedelta | None = None,
        sliding_expiration: timedelta | None = None,
    ) -> None:
        """Store value.  A read within the sliding window extends the entry,
        never past the absolute expiration."""

    @abstractmethod
    async def remove(self, key: str) -> None:
        """Drop the key if present."""


class EntityCache:
    """Point and listing caches keyed by entity type name."""

    def __init__(
        self,
        backend: Cache,
        options: DataServiceOptions,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._backend = backend
        self._absolute = timedelta(minutes=options.cache_expiration_minutes)
        self._sliding = timedelta(minutes=options.cache_sliding_expiration_minutes)
        self._clock = clock
        # entity name -> {listing key: monotonic deadline}
        self._listing_keys: dict[str, dict[str, float]] = defaultdict(dict)

    @staticmethod
    def entity_key(entity_name: str, entity_id: UUID) -> str:
        return f"{entity_name}:{entity_id}"

    @staticmethod
    def listing_key(entity_name: str, kind: str, *parts: object) -> str:
        return ":".join([entity_name, kind, *(str(p) for p in parts)])

    async def get_entity(self, entity_name: str, entity_id: UUID) -> Entity | None:
        return await self._backend.get(self.entity_key(entity_name, entity_id))

    async def set_entity(self, entity_name: str, entity: Entity) -> None:
        await self._backend.set(
            self.entity_key(entity_name, entity.id),
            entity,
            absolute_expiration=self._absolute,
            sliding_expiration=self._sliding,
        )

    async def forget_entity(self, entity_name: str, entity_id: UUID) -> None:
        await self._backend.remove(self.entity_key(entity_name, entity_id))

    async def get_listing(self, key: str) -> Any | None:
        return await self._backend.get(key)

    async def set_listing(self, entity_name: str, key: str, value: Any) -> None:
        now = self._clock()
        tracked = self._listing_keys[entity_name]
        for stale in [k for k, deadline in tracked.items() if deadline <= now]:
            del tracked[stale]
        tracked[key] = now + self._absolute.total_seconds()
        await self._backend.set(key, value, absolute_expiration=self._absolute)

    async def invalidate_listings(self, entity_name: str) -> None:
        keys = self._listing_keys.pop(entity_name, {})
        for key in keys:
            await self._backend.remove(key)
        if keys:
            logger.debug("Invalidated %d listing cache entries for %s", len(keys), entity_name)

    def tracked_listing_keys(self, entity_name: str) -> frozenset[str]:
        return frozenset(self._listing_keys.get(entity_name, ()))
