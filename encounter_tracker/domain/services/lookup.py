"""Lookup service: dropdown-style access to reference data of any lookup type."""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar
from uuid import UUID

from encounter_tracker.domain.models.base import LookupEntity
from encounter_tracker.domain.repositories.lookup import LookupRepository

L = TypeVar("L", bound=LookupEntity)

RepositoryResolver = Callable[[type[L]], LookupRepository[L]]


class LookupService:
    """Resolves the lookup repository for a type on each call.

    resolver is typically ServiceScope.lookup_repository; an unregistered type
    raises ServiceNotRegisteredError.
    """

    def __init__(self, resolver: RepositoryResolver) -> None:
        self._resolve = resolver

    async def get_lookup_items(self, lookup_type: type[L]) -> list[L]:
        return await self._resolve(lookup_type).list_active()

    async def get_lookup_item(self, lookup_type: type[L], id: UUID) -> L | None:
        return await self._resolve(lookup_type).get_by_id(id)
