"""Lookup repository interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar
from uuid import UUID

from encounter_tracker.domain.models.base import LookupEntity

L = TypeVar("L", bound=LookupEntity)


class LookupRepository(ABC, Generic[L]):
    """Minimal persistence for name + active-flag reference data.

    Listings are ordered by name ascending and never fail on an empty result.
    get_by_id returns None for a missing id.  Duplicate names raise
    UniqueConstraintError.
    """

    @abstractmethod
    async def list_active(self) -> list[L]:
        """Return active entities ordered by name."""

    @abstractmethod
    async def list_all(self) -> list[L]:
        """Return every entity regardless of the active flag, ordered by name."""

    @abstractmethod
    async def get_by_id(self, id: UUID) -> L | None:
        """Return the entity with the given id, or None."""

    @abstractmethod
    async def create(self, entity: L) -> L:
        """Persist a new entity, stamping created_at/updated_at."""

    @abstractmethod
    async def update(self, entity: L) -> L:
        """Copy name/is_active onto the stored record.  Raises EntityNotFoundError."""

    @abstractmethod
    async def delete(self, id: UUID) -> None:
        """Hard-delete the entity; a missing id is a no-op."""
