"""Concrete store and repository implementations."""

from __future__ import annotations

from .lookup import EntityLookupRepository
from .store import SqlEntityStore

__all__ = [
    "EntityLookupRepository",
    "SqlEntityStore",
]
