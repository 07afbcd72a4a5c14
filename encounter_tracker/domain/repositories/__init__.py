"""Repository interfaces (abstract).

Concrete implementations are in encounter_tracker/infrastructure/persistence/.
"""

from .base import EntityStore
from .lookup import LookupRepository

__all__ = [
    "EntityStore",
    "LookupRepository",
]
