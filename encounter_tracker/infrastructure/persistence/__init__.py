"""Persistence package.

Importing this package registers every ORM mapper with Base.metadata
(required for Alembic autogenerate and SQLAlchemy mapper configuration)
and exports the store implementations and the entity mapping list.
"""

from encounter_tracker.infrastructure.persistence.models import *  # noqa: F401, F403
from encounter_tracker.infrastructure.persistence.models import __all__ as _orm_all
from encounter_tracker.infrastructure.persistence.mappings import ENTITY_MAPPINGS, EntityMapping
from encounter_tracker.infrastructure.persistence.memory import (
    InMemoryDatabase,
    InMemoryEntityStore,
)
from encounter_tracker.infrastructure.persistence.repositories import (
    EntityLookupRepository,
    SqlEntityStore,
)

__all__ = _orm_all + [
    "ENTITY_MAPPINGS",
    "EntityLookupRepository",
    "EntityMapping",
    "InMemoryDatabase",
    "InMemoryEntityStore",
    "SqlEntityStore",
]
