"""Entity capability contracts.

Every persisted entity derives from Entity and opts into further capabilities
by inheriting from the contract classes below.  The data service and the
registration step inspect these bases (issubclass) to decide which policies
apply: audit stamping and tenant isolation need AuditTracked, soft delete needs
SoftDeletable, lookup repositories need LookupEntity.

Entities are frozen pydantic models.  Services never mutate an instance; they
derive stamped copies with model_copy(update=...), so a cached value can never
be changed behind the cache's back.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Capability(str, Enum):
    IDENTITY = "identity"
    AUDIT_TRACKING = "audit_tracking"
    SOFT_DELETE = "soft_delete"
    COMMON = "common"
    LOOKUP = "lookup"


class Entity(BaseModel):
    """Minimum addressable, auditable record.

    version is the optimistic-concurrency token: stores reject an update whose
    version does not match the stored one, then bump it.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default=None)  # filled from created_at
    version: int = Field(default=1, ge=1)

    @model_validator(mode="before")
    @classmethod
    def _default_updated_at(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("updated_at") is None:
            created = data.get("created_at") or utc_now()
            data = {**data, "created_at": created, "updated_at": created}
        return data


class AuditTracked(Entity):
    """Records who created and who last modified the record."""

    created_by_id: UUID | None = None
    modified_by_id: UUID | None = None


class SoftDeletable(Entity):
    """Record can be hidden from default reads instead of removed."""

    is_active: bool = True


class CommonEntity(AuditTracked, SoftDeletable):
    """Full-featured entity: audit tracking plus soft delete."""


class LookupEntity(CommonEntity):
    """Reference-data record with a unique display name."""

    name: str = Field(min_length=1, max_length=256)


_CAPABILITY_BASES: tuple[type[Entity], ...] = (
    Entity,
    AuditTracked,
    SoftDeletable,
    CommonEntity,
    LookupEntity,
)

E = TypeVar("E", bound=Entity)


def is_capability_base(entity_type: type) -> bool:
    """True for the abstract contract classes themselves."""
    return entity_type in _CAPABILITY_BASES


def capabilities_of(entity_type: type[Entity]) -> frozenset[Capability]:
    """Return every capability the entity type declares."""
    caps = {Capability.IDENTITY}
    if issubclass(entity_type, AuditTracked):
        caps.add(Capability.AUDIT_TRACKING)
    if issubclass(entity_type, SoftDeletable):
        caps.add(Capability.SOFT_DELETE)
    if issubclass(entity_type, CommonEntity):
        caps.add(Capability.COMMON)
    if issubclass(entity_type, LookupEntity):
        caps.add(Capability.LOOKUP)
    return frozenset(caps)


def validate_entity(entity: E) -> E:
    """Re-run the declarative field constraints of the entity's class.

    model_copy(update=...) and model_construct() bypass validation, so every
    store mutation goes through this first.  Raises pydantic.ValidationError.
    """
    return type(entity).model_validate(entity.model_dump())
