"""Authorization policy for the data service.

Two layers:
  - coarse: may this actor perform <operation> on <entity type> at all?
    Satisfied by an entity-scoped claim ("Persona:update") or the wildcard
    claim ("all:update").
  - per record (tenant isolation): may this actor touch this particular
    record?  Only the creator may, unless the actor is an administrator.

When authorization is disabled every check passes.  Administrators bypass both
layers.  Anonymous callers fail every check while authorization is enabled.
"""

from __future__ import annotations

from enum import Enum

from encounter_tracker.domain.models.actor import WILDCARD_SCOPE, Actor
from encounter_tracker.domain.models.base import AuditTracked, Entity
from encounter_tracker.domain.models.query import Filter

from .options import DataServiceOptions


class Operation(str, Enum):
    READ = "read"
    READ_ALL = "read-all"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def permission_claim(scope: str, operation: Operation) -> str:
    return f"{scope}:{operation.value}"


class AccessPolicy:
    def __init__(self, options: DataServiceOptions) -> None:
        self._options = options

    def can_perform(self, actor: Actor | None, operation: Operation, entity_name: str) -> bool:
        if not self._options.enable_authorization:
            return True
        if actor is None:
            return False
        if actor.is_admin:
            return True
        return actor.has_permission(permission_claim(entity_name, operation)) or actor.has_permission(
            permission_claim(WILDCARD_SCOPE, operation)
        )

    def can_access(
        self,
        actor: Actor | None,
        entity: Entity,
        operation: Operation,
        entity_name: str,
    ) -> bool:
        if not self.can_perform(actor, operation, entity_name):
            return False
        if self._enforces_ownership(actor, type(entity)):
            return entity.created_by_id == actor.id  # type: ignore[union-attr, attr-defined]
        return True

    def tenant_filter(self, actor: Actor | None, entity_type: type[Entity]) -> Filter | None:
        """Listing restriction to the actor's own records, or None."""
        if self._enforces_ownership(actor, entity_type):
            return Filter.equals(created_by_id=actor.id)  # type: ignore[union-attr]
        return None

    def _enforces_ownership(self, actor: Actor | None, entity_type: type[Entity]) -> bool:
        return (
            self._options.tenant_isolation_active
            and issubclass(entity_type, AuditTracked)
            and actor is not None
            and not actor.is_admin
        )
