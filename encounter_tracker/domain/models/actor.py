"""Actor — the identity a data-service call runs on behalf of.

Resolving the actor from a transport session is the web layer's job; services
receive it explicitly on every call.  None means anonymous.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

ADMIN_ROLE = "admin"
WILDCARD_SCOPE = "all"


class Actor(BaseModel):
    """An authenticated caller.

    permissions holds claims of the form "<EntityName>:<operation>" or
    "all:<operation>", e.g. "Persona:read-all" or "all:create".
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    roles: frozenset[str] = Field(default_factory=frozenset)
    permissions: frozenset[str] = Field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return any(role.lower() == ADMIN_ROLE for role in self.roles)

    def has_permission(self, claim: str) -> bool:
        return claim in self.permissions

    @classmethod
    def admin(cls, actor_id: UUID) -> Actor:
        return cls(id=actor_id, roles=frozenset({ADMIN_ROLE}))


def actor_label(actor: Actor | None) -> str:
    """Stable identifier for log lines and cache keys."""
    return str(actor.id) if actor is not None else "anonymous"
