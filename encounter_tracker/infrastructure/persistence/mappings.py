"""Explicit domain ↔ ORM pairing for every persisted entity type.

ENTITY_MAPPINGS is the list the registration step wires up by default.  Adding
an entity means adding its domain model, its ORM model, and one line here.
"""

from __future__ import annotations

from dataclasses import dataclass

from encounter_tracker.domain import models as domain
from encounter_tracker.domain.models.base import Entity
from encounter_tracker.infrastructure.persistence import models as orm


@dataclass(frozen=True)
class EntityMapping:
    domain_type: type[Entity]
    orm_type: type

    @property
    def name(self) -> str:
        return self.domain_type.__name__


ENTITY_MAPPINGS: tuple[EntityMapping, ...] = (
    # Lookups
    EntityMapping(domain.BehaviorType, orm.BehaviorType),
    EntityMapping(domain.EncounterType, orm.EncounterType),
    EntityMapping(domain.SocialMediaApp, orm.SocialMediaApp),
    # Common
    EntityMapping(domain.SocialMediaAccount, orm.SocialMediaAccount),
    EntityMapping(domain.SocialMediaAccountLink, orm.SocialMediaAccountLink),
    EntityMapping(domain.InboundContent, orm.InboundContent),
    # Identity only
    EntityMapping(domain.Persona, orm.Persona),
    EntityMapping(domain.PersonaAssociation, orm.PersonaAssociation),
    EntityMapping(domain.Encounter, orm.Encounter),
)
