"""Domain model package.

Re-exports the capability contracts, every concrete entity, the actor, query
criteria, and the result envelopes so callers can import from a single
location:

    from encounter_tracker.domain.models import Persona, Actor, Filter, ServiceResult
"""

from .actor import Actor, actor_label
from .base import (
    AuditTracked,
    Capability,
    CommonEntity,
    Entity,
    LookupEntity,
    SoftDeletable,
    capabilities_of,
    is_capability_base,
    utc_now,
    validate_entity,
)
from .encounters import Encounter
from .lookups import BehaviorType, EncounterType, SocialMediaApp
from .personas import InboundContent, Persona, PersonaAssociation
from .query import Criterion, Filter, Operator, combine
from .results import ErrorKind, PagedResult, ServiceResult
from .social_media import SocialMediaAccount, SocialMediaAccountLink

__all__ = [
    # Contracts
    "AuditTracked",
    "Capability",
    "CommonEntity",
    "Entity",
    "LookupEntity",
    "SoftDeletable",
    "capabilities_of",
    "is_capability_base",
    "utc_now",
    "validate_entity",
    # Entities
    "BehaviorType",
    "Encounter",
    "EncounterType",
    "InboundContent",
    "Persona",
    "PersonaAssociation",
    "SocialMediaAccount",
    "SocialMediaAccountLink",
    "SocialMediaApp",
    # Actor
    "Actor",
    "actor_label",
    # Query
    "Criterion",
    "Filter",
    "Operator",
    "combine",
    # Results
    "ErrorKind",
    "PagedResult",
    "ServiceResult",
]
