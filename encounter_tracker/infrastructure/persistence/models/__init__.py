"""ORM model registry — imports all table modules so every mapper class is
registered with Base.metadata before Alembic or SQLAlchemy runs.

Import order follows the dependency graph (referenced tables first).
"""

from encounter_tracker.infrastructure.persistence.models.lookups import (
    BehaviorType,
    EncounterType,
    SocialMediaApp,
)
from encounter_tracker.infrastructure.persistence.models.personas import (
    InboundContent,
    Persona,
    PersonaAssociation,
)
from encounter_tracker.infrastructure.persistence.models.social_media import (
    SocialMediaAccount,
    SocialMediaAccountLink,
)
from encounter_tracker.infrastructure.persistence.models.encounters import Encounter

__all__ = [
    # Lookups
    "BehaviorType",
    "EncounterType",
    "SocialMediaApp",
    # Personas
    "InboundContent",
    "Persona",
    "PersonaAssociation",
    # Social media
    "SocialMediaAccount",
    "SocialMediaAccountLink",
    # Encounters
    "Encounter",
]
