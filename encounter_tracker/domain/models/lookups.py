"""Reference-data entities.

Each is a LookupEntity: unique display name, active flag, audit fields.
"""

from __future__ import annotations

from pydantic import Field

from .base import LookupEntity


class BehaviorType(LookupEntity):
    """Behaviour observed at the start or end of an encounter (e.g. "Friendly")."""


class EncounterType(LookupEntity):
    """Kind of encounter (direct message, comment thread, in person, ...)."""

    description: str | None = Field(default=None, max_length=2000)


class SocialMediaApp(LookupEntity):
    """Platform an account lives on."""
