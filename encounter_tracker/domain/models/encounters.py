"""Encounter — one interaction with a social-media account."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field

from .base import Entity


class Encounter(Entity):
    """An interaction of a given EncounterType with a SocialMediaAccount.

    begin/end behaviour types record the tone at the start and end of the
    interaction; either may be unknown.
    """

    social_media_account_id: UUID
    encounter_type_id: UUID
    begin_behavior_type_id: UUID | None = None
    end_behavior_type_id: UUID | None = None
    notes: str | None = Field(default=None, max_length=4000)
