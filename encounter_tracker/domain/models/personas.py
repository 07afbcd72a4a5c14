"""Persona entities: the people being tracked and what they publish."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field, model_validator

from .base import CommonEntity, Entity


class Persona(Entity):
    name: str = Field(default="", max_length=256)
    notes: str | None = None


class PersonaAssociation(Entity):
    """Directed link between two personas believed to be related.

    The pair is unique; a persona cannot be associated with itself.
    """

    base_persona_id: UUID
    associate_persona_id: UUID

    @model_validator(mode="after")
    def _distinct_personas(self) -> PersonaAssociation:
        if self.base_persona_id == self.associate_persona_id:
            raise ValueError("a persona cannot be associated with itself")
        return self


class InboundContent(CommonEntity):
    """Content captured from a persona, queued for text extraction."""

    persona_id: UUID
    content_url: str | None = Field(default=None, max_length=256)
    extracted_text: str | None = Field(default=None, max_length=2000)
    is_processed: bool = False
    notes: str | None = None
