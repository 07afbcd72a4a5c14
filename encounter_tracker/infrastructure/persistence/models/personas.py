"""Persona ORM models: personas, persona_associations, inbound_contents."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, String, Text, UniqueConstraint, false
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from encounter_tracker.infrastructure.database import Base

from .base import CommonColumns, IdentityColumns


class Persona(IdentityColumns, Base):
    __tablename__ = "personas"

    name: Mapped[str] = mapped_column(String(256), nullable=False, default="", server_default="")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class PersonaAssociation(IdentityColumns, Base):
    """Directed persona → persona link; each ordered pair at most once."""

    __tablename__ = "persona_associations"
    __table_args__ = (
        UniqueConstraint(
            "base_persona_id", "associate_persona_id", name="uq_persona_associations_pair"
        ),
        CheckConstraint(
            "base_persona_id <> associate_persona_id", name="ck_persona_associations_distinct"
        ),
    )

    # NO ACTION on delete: removing a persona must not silently drop its associations.
    base_persona_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("personas.id"), nullable=False
    )
    associate_persona_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("personas.id"), nullable=False
    )


class InboundContent(CommonColumns, Base):
    __tablename__ = "inbound_contents"

    persona_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("personas.id", ondelete="CASCADE"), nullable=False
    )
    content_url: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    extracted_text: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    is_processed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
