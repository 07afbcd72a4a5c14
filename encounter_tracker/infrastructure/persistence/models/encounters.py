"""Encounter ORM model."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from encounter_tracker.infrastructure.database import Base

from .base import IdentityColumns


class Encounter(IdentityColumns, Base):
    __tablename__ = "encounters"

    social_media_account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("social_media_accounts.id"), nullable=False, index=True
    )
    encounter_type_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("encounter_types.id"), nullable=False
    )
    begin_behavior_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("behavior_types.id"), nullable=True
    )
    end_behavior_type_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("behavior_types.id"), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(String(4000), nullable=True)
