"""Lookup ORM models: behavior_types, encounter_types, social_media_apps."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from encounter_tracker.infrastructure.database import Base

from .base import LookupColumns


class BehaviorType(LookupColumns, Base):
    __tablename__ = "behavior_types"


class EncounterType(LookupColumns, Base):
    __tablename__ = "encounter_types"

    description: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)


class SocialMediaApp(LookupColumns, Base):
    __tablename__ = "social_media_apps"
