"""Social-media ORM models: social_media_accounts, social_media_account_links."""

from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from encounter_tracker.infrastructure.database import Base

from .base import CommonColumns


class SocialMediaAccount(CommonColumns, Base):
    __tablename__ = "social_media_accounts"

    social_media_app_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("social_media_apps.id"), nullable=False
    )
    username: Mapped[str] = mapped_column(String(256), nullable=False)
    display_name: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    bio: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class SocialMediaAccountLink(CommonColumns, Base):
    __tablename__ = "social_media_account_links"

    account_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("social_media_accounts.id", ondelete="CASCADE"),
        nullable=False,
    )
    link: Mapped[str] = mapped_column(String(256), nullable=False)
