"""Social-media account entities."""

from __future__ import annotations

from uuid import UUID

from pydantic import Field

from .base import CommonEntity


class SocialMediaAccount(CommonEntity):
    """An account on a SocialMediaApp.

    username is required; display_name and bio mirror what the platform shows.
    """

    social_media_app_id: UUID
    username: str = Field(min_length=1, max_length=256)
    display_name: str | None = Field(default=None, max_length=256)
    bio: str | None = Field(default=None, max_length=2000)
    notes: str | None = None


class SocialMediaAccountLink(CommonEntity):
    account_id: UUID
    link: str = Field(min_length=1, max_length=256)
