"""Initial schema: lookup, persona, social-media, and encounter tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _identity_columns() -> list[sa.Column]:
    return [
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
    ]


def _common_columns() -> list[sa.Column]:
    return _identity_columns() + [
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("modified_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
    ]


def _lookup_table(name: str, *extra: sa.Column) -> None:
    op.create_table(
        name,
        *_common_columns(),
        sa.Column("name", sa.String(256), nullable=False),
        *extra,
        sa.UniqueConstraint("name", name=f"uq_{name}_name"),
    )
    op.create_index(f"ix_{name}_created_by_id", name, ["created_by_id"])


def upgrade() -> None:
    # ------------------------------------------------------------------ #
    # 1. LOOKUPS                                                           #
    # ------------------------------------------------------------------ #

    _lookup_table("behavior_types")
    _lookup_table("encounter_types", sa.Column("description", sa.String(2000), nullable=True))
    _lookup_table("social_media_apps")

    # ------------------------------------------------------------------ #
    # 2. PERSONAS                                                          #
    # ------------------------------------------------------------------ #

    op.create_table(
        "personas",
        *_identity_columns(),
        sa.Column("name", sa.String(256), nullable=False, server_default=""),
        sa.Column("notes", sa.Text, nullable=True),
    )

    op.create_table(
        "persona_associations",
        *_identity_columns(),
        sa.Column(
            "base_persona_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("personas.id"),
            nullable=False,
        ),
        sa.Column(
            "associate_persona_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("personas.id"),
            nullable=False,
        ),
        sa.UniqueConstraint(
            "base_persona_id", "associate_persona_id", name="uq_persona_associations_pair"
        ),
        sa.CheckConstraint(
            "base_persona_id <> associate_persona_id", name="ck_persona_associations_distinct"
        ),
    )

    op.create_table(
        "inbound_contents",
        *_common_columns(),
        sa.Column(
            "persona_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("personas.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("content_url", sa.String(256), nullable=True),
        sa.Column("extracted_text", sa.String(2000), nullable=True),
        sa.Column("is_processed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text, nullable=True),
    )
    op.create_index("ix_inbound_contents_created_by_id", "inbound_contents", ["created_by_id"])

    # ------------------------------------------------------------------ #
    # 3. SOCIAL MEDIA                                                      #
    # ------------------------------------------------------------------ #

    op.create_table(
        "social_media_accounts",
        *_common_columns(),
        sa.Column(
            "social_media_app_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("social_media_apps.id"),
            nullable=False,
        ),
        sa.Column("username", sa.String(256), nullable=False),
        sa.Column("display_name", sa.String(256), nullable=True),
        sa.Column("bio", sa.String(2000), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
    )
    op.create_index(
        "ix_social_media_accounts_created_by_id", "social_media_accounts", ["created_by_id"]
    )

    op.create_table(
        "social_media_account_links",
        *_common_columns(),
        sa.Column(
            "account_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("social_media_accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("link", sa.String(256), nullable=False),
    )
    op.create_index(
        "ix_social_media_account_links_created_by_id",
        "social_media_account_links",
        ["created_by_id"],
    )

    # ------------------------------------------------------------------ #
    # 4. ENCOUNTERS                                                        #
    # ------------------------------------------------------------------ #

    op.create_table(
        "encounters",
        *_identity_columns(),
        sa.Column(
            "social_media_account_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("social_media_accounts.id"),
            nullable=False,
        ),
        sa.Column(
            "encounter_type_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("encounter_types.id"),
            nullable=False,
        ),
        sa.Column(
            "begin_behavior_type_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("behavior_types.id"),
            nullable=True,
        ),
        sa.Column(
            "end_behavior_type_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("behavior_types.id"),
            nullable=True,
        ),
        sa.Column("notes", sa.String(4000), nullable=True),
    )
    op.create_index(
        "ix_encounters_social_media_account_id", "encounters", ["social_media_account_id"]
    )


def downgrade() -> None:
    op.drop_table("encounters")
    op.drop_table("social_media_account_links")
    op.drop_table("social_media_accounts")
    op.drop_table("inbound_contents")
    op.drop_table("persona_associations")
    op.drop_table("personas")
    op.drop_table("social_media_apps")
    op.drop_table("encounter_types")
    op.drop_table("behavior_types")
