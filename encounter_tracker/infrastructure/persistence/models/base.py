"""Column mixins mirroring the domain capability contracts.

Each ORM class combines the mixins matching its domain model's capabilities.
Column names equal the domain field names; SqlEntityStore maps rows to models
by name, and registration refuses a mapping whose columns do not cover the
model's fields.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, UniqueConstraint, func, true
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, declared_attr, mapped_column


class IdentityColumns:
    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    # Optimistic-concurrency token; compared and bumped by SqlEntityStore.update().
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1, server_default="1")


class AuditColumns:
    created_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), nullable=True, index=True
    )
    modified_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(UUID(as_uuid=True), nullable=True)


class SoftDeleteColumns:
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )


class CommonColumns(IdentityColumns, AuditColumns, SoftDeleteColumns):
    pass


class LookupColumns(CommonColumns):
    """Lookup tables: unique, required name."""

    name: Mapped[str] = mapped_column(String(256), nullable=False)

    @declared_attr.directive
    def __table_args__(cls) -> tuple:
        return (UniqueConstraint("name", name=f"uq_{cls.__tablename__}_name"),)
