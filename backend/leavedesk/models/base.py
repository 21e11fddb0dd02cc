from __future__ import annotations

import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from sqlmodel import Field, SQLModel


def utc_now() -> datetime:
    """Aware timestamps; approval dates and audit entries are all stored in UTC."""
    return datetime.now(UTC)


class UUIDBase(SQLModel):
    """Directory records, leave requests and ledger rows are all keyed by a random UUID."""

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, sa_type=sa.Uuid)


class TimestampMixin(SQLModel):
    # Also the tie-breaker when several managers share a department and level.
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )


class UpdateTimestampMixin(SQLModel):
    # Written by services on each change, including bulk ledger UPDATEs.
    updated_at: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
    )
