from __future__ import annotations

import datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase


class Holiday(UUIDBase, TimestampMixin, UpdateTimestampMixin, table=True):
    """An official holiday that excludes a date from working-day counts."""

    __tablename__ = "holiday"
    __table_args__ = (sa.Index("ix_holiday_year_active", "year", "is_active"),)

    name: str = Field(max_length=200)
    date: datetime.date = Field(index=True)
    year: int
    description: str | None = Field(default=None, max_length=500)
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
