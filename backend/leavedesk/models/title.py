from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase
from leavedesk.models.enums import TitleLevel


class Title(UUIDBase, TimestampMixin, UpdateTimestampMixin, table=True):
    """A job title. Its level decides whether holders can approve leave."""

    __tablename__ = "title"
    __table_args__ = (sa.UniqueConstraint("name", name="uq_title_name"),)

    name: str = Field(max_length=100)
    level: str = Field(default=TitleLevel.STAFF, max_length=20, sa_column_kwargs={"server_default": "STAFF"})
    description: str | None = Field(default=None, max_length=200)
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
