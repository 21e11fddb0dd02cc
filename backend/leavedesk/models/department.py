# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase


class Department(UUIDBase, TimestampMixin, UpdateTimestampMixin, table=True):
    """An organisational unit.

    ``manager_id`` is a hint only; the approving manager is resolved from the
    titles of the department's active members.
    """

    __tablename__ = "department"
    __table_args__ = (
        sa.UniqueConstraint("name", name="uq_department_name"),
        sa.UniqueConstraint("code", name="uq_department_code"),
    )

    name: str = Field(max_length=100)
    code: str | None = Field(default=None, max_length=20)
    description: str | None = Field(default=None, max_length=500)
    manager_id: uuid.UUID | None = Field(default=None, index=True)
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    is_system: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
