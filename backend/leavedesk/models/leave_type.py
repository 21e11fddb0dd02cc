from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase


class LeaveType(UUIDBase, TimestampMixin, UpdateTimestampMixin, table=True):
    """A kind of leave and the flags that drive balance handling.

    ``requires_balance`` gates creation on the ledger; ``deducts_from_balance``
    decides whether HR approval consumes it. The two are independent.
    """

    __tablename__ = "leave_type"
    __table_args__ = (sa.UniqueConstraint("code", name="uq_leave_type_code"),)

    code: str = Field(max_length=50)
    name: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)
    max_days_per_year: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    requires_approval: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    is_paid: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    requires_balance: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    deducts_from_balance: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
