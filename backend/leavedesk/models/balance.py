# ruff: noqa: TC003
from __future__ import annotations

import uuid

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase


class LeaveBalance(UUIDBase, TimestampMixin, UpdateTimestampMixin, table=True):
    """Yearly entitlement of one employee for one leave type.

    Remaining days are always derived as ``total_days - used_days``.
    """

    __tablename__ = "leave_balance"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "leave_type_id", "year", name="uq_balance_employee_type_year"),
        sa.CheckConstraint("used_days >= 0", name="ck_balance_used_non_negative"),
    )

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("employee.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="CASCADE"), nullable=False, index=True
        ),
    )
    year: int = Field(index=True)
    total_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})
    used_days: int = Field(default=0, sa_column_kwargs={"server_default": "0"})

    @property
    def remaining_days(self) -> int:
        return self.total_days - self.used_days
