# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase
from leavedesk.models.enums import LeaveRequestStatus


class LeaveRequest(UUIDBase, TimestampMixin, UpdateTimestampMixin, table=True):
    """An employee's leave request with its two-stage approval state."""

    __tablename__ = "leave_request"
    __table_args__ = (
        sa.Index("ix_leave_request_employee_dates", "employee_id", "start_date", "end_date"),
        sa.CheckConstraint("end_date >= start_date", name="ck_leave_request_date_order"),
    )

    employee_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("employee.id", ondelete="RESTRICT"), nullable=False, index=True
        ),
    )
    leave_type_id: uuid.UUID = Field(
        sa_column=sa.Column(
            sa.Uuid, sa.ForeignKey("leave_type.id", ondelete="RESTRICT"), nullable=False, index=True
        ),
    )
    start_date: date
    end_date: date
    total_days: int
    reason: str | None = Field(default=None, max_length=1000)
    status: str = Field(
        default=LeaveRequestStatus.PENDING,
        max_length=50,
        index=True,
        sa_column_kwargs={"server_default": "PENDING"},
    )
    department_manager_id: uuid.UUID | None = Field(default=None, index=True)
    hr_manager_id: uuid.UUID | None = Field(default=None, index=True)
    department_manager_approval_date: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    hr_manager_approval_date: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    department_manager_comments: str | None = Field(default=None, max_length=500)
    hr_manager_comments: str | None = Field(default=None, max_length=500)
