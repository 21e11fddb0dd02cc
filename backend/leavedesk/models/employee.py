# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

import sqlalchemy as sa
from sqlmodel import Field

from leavedesk.models.base import TimestampMixin, UpdateTimestampMixin, UUIDBase


class Employee(UUIDBase, TimestampMixin, UpdateTimestampMixin, table=True):
    """A person in the directory. Soft-deactivated, never hard-deleted."""

    __tablename__ = "employee"
    __table_args__ = (
        sa.UniqueConstraint("email", name="uq_employee_email"),
        sa.UniqueConstraint("employee_number", name="uq_employee_number"),
    )

    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: str = Field(max_length=255)
    employee_number: str = Field(max_length=50)
    department_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("department.id", ondelete="SET NULL"), index=True),
    )
    title_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("title.id", ondelete="SET NULL"), index=True),
    )
    manager_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employee.id", ondelete="SET NULL")),
    )
    hire_date: date | None = None
    works_on_saturday: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})
    is_active: bool = Field(default=True, sa_column_kwargs={"server_default": sa.true()})
    is_system: bool = Field(default=False, sa_column_kwargs={"server_default": sa.false()})

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
