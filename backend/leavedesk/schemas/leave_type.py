# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CreateLeaveTypeRequest(BaseModel):
    """Request body for creating a leave type."""

    code: str = Field(min_length=1, max_length=50, pattern=r"^[A-Z0-9_]+$")
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    max_days_per_year: int = Field(default=0, ge=0, le=366)
    requires_approval: bool = True
    is_paid: bool = True
    requires_balance: bool = True
    deducts_from_balance: bool = True


class UpdateLeaveTypeRequest(BaseModel):
    """Request body for updating a leave type. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    max_days_per_year: int | None = Field(default=None, ge=0, le=366)
    requires_approval: bool | None = None
    is_paid: bool | None = None
    requires_balance: bool | None = None
    deducts_from_balance: bool | None = None


class LeaveTypeResponse(BaseModel):
    """Response schema for a leave type."""

    id: uuid.UUID
    code: str
    name: str
    description: str | None
    max_days_per_year: int
    requires_approval: bool
    is_paid: bool
    requires_balance: bool
    deducts_from_balance: bool
    is_active: bool
    created_at: datetime


class LeaveTypeListResponse(BaseModel):
    """List of leave types."""

    items: list[LeaveTypeResponse]
    total: int
