# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CreateDepartmentRequest(BaseModel):
    """Request body for creating a department."""

    name: str = Field(min_length=1, max_length=100)
    code: str | None = Field(default=None, min_length=1, max_length=20)
    description: str | None = Field(default=None, max_length=500)
    manager_id: uuid.UUID | None = None


class UpdateDepartmentRequest(BaseModel):
    """Request body for updating a department. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    code: str | None = Field(default=None, min_length=1, max_length=20)
    description: str | None = Field(default=None, max_length=500)
    manager_id: uuid.UUID | None = None


class DepartmentResponse(BaseModel):
    """Response schema for a department."""

    id: uuid.UUID
    name: str
    code: str | None
    description: str | None
    manager_id: uuid.UUID | None
    employee_count: int
    is_active: bool
    is_system: bool
    created_at: datetime


class DepartmentListResponse(BaseModel):
    """List of departments."""

    items: list[DepartmentResponse]
    total: int
