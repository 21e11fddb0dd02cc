# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import BaseModel, Field


class CreateEmployeeRequest(BaseModel):
    """Request body for creating an employee."""

    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    employee_number: str = Field(min_length=1, max_length=50)
    department_id: uuid.UUID | None = None
    title_id: uuid.UUID | None = None
    manager_id: uuid.UUID | None = None
    hire_date: date | None = None
    works_on_saturday: bool = False


class UpdateEmployeeRequest(BaseModel):
    """Request body for updating an employee. Omitted fields are left unchanged."""

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    employee_number: str | None = Field(default=None, min_length=1, max_length=50)
    department_id: uuid.UUID | None = None
    title_id: uuid.UUID | None = None
    manager_id: uuid.UUID | None = None
    hire_date: date | None = None
    works_on_saturday: bool | None = None


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    id: uuid.UUID
    first_name: str
    last_name: str
    full_name: str
    email: str
    employee_number: str
    department_id: uuid.UUID | None
    title_id: uuid.UUID | None
    manager_id: uuid.UUID | None
    hire_date: date | None
    works_on_saturday: bool
    is_active: bool
    is_system: bool
    created_at: datetime


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int


class AuthorityResponse(BaseModel):
    """Approval authority an employee currently holds."""

    employee_id: uuid.UUID
    is_department_manager: bool
    is_hr_manager: bool
