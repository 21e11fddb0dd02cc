# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import AdminDep, AuthDep
from leavedesk.db import SessionDep
from leavedesk.schemas.employee import (
    AuthorityResponse,
    CreateEmployeeRequest,
    EmployeeListResponse,
    EmployeeResponse,
    UpdateEmployeeRequest,
)
from leavedesk.services import authority as authority_service
from leavedesk.services import employee as employee_service

employees_router = APIRouter(prefix="/employees", tags=["employees"])


@employees_router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: CreateEmployeeRequest,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Create an employee (admin only)."""
    return await employee_service.create_employee(session, auth, payload)


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(
    session: SessionDep,
    auth: AuthDep,
    department_id: uuid.UUID | None = Query(default=None),
    include_inactive: bool = Query(default=False),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> EmployeeListResponse:
    """List employees with optional department filter."""
    return await employee_service.list_employees(session, department_id, include_inactive, offset, limit)


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> EmployeeResponse:
    return await employee_service.get_employee_response(session, employee_id)


@employees_router.get("/{employee_id}/subordinates", response_model=EmployeeListResponse)
async def list_subordinates(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> EmployeeListResponse:
    """Employees reporting to this employee."""
    return await employee_service.list_subordinates(session, employee_id)


@employees_router.get("/{employee_id}/authority", response_model=AuthorityResponse)
async def get_authority(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> AuthorityResponse:
    """Which approval steps the employee can currently perform."""
    return await authority_service.get_authority(session, employee_id)


@employees_router.put("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: uuid.UUID,
    payload: UpdateEmployeeRequest,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Update an employee (admin only)."""
    return await employee_service.update_employee(session, auth, employee_id, payload)


@employees_router.post("/{employee_id}/activate", response_model=EmployeeResponse)
async def activate_employee(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    return await employee_service.activate_employee(session, auth, employee_id)


@employees_router.post("/{employee_id}/deactivate", response_model=EmployeeResponse)
async def deactivate_employee(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Soft-deactivate an employee (admin only)."""
    return await employee_service.deactivate_employee(session, auth, employee_id)
