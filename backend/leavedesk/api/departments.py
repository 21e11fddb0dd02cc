# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import AdminDep, AuthDep
from leavedesk.db import SessionDep
from leavedesk.schemas.department import (
    CreateDepartmentRequest,
    DepartmentListResponse,
    DepartmentResponse,
    UpdateDepartmentRequest,
)
from leavedesk.schemas.employee import EmployeeListResponse
from leavedesk.services import department as department_service
from leavedesk.services import employee as employee_service

departments_router = APIRouter(prefix="/departments", tags=["departments"])


@departments_router.post("", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(
    payload: CreateDepartmentRequest,
    session: SessionDep,
    auth: AdminDep,
) -> DepartmentResponse:
    """Create a department (admin only)."""
    return await department_service.create_department(session, auth, payload)


@departments_router.get("", response_model=DepartmentListResponse)
async def list_departments(
    session: SessionDep,
    auth: AuthDep,
    include_inactive: bool = Query(default=False),
) -> DepartmentListResponse:
    """List departments, active ones only unless asked otherwise."""
    return await department_service.list_departments(session, include_inactive)


@departments_router.get("/{department_id}", response_model=DepartmentResponse)
async def get_department(
    department_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> DepartmentResponse:
    return await department_service.get_department_response(session, department_id)


@departments_router.get("/{department_id}/employees", response_model=EmployeeListResponse)
async def list_department_employees(
    department_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> EmployeeListResponse:
    """Active members of a department."""
    await department_service.get_department(session, department_id)
    return await employee_service.list_employees(session, department_id=department_id, limit=1000)


@departments_router.put("/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: uuid.UUID,
    payload: UpdateDepartmentRequest,
    session: SessionDep,
    auth: AdminDep,
) -> DepartmentResponse:
    """Update a department (admin only)."""
    return await department_service.update_department(session, auth, department_id, payload)


@departments_router.post("/{department_id}/activate", response_model=DepartmentResponse)
async def activate_department(
    department_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> DepartmentResponse:
    return await department_service.activate_department(session, auth, department_id)


@departments_router.post("/{department_id}/deactivate", response_model=DepartmentResponse)
async def deactivate_department(
    department_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> DepartmentResponse:
    """Soft-delete a department (admin only)."""
    return await department_service.deactivate_department(session, auth, department_id)
