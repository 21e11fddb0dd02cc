# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import AdminDep, AuthDep
from leavedesk.db import SessionDep
from leavedesk.exceptions import AuthorizationError
from leavedesk.models.enums import LeaveRequestStatus
from leavedesk.schemas.request import (
    CreateLeaveRequestPayload,
    LeaveRequestListResponse,
    LeaveRequestResponse,
    UpdateStatusPayload,
)
from leavedesk.services import request as request_service

requests_router = APIRouter(prefix="/leave-requests", tags=["leave-requests"])


@requests_router.post("", response_model=LeaveRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_leave_request(
    payload: CreateLeaveRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Request leave for the caller, or for anyone when the caller is an admin."""
    return await request_service.create_leave_request(session, auth, payload)


@requests_router.get("", response_model=LeaveRequestListResponse)
async def list_leave_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: LeaveRequestStatus | None = Query(default=None, alias="status"),
    employee_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> LeaveRequestListResponse:
    """List leave requests. Non-admins only see their own."""
    if not auth.is_admin:
        if employee_id is not None and employee_id != auth.user_id:
            raise AuthorizationError("Only admins can list other employees' leave requests")
        employee_id = auth.user_id
    return await request_service.list_leave_requests(session, employee_id, status_filter, offset, limit)


@requests_router.get("/pending/department-manager", response_model=LeaveRequestListResponse)
async def list_pending_for_department_manager(
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestListResponse:
    """Pending requests in the caller's department awaiting the first decision."""
    return await request_service.list_pending_for_department_manager(session, auth.user_id)


@requests_router.get("/pending/hr-manager", response_model=LeaveRequestListResponse)
async def list_pending_for_hr_manager(
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestListResponse:
    """Requests awaiting the HR decision. The caller must be the HR manager."""
    return await request_service.list_pending_for_hr_manager(session, auth.user_id)


@requests_router.get("/{request_id}", response_model=LeaveRequestResponse)
async def get_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """A single request, visible to its requester, its approvers and admins."""
    return await request_service.get_leave_request(session, auth, request_id)


@requests_router.post("/{request_id}/status", response_model=LeaveRequestResponse)
async def update_leave_request_status(
    request_id: uuid.UUID,
    payload: UpdateStatusPayload,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Approve or reject as the department manager or the HR manager.

    The stage is taken from the requested status; the caller is the approver.
    """
    return await request_service.update_leave_request_status(
        session,
        request_id,
        payload.status,
        approver_id=auth.user_id,
        comments=payload.comments,
    )


@requests_router.post("/{request_id}/cancel", response_model=LeaveRequestResponse)
async def cancel_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> LeaveRequestResponse:
    """Cancel one of the caller's own undecided requests."""
    return await request_service.cancel_leave_request(session, request_id, auth.user_id)


@requests_router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_leave_request(
    request_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> None:
    """Delete a request that HR has not granted (admin only)."""
    await request_service.delete_leave_request(session, auth, request_id)
