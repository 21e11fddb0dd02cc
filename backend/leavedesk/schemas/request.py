# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Self

from pydantic import BaseModel, Field, model_validator

from leavedesk.models.enums import LeaveRequestStatus

# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------


class CreateLeaveRequestPayload(BaseModel):
    """Request body for creating a leave request.

    ``employee_id`` may only differ from the caller when an admin files on
    someone's behalf.
    """

    employee_id: uuid.UUID | None = None
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    reason: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _validate_dates(self) -> Self:
        if self.end_date < self.start_date:
            msg = "end_date must not be before start_date"
            raise ValueError(msg)
        return self


class UpdateStatusPayload(BaseModel):
    """Request body for an approval or rejection by either approver."""

    status: LeaveRequestStatus
    comments: str | None = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class LeaveRequestResponse(BaseModel):
    """Response schema for a single leave request."""

    id: uuid.UUID
    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    start_date: date
    end_date: date
    total_days: int
    reason: str | None
    status: LeaveRequestStatus
    department_manager_id: uuid.UUID | None
    hr_manager_id: uuid.UUID | None
    department_manager_approval_date: datetime | None
    hr_manager_approval_date: datetime | None
    department_manager_comments: str | None
    hr_manager_comments: str | None
    created_at: datetime
    updated_at: datetime | None


class LeaveRequestListResponse(BaseModel):
    """Paginated list of leave requests."""

    items: list[LeaveRequestResponse]
    total: int
