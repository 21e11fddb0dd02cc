# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Balance response schemas
# ---------------------------------------------------------------------------


class BalanceResponse(BaseModel):
    """Balance of one employee for one leave type and year."""

    id: uuid.UUID
    employee_id: uuid.UUID
    employee_name: str
    leave_type_id: uuid.UUID
    leave_type_name: str
    year: int
    total_days: int
    used_days: int
    remaining_days: int
    updated_at: datetime | None


class BalanceListResponse(BaseModel):
    """List of balances."""

    items: list[BalanceResponse]
    total: int


# ---------------------------------------------------------------------------
# Admin request schemas
# ---------------------------------------------------------------------------


class CreateBalanceRequest(BaseModel):
    """Request body for granting a yearly entitlement."""

    employee_id: uuid.UUID
    leave_type_id: uuid.UUID
    year: int = Field(ge=2000, le=2100)
    total_days: int = Field(ge=0, le=366)


class UpdateBalanceRequest(BaseModel):
    """Request body for changing a yearly entitlement."""

    total_days: int = Field(ge=0, le=366)
