# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import AdminDep, AuthDep
from leavedesk.db import SessionDep
from leavedesk.schemas.balance import (
    BalanceListResponse,
    BalanceResponse,
    CreateBalanceRequest,
    UpdateBalanceRequest,
)
from leavedesk.services import balance as balance_service

employee_balance_router = APIRouter(
    prefix="/employees/{employee_id}/balances",
    tags=["balances"],
)

balances_router = APIRouter(
    prefix="/leave-balances",
    tags=["balances"],
)


@employee_balance_router.get("", response_model=BalanceListResponse)
async def get_employee_balances(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None, ge=2000, le=2100),
) -> BalanceListResponse:
    """Get an employee's balances for a year (defaults to the current year)."""
    return await balance_service.get_balances(session, employee_id, year or date.today().year)


@balances_router.post("", response_model=BalanceResponse, status_code=status.HTTP_201_CREATED)
async def create_balance(
    payload: CreateBalanceRequest,
    session: SessionDep,
    auth: AdminDep,
) -> BalanceResponse:
    """Grant a yearly entitlement (admin only)."""
    return await balance_service.create_balance(session, auth, payload)


@balances_router.get("", response_model=BalanceListResponse)
async def list_balances(
    session: SessionDep,
    auth: AdminDep,
    year: int | None = Query(default=None, ge=2000, le=2100),
    leave_type_id: uuid.UUID | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> BalanceListResponse:
    """List every employee's balances for a year (admin only)."""
    return await balance_service.list_balances(
        session, year or date.today().year, leave_type_id, offset, limit
    )


@balances_router.get("/{balance_id}", response_model=BalanceResponse)
async def get_balance(
    balance_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> BalanceResponse:
    return await balance_service.get_balance_response(session, balance_id)


@balances_router.put("/{balance_id}", response_model=BalanceResponse)
async def update_balance(
    balance_id: uuid.UUID,
    payload: UpdateBalanceRequest,
    session: SessionDep,
    auth: AdminDep,
) -> BalanceResponse:
    """Change a yearly entitlement (admin only)."""
    return await balance_service.update_balance_total(session, auth, balance_id, payload)


@balances_router.delete("/{balance_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_balance(
    balance_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> None:
    """Delete an unused entitlement (admin only)."""
    await balance_service.delete_balance(session, auth, balance_id)
