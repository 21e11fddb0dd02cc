# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Path, Query, status

from leavedesk.api.deps import AdminDep, AuthDep
from leavedesk.db import SessionDep
from leavedesk.schemas.holiday import (
    CreateHolidayRequest,
    EnsureHolidaysResponse,
    HolidayListResponse,
    HolidayResponse,
    UpdateHolidayRequest,
)
from leavedesk.services import holiday as holiday_service

holidays_router = APIRouter(prefix="/holidays", tags=["holidays"])


@holidays_router.post(
    "",
    response_model=HolidayResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_holiday(
    payload: CreateHolidayRequest,
    session: SessionDep,
    auth: AdminDep,
) -> HolidayResponse:
    """Create a holiday (admin only)."""
    return await holiday_service.create_holiday(session, auth, payload)


@holidays_router.get(
    "",
    response_model=HolidayListResponse,
)
async def list_holidays(
    session: SessionDep,
    auth: AuthDep,
    year: int | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> HolidayListResponse:
    """List active holidays with optional year filter."""
    return await holiday_service.list_holidays(session, year, offset, limit)


@holidays_router.get(
    "/official/{year}",
    response_model=HolidayListResponse,
)
async def preview_official_holidays(
    auth: AuthDep,
    year: int = Path(ge=2000, le=2100),
) -> HolidayListResponse:
    """Official holidays that would be generated for a year, without saving them."""
    return holiday_service.preview_official_holidays(year)


@holidays_router.post(
    "/official/{year}",
    response_model=EnsureHolidaysResponse,
)
async def ensure_official_holidays(
    session: SessionDep,
    auth: AdminDep,
    year: int = Path(ge=2000, le=2100),
) -> EnsureHolidaysResponse:
    """Persist the official holidays for a year unless it already has some (admin only)."""
    return await holiday_service.ensure_holidays_for_year(session, year)


@holidays_router.get(
    "/{holiday_id}",
    response_model=HolidayResponse,
)
async def get_holiday(
    holiday_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> HolidayResponse:
    return await holiday_service.get_holiday_response(session, holiday_id)


@holidays_router.put(
    "/{holiday_id}",
    response_model=HolidayResponse,
)
async def update_holiday(
    holiday_id: uuid.UUID,
    payload: UpdateHolidayRequest,
    session: SessionDep,
    auth: AdminDep,
) -> HolidayResponse:
    """Update a holiday (admin only)."""
    return await holiday_service.update_holiday(session, auth, holiday_id, payload)


@holidays_router.delete(
    "/{holiday_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_holiday(
    holiday_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> None:
    """Deactivate a holiday (admin only)."""
    await holiday_service.delete_holiday(session, auth, holiday_id)
