from __future__ import annotations

import logging
from datetime import UTC, date, datetime, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from leavedesk.exceptions import NotFoundError
from leavedesk.models.enums import AuditAction, AuditEntityType
from leavedesk.models.holiday import Holiday
from leavedesk.schemas.holiday import EnsureHolidaysResponse, HolidayListResponse, HolidayResponse
from leavedesk.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.holiday import CreateHolidayRequest, UpdateHolidayRequest

logger = logging.getLogger(__name__)

# Fixed-date national holidays: (month, day, name, description).
_FIXED_HOLIDAYS: list[tuple[int, int, str, str]] = [
    (1, 1, "Yılbaşı", "Yılbaşı Tatili"),
    (4, 23, "Ulusal Egemenlik ve Çocuk Bayramı", "23 Nisan Ulusal Egemenlik ve Çocuk Bayramı"),
    (5, 1, "Emek ve Dayanışma Günü", "1 Mayıs Emek ve Dayanışma Günü"),
    (5, 19, "Atatürk'ü Anma, Gençlik ve Spor Bayramı", "19 Mayıs Atatürk'ü Anma, Gençlik ve Spor Bayramı"),
    (7, 15, "Demokrasi ve Milli Birlik Günü", "15 Temmuz Demokrasi ve Milli Birlik Günü"),
    (8, 30, "Zafer Bayramı", "30 Ağustos Zafer Bayramı"),
    (10, 29, "Cumhuriyet Bayramı", "29 Ekim Cumhuriyet Bayramı"),
]

# First days of Ramazan Bayramı and Kurban Bayramı, per the published lunar calendar.
_RELIGIOUS_HOLIDAY_STARTS: dict[int, tuple[date, date]] = {
    2020: (date(2020, 5, 24), date(2020, 7, 31)),
    2021: (date(2021, 5, 13), date(2021, 7, 20)),
    2022: (date(2022, 5, 2), date(2022, 7, 9)),
    2023: (date(2023, 4, 21), date(2023, 6, 28)),
    2024: (date(2024, 4, 10), date(2024, 6, 16)),
    2025: (date(2025, 3, 30), date(2025, 6, 6)),
    2026: (date(2026, 3, 20), date(2026, 5, 26)),
    2027: (date(2027, 3, 9), date(2027, 5, 16)),
    2028: (date(2028, 2, 26), date(2028, 5, 4)),
    2029: (date(2029, 2, 14), date(2029, 4, 23)),
    2030: (date(2030, 2, 4), date(2030, 4, 13)),
}
_RAMAZAN_DAYS = 3
_KURBAN_DAYS = 4


def _build_holiday_response(holiday: Holiday) -> HolidayResponse:
    return HolidayResponse(
        id=holiday.id,
        date=holiday.date,
        year=holiday.year,
        name=holiday.name,
        description=holiday.description,
        is_active=holiday.is_active,
    )


# ---------------------------------------------------------------------------
# Calendar lookups used by the working-day calculator
# ---------------------------------------------------------------------------


async def holidays_in_range(session: AsyncSession, start_date: date, end_date: date) -> set[date]:
    """Return the active holiday dates between ``start_date`` and ``end_date`` inclusive."""
    result = await session.execute(
        select(col(Holiday.date)).where(
            col(Holiday.is_active).is_(True),
            col(Holiday.date) >= start_date,
            col(Holiday.date) <= end_date,
        )
    )
    return {row[0] for row in result.all()}


async def is_holiday(session: AsyncSession, day: date) -> bool:
    """Whether ``day`` is an active holiday."""
    return day in await holidays_in_range(session, day, day)


# ---------------------------------------------------------------------------
# Official calendar generation
# ---------------------------------------------------------------------------


def generate_official_holidays(year: int) -> list[Holiday]:
    """Build (without persisting) the official holidays for ``year``.

    Religious holidays are only known for the years in the lookup table;
    other years get the fixed national days alone.
    """
    holidays = [
        Holiday(name=name, date=date(year, month, day), year=year, description=description)
        for month, day, name, description in _FIXED_HOLIDAYS
    ]

    starts = _RELIGIOUS_HOLIDAY_STARTS.get(year)
    if starts is not None:
        ramazan_start, kurban_start = starts
        for offset in range(_RAMAZAN_DAYS):
            holidays.append(
                Holiday(
                    name=f"Ramazan Bayramı ({offset + 1}. Gün)",
                    date=ramazan_start + timedelta(days=offset),
                    year=year,
                    description="Ramazan Bayramı",
                )
            )
        for offset in range(_KURBAN_DAYS):
            holidays.append(
                Holiday(
                    name=f"Kurban Bayramı ({offset + 1}. Gün)",
                    date=kurban_start + timedelta(days=offset),
                    year=year,
                    description="Kurban Bayramı",
                )
            )

    holidays.sort(key=lambda h: h.date)
    return holidays


def preview_official_holidays(year: int) -> HolidayListResponse:
    """Response view of :func:`generate_official_holidays`."""
    items = [
        HolidayResponse(
            id=None,
            date=h.date,
            year=h.year,
            name=h.name,
            description=h.description,
            is_active=True,
        )
        for h in generate_official_holidays(year)
    ]
    return HolidayListResponse(items=items, total=len(items))


async def ensure_holidays_for_year(session: AsyncSession, year: int) -> EnsureHolidaysResponse:
    """Persist the official holidays for ``year`` unless the year already has active holidays."""
    count_result = await session.execute(
        select(func.count())
        .select_from(Holiday)
        .where(col(Holiday.year) == year, col(Holiday.is_active).is_(True))
    )
    existing = count_result.scalar_one()
    if existing:
        return EnsureHolidaysResponse(year=year, created=False, total=existing)

    holidays = generate_official_holidays(year)
    session.add_all(holidays)
    await session.commit()
    logger.info("Seeded %d official holidays for %d", len(holidays), year)
    return EnsureHolidaysResponse(year=year, created=True, total=len(holidays))


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


async def create_holiday(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateHolidayRequest,
) -> HolidayResponse:
    """Create a holiday."""
    holiday = Holiday(
        date=payload.date,
        year=payload.date.year,
        name=payload.name,
        description=payload.description,
    )
    session.add(holiday)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(holiday),
    )

    await session.commit()
    await session.refresh(holiday)
    return _build_holiday_response(holiday)


async def list_holidays(
    session: AsyncSession,
    year: int | None = None,
    offset: int = 0,
    limit: int = 50,
) -> HolidayListResponse:
    """List active holidays with optional year filter."""
    base_filter = [col(Holiday.is_active).is_(True)]

    if year is not None:
        base_filter.append(col(Holiday.year) == year)

    count_result = await session.execute(select(func.count()).select_from(Holiday).where(*base_filter))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Holiday).where(*base_filter).order_by(col(Holiday.date)).offset(offset).limit(limit)
    )
    holidays = list(result.scalars().all())

    return HolidayListResponse(
        items=[_build_holiday_response(h) for h in holidays],
        total=total,
    )


async def get_holiday(session: AsyncSession, holiday_id: uuid.UUID) -> Holiday:
    """Get a single holiday or raise 404."""
    holiday = await session.get(Holiday, holiday_id)
    if holiday is None:
        raise NotFoundError("Holiday not found")
    return holiday


async def get_holiday_response(session: AsyncSession, holiday_id: uuid.UUID) -> HolidayResponse:
    return _build_holiday_response(await get_holiday(session, holiday_id))


async def update_holiday(
    session: AsyncSession,
    auth: AuthContext,
    holiday_id: uuid.UUID,
    payload: UpdateHolidayRequest,
) -> HolidayResponse:
    """Replace a holiday's details. The year always follows the date."""
    holiday = await get_holiday(session, holiday_id)
    before = model_to_audit_dict(holiday)

    holiday.name = payload.name
    holiday.date = payload.date
    holiday.year = payload.date.year
    holiday.description = payload.description
    holiday.is_active = payload.is_active
    holiday.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(holiday),
    )

    await session.commit()
    await session.refresh(holiday)
    return _build_holiday_response(holiday)


async def delete_holiday(
    session: AsyncSession,
    auth: AuthContext,
    holiday_id: uuid.UUID,
) -> None:
    """Soft-delete a holiday so it no longer excludes its date."""
    holiday = await get_holiday(session, holiday_id)
    before = model_to_audit_dict(holiday)

    holiday.is_active = False
    holiday.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.HOLIDAY,
        entity_id=holiday.id,
        action=AuditAction.DELETE,
        before_json=before,
        after_json=model_to_audit_dict(holiday),
    )

    await session.commit()
