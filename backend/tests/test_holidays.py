from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

from leavedesk.services.holiday import (
    ensure_holidays_for_year,
    generate_official_holidays,
    holidays_in_range,
    is_holiday,
)

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

ADMIN_HEADERS = {"X-User-Id": str(uuid.uuid4()), "X-Role": "admin"}
EMPLOYEE_HEADERS = {"X-User-Id": str(uuid.uuid4()), "X-Role": "employee"}


async def _create_holiday(client: AsyncClient, day: date, name: str = "Test Holiday") -> dict:
    response = await client.post(
        "/holidays",
        json={"date": day.isoformat(), "name": name},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# Official calendar
# ---------------------------------------------------------------------------


def test_official_holidays_2026() -> None:
    holidays = generate_official_holidays(2026)
    # 7 fixed national days, 3 days of Ramazan Bayramı, 4 days of Kurban Bayramı.
    assert len(holidays) == 14
    dates = [h.date for h in holidays]
    assert dates == sorted(dates)
    assert date(2026, 10, 29) in dates
    assert date(2026, 3, 20) in dates
    assert date(2026, 3, 22) in dates
    assert date(2026, 5, 26) in dates
    assert date(2026, 5, 29) in dates
    assert all(h.year == 2026 for h in holidays)


def test_official_holiday_names() -> None:
    names = {h.date: h.name for h in generate_official_holidays(2026)}
    assert names[date(2026, 1, 1)] == "Yılbaşı"
    assert names[date(2026, 3, 21)] == "Ramazan Bayramı (2. Gün)"
    assert names[date(2026, 5, 29)] == "Kurban Bayramı (4. Gün)"


def test_official_holidays_outside_lookup_table() -> None:
    holidays = generate_official_holidays(2045)
    assert len(holidays) == 7
    assert {h.date.month for h in holidays} == {1, 4, 5, 7, 8, 10}


async def test_ensure_holidays_is_idempotent(db_session: AsyncSession) -> None:
    first = await ensure_holidays_for_year(db_session, 2026)
    assert first.created is True
    assert first.total == 14

    second = await ensure_holidays_for_year(db_session, 2026)
    assert second.created is False
    assert second.total == 14


async def test_holiday_lookups(db_session: AsyncSession) -> None:
    await ensure_holidays_for_year(db_session, 2026)

    assert await is_holiday(db_session, date(2026, 4, 23)) is True
    assert await is_holiday(db_session, date(2026, 4, 24)) is False
    assert await holidays_in_range(db_session, date(2026, 5, 1), date(2026, 5, 31)) == {
        date(2026, 5, 1),
        date(2026, 5, 19),
        date(2026, 5, 26),
        date(2026, 5, 27),
        date(2026, 5, 28),
        date(2026, 5, 29),
    }


# ---------------------------------------------------------------------------
# API
# ---------------------------------------------------------------------------


async def test_create_holiday(async_client: AsyncClient) -> None:
    data = await _create_holiday(async_client, date(2026, 6, 15), "Şirket Günü")
    assert data["name"] == "Şirket Günü"
    assert data["date"] == "2026-06-15"
    assert data["year"] == 2026
    assert data["is_active"] is True


async def test_create_holiday_requires_admin(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/holidays",
        json={"date": "2026-06-15", "name": "Şirket Günü"},
        headers=EMPLOYEE_HEADERS,
    )
    assert response.status_code == 403


async def test_list_holidays_by_year(async_client: AsyncClient) -> None:
    await _create_holiday(async_client, date(2026, 6, 15))
    await _create_holiday(async_client, date(2026, 2, 2))
    await _create_holiday(async_client, date(2027, 6, 15))

    response = await async_client.get("/holidays", params={"year": 2026}, headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [item["date"] for item in data["items"]] == ["2026-02-02", "2026-06-15"]


async def test_update_holiday_moves_year(async_client: AsyncClient) -> None:
    created = await _create_holiday(async_client, date(2026, 12, 31))

    response = await async_client.put(
        f"/holidays/{created['id']}",
        json={"date": "2027-01-02", "name": "Moved", "description": "Ertelendi"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["year"] == 2027
    assert data["name"] == "Moved"
    assert data["description"] == "Ertelendi"


async def test_delete_holiday_is_soft(async_client: AsyncClient, db_session: AsyncSession) -> None:
    created = await _create_holiday(async_client, date(2026, 6, 15))

    response = await async_client.delete(f"/holidays/{created['id']}", headers=ADMIN_HEADERS)
    assert response.status_code == 204

    listing = await async_client.get("/holidays", params={"year": 2026}, headers=EMPLOYEE_HEADERS)
    assert listing.json()["total"] == 0
    assert await is_holiday(db_session, date(2026, 6, 15)) is False

    fetched = await async_client.get(f"/holidays/{created['id']}", headers=EMPLOYEE_HEADERS)
    assert fetched.status_code == 200
    assert fetched.json()["is_active"] is False


async def test_get_missing_holiday(async_client: AsyncClient) -> None:
    response = await async_client.get(f"/holidays/{uuid.uuid4()}", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 404


async def test_preview_official_holidays(async_client: AsyncClient) -> None:
    response = await async_client.get("/holidays/official/2026", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 14
    assert all(item["id"] is None for item in data["items"])

    listing = await async_client.get("/holidays", params={"year": 2026}, headers=EMPLOYEE_HEADERS)
    assert listing.json()["total"] == 0


async def test_ensure_official_holidays_endpoint(async_client: AsyncClient) -> None:
    response = await async_client.post("/holidays/official/2026", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json() == {"year": 2026, "created": True, "total": 14}

    again = await async_client.post("/holidays/official/2026", headers=ADMIN_HEADERS)
    assert again.json() == {"year": 2026, "created": False, "total": 14}

    listing = await async_client.get("/holidays", params={"year": 2026}, headers=EMPLOYEE_HEADERS)
    assert listing.json()["total"] == 14
