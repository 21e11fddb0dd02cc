"""Seed script for development data.

Run with:  uv run python -m leavedesk.seed
Inside Docker:  docker compose exec api uv run python -m leavedesk.seed
"""

from __future__ import annotations

import asyncio
import sys
from datetime import date, timedelta

import httpx

BASE_URL = "http://localhost:8000"
ADMIN_USER_ID = "00000000-0000-0000-0000-000000000001"

HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": ADMIN_USER_ID,
    "X-Role": "admin",
}

TITLES = [
    {"name": "Uzman", "level": "STAFF", "description": "Specialist"},
    {"name": "Yönetici", "level": "MANAGER", "description": "Manager"},
    {"name": "Direktör", "level": "DIRECTOR", "description": "Director"},
]

DEPARTMENTS = [
    {"name": "İnsan Kaynakları", "code": "HR", "description": "Human Resources"},
    {"name": "Yazılım Geliştirme", "code": "ENG", "description": "Software Development"},
]

# (key, department code, title name, payload)
EMPLOYEES = [
    ("hr_manager", "HR", "Yönetici", {
        "first_name": "Ayşe", "last_name": "Yılmaz", "email": "ayse.yilmaz@example.com",
        "employee_number": "E-0001", "hire_date": "2019-02-01",
    }),
    ("eng_manager", "ENG", "Yönetici", {
        "first_name": "Mehmet", "last_name": "Demir", "email": "mehmet.demir@example.com",
        "employee_number": "E-0002", "hire_date": "2020-05-11",
    }),
    ("developer", "ENG", "Uzman", {
        "first_name": "Zeynep", "last_name": "Kaya", "email": "zeynep.kaya@example.com",
        "employee_number": "E-0003", "hire_date": "2022-09-01",
    }),
    ("support", "ENG", "Uzman", {
        "first_name": "Can", "last_name": "Öztürk", "email": "can.ozturk@example.com",
        "employee_number": "E-0004", "hire_date": "2023-03-15", "works_on_saturday": True,
    }),
]

LEAVE_TYPES = [
    {"code": "ANNUAL", "name": "Yıllık İzin", "max_days_per_year": 30},
    {
        "code": "UNPAID", "name": "Ücretsiz İzin", "max_days_per_year": 90,
        "is_paid": False, "requires_balance": False, "deducts_from_balance": False,
    },
    {"code": "SICK", "name": "Hastalık İzni", "max_days_per_year": 10, "requires_balance": False},
    {"code": "EXCUSE", "name": "Mazeret İzni", "max_days_per_year": 5},
]

# (employee key, leave type code, total days)
BALANCES = [
    ("hr_manager", "ANNUAL", 20),
    ("eng_manager", "ANNUAL", 20),
    ("developer", "ANNUAL", 14),
    ("developer", "EXCUSE", 5),
    ("developer", "SICK", 10),
    ("support", "ANNUAL", 14),
    ("support", "SICK", 10),
]


def _as(user_id: str) -> dict[str, str]:
    """Headers for acting as a non-admin employee."""
    return {"Content-Type": "application/json", "X-User-Id": user_id, "X-Role": "employee"}


async def _safe_post(
    client: httpx.AsyncClient,
    url: str,
    json: dict | None,
    label: str,
    headers: dict[str, str] | None = None,
) -> dict | None:
    """POST with 409-conflict tolerance for idempotency."""
    resp = await client.post(url, json=json, headers=headers or HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already exists)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def _list(client: httpx.AsyncClient, path: str, **params: object) -> list[dict]:
    resp = await client.get(f"{BASE_URL}{path}", headers=HEADERS, params=params)
    if resp.status_code != 200:
        return []
    return resp.json().get("items", [])


async def seed_titles(client: httpx.AsyncClient) -> dict[str, str]:
    """Seed titles and return a name->id mapping."""
    print("\n--- Seeding titles ---")
    for title in TITLES:
        await _safe_post(client, f"{BASE_URL}/titles", title, f"Title: {title['name']}")
    return {t["name"]: t["id"] for t in await _list(client, "/titles")}


async def seed_departments(client: httpx.AsyncClient) -> dict[str, str]:
    """Seed departments and return a code->id mapping."""
    print("\n--- Seeding departments ---")
    for department in DEPARTMENTS:
        await _safe_post(client, f"{BASE_URL}/departments", department, f"Department: {department['name']}")
    return {d["code"]: d["id"] for d in await _list(client, "/departments") if d["code"]}


async def seed_employees(
    client: httpx.AsyncClient,
    title_ids: dict[str, str],
    department_ids: dict[str, str],
) -> dict[str, str]:
    """Seed employees and return a key->id mapping."""
    print("\n--- Seeding employees ---")
    for _, department_code, title_name, payload in EMPLOYEES:
        body = {**payload, "department_id": department_ids[department_code], "title_id": title_ids[title_name]}
        await _safe_post(client, f"{BASE_URL}/employees", body, f"{payload['first_name']} {payload['last_name']}")

    by_email = {e["email"]: e["id"] for e in await _list(client, "/employees", limit=100)}
    return {key: by_email[payload["email"]] for key, _, _, payload in EMPLOYEES if payload["email"] in by_email}


async def seed_leave_types(client: httpx.AsyncClient) -> dict[str, str]:
    """Seed leave types and return a code->id mapping."""
    print("\n--- Seeding leave types ---")
    for leave_type in LEAVE_TYPES:
        await _safe_post(client, f"{BASE_URL}/leave-types", leave_type, f"Leave type: {leave_type['code']}")
    return {lt["code"]: lt["id"] for lt in await _list(client, "/leave-types")}


async def seed_balances(
    client: httpx.AsyncClient,
    employee_ids: dict[str, str],
    leave_type_ids: dict[str, str],
    year: int,
) -> None:
    print(f"\n--- Seeding {year} balances ---")
    for employee_key, leave_type_code, total_days in BALANCES:
        await _safe_post(
            client,
            f"{BASE_URL}/leave-balances",
            {
                "employee_id": employee_ids[employee_key],
                "leave_type_id": leave_type_ids[leave_type_code],
                "year": year,
                "total_days": total_days,
            },
            f"Balance: {employee_key} {leave_type_code} {total_days}d",
        )


async def seed_holidays(client: httpx.AsyncClient, year: int) -> None:
    """Persist the official holiday calendar for the year."""
    print(f"\n--- Seeding {year} official holidays ---")
    result = await _safe_post(client, f"{BASE_URL}/holidays/official/{year}", None, f"Holidays {year}")
    if result:
        state = "created" if result["created"] else "already present"
        print(f"  {result['total']} holidays {state}")


def _next_monday(today: date, weeks_ahead: int) -> date:
    return today + timedelta(days=(7 - today.weekday()) + 7 * (weeks_ahead - 1))


async def seed_requests(
    client: httpx.AsyncClient,
    employee_ids: dict[str, str],
    leave_type_ids: dict[str, str],
) -> None:
    """Seed one fully approved and one pending leave request."""
    print("\n--- Seeding leave requests ---")
    developer = employee_ids["developer"]
    monday = _next_monday(date.today(), weeks_ahead=3)

    approved = await _safe_post(
        client,
        f"{BASE_URL}/leave-requests",
        {
            "leave_type_id": leave_type_ids["ANNUAL"],
            "start_date": monday.isoformat(),
            "end_date": (monday + timedelta(days=2)).isoformat(),
            "reason": "Family visit",
        },
        "Request: Zeynep 3-day annual leave",
        headers=_as(developer),
    )
    if approved:
        request_id = approved["id"]
        await _safe_post(
            client,
            f"{BASE_URL}/leave-requests/{request_id}/status",
            {"status": "APPROVED_BY_DEPARTMENT_MANAGER", "comments": "Uygundur"},
            "  department manager approval",
            headers=_as(employee_ids["eng_manager"]),
        )
        await _safe_post(
            client,
            f"{BASE_URL}/leave-requests/{request_id}/status",
            {"status": "APPROVED_BY_HR_MANAGER", "comments": "Onaylandı"},
            "  HR approval",
            headers=_as(employee_ids["hr_manager"]),
        )

    saturday_worker = employee_ids["support"]
    await _safe_post(
        client,
        f"{BASE_URL}/leave-requests",
        {
            "leave_type_id": leave_type_ids["ANNUAL"],
            "start_date": (monday + timedelta(days=7)).isoformat(),
            "end_date": (monday + timedelta(days=12)).isoformat(),
            "reason": "Short break",
        },
        "Request: Can Mon-Sat annual leave (PENDING)",
        headers=_as(saturday_worker),
    )


async def main() -> None:
    print("=" * 60)
    print("  LeaveDesk - Development Seed Script")
    print("=" * 60)

    year = date.today().year
    async with httpx.AsyncClient(timeout=30.0) as client:
        # Health check
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            print("Make sure the API is running")
            sys.exit(1)

        title_ids = await seed_titles(client)
        department_ids = await seed_departments(client)
        employee_ids = await seed_employees(client, title_ids, department_ids)
        leave_type_ids = await seed_leave_types(client)
        await seed_holidays(client, year)
        await seed_balances(client, employee_ids, leave_type_ids, year)
        await seed_requests(client, employee_ids, leave_type_ids)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
