from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from httpx import AsyncClient

    from tests.conftest import Org

ADMIN_HEADERS = {"X-User-Id": str(uuid.uuid4()), "X-Role": "admin"}
EMPLOYEE_HEADERS = {"X-User-Id": str(uuid.uuid4()), "X-Role": "employee"}

EXCUSE_PAYLOAD = {
    "code": "EXCUSE",
    "name": "Mazeret İzni",
    "description": "Evlilik, doğum, vefat",
    "max_days_per_year": 5,
}


async def test_create_leave_type_defaults(async_client: AsyncClient) -> None:
    response = await async_client.post("/leave-types", json=EXCUSE_PAYLOAD, headers=ADMIN_HEADERS)
    assert response.status_code == 201
    data = response.json()
    assert data["code"] == "EXCUSE"
    assert data["requires_approval"] is True
    assert data["is_paid"] is True
    assert data["requires_balance"] is True
    assert data["deducts_from_balance"] is True
    assert data["is_active"] is True


async def test_create_leave_type_duplicate_code(async_client: AsyncClient) -> None:
    await async_client.post("/leave-types", json=EXCUSE_PAYLOAD, headers=ADMIN_HEADERS)
    response = await async_client.post(
        "/leave-types",
        json={**EXCUSE_PAYLOAD, "name": "Başka"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 409


async def test_create_leave_type_rejects_lowercase_code(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/leave-types",
        json={**EXCUSE_PAYLOAD, "code": "excuse"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 422


async def test_create_leave_type_requires_admin(async_client: AsyncClient) -> None:
    response = await async_client.post("/leave-types", json=EXCUSE_PAYLOAD, headers=EMPLOYEE_HEADERS)
    assert response.status_code == 403


async def test_update_leave_type_flags(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.put(
        f"/leave-types/{org.sick.id}",
        json={"requires_balance": True, "max_days_per_year": 12},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["requires_balance"] is True
    assert data["max_days_per_year"] == 12
    assert data["code"] == "SICK"
    assert data["name"] == "Hastalık İzni"


async def test_flag_change_applies_to_next_request(async_client: AsyncClient, org: Org) -> None:
    await async_client.put(
        f"/leave-types/{org.sick.id}",
        json={"requires_balance": True},
        headers=ADMIN_HEADERS,
    )

    response = await async_client.post(
        "/leave-requests",
        json={
            "leave_type_id": str(org.sick.id),
            "start_date": "2026-11-09",
            "end_date": "2026-11-10",
        },
        headers={"X-User-Id": str(org.developer.id), "X-Role": "employee"},
    )
    assert response.status_code == 422


async def test_deactivate_and_activate_leave_type(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.post(f"/leave-types/{org.sick.id}/deactivate", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    active = await async_client.get("/leave-types", headers=EMPLOYEE_HEADERS)
    assert "SICK" not in {lt["code"] for lt in active.json()["items"]}

    everything = await async_client.get("/leave-types", params={"include_inactive": True}, headers=EMPLOYEE_HEADERS)
    assert "SICK" in {lt["code"] for lt in everything.json()["items"]}

    response = await async_client.post(f"/leave-types/{org.sick.id}/activate", headers=ADMIN_HEADERS)
    assert response.json()["is_active"] is True


async def test_list_leave_types(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.get("/leave-types", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert {lt["code"] for lt in data["items"]} == {"ANNUAL", "SICK", "UNPAID"}


async def test_get_leave_type(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.get(f"/leave-types/{org.unpaid.id}", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["is_paid"] is False
    assert data["deducts_from_balance"] is False

    missing = await async_client.get(f"/leave-types/{uuid.uuid4()}", headers=EMPLOYEE_HEADERS)
    assert missing.status_code == 404
