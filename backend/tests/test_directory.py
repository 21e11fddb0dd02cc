from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leavedesk.models.audit import AuditLog
from leavedesk.models.department import Department
from leavedesk.services.department import normalize_name

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.models.employee import Employee
    from tests.conftest import Org

    MakeEmployee = Callable[..., Awaitable[Employee]]

ADMIN_HEADERS = {"X-User-Id": str(uuid.uuid4()), "X-Role": "admin"}
EMPLOYEE_HEADERS = {"X-User-Id": str(uuid.uuid4()), "X-Role": "employee"}


def _employee_payload(**overrides: object) -> dict:
    payload: dict = {
        "first_name": "Burak",
        "last_name": "Şahin",
        "email": "burak.sahin@example.com",
        "employee_number": "E-1001",
    }
    payload.update(overrides)
    return payload


# ---------------------------------------------------------------------------
# Name normalisation
# ---------------------------------------------------------------------------


def test_normalize_name_turkish_case() -> None:
    assert normalize_name("İNSAN KAYNAKLARI") == normalize_name("İnsan Kaynakları")
    assert normalize_name("  Bilgi İşlem ") == "bilgi işlem"
    assert normalize_name("IŞIK") == "ışık"


# ---------------------------------------------------------------------------
# Titles
# ---------------------------------------------------------------------------


async def test_create_title(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/titles",
        json={"name": "Müdür", "level": "MANAGER"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["level"] == "MANAGER"
    assert data["is_manager_class"] is True


async def test_staff_title_is_not_manager_class(async_client: AsyncClient) -> None:
    response = await async_client.post("/titles", json={"name": "Stajyer"}, headers=ADMIN_HEADERS)
    assert response.status_code == 201
    assert response.json()["level"] == "STAFF"
    assert response.json()["is_manager_class"] is False


async def test_create_duplicate_title(async_client: AsyncClient) -> None:
    await async_client.post("/titles", json={"name": "Müdür"}, headers=ADMIN_HEADERS)
    response = await async_client.post("/titles", json={"name": "Müdür"}, headers=ADMIN_HEADERS)
    assert response.status_code == 409


async def test_create_title_requires_admin(async_client: AsyncClient) -> None:
    response = await async_client.post("/titles", json={"name": "Müdür"}, headers=EMPLOYEE_HEADERS)
    assert response.status_code == 403


async def test_promoting_title_grants_authority(async_client: AsyncClient, org: Org) -> None:
    before = await async_client.get(f"/employees/{org.developer.id}/authority", headers=EMPLOYEE_HEADERS)
    assert before.json()["is_department_manager"] is False

    # Demote the manager title, then promote the staff title.
    demote = await async_client.put(
        f"/titles/{org.manager_title.id}", json={"level": "STAFF"}, headers=ADMIN_HEADERS
    )
    assert demote.status_code == 200
    assert demote.json()["is_manager_class"] is False
    promote = await async_client.put(
        f"/titles/{org.staff_title.id}", json={"level": "DIRECTOR"}, headers=ADMIN_HEADERS
    )
    assert promote.status_code == 200

    after = await async_client.get(f"/employees/{org.developer.id}/authority", headers=EMPLOYEE_HEADERS)
    assert after.json()["is_department_manager"] is True


async def test_list_titles(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.get("/titles", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200
    assert response.json()["total"] == 3


# ---------------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------------


async def test_create_department(async_client: AsyncClient, db_session: AsyncSession) -> None:
    response = await async_client.post(
        "/departments",
        json={"name": "Finans", "code": "FIN", "description": "Muhasebe ve finans"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Finans"
    assert data["employee_count"] == 0
    assert data["is_active"] is True

    result = await db_session.execute(select(AuditLog).where(col(AuditLog.entity_id) == uuid.UUID(data["id"])))
    assert [e.action for e in result.scalars().all()] == ["CREATE"]


async def test_create_department_duplicate_name_ignores_case(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.post(
        "/departments",
        json={"name": "İNSAN KAYNAKLARI"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 409


async def test_create_department_duplicate_code(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.post(
        "/departments",
        json={"name": "Mühendislik", "code": "ENG"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 409


async def test_department_employee_count(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.get(f"/departments/{org.engineering.id}", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200
    assert response.json()["employee_count"] == 3


async def test_department_members(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.get(f"/departments/{org.hr.id}/employees", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == str(org.hr_manager.id)


async def test_deactivate_department_hides_it(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.post(f"/departments/{org.engineering.id}/deactivate", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    active = await async_client.get("/departments", headers=EMPLOYEE_HEADERS)
    assert [d["code"] for d in active.json()["items"]] == ["HR"]

    everything = await async_client.get("/departments", params={"include_inactive": True}, headers=EMPLOYEE_HEADERS)
    assert everything.json()["total"] == 2

    reactivated = await async_client.post(f"/departments/{org.engineering.id}/activate", headers=ADMIN_HEADERS)
    assert reactivated.json()["is_active"] is True


async def test_system_department_is_protected(async_client: AsyncClient, db_session: AsyncSession) -> None:
    system = Department(name="Yönetim", code="SYS", is_system=True)
    db_session.add(system)
    await db_session.commit()
    system_id = system.id

    deactivate = await async_client.post(f"/departments/{system_id}/deactivate", headers=ADMIN_HEADERS)
    assert deactivate.status_code == 409

    rename = await async_client.put(f"/departments/{system_id}", json={"name": "Başka"}, headers=ADMIN_HEADERS)
    assert rename.status_code == 409

    describe = await async_client.put(
        f"/departments/{system_id}", json={"description": "Üst yönetim"}, headers=ADMIN_HEADERS
    )
    assert describe.status_code == 200
    assert describe.json()["description"] == "Üst yönetim"


async def test_update_department(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.put(
        f"/departments/{org.engineering.id}",
        json={"name": "Yazılım Geliştirme", "manager_id": str(org.eng_manager.id)},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Yazılım Geliştirme"
    assert data["manager_id"] == str(org.eng_manager.id)
    assert data["code"] == "ENG"


async def test_get_missing_department(async_client: AsyncClient) -> None:
    response = await async_client.get(f"/departments/{uuid.uuid4()}", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 404


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


async def test_create_employee(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.post(
        "/employees",
        json=_employee_payload(
            department_id=str(org.engineering.id),
            title_id=str(org.staff_title.id),
            hire_date="2024-02-01",
            works_on_saturday=True,
        ),
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["full_name"] == "Burak Şahin"
    assert data["department_id"] == str(org.engineering.id)
    assert data["works_on_saturday"] is True
    assert data["is_active"] is True
    assert data["is_system"] is False


async def test_create_employee_duplicate_email(async_client: AsyncClient, org: Org) -> None:
    first = await async_client.post("/employees", json=_employee_payload(), headers=ADMIN_HEADERS)
    assert first.status_code == 201

    response = await async_client.post(
        "/employees",
        json=_employee_payload(email="BURAK.SAHIN@example.com", employee_number="E-2002"),
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 409


async def test_create_employee_duplicate_number(async_client: AsyncClient, org: Org) -> None:
    await async_client.post("/employees", json=_employee_payload(), headers=ADMIN_HEADERS)

    response = await async_client.post(
        "/employees",
        json=_employee_payload(email="other@example.com"),
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 409


async def test_create_employee_unknown_department(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/employees",
        json=_employee_payload(department_id=str(uuid.uuid4())),
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 404


async def test_create_employee_invalid_email(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/employees",
        json=_employee_payload(email="not-an-email"),
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 422


async def test_employee_cannot_manage_themselves(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.put(
        f"/employees/{org.developer.id}",
        json={"manager_id": str(org.developer.id)},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 409


async def test_update_employee_moves_department(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.put(
        f"/employees/{org.developer.id}",
        json={"department_id": str(org.hr.id), "last_name": "Kaya"},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["department_id"] == str(org.hr.id)
    assert data["full_name"] == "Zeynep Kaya"
    assert data["email"] == org.developer.email


async def test_update_employee_clears_title(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.put(
        f"/employees/{org.eng_manager.id}",
        json={"title_id": None},
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 200
    assert response.json()["title_id"] is None

    authority = await async_client.get(f"/employees/{org.eng_manager.id}/authority", headers=EMPLOYEE_HEADERS)
    assert authority.json()["is_department_manager"] is False


async def test_subordinates(async_client: AsyncClient, org: Org) -> None:
    await async_client.put(
        f"/employees/{org.developer.id}",
        json={"manager_id": str(org.eng_manager.id)},
        headers=ADMIN_HEADERS,
    )

    response = await async_client.get(f"/employees/{org.eng_manager.id}/subordinates", headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["id"] == str(org.developer.id)


async def test_deactivate_employee(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.post(f"/employees/{org.developer.id}/deactivate", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    listing = await async_client.get(
        "/employees", params={"department_id": str(org.engineering.id)}, headers=EMPLOYEE_HEADERS
    )
    assert str(org.developer.id) not in {e["id"] for e in listing.json()["items"]}

    everyone = await async_client.get(
        "/employees",
        params={"department_id": str(org.engineering.id), "include_inactive": True},
        headers=EMPLOYEE_HEADERS,
    )
    assert everyone.json()["total"] == 3


async def test_deactivated_manager_loses_authority(async_client: AsyncClient, org: Org) -> None:
    await async_client.post(f"/employees/{org.eng_manager.id}/deactivate", headers=ADMIN_HEADERS)

    response = await async_client.post(
        "/leave-requests",
        json={
            "leave_type_id": str(org.annual.id),
            "start_date": "2026-11-09",
            "end_date": "2026-11-13",
        },
        headers={"X-User-Id": str(org.developer.id), "X-Role": "employee"},
    )
    assert response.status_code == 422


async def test_system_employee_cannot_be_deactivated(
    async_client: AsyncClient, org: Org, make_employee: MakeEmployee
) -> None:
    system = await make_employee("Sistem", None, None, is_system=True)

    response = await async_client.post(f"/employees/{system.id}/deactivate", headers=ADMIN_HEADERS)
    assert response.status_code == 409


async def test_list_employees_pagination(async_client: AsyncClient, org: Org) -> None:
    response = await async_client.get("/employees", params={"limit": 2}, headers=EMPLOYEE_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 4
    assert len(data["items"]) == 2
