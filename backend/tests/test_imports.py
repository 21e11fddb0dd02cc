from __future__ import annotations

import uuid
from datetime import date, datetime
from io import BytesIO
from typing import TYPE_CHECKING, Any

import pytest
from openpyxl import Workbook
from sqlalchemy import select
from sqlmodel import col

from leavedesk.exceptions import ValidationError
from leavedesk.models.audit import AuditLog
from leavedesk.models.employee import Employee
from leavedesk.services.excel_import import parse_flag, parse_hire_date, read_sheet

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from tests.conftest import Org

ADMIN_HEADERS = {"X-User-Id": str(uuid.uuid4()), "X-Role": "admin"}
EMPLOYEE_HEADERS = {"X-User-Id": str(uuid.uuid4()), "X-Role": "employee"}

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

EMPLOYEE_HEADER_ROW = ["Ad", "Soyad", "E-posta", "Sicil No", "Departman", "Ünvan", "İşe Giriş Tarihi", "Cumartesi"]


def _workbook(*rows: list[Any]) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _upload(content: bytes, filename: str = "import.xlsx") -> dict[str, tuple[str, bytes, str]]:
    return {"file": (filename, content, XLSX_TYPE)}


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def test_parse_hire_date_formats() -> None:
    assert parse_hire_date(None) is None
    assert parse_hire_date("") is None
    assert parse_hire_date(datetime(2023, 3, 15, 0, 0)) == date(2023, 3, 15)
    assert parse_hire_date(date(2023, 3, 15)) == date(2023, 3, 15)
    assert parse_hire_date("2023-03-15") == date(2023, 3, 15)
    assert parse_hire_date("15.03.2023") == date(2023, 3, 15)
    assert parse_hire_date("15/03/2023") == date(2023, 3, 15)


def test_parse_hire_date_rejects_garbage() -> None:
    with pytest.raises(ValueError, match="unrecognised date"):
        parse_hire_date("next spring")


def test_parse_flag_values() -> None:
    assert parse_flag("Evet") is True
    assert parse_flag("yes") is True
    assert parse_flag(1) is True
    assert parse_flag(True) is True
    assert parse_flag("Hayır") is False
    assert parse_flag("No") is False
    assert parse_flag(None) is False
    assert parse_flag("") is False


def test_parse_flag_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="yes/no"):
        parse_flag("belki")


def test_read_sheet_skips_blank_rows() -> None:
    content = _workbook(["Departman", "Açıklama"], ["Finans", "Para"], [None, None], ["Hukuk", None])
    sheet = read_sheet(content)
    assert sheet.headers == ["Departman", "Açıklama"]
    assert [number for number, _ in sheet.rows] == [2, 4]
    assert sheet.as_dicts() == [
        {"Departman": "Finans", "Açıklama": "Para"},
        {"Departman": "Hukuk", "Açıklama": ""},
    ]


def test_read_sheet_enforces_row_limit() -> None:
    content = _workbook(["Departman"], ["A"], ["B"], ["C"])
    with pytest.raises(ValidationError, match="more than 2"):
        read_sheet(content, max_rows=2)


def test_read_sheet_rejects_non_workbook() -> None:
    with pytest.raises(ValidationError):
        read_sheet(b"name,code\nFinans,FIN\n")


def test_read_sheet_rejects_empty_sheet() -> None:
    with pytest.raises(ValidationError, match="empty"):
        read_sheet(_workbook())


# ---------------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------------


async def test_preview_departments(async_client: AsyncClient, org: Org) -> None:
    content = _workbook(["Departman Adı", "Açıklama"], ["Finans", "Para"], ["İNSAN KAYNAKLARI", None], [None, "x"])

    response = await async_client.post("/imports/departments/preview", files=_upload(content), headers=ADMIN_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert data["headers"] == ["Departman Adı", "Açıklama"]
    assert len(data["rows"]) == 3
    assert data["validation_errors"] == [
        "Row 3: department 'İNSAN KAYNAKLARI' already exists",
        "Row 4: department name is required",
    ]

    listing = await async_client.get("/departments", headers=EMPLOYEE_HEADERS)
    assert listing.json()["total"] == 2


async def test_preview_departments_missing_name_column(async_client: AsyncClient) -> None:
    content = _workbook(["Açıklama"], ["Para"])

    response = await async_client.post("/imports/departments/preview", files=_upload(content), headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json()["is_valid"] is False


async def test_import_departments(async_client: AsyncClient, db_session: AsyncSession, org: Org) -> None:
    content = _workbook(
        ["Name", "Description", "Code"],
        ["Finans", "Para", "FIN"],
        ["Yazılım", None, None],
        ["Hukuk", None, "HR"],
        ["Satış", None, None],
    )

    response = await async_client.post("/imports/departments", files=_upload(content), headers=ADMIN_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["success_count"] == 2
    assert data["error_count"] == 2
    assert data["messages"] == ["Department 'Finans' created", "Department 'Satış' created"]

    listing = await async_client.get("/departments", headers=EMPLOYEE_HEADERS)
    assert {d["name"] for d in listing.json()["items"]} == {"İnsan Kaynakları", "Yazılım", "Finans", "Satış"}

    result = await db_session.execute(select(AuditLog).where(col(AuditLog.action) == "IMPORT"))
    assert len(result.scalars().all()) == 2


async def test_import_rejects_non_xlsx_upload(async_client: AsyncClient) -> None:
    response = await async_client.post(
        "/imports/departments",
        files=_upload(b"Name\nFinans\n", filename="departments.csv"),
        headers=ADMIN_HEADERS,
    )
    assert response.status_code == 400


async def test_import_rejects_empty_upload(async_client: AsyncClient) -> None:
    response = await async_client.post("/imports/departments", files=_upload(b""), headers=ADMIN_HEADERS)
    assert response.status_code == 400


async def test_import_requires_admin(async_client: AsyncClient) -> None:
    content = _workbook(["Name"], ["Finans"])
    response = await async_client.post("/imports/departments", files=_upload(content), headers=EMPLOYEE_HEADERS)
    assert response.status_code == 403


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


async def test_preview_employees(async_client: AsyncClient, org: Org) -> None:
    content = _workbook(
        EMPLOYEE_HEADER_ROW,
        ["Ali", "Veli", "ali.veli@example.com", "E-9001", "yazılım", "UZMAN", "01.02.2024", "Evet"],
        ["Ayşe", "Kara", "bad-email", "E-9002", "Pazarlama", None, None, None],
        ["Can", "Ak", "ali.veli@example.com", "E-9001", None, None, "sometime", "belki"],
    )

    response = await async_client.post("/imports/employees/preview", files=_upload(content), headers=ADMIN_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    errors = data["validation_errors"]
    assert "Row 3: invalid email 'bad-email'" in errors
    assert "Row 3: department 'Pazarlama' not found" in errors
    assert "Row 4: email 'ali.veli@example.com' is already in use" in errors
    assert "Row 4: employee number 'E-9001' is already in use" in errors
    assert not any(e.startswith("Row 2:") for e in errors)


async def test_preview_employees_missing_columns(async_client: AsyncClient) -> None:
    content = _workbook(["Ad", "Soyad"], ["Ali", "Veli"])

    response = await async_client.post("/imports/employees/preview", files=_upload(content), headers=ADMIN_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["is_valid"] is False
    assert data["validation_errors"][0].startswith("Missing columns: email")


async def test_import_employees(async_client: AsyncClient, db_session: AsyncSession, org: Org) -> None:
    content = _workbook(
        EMPLOYEE_HEADER_ROW,
        ["Ali", "Veli", "ali.veli@example.com", "E-9001", "Yazılım", "Uzman", datetime(2024, 2, 1), "Evet"],
        ["Ayşe", "Kara", org.developer.email.upper(), "E-9002", None, None, None, None],
        ["Deniz", "Su", "deniz.su@example.com", 9003, "İnsan Kaynakları", None, "2024-05-06", "Hayır"],
    )

    response = await async_client.post("/imports/employees", files=_upload(content), headers=ADMIN_HEADERS)
    assert response.status_code == 200
    data = response.json()
    assert data["success_count"] == 2
    assert data["error_count"] == 1
    assert data["messages"] == ["Employee 'Ali Veli' created", "Employee 'Deniz Su' created"]

    result = await db_session.execute(select(Employee).where(col(Employee.email) == "ali.veli@example.com"))
    ali = result.scalar_one()
    assert ali.department_id == org.engineering.id
    assert ali.title_id == org.staff_title.id
    assert ali.hire_date == date(2024, 2, 1)
    assert ali.works_on_saturday is True

    result = await db_session.execute(select(Employee).where(col(Employee.email) == "deniz.su@example.com"))
    deniz = result.scalar_one()
    assert deniz.employee_number == "9003"
    assert deniz.department_id == org.hr.id
    assert deniz.works_on_saturday is False


async def test_import_employees_missing_columns(async_client: AsyncClient) -> None:
    content = _workbook(["Ad", "Soyad", "E-posta"], ["Ali", "Veli", "ali@example.com"])

    response = await async_client.post("/imports/employees", files=_upload(content), headers=ADMIN_HEADERS)
    assert response.status_code == 400
    assert "employee_number" in response.json()["detail"]
