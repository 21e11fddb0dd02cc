"""Bulk import of departments and employees from .xlsx spreadsheets.

The first worksheet is read; row 1 holds the headers. Headers are matched
against English and Turkish aliases, ignoring case. A preview parses and
validates without writing; an import writes every valid row in one
transaction and reports the rest.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO
from typing import TYPE_CHECKING, Any
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy import select

from leavedesk.config import get_settings
from leavedesk.exceptions import ValidationError
from leavedesk.models.department import Department
from leavedesk.models.employee import Employee
from leavedesk.models.enums import AuditAction, AuditEntityType
from leavedesk.models.title import Title
from leavedesk.schemas.excel_import import ImportPreviewResponse, ImportResultResponse
from leavedesk.services.audit import model_to_audit_dict, write_audit_log
from leavedesk.services.department import normalize_name

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext

logger = logging.getLogger(__name__)

_DEPARTMENT_COLUMNS: dict[str, tuple[str, ...]] = {
    "name": ("Name", "Departman Adı", "Departman"),
    "description": ("Description", "Açıklama"),
    "code": ("Code", "Kod"),
}

_EMPLOYEE_COLUMNS: dict[str, tuple[str, ...]] = {
    "first_name": ("FirstName", "First Name", "Ad", "İsim"),
    "last_name": ("LastName", "Last Name", "Soyad", "Soyisim"),
    "email": ("Email", "E-posta", "Eposta"),
    "employee_number": ("EmployeeNumber", "Employee Number", "Çalışan No", "Personel No", "Sicil No"),
    "department": ("DepartmentName", "Department", "Departman", "Departman Adı"),
    "title": ("TitleName", "Title", "Pozisyon", "Ünvan"),
    "hire_date": ("HireDate", "Hire Date", "İşe Giriş Tarihi"),
    "works_on_saturday": ("WorksOnSaturday", "Works On Saturday", "Cumartesi Çalışıyor", "Cumartesi"),
}
_REQUIRED_EMPLOYEE_COLUMNS = ("first_name", "last_name", "email", "employee_number")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_DATE_FORMATS = ("%Y-%m-%d", "%d.%m.%Y", "%d/%m/%Y")
_TRUE_VALUES = frozenset({"evet", "e", "yes", "y", "1", "true"})
_FALSE_VALUES = frozenset({"hayır", "hayir", "h", "no", "n", "0", "false", ""})


@dataclass
class Sheet:
    headers: list[str]
    rows: list[tuple[int, list[Any]]] = field(default_factory=list)

    def column(self, aliases: tuple[str, ...]) -> int | None:
        wanted = {normalize_name(a) for a in aliases}
        for index, header in enumerate(self.headers):
            if normalize_name(header) in wanted:
                return index
        return None

    def as_dicts(self) -> list[dict[str, Any]]:
        return [
            {header: _cell_text(values, i) for i, header in enumerate(self.headers) if header}
            for _, values in self.rows
        ]


@dataclass
class _EmployeeRow:
    first_name: str
    last_name: str
    email: str
    employee_number: str
    department_id: Any = None
    title_id: Any = None
    hire_date: date | None = None
    works_on_saturday: bool = False


# ---------------------------------------------------------------------------
# Workbook parsing
# ---------------------------------------------------------------------------


def _cell_text(values: list[Any], index: int | None) -> str:
    if index is None or index >= len(values) or values[index] is None:
        return ""
    value = values[index]
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def read_sheet(content: bytes, max_rows: int | None = None) -> Sheet:
    """Parse the first worksheet of an .xlsx file into headers and non-blank rows."""
    max_rows = max_rows or get_settings().import_max_rows
    try:
        workbook = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as exc:
        raise ValidationError("The uploaded file is not a readable .xlsx workbook") from exc

    try:
        rows = workbook.worksheets[0].iter_rows(values_only=True)
        header_row = next(rows, None)
        headers = [_cell_text(list(header_row), i) for i in range(len(header_row))] if header_row else []
        if not any(headers):
            raise ValidationError("The spreadsheet is empty")

        sheet = Sheet(headers=headers)
        for number, raw in enumerate(rows, start=2):
            values = list(raw)
            if not any(_cell_text(values, i) for i in range(len(values))):
                continue
            if len(sheet.rows) >= max_rows:
                raise ValidationError(f"The spreadsheet has more than {max_rows} data rows")
            sheet.rows.append((number, values))
    finally:
        workbook.close()

    return sheet


def parse_hire_date(value: Any) -> date | None:
    """Accept spreadsheet dates as well as ISO and day-first strings."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognised date '{text}'")


def parse_flag(value: Any) -> bool:
    """Evet/Hayır, Yes/No, 1/0 and True/False, any case."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    text = normalize_name(str(value)) if value is not None else ""
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"unrecognised yes/no value '{value}'")


# ---------------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------------


async def _department_lookup(session: AsyncSession) -> tuple[dict[str, Department], set[str]]:
    result = await session.execute(select(Department))
    departments = list(result.scalars().all())
    by_name = {normalize_name(d.name): d for d in departments}
    codes = {d.code for d in departments if d.code}
    return by_name, codes


async def preview_departments(session: AsyncSession, content: bytes) -> ImportPreviewResponse:
    """Validate a department sheet without writing anything."""
    sheet = read_sheet(content)
    preview = ImportPreviewResponse(is_valid=True, headers=sheet.headers, rows=sheet.as_dicts())

    name_col = sheet.column(_DEPARTMENT_COLUMNS["name"])
    if name_col is None:
        preview.is_valid = False
        preview.validation_errors.append("Missing department name column (Name, Departman Adı or Departman)")
        return preview

    existing, _ = await _department_lookup(session)
    seen: set[str] = set()
    for number, values in sheet.rows:
        name = _cell_text(values, name_col)
        if not name:
            preview.validation_errors.append(f"Row {number}: department name is required")
            continue
        key = normalize_name(name)
        if key in existing or key in seen:
            preview.validation_errors.append(f"Row {number}: department '{name}' already exists")
        seen.add(key)

    preview.is_valid = not preview.validation_errors
    return preview


async def import_departments(
    session: AsyncSession,
    auth: AuthContext,
    content: bytes,
) -> ImportResultResponse:
    """Create a department for every new name in the sheet; existing names are skipped."""
    sheet = read_sheet(content)
    name_col = sheet.column(_DEPARTMENT_COLUMNS["name"])
    if name_col is None:
        raise ValidationError("Missing department name column (Name, Departman Adı or Departman)")
    description_col = sheet.column(_DEPARTMENT_COLUMNS["description"])
    code_col = sheet.column(_DEPARTMENT_COLUMNS["code"])

    existing, codes = await _department_lookup(session)
    result = ImportResultResponse()

    for number, values in sheet.rows:
        name = _cell_text(values, name_col)
        code = _cell_text(values, code_col) or None
        if not name:
            result.errors.append(f"Row {number}: department name is required")
            continue
        if normalize_name(name) in existing:
            result.errors.append(f"Row {number}: department '{name}' already exists, skipped")
            continue
        if code is not None and code in codes:
            result.errors.append(f"Row {number}: department code '{code}' is already in use")
            continue

        department = Department(
            name=name,
            code=code,
            description=_cell_text(values, description_col) or None,
        )
        session.add(department)
        await session.flush()
        await write_audit_log(
            session,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.DEPARTMENT,
            entity_id=department.id,
            action=AuditAction.IMPORT,
            after_json=model_to_audit_dict(department),
        )

        existing[normalize_name(name)] = department
        if code is not None:
            codes.add(code)
        result.messages.append(f"Department '{name}' created")

    await session.commit()
    result.success_count = len(result.messages)
    result.error_count = len(result.errors)
    logger.info("Department import: %d created, %d rejected", result.success_count, result.error_count)
    return result


# ---------------------------------------------------------------------------
# Employees
# ---------------------------------------------------------------------------


class _EmployeeValidator:
    """Validates employee rows against the directory and against earlier rows."""

    def __init__(
        self,
        sheet: Sheet,
        departments: dict[str, Department],
        titles: dict[str, Title],
        emails: set[str],
        numbers: set[str],
    ) -> None:
        self.columns = {key: sheet.column(aliases) for key, aliases in _EMPLOYEE_COLUMNS.items()}
        self.departments = departments
        self.titles = titles
        self.emails = emails
        self.numbers = numbers

    def missing_columns(self) -> list[str]:
        return [
            f"{key} ({', '.join(_EMPLOYEE_COLUMNS[key])})"
            for key in _REQUIRED_EMPLOYEE_COLUMNS
            if self.columns[key] is None
        ]

    def validate(self, number: int, values: list[Any]) -> tuple[_EmployeeRow | None, list[str]]:
        text = {key: _cell_text(values, index) for key, index in self.columns.items()}
        errors = [
            f"Row {number}: {key.replace('_', ' ')} is required" for key in _REQUIRED_EMPLOYEE_COLUMNS if not text[key]
        ]

        email = text["email"]
        if email and not _EMAIL_RE.match(email):
            errors.append(f"Row {number}: invalid email '{email}'")
        elif email and email.lower() in self.emails:
            errors.append(f"Row {number}: email '{email}' is already in use")
        if text["employee_number"] and text["employee_number"] in self.numbers:
            errors.append(f"Row {number}: employee number '{text['employee_number']}' is already in use")

        department = None
        if text["department"]:
            department = self.departments.get(normalize_name(text["department"]))
            if department is None:
                errors.append(f"Row {number}: department '{text['department']}' not found")
        title = None
        if text["title"]:
            title = self.titles.get(normalize_name(text["title"]))
            if title is None:
                errors.append(f"Row {number}: title '{text['title']}' not found")

        hire_date = None
        hire_col = self.columns["hire_date"]
        try:
            hire_date = parse_hire_date(values[hire_col] if hire_col is not None and hire_col < len(values) else None)
        except ValueError as exc:
            errors.append(f"Row {number}: {exc}")
        works_on_saturday = False
        saturday_col = self.columns["works_on_saturday"]
        try:
            works_on_saturday = parse_flag(
                values[saturday_col] if saturday_col is not None and saturday_col < len(values) else None
            )
        except ValueError as exc:
            errors.append(f"Row {number}: {exc}")

        if errors:
            return None, errors

        self.emails.add(email.lower())
        self.numbers.add(text["employee_number"])
        return (
            _EmployeeRow(
                first_name=text["first_name"],
                last_name=text["last_name"],
                email=email,
                employee_number=text["employee_number"],
                department_id=department.id if department else None,
                title_id=title.id if title else None,
                hire_date=hire_date,
                works_on_saturday=works_on_saturday,
            ),
            [],
        )


async def _employee_validator(session: AsyncSession, sheet: Sheet) -> _EmployeeValidator:
    departments, _ = await _department_lookup(session)
    title_result = await session.execute(select(Title))
    titles = {normalize_name(t.name): t for t in title_result.scalars().all()}
    identity_result = await session.execute(select(Employee.email, Employee.employee_number))
    emails: set[str] = set()
    numbers: set[str] = set()
    for email, employee_number in identity_result.all():
        emails.add(email.lower())
        numbers.add(employee_number)
    return _EmployeeValidator(sheet, departments, titles, emails, numbers)


async def preview_employees(session: AsyncSession, content: bytes) -> ImportPreviewResponse:
    """Validate an employee sheet without writing anything."""
    sheet = read_sheet(content)
    preview = ImportPreviewResponse(is_valid=True, headers=sheet.headers, rows=sheet.as_dicts())
    validator = await _employee_validator(session, sheet)

    missing = validator.missing_columns()
    if missing:
        preview.is_valid = False
        preview.validation_errors.append(f"Missing columns: {', '.join(missing)}")
        return preview

    for number, values in sheet.rows:
        _, errors = validator.validate(number, values)
        preview.validation_errors.extend(errors)

    preview.is_valid = not preview.validation_errors
    return preview


async def import_employees(
    session: AsyncSession,
    auth: AuthContext,
    content: bytes,
) -> ImportResultResponse:
    """Create an employee for every valid row; invalid rows are reported, not written."""
    sheet = read_sheet(content)
    validator = await _employee_validator(session, sheet)
    missing = validator.missing_columns()
    if missing:
        raise ValidationError(f"Missing columns: {', '.join(missing)}")

    result = ImportResultResponse()
    for number, values in sheet.rows:
        row, errors = validator.validate(number, values)
        if row is None:
            result.errors.extend(errors)
            result.error_count += 1
            continue

        employee = Employee(
            first_name=row.first_name,
            last_name=row.last_name,
            email=row.email,
            employee_number=row.employee_number,
            department_id=row.department_id,
            title_id=row.title_id,
            hire_date=row.hire_date,
            works_on_saturday=row.works_on_saturday,
        )
        session.add(employee)
        await session.flush()
        await write_audit_log(
            session,
            actor_id=auth.user_id,
            entity_type=AuditEntityType.EMPLOYEE,
            entity_id=employee.id,
            action=AuditAction.IMPORT,
            after_json=model_to_audit_dict(employee),
        )
        result.success_count += 1
        result.messages.append(f"Employee '{employee.full_name}' created")

    await session.commit()
    logger.info("Employee import: %d created, %d rejected", result.success_count, result.error_count)
    return result
