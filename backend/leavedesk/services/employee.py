from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.exceptions import NotFoundError, StateConflictError
from leavedesk.models.department import Department
from leavedesk.models.employee import Employee
from leavedesk.models.enums import AuditAction, AuditEntityType
from leavedesk.models.title import Title
from leavedesk.schemas.employee import EmployeeListResponse, EmployeeResponse
from leavedesk.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.employee import CreateEmployeeRequest, UpdateEmployeeRequest


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_employee_response(employee: Employee) -> EmployeeResponse:
    return EmployeeResponse(
        id=employee.id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        full_name=employee.full_name,
        email=employee.email,
        employee_number=employee.employee_number,
        department_id=employee.department_id,
        title_id=employee.title_id,
        manager_id=employee.manager_id,
        hire_date=employee.hire_date,
        works_on_saturday=employee.works_on_saturday,
        is_active=employee.is_active,
        is_system=employee.is_system,
        created_at=employee.created_at,
    )


async def _check_references(
    session: AsyncSession,
    department_id: uuid.UUID | None,
    title_id: uuid.UUID | None,
    manager_id: uuid.UUID | None,
) -> None:
    """Raise 404 for any directory reference that does not exist."""
    if department_id is not None and await session.get(Department, department_id) is None:
        raise NotFoundError("Department not found")
    if title_id is not None and await session.get(Title, title_id) is None:
        raise NotFoundError("Title not found")
    if manager_id is not None and await session.get(Employee, manager_id) is None:
        raise NotFoundError("Manager not found")


async def _check_unique_identity(
    session: AsyncSession,
    email: str | None,
    employee_number: str | None,
    exclude_id: uuid.UUID | None = None,
) -> None:
    clauses = []
    if email is not None:
        clauses.append(func.lower(col(Employee.email)) == email.lower())
    if employee_number is not None:
        clauses.append(col(Employee.employee_number) == employee_number)
    if not clauses:
        return

    query = select(Employee).where(or_(*clauses))
    if exclude_id is not None:
        query = query.where(col(Employee.id) != exclude_id)
    result = await session.execute(query)
    if result.scalars().first() is not None:
        raise StateConflictError("An employee with this email or employee number already exists")


async def _set_active(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
    active: bool,
) -> EmployeeResponse:
    employee = await get_employee(session, employee_id)
    if employee.is_system and not active:
        raise StateConflictError("System employees cannot be deactivated")

    before = model_to_audit_dict(employee)
    employee.is_active = active
    employee.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee.id,
        action=AuditAction.ACTIVATE if active else AuditAction.DEACTIVATE,
        before_json=before,
        after_json=model_to_audit_dict(employee),
    )

    await session.commit()
    await session.refresh(employee)
    return _build_employee_response(employee)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def get_employee(session: AsyncSession, employee_id: uuid.UUID) -> Employee:
    """Get an employee or raise 404."""
    employee = await session.get(Employee, employee_id)
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def get_employee_response(session: AsyncSession, employee_id: uuid.UUID) -> EmployeeResponse:
    return _build_employee_response(await get_employee(session, employee_id))


async def list_employees(
    session: AsyncSession,
    department_id: uuid.UUID | None = None,
    include_inactive: bool = False,
    offset: int = 0,
    limit: int = 50,
) -> EmployeeListResponse:
    """List employees ordered by name, optionally scoped to a department."""
    base_filters = []
    if department_id is not None:
        base_filters.append(col(Employee.department_id) == department_id)
    if not include_inactive:
        base_filters.append(col(Employee.is_active).is_(True))

    count_result = await session.execute(select(func.count()).select_from(Employee).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(Employee)
        .where(*base_filters)
        .order_by(col(Employee.first_name), col(Employee.last_name))
        .offset(offset)
        .limit(limit)
    )
    employees = list(result.scalars().all())
    return EmployeeListResponse(items=[_build_employee_response(e) for e in employees], total=total)


async def list_subordinates(session: AsyncSession, employee_id: uuid.UUID) -> EmployeeListResponse:
    """Active employees whose manager reference points at ``employee_id``."""
    await get_employee(session, employee_id)
    result = await session.execute(
        select(Employee)
        .where(col(Employee.manager_id) == employee_id, col(Employee.is_active).is_(True))
        .order_by(col(Employee.first_name), col(Employee.last_name))
    )
    employees = list(result.scalars().all())
    return EmployeeListResponse(items=[_build_employee_response(e) for e in employees], total=len(employees))


async def create_employee(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateEmployeeRequest,
) -> EmployeeResponse:
    """Create an employee record."""
    await _check_references(session, payload.department_id, payload.title_id, payload.manager_id)
    await _check_unique_identity(session, payload.email, payload.employee_number)

    employee = Employee(
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=payload.email.strip(),
        employee_number=payload.employee_number.strip(),
        department_id=payload.department_id,
        title_id=payload.title_id,
        manager_id=payload.manager_id,
        hire_date=payload.hire_date,
        works_on_saturday=payload.works_on_saturday,
    )
    session.add(employee)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise StateConflictError("An employee with this email or employee number already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(employee),
    )

    await session.commit()
    await session.refresh(employee)
    return _build_employee_response(employee)


async def update_employee(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
    payload: UpdateEmployeeRequest,
) -> EmployeeResponse:
    """Update an employee. Title and department changes alter approval authority immediately."""
    employee = await get_employee(session, employee_id)
    changes = payload.model_dump(exclude_unset=True)

    if changes.get("manager_id") == employee.id:
        raise StateConflictError("An employee cannot manage themselves")
    await _check_references(
        session,
        changes.get("department_id"),
        changes.get("title_id"),
        changes.get("manager_id"),
    )
    await _check_unique_identity(
        session,
        changes.get("email"),
        changes.get("employee_number"),
        exclude_id=employee.id,
    )

    before = model_to_audit_dict(employee)
    for field, value in changes.items():
        # Identity and flag columns are not nullable; reference columns may be cleared.
        if value is None and field not in ("department_id", "title_id", "manager_id", "hire_date"):
            continue
        setattr(employee, field, value.strip() if isinstance(value, str) else value)
    employee.updated_at = datetime.now(UTC)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise StateConflictError("An employee with this email or employee number already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(employee),
    )

    await session.commit()
    await session.refresh(employee)
    return _build_employee_response(employee)


async def activate_employee(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
) -> EmployeeResponse:
    return await _set_active(session, auth, employee_id, active=True)


async def deactivate_employee(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
) -> EmployeeResponse:
    """Soft-deactivate an employee. Leave history stays attached."""
    return await _set_active(session, auth, employee_id, active=False)
