from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.exceptions import NotFoundError, StateConflictError
from leavedesk.models.department import Department
from leavedesk.models.employee import Employee
from leavedesk.models.enums import AuditAction, AuditEntityType
from leavedesk.schemas.department import DepartmentListResponse, DepartmentResponse
from leavedesk.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.department import CreateDepartmentRequest, UpdateDepartmentRequest

_TURKISH_CASEFOLD = str.maketrans({"I": "ı", "İ": "i"})


def normalize_name(value: str) -> str:
    """Trim and lower-case a display name with Turkish dotted/dotless i rules."""
    return value.strip().translate(_TURKISH_CASEFOLD).lower()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


async def _count_active_members(session: AsyncSession, department_id: uuid.UUID) -> int:
    result = await session.execute(
        select(func.count())
        .select_from(Employee)
        .where(col(Employee.department_id) == department_id, col(Employee.is_active).is_(True))
    )
    return int(result.scalar_one())


async def _build_department_response(session: AsyncSession, department: Department) -> DepartmentResponse:
    return DepartmentResponse(
        id=department.id,
        name=department.name,
        code=department.code,
        description=department.description,
        manager_id=department.manager_id,
        employee_count=await _count_active_members(session, department.id),
        is_active=department.is_active,
        is_system=department.is_system,
        created_at=department.created_at,
    )


async def _ensure_unique_name(
    session: AsyncSession,
    name: str,
    exclude_id: uuid.UUID | None = None,
) -> None:
    existing = await find_department_by_name(session, name)
    if existing is not None and existing.id != exclude_id:
        raise StateConflictError(f"Department '{name.strip()}' already exists")


async def _set_active(
    session: AsyncSession,
    auth: AuthContext,
    department_id: uuid.UUID,
    active: bool,
) -> DepartmentResponse:
    department = await get_department(session, department_id)
    if department.is_system and not active:
        raise StateConflictError("System departments cannot be deactivated")

    before = model_to_audit_dict(department)
    department.is_active = active
    department.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.DEPARTMENT,
        entity_id=department.id,
        action=AuditAction.ACTIVATE if active else AuditAction.DEACTIVATE,
        before_json=before,
        after_json=model_to_audit_dict(department),
    )

    await session.commit()
    await session.refresh(department)
    return await _build_department_response(session, department)


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


async def get_department(session: AsyncSession, department_id: uuid.UUID) -> Department:
    """Get a department or raise 404."""
    department = await session.get(Department, department_id)
    if department is None:
        raise NotFoundError("Department not found")
    return department


async def find_department_by_name(session: AsyncSession, name: str) -> Department | None:
    """Find a department whose name matches ``name`` ignoring case (Turkish-aware)."""
    wanted = normalize_name(name)
    result = await session.execute(select(Department))
    for department in result.scalars().all():
        if normalize_name(department.name) == wanted:
            return department
    return None


async def find_department_by_code(session: AsyncSession, code: str) -> Department | None:
    result = await session.execute(select(Department).where(col(Department.code) == code))
    return result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def get_department_response(session: AsyncSession, department_id: uuid.UUID) -> DepartmentResponse:
    return await _build_department_response(session, await get_department(session, department_id))


async def list_departments(session: AsyncSession, include_inactive: bool = False) -> DepartmentListResponse:
    """List departments ordered by name."""
    query = select(Department).order_by(col(Department.name))
    if not include_inactive:
        query = query.where(col(Department.is_active).is_(True))
    result = await session.execute(query)
    departments = list(result.scalars().all())
    items = [await _build_department_response(session, d) for d in departments]
    return DepartmentListResponse(items=items, total=len(items))


async def create_department(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateDepartmentRequest,
) -> DepartmentResponse:
    """Create a department."""
    await _ensure_unique_name(session, payload.name)

    department = Department(
        name=payload.name.strip(),
        code=payload.code,
        description=payload.description,
        manager_id=payload.manager_id,
    )
    session.add(department)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise StateConflictError("A department with this code already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.DEPARTMENT,
        entity_id=department.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(department),
    )

    await session.commit()
    await session.refresh(department)
    return await _build_department_response(session, department)


async def update_department(
    session: AsyncSession,
    auth: AuthContext,
    department_id: uuid.UUID,
    payload: UpdateDepartmentRequest,
) -> DepartmentResponse:
    """Update a department. System departments keep their name and code."""
    department = await get_department(session, department_id)
    changes = payload.model_dump(exclude_unset=True)

    if department.is_system and (
        ("name" in changes and changes["name"] != department.name)
        or ("code" in changes and changes["code"] != department.code)
    ):
        raise StateConflictError("System departments cannot be renamed")
    if changes.get("name"):
        await _ensure_unique_name(session, changes["name"], exclude_id=department.id)

    before = model_to_audit_dict(department)
    for field, value in changes.items():
        if field == "name":
            if value is None:
                continue
            value = value.strip()
        setattr(department, field, value)
    department.updated_at = datetime.now(UTC)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise StateConflictError("A department with this code already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.DEPARTMENT,
        entity_id=department.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(department),
    )

    await session.commit()
    await session.refresh(department)
    return await _build_department_response(session, department)


async def activate_department(
    session: AsyncSession,
    auth: AuthContext,
    department_id: uuid.UUID,
) -> DepartmentResponse:
    return await _set_active(session, auth, department_id, active=True)


async def deactivate_department(
    session: AsyncSession,
    auth: AuthContext,
    department_id: uuid.UUID,
) -> DepartmentResponse:
    """Soft-delete a department. Its members keep their reference."""
    return await _set_active(session, auth, department_id, active=False)
