"""Approval authority resolved from live directory data.

Nobody holds a stored approver role. The department manager and the HR
manager are recomputed from departments, titles and active flags every time
they are needed, so a title or department change takes effect immediately.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from leavedesk.config import get_settings
from leavedesk.exceptions import AuthorizationError
from leavedesk.models.department import Department
from leavedesk.models.employee import Employee
from leavedesk.models.enums import TitleLevel
from leavedesk.models.title import Title
from leavedesk.schemas.employee import AuthorityResponse
from leavedesk.services.employee import get_employee
from leavedesk.services.title import is_manager_class

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.models.request import LeaveRequest

logger = logging.getLogger(__name__)

# Lower rank wins when several members are manager-class.
_LEVEL_RANK = {TitleLevel.MANAGER: 0, TitleLevel.DIRECTOR: 1}

Member = tuple[Employee, Title | None]


@dataclass(frozen=True)
class Authority:
    is_department_manager: bool
    is_hr_manager: bool


# ---------------------------------------------------------------------------
# Pure resolution
# ---------------------------------------------------------------------------


def _is_eligible(employee: Employee) -> bool:
    return employee.is_active and not employee.is_system


def select_department_manager(
    department: Department,
    members: list[Member],
    exclude: uuid.UUID | None = None,
) -> Employee | None:
    """Pick the approving manager among ``members`` of ``department``.

    Candidates are active, non-system members with a manager-class title.
    ``exclude`` drops one employee, normally the requester, from the pool.
    The department's ``manager_id`` wins when it names a candidate; otherwise
    MANAGER ranks before DIRECTOR and older records before newer ones.
    """
    candidates = [
        (employee, title)
        for employee, title in members
        if employee.department_id == department.id
        and employee.id != exclude
        and _is_eligible(employee)
        and is_manager_class(title)
    ]
    if not candidates:
        return None

    if department.manager_id is not None:
        for employee, _ in candidates:
            if employee.id == department.manager_id:
                return employee

    candidates.sort(key=lambda pair: (_LEVEL_RANK[TitleLevel(pair[1].level)], pair[0].created_at))  # type: ignore[union-attr]
    if len(candidates) > 1:
        logger.warning(
            "Department %s has %d manager-class members; using %s",
            department.id,
            len(candidates),
            candidates[0][0].id,
        )
    return candidates[0][0]


def resolve_authority(
    employee: Employee,
    title: Title | None,
    department_manager: Employee | None,
    hr_manager: Employee | None,
) -> Authority:
    """Compute what ``employee`` may approve given the currently resolved managers."""
    return Authority(
        is_department_manager=department_manager is not None and department_manager.id == employee.id,
        is_hr_manager=(
            hr_manager is not None and hr_manager.id == employee.id and is_manager_class(title)
        ),
    )


# ---------------------------------------------------------------------------
# Directory lookups
# ---------------------------------------------------------------------------


async def _load_members(session: AsyncSession, department_id: uuid.UUID) -> list[Member]:
    result = await session.execute(
        select(Employee, Title)
        .outerjoin(Title, col(Employee.title_id) == col(Title.id))
        .where(col(Employee.department_id) == department_id)
    )
    return [(employee, title) for employee, title in result.all()]


async def get_employee_title(session: AsyncSession, employee: Employee) -> Title | None:
    if employee.title_id is None:
        return None
    return await session.get(Title, employee.title_id)


async def find_department_manager(
    session: AsyncSession,
    department_id: uuid.UUID | None,
    exclude: uuid.UUID | None = None,
) -> Employee | None:
    """Resolve the approving manager of a department, or None."""
    if department_id is None:
        return None
    department = await session.get(Department, department_id)
    if department is None:
        return None
    return select_department_manager(department, await _load_members(session, department_id), exclude)


async def find_hr_department(session: AsyncSession) -> Department | None:
    """The active department carrying the configured HR code."""
    code = get_settings().hr_department_code
    result = await session.execute(
        select(Department).where(col(Department.code) == code, col(Department.is_active).is_(True))
    )
    return result.scalar_one_or_none()


async def find_hr_manager(session: AsyncSession) -> Employee | None:
    """Resolve the HR manager.

    An explicit ``manager_id`` on the HR department wins when it names an
    active, non-system employee; otherwise the department-manager rule applies.
    """
    department = await find_hr_department(session)
    if department is None:
        return None

    if department.manager_id is not None:
        explicit = await session.get(Employee, department.manager_id)
        if explicit is not None and _is_eligible(explicit):
            return explicit

    return select_department_manager(department, await _load_members(session, department.id))


async def get_authority(session: AsyncSession, employee_id: uuid.UUID) -> AuthorityResponse:
    """Report which approval steps ``employee_id`` can currently perform."""
    employee = await get_employee(session, employee_id)
    authority = resolve_authority(
        employee,
        await get_employee_title(session, employee),
        await find_department_manager(session, employee.department_id),
        await find_hr_manager(session),
    )
    return AuthorityResponse(
        employee_id=employee.id,
        is_department_manager=authority.is_department_manager,
        is_hr_manager=authority.is_hr_manager,
    )


# ---------------------------------------------------------------------------
# Approval checks
# ---------------------------------------------------------------------------


async def verify_department_approver(
    session: AsyncSession,
    request: LeaveRequest,
    approver: Employee,
) -> None:
    """The approver must be the assigned manager in the requester's department, never the requester."""
    requester = await get_employee(session, request.employee_id)
    if (
        approver.id == requester.id
        or approver.id != request.department_manager_id
        or approver.department_id != requester.department_id
    ):
        raise AuthorizationError("Only the assigned department manager can decide this request")


async def verify_hr_approver(session: AsyncSession, approver: Employee) -> None:
    """The approver must hold a manager-class title and be the resolved HR manager."""
    title = await get_employee_title(session, approver)
    if not is_manager_class(title):
        raise AuthorizationError("HR decisions require a manager-class title")

    hr_manager = await find_hr_manager(session)
    if hr_manager is None or hr_manager.id != approver.id:
        raise AuthorizationError("Only the HR manager can decide this request")
