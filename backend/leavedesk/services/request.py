# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import UTC, date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, func, select, update
from sqlmodel import col

from leavedesk.config import get_settings
from leavedesk.exceptions import (
    AuthorizationError,
    BusinessRuleViolation,
    NotFoundError,
    StateConflictError,
    ValidationError,
)
from leavedesk.models.employee import Employee
from leavedesk.models.enums import (
    CANCELLABLE_STATUSES,
    DEPARTMENT_DECISIONS,
    HR_DECISIONS,
    RELEASED_STATUSES,
    AuditAction,
    AuditEntityType,
    LeaveRequestStatus,
)
from leavedesk.models.leave_type import LeaveType
from leavedesk.models.request import LeaveRequest
from leavedesk.schemas.request import LeaveRequestListResponse, LeaveRequestResponse
from leavedesk.services.audit import model_to_audit_dict, write_audit_log
from leavedesk.services.authority import (
    find_department_manager,
    find_hr_manager,
    get_employee_title,
    verify_department_approver,
    verify_hr_approver,
)
from leavedesk.services.balance import get_remaining_days, increment_used_days
from leavedesk.services.employee import get_employee
from leavedesk.services.leave_type import find_leave_type_by_code, get_leave_type
from leavedesk.services.title import is_manager_class
from leavedesk.services.working_days import count_working_days

if TYPE_CHECKING:
    from collections.abc import Collection

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.request import CreateLeaveRequestPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_leave_request_response(request: LeaveRequest) -> LeaveRequestResponse:
    """Map a leave request model to its response schema."""
    return LeaveRequestResponse(
        id=request.id,
        employee_id=request.employee_id,
        leave_type_id=request.leave_type_id,
        start_date=request.start_date,
        end_date=request.end_date,
        total_days=request.total_days,
        reason=request.reason,
        status=LeaveRequestStatus(request.status),
        department_manager_id=request.department_manager_id,
        hr_manager_id=request.hr_manager_id,
        department_manager_approval_date=request.department_manager_approval_date,
        hr_manager_approval_date=request.hr_manager_approval_date,
        department_manager_comments=request.department_manager_comments,
        hr_manager_comments=request.hr_manager_comments,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


async def _get_leave_request_or_404(session: AsyncSession, request_id: uuid.UUID) -> LeaveRequest:
    request = await session.get(LeaveRequest, request_id)
    if request is None:
        raise NotFoundError("Leave request not found")
    return request


async def _check_overlap(
    session: AsyncSession,
    employee_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> None:
    """Raise if a request still holding its dates intersects ``[start_date, end_date]``."""
    released = [s.value for s in RELEASED_STATUSES]
    result = await session.execute(
        select(LeaveRequest.id).where(
            col(LeaveRequest.employee_id) == employee_id,
            col(LeaveRequest.status).not_in(released),
            col(LeaveRequest.start_date) <= end_date,
            col(LeaveRequest.end_date) >= start_date,
        )
    )
    if result.first() is not None:
        raise BusinessRuleViolation("An overlapping leave request already exists for these dates")


async def _held_days(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> int:
    """Days of undecided requests that will be charged to ``year`` once HR approves them."""
    result = await session.execute(
        select(func.coalesce(func.sum(LeaveRequest.total_days), 0)).where(
            col(LeaveRequest.employee_id) == employee_id,
            col(LeaveRequest.leave_type_id) == leave_type_id,
            col(LeaveRequest.status).in_([s.value for s in CANCELLABLE_STATUSES]),
            col(LeaveRequest.start_date) >= date(year, 1, 1),
            col(LeaveRequest.start_date) <= date(year, 12, 31),
        )
    )
    return int(result.scalar_one())


async def _check_balance(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
    year: int,
    total_days: int,
) -> None:
    remaining = await get_remaining_days(session, employee_id, leave_type.id, year)
    if remaining is None:
        raise BusinessRuleViolation(f"Insufficient leave balance: no {leave_type.name} balance for {year}")
    held = await _held_days(session, employee_id, leave_type.id, year)
    if remaining - held < total_days:
        raise BusinessRuleViolation(
            f"Insufficient leave balance: {remaining} days remaining, {held} held by open requests, "
            f"{total_days} requested"
        )


async def _check_unpaid_allowed(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type: LeaveType,
    year: int,
) -> None:
    """Unpaid leave is blocked while any annual leave remains for the year."""
    settings = get_settings()
    if leave_type.code != settings.unpaid_leave_type_code:
        return

    annual = await find_leave_type_by_code(session, settings.annual_leave_type_code)
    if annual is None:
        return
    remaining = await get_remaining_days(session, employee_id, annual.id, year)
    if remaining is not None and remaining > 0:
        raise BusinessRuleViolation(
            f"Unpaid leave is not allowed while {remaining} days of annual leave remain"
        )


async def _compare_and_set_status(
    session: AsyncSession,
    request: LeaveRequest,
    expected: Collection[LeaveRequestStatus],
    values: dict[str, Any],
) -> None:
    """Apply ``values`` only if the stored status is still one of ``expected``.

    Concurrent transitions of the same request race on this UPDATE; the loser
    sees zero affected rows and gets a conflict.
    """
    result = await session.execute(
        update(LeaveRequest)
        .where(
            col(LeaveRequest.id) == request.id,
            col(LeaveRequest.status).in_([s.value for s in expected]),
        )
        .values(**values, updated_at=datetime.now(UTC))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        await session.rollback()
        raise StateConflictError("Leave request is no longer in a state that allows this change")
    await session.refresh(request)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveRequestPayload,
) -> LeaveRequestResponse:
    """Create a PENDING leave request with both approver slots assigned.

    Flow:
    1. Resolve the requesting employee (self, or anyone for admins)
    2. Validate employee and leave type are usable
    3. Resolve the department manager (fails closed)
    4. Reject overlapping requests
    5. Count working days, rejecting empty ranges
    6. Balance check and unpaid-leave rule for the start year
    7. Persist, audit, commit
    """
    employee_id = payload.employee_id or auth.user_id
    if employee_id != auth.user_id and not auth.is_admin:
        raise AuthorizationError("Only admins can file leave requests for other employees")
    if payload.end_date < payload.start_date:
        raise ValidationError("end_date must not be before start_date")

    # 1-2. Employee and leave type.
    employee = await get_employee(session, employee_id)
    if not employee.is_active:
        raise BusinessRuleViolation("Inactive employees cannot request leave")
    leave_type = await get_leave_type(session, payload.leave_type_id)
    if not leave_type.is_active:
        raise BusinessRuleViolation(f"Leave type '{leave_type.name}' is not active")

    # 3. Department manager.
    department_manager = await find_department_manager(session, employee.department_id, exclude=employee.id)
    if department_manager is None:
        raise BusinessRuleViolation("No department manager found for the employee's department")

    # 4. Overlap.
    await _check_overlap(session, employee.id, payload.start_date, payload.end_date)

    # 5. Working days.
    total_days = await count_working_days(
        session, payload.start_date, payload.end_date, employee.works_on_saturday
    )
    if total_days == 0:
        raise ValidationError("The requested range contains no working days")

    # 6. Balance rules. The whole request is charged to its start year.
    year = payload.start_date.year
    if leave_type.requires_balance:
        await _check_balance(session, employee.id, leave_type, year, total_days)
    await _check_unpaid_allowed(session, employee.id, leave_type, year)

    hr_manager = await find_hr_manager(session)
    if hr_manager is None:
        logger.warning("No HR manager resolvable; request for employee %s created without one", employee.id)

    # 7. Persist.
    leave_request = LeaveRequest(
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        total_days=total_days,
        reason=payload.reason,
        status=LeaveRequestStatus.PENDING.value,
        department_manager_id=department_manager.id,
        hr_manager_id=hr_manager.id if hr_manager else None,
    )
    session.add(leave_request)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.SUBMIT,
        after_json=model_to_audit_dict(leave_request),
    )

    await session.commit()
    await session.refresh(leave_request)
    logger.info(
        "Leave request %s created for employee %s (%d days, approver %s)",
        leave_request.id,
        employee.id,
        total_days,
        department_manager.id,
    )
    return _build_leave_request_response(leave_request)


async def update_leave_request_status(
    session: AsyncSession,
    request_id: uuid.UUID,
    new_status: LeaveRequestStatus,
    approver_id: uuid.UUID,
    is_hr_manager: bool | None = None,
    comments: str | None = None,
) -> LeaveRequestResponse:
    """Record a department or HR decision.

    The stage follows from ``new_status``; ``is_hr_manager``, when given, must
    agree with it. HR approval of a deducting leave type adds the request's
    days to the start year's balance in the same transaction.
    """
    if new_status in DEPARTMENT_DECISIONS:
        hr_stage = False
        predecessor = LeaveRequestStatus.PENDING
    elif new_status in HR_DECISIONS:
        hr_stage = True
        predecessor = LeaveRequestStatus.APPROVED_BY_DEPARTMENT_MANAGER
    else:
        raise ValidationError(f"Status {new_status.value} is not an approval decision")
    if is_hr_manager is not None and is_hr_manager != hr_stage:
        raise ValidationError("Decision status does not match the approval stage")

    leave_request = await _get_leave_request_or_404(session, request_id)
    approver = await get_employee(session, approver_id)
    if not approver.is_active:
        raise AuthorizationError("Inactive employees cannot approve leave")

    if hr_stage:
        await verify_hr_approver(session, approver)
    else:
        await verify_department_approver(session, leave_request, approver)

    current = LeaveRequestStatus(leave_request.status)
    if current != predecessor:
        raise StateConflictError(
            f"Cannot move leave request from {current.value} to {new_status.value}"
        )

    before = model_to_audit_dict(leave_request)
    now = datetime.now(UTC)
    if hr_stage:
        values = {
            "status": new_status.value,
            "hr_manager_id": approver.id,
            "hr_manager_approval_date": now,
            "hr_manager_comments": comments,
        }
    else:
        values = {
            "status": new_status.value,
            "department_manager_approval_date": now,
            "department_manager_comments": comments,
        }
    await _compare_and_set_status(session, leave_request, [predecessor], values)

    if new_status == LeaveRequestStatus.APPROVED_BY_HR_MANAGER:
        leave_type = await get_leave_type(session, leave_request.leave_type_id)
        if leave_type.deducts_from_balance:
            try:
                await increment_used_days(
                    session,
                    leave_request.employee_id,
                    leave_type.id,
                    leave_request.start_date.year,
                    leave_request.total_days,
                )
            except BusinessRuleViolation:
                # Undo the status change together with the refused deduction.
                await session.rollback()
                raise

    approved = new_status in (
        LeaveRequestStatus.APPROVED_BY_DEPARTMENT_MANAGER,
        LeaveRequestStatus.APPROVED_BY_HR_MANAGER,
    )
    await write_audit_log(
        session,
        actor_id=approver.id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.APPROVE if approved else AuditAction.REJECT,
        before_json=before,
        after_json=model_to_audit_dict(leave_request),
    )

    await session.commit()
    await session.refresh(leave_request)
    logger.info(
        "Leave request %s moved %s -> %s by %s",
        leave_request.id,
        current.value,
        new_status.value,
        approver.id,
    )
    return _build_leave_request_response(leave_request)


async def cancel_leave_request(
    session: AsyncSession,
    request_id: uuid.UUID,
    employee_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Cancel an undecided request. Only its owner may cancel; balances are untouched."""
    leave_request = await _get_leave_request_or_404(session, request_id)
    if leave_request.employee_id != employee_id:
        raise AuthorizationError("Only the requesting employee can cancel this leave request")

    current = LeaveRequestStatus(leave_request.status)
    if current not in CANCELLABLE_STATUSES:
        raise StateConflictError(f"Cannot cancel a leave request in status {current.value}")

    before = model_to_audit_dict(leave_request)
    await _compare_and_set_status(
        session,
        leave_request,
        CANCELLABLE_STATUSES,
        {"status": LeaveRequestStatus.CANCELLED.value},
    )

    await write_audit_log(
        session,
        actor_id=employee_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.CANCEL,
        before_json=before,
        after_json=model_to_audit_dict(leave_request),
    )

    await session.commit()
    await session.refresh(leave_request)
    logger.info("Leave request %s cancelled from %s", leave_request.id, current.value)
    return _build_leave_request_response(leave_request)


async def delete_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> None:
    """Hard-delete a request unless HR has already granted it."""
    leave_request = await _get_leave_request_or_404(session, request_id)
    if leave_request.status == LeaveRequestStatus.APPROVED_BY_HR_MANAGER:
        raise StateConflictError("HR-approved leave requests cannot be deleted")

    before = model_to_audit_dict(leave_request)
    result = await session.execute(
        delete(LeaveRequest)
        .where(
            col(LeaveRequest.id) == leave_request.id,
            col(LeaveRequest.status) != LeaveRequestStatus.APPROVED_BY_HR_MANAGER.value,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        await session.rollback()
        raise StateConflictError("HR-approved leave requests cannot be deleted")

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_REQUEST,
        entity_id=leave_request.id,
        action=AuditAction.DELETE,
        before_json=before,
    )
    await session.commit()
    session.expunge(leave_request)
    logger.info("Leave request %s deleted by %s", request_id, auth.user_id)


async def get_leave_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: uuid.UUID,
) -> LeaveRequestResponse:
    """Get a single leave request by ID.

    Visible to admins, the requester, the assigned approvers and the currently
    resolved HR manager.
    """
    leave_request = await _get_leave_request_or_404(session, request_id)
    if not auth.is_admin and auth.user_id not in (
        leave_request.employee_id,
        leave_request.department_manager_id,
        leave_request.hr_manager_id,
    ):
        hr_manager = await find_hr_manager(session)
        if hr_manager is None or hr_manager.id != auth.user_id:
            raise AuthorizationError("Not allowed to view this leave request")
    return _build_leave_request_response(leave_request)


async def list_leave_requests(
    session: AsyncSession,
    employee_id: uuid.UUID | None = None,
    status_filter: LeaveRequestStatus | None = None,
    offset: int = 0,
    limit: int = 50,
) -> LeaveRequestListResponse:
    """List leave requests with optional filters, newest first."""
    base_filters = []
    if employee_id is not None:
        base_filters.append(col(LeaveRequest.employee_id) == employee_id)
    if status_filter is not None:
        base_filters.append(col(LeaveRequest.status) == status_filter.value)

    count_result = await session.execute(select(func.count()).select_from(LeaveRequest).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(LeaveRequest)
        .where(*base_filters)
        .order_by(col(LeaveRequest.created_at).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())
    return LeaveRequestListResponse(
        items=[_build_leave_request_response(r) for r in requests],
        total=total,
    )


async def list_pending_for_department_manager(
    session: AsyncSession,
    manager_id: uuid.UUID,
) -> LeaveRequestListResponse:
    """PENDING requests from the manager's department.

    Employees without a department or a manager-class title see nothing.
    """
    manager = await get_employee(session, manager_id)
    title = await get_employee_title(session, manager)
    if manager.department_id is None or manager.is_system or not is_manager_class(title):
        return LeaveRequestListResponse(items=[], total=0)

    result = await session.execute(
        select(LeaveRequest)
        .join(Employee, col(LeaveRequest.employee_id) == col(Employee.id))
        .where(
            col(Employee.department_id) == manager.department_id,
            col(LeaveRequest.status) == LeaveRequestStatus.PENDING.value,
        )
        .order_by(col(LeaveRequest.created_at).desc())
    )
    requests = list(result.scalars().all())
    return LeaveRequestListResponse(
        items=[_build_leave_request_response(r) for r in requests],
        total=len(requests),
    )


async def list_pending_for_hr_manager(
    session: AsyncSession,
    hr_manager_id: uuid.UUID,
) -> LeaveRequestListResponse:
    """Requests approved by their department manager and waiting on HR."""
    approver = await get_employee(session, hr_manager_id)
    await verify_hr_approver(session, approver)

    result = await session.execute(
        select(LeaveRequest)
        .where(col(LeaveRequest.status) == LeaveRequestStatus.APPROVED_BY_DEPARTMENT_MANAGER.value)
        .order_by(col(LeaveRequest.department_manager_approval_date).desc())
    )
    requests = list(result.scalars().all())
    return LeaveRequestListResponse(
        items=[_build_leave_request_response(r) for r in requests],
        total=len(requests),
    )
