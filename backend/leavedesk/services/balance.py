from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.exceptions import BusinessRuleViolation, NotFoundError, StateConflictError, ValidationError
from leavedesk.models.balance import LeaveBalance
from leavedesk.models.employee import Employee
from leavedesk.models.enums import AuditAction, AuditEntityType
from leavedesk.models.leave_type import LeaveType
from leavedesk.schemas.balance import BalanceListResponse, BalanceResponse
from leavedesk.services.audit import model_to_audit_dict, write_audit_log
from leavedesk.services.employee import get_employee
from leavedesk.services.leave_type import get_leave_type

if TYPE_CHECKING:
    import uuid

    from sqlalchemy import Select
    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.balance import CreateBalanceRequest, UpdateBalanceRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_balance_response(balance: LeaveBalance, employee: Employee, leave_type: LeaveType) -> BalanceResponse:
    """Map a balance row to its response. Remaining days are derived here, never stored."""
    return BalanceResponse(
        id=balance.id,
        employee_id=balance.employee_id,
        employee_name=employee.full_name,
        leave_type_id=balance.leave_type_id,
        leave_type_name=leave_type.name,
        year=balance.year,
        total_days=balance.total_days,
        used_days=balance.used_days,
        remaining_days=balance.remaining_days,
        updated_at=balance.updated_at,
    )


def _joined_balances() -> Select[tuple[LeaveBalance, Employee, LeaveType]]:
    # used_days is written by bulk UPDATE, so loaded rows must be overwritten.
    return (
        select(LeaveBalance, Employee, LeaveType)
        .join(Employee, col(LeaveBalance.employee_id) == col(Employee.id))
        .join(LeaveType, col(LeaveBalance.leave_type_id) == col(LeaveType.id))
        .execution_options(populate_existing=True)
    )


async def _get_balance_or_404(session: AsyncSession, balance_id: uuid.UUID) -> LeaveBalance:
    balance = await session.get(LeaveBalance, balance_id, populate_existing=True)
    if balance is None:
        raise NotFoundError("Balance not found")
    return balance


async def _respond(session: AsyncSession, balance: LeaveBalance) -> BalanceResponse:
    employee = await get_employee(session, balance.employee_id)
    leave_type = await get_leave_type(session, balance.leave_type_id)
    return _build_balance_response(balance, employee, leave_type)


# ---------------------------------------------------------------------------
# Ledger reads
# ---------------------------------------------------------------------------


async def get_balance_row(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> LeaveBalance | None:
    result = await session.execute(
        select(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type_id) == leave_type_id,
            col(LeaveBalance.year) == year,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_remaining_days(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
) -> int | None:
    """Remaining days for the key, or None when no balance row exists."""
    balance = await get_balance_row(session, employee_id, leave_type_id, year)
    return None if balance is None else balance.remaining_days


async def get_balances(session: AsyncSession, employee_id: uuid.UUID, year: int) -> BalanceListResponse:
    """All balance rows of one employee for ``year``."""
    await get_employee(session, employee_id)
    result = await session.execute(
        _joined_balances()
        .where(col(LeaveBalance.employee_id) == employee_id, col(LeaveBalance.year) == year)
        .order_by(col(LeaveType.name))
    )
    items = [_build_balance_response(b, e, lt) for b, e, lt in result.all()]
    return BalanceListResponse(items=items, total=len(items))


async def list_balances(
    session: AsyncSession,
    year: int,
    leave_type_id: uuid.UUID | None = None,
    offset: int = 0,
    limit: int = 50,
) -> BalanceListResponse:
    """Balances of every employee for ``year``, optionally for one leave type."""
    base_filters = [col(LeaveBalance.year) == year]
    if leave_type_id is not None:
        base_filters.append(col(LeaveBalance.leave_type_id) == leave_type_id)

    count_result = await session.execute(select(func.count()).select_from(LeaveBalance).where(*base_filters))
    total = count_result.scalar_one()

    result = await session.execute(
        _joined_balances()
        .where(*base_filters)
        .order_by(col(Employee.first_name), col(Employee.last_name), col(LeaveType.name))
        .offset(offset)
        .limit(limit)
    )
    items = [_build_balance_response(b, e, lt) for b, e, lt in result.all()]
    return BalanceListResponse(items=items, total=total)


# ---------------------------------------------------------------------------
# Ledger write
# ---------------------------------------------------------------------------


async def increment_used_days(
    session: AsyncSession,
    employee_id: uuid.UUID,
    leave_type_id: uuid.UUID,
    year: int,
    days: int,
) -> bool:
    """Add ``days`` to ``used_days`` in a single UPDATE within the caller's transaction.

    The UPDATE only matches while ``days`` still fit in the remaining balance,
    so concurrent increments can never push ``used_days`` past ``total_days``.
    Returns False, without creating a row, when no balance exists for the key,
    and raises BusinessRuleViolation when the row exists but is too small.
    """
    result = await session.execute(
        update(LeaveBalance)
        .where(
            col(LeaveBalance.employee_id) == employee_id,
            col(LeaveBalance.leave_type_id) == leave_type_id,
            col(LeaveBalance.year) == year,
            col(LeaveBalance.total_days) - col(LeaveBalance.used_days) >= days,
        )
        .values(used_days=col(LeaveBalance.used_days) + days, updated_at=datetime.now(UTC))
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:  # type: ignore[attr-defined]
        balance = await get_balance_row(session, employee_id, leave_type_id, year)
        if balance is not None:
            raise BusinessRuleViolation(
                f"Insufficient leave balance: {balance.remaining_days} days remaining, {days} to deduct"
            )
        logger.warning(
            "No balance row for employee %s, leave type %s, year %d; %d used days not recorded",
            employee_id,
            leave_type_id,
            year,
            days,
        )
        return False
    return True


# ---------------------------------------------------------------------------
# Administration
# ---------------------------------------------------------------------------


async def create_balance(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateBalanceRequest,
) -> BalanceResponse:
    """Grant a yearly entitlement. One row per employee, leave type and year."""
    employee = await get_employee(session, payload.employee_id)
    leave_type = await get_leave_type(session, payload.leave_type_id)

    balance = LeaveBalance(
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        year=payload.year,
        total_days=payload.total_days,
    )
    session.add(balance)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise StateConflictError("A balance already exists for this employee, leave type and year") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_BALANCE,
        entity_id=balance.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(balance),
    )

    await session.commit()
    await session.refresh(balance)
    return _build_balance_response(balance, employee, leave_type)


async def update_balance_total(
    session: AsyncSession,
    auth: AuthContext,
    balance_id: uuid.UUID,
    payload: UpdateBalanceRequest,
) -> BalanceResponse:
    """Change the entitlement. It may not drop below what is already used."""
    balance = await _get_balance_or_404(session, balance_id)
    if payload.total_days < balance.used_days:
        raise ValidationError(f"Total days cannot be less than the {balance.used_days} days already used")

    before = model_to_audit_dict(balance)
    balance.total_days = payload.total_days
    balance.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_BALANCE,
        entity_id=balance.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(balance),
    )

    await session.commit()
    await session.refresh(balance)
    return await _respond(session, balance)


async def delete_balance(session: AsyncSession, auth: AuthContext, balance_id: uuid.UUID) -> None:
    """Remove an untouched entitlement."""
    balance = await _get_balance_or_404(session, balance_id)
    if balance.used_days > 0:
        raise StateConflictError("Balances with used days cannot be deleted")

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_BALANCE,
        entity_id=balance.id,
        action=AuditAction.DELETE,
        before_json=model_to_audit_dict(balance),
    )
    await session.delete(balance)
    await session.commit()


async def get_balance_response(session: AsyncSession, balance_id: uuid.UUID) -> BalanceResponse:
    return await _respond(session, await _get_balance_or_404(session, balance_id))
