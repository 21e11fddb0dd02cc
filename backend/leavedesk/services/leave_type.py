from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.exceptions import NotFoundError, StateConflictError
from leavedesk.models.enums import AuditAction, AuditEntityType
from leavedesk.models.leave_type import LeaveType
from leavedesk.schemas.leave_type import LeaveTypeListResponse, LeaveTypeResponse
from leavedesk.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.leave_type import CreateLeaveTypeRequest, UpdateLeaveTypeRequest


def _build_leave_type_response(leave_type: LeaveType) -> LeaveTypeResponse:
    return LeaveTypeResponse(
        id=leave_type.id,
        code=leave_type.code,
        name=leave_type.name,
        description=leave_type.description,
        max_days_per_year=leave_type.max_days_per_year,
        requires_approval=leave_type.requires_approval,
        is_paid=leave_type.is_paid,
        requires_balance=leave_type.requires_balance,
        deducts_from_balance=leave_type.deducts_from_balance,
        is_active=leave_type.is_active,
        created_at=leave_type.created_at,
    )


async def get_leave_type(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveType:
    """Get a leave type or raise 404."""
    leave_type = await session.get(LeaveType, leave_type_id)
    if leave_type is None:
        raise NotFoundError("Leave type not found")
    return leave_type


async def find_leave_type_by_code(session: AsyncSession, code: str) -> LeaveType | None:
    result = await session.execute(select(LeaveType).where(col(LeaveType.code) == code))
    return result.scalar_one_or_none()


async def get_leave_type_response(session: AsyncSession, leave_type_id: uuid.UUID) -> LeaveTypeResponse:
    return _build_leave_type_response(await get_leave_type(session, leave_type_id))


async def list_leave_types(session: AsyncSession, include_inactive: bool = False) -> LeaveTypeListResponse:
    query = select(LeaveType).order_by(col(LeaveType.name))
    if not include_inactive:
        query = query.where(col(LeaveType.is_active).is_(True))
    result = await session.execute(query)
    leave_types = list(result.scalars().all())
    return LeaveTypeListResponse(
        items=[_build_leave_type_response(lt) for lt in leave_types],
        total=len(leave_types),
    )


async def create_leave_type(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateLeaveTypeRequest,
) -> LeaveTypeResponse:
    """Create a leave type."""
    leave_type = LeaveType(**payload.model_dump())
    session.add(leave_type)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise StateConflictError(f"Leave type code '{payload.code}' already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    await session.refresh(leave_type)
    return _build_leave_type_response(leave_type)


async def update_leave_type(
    session: AsyncSession,
    auth: AuthContext,
    leave_type_id: uuid.UUID,
    payload: UpdateLeaveTypeRequest,
) -> LeaveTypeResponse:
    """Update a leave type. The code is immutable once created."""
    leave_type = await get_leave_type(session, leave_type_id)
    before = model_to_audit_dict(leave_type)

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None or field == "description":
            setattr(leave_type, field, value)
    leave_type.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    await session.refresh(leave_type)
    return _build_leave_type_response(leave_type)


async def set_leave_type_active(
    session: AsyncSession,
    auth: AuthContext,
    leave_type_id: uuid.UUID,
    active: bool,
) -> LeaveTypeResponse:
    """Activate or deactivate a leave type. Existing requests are unaffected."""
    leave_type = await get_leave_type(session, leave_type_id)
    before = model_to_audit_dict(leave_type)

    leave_type.is_active = active
    leave_type.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.LEAVE_TYPE,
        entity_id=leave_type.id,
        action=AuditAction.ACTIVATE if active else AuditAction.DEACTIVATE,
        before_json=before,
        after_json=model_to_audit_dict(leave_type),
    )

    await session.commit()
    await session.refresh(leave_type)
    return _build_leave_type_response(leave_type)
