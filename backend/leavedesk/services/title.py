from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlmodel import col

from leavedesk.exceptions import NotFoundError, StateConflictError
from leavedesk.models.enums import MANAGER_CLASS_LEVELS, AuditAction, AuditEntityType, TitleLevel
from leavedesk.models.title import Title
from leavedesk.schemas.title import TitleListResponse, TitleResponse
from leavedesk.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    import uuid

    from sqlalchemy.ext.asyncio import AsyncSession

    from leavedesk.schemas.auth import AuthContext
    from leavedesk.schemas.title import CreateTitleRequest, UpdateTitleRequest


def is_manager_class(title: Title | None) -> bool:
    """Whether holders of ``title`` may act as department or HR approvers."""
    return title is not None and title.is_active and TitleLevel(title.level) in MANAGER_CLASS_LEVELS


def _build_title_response(title: Title) -> TitleResponse:
    return TitleResponse(
        id=title.id,
        name=title.name,
        level=TitleLevel(title.level),
        is_manager_class=is_manager_class(title),
        description=title.description,
        is_active=title.is_active,
        created_at=title.created_at,
    )


async def get_title(session: AsyncSession, title_id: uuid.UUID) -> Title:
    """Get a title or raise 404."""
    title = await session.get(Title, title_id)
    if title is None:
        raise NotFoundError("Title not found")
    return title


async def get_title_response(session: AsyncSession, title_id: uuid.UUID) -> TitleResponse:
    return _build_title_response(await get_title(session, title_id))


async def list_titles(session: AsyncSession, include_inactive: bool = False) -> TitleListResponse:
    """List titles ordered by name."""
    query = select(Title).order_by(col(Title.name))
    if not include_inactive:
        query = query.where(col(Title.is_active).is_(True))
    result = await session.execute(query)
    titles = list(result.scalars().all())
    return TitleListResponse(items=[_build_title_response(t) for t in titles], total=len(titles))


async def find_title_by_name(session: AsyncSession, name: str) -> Title | None:
    """Case-insensitive lookup by name."""
    result = await session.execute(select(Title).where(func.lower(col(Title.name)) == name.strip().lower()))
    return result.scalars().first()


async def create_title(session: AsyncSession, auth: AuthContext, payload: CreateTitleRequest) -> TitleResponse:
    """Create a job title."""
    title = Title(name=payload.name.strip(), level=payload.level.value, description=payload.description)
    session.add(title)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise StateConflictError("A title with this name already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.TITLE,
        entity_id=title.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(title),
    )

    await session.commit()
    await session.refresh(title)
    return _build_title_response(title)


async def update_title(
    session: AsyncSession,
    auth: AuthContext,
    title_id: uuid.UUID,
    payload: UpdateTitleRequest,
) -> TitleResponse:
    """Update a title. Level changes take effect on the next authority resolution."""
    title = await get_title(session, title_id)
    before = model_to_audit_dict(title)

    changes = payload.model_dump(exclude_unset=True)
    if "level" in changes and changes["level"] is not None:
        changes["level"] = TitleLevel(changes["level"]).value
    for field, value in changes.items():
        if value is not None:
            setattr(title, field, value)
    title.updated_at = datetime.now(UTC)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise StateConflictError("A title with this name already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.TITLE,
        entity_id=title.id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(title),
    )

    await session.commit()
    await session.refresh(title)
    return _build_title_response(title)
