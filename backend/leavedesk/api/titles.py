# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from leavedesk.api.deps import AdminDep, AuthDep
from leavedesk.db import SessionDep
from leavedesk.schemas.title import CreateTitleRequest, TitleListResponse, TitleResponse, UpdateTitleRequest
from leavedesk.services import title as title_service

titles_router = APIRouter(prefix="/titles", tags=["titles"])


@titles_router.post("", response_model=TitleResponse, status_code=status.HTTP_201_CREATED)
async def create_title(
    payload: CreateTitleRequest,
    session: SessionDep,
    auth: AdminDep,
) -> TitleResponse:
    """Create a job title (admin only)."""
    return await title_service.create_title(session, auth, payload)


@titles_router.get("", response_model=TitleListResponse)
async def list_titles(
    session: SessionDep,
    auth: AuthDep,
    include_inactive: bool = Query(default=False),
) -> TitleListResponse:
    return await title_service.list_titles(session, include_inactive)


@titles_router.get("/{title_id}", response_model=TitleResponse)
async def get_title(
    title_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> TitleResponse:
    return await title_service.get_title_response(session, title_id)


@titles_router.put("/{title_id}", response_model=TitleResponse)
async def update_title(
    title_id: uuid.UUID,
    payload: UpdateTitleRequest,
    session: SessionDep,
    auth: AdminDep,
) -> TitleResponse:
    """Update a job title (admin only)."""
    return await title_service.update_title(session, auth, title_id, payload)
