# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from leavedesk.models.enums import TitleLevel


class CreateTitleRequest(BaseModel):
    """Request body for creating a job title."""

    name: str = Field(min_length=1, max_length=100)
    level: TitleLevel = TitleLevel.STAFF
    description: str | None = Field(default=None, max_length=200)


class UpdateTitleRequest(BaseModel):
    """Request body for updating a job title. Omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    level: TitleLevel | None = None
    description: str | None = Field(default=None, max_length=200)
    is_active: bool | None = None


class TitleResponse(BaseModel):
    """Response schema for a job title."""

    id: uuid.UUID
    name: str
    level: TitleLevel
    is_manager_class: bool
    description: str | None
    is_active: bool
    created_at: datetime


class TitleListResponse(BaseModel):
    """List of job titles."""

    items: list[TitleResponse]
    total: int
