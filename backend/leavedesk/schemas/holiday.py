# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date

from pydantic import BaseModel, Field


class CreateHolidayRequest(BaseModel):
    """Request body for creating a holiday."""

    date: date
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=500)


class UpdateHolidayRequest(BaseModel):
    """Request body for replacing a holiday's details."""

    date: date
    name: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=500)
    is_active: bool = True


class HolidayResponse(BaseModel):
    """Response schema for a holiday."""

    id: uuid.UUID | None
    date: date
    year: int
    name: str
    description: str | None
    is_active: bool


class HolidayListResponse(BaseModel):
    """List of holidays."""

    items: list[HolidayResponse]
    total: int


class EnsureHolidaysResponse(BaseModel):
    """Outcome of seeding the official holidays for a year."""

    year: int
    created: bool
    total: int
