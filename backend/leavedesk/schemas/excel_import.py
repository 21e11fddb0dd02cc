from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ImportPreviewResponse(BaseModel):
    """Parsed spreadsheet contents and the problems found, before any write."""

    is_valid: bool
    headers: list[str]
    rows: list[dict[str, Any]] = Field(default_factory=list)
    validation_errors: list[str] = Field(default_factory=list)


class ImportResultResponse(BaseModel):
    """Outcome of a spreadsheet import."""

    success_count: int = 0
    error_count: int = 0
    messages: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
