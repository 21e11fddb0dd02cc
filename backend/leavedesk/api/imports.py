# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

from fastapi import APIRouter, File, UploadFile

from leavedesk.api.deps import AdminDep
from leavedesk.db import SessionDep
from leavedesk.exceptions import ValidationError
from leavedesk.schemas.excel_import import ImportPreviewResponse, ImportResultResponse
from leavedesk.services import excel_import as import_service

imports_router = APIRouter(prefix="/imports", tags=["imports"])


async def _read_xlsx(file: UploadFile) -> bytes:
    if not (file.filename or "").lower().endswith(".xlsx"):
        raise ValidationError("Only .xlsx files can be imported")
    content = await file.read()
    if not content:
        raise ValidationError("The uploaded file is empty")
    return content


@imports_router.post("/departments/preview", response_model=ImportPreviewResponse)
async def preview_departments(
    session: SessionDep,
    auth: AdminDep,
    file: UploadFile = File(),
) -> ImportPreviewResponse:
    """Parse and validate a department sheet without saving (admin only)."""
    return await import_service.preview_departments(session, await _read_xlsx(file))


@imports_router.post("/departments", response_model=ImportResultResponse)
async def import_departments(
    session: SessionDep,
    auth: AdminDep,
    file: UploadFile = File(),
) -> ImportResultResponse:
    """Create departments from a sheet (admin only)."""
    return await import_service.import_departments(session, auth, await _read_xlsx(file))


@imports_router.post("/employees/preview", response_model=ImportPreviewResponse)
async def preview_employees(
    session: SessionDep,
    auth: AdminDep,
    file: UploadFile = File(),
) -> ImportPreviewResponse:
    """Parse and validate an employee sheet without saving (admin only)."""
    return await import_service.preview_employees(session, await _read_xlsx(file))


@imports_router.post("/employees", response_model=ImportResultResponse)
async def import_employees(
    session: SessionDep,
    auth: AdminDep,
    file: UploadFile = File(),
) -> ImportResultResponse:
    """Create employees from a sheet (admin only)."""
    return await import_service.import_employees(session, auth, await _read_xlsx(file))
