from __future__ import annotations

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from leavedesk.config import Settings
from leavedesk.exceptions import (
    AuthorizationError,
    BusinessRuleViolation,
    NotFoundError,
    StateConflictError,
    ValidationError,
    setup_exception_handlers,
)


def _app_raising(exc: Exception) -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/boom")
    async def boom() -> None:
        raise exc

    @app.get("/typed/{number}")
    async def typed(number: int) -> dict[str, int]:
        return {"number": number}

    return app


@pytest.mark.parametrize(
    ("exc", "status_code"),
    [
        (NotFoundError("Leave request not found"), 404),
        (ValidationError("End date is before start date"), 400),
        (StateConflictError("Request is not pending"), 409),
        (AuthorizationError("Only admins may do this"), 403),
        (BusinessRuleViolation("Insufficient leave balance"), 422),
    ],
)
async def test_app_errors_share_envelope(exc: Exception, status_code: int) -> None:
    async with AsyncClient(transport=ASGITransport(app=_app_raising(exc)), base_url="http://test") as client:
        response = await client.get("/boom")
    assert response.status_code == status_code
    assert response.json() == {
        "error": type(exc).__name__,
        "detail": str(exc),
        "status_code": status_code,
    }


async def test_request_validation_uses_envelope() -> None:
    app = _app_raising(NotFoundError("unused"))
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        response = await client.get("/typed/not-a-number")
    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "ValidationError"
    assert data["status_code"] == 422


async def test_unhandled_error_hides_detail() -> None:
    transport = ASGITransport(app=_app_raising(RuntimeError("db password leaked")), raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/boom")
    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "InternalServerError"
    assert "leaked" not in data["detail"]


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HR_DEPARTMENT_CODE", "IK")
    monkeypatch.setenv("ENVIRONMENT", "staging")
    monkeypatch.setenv("IMPORT_MAX_ROWS", "100")

    settings = Settings(_env_file=None)
    assert settings.hr_department_code == "IK"
    assert settings.environment == "staging"
    assert settings.import_max_rows == 100
    assert settings.annual_leave_type_code == "ANNUAL"
