from __future__ import annotations

import functools
import uuid
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leavedesk.db import get_session
from leavedesk.main import app
from leavedesk.models import SQLModel
from leavedesk.models.balance import LeaveBalance
from leavedesk.models.department import Department
from leavedesk.models.employee import Employee
from leavedesk.models.enums import TitleLevel
from leavedesk.models.leave_type import LeaveType
from leavedesk.models.title import Title

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from sqlalchemy.ext.asyncio import AsyncEngine

BALANCE_YEAR = 2026

@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """A fresh in-memory database per test, shared across connections."""
    _engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a session whose commits are real; the database is discarded after the test."""
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Directory fixture
# ---------------------------------------------------------------------------


@dataclass
class Org:
    staff_title: Title
    manager_title: Title
    director_title: Title
    hr: Department
    engineering: Department
    hr_manager: Employee
    eng_manager: Employee
    developer: Employee
    saturday_worker: Employee
    annual: LeaveType
    unpaid: LeaveType
    sick: LeaveType


async def add_employee(
    session: AsyncSession,
    first_name: str,
    department: Department | None,
    title: Title | None,
    works_on_saturday: bool = False,
    is_system: bool = False,
) -> Employee:
    employee = Employee(
        first_name=first_name,
        last_name="Test",
        email=f"{first_name.lower()}.{uuid.uuid4().hex[:6]}@example.com",
        employee_number=f"E-{uuid.uuid4().hex[:8]}",
        department_id=department.id if department else None,
        title_id=title.id if title else None,
        hire_date=date(2022, 1, 3),
        works_on_saturday=works_on_saturday,
        is_system=is_system,
    )
    session.add(employee)
    await session.commit()
    return employee


async def add_balance(
    session: AsyncSession,
    employee: Employee,
    leave_type: LeaveType,
    total_days: int,
    used_days: int = 0,
    year: int = BALANCE_YEAR,
) -> LeaveBalance:
    balance = LeaveBalance(
        employee_id=employee.id,
        leave_type_id=leave_type.id,
        year=year,
        total_days=total_days,
        used_days=used_days,
    )
    session.add(balance)
    await session.commit()
    return balance


@pytest.fixture
async def org(db_session: AsyncSession) -> Org:
    """HR and Engineering departments, one manager each, two engineers and three leave types."""
    staff = Title(name="Uzman", level=TitleLevel.STAFF.value)
    manager = Title(name="Yönetici", level=TitleLevel.MANAGER.value)
    director = Title(name="Direktör", level=TitleLevel.DIRECTOR.value)
    hr = Department(name="İnsan Kaynakları", code="HR")
    engineering = Department(name="Yazılım", code="ENG")
    annual = LeaveType(code="ANNUAL", name="Yıllık İzin", max_days_per_year=30)
    unpaid = LeaveType(
        code="UNPAID",
        name="Ücretsiz İzin",
        is_paid=False,
        requires_balance=False,
        deducts_from_balance=False,
    )
    sick = LeaveType(code="SICK", name="Hastalık İzni", requires_balance=False, deducts_from_balance=True)
    db_session.add_all([staff, manager, director, hr, engineering, annual, unpaid, sick])
    await db_session.commit()

    hr_manager = await add_employee(db_session, "Ayse", hr, manager)
    eng_manager = await add_employee(db_session, "Mehmet", engineering, manager)
    developer = await add_employee(db_session, "Zeynep", engineering, staff)
    saturday_worker = await add_employee(db_session, "Can", engineering, staff, works_on_saturday=True)

    await add_balance(db_session, developer, annual, 14)
    await add_balance(db_session, saturday_worker, annual, 14)

    return Org(
        staff_title=staff,
        manager_title=manager,
        director_title=director,
        hr=hr,
        engineering=engineering,
        hr_manager=hr_manager,
        eng_manager=eng_manager,
        developer=developer,
        saturday_worker=saturday_worker,
        annual=annual,
        unpaid=unpaid,
        sick=sick,
    )


@pytest.fixture
def make_employee(db_session: AsyncSession) -> Callable[..., Awaitable[Employee]]:
    """``await make_employee(first_name, department, title, works_on_saturday=..., is_system=...)``"""
    return functools.partial(add_employee, db_session)


@pytest.fixture
def make_balance(db_session: AsyncSession) -> Callable[..., Awaitable[LeaveBalance]]:
    """``await make_balance(employee, leave_type, total_days, used_days=..., year=...)``"""
    return functools.partial(add_balance, db_session)
