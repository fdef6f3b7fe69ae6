from __future__ import annotations

import os
import uuid
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hr_leave.db import get_session
from hr_leave.main import app
from hr_leave.models import SQLModel
from hr_leave.services.directory import EmployeeInfo, InMemoryDirectory, set_directory
from hr_leave.services.notifier import InMemoryNotifier, LoggingNotifier, set_notifier

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator
    from pathlib import Path

    from sqlalchemy.ext.asyncio import AsyncEngine

ADMIN_ID = uuid.UUID("00000000-0000-0000-0000-0000000000a1")
MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b1")
OTHER_MANAGER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000b2")
EMPLOYEE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c1")
TEAMMATE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c2")
OUTSIDER_ID = uuid.UUID("00000000-0000-0000-0000-0000000000c3")


def headers_for(user_id: uuid.UUID, role: str = "employee") -> dict[str, str]:
    return {"X-User-Id": str(user_id), "X-Role": role}


@pytest.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    """Create a fresh database for each test.

    Defaults to a SQLite file so several connections can race against the
    same data. Set TEST_DATABASE_URL to run against PostgreSQL instead.
    """
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'leave.db'}"
    _engine = create_async_engine(url)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Yield a session bound to the per-test database."""
    async with session_factory() as session:
        yield session


@pytest.fixture(autouse=True)
def directory() -> Iterator[InMemoryDirectory]:
    """Seed the in-memory directory for every test.

    MANAGER_ID manages EMPLOYEE_ID and TEAMMATE_ID; OUTSIDER_ID reports to
    OTHER_MANAGER_ID.
    """
    svc = InMemoryDirectory()
    for employee in (
        EmployeeInfo(id=ADMIN_ID, first_name="Hannah", last_name="Reyes", email="hannah@example.com"),
        EmployeeInfo(id=MANAGER_ID, first_name="Marcus", last_name="Lee", email="marcus@example.com"),
        EmployeeInfo(id=OTHER_MANAGER_ID, first_name="Olga", last_name="Novak", email="olga@example.com"),
        EmployeeInfo(
            id=EMPLOYEE_ID,
            first_name="Alice",
            last_name="Johnson",
            email="alice@example.com",
            job_title="Software Engineer",
            manager_id=MANAGER_ID,
        ),
        EmployeeInfo(
            id=TEAMMATE_ID,
            first_name="Bob",
            last_name="Smith",
            email="bob@example.com",
            manager_id=MANAGER_ID,
        ),
        EmployeeInfo(
            id=OUTSIDER_ID,
            first_name="Carol",
            last_name="White",
            email="carol@example.com",
            manager_id=OTHER_MANAGER_ID,
        ),
    ):
        svc.seed(employee)
    set_directory(svc)
    yield svc
    set_directory(InMemoryDirectory())


@pytest.fixture(autouse=True)
def notifier() -> Iterator[InMemoryNotifier]:
    """Capture notifications instead of logging them."""
    svc = InMemoryNotifier()
    set_notifier(svc)
    yield svc
    set_notifier(LoggingNotifier())


@pytest.fixture
async def async_client(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
