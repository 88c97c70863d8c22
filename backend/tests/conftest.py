from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import Settings, set_settings
from app.db import get_session
from app.main import app
from app.models import SQLModel
from app.models.enums import Role
from app.services.directory import InMemoryUserDirectory, UserInfo, set_user_directory
from tests.helpers import ADMIN2_ID, ADMIN_ID, EMPLOYEE2_ID, EMPLOYEE_ID, MANAGER2_ID, MANAGER_ID, ORPHAN_ID

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite://")


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory database per test, with every table created."""
    _engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
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


@pytest.fixture(autouse=True)
def directory() -> Iterator[InMemoryUserDirectory]:
    """Seed the in-memory user directory for every test.

    Org chart: two admins, two managers, an employee under each manager and
    one employee without a manager.
    """
    svc = InMemoryUserDirectory()
    for user in (
        UserInfo(id=ADMIN_ID, name="Ada Admin", email="ada@example.com", role=Role.ADMIN),
        UserInfo(id=ADMIN2_ID, name="Alan Admin", email="alan@example.com", role=Role.ADMIN),
        UserInfo(id=MANAGER_ID, name="Mia Manager", email="mia@example.com", role=Role.MANAGER),
        UserInfo(id=MANAGER2_ID, name="Max Manager", email="max@example.com", role=Role.MANAGER),
        UserInfo(id=EMPLOYEE_ID, name="Eve Employee", email="eve@example.com", manager_id=MANAGER_ID),
        UserInfo(id=EMPLOYEE2_ID, name="Eli Employee", email="eli@example.com", manager_id=MANAGER2_ID),
        UserInfo(id=ORPHAN_ID, name="Oli Orphan", email="oli@example.com"),
    ):
        svc.seed(user)
    set_user_directory(svc)
    yield svc
    set_user_directory(InMemoryUserDirectory())


@pytest.fixture
def override_settings() -> Iterator[Callable[..., Settings]]:
    """Swap the cached settings for the duration of a test."""

    def _apply(**overrides: object) -> Settings:
        settings = Settings(**overrides)  # type: ignore[arg-type]
        set_settings(settings)
        return settings

    yield _apply
    set_settings(None)
