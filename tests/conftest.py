"""Pytest configuration and shared fixtures for tests."""

import os

# Settings are read at import time; tests run against in-memory SQLite.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import uuid  # noqa: E402
from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.core.database import create_session_factory  # noqa: E402
from src.icons.auto_assign import AutoAssignService  # noqa: E402
from src.models import Base, Client, ClientIcon, ClientIconAssignment  # noqa: E402
from src.orchestration.scheduler import SweepScheduler, reset_scheduler  # noqa: E402

ClientFactory = Callable[..., Awaitable[Client]]
IconFactory = Callable[..., Awaitable[ClientIcon]]


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a sqlite-backed engine with the full schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like the application's."""
    return create_session_factory(engine)


@pytest.fixture
def scheduler() -> SweepScheduler:
    """Scheduler that runs sweeps to completion inside submit()."""
    reset_scheduler()
    return SweepScheduler(max_concurrency=2, inline=True)


@pytest.fixture
def auto_assign(
    session_factory: async_sessionmaker[AsyncSession],
    scheduler: SweepScheduler,
) -> AutoAssignService:
    """Auto-assign service over the test database."""
    return AutoAssignService(session_factory, scheduler, batch_size=100)


@pytest.fixture
def company_id() -> uuid.UUID:
    """Tenant id for the test."""
    return uuid.uuid4()


@pytest.fixture
def make_client(
    session_factory: async_sessionmaker[AsyncSession],
    company_id: uuid.UUID,
) -> ClientFactory:
    """Insert a client directly, bypassing the service layer."""

    async def _make(**fields: Any) -> Client:
        fields.setdefault("name", f"Client {uuid.uuid4().hex[:8]}")
        fields.setdefault("company_id", company_id)
        async with session_factory() as session:
            client = Client(**fields)
            session.add(client)
            await session.commit()
        return client

    return _make


@pytest.fixture
def make_icon(
    session_factory: async_sessionmaker[AsyncSession],
    company_id: uuid.UUID,
) -> IconFactory:
    """Insert an icon directly, bypassing the service layer."""

    async def _make(condition: dict[str, Any] | None = None, **fields: Any) -> ClientIcon:
        fields.setdefault("name", f"Icon {uuid.uuid4().hex[:8]}")
        fields.setdefault("company_id", company_id)
        fields.setdefault("icon_type", "emoji")
        fields.setdefault("icon_value", "*")
        async with session_factory() as session:
            icon = ClientIcon(auto_assign_condition=condition, **fields)
            session.add(icon)
            await session.commit()
        return icon

    return _make


@pytest.fixture
def add_assignment(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[ClientIconAssignment]]:
    """Insert an assignment row directly."""

    async def _add(
        client_id: uuid.UUID,
        icon_id: uuid.UUID,
        *,
        is_auto_assigned: bool,
    ) -> ClientIconAssignment:
        async with session_factory() as session:
            row = ClientIconAssignment(
                client_id=client_id, icon_id=icon_id, is_auto_assigned=is_auto_assigned
            )
            session.add(row)
            await session.commit()
        return row

    return _add


@pytest.fixture
def fetch_assignments(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[list[ClientIconAssignment]]]:
    """Read assignment rows, optionally filtered by client or icon."""

    async def _fetch(
        *,
        client_id: uuid.UUID | None = None,
        icon_id: uuid.UUID | None = None,
    ) -> list[ClientIconAssignment]:
        stmt = select(ClientIconAssignment)
        if client_id is not None:
            stmt = stmt.where(ClientIconAssignment.client_id == client_id)
        if icon_id is not None:
            stmt = stmt.where(ClientIconAssignment.icon_id == icon_id)
        async with session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    return _fetch
