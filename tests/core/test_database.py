"""Tests for engine creation and the unit of work."""

import pytest
from sqlalchemy import func, select

from src.core.database import create_engine, unit_of_work
from src.models.client import Client


def test_create_engine_skips_pool_sizing_for_sqlite() -> None:
    """SQLite URLs do not receive server pool options."""
    engine = create_engine("sqlite+aiosqlite:///:memory:")
    try:
        assert engine.dialect.name == "sqlite"
    finally:
        engine.sync_engine.dispose()


@pytest.mark.asyncio
async def test_unit_of_work_commits_on_success(session_factory, company_id) -> None:
    """Work inside the block is committed on exit."""
    async with unit_of_work(session_factory) as session:
        session.add(Client(company_id=company_id, name="Acme"))

    async with session_factory() as session:
        count = (await session.execute(select(func.count(Client.id)))).scalar()
    assert count == 1


@pytest.mark.asyncio
async def test_unit_of_work_rolls_back_on_error(session_factory, company_id) -> None:
    """An exception discards the whole unit and propagates."""
    with pytest.raises(RuntimeError, match="abort"):
        async with unit_of_work(session_factory) as session:
            session.add(Client(company_id=company_id, name="Acme"))
            await session.flush()
            raise RuntimeError("abort")

    async with session_factory() as session:
        count = (await session.execute(select(func.count(Client.id)))).scalar()
    assert count == 0
