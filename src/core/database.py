"""Async database engine factory, session management and unit of work."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.core.config import settings

# Import all models to register them with Base.metadata
from src.models import (  # noqa: F401
    Base,
    Client,
    ClientIcon,
    ClientIconAssignment,
)


def create_engine(
    database_url: str | None = None,
    **engine_options: Any,
) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    Pool sizing only applies to server databases; SQLite URLs get the
    driver's default pool.

    Args:
        database_url: Database connection URL. Defaults to settings.database_url.
        **engine_options: Additional options passed to create_async_engine.

    Returns:
        Configured AsyncEngine instance.
    """
    url = database_url or settings.database_url

    default_options: dict[str, Any] = {"echo": settings.debug}
    if not url.startswith("sqlite"):
        default_options.update(
            {
                "pool_size": 20,
                "max_overflow": 0,
                "pool_pre_ping": True,
            }
        )
    default_options.update(engine_options)

    return create_async_engine(url, **default_options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory.

    Args:
        engine: AsyncEngine instance to bind sessions to.

    Returns:
        Configured async_sessionmaker instance.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# Default engine and session factory (lazily initialized)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the default async engine.

    Returns:
        The default AsyncEngine instance.
    """
    global _engine
    if _engine is None:
        _engine = create_engine()
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the default session factory.

    Returns:
        The default async_sessionmaker instance.
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory(get_engine())
    return _session_factory


@asynccontextmanager
async def unit_of_work(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """Open a session whose work commits atomically on exit.

    Repositories built on the yielded session take part in the same
    transaction. Any exception rolls the whole unit back and propagates;
    the session is released in both cases.

    Example:
        async with unit_of_work(session_factory) as session:
            session.add(client)
            await AssignmentRepository(session).delete_for_client(client.id)

    Args:
        session_factory: Factory to open the session from. Defaults to the
            application's session factory.

    Yields:
        AsyncSession bound to the open transaction.
    """
    factory = session_factory or get_session_factory()
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

