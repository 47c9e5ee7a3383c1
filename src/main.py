"""Application wiring with lifecycle management.

The services are transport-agnostic; whatever hosts them (an HTTP app, a
worker, a script) enters ``application()`` once and uses the returned
container:

    async with application() as app:
        client = await app.clients.create(company_id, ClientCreate(name="Acme"))
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.clients.service import ClientService
from src.core.config import settings
from src.core.database import create_engine, create_session_factory
from src.core.logging import configure_logging, get_logger
from src.core.sentry import init_sentry
from src.icons.auto_assign import AutoAssignService
from src.icons.service import IconService
from src.orchestration.scheduler import SweepScheduler

logger = get_logger(__name__)


@dataclass
class Application:
    """Running application resources and services."""

    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    scheduler: SweepScheduler
    auto_assign: AutoAssignService
    clients: ClientService
    icons: IconService


@asynccontextmanager
async def application(database_url: str | None = None) -> AsyncIterator[Application]:
    """Manage application lifecycle resources.

    Startup:
        - Configure structured logging
        - Initialize Sentry error tracking
        - Create database engine and session factory
        - Create the sweep scheduler and services

    Shutdown:
        - Wait for in-flight icon sweeps
        - Dispose database engine
    """
    # Configure logging first
    configure_logging()
    logger.info("Starting application", environment=settings.environment)

    # Initialize error tracking
    init_sentry()

    # Create database engine and session factory
    engine = create_engine(database_url)
    session_factory = create_session_factory(engine)
    logger.info("Database engine created")

    scheduler = SweepScheduler(
        max_concurrency=settings.auto_assign_sweep_concurrency,
        inline=settings.auto_assign_inline_sweeps,
    )
    auto_assign = AutoAssignService(session_factory, scheduler)

    try:
        yield Application(
            engine=engine,
            session_factory=session_factory,
            scheduler=scheduler,
            auto_assign=auto_assign,
            clients=ClientService(session_factory, auto_assign),
            icons=IconService(session_factory, auto_assign),
        )
    finally:
        # Shutdown
        logger.info("Shutting down application", pending_sweeps=scheduler.pending)

        await scheduler.shutdown()
        logger.info("Sweep scheduler drained")

        # Dispose database engine
        await engine.dispose()
        logger.info("Database engine disposed")
