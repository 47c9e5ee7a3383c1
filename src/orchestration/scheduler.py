"""Background scheduler for icon reevaluation sweeps.

Sweeps are fire-and-forget from the point of view of the request that
triggered them, but every submission returns a ``SweepHandle`` that tests
and shutdown code can await. Concurrency is bounded by a semaphore; there
is no further backpressure, so rapid condition edits queue independent
sweeps.

Usage:
    scheduler = SweepScheduler(max_concurrency=2)
    handle = await scheduler.submit("icon_sweep:1234", lambda: sweep(icon))
    ...
    await scheduler.drain()  # e.g. at shutdown

Inline mode (``inline=True``) awaits each sweep before ``submit`` returns,
which makes background work deterministic in unit tests and scripts.
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from src.core.config import settings

logger = structlog.get_logger()

# Type alias for sweep coroutine factories
SweepFactory = Callable[[], Awaitable[None]]


class SweepHandle:
    """Observable handle for a submitted sweep."""

    def __init__(self, name: str, task: "asyncio.Task[None]"):
        self.name = name
        self._task = task

    def done(self) -> bool:
        """Return True once the sweep finished (successfully or not)."""
        return self._task.done()

    async def wait(self) -> None:
        """Wait for the sweep to finish, re-raising its failure if any."""
        await asyncio.shield(self._task)

    def exception(self) -> BaseException | None:
        """Return the sweep's failure, or None if it succeeded.

        Raises:
            asyncio.InvalidStateError: If the sweep has not finished yet
        """
        if self._task.cancelled():
            return asyncio.CancelledError()
        return self._task.exception()


class SweepScheduler:
    """Runs sweeps as bounded asyncio tasks detached from their trigger.

    Thread Safety:
        Not thread-safe. Submit from the event loop that runs the sweeps.
    """

    def __init__(self, max_concurrency: int = 2, *, inline: bool = False) -> None:
        """Initialize the scheduler.

        Args:
            max_concurrency: Max sweeps running at once
            inline: Await each sweep inside ``submit``

        Raises:
            ValueError: If max_concurrency is below 1
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.max_concurrency = max_concurrency
        self.inline = inline
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._tasks: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def pending(self) -> int:
        """Number of submitted sweeps that have not finished."""
        return len(self._tasks)

    async def submit(self, name: str, factory: SweepFactory) -> SweepHandle:
        """Schedule a sweep.

        Args:
            name: Identifier used in logs and the handle
            factory: Zero-argument callable returning the sweep coroutine

        Returns:
            Handle for the scheduled sweep

        Raises:
            RuntimeError: If the scheduler has been shut down
        """
        if self._closed:
            raise RuntimeError("SweepScheduler is shut down")

        task = asyncio.create_task(self._run(name, factory), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        logger.info("sweep_scheduled", sweep=name, pending=self.pending, inline=self.inline)

        handle = SweepHandle(name, task)
        if self.inline:
            await asyncio.wait({task})
        return handle

    async def _run(self, name: str, factory: SweepFactory) -> None:
        async with self._semaphore:
            logger.debug("sweep_started", sweep=name)
            await factory()

    def _on_done(self, task: "asyncio.Task[None]") -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("sweep_cancelled", sweep=task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "sweep_failed",
                sweep=task.get_name(),
                error=str(exc),
                exc_info=exc,
            )

    async def drain(self) -> None:
        """Wait until every submitted sweep has finished."""
        while self._tasks:
            await asyncio.wait(set(self._tasks))

    async def shutdown(self) -> None:
        """Reject new submissions and wait for in-flight sweeps."""
        self._closed = True
        await self.drain()
        logger.info("sweep_scheduler_shutdown")


# Module-level singleton for convenience (optional usage pattern)
_default_scheduler: SweepScheduler | None = None


def get_scheduler() -> SweepScheduler:
    """Get or create the default scheduler from settings.

    Returns:
        The default SweepScheduler instance
    """
    global _default_scheduler
    if _default_scheduler is None:
        _default_scheduler = SweepScheduler(
            max_concurrency=settings.auto_assign_sweep_concurrency,
            inline=settings.auto_assign_inline_sweeps,
        )
    return _default_scheduler


def reset_scheduler() -> None:
    """Reset the default scheduler. Primarily for testing."""
    global _default_scheduler
    _default_scheduler = None


__all__ = [
    "SweepFactory",
    "SweepHandle",
    "SweepScheduler",
    "get_scheduler",
    "reset_scheduler",
]
