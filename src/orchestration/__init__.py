"""Background work orchestration."""

from src.orchestration.scheduler import (
    SweepFactory,
    SweepHandle,
    SweepScheduler,
    get_scheduler,
    reset_scheduler,
)

__all__ = [
    "SweepFactory",
    "SweepHandle",
    "SweepScheduler",
    "get_scheduler",
    "reset_scheduler",
]
