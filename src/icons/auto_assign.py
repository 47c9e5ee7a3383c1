"""Auto-assign synchronizer.

Keeps the auto-assigned rows of ``client_icon_assignments`` in line with the
conditions stored on icons. Two entry points:

- ``evaluate_and_assign(client)``: after a client changes, reconcile that
  client against every icon of its tenant that carries a condition.
- ``reevaluate_icon_for_all_clients(icon)``: after an icon's condition
  changes, reconcile that icon against every active client of the tenant,
  in the background.

Manual rows (``is_auto_assigned=False``) are never created or deleted here.
Inserts are insert-or-ignore, so two writers reaching the same conclusion
concurrently both succeed.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.conditions import Condition, evaluate, try_parse_condition
from src.core.config import settings
from src.core.database import unit_of_work
from src.core.exceptions import AutoAssignError
from src.core.logging import client_id_ctx, company_id_ctx, get_logger, icon_id_ctx
from src.core.sentry import capture_background_failure
from src.models.client import Client
from src.models.icon import ClientIcon, ClientIconAssignment
from src.orchestration.scheduler import SweepHandle, SweepScheduler
from src.repositories import AssignmentRepository, ClientRepository, IconRepository

logger = get_logger(__name__)


@dataclass
class AutoAssignResult:
    """Rows changed by one ``evaluate_and_assign`` call."""

    assigned: int = 0
    removed: int = 0


@dataclass
class SweepStats:
    """Counters reported when an icon sweep completes."""

    processed: int = 0
    assigned: int = 0
    removed: int = 0
    failed: int = 0


class AutoAssignService:
    """Reconciles auto-assigned icons with icon conditions.

    Attributes:
        session_factory: Factory for the sessions each unit of work runs in
        scheduler: Background executor for tenant-wide icon sweeps
        batch_size: Clients loaded per page during a sweep
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        scheduler: SweepScheduler,
        batch_size: int | None = None,
    ):
        self.session_factory = session_factory
        self.scheduler = scheduler
        self.batch_size = batch_size or settings.auto_assign_batch_size

    async def evaluate_and_assign(self, client: Client) -> AutoAssignResult:
        """Reconcile a client's auto-assigned icons with current conditions.

        Runs in a single transaction: missing auto rows are inserted (unless
        a manual row already covers the icon) and auto rows whose condition
        no longer matches are removed in one bulk delete.

        Args:
            client: The client as just saved

        Returns:
            Number of auto rows inserted and removed

        Raises:
            AutoAssignError: If any stage fails; the transaction is rolled back
        """
        company_token = company_id_ctx.set(str(client.company_id))
        client_token = client_id_ctx.set(str(client.id))
        stage = "load_icons"
        result = AutoAssignResult()
        try:
            async with unit_of_work(self.session_factory) as session:
                icons = await IconRepository(session).find_with_conditions(client.company_id)
                assignments = AssignmentRepository(session)

                current: set[UUID] = set()
                if icons:
                    stage = "load_assignments"
                    current = await assignments.auto_icon_ids(client.id)

                stage = "evaluate"
                matching = self._matching_icon_ids(client, icons)

                stage = "add_assignments"
                for icon_id in matching - current:
                    manual = await assignments.find_one(
                        client.id, icon_id, is_auto_assigned=False
                    )
                    if manual is not None:
                        continue
                    if await assignments.insert_or_ignore(client.id, icon_id):
                        result.assigned += 1

                stage = "remove_stale"
                result.removed = await assignments.delete_stale_auto(client.id, matching)

                stage = "commit"
        except Exception as exc:
            logger.error(
                "auto_assign_failed",
                operation_stage=stage,
                error=str(exc),
                exc_info=True,
            )
            raise AutoAssignError(client.id, client.company_id, stage, str(exc)) from exc
        finally:
            client_id_ctx.reset(client_token)
            company_id_ctx.reset(company_token)

        if result.assigned or result.removed:
            logger.info(
                "auto_assign_completed",
                client_id=str(client.id),
                company_id=str(client.company_id),
                assigned=result.assigned,
                removed=result.removed,
            )
        return result

    def _matching_icon_ids(self, client: Client, icons: Sequence[ClientIcon]) -> set[UUID]:
        # Errors propagate: an unevaluated icon must not look like a non-match
        return {icon.id for icon in icons if evaluate(client, icon.auto_assign_condition)}

    async def reevaluate_icon_for_all_clients(self, icon: ClientIcon) -> SweepHandle | None:
        """Reconcile one icon against every active client of its tenant.

        A cleared (or unparseable) condition removes all auto rows of the
        icon immediately and returns None. Otherwise the sweep is handed to
        the scheduler and its handle returned without waiting (unless the
        scheduler runs inline).

        Args:
            icon: The icon whose condition was set or changed

        Returns:
            Handle of the scheduled sweep, or None when no sweep is needed
        """
        condition = try_parse_condition(icon.auto_assign_condition)
        if condition is None:
            async with unit_of_work(self.session_factory) as session:
                removed = await AssignmentRepository(session).delete_auto_for_icon(icon.id)
            logger.info(
                "icon_auto_assignments_cleared",
                icon_id=str(icon.id),
                company_id=str(icon.company_id),
                removed=removed,
            )
            return None

        icon_id, company_id = icon.id, icon.company_id
        return await self.scheduler.submit(
            f"icon_sweep:{icon_id}",
            lambda: self._sweep(icon_id, company_id, condition),
        )

    async def _sweep(self, icon_id: UUID, company_id: UUID, condition: Condition) -> None:
        """Run a tenant-wide sweep for one icon. Never raises."""
        icon_token = icon_id_ctx.set(str(icon_id))
        company_token = company_id_ctx.set(str(company_id))
        stats = SweepStats()
        try:
            async with self.session_factory() as session:
                total = await ClientRepository(session).count(company_id)
            logger.info("icon_sweep_started", total_clients=total, batch_size=self.batch_size)

            for offset in range(0, total, self.batch_size):
                async with self.session_factory() as session:
                    clients = await ClientRepository(session).find(
                        company_id, offset=offset, limit=self.batch_size
                    )
                    existing = await AssignmentRepository(session).find_for_icon_and_clients(
                        icon_id, [client.id for client in clients]
                    )

                for client in clients:
                    stats.processed += 1
                    try:
                        change = await self._reconcile_client(
                            client, icon_id, condition, existing.get(client.id)
                        )
                    except Exception as exc:
                        stats.failed += 1
                        logger.warning(
                            "icon_sweep_client_failed",
                            client_id=str(client.id),
                            error=str(exc),
                        )
                        continue
                    if change > 0:
                        stats.assigned += 1
                    elif change < 0:
                        stats.removed += 1

                # Let request handlers run between pages
                await asyncio.sleep(0)

            logger.info(
                "icon_sweep_completed",
                processed=stats.processed,
                assigned=stats.assigned,
                removed=stats.removed,
                failed=stats.failed,
            )
        except Exception as exc:
            logger.error(
                "icon_sweep_failed",
                icon_id=str(icon_id),
                company_id=str(company_id),
                processed=stats.processed,
                error=str(exc),
                exc_info=True,
            )
            capture_background_failure(exc, icon_id=icon_id, company_id=company_id)
        finally:
            company_id_ctx.reset(company_token)
            icon_id_ctx.reset(icon_token)

    async def _reconcile_client(
        self,
        client: Client,
        icon_id: UUID,
        condition: Condition,
        existing: ClientIconAssignment | None,
    ) -> int:
        """Apply one sweep decision for a client.

        Returns:
            1 if an auto row was inserted, -1 if one was removed, else 0
        """
        matches = evaluate(client, condition)

        if matches and existing is None:
            async with unit_of_work(self.session_factory) as session:
                inserted = await AssignmentRepository(session).insert_or_ignore(
                    client.id, icon_id
                )
            return 1 if inserted else 0

        if not matches and existing is not None and existing.is_auto_assigned:
            async with unit_of_work(self.session_factory) as session:
                removed = await AssignmentRepository(session).delete_auto(client.id, icon_id)
            return -1 if removed else 0

        return 0

