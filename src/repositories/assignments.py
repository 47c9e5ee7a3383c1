"""Client-icon assignment repository.

Writes used by the auto-assign synchronizer are set-based and race-safe:
creation is an ``INSERT ... ON CONFLICT DO NOTHING`` against the unique
(client_id, icon_id) constraint, and removal is a single bulk DELETE.
"""

from collections.abc import Collection
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.icon import ClientIconAssignment

_INSERT_BY_DIALECT = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


class AssignmentRepository:
    """Reads and writes client-icon join rows within the caller's session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_one(
        self,
        client_id: UUID,
        icon_id: UUID,
        *,
        is_auto_assigned: bool | None = None,
    ) -> ClientIconAssignment | None:
        """Get the row for a (client, icon) pair, optionally by kind."""
        stmt = select(ClientIconAssignment).where(
            ClientIconAssignment.client_id == client_id,
            ClientIconAssignment.icon_id == icon_id,
        )
        if is_auto_assigned is not None:
            stmt = stmt.where(ClientIconAssignment.is_auto_assigned.is_(is_auto_assigned))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def auto_icon_ids(self, client_id: UUID) -> set[UUID]:
        """Return the icon ids auto-assigned to a client."""
        result = await self.session.execute(
            select(ClientIconAssignment.icon_id).where(
                ClientIconAssignment.client_id == client_id,
                ClientIconAssignment.is_auto_assigned.is_(True),
            )
        )
        return set(result.scalars().all())

    async def find_for_icon_and_clients(
        self, icon_id: UUID, client_ids: Collection[UUID]
    ) -> dict[UUID, ClientIconAssignment]:
        """Map client id -> row for one icon across a batch of clients."""
        if not client_ids:
            return {}
        result = await self.session.execute(
            select(ClientIconAssignment).where(
                ClientIconAssignment.icon_id == icon_id,
                ClientIconAssignment.client_id.in_(list(client_ids)),
            )
        )
        return {row.client_id: row for row in result.scalars().all()}

    async def insert_or_ignore(
        self,
        client_id: UUID,
        icon_id: UUID,
        *,
        is_auto_assigned: bool = True,
    ) -> bool:
        """Insert a row unless the (client, icon) pair already has one.

        Two writers reaching the same conclusion concurrently both succeed;
        the loser's insert is a no-op instead of a unique-constraint error.

        Returns:
            True if a row was inserted

        Raises:
            ValueError: If the database dialect has no insert-or-ignore form
        """
        dialect = self.session.get_bind().dialect.name
        insert = _INSERT_BY_DIALECT.get(dialect)
        if insert is None:
            raise ValueError(f"insert-or-ignore is not supported on {dialect}")

        stmt = (
            insert(ClientIconAssignment.__table__)
            .values(client_id=client_id, icon_id=icon_id, is_auto_assigned=is_auto_assigned)
            .on_conflict_do_nothing(index_elements=["client_id", "icon_id"])
        )
        result = await self.session.execute(stmt)
        return bool(result.rowcount)

    async def delete_stale_auto(self, client_id: UUID, keep_icon_ids: Collection[UUID]) -> int:
        """Delete a client's auto rows whose icon is not in ``keep_icon_ids``.

        Returns:
            Number of rows deleted
        """
        stmt = delete(ClientIconAssignment).where(
            ClientIconAssignment.client_id == client_id,
            ClientIconAssignment.is_auto_assigned.is_(True),
        )
        if keep_icon_ids:
            stmt = stmt.where(ClientIconAssignment.icon_id.not_in(list(keep_icon_ids)))
        return await self._execute_delete(stmt)

    async def delete_auto(self, client_id: UUID, icon_id: UUID) -> int:
        """Delete the auto row of one (client, icon) pair, leaving manual rows."""
        stmt = delete(ClientIconAssignment).where(
            ClientIconAssignment.client_id == client_id,
            ClientIconAssignment.icon_id == icon_id,
            ClientIconAssignment.is_auto_assigned.is_(True),
        )
        return await self._execute_delete(stmt)

    async def delete_auto_for_icon(self, icon_id: UUID) -> int:
        """Delete every auto row of an icon."""
        stmt = delete(ClientIconAssignment).where(
            ClientIconAssignment.icon_id == icon_id,
            ClientIconAssignment.is_auto_assigned.is_(True),
        )
        return await self._execute_delete(stmt)

    async def delete_for_icon(self, icon_id: UUID) -> int:
        """Delete every row (manual and auto) of an icon."""
        stmt = delete(ClientIconAssignment).where(ClientIconAssignment.icon_id == icon_id)
        return await self._execute_delete(stmt)

    async def delete_for_client(self, client_id: UUID) -> int:
        """Delete every row (manual and auto) of a client."""
        stmt = delete(ClientIconAssignment).where(ClientIconAssignment.client_id == client_id)
        return await self._execute_delete(stmt)

    async def delete_pair(self, client_id: UUID, icon_id: UUID) -> int:
        """Delete the row of a (client, icon) pair regardless of kind."""
        stmt = delete(ClientIconAssignment).where(
            ClientIconAssignment.client_id == client_id,
            ClientIconAssignment.icon_id == icon_id,
        )
        return await self._execute_delete(stmt)

    def add(self, assignment: ClientIconAssignment) -> ClientIconAssignment:
        """Stage a new row in the session."""
        self.session.add(assignment)
        return assignment

    async def _execute_delete(self, stmt) -> int:
        result = await self.session.execute(
            stmt.execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
