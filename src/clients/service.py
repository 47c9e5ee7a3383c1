"""Client lifecycle operations.

Every write that can change which conditions a client matches (create,
update, restore) re-runs icon auto-assignment once the client itself is
committed. Auto-assignment is a side effect: its failure is logged and
never fails the client operation.
"""

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.clients.schemas import ClientCreate, ClientFilters, ClientPage, ClientUpdate
from src.core.database import unit_of_work
from src.core.exceptions import ClientNotFoundError
from src.core.logging import get_logger
from src.icons.auto_assign import AutoAssignService
from src.models.client import Client
from src.repositories import AssignmentRepository, ClientQuery, ClientRepository

logger = get_logger(__name__)

_NOT_NULLABLE = frozenset({"name", "receive_email_copy"})


class ClientService:
    """Client CRUD scoped to a tenant (``company_id``)."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        auto_assign: AutoAssignService,
    ):
        self.session_factory = session_factory
        self.auto_assign = auto_assign

    async def find_all(self, company_id: UUID, filters: ClientFilters | None = None) -> ClientPage:
        """List a tenant's clients, filtered and ordered by name.

        Args:
            company_id: Tenant to list
            filters: Search, attribute filters and pagination

        Returns:
            Page of clients with the total match count
        """
        filters = filters or ClientFilters()
        query = ClientQuery(
            **filters.model_dump(exclude={"page", "limit"}),
        )
        async with self.session_factory() as session:
            items, total = await ClientRepository(session).search(
                company_id,
                query,
                offset=(filters.page - 1) * filters.limit,
                limit=filters.limit,
            )
        return ClientPage(items=list(items), total=total, page=filters.page, limit=filters.limit)

    async def find_one(self, client_id: UUID, company_id: UUID) -> Client:
        """Get a client of a tenant, active or not.

        Raises:
            ClientNotFoundError: If the client is not in the tenant
        """
        async with self.session_factory() as session:
            client = await ClientRepository(session).get(client_id, company_id)
        if client is None:
            raise ClientNotFoundError(client_id, company_id)
        return client

    async def create(
        self,
        company_id: UUID,
        data: ClientCreate,
        user_id: UUID | None = None,
    ) -> Client:
        """Create a client and auto-assign its icons."""
        values = data.model_dump()
        values["name"] = values["name"].strip()

        async with unit_of_work(self.session_factory) as session:
            client = ClientRepository(session).add(
                Client(**values, company_id=company_id, created_by_id=user_id)
            )
            await session.flush()

        logger.info("client_created", client_id=str(client.id), company_id=str(company_id))
        await self._auto_assign(client, user_id, "create")
        return client

    async def update(
        self,
        client_id: UUID,
        company_id: UUID,
        data: ClientUpdate,
        user_id: UUID | None = None,
    ) -> Client:
        """Apply a partial update and re-evaluate auto-assigned icons.

        Raises:
            ClientNotFoundError: If the client is not in the tenant
        """
        updates = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field not in _NOT_NULLABLE
        }

        async with unit_of_work(self.session_factory) as session:
            client = await ClientRepository(session).get(client_id, company_id)
            if client is None:
                raise ClientNotFoundError(client_id, company_id)

            if updates.get("name"):
                updates["name"] = updates["name"].strip()
            for field, value in updates.items():
                setattr(client, field, value)
            client.updated_by_id = user_id

        logger.info(
            "client_updated",
            client_id=str(client_id),
            company_id=str(company_id),
            fields=sorted(data.model_fields_set),
        )
        await self._auto_assign(client, user_id, "update")
        return client

    async def remove(
        self,
        client_id: UUID,
        company_id: UUID,
        user_id: UUID | None = None,
    ) -> None:
        """Soft-delete a client. Its icon assignments are kept for a restore.

        Raises:
            ClientNotFoundError: If the client is not in the tenant
        """
        async with unit_of_work(self.session_factory) as session:
            client = await ClientRepository(session).get(client_id, company_id)
            if client is None:
                raise ClientNotFoundError(client_id, company_id)
            client.is_active = False
            client.updated_by_id = user_id

        logger.info("client_removed", client_id=str(client_id), company_id=str(company_id))

    async def restore(
        self,
        client_id: UUID,
        company_id: UUID,
        user_id: UUID | None = None,
    ) -> Client:
        """Re-activate a soft-deleted client and re-evaluate its icons.

        Raises:
            ClientNotFoundError: If no inactive client with this id is in the tenant
        """
        async with unit_of_work(self.session_factory) as session:
            client = await ClientRepository(session).get(
                client_id, company_id, is_active=False
            )
            if client is None:
                raise ClientNotFoundError(client_id, company_id)
            client.is_active = True
            client.updated_by_id = user_id

        logger.info("client_restored", client_id=str(client_id), company_id=str(company_id))
        await self._auto_assign(client, user_id, "restore")
        return client

    async def hard_delete(
        self,
        client_id: UUID,
        company_id: UUID,
        user_id: UUID | None = None,
    ) -> None:
        """Permanently delete a client and all of its icon assignments.

        Raises:
            ClientNotFoundError: If the client is not in the tenant
        """
        async with unit_of_work(self.session_factory) as session:
            clients = ClientRepository(session)
            client = await clients.get(client_id, company_id)
            if client is None:
                raise ClientNotFoundError(client_id, company_id)

            # Audit trail before the row is gone
            logger.warning(
                "client_permanently_deleted",
                client_id=str(client.id),
                client_name=client.name,
                company_id=str(company_id),
                performed_by=str(user_id) if user_id else None,
            )
            await AssignmentRepository(session).delete_for_client(client_id)
            await clients.delete(client)

    async def _auto_assign(self, client: Client, user_id: UUID | None, operation: str) -> None:
        try:
            await self.auto_assign.evaluate_and_assign(client)
        except Exception as exc:
            logger.warning(
                "client_auto_assign_failed",
                operation=operation,
                client_id=str(client.id),
                company_id=str(client.company_id),
                user_id=str(user_id) if user_id else None,
                error=str(exc),
            )
