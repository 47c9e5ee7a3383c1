"""Client repository over an async SQLAlchemy session."""

from collections.abc import Sequence
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.client import (
    AmlGroup,
    Client,
    EmploymentType,
    TaxScheme,
    VatStatus,
    ZusStatus,
)


@dataclass
class ClientQuery:
    """Filters for listing a tenant's clients."""

    search: str | None = None
    employment_type: EmploymentType | None = None
    vat_status: VatStatus | None = None
    tax_scheme: TaxScheme | None = None
    zus_status: ZusStatus | None = None
    aml_group_enum: AmlGroup | None = None
    gtu_code: str | None = None
    receive_email_copy: bool | None = None
    is_active: bool | None = None


def escape_like(pattern: str) -> str:
    """Escape LIKE wildcards so user input matches literally."""
    return pattern.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ClientRepository:
    """Reads and writes clients within the caller's session/transaction."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(
        self,
        client_id: UUID,
        company_id: UUID,
        *,
        is_active: bool | None = None,
    ) -> Client | None:
        """Get a client of a tenant, optionally filtered by active flag."""
        stmt = select(Client).where(Client.id == client_id, Client.company_id == company_id)
        if is_active is not None:
            stmt = stmt.where(Client.is_active.is_(is_active))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find(
        self,
        company_id: UUID,
        *,
        is_active: bool = True,
        offset: int = 0,
        limit: int | None = None,
    ) -> Sequence[Client]:
        """List a tenant's clients in stable id order for offset paging."""
        stmt = (
            select(Client)
            .where(Client.company_id == company_id, Client.is_active.is_(is_active))
            .order_by(Client.id)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def count(self, company_id: UUID, *, is_active: bool = True) -> int:
        """Count a tenant's clients with the given active flag."""
        stmt = select(func.count(Client.id)).where(
            Client.company_id == company_id, Client.is_active.is_(is_active)
        )
        result = await self.session.execute(stmt)
        return int(result.scalar() or 0)

    async def search(
        self,
        company_id: UUID,
        query: ClientQuery,
        *,
        offset: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[Client], int]:
        """Filter, order by name and paginate a tenant's clients.

        Returns:
            Tuple of (page of clients, total matching count)
        """
        filters = [Client.company_id == company_id]

        if query.search:
            pattern = f"%{escape_like(query.search.strip().lower())}%"
            filters.append(
                or_(
                    func.lower(Client.name).like(pattern, escape="\\"),
                    func.lower(func.coalesce(Client.nip, "")).like(pattern, escape="\\"),
                    func.lower(func.coalesce(Client.email, "")).like(pattern, escape="\\"),
                )
            )
        if query.employment_type is not None:
            filters.append(Client.employment_type == query.employment_type)
        if query.vat_status is not None:
            filters.append(Client.vat_status == query.vat_status)
        if query.tax_scheme is not None:
            filters.append(Client.tax_scheme == query.tax_scheme)
        if query.zus_status is not None:
            filters.append(Client.zus_status == query.zus_status)
        if query.aml_group_enum is not None:
            filters.append(Client.aml_group_enum == query.aml_group_enum)
        if query.gtu_code:
            filters.append(self._gtu_code_filter(query.gtu_code))
        if query.receive_email_copy is not None:
            filters.append(Client.receive_email_copy.is_(query.receive_email_copy))
        if query.is_active is not None:
            filters.append(Client.is_active.is_(query.is_active))

        total_result = await self.session.execute(
            select(func.count(Client.id)).where(*filters)
        )
        total = int(total_result.scalar() or 0)

        list_result = await self.session.execute(
            select(Client)
            .where(*filters)
            .order_by(Client.name.asc(), Client.id.asc())
            .limit(limit)
            .offset(offset)
        )
        return list_result.scalars().all(), total

    def _gtu_code_filter(self, gtu_code: str):
        if self.session.get_bind().dialect.name == "postgresql":
            return Client.gtu_codes.any(gtu_code)
        # JSON-encoded array on other backends
        return cast(Client.gtu_codes, String).like(f'%"{escape_like(gtu_code)}"%', escape="\\")

    def add(self, client: Client) -> Client:
        """Stage a new client in the session."""
        self.session.add(client)
        return client

    async def delete(self, client: Client) -> None:
        """Permanently delete a client row."""
        await self.session.delete(client)
