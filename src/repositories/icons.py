"""Icon repository over an async SQLAlchemy session."""

from collections.abc import Collection, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.icon import ClientIcon, ClientIconAssignment


class IconRepository:
    """Reads and writes icon definitions within the caller's session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_with_conditions(self, company_id: UUID) -> Sequence[ClientIcon]:
        """List active icons of a tenant that carry an auto-assign condition."""
        result = await self.session.execute(
            select(ClientIcon)
            .where(
                ClientIcon.company_id == company_id,
                ClientIcon.is_active.is_(True),
                ClientIcon.auto_assign_condition.is_not(None),
            )
            .order_by(ClientIcon.id)
        )
        return result.scalars().all()

    async def get(
        self,
        icon_id: UUID,
        company_id: UUID,
        *,
        active_only: bool = False,
    ) -> ClientIcon | None:
        """Get an icon of a tenant."""
        stmt = select(ClientIcon).where(
            ClientIcon.id == icon_id, ClientIcon.company_id == company_id
        )
        if active_only:
            stmt = stmt.where(ClientIcon.is_active.is_(True))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_active_by_name(self, company_id: UUID, name: str) -> ClientIcon | None:
        """Find the active icon with a given name in a tenant."""
        result = await self.session.execute(
            select(ClientIcon).where(
                ClientIcon.company_id == company_id,
                ClientIcon.name == name,
                ClientIcon.is_active.is_(True),
            )
        )
        return result.scalars().first()

    async def find_active_by_ids(
        self, company_id: UUID, icon_ids: Collection[UUID]
    ) -> Sequence[ClientIcon]:
        """Load the active icons of a tenant among the given ids."""
        if not icon_ids:
            return []
        result = await self.session.execute(
            select(ClientIcon).where(
                ClientIcon.company_id == company_id,
                ClientIcon.id.in_(list(icon_ids)),
                ClientIcon.is_active.is_(True),
            )
        )
        return result.scalars().all()

    async def list_active(
        self,
        company_id: UUID,
        *,
        offset: int = 0,
        limit: int = 50,
    ) -> tuple[Sequence[ClientIcon], int]:
        """List a tenant's active icons ordered by name.

        Returns:
            Tuple of (page of icons, total active count)
        """
        filters = (ClientIcon.company_id == company_id, ClientIcon.is_active.is_(True))
        total_result = await self.session.execute(
            select(func.count(ClientIcon.id)).where(*filters)
        )
        list_result = await self.session.execute(
            select(ClientIcon)
            .where(*filters)
            .order_by(ClientIcon.name.asc())
            .offset(offset)
            .limit(limit)
        )
        return list_result.scalars().all(), int(total_result.scalar() or 0)

    async def find_assigned_to_client(self, client_id: UUID) -> Sequence[ClientIcon]:
        """List active icons assigned (manually or automatically) to a client."""
        result = await self.session.execute(
            select(ClientIcon)
            .join(ClientIconAssignment, ClientIconAssignment.icon_id == ClientIcon.id)
            .where(
                ClientIconAssignment.client_id == client_id,
                ClientIcon.is_active.is_(True),
            )
            .order_by(ClientIcon.name.asc())
        )
        return result.scalars().all()

    def add(self, icon: ClientIcon) -> ClientIcon:
        """Stage a new icon in the session."""
        self.session.add(icon)
        return icon
