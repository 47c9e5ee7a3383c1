"""Icon management and manual icon assignment."""

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.conditions import condition_changed, condition_to_json
from src.core.database import unit_of_work
from src.core.exceptions import (
    ClientNotFoundError,
    DuplicateIconNameError,
    IconAssignmentError,
    IconNotFoundError,
    IconValidationError,
)
from src.core.logging import get_logger
from src.icons.auto_assign import AutoAssignService
from src.icons.schemas import IconCreate, IconPage, IconUpdate
from src.models.icon import ClientIcon, ClientIconAssignment, IconType
from src.repositories import AssignmentRepository, ClientRepository, IconRepository

logger = get_logger(__name__)

DEFAULT_ICON_PAGE_SIZE = 50

_FILE_FIELDS = ("file_name", "file_path", "mime_type", "file_size")


def validate_icon_type(
    icon_type: IconType | str,
    icon_value: str | None,
    file_path: str | None,
) -> None:
    """Check that an icon carries what its type needs to render.

    Raises:
        IconValidationError: If a lucide/emoji icon has no value or a custom
            icon has no uploaded file
    """
    icon_type = IconType(icon_type)
    if icon_type in (IconType.LUCIDE, IconType.EMOJI) and not icon_value:
        raise IconValidationError(
            f"iconValue is required for {icon_type.value} icons",
            icon_type=icon_type.value,
        )
    if icon_type is IconType.CUSTOM and not file_path:
        raise IconValidationError(
            "A file is required for custom icons",
            icon_type=icon_type.value,
        )


class IconService:
    """Icon CRUD and assignment operations, scoped to a tenant.

    Condition changes are handed to the auto-assign synchronizer once the
    icon itself is committed.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        auto_assign: AutoAssignService,
    ):
        self.session_factory = session_factory
        self.auto_assign = auto_assign

    async def find_all_icons(
        self,
        company_id: UUID,
        page: int = 1,
        limit: int = DEFAULT_ICON_PAGE_SIZE,
    ) -> IconPage:
        """List a tenant's active icons ordered by name."""
        page = max(page, 1)
        async with self.session_factory() as session:
            items, total = await IconRepository(session).list_active(
                company_id, offset=(page - 1) * limit, limit=limit
            )
        return IconPage(items=list(items), total=total, page=page, limit=limit)

    async def find_icon_by_id(self, icon_id: UUID, company_id: UUID) -> ClientIcon:
        """Get an active icon of a tenant.

        Raises:
            IconNotFoundError: If the icon is missing, inactive or in another tenant
        """
        async with self.session_factory() as session:
            icon = await IconRepository(session).get(icon_id, company_id, active_only=True)
        if icon is None:
            raise IconNotFoundError(icon_id, company_id)
        return icon

    async def create_icon(
        self,
        company_id: UUID,
        data: IconCreate,
        user_id: UUID | None = None,
    ) -> ClientIcon:
        """Create an icon and, if it has a condition, sweep the tenant.

        Args:
            company_id: Tenant the icon belongs to
            data: Icon payload
            user_id: Creating user, stored for audit

        Returns:
            The created icon

        Raises:
            IconValidationError: If the icon type lacks its value or file
            DuplicateIconNameError: If an active icon already has the name
        """
        validate_icon_type(data.icon_type, data.icon_value, data.file_path)
        name = data.name.strip()

        async with unit_of_work(self.session_factory) as session:
            icons = IconRepository(session)
            if await icons.find_active_by_name(company_id, name) is not None:
                raise DuplicateIconNameError(name, company_id)

            icon = icons.add(
                ClientIcon(
                    company_id=company_id,
                    name=name,
                    color=data.color,
                    icon_type=data.icon_type.value,
                    icon_value=data.icon_value,
                    tooltip=data.tooltip,
                    file_name=data.file_name,
                    file_path=data.file_path,
                    mime_type=data.mime_type,
                    file_size=data.file_size,
                    auto_assign_condition=condition_to_json(data.auto_assign_condition),
                    created_by_id=user_id,
                )
            )
            await session.flush()

        logger.info(
            "icon_created",
            icon_id=str(icon.id),
            company_id=str(company_id),
            has_condition=icon.auto_assign_condition is not None,
        )

        if icon.auto_assign_condition is not None:
            await self._reevaluate(icon)
        return icon

    async def update_icon(
        self,
        icon_id: UUID,
        company_id: UUID,
        data: IconUpdate,
    ) -> ClientIcon:
        """Apply a partial update; re-sweep the tenant if the condition changed.

        Only a condition present in the payload is compared against the
        stored one. Switching the type away from ``custom`` drops the file
        metadata.

        Raises:
            IconNotFoundError: If the icon is missing or inactive
            IconValidationError: If the resulting type lacks its value or file
            DuplicateIconNameError: If the new name is taken by another icon
        """
        updates = data.model_dump(exclude_unset=True, exclude={"auto_assign_condition"})
        changed = False

        async with unit_of_work(self.session_factory) as session:
            icons = IconRepository(session)
            icon = await icons.get(icon_id, company_id, active_only=True)
            if icon is None:
                raise IconNotFoundError(icon_id, company_id)

            name = updates.pop("name", None)
            if name is not None and name.strip() != icon.name:
                name = name.strip()
                existing = await icons.find_active_by_name(company_id, name)
                if existing is not None and existing.id != icon.id:
                    raise DuplicateIconNameError(name, company_id)
                icon.name = name

            icon_type = updates.pop("icon_type", None)
            target_type = IconType(icon_type or icon.icon_type)
            for field, value in updates.items():
                setattr(icon, field, value)
            icon.icon_type = target_type.value

            if target_type is not IconType.CUSTOM:
                for field in _FILE_FIELDS:
                    setattr(icon, field, None)

            validate_icon_type(target_type, icon.icon_value, icon.file_path)

            if data.condition_supplied:
                new_condition = condition_to_json(data.auto_assign_condition)
                changed = condition_changed(icon.auto_assign_condition, new_condition)
                icon.auto_assign_condition = new_condition

        logger.info(
            "icon_updated",
            icon_id=str(icon.id),
            company_id=str(company_id),
            condition_changed=changed,
        )

        if changed:
            await self._reevaluate(icon)
        return icon

    async def _reevaluate(self, icon: ClientIcon) -> None:
        # The icon change is already committed; a failed sweep start must not undo it
        try:
            await self.auto_assign.reevaluate_icon_for_all_clients(icon)
        except Exception as exc:
            logger.warning(
                "icon_reevaluation_failed",
                icon_id=str(icon.id),
                company_id=str(icon.company_id),
                error=str(exc),
                exc_info=True,
            )

    async def remove_icon(self, icon_id: UUID, company_id: UUID) -> None:
        """Soft-delete an icon after removing all of its assignments.

        Raises:
            IconNotFoundError: If the icon is missing or already inactive
        """
        async with unit_of_work(self.session_factory) as session:
            icon = await IconRepository(session).get(icon_id, company_id, active_only=True)
            if icon is None:
                raise IconNotFoundError(icon_id, company_id)
            removed = await AssignmentRepository(session).delete_for_icon(icon_id)
            icon.is_active = False

        logger.info(
            "icon_removed",
            icon_id=str(icon_id),
            company_id=str(company_id),
            assignments_removed=removed,
        )

    async def get_client_icons(self, client_id: UUID, company_id: UUID) -> Sequence[ClientIcon]:
        """List the active icons assigned to a client, manual and automatic."""
        async with self.session_factory() as session:
            await self._require_client(session, client_id, company_id)
            return await IconRepository(session).find_assigned_to_client(client_id)

    async def assign_icon(
        self,
        client_id: UUID,
        icon_id: UUID,
        company_id: UUID,
    ) -> ClientIconAssignment:
        """Manually assign an icon to a client.

        Returns the existing row when the pair is already assigned (manually
        or automatically).

        Raises:
            ClientNotFoundError: If the client is not in the tenant
            IconNotFoundError: If the icon is missing or inactive
        """
        async with unit_of_work(self.session_factory) as session:
            await self._require_client(session, client_id, company_id)
            if await IconRepository(session).get(icon_id, company_id, active_only=True) is None:
                raise IconNotFoundError(icon_id, company_id)

            assignments = AssignmentRepository(session)
            inserted = await assignments.insert_or_ignore(
                client_id, icon_id, is_auto_assigned=False
            )
            assignment = await assignments.find_one(client_id, icon_id)

        if inserted:
            logger.info("icon_assigned", client_id=str(client_id), icon_id=str(icon_id))
        return assignment

    async def unassign_icon(self, client_id: UUID, icon_id: UUID, company_id: UUID) -> None:
        """Remove the assignment of an icon to a client, whatever its kind.

        Raises:
            ClientNotFoundError: If the client is not in the tenant
        """
        async with unit_of_work(self.session_factory) as session:
            await self._require_client(session, client_id, company_id)
            removed = await AssignmentRepository(session).delete_pair(client_id, icon_id)

        logger.info(
            "icon_unassigned",
            client_id=str(client_id),
            icon_id=str(icon_id),
            removed=removed,
        )

    async def set_client_icons(
        self,
        client_id: UUID,
        icon_ids: Sequence[UUID],
        company_id: UUID,
        user_id: UUID | None = None,
    ) -> list[ClientIcon]:
        """Replace all icons of a client with a manual selection.

        The client and every icon are verified before any write. The
        replacement itself runs in one transaction.

        Returns:
            The icons now assigned to the client

        Raises:
            ClientNotFoundError: If the client is not in the tenant
            IconNotFoundError: If any icon is missing or inactive
            IconAssignmentError: If the replacement fails; nothing is changed
        """
        unique_ids = list(dict.fromkeys(icon_ids))

        async with self.session_factory() as session:
            await self._require_client(session, client_id, company_id)
            found = {
                icon.id: icon
                for icon in await IconRepository(session).find_active_by_ids(
                    company_id, unique_ids
                )
            }
        for icon_id in unique_ids:
            if icon_id not in found:
                raise IconNotFoundError(icon_id, company_id)

        try:
            async with unit_of_work(self.session_factory) as session:
                assignments = AssignmentRepository(session)
                await assignments.delete_for_client(client_id)
                for icon_id in unique_ids:
                    assignments.add(
                        ClientIconAssignment(
                            client_id=client_id, icon_id=icon_id, is_auto_assigned=False
                        )
                    )
        except Exception as exc:
            logger.error(
                "set_client_icons_failed",
                client_id=str(client_id),
                company_id=str(company_id),
                user_id=str(user_id) if user_id else None,
                icon_count=len(unique_ids),
                error=str(exc),
                exc_info=True,
            )
            raise IconAssignmentError(
                client_id,
                len(unique_ids),
                str(exc),
                company_id=company_id,
                user_id=user_id,
                operation_stage="set_client_icons",
            ) from exc

        logger.info(
            "client_icons_set",
            client_id=str(client_id),
            company_id=str(company_id),
            icon_count=len(unique_ids),
        )
        return [found[icon_id] for icon_id in unique_ids]

    async def _require_client(
        self, session: AsyncSession, client_id: UUID, company_id: UUID
    ) -> None:
        if await ClientRepository(session).get(client_id, company_id) is None:
            raise ClientNotFoundError(client_id, company_id)
