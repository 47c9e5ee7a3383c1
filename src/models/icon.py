"""Icon and icon-assignment SQLAlchemy models."""

import enum
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin, utcnow

if TYPE_CHECKING:
    from src.models.client import Client


class IconType(str, enum.Enum):
    """How an icon is rendered."""

    LUCIDE = "lucide"
    CUSTOM = "custom"
    EMOJI = "emoji"


class ClientIcon(Base, TimestampMixin):
    """Represents a tenant-defined tag that can be attached to clients.

    ``auto_assign_condition`` holds the serialized condition tree (camelCase
    JSON, see ``src.conditions.models``). A NULL condition means the icon is
    only ever assigned manually.
    """

    __tablename__ = "client_icons"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    color: Mapped[str | None] = mapped_column(String(20))
    icon_type: Mapped[str] = mapped_column(
        String(20), default=IconType.CUSTOM.value, nullable=False, index=True
    )
    icon_value: Mapped[str | None] = mapped_column(String(100))
    tooltip: Mapped[str | None] = mapped_column(String(255))

    # File metadata, only set for custom icons
    file_name: Mapped[str | None] = mapped_column(String(255))
    file_path: Mapped[str | None] = mapped_column(String(500))
    mime_type: Mapped[str | None] = mapped_column(String(100))
    file_size: Mapped[int | None] = mapped_column(Integer)

    # none_as_null keeps a cleared condition as SQL NULL so IS NOT NULL filters work
    auto_assign_condition: Mapped[dict[str, Any] | None] = mapped_column(
        JSONB(none_as_null=True).with_variant(JSON(none_as_null=True), "sqlite")
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)

    # Relationships
    assignments: Mapped[list["ClientIconAssignment"]] = relationship(
        back_populates="icon", passive_deletes=True
    )


class ClientIconAssignment(Base):
    """Join row between a client and an icon.

    Manual rows (``is_auto_assigned=False``) belong to users. Auto rows are
    created and removed only by the auto-assign synchronizer.
    """

    __tablename__ = "client_icon_assignments"
    __table_args__ = (
        UniqueConstraint("client_id", "icon_id", name="uq_client_icon_assignments_pair"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    icon_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("client_icons.id", ondelete="CASCADE"), nullable=False, index=True
    )
    is_auto_assigned: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    client: Mapped["Client"] = relationship(back_populates="icon_assignments")
    icon: Mapped["ClientIcon"] = relationship(back_populates="assignments")
