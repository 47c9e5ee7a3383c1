"""Client-related SQLAlchemy models."""

import enum
import uuid
from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import ARRAY, JSON, Boolean, Date, Enum, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from src.models.icon import ClientIconAssignment


class EmploymentType(str, enum.Enum):
    """Form of the client's business activity."""

    DG = "DG"
    DG_ETAT = "DG_ETAT"
    DG_AKCJONARIUSZ = "DG_AKCJONARIUSZ"
    DG_HALF_TIME_BELOW_MIN = "DG_HALF_TIME_BELOW_MIN"
    DG_HALF_TIME_ABOVE_MIN = "DG_HALF_TIME_ABOVE_MIN"


class VatStatus(str, enum.Enum):
    """VAT settlement status."""

    VAT_MONTHLY = "VAT_MONTHLY"
    VAT_QUARTERLY = "VAT_QUARTERLY"
    NO = "NO"
    NO_WATCH_LIMIT = "NO_WATCH_LIMIT"


class TaxScheme(str, enum.Enum):
    """Income tax scheme."""

    PIT_17 = "PIT_17"
    PIT_19 = "PIT_19"
    LUMP_SUM = "LUMP_SUM"
    GENERAL = "GENERAL"


class ZusStatus(str, enum.Enum):
    """Social insurance (ZUS) contribution status."""

    FULL = "FULL"
    PREFERENTIAL = "PREFERENTIAL"
    NONE = "NONE"


class AmlGroup(str, enum.Enum):
    """Anti-money-laundering risk group."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Client(Base, TimestampMixin):
    """Represents a client (business) of an accounting office tenant.

    Soft-deleted by clearing ``is_active``; hard deletion is a separate,
    irreversible operation.
    """

    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    company_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    nip: Mapped[str | None] = mapped_column(String(20), index=True)
    email: Mapped[str | None] = mapped_column(String(255))
    phone: Mapped[str | None] = mapped_column(String(50))
    pkd_code: Mapped[str | None] = mapped_column(String(20))

    company_start_date: Mapped[date | None] = mapped_column(Date)
    cooperation_start_date: Mapped[date | None] = mapped_column(Date)
    suspension_date: Mapped[date | None] = mapped_column(Date)

    company_specificity: Mapped[str | None] = mapped_column(Text)
    additional_info: Mapped[str | None] = mapped_column(Text)

    # Legacy single-value columns kept for older imports
    gtu_code: Mapped[str | None] = mapped_column(String(20))
    aml_group: Mapped[str | None] = mapped_column(String(50))

    gtu_codes: Mapped[list[str] | None] = mapped_column(
        ARRAY(String(20)).with_variant(JSON, "sqlite")
    )
    aml_group_enum: Mapped[AmlGroup | None] = mapped_column(
        Enum(AmlGroup, name="clients_amlgroup_enum")
    )
    employment_type: Mapped[EmploymentType | None] = mapped_column(
        Enum(EmploymentType, name="clients_employmenttype_enum")
    )
    vat_status: Mapped[VatStatus | None] = mapped_column(
        Enum(VatStatus, name="clients_vatstatus_enum")
    )
    tax_scheme: Mapped[TaxScheme | None] = mapped_column(
        Enum(TaxScheme, name="clients_taxscheme_enum")
    )
    zus_status: Mapped[ZusStatus | None] = mapped_column(
        Enum(ZusStatus, name="clients_zusstatus_enum")
    )

    receive_email_copy: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    created_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    updated_by_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)

    # Relationships
    icon_assignments: Mapped[list["ClientIconAssignment"]] = relationship(
        back_populates="client", passive_deletes=True
    )
