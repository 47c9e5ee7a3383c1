"""SQLAlchemy models for the client icons application."""

from src.models.base import Base, TimestampMixin
from src.models.client import (
    AmlGroup,
    Client,
    EmploymentType,
    TaxScheme,
    VatStatus,
    ZusStatus,
)
from src.models.icon import ClientIcon, ClientIconAssignment, IconType

__all__ = [
    "Base",
    "TimestampMixin",
    "Client",
    "AmlGroup",
    "EmploymentType",
    "TaxScheme",
    "VatStatus",
    "ZusStatus",
    "ClientIcon",
    "ClientIconAssignment",
    "IconType",
]
