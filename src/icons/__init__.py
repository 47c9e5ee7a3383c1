"""Client icons: definitions, manual assignment and condition-based auto-assignment."""

from src.icons.auto_assign import AutoAssignResult, AutoAssignService, SweepStats
from src.icons.schemas import IconCreate, IconPage, IconUpdate
from src.icons.service import IconService, validate_icon_type

__all__ = [
    "AutoAssignResult",
    "AutoAssignService",
    "IconCreate",
    "IconPage",
    "IconService",
    "IconUpdate",
    "SweepStats",
    "validate_icon_type",
]
