"""Payloads for icon operations."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.conditions import Condition
from src.models.icon import IconType


class IconCreate(BaseModel):
    """Payload for creating an icon."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=100)
    color: str | None = Field(default=None, max_length=20)
    icon_type: IconType = Field(default=IconType.CUSTOM, alias="iconType")
    icon_value: str | None = Field(default=None, max_length=100, alias="iconValue")
    tooltip: str | None = Field(default=None, max_length=255)
    file_name: str | None = Field(default=None, max_length=255, alias="fileName")
    file_path: str | None = Field(default=None, max_length=500, alias="filePath")
    mime_type: str | None = Field(default=None, max_length=100, alias="mimeType")
    file_size: int | None = Field(default=None, ge=0, alias="fileSize")
    auto_assign_condition: Condition | None = Field(default=None, alias="autoAssignCondition")


class IconUpdate(BaseModel):
    """Payload for partially updating an icon.

    Only fields present in the payload are applied. Sending
    ``autoAssignCondition: null`` clears the condition; omitting it leaves
    the stored condition untouched.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(default=None, min_length=1, max_length=100)
    color: str | None = Field(default=None, max_length=20)
    icon_type: IconType | None = Field(default=None, alias="iconType")
    icon_value: str | None = Field(default=None, max_length=100, alias="iconValue")
    tooltip: str | None = Field(default=None, max_length=255)
    file_name: str | None = Field(default=None, max_length=255, alias="fileName")
    file_path: str | None = Field(default=None, max_length=500, alias="filePath")
    mime_type: str | None = Field(default=None, max_length=100, alias="mimeType")
    file_size: int | None = Field(default=None, ge=0, alias="fileSize")
    auto_assign_condition: Condition | None = Field(default=None, alias="autoAssignCondition")

    @property
    def condition_supplied(self) -> bool:
        """True when the payload sets (or clears) the condition."""
        return "auto_assign_condition" in self.model_fields_set


class IconPage(BaseModel):
    """Page of active icons, ordered by name."""

    items: list[Any]
    total: int
    page: int
    limit: int
