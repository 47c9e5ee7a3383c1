"""Pydantic models for auto-assign condition trees.

A condition is either a single predicate on one client field or an AND/OR
group of nested conditions. Trees are authored in the UI and stored as
camelCase JSON on the icon:

    {
        "logicalOperator": "and",
        "conditions": [
            {"field": "vatStatus", "operator": "equals", "value": "VAT_MONTHLY"},
            {"field": "gtuCodes", "operator": "contains", "value": "GTU_01"}
        ]
    }
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class ConditionOperator(str, Enum):
    """Operators supported by single conditions."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    CONTAINS = "contains"
    NOT_CONTAINS = "notContains"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"
    IN = "in"
    NOT_IN = "notIn"
    BETWEEN = "between"


class SingleCondition(BaseModel):
    """Predicate on one client field.

    ``operator`` also accepts strings outside ``ConditionOperator`` so that
    stored trees written by newer UIs still load; such predicates never match.
    """

    model_config = ConfigDict(populate_by_name=True)

    field: str = Field(..., description="Client field path, e.g. 'vatStatus'")
    operator: ConditionOperator | str
    value: Any = None
    second_value: Any = Field(default=None, alias="secondValue")


class ConditionGroup(BaseModel):
    """AND/OR combination of nested conditions."""

    model_config = ConfigDict(populate_by_name=True)

    logical_operator: Literal["and", "or"] = Field(..., alias="logicalOperator")
    conditions: list[Union[ConditionGroup, SingleCondition]] = Field(default_factory=list)


Condition = Union[ConditionGroup, SingleCondition]

ConditionGroup.model_rebuild()

_condition_adapter: TypeAdapter[Condition] = TypeAdapter(Condition)


def parse_condition(raw: Any) -> Condition | None:
    """Parse a stored or submitted condition tree.

    Args:
        raw: JSON-like mapping, an already parsed condition, or None

    Returns:
        Parsed condition, or None when ``raw`` is None

    Raises:
        ValidationError: If ``raw`` is not a valid condition tree
    """
    if raw is None:
        return None
    if isinstance(raw, (ConditionGroup, SingleCondition)):
        return raw
    return _condition_adapter.validate_python(raw)


def try_parse_condition(raw: Any) -> Condition | None:
    """Parse a condition tree, returning None instead of raising."""
    try:
        return parse_condition(raw)
    except ValidationError:
        return None


def condition_to_json(condition: Condition | dict[str, Any] | None) -> dict[str, Any] | None:
    """Serialize a condition to the camelCase JSON stored on icons."""
    if condition is None:
        return None
    if isinstance(condition, dict):
        return condition
    return condition.model_dump(mode="json", by_alias=True, exclude_none=True)


def condition_changed(
    before: Condition | dict[str, Any] | None,
    after: Condition | dict[str, Any] | None,
) -> bool:
    """Compare two condition trees by value, not identity.

    Both sides are serialized to canonical JSON (sorted keys) and compared,
    so a re-submitted identical tree is not a change.
    """
    return _canonical(before) != _canonical(after)


def _canonical(condition: Condition | dict[str, Any] | None) -> bytes:
    return orjson.dumps(condition_to_json(condition), option=orjson.OPT_SORT_KEYS)
