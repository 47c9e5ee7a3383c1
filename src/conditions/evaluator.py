"""Condition evaluator for icon auto-assignment.

Interprets a condition tree against one client record and answers whether
the client matches. The evaluator is pure: it reads the record, never
mutates it, performs no I/O and never raises for malformed input. Anything
it cannot interpret (unknown operator, non-numeric operand, wrong value
shape) evaluates to False, except ``notIn`` with a non-list value, which is
True.

It runs once per (client, icon) pair, so a tenant-wide sweep calls it
thousands of times; keep it free of logging and database access.
"""

import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from src.conditions.fields import resolve_field
from src.conditions.models import (
    Condition,
    ConditionGroup,
    ConditionOperator,
    SingleCondition,
    try_parse_condition,
)

_NUMERIC_LITERAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def evaluate(record: Any, condition: Condition | Mapping[str, Any] | None) -> bool:
    """Evaluate a condition tree against a client record.

    Args:
        record: ``Client`` instance or mapping of client fields
        condition: Parsed condition, raw stored JSON, or None

    Returns:
        True if the record matches; False for None or unparseable conditions
    """
    if condition is None:
        return False

    if not isinstance(condition, (ConditionGroup, SingleCondition)):
        condition = try_parse_condition(condition)
        if condition is None:
            return False

    return _evaluate_node(record, condition)


def _evaluate_node(record: Any, node: Condition) -> bool:
    if isinstance(node, ConditionGroup):
        return _evaluate_group(record, node)
    return _evaluate_single(record, node)


def _evaluate_group(record: Any, group: ConditionGroup) -> bool:
    results = (_evaluate_node(record, child) for child in group.conditions)
    if group.logical_operator == "and":
        return all(results)
    return any(results)


def _evaluate_single(record: Any, condition: SingleCondition) -> bool:
    try:
        operator = ConditionOperator(condition.operator)
    except ValueError:
        return False

    field_value = resolve_field(record, condition.field)
    return evaluate_operator(
        field_value, operator, condition.value, condition.second_value
    )


def evaluate_operator(
    field_value: Any,
    operator: ConditionOperator,
    condition_value: Any = None,
    second_value: Any = None,
) -> bool:
    """Apply one operator to a resolved field value.

    Args:
        field_value: Value read from the client
        operator: Operator to apply
        condition_value: Operand from the condition (min for ``between``)
        second_value: Upper bound for ``between``

    Returns:
        Match result; False for operators that do not apply
    """
    match operator:
        case ConditionOperator.EQUALS:
            return _values_equal(field_value, condition_value)

        case ConditionOperator.NOT_EQUALS:
            return not _values_equal(field_value, condition_value)

        case ConditionOperator.CONTAINS:
            return _contains(field_value, condition_value)

        case ConditionOperator.NOT_CONTAINS:
            return not _contains(field_value, condition_value)

        case (
            ConditionOperator.GREATER_THAN
            | ConditionOperator.LESS_THAN
            | ConditionOperator.GREATER_THAN_OR_EQUAL
            | ConditionOperator.LESS_THAN_OR_EQUAL
        ):
            left = to_number(field_value)
            right = to_number(condition_value)
            if left is None or right is None:
                return False
            if operator is ConditionOperator.GREATER_THAN:
                return left > right
            if operator is ConditionOperator.LESS_THAN:
                return left < right
            if operator is ConditionOperator.GREATER_THAN_OR_EQUAL:
                return left >= right
            return left <= right

        case ConditionOperator.IS_EMPTY:
            return is_empty(field_value)

        case ConditionOperator.IS_NOT_EMPTY:
            return not is_empty(field_value)

        case ConditionOperator.IN:
            if not isinstance(condition_value, _SEQUENCE_TYPES):
                return False
            return _is_member(field_value, condition_value)

        case ConditionOperator.NOT_IN:
            # Non-list operand passes; kept pending product confirmation.
            if not isinstance(condition_value, _SEQUENCE_TYPES):
                return True
            return not _is_member(field_value, condition_value)

        case ConditionOperator.BETWEEN:
            if second_value is None:
                return False
            number = to_number(field_value)
            low = to_number(condition_value)
            high = to_number(second_value)
            if number is None or low is None or high is None:
                return False
            return low <= number <= high

        case _:
            return False


def normalize_value(value: Any) -> Any:
    """Normalize a value for equality and membership comparisons.

    Enum members compare by value, dates by ISO string and UUIDs by their
    string form; strings are lower-cased. Other values pass through.
    """
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, (date, datetime)):
        value = value.isoformat()
    elif isinstance(value, UUID):
        value = str(value)
    if isinstance(value, str):
        return value.lower()
    return value


def _values_equal(left: Any, right: Any) -> bool:
    left = normalize_value(left)
    right = normalize_value(right)
    # True must not equal 1
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    try:
        return left == right
    except ArithmeticError:
        # Decimal signaling NaN refuses comparison
        return False


def _is_member(value: Any, candidates: Any) -> bool:
    return any(_values_equal(value, candidate) for candidate in candidates)


def _contains(field_value: Any, condition_value: Any) -> bool:
    if isinstance(field_value, _SEQUENCE_TYPES):
        return _is_member(condition_value, field_value)
    return to_text(condition_value).lower() in to_text(field_value).lower()


def to_number(value: Any) -> float | None:
    """Coerce a value to float, or None if it is not numeric.

    Booleans count as 0/1. Strings must hold a decimal literal. None, blank
    strings, NaN, integers too large for a float, collections and dates are
    not numbers.
    """
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float, Decimal)):
        try:
            number = float(value)
        except (OverflowError, ValueError):
            # Integers beyond float range, signaling NaN
            return None
        return None if math.isnan(number) else number
    if isinstance(value, str):
        text = value.strip()
        if _NUMERIC_LITERAL.fullmatch(text):
            return float(text)
    return None


def to_text(value: Any) -> str:
    """Coerce a value to text for substring matching."""
    if value is None:
        return ""
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, _SEQUENCE_TYPES):
        return ",".join(to_text(item) for item in value)
    try:
        return str(value)
    except ValueError:
        # int above the interpreter's digit limit
        return ""


def is_empty(value: Any) -> bool:
    """Return True for None, blank strings and empty collections."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, _SEQUENCE_TYPES):
        return len(value) == 0
    return False
