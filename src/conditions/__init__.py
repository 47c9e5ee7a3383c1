"""Auto-assign condition trees and their evaluator."""

from src.conditions.evaluator import evaluate, evaluate_operator
from src.conditions.fields import CLIENT_FIELD_ACCESSORS, resolve_field
from src.conditions.models import (
    Condition,
    ConditionGroup,
    ConditionOperator,
    SingleCondition,
    condition_changed,
    condition_to_json,
    parse_condition,
    try_parse_condition,
)

__all__ = [
    "CLIENT_FIELD_ACCESSORS",
    "Condition",
    "ConditionGroup",
    "ConditionOperator",
    "SingleCondition",
    "condition_changed",
    "condition_to_json",
    "evaluate",
    "evaluate_operator",
    "parse_condition",
    "resolve_field",
    "try_parse_condition",
]
