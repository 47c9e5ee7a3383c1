"""Tests for the condition evaluator."""

from datetime import date
from decimal import Decimal
from typing import Any

import pytest

from src.conditions import (
    ConditionGroup,
    ConditionOperator,
    SingleCondition,
    evaluate,
    evaluate_operator,
    resolve_field,
)
from src.conditions.evaluator import is_empty, normalize_value, to_number
from src.models.client import Client, EmploymentType, VatStatus


def _client(**fields: Any) -> Client:
    fields.setdefault("name", "Acme sp. z o.o.")
    return Client(**fields)


def _leaf(field: str, operator: str, value: Any = None, second_value: Any = None) -> dict:
    condition: dict[str, Any] = {"field": field, "operator": operator, "value": value}
    if second_value is not None:
        condition["secondValue"] = second_value
    return condition


class TestOperators:
    """Operator table semantics."""

    @pytest.mark.parametrize(
        ("field_value", "operator", "value", "second_value", "expected"),
        [
            # equals / notEquals
            ("VAT_MONTHLY", "equals", "vat_monthly", None, True),
            (VatStatus.VAT_MONTHLY, "equals", "VAT_MONTHLY", None, True),
            ("Acme", "equals", "Other", None, False),
            (5, "equals", 5, None, True),
            (True, "equals", 1, None, False),
            (None, "equals", None, None, True),
            ("Acme", "notEquals", "acme", None, False),
            ("Acme", "notEquals", "Other", None, True),
            (date(2024, 1, 15), "equals", "2024-01-15", None, True),
            # contains / notContains
            (["GTU_01", "GTU_02"], "contains", "GTU_01", None, True),
            (["GTU_01", "GTU_02"], "contains", "gtu_02", None, True),
            (["GTU_01", "GTU_02"], "contains", "GTU_03", None, False),
            ("Handel detaliczny", "contains", "DETAL", None, True),
            (None, "contains", "x", None, False),
            (None, "contains", "", None, True),
            (["GTU_01"], "notContains", "GTU_01", None, False),
            ("Usługi IT", "notContains", "handel", None, True),
            # numeric comparisons
            (10, "greaterThan", 5, None, True),
            ("10", "greaterThan", "5", None, True),
            (5, "greaterThan", 5, None, False),
            (5, "greaterThanOrEqual", 5, None, True),
            (3, "lessThan", 4.5, None, True),
            (Decimal("4.5"), "lessThanOrEqual", 4.5, None, True),
            ("abc", "greaterThan", 1, None, False),
            (None, "lessThan", 1, None, False),
            ("", "lessThan", 1, None, False),
            (float("nan"), "lessThan", 1, None, False),
            (10, "greaterThan", "not a number", None, False),
            # isEmpty / isNotEmpty
            (None, "isEmpty", None, None, True),
            ("   ", "isEmpty", None, None, True),
            ([], "isEmpty", None, None, True),
            ("x", "isEmpty", None, None, False),
            (0, "isEmpty", None, None, False),
            (["GTU_01"], "isNotEmpty", None, None, True),
            ("", "isNotEmpty", None, None, False),
            # in / notIn
            ("DG", "in", ["DG", "DG_ETAT"], None, True),
            ("dg_etat", "in", ["DG", "DG_ETAT"], None, True),
            ("DG", "in", ["DG_ETAT"], None, False),
            ("DG", "in", "DG", None, False),
            ("DG", "notIn", ["DG_ETAT"], None, True),
            ("DG", "notIn", ["DG"], None, False),
            ("DG", "notIn", "DG", None, True),
            # between
            (50, "between", 10, 100, True),
            (10, "between", 10, 100, True),
            (100, "between", 10, 100, True),
            (101, "between", 10, 100, False),
            (50, "between", 10, None, False),
            ("x", "between", 10, 100, False),
            # unknown operator
            ("x", "matchesRegex", "x", None, False),
        ],
    )
    def test_operator(
        self,
        field_value: Any,
        operator: str,
        value: Any,
        second_value: Any,
        expected: bool,
    ) -> None:
        """Each operator applied to a single field value."""
        record = {"subject": field_value}
        condition = _leaf("subject", operator, value, second_value)
        assert evaluate(record, condition) is expected

    def test_evaluate_operator_accepts_enum_directly(self) -> None:
        """evaluate_operator works without a condition wrapper."""
        assert evaluate_operator(42, ConditionOperator.BETWEEN, 40, 50) is True
        assert evaluate_operator(42, ConditionOperator.BETWEEN, 40) is False


class TestGroups:
    """AND/OR groups and nesting."""

    def test_and_requires_all(self) -> None:
        """An AND group matches only if every child matches."""
        client = _client(employment_type=EmploymentType.DG, vat_status=VatStatus.NO)
        condition = {
            "logicalOperator": "and",
            "conditions": [
                _leaf("employmentType", "equals", "DG"),
                _leaf("vatStatus", "equals", "VAT_MONTHLY"),
            ],
        }
        assert evaluate(client, condition) is False

    def test_or_requires_any(self) -> None:
        """An OR group matches if one child matches."""
        client = _client(employment_type=EmploymentType.DG, vat_status=VatStatus.NO)
        condition = {
            "logicalOperator": "or",
            "conditions": [
                _leaf("employmentType", "equals", "DG"),
                _leaf("vatStatus", "equals", "VAT_MONTHLY"),
            ],
        }
        assert evaluate(client, condition) is True

    def test_empty_groups(self) -> None:
        """Empty AND is vacuously true, empty OR is false."""
        client = _client()
        assert evaluate(client, {"logicalOperator": "and", "conditions": []}) is True
        assert evaluate(client, {"logicalOperator": "or", "conditions": []}) is False

    def test_three_level_nesting(self) -> None:
        """Nested groups evaluate recursively at any depth."""
        condition = ConditionGroup(
            logical_operator="and",
            conditions=[
                SingleCondition(field="employmentType", operator="equals", value="DG"),
                ConditionGroup(
                    logical_operator="or",
                    conditions=[
                        SingleCondition(field="vatStatus", operator="equals", value="VAT_MONTHLY"),
                        ConditionGroup(
                            logical_operator="and",
                            conditions=[
                                SingleCondition(
                                    field="gtuCodes", operator="contains", value="GTU_01"
                                ),
                                SingleCondition(field="pkdCode", operator="isNotEmpty"),
                            ],
                        ),
                    ],
                ),
            ],
        )

        matching = _client(
            employment_type=EmploymentType.DG,
            vat_status=VatStatus.NO,
            gtu_codes=["GTU_01"],
            pkd_code="62.01.Z",
        )
        missing_pkd = _client(
            employment_type=EmploymentType.DG,
            vat_status=VatStatus.NO,
            gtu_codes=["GTU_01"],
        )
        wrong_type = _client(
            employment_type=EmploymentType.DG_ETAT,
            vat_status=VatStatus.VAT_MONTHLY,
        )

        assert evaluate(matching, condition) is True
        assert evaluate(missing_pkd, condition) is False
        assert evaluate(wrong_type, condition) is False


class TestInputs:
    """Condition inputs that are missing or malformed."""

    def test_none_condition_is_false(self) -> None:
        """No condition never matches."""
        assert evaluate(_client(), None) is False

    @pytest.mark.parametrize(
        "raw",
        [
            {},
            {"operator": "equals", "value": 1},
            {"logicalOperator": "xor", "conditions": []},
            {"logicalOperator": "and", "conditions": "nope"},
        ],
    )
    def test_malformed_condition_is_false(self, raw: dict) -> None:
        """A stored tree that does not parse evaluates to False."""
        assert evaluate(_client(), raw) is False

    def test_evaluation_does_not_mutate_record(self) -> None:
        """The record is only read."""
        record = {"gtuCodes": ["GTU_01"], "name": "Acme"}
        evaluate(record, _leaf("gtuCodes", "contains", "GTU_01"))
        assert record == {"gtuCodes": ["GTU_01"], "name": "Acme"}

    @pytest.mark.parametrize(
        ("record", "condition"),
        [
            ({"amount": 5}, _leaf("amount", "greaterThan", 10**400)),
            ({"amount": 10**400}, _leaf("amount", "lessThan", 5)),
            ({"amount": 50}, _leaf("amount", "between", 10, 10**400)),
            ({"amount": Decimal("sNaN")}, _leaf("amount", "greaterThanOrEqual", 1)),
            ({"amount": Decimal("sNaN")}, _leaf("amount", "equals", 1)),
            ({"amount": Decimal("sNaN")}, _leaf("amount", "in", [1, 2])),
            ({"amount": 10**5000}, _leaf("amount", "contains", "1")),
        ],
    )
    def test_unrepresentable_numbers_do_not_match(self, record: dict, condition: dict) -> None:
        """Out-of-range and signaling-NaN operands evaluate to False instead of raising."""
        assert evaluate(record, condition) is False


class TestFieldResolution:
    """Field paths against clients, mappings and objects."""

    def test_camel_and_snake_names_resolve_client_columns(self) -> None:
        """UI names and attribute names both reach the same column."""
        client = _client(pkd_code="62.01.Z", gtu_codes=["GTU_12"])
        assert resolve_field(client, "pkdCode") == "62.01.Z"
        assert resolve_field(client, "pkd_code") == "62.01.Z"
        assert resolve_field(client, "gtuCodes") == ["GTU_12"]

    def test_unknown_field_resolves_to_none(self) -> None:
        """Unknown and private names resolve to None."""
        client = _client()
        assert resolve_field(client, "doesNotExist") is None
        assert resolve_field(client, "_sa_instance_state") is None
        assert resolve_field(client, "icon_assignments") is None

    def test_nested_paths_walk_mappings(self) -> None:
        """Dotted paths descend into nested mappings."""
        record = {"company": {"address": {"city": "Kraków"}}}
        assert resolve_field(record, "company.address.city") == "Kraków"
        assert resolve_field(record, "company.missing.city") is None
        assert resolve_field(record, "company..city") is None

    def test_missing_field_with_is_empty(self) -> None:
        """An unset client field counts as empty."""
        assert evaluate(_client(), _leaf("email", "isEmpty")) is True
        assert evaluate(_client(email="a@b.pl"), _leaf("email", "isEmpty")) is False

    def test_contains_on_gtu_codes(self) -> None:
        """contains on the GTU list checks membership."""
        client = _client(gtu_codes=["GTU_01", "GTU_02"])
        assert evaluate(client, _leaf("gtuCodes", "contains", "GTU_01")) is True
        assert evaluate(client, _leaf("gtuCodes", "contains", "GTU_1")) is False


class TestCoercion:
    """Helpers used by the operators."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (True, 1.0),
            (False, 0.0),
            (7, 7.0),
            (Decimal("2.5"), 2.5),
            (" 3.25 ", 3.25),
            ("-1e3", -1000.0),
            ("", None),
            ("  ", None),
            ("12abc", None),
            ("nan", None),
            (float("nan"), None),
            (Decimal("NaN"), None),
            (Decimal("sNaN"), None),
            (10**400, None),
            (-(10**400), None),
            ("1e400", float("inf")),
            (None, None),
            ([1], None),
            (date(2024, 1, 1), None),
        ],
    )
    def test_to_number(self, value: Any, expected: float | None) -> None:
        """Only real numbers and numeric literals coerce."""
        assert to_number(value) == expected

    def test_normalize_value(self) -> None:
        """Enums, dates and strings normalize for comparison."""
        assert normalize_value(VatStatus.VAT_MONTHLY) == "vat_monthly"
        assert normalize_value(date(2024, 5, 1)) == "2024-05-01"
        assert normalize_value("ABC") == "abc"
        assert normalize_value(3) == 3

    def test_is_empty(self) -> None:
        """Empty means None, blank text or an empty collection."""
        assert is_empty(None)
        assert is_empty(" \t")
        assert is_empty(())
        assert not is_empty(False)
        assert not is_empty(0)
