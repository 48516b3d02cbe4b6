"""Tests for typed condition evaluation."""

import logging
from datetime import date
from decimal import Decimal

import pytest

from engine import ConditionEvaluator, FieldResolver, apply_operator, coerce
from engine.coercion import CoercionError
from models import Condition, DataType, LiteralValue, Operator
from registry import operators_for


@pytest.fixture
def evaluator(schema):
    return ConditionEvaluator(FieldResolver(schema))


def _condition(column, operator, value=None, data_type=None, **kwargs):
    return Condition(
        column_name=column,
        operator=operator,
        value=LiteralValue(value=value),
        data_type=data_type,
        **kwargs,
    )


def test_coerce():
    assert coerce("5000", DataType.NUMERIC) == Decimal("5000")
    assert coerce(0.1, DataType.NUMERIC) == Decimal("0.1")
    assert coerce("42", DataType.INTEGER) == 42
    assert coerce("true", DataType.BOOLEAN) is True
    assert coerce("2024-05-01", DataType.DATE) == date(2024, 5, 1)
    assert coerce(7, DataType.TEXT) == "7"
    assert coerce(None, DataType.INTEGER) is None
    with pytest.raises(CoercionError):
        coerce("many", DataType.INTEGER)


def test_apply_operator_null_tests():
    assert apply_operator(Operator.IS_NULL, None) is True
    assert apply_operator(Operator.IS_NOT_NULL, None) is False
    assert apply_operator(Operator.IS_NOT_NULL, "x") is True
    assert apply_operator(Operator.IS_TRUE, None) is False
    assert apply_operator(Operator.IS_FALSE, None) is False


def test_binary_operators_on_null_are_false():
    binary = [operator for data_type in DataType for operator in operators_for(data_type) if not operator.is_unary]
    for operator in binary:
        assert apply_operator(operator, None, "x") is False


def test_equality(evaluator):
    condition = _condition("status", Operator.EQUALS, "Qualified")

    assert evaluator.evaluate(condition, {"status": "Qualified"}, "leads") is True
    assert evaluator.evaluate(condition, {"status": "New"}, "leads") is False


def test_not_equals_on_null_is_false(evaluator):
    condition = _condition("status", Operator.NOT_EQUALS, "Qualified")
    assert evaluator.evaluate(condition, {"status": None}, "leads") is False


def test_null_value_with_binary_and_null_test(evaluator):
    """A null resolved value fails a binary operator and satisfies IS NULL."""
    record = {"email": None}

    assert evaluator.evaluate(_condition("email", Operator.EQUALS, "a@example.com"), record, "leads") is False
    assert evaluator.evaluate(_condition("email", Operator.IS_NULL), record, "leads") is True
    assert evaluator.evaluate(_condition("email", Operator.IS_NOT_NULL), record, "leads") is False


def test_unary_operator_ignores_stored_value(evaluator):
    condition = _condition("email", Operator.IS_NULL, "a@example.com")
    assert evaluator.evaluate(condition, {"email": None}, "leads") is True


def test_numeric_comparison_coerces_both_sides(evaluator):
    condition = _condition("amount", Operator.GREATER_THAN, "1000", data_type=DataType.NUMERIC)

    assert evaluator.evaluate(condition, {"amount": 5000}, "opportunities") is True
    assert evaluator.evaluate(condition, {"amount": "999.5"}, "opportunities") is False


def test_data_type_falls_back_to_schema(evaluator):
    condition = _condition("score", Operator.GREATER_OR_EQUAL, "10")
    assert evaluator.evaluate(condition, {"score": 9}, "leads") is False
    assert evaluator.evaluate(condition, {"score": "10"}, "leads") is True


def test_uncoercible_record_value_is_false(evaluator):
    condition = _condition("score", Operator.EQUALS, 5, data_type=DataType.INTEGER)
    assert evaluator.evaluate(condition, {"score": "lots"}, "leads") is False


def test_uncoercible_comparison_value_is_false(evaluator):
    condition = _condition("score", Operator.GREATER_THAN, "lots", data_type=DataType.INTEGER)
    assert evaluator.evaluate(condition, {"score": 5}, "leads") is False


def test_date_ordering(evaluator):
    condition = _condition("expected_close_date", Operator.LESS_THAN, "2024-06-01", data_type=DataType.DATE)

    assert evaluator.evaluate(condition, {"expected_close_date": "2024-05-01"}, "opportunities") is True
    assert evaluator.evaluate(condition, {"expected_close_date": date(2024, 7, 1)}, "opportunities") is False


def test_text_matching_is_case_sensitive(evaluator):
    record = {"company": "Qualified Widgets"}

    assert evaluator.evaluate(_condition("company", Operator.CONTAINS, "Widget"), record, "leads") is True
    assert evaluator.evaluate(_condition("company", Operator.CONTAINS, "widget"), record, "leads") is False
    assert evaluator.evaluate(_condition("company", Operator.NOT_CONTAINS, "Gadget"), record, "leads") is True
    assert evaluator.evaluate(_condition("company", Operator.STARTS_WITH, "Qual"), record, "leads") is True
    assert evaluator.evaluate(_condition("company", Operator.ENDS_WITH, "Widgets"), record, "leads") is True


def test_truth_tests(evaluator):
    assert evaluator.evaluate(_condition("is_converted", Operator.IS_TRUE), {"is_converted": True}, "leads") is True
    assert evaluator.evaluate(_condition("is_converted", Operator.IS_FALSE), {"is_converted": "false"}, "leads") is True
    assert evaluator.evaluate(_condition("is_converted", Operator.IS_TRUE), {"is_converted": None}, "leads") is False


def test_condition_without_operator_is_false(evaluator):
    assert evaluator.evaluate(_condition("status", None), {"status": "New"}, "leads") is False


def test_unknown_field_degrades_to_false(evaluator, caplog):
    with caplog.at_level(logging.WARNING):
        result = evaluator.evaluate(_condition("shoe_size", Operator.EQUALS, 9), {"shoe_size": 9}, "leads")

    assert result is False
    assert "could not be resolved" in caplog.text


def test_missing_related_record(evaluator):
    """A condition through a relationship with no related record: binary is false, IS NULL is true."""
    record = {"status": "New", "customer": None}
    path = {"object_path": ["customer"], "referenced_field": "email"}

    equals = _condition("customer_id", Operator.EQUALS, "a@example.com", **path)
    is_null = _condition("customer_id", Operator.IS_NULL, **path)

    assert evaluator.evaluate(equals, record, "leads") is False
    assert evaluator.evaluate(is_null, record, "leads") is True


def test_related_record_value(evaluator):
    record = {"customer": {"email": "a@example.com"}}
    condition = _condition("customer_id", Operator.ENDS_WITH, "@example.com", object_path=["customer"], referenced_field="email")

    assert evaluator.evaluate(condition, record, "leads") is True
