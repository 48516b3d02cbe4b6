"""Tests for first-match-wins rule evaluation."""

import pytest

from engine import ConditionEvaluator, EvaluationState, FieldResolver, RuleEvaluator
from models import Action, Condition, ConditionGroup, DataType, Flow, LiteralValue, ObjectType, Operator


class CountingConditionEvaluator(ConditionEvaluator):
    def __init__(self, resolver):
        super().__init__(resolver)
        self.evaluated = []

    def evaluate(self, condition, record, object_type):
        self.evaluated.append(condition.column_name)
        return super().evaluate(condition, record, object_type)


@pytest.fixture
def evaluator(schema):
    return RuleEvaluator(ConditionEvaluator(FieldResolver(schema)))


def _group(row_order, conditions, priority):
    return ConditionGroup(
        row_order=row_order,
        conditions=conditions,
        actions=[
            Action(field_to_update="priority", data_type=DataType.TEXT, update_value=LiteralValue(value=priority))
        ],
    )


def _score_at_most(limit):
    return Condition(
        column_name="score",
        data_type=DataType.INTEGER,
        operator=Operator.LESS_OR_EQUAL,
        value=LiteralValue(value=limit),
    )


@pytest.fixture
def ladder_flow():
    """Four rows: row i matches when score <= i, so a record with score k first matches row k."""
    groups = [_group(row, [_score_at_most(row)], f"P{row}") for row in range(1, 5)]
    return Flow(name="Score ladder", object_type=ObjectType.LEADS, groups=groups)


def test_single_row_match(evaluator, qualified_lead_flow):
    result = evaluator.evaluate(qualified_lead_flow, {"status": "Qualified"})

    assert result.state is EvaluationState.MATCHED
    assert result.matched_row == 1
    assert [action.field_to_update for action in result.actions] == ["priority"]
    assert result.actions[0].update_value.value == "High"


def test_else_if_row_matches_when_first_fails(evaluator, opportunity_tier_flow):
    result = evaluator.evaluate(opportunity_tier_flow, {"amount": 5000})

    assert result.state is EvaluationState.MATCHED
    assert result.matched_row == 2
    assert result.trace == [(1, False), (2, True)]
    assert [action.update_value.value for action in result.actions] == ["Medium", 50]


def test_first_matching_row_stops_evaluation(evaluator, opportunity_tier_flow):
    """Row 2 would also hold, but only row 1 fires."""
    result = evaluator.evaluate(opportunity_tier_flow, {"amount": 20000})

    assert result.matched_row == 1
    assert result.trace == [(1, True)]
    assert [action.update_value.value for action in result.actions] == ["Top"]


def test_no_match(evaluator, opportunity_tier_flow):
    result = evaluator.evaluate(opportunity_tier_flow, {"amount": 500})

    assert result.state is EvaluationState.NO_MATCH
    assert result.matched_row is None
    assert result.actions == []
    assert result.trace == [(1, False), (2, False)]
    assert not result.matched


@pytest.mark.parametrize("score", [1, 2, 3, 4])
def test_only_the_first_satisfied_row_fires(evaluator, ladder_flow, score):
    result = evaluator.evaluate(ladder_flow, {"score": score})

    assert result.matched_row == score
    assert [action.update_value.value for action in result.actions] == [f"P{score}"]
    assert [matched for _, matched in result.trace] == [False] * (score - 1) + [True]


def test_record_failing_every_row(evaluator, ladder_flow):
    result = evaluator.evaluate(ladder_flow, {"score": 5})

    assert result.state is EvaluationState.NO_MATCH
    assert len(result.trace) == 4


def test_rows_are_visited_in_row_order(evaluator):
    """List position does not matter; row_order does."""
    second = _group(2, [_score_at_most(10)], "second")
    first = _group(1, [_score_at_most(10)], "first")
    flow = Flow(name="Shuffled", object_type=ObjectType.LEADS, groups=[second, first])

    result = evaluator.evaluate(flow, {"score": 3})

    assert result.matched_row == 1
    assert result.actions[0].update_value.value == "first"


def test_conditions_in_a_row_are_and_ed(evaluator):
    status = Condition(
        column_name="status", data_type=DataType.TEXT, operator=Operator.EQUALS, value=LiteralValue(value="Qualified")
    )
    flow = Flow(name="Both", object_type=ObjectType.LEADS, groups=[_group(1, [status, _score_at_most(10)], "High")])

    assert evaluator.evaluate(flow, {"status": "Qualified", "score": 3}).matched
    assert not evaluator.evaluate(flow, {"status": "Qualified", "score": 30}).matched
    assert not evaluator.evaluate(flow, {"status": "New", "score": 3}).matched


def test_row_short_circuits_on_first_false_condition(schema):
    counting = CountingConditionEvaluator(FieldResolver(schema))
    status = Condition(
        column_name="status", data_type=DataType.TEXT, operator=Operator.EQUALS, value=LiteralValue(value="Qualified")
    )
    flow = Flow(name="Short", object_type=ObjectType.LEADS, groups=[_group(1, [status, _score_at_most(10)], "High")])

    RuleEvaluator(counting).evaluate(flow, {"status": "New", "score": 3})

    assert counting.evaluated == ["status"]


def test_flow_without_object_type(evaluator):
    with pytest.raises(ValueError):
        evaluator.evaluate(Flow(name="Unbound"), {})
