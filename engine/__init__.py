from .actions import (
    ActionExecutor,
    ActionOutcome,
    ActionResolutionError,
    ActionStatus,
    ExecutionReport,
    UnsupportedActionKind,
)
from .coercion import CoercionError, coerce
from .conditions import ConditionEvaluator, apply_operator
from .evaluator import EvaluationResult, EvaluationState, RuleEvaluator
from .resolver import EmbeddedRelationshipLoader, FieldResolver, RelationshipLoader, ResolvedField
from .runner import FlowRunner, FlowRunResult

__all__ = [
    "ActionExecutor",
    "ActionOutcome",
    "ActionResolutionError",
    "ActionStatus",
    "CoercionError",
    "ConditionEvaluator",
    "EmbeddedRelationshipLoader",
    "EvaluationResult",
    "EvaluationState",
    "ExecutionReport",
    "FieldResolver",
    "FlowRunResult",
    "FlowRunner",
    "RelationshipLoader",
    "ResolvedField",
    "RuleEvaluator",
    "UnsupportedActionKind",
    "apply_operator",
    "coerce",
]
