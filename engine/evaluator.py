import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Tuple

from models import Action, Flow

from .conditions import ConditionEvaluator
from .resolver import Record

logger = logging.getLogger(__name__)


class EvaluationState(str, Enum):
    PENDING = "pending"
    EVALUATING = "evaluating"
    MATCHED = "matched"
    NO_MATCH = "no_match"


@dataclass
class EvaluationResult:
    state: EvaluationState = EvaluationState.PENDING
    matched_row: int | None = None
    actions: List[Action] = field(default_factory=list)
    # (row_order, matched) for every group visited, in evaluation order
    trace: List[Tuple[int, bool]] = field(default_factory=list)

    @property
    def matched(self) -> bool:
        return self.state is EvaluationState.MATCHED


class RuleEvaluator:
    """
    First-match-wins evaluation of a flow's IF / ELSE-IF rows.

    Rows are visited one at a time in ascending row order. Conditions inside a row are
    AND-ed and short-circuit on the first failure. The first row whose conditions all
    hold selects its actions and ends evaluation; no other row's actions are returned.
    """

    def __init__(self, condition_evaluator: ConditionEvaluator) -> None:
        self.condition_evaluator = condition_evaluator

    def evaluate(self, flow: Flow, record: Record) -> EvaluationResult:
        result = EvaluationResult()
        if flow.object_type is None:
            raise ValueError("Cannot evaluate a flow without an object type")

        for group in flow.ordered_groups():
            result.state = EvaluationState.EVALUATING
            matched = all(
                self.condition_evaluator.evaluate(condition, record, flow.object_type)
                for condition in group.ordered_conditions()
            )
            result.trace.append((group.row_order, matched))
            if matched:
                result.state = EvaluationState.MATCHED
                result.matched_row = group.row_order
                result.actions = group.ordered_actions()
                logger.debug("Flow %s matched row %d", flow.name, group.row_order)
                return result

        result.state = EvaluationState.NO_MATCH
        logger.debug("Flow %s matched no rows", flow.name)
        return result
