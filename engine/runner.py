import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from models import Flow, ObjectType
from registry import SchemaIntrospector

from .actions import ActionExecutor, ExecutionReport, FormulaEvaluator
from .conditions import ConditionEvaluator
from .evaluator import EvaluationResult, RuleEvaluator
from .resolver import FieldResolver, Record, RelationshipLoader

logger = logging.getLogger(__name__)


@dataclass
class FlowRunResult:
    flow_id: str | None
    flow_name: str
    skipped: bool = False
    evaluation: EvaluationResult | None = None
    execution: ExecutionReport = field(default_factory=ExecutionReport)
    error: str | None = None


class FlowRunner:
    """Evaluates flows against a record and applies the winning row's actions."""

    def __init__(
        self,
        schema: SchemaIntrospector,
        loader: RelationshipLoader | None = None,
        formula_evaluator: FormulaEvaluator | None = None,
    ) -> None:
        resolver = FieldResolver(schema, loader)
        self.evaluator = RuleEvaluator(ConditionEvaluator(resolver))
        self.executor = ActionExecutor(resolver, formula_evaluator)

    def run(self, flow: Flow, record: Record) -> FlowRunResult:
        result = FlowRunResult(flow_id=flow.id, flow_name=flow.name)
        if not flow.is_active:
            result.skipped = True
            return result

        # Failures here are reported on the result; the record mutation that
        # triggered evaluation must go through regardless.
        try:
            result.evaluation = self.evaluator.evaluate(flow, record)
            if result.evaluation.matched:
                result.execution = self.executor.execute(flow.object_type, record, result.evaluation.actions)
        except Exception as exc:
            logger.exception("Evaluation of flow %s (%s) failed", flow.name, flow.id)
            result.error = str(exc)
        return result

    def run_all(self, flows: Iterable[Flow], object_type: ObjectType | str, record: Record) -> List[FlowRunResult]:
        object_type = ObjectType(object_type)
        return [self.run(flow, record) for flow in flows if flow.object_type == object_type]
