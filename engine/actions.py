import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Mapping

from models import Action, ActionKind, ObjectType
from registry import UnknownFieldError, UnknownRelationshipError, find_column

from .coercion import CoercionError, coerce
from .resolver import FieldResolver, Record

logger = logging.getLogger(__name__)

FormulaEvaluator = Callable[[str, Mapping[str, Any]], Any]


class UnsupportedActionKind(RuntimeError):
    """Raised when an action's value kind has no evaluator (formula actions today)."""

    def __init__(self, kind: ActionKind) -> None:
        self.kind = kind
        super().__init__(f"Action kind '{kind.value}' is not supported")


class ActionResolutionError(LookupError):
    """Raised when an action's source value or write target cannot be resolved."""


class ActionStatus(str, Enum):
    APPLIED = "applied"
    UNSUPPORTED_ACTION_KIND = "unsupported_action_kind"
    TARGET_UNRESOLVED = "target_unresolved"
    SOURCE_UNRESOLVED = "source_unresolved"
    INVALID_VALUE = "invalid_value"


@dataclass
class ActionOutcome:
    action_id: str
    field: str
    status: ActionStatus
    value: Any = None
    previous_value: Any = None
    object_type: ObjectType | None = None
    message: str = ""

    @property
    def applied(self) -> bool:
        return self.status is ActionStatus.APPLIED


@dataclass
class ExecutionReport:
    outcomes: List[ActionOutcome] = field(default_factory=list)

    @property
    def applied(self) -> List[ActionOutcome]:
        return [outcome for outcome in self.outcomes if outcome.applied]

    @property
    def failed(self) -> List[ActionOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.applied]


class ActionExecutor:
    """
    Applies the actions of a matched row. Each action is computed and written on its own;
    one failing action is reported and the rest still run.
    """

    def __init__(self, resolver: FieldResolver, formula_evaluator: FormulaEvaluator | None = None) -> None:
        self.resolver = resolver
        self.formula_evaluator = formula_evaluator

    def compute_value(self, action: Action, record: Record, object_type: ObjectType) -> Any:
        kind = action.kind
        if kind is ActionKind.LITERAL:
            return action.update_value.value
        if kind is ActionKind.COPY:
            try:
                resolved = self.resolver.resolve(record, object_type, action.source_field, action.source_field_path)
            except (UnknownFieldError, UnknownRelationshipError) as exc:
                raise ActionResolutionError(str(exc)) from exc
            return resolved.value
        if self.formula_evaluator is None:
            raise UnsupportedActionKind(kind)
        return self.formula_evaluator(action.update_value.value, record)

    def execute_action(self, action: Action, record: Record, object_type: ObjectType | str) -> ActionOutcome:
        object_type = ObjectType(object_type)
        outcome = ActionOutcome(action_id=action.id, field=action.field_to_update, status=ActionStatus.APPLIED)

        try:
            target, target_type = self.resolver.resolve_record(record, object_type, action.target_object_path)
            column = find_column(self.resolver.schema, target_type, action.field_to_update)
        except (UnknownFieldError, UnknownRelationshipError) as exc:
            outcome.status, outcome.message = ActionStatus.TARGET_UNRESOLVED, str(exc)
            return outcome
        outcome.object_type = target_type
        if target is None:
            outcome.status = ActionStatus.TARGET_UNRESOLVED
            outcome.message = f"No related record at '{action.target_object_path}'"
            return outcome

        try:
            value = self.compute_value(action, record, object_type)
        except UnsupportedActionKind as exc:
            outcome.status, outcome.message = ActionStatus.UNSUPPORTED_ACTION_KIND, str(exc)
            return outcome
        except ActionResolutionError as exc:
            outcome.status, outcome.message = ActionStatus.SOURCE_UNRESOLVED, str(exc)
            return outcome

        try:
            value = coerce(value, action.data_type or column.data_type)
        except CoercionError as exc:
            outcome.status, outcome.message = ActionStatus.INVALID_VALUE, str(exc)
            return outcome

        outcome.previous_value = target.get(action.field_to_update)
        target[action.field_to_update] = value
        outcome.value = value
        return outcome

    def execute(self, object_type: ObjectType | str, record: Record, actions: List[Action]) -> ExecutionReport:
        report = ExecutionReport()
        for action in actions:
            outcome = self.execute_action(action, record, object_type)
            if not outcome.applied:
                logger.warning(
                    "Action %s on field %s was not applied (%s): %s",
                    action.id,
                    action.field_to_update,
                    outcome.status.value,
                    outcome.message,
                )
            report.outcomes.append(outcome)
        return report
