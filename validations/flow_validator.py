import logging
from typing import Any, Iterable, List

from engine.coercion import CoercionError, coerce
from models import Action, Condition, Flow, LiteralValue, ObjectType
from registry import ColumnSchema, SchemaIntrospector, find_column, resolve_path_target

logger = logging.getLogger(__name__)


class FlowValidationError(ValueError):
    """Raised when a flow is not ready to be saved. Carries every problem found, in one message."""

    def __init__(self, problems: List[str]) -> None:
        self.problems = list(problems)
        super().__init__("Please fill in all required fields: " + "; ".join(self.problems))


class UnsupportedOperatorError(ValueError):
    """Raised when an operator is not legal for the data type of the condition's column."""

    def __init__(self, column_name: str, operator: str, data_type: str) -> None:
        self.column_name = column_name
        self.operator = operator
        self.data_type = data_type
        super().__init__(f"Operator '{operator}' is not supported for column '{column_name}' ({data_type})")


class InvalidValueError(ValueError):
    """Raised when a literal does not fit the data type of the column it is compared with or written to."""

    def __init__(self, column_name: str, value: Any, data_type: str) -> None:
        self.column_name = column_name
        self.value = value
        self.data_type = data_type
        super().__init__(f"Value {value!r} is not a valid {data_type} for column '{column_name}'")


def number_in_order(items: Iterable[Condition | Action], attribute: str) -> None:
    """Rewrite an order field so it follows list position, starting at 1."""
    for position, item in enumerate(items, start=1):
        setattr(item, attribute, position)


def renumber_flow(flow: Flow) -> None:
    """Sort rows, conditions and actions by their order fields and make those fields dense again."""
    flow.groups = flow.ordered_groups()
    for row_order, group in enumerate(flow.groups, start=1):
        group.row_order = row_order
        group.conditions = group.ordered_conditions()
        group.actions = group.ordered_actions()
        number_in_order(group.conditions, "condition_order")
        number_in_order(group.actions, "action_order")


def collect_authoring_problems(flow: Flow) -> List[str]:
    problems: List[str] = []
    if not flow.name or not flow.name.strip():
        problems.append("flow name is required")
    if flow.object_type is None:
        problems.append("an object must be selected")

    for group in flow.ordered_groups():
        row = f"row {group.row_order}"
        for position, condition in enumerate(group.ordered_conditions(), start=1):
            if not condition.column_name:
                problems.append(f"{row}: condition {position} needs a field")
            if condition.operator is None:
                problems.append(f"{row}: condition {position} needs an operator")
        for position, action in enumerate(group.ordered_actions(), start=1):
            if not action.field_to_update:
                problems.append(f"{row}: action {position} needs a field to update")
    return problems


def _coerce_literal(literal: LiteralValue, column: ColumnSchema) -> LiteralValue:
    if literal.value is None:
        return literal
    try:
        return LiteralValue(value=coerce(literal.value, column.data_type))
    except CoercionError as exc:
        raise InvalidValueError(column.column_name, literal.value, column.data_type.value) from exc


def _validate_condition(condition: Condition, object_type: ObjectType, schema: SchemaIntrospector) -> None:
    target = resolve_path_target(schema, object_type, condition.object_path)
    column = find_column(schema, target, condition.field_name)
    if condition.data_type != column.data_type:
        logger.debug("Deriving data type %s for column %s", column.data_type.value, column.column_name)
        condition.data_type = column.data_type
    if condition.operator is not None and not column.supports(condition.operator):
        raise UnsupportedOperatorError(column.column_name, condition.operator.value, column.data_type.value)
    if condition.operator is not None and condition.operator.is_unary:
        condition.value = LiteralValue()
    else:
        condition.value = _coerce_literal(condition.value, column)


def _validate_action(action: Action, object_type: ObjectType, schema: SchemaIntrospector) -> None:
    target = resolve_path_target(schema, object_type, action.target_object_path)
    column = find_column(schema, target, action.field_to_update)
    action.data_type = column.data_type
    if action.source_field is not None:
        source = resolve_path_target(schema, object_type, action.source_field_path)
        find_column(schema, source, action.source_field)
    elif not action.is_formula and action.update_value is not None:
        action.update_value = _coerce_literal(action.update_value, column)


def validate_flow(flow: Flow, schema: SchemaIntrospector) -> Flow:
    """
    Gate a flow before it is persisted.

    Authoring problems are aggregated into a single FlowValidationError. Schema problems
    raise UnknownFieldError, UnknownRelationshipError, UnsupportedOperatorError or
    InvalidValueError.
    Returns a copy of the flow with dense order fields, data types derived from the schema,
    and literals converted to their column's type.
    """
    problems = collect_authoring_problems(flow)
    if problems:
        raise FlowValidationError(problems)

    validated = flow.model_copy(deep=True)
    renumber_flow(validated)
    for group in validated.groups:
        if group.description is None:
            group.description = f"Row {group.row_order}"
        for condition in group.conditions:
            _validate_condition(condition, validated.object_type, schema)
        for action in group.actions:
            _validate_action(action, validated.object_type, schema)
    return validated


def parse_and_validate_flow(payload: dict, schema: SchemaIntrospector) -> Flow:
    """
    Convert parsed JSON (dict) into a Flow and validate it against the schema.
    Raises ValidationError, FlowValidationError or a schema error on failure.
    """
    flow = Flow.model_validate(payload)
    return validate_flow(flow, schema)
