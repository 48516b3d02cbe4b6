"""
In-memory authoring session for a logic flow.

The builder owns a draft Flow and is the only thing that mutates it. Groups, conditions and
actions are addressed by 0-based position; the explicit order fields (row_order,
condition_order, action_order) are renumbered after every structural change so they always
match list position and stay dense.
"""

import logging
from typing import Any, List, Sequence, Union

from engine.coercion import CoercionError, coerce
from models import Action, Condition, ConditionGroup, DataType, Flow, LiteralValue, ObjectType, Operator, RelationshipPath
from registry import ColumnSchema, SchemaIntrospector, find_column, resolve_path_target
from validations import UnsupportedOperatorError, number_in_order, validate_flow

logger = logging.getLogger(__name__)

PathLike = Union[RelationshipPath, Sequence[str], None]


class FlowAuthoringError(ValueError):
    """Raised when an edit is not allowed in the current state of the draft."""


def _as_path(path: PathLike) -> RelationshipPath | None:
    if path is None:
        return None
    if not isinstance(path, RelationshipPath):
        path = RelationshipPath(hops=tuple(path))
    return None if path.is_empty else path


def _still_coerces(value: Any, data_type: DataType) -> bool:
    try:
        coerce(value, data_type)
    except CoercionError:
        return False
    return True


class FlowBuilder:
    def __init__(
        self,
        schema: SchemaIntrospector,
        name: str = "",
        object_type: ObjectType | str | None = None,
        description: str | None = None,
        organization_id: str | None = None,
    ) -> None:
        self.schema = schema
        self.flow = Flow(
            name=name,
            description=description,
            object_type=ObjectType(object_type) if object_type is not None else None,
            organization_id=organization_id,
        )
        self._renumber()

    @classmethod
    def from_flow(cls, flow: Flow, schema: SchemaIntrospector) -> "FlowBuilder":
        """Reopen a stored flow for editing."""
        builder = cls(schema)
        draft = flow.model_copy(deep=True)
        draft.groups = draft.ordered_groups()
        for group in draft.groups:
            group.conditions = group.ordered_conditions()
            group.actions = group.ordered_actions()
        builder.flow = draft
        builder._renumber()
        return builder

    @property
    def groups(self) -> List[ConditionGroup]:
        return self.flow.groups

    # -- flow attributes -------------------------------------------------

    def set_name(self, name: str) -> None:
        self.flow.name = name

    def set_description(self, description: str | None) -> None:
        self.flow.description = description

    def set_active(self, is_active: bool) -> None:
        self.flow.is_active = is_active

    def set_object_type(self, object_type: ObjectType | str) -> None:
        object_type = ObjectType(object_type)
        if object_type == self.flow.object_type:
            return
        if self.flow.references_fields():
            raise FlowAuthoringError("The object cannot be changed once conditions or actions reference its fields")
        self.flow.object_type = object_type

    # -- structure -------------------------------------------------------

    def add_group(self) -> ConditionGroup:
        group = ConditionGroup(row_order=len(self.flow.groups) + 1)
        self.flow.groups.append(group)
        return group

    def add_condition(self, group_index: int) -> Condition:
        group = self._group(group_index)
        condition = Condition(condition_order=len(group.conditions) + 1)
        group.conditions.append(condition)
        return condition

    def add_action(self, group_index: int) -> Action:
        group = self._group(group_index)
        action = Action(action_order=len(group.actions) + 1)
        group.actions.append(action)
        return action

    def remove_condition(self, group_index: int, condition_index: int) -> None:
        group = self._group(group_index)
        self._condition(group_index, condition_index)
        if len(group.conditions) == 1:
            logger.debug("Keeping the last condition of row %d", group.row_order)
            return
        del group.conditions[condition_index]
        self._renumber()

    def remove_action(self, group_index: int, action_index: int) -> None:
        group = self._group(group_index)
        self._action(group_index, action_index)
        if len(group.actions) == 1:
            logger.debug("Keeping the last action of row %d", group.row_order)
            return
        del group.actions[action_index]
        self._renumber()

    def remove_group(self, group_index: int) -> None:
        self._group(group_index)
        if len(self.flow.groups) == 1:
            return
        del self.flow.groups[group_index]
        self._renumber()

    def move_group(self, from_index: int, to_index: int) -> None:
        group = self._group(from_index)
        self._group(to_index)
        del self.flow.groups[from_index]
        self.flow.groups.insert(to_index, group)
        self._renumber()

    def move_condition(self, group_index: int, from_index: int, to_index: int) -> None:
        group = self._group(group_index)
        condition = self._condition(group_index, from_index)
        self._condition(group_index, to_index)
        del group.conditions[from_index]
        group.conditions.insert(to_index, condition)
        self._renumber()

    # -- conditions ------------------------------------------------------

    def set_condition_field(
        self,
        group_index: int,
        condition_index: int,
        column_name: str,
        object_path: PathLike = None,
        referenced_field: str | None = None,
    ) -> Condition:
        """
        Point a condition at a column, optionally on a related object.

        The data type is re-derived from the schema. An operator that is not legal for the
        new type is cleared together with the value; a value that no longer fits the type is
        cleared on its own.
        """
        condition = self._condition(group_index, condition_index)
        path = _as_path(object_path)
        field_name = (referenced_field or column_name) if path else column_name
        column = self._column(field_name, path)

        condition.column_name = column_name
        condition.object_path = path
        condition.referenced_field = referenced_field if path else None
        condition.data_type = column.data_type

        if condition.operator is not None and not column.supports(condition.operator):
            condition.operator = None
            condition.value = LiteralValue()
        elif condition.value.value is not None and not _still_coerces(condition.value.value, column.data_type):
            condition.value = LiteralValue()
        return condition

    def set_condition_operator(self, group_index: int, condition_index: int, operator: Operator | str) -> Condition:
        condition = self._condition(group_index, condition_index)
        if not condition.column_name:
            raise FlowAuthoringError("Select a field before choosing an operator")
        operator = Operator(operator)
        column = self._column(condition.field_name, condition.object_path)
        if not column.supports(operator):
            raise UnsupportedOperatorError(column.column_name, operator.value, column.data_type.value)
        condition.operator = operator
        if operator.is_unary:
            condition.value = LiteralValue()
        return condition

    def set_condition_value(self, group_index: int, condition_index: int, value: Any) -> Condition:
        condition = self._condition(group_index, condition_index)
        if condition.operator is not None and condition.operator.is_unary:
            raise FlowAuthoringError(f"Operator '{condition.operator.value}' does not take a value")
        condition.value = LiteralValue(value=value)
        return condition

    def supported_operators(self, group_index: int, condition_index: int) -> List[Operator]:
        condition = self._condition(group_index, condition_index)
        if not condition.column_name:
            return []
        column = self._column(condition.field_name, condition.object_path)
        return sorted(column.supported_operators, key=lambda operator: list(Operator).index(operator))

    # -- actions ---------------------------------------------------------

    def set_action_field(
        self,
        group_index: int,
        action_index: int,
        field_to_update: str,
        target_object_path: PathLike = None,
    ) -> Action:
        action = self._action(group_index, action_index)
        path = _as_path(target_object_path)
        column = self._column(field_to_update, path)

        action.field_to_update = field_to_update
        action.target_object_path = path
        action.data_type = column.data_type

        value = action.update_value.value if action.update_value is not None else None
        if not action.is_formula and value is not None and not _still_coerces(value, column.data_type):
            action.update_value = LiteralValue()
        return action

    def set_action_literal(self, group_index: int, action_index: int, value: Any) -> Action:
        action = self._action(group_index, action_index)
        action.update_value = LiteralValue(value=value)
        action.is_formula = False
        action.source_field = None
        action.source_field_path = None
        return action

    def set_action_copy(
        self,
        group_index: int,
        action_index: int,
        source_field: str,
        source_field_path: PathLike = None,
    ) -> Action:
        action = self._action(group_index, action_index)
        path = _as_path(source_field_path)
        self._column(source_field, path)
        action.update_value = None
        action.is_formula = False
        action.source_field = source_field
        action.source_field_path = path
        return action

    def set_action_formula(self, group_index: int, action_index: int, expression: str) -> Action:
        action = self._action(group_index, action_index)
        action.update_value = LiteralValue(value=expression)
        action.is_formula = True
        action.source_field = None
        action.source_field_path = None
        return action

    # -- save gate -------------------------------------------------------

    def build(self) -> Flow:
        """Validate the draft and return a copy that is ready to be stored."""
        return validate_flow(self.flow, self.schema)

    # -- helpers ---------------------------------------------------------

    def _column(self, field_name: str, path: RelationshipPath | None) -> ColumnSchema:
        if self.flow.object_type is None:
            raise FlowAuthoringError("Select an object before choosing fields")
        target = resolve_path_target(self.schema, self.flow.object_type, path)
        return find_column(self.schema, target, field_name)

    def _group(self, group_index: int) -> ConditionGroup:
        if not 0 <= group_index < len(self.flow.groups):
            raise IndexError(f"No condition group at index {group_index}")
        return self.flow.groups[group_index]

    def _condition(self, group_index: int, condition_index: int) -> Condition:
        group = self._group(group_index)
        if not 0 <= condition_index < len(group.conditions):
            raise IndexError(f"No condition at index {condition_index} in row {group.row_order}")
        return group.conditions[condition_index]

    def _action(self, group_index: int, action_index: int) -> Action:
        group = self._group(group_index)
        if not 0 <= action_index < len(group.actions):
            raise IndexError(f"No action at index {action_index} in row {group.row_order}")
        return group.actions[action_index]

    def _renumber(self) -> None:
        for row_order, group in enumerate(self.flow.groups, start=1):
            if group.description == f"Row {group.row_order}":
                group.description = f"Row {row_order}"
            group.row_order = row_order
            number_in_order(group.conditions, "condition_order")
            number_in_order(group.actions, "action_order")
