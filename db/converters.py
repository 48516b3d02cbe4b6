"""
Conversion utilities between Pydantic models and SQLAlchemy DB models.
"""

import logging
from typing import Any, Dict, List

from engine.coercion import CoercionError, coerce
from models import Action, Condition, ConditionGroup, DataType, Flow, LiteralValue, RelationshipPath

from .models import ActionModel, ConditionGroupModel, ConditionModel, LogicFlowModel

logger = logging.getLogger(__name__)


def _wrap(value: LiteralValue | None) -> Dict[str, Any] | None:
    # Values are wrapped rather than stored bare so non-literal values can be added later.
    if value is None:
        return None
    # Dates, timestamps, decimals and UUIDs are written as their JSON string forms.
    return value.model_dump(mode="json")


def _unwrap(payload: Dict[str, Any] | None, data_type: str | None = None) -> LiteralValue | None:
    if payload is None:
        return None
    value = payload.get("value")
    if data_type is not None:
        try:
            value = coerce(value, DataType(data_type))
        except CoercionError:
            logger.warning("Stored value %r does not fit %s; loading it unchanged", value, data_type)
    return LiteralValue(value=value)


def _path_to_db(path: RelationshipPath | None) -> List[str] | None:
    return path.to_list() if path is not None else None


def _path_from_db(hops: List[str] | None) -> RelationshipPath | None:
    return RelationshipPath(hops=tuple(hops)) if hops else None


def flow_to_row(flow: Flow) -> LogicFlowModel:
    return LogicFlowModel(
        name=flow.name,
        description=flow.description,
        object_type=flow.object_type.value,
        is_active=flow.is_active,
        organization_id=flow.organization_id,
    )


def group_to_row(group: ConditionGroup, flow_id: str) -> ConditionGroupModel:
    return ConditionGroupModel(
        flow_id=flow_id,
        row_order=group.row_order,
        description=group.description,
    )


def condition_to_row(condition: Condition, group_id: str) -> ConditionModel:
    return ConditionModel(
        condition_group_id=group_id,
        column_name=condition.column_name,
        data_type=condition.data_type.value if condition.data_type else None,
        operator=condition.operator.value if condition.operator else None,
        value=_wrap(condition.value),
        condition_order=condition.condition_order,
        object_path=_path_to_db(condition.object_path),
        referenced_field=condition.referenced_field,
    )


def action_to_row(action: Action, group_id: str) -> ActionModel:
    return ActionModel(
        condition_group_id=group_id,
        field_to_update=action.field_to_update,
        data_type=action.data_type.value if action.data_type else None,
        update_value=_wrap(action.update_value),
        is_formula=action.is_formula,
        action_order=action.action_order,
        target_object_path=_path_to_db(action.target_object_path),
        source_field_path=_path_to_db(action.source_field_path),
        source_field=action.source_field,
    )


def db_to_pydantic_condition(row: ConditionModel) -> Condition:
    return Condition(
        id=row.id,
        condition_order=row.condition_order,
        column_name=row.column_name,
        data_type=row.data_type,
        operator=row.operator,
        value=_unwrap(row.value, row.data_type) or LiteralValue(),
        object_path=_path_from_db(row.object_path),
        referenced_field=row.referenced_field,
    )


def db_to_pydantic_action(row: ActionModel) -> Action:
    return Action(
        id=row.id,
        action_order=row.action_order,
        field_to_update=row.field_to_update,
        data_type=row.data_type,
        update_value=_unwrap(row.update_value, None if row.is_formula or row.source_field else row.data_type),
        is_formula=row.is_formula,
        source_field=row.source_field,
        source_field_path=_path_from_db(row.source_field_path),
        target_object_path=_path_from_db(row.target_object_path),
    )


def db_to_pydantic_flow(row: LogicFlowModel) -> Flow:
    """
    Convert a LogicFlowModel (with its groups, conditions and actions loaded) into a Flow.
    Groups come back in row order; conditions and actions in their stored order.
    """
    groups = [
        ConditionGroup(
            id=group.id,
            row_order=group.row_order,
            description=group.description,
            conditions=[db_to_pydantic_condition(condition) for condition in group.conditions],
            actions=[db_to_pydantic_action(action) for action in group.actions],
        )
        for group in sorted(row.groups, key=lambda group: group.row_order)
    ]
    return Flow(
        id=row.id,
        name=row.name,
        description=row.description,
        object_type=row.object_type,
        is_active=row.is_active,
        organization_id=row.organization_id,
        groups=groups,
    )
