from .converters import db_to_pydantic_flow, flow_to_row
from .introspection import SqlAlchemySchemaIntrospector, map_sql_type
from .models import ActionModel, Base, ConditionGroupModel, ConditionModel, LogicFlowModel
from .repository import (
    FlowNotFoundError,
    FlowRepository,
    InMemoryFlowRepository,
    PersistenceError,
    SqlAlchemyFlowRepository,
    create_engine_for_url,
    create_session_factory,
    init_db,
)

__all__ = [
    "ActionModel",
    "Base",
    "ConditionGroupModel",
    "ConditionModel",
    "FlowNotFoundError",
    "FlowRepository",
    "InMemoryFlowRepository",
    "LogicFlowModel",
    "PersistenceError",
    "SqlAlchemyFlowRepository",
    "SqlAlchemySchemaIntrospector",
    "create_engine_for_url",
    "create_session_factory",
    "db_to_pydantic_flow",
    "flow_to_row",
    "init_db",
    "map_sql_type",
]
