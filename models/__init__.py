from .flow import (
    UNARY_OPERATORS,
    Action,
    ActionKind,
    Condition,
    ConditionGroup,
    DataType,
    Flow,
    LiteralValue,
    ObjectType,
    Operator,
    RelationshipPath,
)

__all__ = [
    "Action",
    "ActionKind",
    "Condition",
    "ConditionGroup",
    "DataType",
    "Flow",
    "LiteralValue",
    "ObjectType",
    "Operator",
    "RelationshipPath",
    "UNARY_OPERATORS",
]
