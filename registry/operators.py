from typing import Dict, FrozenSet

from models import DataType, Operator

_NULL_TESTS = frozenset({Operator.IS_NULL, Operator.IS_NOT_NULL})
_EQUALITY = frozenset({Operator.EQUALS, Operator.NOT_EQUALS})
_ORDERING = frozenset(
    {
        Operator.GREATER_THAN,
        Operator.GREATER_OR_EQUAL,
        Operator.LESS_THAN,
        Operator.LESS_OR_EQUAL,
    }
)
_TEXT_MATCHING = frozenset(
    {Operator.CONTAINS, Operator.NOT_CONTAINS, Operator.STARTS_WITH, Operator.ENDS_WITH}
)
_TRUTH_TESTS = frozenset({Operator.IS_TRUE, Operator.IS_FALSE})

_OPERATORS_BY_TYPE: Dict[DataType, FrozenSet[Operator]] = {
    DataType.TEXT: _EQUALITY | _TEXT_MATCHING | _NULL_TESTS,
    DataType.INTEGER: _EQUALITY | _ORDERING | _NULL_TESTS,
    DataType.NUMERIC: _EQUALITY | _ORDERING | _NULL_TESTS,
    DataType.DATE: _EQUALITY | _ORDERING | _NULL_TESTS,
    DataType.TIMESTAMP: _EQUALITY | _ORDERING | _NULL_TESTS,
    DataType.BOOLEAN: _EQUALITY | _TRUTH_TESTS | _NULL_TESTS,
    DataType.UUID: _EQUALITY | _NULL_TESTS,
}


def operators_for(data_type: DataType | str) -> FrozenSet[Operator]:
    """Operators that are legal for a column of the given data type."""
    return _OPERATORS_BY_TYPE[DataType(data_type)]
