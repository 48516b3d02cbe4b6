import logging
from typing import Any, Callable, Dict

from models import Condition, ObjectType, Operator
from registry import UnknownFieldError, UnknownRelationshipError

from .coercion import CoercionError, coerce
from .resolver import FieldResolver, Record

logger = logging.getLogger(__name__)


def _contains(left: Any, right: Any) -> bool:
    return right in left


_BINARY_OPERATIONS: Dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQUALS: lambda left, right: left == right,
    Operator.NOT_EQUALS: lambda left, right: left != right,
    Operator.GREATER_THAN: lambda left, right: left > right,
    Operator.GREATER_OR_EQUAL: lambda left, right: left >= right,
    Operator.LESS_THAN: lambda left, right: left < right,
    Operator.LESS_OR_EQUAL: lambda left, right: left <= right,
    Operator.CONTAINS: _contains,
    Operator.NOT_CONTAINS: lambda left, right: not _contains(left, right),
    Operator.STARTS_WITH: lambda left, right: left.startswith(right),
    Operator.ENDS_WITH: lambda left, right: left.endswith(right),
}


def apply_operator(operator: Operator, left: Any, right: Any = None) -> bool:
    """
    Apply an operator to already-coerced operands.

    Unary operators only look at the left side. A null left side fails every binary operator.
    """
    if operator is Operator.IS_NULL:
        return left is None
    if operator is Operator.IS_NOT_NULL:
        return left is not None
    if operator is Operator.IS_TRUE:
        return left is True
    if operator is Operator.IS_FALSE:
        return left is False
    if left is None or right is None:
        return False
    try:
        return bool(_BINARY_OPERATIONS[operator](left, right))
    except TypeError:
        return False


class ConditionEvaluator:
    """Evaluates a single typed condition against a record. Never raises for bad data."""

    def __init__(self, resolver: FieldResolver) -> None:
        self.resolver = resolver

    def evaluate(self, condition: Condition, record: Record, object_type: ObjectType | str) -> bool:
        if condition.operator is None:
            logger.warning("Condition %s has no operator; treating as not matched", condition.id)
            return False

        try:
            resolved = self.resolver.resolve(record, object_type, condition.field_name, condition.object_path)
        except (UnknownFieldError, UnknownRelationshipError) as exc:
            logger.warning("Condition %s could not be resolved: %s", condition.id, exc)
            return False

        data_type = condition.data_type or resolved.data_type
        try:
            left = coerce(resolved.value, data_type)
        except CoercionError as exc:
            logger.debug("Condition %s: %s", condition.id, exc)
            # A value that cannot be read as the column type is neither true, false nor null.
            return condition.operator is Operator.IS_NOT_NULL

        if condition.operator.is_unary:
            return apply_operator(condition.operator, left)

        try:
            right = coerce(condition.value.value, data_type)
        except CoercionError as exc:
            logger.debug("Condition %s: %s", condition.id, exc)
            return False
        return apply_operator(condition.operator, left, right)
