from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID

from pydantic import TypeAdapter, ValidationError

from models import DataType


class CoercionError(ValueError):
    """Raised when a value cannot be converted to a column's data type."""


_ADAPTERS: Dict[DataType, TypeAdapter] = {
    DataType.INTEGER: TypeAdapter(int),
    DataType.NUMERIC: TypeAdapter(Decimal),
    DataType.BOOLEAN: TypeAdapter(bool),
    DataType.DATE: TypeAdapter(date),
    DataType.TIMESTAMP: TypeAdapter(datetime),
    DataType.UUID: TypeAdapter(UUID),
}


def coerce(value: Any, data_type: DataType | str) -> Any:
    """Convert value to the Python type backing data_type. None passes through unchanged."""
    if value is None:
        return None
    data_type = DataType(data_type)
    if data_type is DataType.TEXT:
        return value if isinstance(value, str) else str(value)
    if data_type is DataType.NUMERIC and isinstance(value, float):
        # Go through str so 0.1 stays 0.1 instead of its binary expansion.
        value = repr(value)
    if data_type is DataType.DATE and isinstance(value, datetime):
        return value.date()
    try:
        return _ADAPTERS[data_type].validate_python(value)
    except ValidationError as exc:
        raise CoercionError(f"Cannot coerce {value!r} to {data_type.value}") from exc
