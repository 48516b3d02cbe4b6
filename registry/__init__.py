from .defaults import create_default_schema_registry
from .operators import operators_for
from .registry import (
    ColumnSchema,
    ObjectSchema,
    SchemaIntrospector,
    SchemaRegistry,
    UnknownFieldError,
    UnknownRelationshipError,
    find_column,
    resolve_path_target,
)

__all__ = [
    "ColumnSchema",
    "ObjectSchema",
    "SchemaIntrospector",
    "SchemaRegistry",
    "UnknownFieldError",
    "UnknownRelationshipError",
    "create_default_schema_registry",
    "find_column",
    "operators_for",
    "resolve_path_target",
]
