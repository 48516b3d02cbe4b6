from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Protocol

from models import DataType, ObjectType, Operator, RelationshipPath

from .operators import operators_for


class UnknownFieldError(LookupError):
    """Raised when a field is not part of the resolved object's schema."""

    def __init__(self, object_type: ObjectType | str, field_name: str) -> None:
        self.object_type = ObjectType(object_type)
        self.field_name = field_name
        super().__init__(f"Unknown field '{field_name}' on object '{self.object_type.value}'")


class UnknownRelationshipError(LookupError):
    """Raised when a relationship path hop is not defined for an object."""

    def __init__(self, object_type: ObjectType | str, relationship: str) -> None:
        self.object_type = ObjectType(object_type)
        self.relationship = relationship
        super().__init__(f"Unknown relationship '{relationship}' on object '{self.object_type.value}'")


@dataclass(frozen=True)
class ColumnSchema:
    column_name: str
    data_type: DataType
    is_nullable: bool = True
    supported_operators: FrozenSet[Operator] = frozenset()
    description: str = ""

    def supports(self, operator: Operator | str) -> bool:
        return Operator(operator) in self.supported_operators


@dataclass
class ObjectSchema:
    object_type: ObjectType
    columns: Dict[str, ColumnSchema] = field(default_factory=dict)
    relationships: Dict[str, ObjectType] = field(default_factory=dict)

    def add_column(
        self,
        column_name: str,
        data_type: DataType,
        is_nullable: bool = True,
        description: str = "",
        supported_operators: Iterable[Operator] | None = None,
    ) -> ColumnSchema:
        operators = frozenset(supported_operators) if supported_operators is not None else operators_for(data_type)
        column = ColumnSchema(
            column_name=column_name,
            data_type=data_type,
            is_nullable=is_nullable,
            supported_operators=operators,
            description=description,
        )
        self.columns[column_name] = column
        return column

    def add_relationship(self, name: str, target: ObjectType) -> None:
        self.relationships[name] = target


class SchemaIntrospector(Protocol):
    """Schema lookup capability consumed by the builder, validator and resolver."""

    def get_table_schema(self, object_type: ObjectType | str) -> List[ColumnSchema]:
        ...

    def get_relationships(self, object_type: ObjectType | str) -> Dict[str, ObjectType]:
        ...


def find_column(schema: SchemaIntrospector, object_type: ObjectType | str, column_name: str) -> ColumnSchema:
    for column in schema.get_table_schema(object_type):
        if column.column_name == column_name:
            return column
    raise UnknownFieldError(object_type, column_name)


def resolve_path_target(
    schema: SchemaIntrospector, object_type: ObjectType | str, path: RelationshipPath | None
) -> ObjectType:
    """Walk a relationship path through the schema and return the object type it lands on."""
    current = ObjectType(object_type)
    if path is None:
        return current
    for hop in path.hops:
        relationships = schema.get_relationships(current)
        if hop not in relationships:
            raise UnknownRelationshipError(current, hop)
        current = relationships[hop]
    return current


@dataclass
class SchemaRegistry:
    """In-memory schema introspector keyed by object type."""

    name: str = "crm"
    items: Dict[ObjectType, ObjectSchema] = field(default_factory=dict)

    def register_object(self, object_type: ObjectType | str) -> ObjectSchema:
        object_type = ObjectType(object_type)
        schema = self.items.get(object_type)
        if schema is None:
            schema = ObjectSchema(object_type=object_type)
            self.items[object_type] = schema
        return schema

    def get(self, object_type: ObjectType | str) -> ObjectSchema | None:
        return self.items.get(ObjectType(object_type))

    def __contains__(self, object_type: ObjectType | str) -> bool:
        return ObjectType(object_type) in self.items

    def get_table_schema(self, object_type: ObjectType | str) -> List[ColumnSchema]:
        schema = self.get(object_type)
        return list(schema.columns.values()) if schema else []

    def get_relationships(self, object_type: ObjectType | str) -> Dict[str, ObjectType]:
        schema = self.get(object_type)
        return dict(schema.relationships) if schema else {}

    def column(self, object_type: ObjectType | str, column_name: str) -> ColumnSchema:
        return find_column(self, object_type, column_name)

    def relationship_target(self, object_type: ObjectType | str, relationship: str) -> ObjectType:
        return resolve_path_target(self, object_type, RelationshipPath.of(relationship))

    def resolve_path(self, object_type: ObjectType | str, path: RelationshipPath | None) -> ObjectType:
        return resolve_path_target(self, object_type, path)

