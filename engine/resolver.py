import logging
from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping, Protocol, Tuple

from models import DataType, ObjectType, RelationshipPath
from registry import SchemaIntrospector, UnknownRelationshipError, find_column

logger = logging.getLogger(__name__)

Record = MutableMapping[str, Any]


class RelationshipLoader(Protocol):
    """
    Fetches the single record on the other side of a named relationship, or None.
    This is the only point where evaluation reaches outside of memory.
    """

    def load_related(self, object_type: ObjectType, record: Mapping[str, Any], relationship: str) -> Record | None:
        ...


class EmbeddedRelationshipLoader:
    """Reads related records nested directly on the record, e.g. {"customer": {...}}."""

    def load_related(self, object_type: ObjectType, record: Mapping[str, Any], relationship: str) -> Record | None:
        related = record.get(relationship)
        if related is None:
            return None
        if not isinstance(related, MutableMapping):
            logger.debug("Relationship %s on %s is not a record: %r", relationship, object_type.value, related)
            return None
        return related


@dataclass(frozen=True)
class ResolvedField:
    value: Any
    data_type: DataType
    object_type: ObjectType
    found: bool = True


class FieldResolver:
    """Resolves local or cross-object field references against a record."""

    def __init__(self, schema: SchemaIntrospector, loader: RelationshipLoader | None = None) -> None:
        self.schema = schema
        self.loader = loader or EmbeddedRelationshipLoader()

    def resolve_record(
        self,
        record: Record,
        object_type: ObjectType | str,
        path: RelationshipPath | None = None,
    ) -> Tuple[Record | None, ObjectType]:
        """
        Follow path from record. Returns the record reached (None when a hop has no related
        record) and the object type the path lands on.
        """
        current_type = ObjectType(object_type)
        current: Record | None = record
        if path is None:
            return current, current_type

        for hop in path.hops:
            relationships = self.schema.get_relationships(current_type)
            if hop not in relationships:
                raise UnknownRelationshipError(current_type, hop)
            next_type = relationships[hop]
            if current is not None:
                current = self.loader.load_related(current_type, current, hop)
            current_type = next_type
        return current, current_type

    def resolve(
        self,
        record: Record,
        object_type: ObjectType | str,
        field_name: str,
        path: RelationshipPath | None = None,
    ) -> ResolvedField:
        target, target_type = self.resolve_record(record, object_type, path)
        column = find_column(self.schema, target_type, field_name)
        if target is None:
            return ResolvedField(value=None, data_type=column.data_type, object_type=target_type, found=False)
        return ResolvedField(value=target.get(field_name), data_type=column.data_type, object_type=target_type)
