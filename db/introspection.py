"""
Schema introspection straight from the database backing the CRM object tables.
"""

import logging
from typing import Dict, List

from sqlalchemy import Engine, inspect, types

from models import DataType, ObjectType
from registry import ColumnSchema, SchemaRegistry

logger = logging.getLogger(__name__)

_FOREIGN_KEY_SUFFIX = "_id"


def map_sql_type(sql_type: types.TypeEngine) -> DataType:
    """Map a reflected SQL column type onto the data types flows understand."""
    if isinstance(sql_type, types.Boolean):
        return DataType.BOOLEAN
    if isinstance(sql_type, types.Integer):
        return DataType.INTEGER
    if isinstance(sql_type, (types.Numeric, types.Float)):
        return DataType.NUMERIC
    if isinstance(sql_type, types.DateTime):
        return DataType.TIMESTAMP
    if isinstance(sql_type, types.Date):
        return DataType.DATE
    if isinstance(sql_type, types.Uuid):
        return DataType.UUID
    return DataType.TEXT


class SqlAlchemySchemaIntrospector:
    """
    Reads columns and foreign keys of the CRM object tables through SQLAlchemy's inspector.
    Foreign keys named `<relationship>_id` become relationships; results are cached per table.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        self._cache = SchemaRegistry(name=str(engine.url))

    def _load(self, object_type: ObjectType) -> None:
        if object_type in self._cache:
            return
        inspector = inspect(self.engine)
        schema = self._cache.register_object(object_type)
        if not inspector.has_table(object_type.value):
            logger.warning("Table %s does not exist; it has no fields", object_type.value)
            return

        for column in inspector.get_columns(object_type.value):
            data_type = map_sql_type(column["type"])
            schema.add_column(column["name"], data_type, is_nullable=bool(column.get("nullable", True)))

        known_tables = {member.value for member in ObjectType}
        for foreign_key in inspector.get_foreign_keys(object_type.value):
            referred = foreign_key.get("referred_table")
            columns = foreign_key.get("constrained_columns") or []
            if referred not in known_tables or len(columns) != 1:
                continue
            name = columns[0]
            if name.endswith(_FOREIGN_KEY_SUFFIX):
                name = name[: -len(_FOREIGN_KEY_SUFFIX)]
            schema.add_relationship(name, ObjectType(referred))

    def get_table_schema(self, object_type: ObjectType | str) -> List[ColumnSchema]:
        object_type = ObjectType(object_type)
        self._load(object_type)
        return self._cache.get_table_schema(object_type)

    def get_relationships(self, object_type: ObjectType | str) -> Dict[str, ObjectType]:
        object_type = ObjectType(object_type)
        self._load(object_type)
        return self._cache.get_relationships(object_type)

    def refresh(self) -> None:
        self._cache.items.clear()
