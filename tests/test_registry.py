"""Tests for the schema registry and operator catalog."""

import pytest

from models import DataType, ObjectType, Operator, RelationshipPath
from registry import (
    SchemaRegistry,
    UnknownFieldError,
    UnknownRelationshipError,
    find_column,
    operators_for,
)


def test_text_operators():
    operators = operators_for(DataType.TEXT)

    assert Operator.CONTAINS in operators
    assert Operator.STARTS_WITH in operators
    assert Operator.IS_NULL in operators
    assert Operator.GREATER_THAN not in operators
    assert Operator.IS_TRUE not in operators


def test_ordered_types_support_comparisons():
    for data_type in (DataType.INTEGER, DataType.NUMERIC, DataType.DATE, DataType.TIMESTAMP):
        operators = operators_for(data_type)
        assert Operator.GREATER_OR_EQUAL in operators
        assert Operator.LESS_THAN in operators
        assert Operator.CONTAINS not in operators


def test_boolean_and_uuid_operators():
    assert operators_for("boolean") == frozenset(
        {Operator.EQUALS, Operator.NOT_EQUALS, Operator.IS_TRUE, Operator.IS_FALSE, Operator.IS_NULL, Operator.IS_NOT_NULL}
    )
    assert operators_for("uuid") == frozenset(
        {Operator.EQUALS, Operator.NOT_EQUALS, Operator.IS_NULL, Operator.IS_NOT_NULL}
    )


def test_default_catalog_covers_every_object(schema):
    for object_type in ObjectType:
        columns = {column.column_name for column in schema.get_table_schema(object_type)}
        assert {"id", "organization_id", "created_at"} <= columns


def test_column_lookup(schema):
    column = schema.column("leads", "status")

    assert column.data_type is DataType.TEXT
    assert column.is_nullable is False
    assert column.supports("=")
    assert not column.supports(">")


def test_unknown_field(schema):
    with pytest.raises(UnknownFieldError) as excinfo:
        find_column(schema, ObjectType.LEADS, "shoe_size")

    assert excinfo.value.field_name == "shoe_size"
    assert excinfo.value.object_type is ObjectType.LEADS


def test_resolve_multi_hop_path(schema):
    target = schema.resolve_path("order_dtl", RelationshipPath.of("order", "customer"))
    assert target is ObjectType.CUSTOMERS


def test_resolve_empty_path_is_the_object_itself(schema):
    assert schema.resolve_path("leads", None) is ObjectType.LEADS
    assert schema.resolve_path("leads", RelationshipPath()) is ObjectType.LEADS


def test_unknown_relationship(schema):
    with pytest.raises(UnknownRelationshipError) as excinfo:
        schema.resolve_path("leads", RelationshipPath.of("vendor"))

    assert excinfo.value.relationship == "vendor"


def test_relationship_target(schema):
    assert schema.relationship_target("order_dtl", "product") is ObjectType.PRODUCTS


def test_custom_operator_set_narrows_column():
    """An introspector may offer fewer operators than the data type allows."""
    registry = SchemaRegistry(name="narrow")
    schema = registry.register_object("vendors")
    schema.add_column("name", DataType.TEXT, supported_operators=[Operator.EQUALS])

    column = registry.column("vendors", "name")
    assert column.supported_operators == frozenset({Operator.EQUALS})
    assert registry.get_relationships("vendors") == {}


def test_unregistered_object_has_no_columns():
    registry = SchemaRegistry()
    assert registry.get_table_schema("leads") == []
    assert "leads" not in registry
