"""Tests for local and cross-object field resolution."""

import pytest

from engine import FieldResolver
from models import DataType, ObjectType, RelationshipPath
from registry import UnknownFieldError, UnknownRelationshipError


class DictLoader:
    """Looks related records up by foreign key in a dict of tables, recording each hop."""

    def __init__(self, tables):
        self.tables = tables
        self.calls = []

    def load_related(self, object_type, record, relationship):
        self.calls.append((object_type, relationship))
        key = record.get(f"{relationship}_id")
        return self.tables.get(relationship, {}).get(key)


def test_local_field(schema):
    resolver = FieldResolver(schema)

    resolved = resolver.resolve({"status": "Qualified"}, "leads", "status")

    assert resolved.value == "Qualified"
    assert resolved.data_type is DataType.TEXT
    assert resolved.object_type is ObjectType.LEADS
    assert resolved.found


def test_missing_local_value_is_null(schema):
    resolved = FieldResolver(schema).resolve({}, "leads", "status")

    assert resolved.value is None
    assert resolved.found


def test_embedded_related_record(schema):
    record = {"customer": {"email": "ada@example.com"}}

    resolved = FieldResolver(schema).resolve(record, "leads", "email", RelationshipPath.of("customer"))

    assert resolved.value == "ada@example.com"
    assert resolved.object_type is ObjectType.CUSTOMERS


def test_missing_related_record_resolves_to_null(schema):
    """A hop with no related record fails soft instead of raising."""
    resolved = FieldResolver(schema).resolve({"customer": None}, "leads", "email", RelationshipPath.of("customer"))

    assert resolved.value is None
    assert resolved.found is False
    assert resolved.data_type is DataType.TEXT


def test_multi_hop_path(schema):
    record = {"order": {"order_number": "SO-1", "customer": {"email": "grace@example.com"}}}

    resolved = FieldResolver(schema).resolve(record, "order_dtl", "email", RelationshipPath.of("order", "customer"))

    assert resolved.value == "grace@example.com"


def test_unknown_field_on_related_object(schema):
    with pytest.raises(UnknownFieldError):
        FieldResolver(schema).resolve({"customer": None}, "leads", "shoe_size", RelationshipPath.of("customer"))


def test_unknown_relationship(schema):
    with pytest.raises(UnknownRelationshipError):
        FieldResolver(schema).resolve({}, "leads", "name", RelationshipPath.of("vendor"))


def test_injected_loader(schema):
    loader = DictLoader({"customer": {"c-1": {"email": "ada@example.com"}}})
    resolver = FieldResolver(schema, loader)

    resolved = resolver.resolve({"customer_id": "c-1"}, "leads", "email", RelationshipPath.of("customer"))

    assert resolved.value == "ada@example.com"
    assert loader.calls == [(ObjectType.LEADS, "customer")]


def test_resolve_record_returns_the_related_record(schema):
    customer = {"email": "ada@example.com"}

    target, target_type = FieldResolver(schema).resolve_record({"customer": customer}, "leads", RelationshipPath.of("customer"))

    assert target is customer
    assert target_type is ObjectType.CUSTOMERS


def test_non_record_relationship_value_is_missing(schema):
    resolved = FieldResolver(schema).resolve({"customer": "c-1"}, "leads", "email", RelationshipPath.of("customer"))
    assert resolved.value is None
    assert resolved.found is False
