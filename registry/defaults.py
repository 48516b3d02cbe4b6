from typing import Dict, List, Tuple

from models import DataType, ObjectType

from .registry import SchemaRegistry

T, I, N, B, D, TS, U = (
    DataType.TEXT,
    DataType.INTEGER,
    DataType.NUMERIC,
    DataType.BOOLEAN,
    DataType.DATE,
    DataType.TIMESTAMP,
    DataType.UUID,
)

_COMMON_COLUMNS: List[Tuple[str, DataType, bool]] = [
    ("id", U, False),
    ("organization_id", U, False),
    ("created_at", TS, False),
    ("updated_at", TS, True),
]

_CATALOG: Dict[ObjectType, List[Tuple[str, DataType, bool]]] = {
    ObjectType.CUSTOMERS: [
        ("first_name", T, False),
        ("last_name", T, False),
        ("email", T, True),
        ("phone", T, True),
        ("company", T, True),
        ("city", T, True),
        ("state", T, True),
        ("is_vip", B, True),
    ],
    ObjectType.VENDORS: [
        ("name", T, False),
        ("email", T, True),
        ("phone", T, True),
        ("status", T, True),
    ],
    ObjectType.LEADS: [
        ("first_name", T, False),
        ("last_name", T, False),
        ("email", T, True),
        ("company", T, True),
        ("status", T, False),
        ("priority", T, True),
        ("lead_source", T, True),
        ("score", I, True),
        ("is_converted", B, True),
        ("owner_id", U, True),
        ("customer_id", U, True),
    ],
    ObjectType.OPPORTUNITIES: [
        ("name", T, False),
        ("stage", T, False),
        ("status", T, True),
        ("amount", N, True),
        ("probability", I, True),
        ("expected_close_date", D, True),
        ("lead_source", T, True),
        ("type", T, True),
        ("priority", T, True),
        ("owner_id", U, True),
        ("customer_id", U, True),
        ("lead_id", U, True),
    ],
    ObjectType.CASES: [
        ("title", T, False),
        ("type", T, False),
        ("sub_type", T, True),
        ("status", T, False),
        ("priority", T, True),
        ("origin", T, True),
        ("description", T, True),
        ("escalated_at", TS, True),
        ("closed_at", TS, True),
        ("owner_id", U, True),
        ("customer_id", U, True),
    ],
    ObjectType.TASKS: [
        ("title", T, False),
        ("description", T, True),
        ("status", T, False),
        ("priority", T, True),
        ("due_date", D, True),
        ("is_completed", B, True),
        ("assigned_to", U, True),
        ("customer_id", U, True),
    ],
    ObjectType.PRODUCTS: [
        ("name", T, False),
        ("description", T, True),
        ("price", N, False),
        ("stock_quantity", I, True),
        ("is_active", B, True),
        ("vendor_id", U, True),
    ],
    ObjectType.QUOTE_HDR: [
        ("quote_number", T, False),
        ("status", T, False),
        ("total_amount", N, True),
        ("valid_until", D, True),
        ("notes", T, True),
        ("customer_id", U, True),
    ],
    ObjectType.QUOTE_DTL: [
        ("item_name", T, False),
        ("item_desc", T, True),
        ("quantity", I, False),
        ("unit_price", N, False),
        ("quote_id", U, False),
    ],
    ObjectType.ORDER_HDR: [
        ("order_number", T, False),
        ("status", T, False),
        ("payment_status", T, True),
        ("total_amount", N, True),
        ("order_date", D, True),
        ("customer_id", U, True),
        ("quote_id", U, True),
    ],
    ObjectType.ORDER_DTL: [
        ("quantity", I, False),
        ("unit_price", N, False),
        ("status", T, True),
        ("order_id", U, False),
        ("product_id", U, True),
    ],
}

_RELATIONSHIPS: Dict[ObjectType, Dict[str, ObjectType]] = {
    ObjectType.LEADS: {"customer": ObjectType.CUSTOMERS},
    ObjectType.OPPORTUNITIES: {"customer": ObjectType.CUSTOMERS, "lead": ObjectType.LEADS},
    ObjectType.CASES: {"customer": ObjectType.CUSTOMERS},
    ObjectType.TASKS: {"customer": ObjectType.CUSTOMERS},
    ObjectType.PRODUCTS: {"vendor": ObjectType.VENDORS},
    ObjectType.QUOTE_HDR: {"customer": ObjectType.CUSTOMERS},
    ObjectType.QUOTE_DTL: {"quote": ObjectType.QUOTE_HDR},
    ObjectType.ORDER_HDR: {"customer": ObjectType.CUSTOMERS, "quote": ObjectType.QUOTE_HDR},
    ObjectType.ORDER_DTL: {"order": ObjectType.ORDER_HDR, "product": ObjectType.PRODUCTS},
}


def create_default_schema_registry() -> SchemaRegistry:
    """Create the starter schema catalog for every CRM object kind."""
    registry = SchemaRegistry(name="crm")
    for object_type in ObjectType:
        schema = registry.register_object(object_type)
        for column_name, data_type, is_nullable in _COMMON_COLUMNS + _CATALOG.get(object_type, []):
            schema.add_column(column_name, data_type, is_nullable=is_nullable)
        for name, target in _RELATIONSHIPS.get(object_type, {}).items():
            schema.add_relationship(name, target)
    return registry
