import uuid
from enum import Enum
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator


def _new_id() -> str:
    return str(uuid.uuid4())


class ObjectType(str, Enum):
    TASKS = "tasks"
    VENDORS = "vendors"
    LEADS = "leads"
    CASES = "cases"
    OPPORTUNITIES = "opportunities"
    QUOTE_HDR = "quote_hdr"
    QUOTE_DTL = "quote_dtl"
    ORDER_HDR = "order_hdr"
    ORDER_DTL = "order_dtl"
    PRODUCTS = "products"
    CUSTOMERS = "customers"


class DataType(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    DATE = "date"
    TIMESTAMP = "timestamp"
    UUID = "uuid"


class Operator(str, Enum):
    EQUALS = "="
    NOT_EQUALS = "!="
    GREATER_THAN = ">"
    GREATER_OR_EQUAL = ">="
    LESS_THAN = "<"
    LESS_OR_EQUAL = "<="
    CONTAINS = "CONTAINS"
    NOT_CONTAINS = "NOT CONTAINS"
    STARTS_WITH = "STARTS WITH"
    ENDS_WITH = "ENDS WITH"
    IS_NULL = "IS NULL"
    IS_NOT_NULL = "IS NOT NULL"
    IS_TRUE = "IS TRUE"
    IS_FALSE = "IS FALSE"

    @property
    def is_unary(self) -> bool:
        return self in UNARY_OPERATORS


UNARY_OPERATORS = frozenset(
    {Operator.IS_NULL, Operator.IS_NOT_NULL, Operator.IS_TRUE, Operator.IS_FALSE}
)


class ActionKind(str, Enum):
    LITERAL = "literal"
    COPY = "copy"
    FORMULA = "formula"


class LiteralValue(BaseModel):
    """Wrapper around a comparison or update literal, persisted as {"value": ...}."""

    value: Any = None


class RelationshipPath(BaseModel):
    """Ordered relationship names leading from the triggering record to a related record."""

    hops: Tuple[str, ...] = ()

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def accept_plain_lists(cls, values: Any) -> Any:
        # Paths are persisted and exchanged as plain arrays of relationship names.
        if isinstance(values, (list, tuple)):
            return {"hops": tuple(values)}
        return values

    @field_validator("hops")
    @classmethod
    def hops_are_named(cls, hops: Tuple[str, ...]) -> Tuple[str, ...]:
        if any(not hop or not hop.strip() for hop in hops):
            raise ValueError("Relationship path hops must be non-empty names")
        return hops

    @classmethod
    def of(cls, *hops: str) -> "RelationshipPath":
        return cls(hops=tuple(hops))

    @property
    def is_empty(self) -> bool:
        return not self.hops

    def to_list(self) -> List[str] | None:
        return list(self.hops) if self.hops else None

    def __str__(self) -> str:
        return ".".join(self.hops)


def _none_if_empty(path: RelationshipPath | None) -> RelationshipPath | None:
    # An empty path means the record itself and is stored as NULL.
    return None if path is not None and path.is_empty else path


class Condition(BaseModel):
    id: str = Field(default_factory=_new_id)
    condition_order: int = Field(1, ge=1, description="Display order inside the group")
    column_name: str = Field("", description="Local column, or the column selected in the builder")
    data_type: DataType | None = Field(None, description="Derived from the column's schema")
    operator: Operator | None = None
    value: LiteralValue = Field(default_factory=LiteralValue)
    object_path: RelationshipPath | None = Field(None, description="Relationships to traverse first")
    referenced_field: str | None = Field(None, description="Field read on the related record")

    @field_validator("object_path")
    @classmethod
    def drop_empty_path(cls, path: RelationshipPath | None) -> RelationshipPath | None:
        return _none_if_empty(path)

    @property
    def field_name(self) -> str:
        """Field read on the record that the path (if any) lands on."""
        if self.object_path is not None and not self.object_path.is_empty:
            return self.referenced_field or self.column_name
        return self.column_name


class Action(BaseModel):
    id: str = Field(default_factory=_new_id)
    action_order: int = Field(1, ge=1)
    field_to_update: str = ""
    data_type: DataType | None = None
    update_value: LiteralValue | None = Field(
        default_factory=LiteralValue,
        description="Literal to write, or the formula text when is_formula is set",
    )
    is_formula: bool = False
    source_field: str | None = Field(None, description="Field copied from when the action copies a value")
    source_field_path: RelationshipPath | None = None
    target_object_path: RelationshipPath | None = Field(None, description="Write to a related record instead")

    @field_validator("source_field_path", "target_object_path")
    @classmethod
    def drop_empty_paths(cls, path: RelationshipPath | None) -> RelationshipPath | None:
        return _none_if_empty(path)

    @model_validator(mode="after")
    def ensure_single_value_kind(self) -> "Action":
        has_literal = self.update_value is not None and not self.is_formula
        has_copy = self.source_field is not None
        populated = sum([has_literal, has_copy, self.is_formula])
        if populated != 1:
            raise ValueError("Action must define exactly one of a literal value, a copied field, or a formula")
        if self.is_formula and self.update_value is None:
            raise ValueError("Formula actions must carry their expression in update_value")
        if self.source_field_path is not None and not has_copy:
            raise ValueError("source_field_path requires source_field")
        return self

    @property
    def kind(self) -> ActionKind:
        if self.is_formula:
            return ActionKind.FORMULA
        if self.source_field is not None:
            return ActionKind.COPY
        return ActionKind.LITERAL


class ConditionGroup(BaseModel):
    id: str = Field(default_factory=_new_id)
    row_order: int = Field(1, ge=1, description="1-based IF / ELSE-IF position")
    description: str | None = None
    conditions: List[Condition] = Field(default_factory=lambda: [Condition()], min_length=1)
    actions: List[Action] = Field(default_factory=lambda: [Action()], min_length=1)

    def ordered_conditions(self) -> List[Condition]:
        return sorted(self.conditions, key=lambda condition: condition.condition_order)

    def ordered_actions(self) -> List[Action]:
        return sorted(self.actions, key=lambda action: action.action_order)


class Flow(BaseModel):
    id: str | None = Field(None, description="Generated by the store on save")
    name: str = Field("", description="Human friendly name for the flow")
    description: str | None = None
    object_type: ObjectType | None = Field(None, description="CRM object the flow runs against")
    is_active: bool = True
    organization_id: str | None = Field(None, description="Tenant scope, carried but not enforced")
    groups: List[ConditionGroup] = Field(default_factory=lambda: [ConditionGroup()], min_length=1)

    def ordered_groups(self) -> List[ConditionGroup]:
        return sorted(self.groups, key=lambda group: group.row_order)

    def references_fields(self) -> bool:
        for group in self.groups:
            if any(condition.column_name for condition in group.conditions):
                return True
            if any(action.field_to_update for action in group.actions):
                return True
        return False

    def structure(self) -> Dict[str, Any]:
        """Dump the flow without generated identifiers, in evaluation order."""
        return {
            "name": self.name,
            "description": self.description,
            "object_type": self.object_type,
            "is_active": self.is_active,
            "organization_id": self.organization_id,
            "groups": [
                {
                    "row_order": group.row_order,
                    "description": group.description,
                    "conditions": [
                        condition.model_dump(exclude={"id"}) for condition in group.ordered_conditions()
                    ],
                    "actions": [action.model_dump(exclude={"id"}) for action in group.ordered_actions()],
                }
                for group in self.ordered_groups()
            ],
        }
