"""
SQLAlchemy ORM models for the persistence layer.
A flow is stored across four tables: the flow row, its condition groups (one per IF / ELSE-IF
row), and the conditions and actions of each group. Literal values are stored as JSON
wrappers ({"value": ...}) and relationship paths as JSON arrays of relationship names.
"""

import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class LogicFlowModel(Base):
    __tablename__ = "logic_flows"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    object_type = Column(String, nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    organization_id = Column(String, nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    groups = relationship(
        "ConditionGroupModel",
        back_populates="flow",
        cascade="all, delete-orphan",
        order_by="ConditionGroupModel.row_order",
    )

    def __repr__(self) -> str:
        return f"<LogicFlowModel(id={self.id}, name={self.name}, object_type={self.object_type})>"


class ConditionGroupModel(Base):
    __tablename__ = "logic_flow_condition_groups"
    __table_args__ = (UniqueConstraint("flow_id", "row_order", name="uq_condition_group_row_order"),)

    id = Column(String, primary_key=True, default=_uuid)
    flow_id = Column(String, ForeignKey("logic_flows.id", ondelete="CASCADE"), nullable=False, index=True)
    row_order = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)

    flow = relationship("LogicFlowModel", back_populates="groups")
    conditions = relationship(
        "ConditionModel",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="ConditionModel.condition_order",
    )
    actions = relationship(
        "ActionModel",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="ActionModel.action_order",
    )


class ConditionModel(Base):
    __tablename__ = "logic_flow_conditions"

    id = Column(String, primary_key=True, default=_uuid)
    condition_group_id = Column(
        String, ForeignKey("logic_flow_condition_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    column_name = Column(String, nullable=False)
    data_type = Column(String, nullable=True)
    operator = Column(String, nullable=False)
    # {"value": <literal>}
    value = Column(JSON, nullable=True)
    condition_order = Column(Integer, nullable=False)
    # ["customer", ...] or NULL for a local column
    object_path = Column(JSON, nullable=True)
    referenced_field = Column(String, nullable=True)

    group = relationship("ConditionGroupModel", back_populates="conditions")


class ActionModel(Base):
    __tablename__ = "logic_flow_actions"

    id = Column(String, primary_key=True, default=_uuid)
    condition_group_id = Column(
        String, ForeignKey("logic_flow_condition_groups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    field_to_update = Column(String, nullable=False)
    data_type = Column(String, nullable=True)
    # {"value": <literal or formula text>}, NULL when the value is copied from another field
    update_value = Column(JSON, nullable=True)
    is_formula = Column(Boolean, default=False, nullable=False)
    action_order = Column(Integer, nullable=False)
    target_object_path = Column(JSON, nullable=True)
    source_field_path = Column(JSON, nullable=True)
    source_field = Column(String, nullable=True)

    group = relationship("ConditionGroupModel", back_populates="actions")
