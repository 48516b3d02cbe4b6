"""Shared fixtures: the default CRM schema catalog, an in-memory SQLite store and a flow runner."""

import pytest

from builder import FlowBuilder
from db import SqlAlchemyFlowRepository, create_engine_for_url, create_session_factory, init_db
from engine import FlowRunner
from models import Flow
from registry import create_default_schema_registry


@pytest.fixture
def schema():
    return create_default_schema_registry()


@pytest.fixture
def engine():
    engine = create_engine_for_url("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def sql_repository(session_factory):
    return SqlAlchemyFlowRepository(session_factory)


@pytest.fixture
def runner(schema):
    return FlowRunner(schema)


@pytest.fixture
def qualified_lead_flow(schema) -> Flow:
    """Leads: IF status = Qualified THEN priority = High."""
    builder = FlowBuilder(schema, name="Prioritise qualified leads", object_type="leads")
    builder.set_condition_field(0, 0, "status")
    builder.set_condition_operator(0, 0, "=")
    builder.set_condition_value(0, 0, "Qualified")
    builder.set_action_field(0, 0, "priority")
    builder.set_action_literal(0, 0, "High")
    return builder.build()


@pytest.fixture
def opportunity_tier_flow(schema) -> Flow:
    """Opportunities: IF amount > 10000 THEN priority = Top ELSE IF amount > 1000 THEN priority = Medium."""
    builder = FlowBuilder(schema, name="Tier opportunities", object_type="opportunities")
    builder.set_condition_field(0, 0, "amount")
    builder.set_condition_operator(0, 0, ">")
    builder.set_condition_value(0, 0, 10000)
    builder.set_action_field(0, 0, "priority")
    builder.set_action_literal(0, 0, "Top")

    builder.add_group()
    builder.set_condition_field(1, 0, "amount")
    builder.set_condition_operator(1, 0, ">")
    builder.set_condition_value(1, 0, 1000)
    builder.set_action_field(1, 0, "priority")
    builder.set_action_literal(1, 0, "Medium")
    builder.add_action(1)
    builder.set_action_field(1, 1, "probability")
    builder.set_action_literal(1, 1, 50)
    return builder.build()
