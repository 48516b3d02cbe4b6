import logging

from config import get_settings
from db import FlowRepository, SqlAlchemyFlowRepository, create_engine_for_url, create_session_factory, init_db
from llm import LlmFlowParser, OpenAIFlowLLM
from models import Flow, ObjectType
from registry import SchemaIntrospector, create_default_schema_registry
from validations import parse_and_validate_flow


def _stamp_organization(flow: Flow, organization_id: str | None) -> Flow:
    if flow.organization_id is None:
        flow.organization_id = organization_id or get_settings().organization_id
    return flow


def orchestrate_user_input(
    llm_payload: str,
    repository: FlowRepository,
    schema: SchemaIntrospector | None = None,
    organization_id: str | None = None,
) -> str:
    """
    Orchestrate the ingestion of flow JSON:
    1. Parse stringified JSON.
    2. Validate against the Flow model and the object schema.
    3. Scope it to the given organization, or the configured default, unless it names one.
    4. Save to persistence layer.

    Returns the saved flow id.
    """
    schema = schema or create_default_schema_registry()
    parsed_payload = LlmFlowParser().parse(llm_payload)
    flow: Flow = parse_and_validate_flow(parsed_payload, schema)
    return repository.save(_stamp_organization(flow, organization_id))


def orchestrate_natural_language(
    user_input: str,
    object_type: ObjectType | str,
    repository: FlowRepository,
    schema: SchemaIntrospector | None = None,
    llm_client: OpenAIFlowLLM | None = None,
    organization_id: str | None = None,
) -> str:
    """
    Full pipeline starting from natural language:
    1. Send NL to OpenAI with the object's schema to get stringified flow JSON.
    2. Parse the JSON output.
    3. Validate against the Flow model and the schema.
    4. Scope it to an organization as orchestrate_user_input does.
    5. Save to persistence.
    """
    schema = schema or create_default_schema_registry()
    llm_client = llm_client or OpenAIFlowLLM()
    llm_text = llm_client.generate_flow_json(user_input, schema, object_type)
    parsed_payload = LlmFlowParser().parse(llm_text)
    flow: Flow = parse_and_validate_flow(parsed_payload, schema)
    return repository.save(_stamp_organization(flow, organization_id))


def build_repository(database_url: str) -> SqlAlchemyFlowRepository:
    engine = create_engine_for_url(database_url)
    init_db(engine)
    return SqlAlchemyFlowRepository(create_session_factory(engine))


if __name__ == "__main__":
    import sys

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    repo = build_repository(settings.database_url)

    if len(sys.argv) > 2:
        # First argument is the object type, the rest is the natural language request
        object_type = sys.argv[1]
        user_input = " ".join(sys.argv[2:])
    else:
        # Interactive mode: prompt user for input
        print("Object the flow runs on (" + ", ".join(member.value for member in ObjectType) + "):")
        object_type = input("> ").strip()
        print("Describe the flow in natural language:")
        user_input = input("> ").strip()

    if not user_input or object_type not in {member.value for member in ObjectType}:
        print("An object type and a request are required. Exiting.")
        sys.exit(1)

    flow_id = orchestrate_natural_language(user_input, object_type, repo)
    print(f"Flow saved with id: {flow_id}")
