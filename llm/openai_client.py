from typing import Any

from openai import OpenAI

from config import get_settings
from models import ObjectType
from registry import SchemaIntrospector


class OpenAIFlowLLM:
    """
    Thin wrapper around OpenAI chat completion to turn a natural language request into the
    stringified flow JSON expected by the downstream validation and save pipeline.
    """

    def __init__(self, model: str | None = None, client: Any | None = None) -> None:
        settings = get_settings()
        if client is None:
            # OpenAI() will also read from env, but we inject explicitly from our .env-based configuration.
            api_key = settings.openai_api_key
            client = OpenAI(api_key=api_key) if api_key else OpenAI()
        self.client = client
        self.model = model or settings.openai_model

    def _build_prompt(self, user_input: str, schema: SchemaIntrospector, object_type: ObjectType) -> str:
        def format_columns(target: ObjectType) -> str:
            lines = [f"Fields of {target.value}:"]
            for column in schema.get_table_schema(target):
                operators = ", ".join(sorted(operator.value for operator in column.supported_operators))
                lines.append(f"- {column.column_name} ({column.data_type.value}); operators: {operators}")
            return "\n".join(lines)

        relationships = schema.get_relationships(object_type)
        blocks = [format_columns(object_type)]
        for name, target in relationships.items():
            blocks.append(f"Relationship '{name}' leads to {target.value}.\n{format_columns(target)}")

        instructions = (
            "You are a system that maps natural language requests to a CRM logic flow JSON.\n"
            f"The flow runs against records of '{object_type.value}'.\n"
            "A flow is an ordered list of groups (IF / ELSE IF rows). Only the first group whose conditions all hold fires.\n"
            "Every group needs at least one condition and at least one action.\n"
            "Use only the listed fields, and only operators listed for a field.\n"
            'Operators IS NULL, IS NOT NULL, IS TRUE and IS FALSE take no value.\n'
            'To test a related record set "object_path" to the relationship names and "referenced_field" to the field on it.\n'
            'An action either sets a literal ("update_value": {"value": ...}) or copies a field '
            '("update_value": null, "source_field": ..., optional "source_field_path").\n'
            "Return ONLY valid JSON (no markdown)."
        )

        schema_hint = (
            '{\n'
            '  "name": "<string>",\n'
            '  "description": "<string>",\n'
            f'  "object_type": "{object_type.value}",\n'
            '  "groups": [\n'
            '    {"row_order": 1,\n'
            '     "conditions": [{"column_name": "<field>", "operator": "<operator>", "value": {"value": ...}}, ...],\n'
            '     "actions": [{"field_to_update": "<field>", "update_value": {"value": ...}}, ...]}\n'
            '  ]\n'
            '}'
        )

        return (
            f"{instructions}\n\n"
            + "\n\n".join(blocks)
            + f"\n\nNatural language request:\n{user_input}\n\n"
            f"Respond with JSON shaped like:\n{schema_hint}"
        )

    def generate_flow_json(self, user_input: str, schema: SchemaIntrospector, object_type: ObjectType | str) -> str:
        prompt = self._build_prompt(user_input, schema, ObjectType(object_type))
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=0.2,
        )
        return response.choices[0].message.content.strip()
