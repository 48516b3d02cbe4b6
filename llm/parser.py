import json
from typing import Any, Dict


class LlmFlowParser:
    """Turns a drafted flow, as text from the model, into a payload for parse_and_validate_flow."""

    def parse(self, llm_text: str) -> Dict[str, Any]:
        """
        Decode the draft. Models often wrap JSON in a ```json fence, so one is removed first.

        Raises json.JSONDecodeError when the draft is not JSON.
        """
        text = llm_text.strip()
        if text.startswith("```"):
            text = text.strip("`")
            if text.startswith("json"):
                text = text[len("json"):]
        return json.loads(text)
