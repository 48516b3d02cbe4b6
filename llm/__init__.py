from .openai_client import OpenAIFlowLLM
from .parser import LlmFlowParser

__all__ = ["LlmFlowParser", "OpenAIFlowLLM"]
