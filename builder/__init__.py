from .session import FlowAuthoringError, FlowBuilder

__all__ = ["FlowAuthoringError", "FlowBuilder"]
