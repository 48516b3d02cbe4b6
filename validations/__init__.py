from .flow_validator import (
    FlowValidationError,
    InvalidValueError,
    UnsupportedOperatorError,
    collect_authoring_problems,
    number_in_order,
    parse_and_validate_flow,
    renumber_flow,
    validate_flow,
)

__all__ = [
    "FlowValidationError",
    "InvalidValueError",
    "UnsupportedOperatorError",
    "collect_authoring_problems",
    "number_in_order",
    "parse_and_validate_flow",
    "renumber_flow",
    "validate_flow",
]
