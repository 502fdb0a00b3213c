"""Domain Enumerations - All status and type definitions"""
from enum import Enum


class ApplicationType(str, Enum):
    """Application types a workflow can serve"""
    UNDERGRADUATE = "undergraduate"
    GRADUATE = "graduate"
    TRANSFER = "transfer"


class ConditionOperator(str, Enum):
    """Operators for condition evaluation"""
    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUALS = "greater_than_or_equals"
    LESS_THAN_OR_EQUALS = "less_than_or_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    IN = "in"
    NOT_IN = "not_in"
    EMPTY = "empty"
    NOT_EMPTY = "not_empty"


# Symbolic operators accepted from the workflow editor
OPERATOR_ALIASES = {
    "=": ConditionOperator.EQUALS,
    "==": ConditionOperator.EQUALS,
    "!=": ConditionOperator.NOT_EQUALS,
    "<>": ConditionOperator.NOT_EQUALS,
    ">": ConditionOperator.GREATER_THAN,
    "<": ConditionOperator.LESS_THAN,
    ">=": ConditionOperator.GREATER_THAN_OR_EQUALS,
    "<=": ConditionOperator.LESS_THAN_OR_EQUALS,
    "is_empty": ConditionOperator.EMPTY,
    "is_not_empty": ConditionOperator.NOT_EMPTY,
}


def parse_operator(raw: str) -> ConditionOperator:
    """
    Resolve a stored operator string to a ConditionOperator

    Raises:
        ValueError: If the operator is not recognized
    """
    key = raw.strip().lower()
    if key in OPERATOR_ALIASES:
        return OPERATOR_ALIASES[key]
    return ConditionOperator(key)


class EntityType(str, Enum):
    """Graph entity kinds referenced by validation issues"""
    WORKFLOW = "workflow"
    STAGE = "stage"
    TRANSITION = "transition"


class ValidationCode(str, Enum):
    """Machine-readable workflow validation codes"""
    # Errors
    NO_STAGES = "no_stages"
    MISSING_TRANSITIONS = "missing_transitions"
    DISCONNECTED_STAGE = "disconnected_stage"
    FOREIGN_STAGE_REFERENCE = "foreign_stage_reference"
    INVALID_ENTRY_STAGE = "invalid_entry_stage"
    # Warnings
    UNREACHABLE_STAGE = "unreachable_stage"
    NO_TERMINAL_STAGE = "no_terminal_stage"
    UNKNOWN_OPERATOR = "unknown_operator"
