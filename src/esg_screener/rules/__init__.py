"""
Rules Package - Expression Evaluation and Requirement Extraction.

Components:
    - evaluate / assess: Two- and three-valued expression evaluation
    - validate_expression: Structural check used at authoring time
    - extract_actual_value_and_threshold / describe_failure: Display data
    - required_parameters: Parameter names a rule set depends on

Design Principles:
    - Pure functions, no I/O
    - Missing data is a value (MISSING / None), never an exception
"""

from esg_screener.rules.requirements import required_parameters
from esg_screener.rules.evaluator import (
    MISSING,
    assess,
    describe_failure,
    evaluate,
    extract_actual_value_and_threshold,
    format_threshold,
    lookup_value,
    validate_expression,
)

__all__ = [
    "MISSING",
    "assess",
    "describe_failure",
    "evaluate",
    "extract_actual_value_and_threshold",
    "format_threshold",
    "lookup_value",
    "required_parameters",
    "validate_expression",
]
