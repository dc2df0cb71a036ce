"""
Expression Evaluator.

Evaluates a rule expression tree against one company's effective parameter
values.

Semantics:
    - A comparison on a parameter with no value evaluates to False
    - <, <=, >, >= need numeric operands on both sides (bool is not numeric)
    - == and != are type-sensitive (True != 1, "1" != 1)
    - in / not_in need a list operand, contains needs two strings
    - AND of nothing is True, OR of nothing is False, NOT negates its child

``assess`` is the three-valued variant used for screening: a missing value
is unknown (None) rather than False, and unknowns propagate through AND/OR/NOT
using Kleene logic so a definite answer is still produced where the known
values decide it.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, List, Optional, Tuple, Union

from esg_screener.domain.expressions import (
    NUMERIC_OPERATORS,
    Comparison,
    ComparisonOperator,
    Logical,
    LogicalKind,
)
from esg_screener.domain.value_objects import ExpressionValidation, ParameterMap
from esg_screener.rules.requirements import required_parameters

logger = logging.getLogger(__name__)

AnyExpression = Union[Comparison, Logical]

DEFAULT_FAILURE_MESSAGE = "Rule condition not met"


class _Missing:
    """Sentinel for a parameter without a value."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

_VALID_OPERATORS = frozenset(op.value for op in ComparisonOperator)
_LOGICAL_TYPES = frozenset(kind.value for kind in LogicalKind)

_THRESHOLD_SYMBOLS = {
    ComparisonOperator.EQ: "=",
    ComparisonOperator.NE: "≠",
    ComparisonOperator.LT: "<",
    ComparisonOperator.LE: "≤",
    ComparisonOperator.GT: ">",
    ComparisonOperator.GE: "≥",
    ComparisonOperator.IN: "in",
    ComparisonOperator.NOT_IN: "not in",
    ComparisonOperator.CONTAINS: "contains",
}

_VIOLATION_PHRASES = {
    ComparisonOperator.EQ: "is equal to",
    ComparisonOperator.NE: "is not equal to",
    ComparisonOperator.LT: "is less than",
    ComparisonOperator.LE: "is at most",
    ComparisonOperator.GT: "is greater than",
    ComparisonOperator.GE: "is at least",
    ComparisonOperator.IN: "is one of",
    ComparisonOperator.NOT_IN: "is not one of",
    ComparisonOperator.CONTAINS: "contains",
}


# =============================================================================
# Value lookup and comparison
# =============================================================================


def lookup_value(values: ParameterMap, parameter: str) -> Any:
    """
    Find a parameter's value, matching the name exactly first and then
    case-insensitively.

    Returns:
        The value, or MISSING
    """
    if parameter in values:
        return values[parameter]
    folded = parameter.casefold()
    for name, value in values.items():
        if name.casefold() == folded:
            return value
    return MISSING


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _strict_equal(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left is right
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, str) and isinstance(right, str):
        return left == right
    return False


def compare(operator: ComparisonOperator, actual: Any, expected: Any) -> bool:
    """Apply one comparison operator to a present value."""
    if operator == ComparisonOperator.EQ:
        return _strict_equal(actual, expected)
    if operator == ComparisonOperator.NE:
        return not _strict_equal(actual, expected)
    if operator in NUMERIC_OPERATORS:
        if not (_is_number(actual) and _is_number(expected)):
            return False
        if operator == ComparisonOperator.LT:
            return actual < expected
        if operator == ComparisonOperator.LE:
            return actual <= expected
        if operator == ComparisonOperator.GT:
            return actual > expected
        return actual >= expected
    if operator == ComparisonOperator.IN:
        return isinstance(expected, list) and any(_strict_equal(actual, item) for item in expected)
    if operator == ComparisonOperator.NOT_IN:
        return isinstance(expected, list) and not any(
            _strict_equal(actual, item) for item in expected
        )
    if operator == ComparisonOperator.CONTAINS:
        return isinstance(actual, str) and isinstance(expected, str) and expected in actual
    return False


# =============================================================================
# Evaluation
# =============================================================================


def evaluate(expression: AnyExpression, values: ParameterMap) -> bool:
    """
    Evaluate an expression to a boolean.

    Args:
        expression: Expression tree
        values: Effective parameter values for one company

    Returns:
        True if the expression holds for these values
    """
    if isinstance(expression, Comparison):
        actual = lookup_value(values, expression.parameter)
        if actual is MISSING:
            return False
        return compare(expression.operator, actual, expression.value)

    kind = expression.kind
    if kind == LogicalKind.AND:
        return all(evaluate(child, values) for child in expression.conditions)
    if kind == LogicalKind.OR:
        return any(evaluate(child, values) for child in expression.conditions)
    return not evaluate(expression.conditions[0], values)


def assess(expression: AnyExpression, values: ParameterMap) -> Optional[bool]:
    """
    Evaluate an expression with three-valued logic.

    Returns:
        True or False when the known values decide the expression,
        None when the answer depends on a missing value
    """
    if isinstance(expression, Comparison):
        actual = lookup_value(values, expression.parameter)
        if actual is MISSING:
            return None
        return compare(expression.operator, actual, expression.value)

    kind = expression.kind
    if kind == LogicalKind.NOT:
        inner = assess(expression.conditions[0], values)
        return None if inner is None else not inner

    results = [assess(child, values) for child in expression.conditions]
    if kind == LogicalKind.AND:
        if False in results:
            return False
        return None if None in results else True
    if True in results:
        return True
    return None if None in results else False


# =============================================================================
# Structural validation
# =============================================================================


def validate_expression(expression: Any) -> ExpressionValidation:
    """
    Check that an expression is structurally well formed.

    Works on raw decoded JSON (or a built tree) and never looks at
    parameter values. Used when rules are authored.

    Returns:
        ExpressionValidation with the first problem found
    """
    if isinstance(expression, (Comparison, Logical)):
        expression = expression.model_dump(mode="json")

    if not isinstance(expression, Mapping):
        return ExpressionValidation(valid=False, error="Expression must be an object")

    node_type = expression.get("type")
    if not node_type:
        return ExpressionValidation(valid=False, error="Expression must have a type")

    if node_type == "comparison":
        parameter = expression.get("parameter")
        if not parameter or not isinstance(parameter, str):
            return ExpressionValidation(
                valid=False, error="Comparison must have a parameter name"
            )
        operator = expression.get("operator")
        if not isinstance(operator, str) or operator not in _VALID_OPERATORS:
            return ExpressionValidation(
                valid=False, error="Comparison must have a valid operator"
            )
        if expression.get("value") is None:
            return ExpressionValidation(valid=False, error="Comparison must have a value")
        return ExpressionValidation(valid=True)

    if isinstance(node_type, str) and node_type in _LOGICAL_TYPES:
        conditions = expression.get("conditions")
        if not isinstance(conditions, list):
            return ExpressionValidation(
                valid=False, error="Logical expression must have conditions array"
            )
        if node_type == LogicalKind.NOT.value and len(conditions) != 1:
            return ExpressionValidation(
                valid=False,
                error=f"NOT expression must have exactly one condition, got {len(conditions)}",
            )
        for child in conditions:
            result = validate_expression(child)
            if not result.valid:
                return result
        return ExpressionValidation(valid=True)

    return ExpressionValidation(valid=False, error=f"Unknown expression type: {node_type}")


# =============================================================================
# Display helpers
# =============================================================================


def _display(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def format_threshold(operator: ComparisonOperator, value: Any) -> str:
    """Render operator and operand for display, e.g. ``≥ 500`` or ``in [a, b]``."""
    if isinstance(value, list):
        rendered = "[" + ", ".join(_display(v) for v in value) + "]"
    else:
        rendered = _display(value)
    return f"{_THRESHOLD_SYMBOLS[operator]} {rendered}"


def extract_actual_value_and_threshold(
    expression: AnyExpression, values: ParameterMap
) -> Tuple[Optional[Any], Optional[str]]:
    """
    Get the display value and threshold of a comparison rule.

    Composite expressions have no single actual value and yield (None, None).

    Returns:
        Tuple of (actual value or None when missing, threshold text)
    """
    if not isinstance(expression, Comparison):
        return None, None
    actual = lookup_value(values, expression.parameter)
    threshold = format_threshold(expression.operator, expression.value)
    return (None if actual is MISSING else actual), threshold


def missing_parameters(expression: AnyExpression, values: ParameterMap) -> List[str]:
    """Sorted names referenced by ``expression`` that have no value."""
    return sorted(
        name
        for name in required_parameters(expression)
        if lookup_value(values, name) is MISSING
    )


def describe_failure(
    expression: AnyExpression,
    values: ParameterMap,
    failure_message: Optional[str] = None,
    default_message: str = DEFAULT_FAILURE_MESSAGE,
) -> str:
    """
    Build the human-readable reason a rule failed.

    Order of preference: the rule's configured message, a generated
    explanation for comparisons, a list of missing parameters when the
    composite could not be decided, and finally ``default_message``.
    A configured message on an undecided rule is followed by the names of
    the missing parameters.
    """
    if failure_message:
        if assess(expression, values) is None:
            missing = missing_parameters(expression, values)
            if missing:
                return f"{failure_message} (missing value for parameter: {', '.join(missing)})"
        return failure_message

    if isinstance(expression, Comparison):
        actual = lookup_value(values, expression.parameter)
        if actual is MISSING:
            return f"Missing value for parameter: {expression.parameter}"
        return (
            f"{expression.parameter} ({_display(actual)}) "
            f"{_VIOLATION_PHRASES[expression.operator]} {json.dumps(expression.value)}"
        )

    if assess(expression, values) is None:
        missing = missing_parameters(expression, values)
        if missing:
            return f"Missing value for parameter(s): {', '.join(missing)}"
    return default_message
