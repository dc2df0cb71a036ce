"""
Textual Serialization of Expressions and Parameter Values.

Rule expressions and parameter values are stored and exchanged as JSON
text. Parsing validates structure first so authoring mistakes surface as
``ExpressionValidationError`` with a readable message; dumping always uses
the tagged form so ``parse_expression(serialize_expression(e)) == e``.

Also provides the shorthand notation used when authoring simple rules by
hand, e.g. ``"CARBON_EMISSIONS >= 500"``.
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Optional, Union

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from esg_screener.domain.exceptions import ExpressionValidationError
from esg_screener.domain.expressions import (
    Comparison,
    ComparisonOperator,
    Expression,
    Logical,
    OperandValue,
)
from esg_screener.rules.evaluator import validate_expression

_EXPRESSION_ADAPTER: TypeAdapter = TypeAdapter(Expression)
_VALUE_ADAPTER: TypeAdapter = TypeAdapter(OperandValue)

_SHORTHAND_PATTERN = re.compile(
    r"^([A-Z_][A-Z0-9_]*)\s*(>=|<=|==|!=|>|<)\s*(.+)$", re.IGNORECASE
)


def parse_expression(source: Union[str, bytes, dict, Comparison, Logical]) -> Union[Comparison, Logical]:
    """
    Parse an expression from JSON text or a decoded mapping.

    Args:
        source: JSON text, mapping, or an already-built expression

    Returns:
        Comparison or Logical tree

    Raises:
        ExpressionValidationError: If the text is not JSON or the tree is malformed
    """
    if isinstance(source, (Comparison, Logical)):
        return source

    raw: Any = source
    if isinstance(source, (str, bytes)):
        try:
            raw = json.loads(source)
        except json.JSONDecodeError as e:
            raise ExpressionValidationError(f"Invalid expression format: {e.msg}") from e

    check = validate_expression(raw)
    if not check.valid:
        raise ExpressionValidationError(check.error or "Invalid expression")

    try:
        return _EXPRESSION_ADAPTER.validate_python(raw)
    except PydanticValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise ExpressionValidationError(
            f"Invalid expression at {location or 'root'}: {first.get('msg')}",
            field=location or None,
        ) from e


def serialize_expression(expression: Union[Comparison, Logical]) -> str:
    """Dump an expression tree to its JSON text form."""
    return _EXPRESSION_ADAPTER.dump_json(expression).decode("utf-8")


def parse_value(text: Union[str, bytes]) -> Any:
    """
    Parse a stored parameter value.

    Raises:
        ValueError: If the text is not JSON or not a scalar/list value
    """
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid parameter value: {text!r}") from e
    try:
        return _VALUE_ADAPTER.validate_python(raw)
    except PydanticValidationError as e:
        raise ValueError(f"Unsupported parameter value type: {type(raw).__name__}") from e


def serialize_value(value: Any) -> str:
    """Dump a parameter value to JSON text."""
    return json.dumps(value)


def parse_shorthand(text: str) -> Optional[Comparison]:
    """
    Parse a shorthand comparison such as ``"WEAPONS_PRODUCTION > 10%"``.

    A trailing ``%`` is dropped (10% becomes 10), ``true``/``false`` become
    booleans, quoted text becomes a string, numbers become numbers and
    anything else is kept as a bare string. The parameter name is upper-cased.

    Returns:
        Comparison, or None when the text does not match ``NAME OP VALUE``
    """
    match = _SHORTHAND_PATTERN.match(text.strip())
    if not match:
        return None

    parameter, operator, value_text = match.groups()
    value_text = value_text.strip()

    value: Any
    if value_text.endswith("%"):
        value = _parse_number(value_text[:-1])
        if value is None:
            return None
    elif value_text.lower() in ("true", "false"):
        value = value_text.lower() == "true"
    elif len(value_text) >= 2 and value_text[0] == value_text[-1] and value_text[0] in "'\"":
        value = value_text[1:-1]
    else:
        number = _parse_number(value_text)
        value = number if number is not None else value_text

    return Comparison(
        parameter=parameter.upper(),
        operator=ComparisonOperator(operator),
        value=value,
    )


def format_shorthand(comparison: Comparison) -> str:
    """Render a comparison back to shorthand text."""
    value = comparison.value
    if isinstance(value, bool):
        value_text = str(value).lower()
    elif isinstance(value, str):
        value_text = f"'{value}'"
    elif isinstance(value, list):
        value_text = json.dumps(value)
    else:
        value_text = str(value)
    return f"{comparison.parameter} {comparison.operator.value} {value_text}"


def _parse_number(text: str) -> Optional[Union[int, float]]:
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


__all__: List[str] = [
    "parse_expression",
    "serialize_expression",
    "parse_value",
    "serialize_value",
    "parse_shorthand",
    "format_shorthand",
]
