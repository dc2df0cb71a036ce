"""
Unit Tests for Expression and Value Serialization.

Test Aspects Covered:
    ✅ Business Logic: JSON text form, shorthand rule text
    ✅ Edge Cases: Scalar types kept, nested trees
    ✅ Error Handling: Malformed JSON and malformed trees
"""

from __future__ import annotations

import json

import pytest

from esg_screener.domain.entities import Rule
from esg_screener.domain.exceptions import ExpressionValidationError
from esg_screener.domain.expressions import Comparison, ComparisonOperator, Logical
from esg_screener.domain.serialization import (
    format_shorthand,
    parse_expression,
    parse_shorthand,
    parse_value,
    serialize_expression,
    serialize_value,
)
from esg_screener.rules.evaluator import validate_expression


class TestExpressionText:
    """Test cases for the JSON expression form."""

    def test_parse_nested_tree(self) -> None:
        """
        SCENARIO: Stored rule text with a nested composite
        EXPECTED: Typed tree with operators and scalar types intact
        """
        # Arrange
        text = json.dumps(
            {
                "type": "OR",
                "conditions": [
                    {"type": "comparison", "parameter": "controversy_level", "operator": "in", "value": ["high", "severe"]},
                    {"type": "NOT", "conditions": [
                        {"type": "comparison", "parameter": "has_environmental_policy", "operator": "==", "value": True},
                    ]},
                ],
            }
        )

        # Act
        expression = parse_expression(text)

        # Assert
        assert isinstance(expression, Logical)
        first, second = expression.children
        assert isinstance(first, Comparison)
        assert first.operator == ComparisonOperator.IN
        assert first.value == ["high", "severe"]
        assert isinstance(second, Logical)
        assert second.children[0].value is True

    def test_rule_expression_survives_text_round_trip(self) -> None:
        """
        SCENARIO: Serialize a rule's expression and parse it back
        EXPECTED: Structurally equal tree, same scalar types
        """
        # Arrange
        rule = Rule(
            id="r1",
            name="Mixed",
            expression={
                "type": "AND",
                "conditions": [
                    {"type": "comparison", "parameter": "a", "operator": ">=", "value": 500},
                    {"type": "comparison", "parameter": "b", "operator": "<", "value": 2.5},
                    {"type": "comparison", "parameter": "c", "operator": "!=", "value": False},
                ],
            },
        )

        # Act
        restored = parse_expression(serialize_expression(rule.expression))

        # Assert
        assert restored == rule.expression
        values = [c.value for c in restored.children]
        assert [type(v) for v in values] == [int, float, bool]

    def test_rule_accepts_text_expression(self) -> None:
        """
        SCENARIO: Rule built from stored JSON text
        EXPECTED: Parsed into a Comparison
        """
        # Act
        rule = Rule(
            id="r1",
            name="Carbon",
            expression='{"type": "comparison", "parameter": "carbon_emissions", "operator": ">=", "value": 500}',
        )

        # Assert
        assert rule.is_comparison
        assert rule.expression.value == 500

    def test_invalid_json_rejected(self) -> None:
        """
        SCENARIO: Text that is not JSON
        EXPECTED: ExpressionValidationError
        """
        # Act & Assert
        with pytest.raises(ExpressionValidationError) as exc_info:
            parse_expression("{not json")

        assert exc_info.value.kind == "validation"

    def test_structurally_invalid_rejected(self) -> None:
        """
        SCENARIO: NOT with two children
        EXPECTED: ExpressionValidationError naming the problem
        """
        # Arrange
        raw = {
            "type": "NOT",
            "conditions": [
                {"type": "comparison", "parameter": "a", "operator": ">", "value": 1},
                {"type": "comparison", "parameter": "b", "operator": ">", "value": 1},
            ],
        }

        # Act & Assert
        with pytest.raises(ExpressionValidationError, match="exactly one condition"):
            parse_expression(raw)

    def test_boolean_list_operand(self) -> None:
        """
        SCENARIO: Membership comparison against a list of booleans
        EXPECTED: Accepted by validation and parsing, booleans kept as bool
        """
        # Arrange
        raw = {"type": "comparison", "parameter": "flag", "operator": "in", "value": [True]}

        # Act
        validation = validate_expression(raw)
        expression = parse_expression(raw)

        # Assert
        assert validation.valid
        assert expression.value == [True]
        assert type(expression.value[0]) is bool
        assert parse_expression(serialize_expression(expression)) == expression

    def test_unsupported_value_type_rejected(self) -> None:
        """
        SCENARIO: Comparison value is an object
        EXPECTED: ExpressionValidationError with a field location
        """
        # Arrange
        raw = {"type": "comparison", "parameter": "a", "operator": "==", "value": {"x": 1}}

        # Act & Assert
        with pytest.raises(ExpressionValidationError) as exc_info:
            parse_expression(raw)

        assert exc_info.value.field


class TestValueText:
    """Test cases for parameter value text."""

    @pytest.mark.parametrize(
        "value", [650, 25.5, True, False, "medium", ["a", "b"], [1, 2.5], [True, False]]
    )
    def test_scalar_type_kept(self, value: object) -> None:
        """
        SCENARIO: Value stored as text and read back
        EXPECTED: Same value and same type
        """
        # Act
        restored = parse_value(serialize_value(value))

        # Assert
        assert restored == value
        assert type(restored) is type(value)

    def test_invalid_value_text(self) -> None:
        """
        SCENARIO: Non-JSON text, and a JSON object
        EXPECTED: ValueError
        """
        # Act & Assert
        with pytest.raises(ValueError):
            parse_value("not json")
        with pytest.raises(ValueError):
            parse_value('{"a": 1}')


class TestShorthand:
    """Test cases for shorthand rule text."""

    @pytest.mark.parametrize(
        "text,parameter,operator,value",
        [
            ("CARBON_EMISSIONS >= 500", "CARBON_EMISSIONS", ">=", 500),
            ("weapons_production > 10%", "WEAPONS_PRODUCTION", ">", 10),
            ("BOARD_DIVERSITY<30.5", "BOARD_DIVERSITY", "<", 30.5),
            ("HAS_POLICY == false", "HAS_POLICY", "==", False),
            ("CONTROVERSY != 'high'", "CONTROVERSY", "!=", "high"),
            ("CONTROVERSY == medium", "CONTROVERSY", "==", "medium"),
        ],
    )
    def test_parse(self, text: str, parameter: str, operator: str, value: object) -> None:
        """
        SCENARIO: Shorthand comparison text
        EXPECTED: Comparison with normalized parameter and typed value
        """
        # Act
        comparison = parse_shorthand(text)

        # Assert
        assert comparison is not None
        assert comparison.parameter == parameter
        assert comparison.operator.value == operator
        assert comparison.value == value
        assert type(comparison.value) is type(value)

    @pytest.mark.parametrize("text", ["", "CARBON", "CARBON ~ 5", "1ABC > 3"])
    def test_unparseable(self, text: str) -> None:
        """
        SCENARIO: Text without NAME OP VALUE
        EXPECTED: None
        """
        # Act & Assert
        assert parse_shorthand(text) is None

    def test_format_parses_back(self) -> None:
        """
        SCENARIO: Format a comparison as shorthand
        EXPECTED: Readable text that parses to the same comparison
        """
        # Arrange
        comparison = Comparison(parameter="CONTROVERSY", operator="!=", value="high")

        # Act
        text = format_shorthand(comparison)

        # Assert
        assert text == "CONTROVERSY != 'high'"
        assert parse_shorthand(text) == comparison
