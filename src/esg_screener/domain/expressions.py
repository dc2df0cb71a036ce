"""
Rule Expression Tree.

A rule condition is a closed, recursive sum type:

    Comparison  - compares one parameter value against an operand
    Logical     - combines child expressions with AND / OR / NOT

Both variants carry a ``type`` tag so the tree round-trips through its JSON
form (``{"type": "comparison", ...}`` / ``{"type": "AND", "conditions": [...]}``)
without losing information. Pydantic dispatches on that tag.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Union

from pydantic import (
    BaseModel,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    model_validator,
)


class ComparisonOperator(str, Enum):
    """Operators allowed in a comparison node."""

    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS = "contains"


class LogicalKind(str, Enum):
    """Combinators for logical nodes."""

    AND = "AND"
    OR = "OR"
    NOT = "NOT"


NUMERIC_OPERATORS = frozenset(
    {ComparisonOperator.LT, ComparisonOperator.LE, ComparisonOperator.GT, ComparisonOperator.GE}
)

# Strict types keep the scalar kind intact (True stays bool, 500 stays int)
ScalarValue = Union[StrictBool, StrictInt, StrictFloat, StrictStr]
ListValue = List[Union[StrictBool, StrictInt, StrictFloat, StrictStr]]
OperandValue = Union[ScalarValue, ListValue]


class Comparison(BaseModel):
    """Leaf node: ``parameter <operator> value``."""

    type: Literal["comparison"] = "comparison"
    parameter: str = Field(..., min_length=1, description="Parameter name")
    operator: ComparisonOperator
    value: OperandValue

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"{self.parameter} {self.operator.value} {self.value!r}"


class Logical(BaseModel):
    """Composite node combining child expressions."""

    type: Literal["AND", "OR", "NOT"]
    conditions: List["Expression"] = Field(default_factory=list)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _not_has_single_child(self) -> "Logical":
        if self.type == "NOT" and len(self.conditions) != 1:
            raise ValueError(
                f"NOT requires exactly one condition, got {len(self.conditions)}"
            )
        return self

    @property
    def kind(self) -> LogicalKind:
        return LogicalKind(self.type)

    @property
    def children(self) -> List["Expression"]:
        return self.conditions

    def __str__(self) -> str:
        if self.type == "NOT":
            return f"NOT ({self.conditions[0]})"
        joined = f" {self.type} ".join(f"({c})" for c in self.conditions)
        return joined or f"{self.type}()"


Expression = Annotated[Union[Comparison, Logical], Field(discriminator="type")]

Logical.model_rebuild()


def iter_comparisons(expression: Union[Comparison, Logical]):
    """Yield every comparison node reachable from ``expression`` (depth-first)."""
    stack = [expression]
    while stack:
        node = stack.pop()
        if isinstance(node, Comparison):
            yield node
        else:
            stack.extend(reversed(node.conditions))
