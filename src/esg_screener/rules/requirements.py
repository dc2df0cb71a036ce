"""
Parameter Requirement Extraction.

Collects the distinct parameter names a rule set refers to, so callers can
check data availability before screening. Looks only at expressions, never
at data.
"""

from __future__ import annotations

from typing import Any, Iterable, Set, Union

from esg_screener.domain.expressions import Comparison, Logical, iter_comparisons


def required_parameters(target: Union[Comparison, Logical, Any, Iterable[Any]]) -> Set[str]:
    """
    Collect every parameter name referenced by comparisons in ``target``.

    Args:
        target: An expression, a rule (anything with ``.expression``),
                or an iterable of either

    Returns:
        Set of parameter names (deduplicated, unordered)
    """
    if isinstance(target, (Comparison, Logical)):
        return {node.parameter for node in iter_comparisons(target)}

    expression = getattr(target, "expression", None)
    if expression is not None:
        return required_parameters(expression)

    names: Set[str] = set()
    for item in target:
        names |= required_parameters(item)
    return names
