"""
Parameter Value Resolver - Point-in-Time Value Selection.

Turns the dated value history of a batch of companies into one effective
value per (company, parameter) for a given as-of date.

Algorithm:
    1. Load all values effective on or before the as-of date
    2. Most recent first; the first value seen per (company, parameter) wins
    3. Companies with no dated values at all are re-queried without the
       date filter and get their most recent values instead
    4. Every requested company gets an entry, possibly empty

Design Notes:
    - Fallback is per company, not per parameter
    - Ordering is re-established locally so results do not depend on the
      store's sort order
    - Deterministic and idempotent for a fixed snapshot of values
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence, Set

from esg_screener.domain.value_objects import ValuesByCompany

if TYPE_CHECKING:
    from esg_screener.domain.entities import ParameterValue
    from esg_screener.interfaces.audit_logger import AuditLogger
    from esg_screener.interfaces.stores import ParameterValueStore

logger = logging.getLogger(__name__)


class ParameterValueResolver:
    """Resolves effective parameter values for companies at an as-of date."""

    def __init__(
        self,
        store: "ParameterValueStore",
        audit_logger: Optional["AuditLogger"] = None,
    ) -> None:
        """
        Initialize resolver.

        Args:
            store: Source of dated parameter values
            audit_logger: Receives an event per company that needed the fallback
        """
        self.store = store
        self.audit_logger = audit_logger

    def resolve(
        self,
        company_ids: Iterable[str],
        as_of_date: Optional[date] = None,
    ) -> ValuesByCompany:
        """
        Resolve one value per (company, parameter).

        Args:
            company_ids: Companies to resolve
            as_of_date: Reference date (defaults to today)

        Returns:
            Mapping company id -> {parameter name -> value}
        """
        ids = list(dict.fromkeys(company_ids))
        as_of = as_of_date or date.today()
        resolved: ValuesByCompany = {company_id: {} for company_id in ids}
        if not ids:
            return resolved

        dated = self.store.get_values(ids, effective_date_lte=as_of)
        self._apply_first_wins(resolved, dated)

        with_values = {v.company_id for v in dated}
        without_values = [c for c in ids if c not in with_values]
        if without_values:
            logger.debug(
                f"{len(without_values)} companies have no values on or before "
                f"{as_of.isoformat()}, falling back to latest values"
            )
            fallback = self.store.get_values(without_values)
            self._apply_first_wins(resolved, fallback)
            if self.audit_logger:
                for company_id in without_values:
                    self.audit_logger.log_value_fallback(company_id, as_of.isoformat())

        return resolved

    def available_parameters(
        self,
        company_ids: Iterable[str],
        as_of_date: Optional[date] = None,
    ) -> Dict[str, Set[str]]:
        """Parameter names with a resolvable value, per company."""
        return {
            company_id: set(values)
            for company_id, values in self.resolve(company_ids, as_of_date).items()
        }

    @staticmethod
    def _apply_first_wins(
        resolved: ValuesByCompany,
        values: Sequence["ParameterValue"],
    ) -> None:
        # Stable sort keeps store order among equal dates
        ordered: List["ParameterValue"] = sorted(
            values, key=lambda v: v.effective_date, reverse=True
        )
        for value in ordered:
            company_values = resolved.get(value.company_id)
            if company_values is None:
                continue
            if value.parameter_name not in company_values:
                company_values[value.parameter_name] = value.value
