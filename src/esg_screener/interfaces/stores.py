"""
Store Protocols.

Defines the abstract interfaces for data access. Storage, its schema and
the CRUD layer that fills it are outside the screening core; any backend
that satisfies these protocols can be plugged into the pipeline.

The stores are responsible for:
    - Loading criteria sets with their ordered rules
    - Loading dated parameter values for a batch of companies
    - Looking up companies by id, sector, region and portfolio membership
    - Persisting, listing, reading and deleting screening results

Design Notes:
    - Uses typing.Protocol for structural subtyping
    - All lookups are batch operations
    - Results are written in one atomic call
"""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Iterable, List, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from esg_screener.domain.entities import (
        Company,
        CriteriaSet,
        ParameterValue,
        Portfolio,
        ScreeningResult,
    )


@runtime_checkable
class CriteriaStore(Protocol):
    """Read access to criteria sets."""

    def get_criteria_set(self, criteria_set_id: str) -> Optional[CriteriaSet]:
        """
        Get a criteria set with its rules in authored order.

        Returns:
            CriteriaSet, or None if it does not exist
        """
        ...


@runtime_checkable
class ParameterValueStore(Protocol):
    """Read access to dated parameter values."""

    def get_values(
        self,
        company_ids: Iterable[str],
        effective_date_lte: Optional[date] = None,
    ) -> List[ParameterValue]:
        """
        Get parameter values for a batch of companies.

        Args:
            company_ids: Companies to load values for
            effective_date_lte: If set, only values effective on or before this date

        Returns:
            Values ordered by effective_date, most recent first
        """
        ...


@runtime_checkable
class SubjectStore(Protocol):
    """Company and portfolio lookups used to resolve screening subjects."""

    def get_company(self, company_id: str) -> Optional[Company]:
        ...

    def get_companies(self, company_ids: Iterable[str]) -> List[Company]:
        """Get the companies that exist among ``company_ids``, in request order."""
        ...

    def find_companies(
        self,
        sector: Optional[str] = None,
        region: Optional[str] = None,
    ) -> List[Company]:
        """Get companies matching all given filters (all companies if none)."""
        ...

    def get_portfolio(self, portfolio_id: str) -> Optional[Portfolio]:
        ...


@runtime_checkable
class ResultStore(Protocol):
    """
    Persistence of screening results.

    Stored results are write-once: changing an object passed in or handed
    out must never change what a later read returns.
    """

    def create_screening_result(self, result: ScreeningResult) -> str:
        """
        Store a complete result in one atomic write.

        Returns:
            Id of the stored result

        Raises:
            Exception: Any failure means nothing was stored
        """
        ...

    def list_results(
        self,
        portfolio_id: Optional[str] = None,
        criteria_set_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[ScreeningResult]:
        """List stored results matching all given filters, newest first."""
        ...

    def get_result(self, result_id: str) -> Optional[ScreeningResult]:
        ...

    def delete_result(self, result_id: str) -> bool:
        """Delete a result. Returns False if it did not exist."""
        ...
