"""
Subject Selectors - Strategies for Choosing the Companies to Screen.

Provides Strategy Pattern implementations for the screening modes:
    - PortfolioSelector: Holdings of one portfolio
    - CompanySelector: A single company
    - CompaniesSelector: An explicit list of companies
    - SectorSelector / RegionSelector: Companies matching a filter
    - AllCompaniesSelector: Every known company

Design Notes:
    - Selectors only look companies up, they never evaluate anything
    - The owner of a portfolio is its client; ad hoc selections carry the
      requesting client explicitly (None for an anonymous/global request)
    - Unknown ids raise NotFoundError; an empty portfolio is a valid subject set
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Protocol, Sequence

from esg_screener.domain.entities import Company, SubjectDescription
from esg_screener.domain.exceptions import NotFoundError

if TYPE_CHECKING:
    from esg_screener.interfaces.stores import SubjectStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubjectSet:
    """Resolved companies plus who owns the selection."""

    companies: List[Company]
    owner_id: Optional[str]
    description: SubjectDescription
    warnings: List[str] = field(default_factory=list)

    @property
    def company_ids(self) -> List[str]:
        return [c.id for c in self.companies]

    def __len__(self) -> int:
        return len(self.companies)


class SubjectSelector(Protocol):
    """Strategy protocol for resolving a screening subject set."""

    def describe(self) -> SubjectDescription:
        """Describe the selection without touching any store."""
        ...

    def resolve(self, store: "SubjectStore") -> SubjectSet:
        """
        Look up the companies of this selection.

        Raises:
            NotFoundError: If a referenced portfolio or company does not exist
        """
        ...


class PortfolioSelector:
    """Holdings of a portfolio, owned by the portfolio's client."""

    def __init__(self, portfolio_id: str) -> None:
        self.portfolio_id = portfolio_id

    def describe(self) -> SubjectDescription:
        return SubjectDescription(mode="portfolio", portfolio_id=self.portfolio_id)

    def resolve(self, store: "SubjectStore") -> SubjectSet:
        portfolio = store.get_portfolio(self.portfolio_id)
        if portfolio is None:
            raise NotFoundError("Portfolio", self.portfolio_id)

        holding_ids = list(dict.fromkeys(portfolio.company_ids))
        companies = store.get_companies(holding_ids)
        warnings: List[str] = []
        if len(companies) != len(holding_ids):
            # Dangling holdings are reported, not screened
            known = {c.id for c in companies}
            dangling = [c for c in holding_ids if c not in known]
            warnings.append(f"Holdings reference unknown companies: {', '.join(dangling)}")
            logger.warning(
                f"Portfolio {portfolio.id} has {len(dangling)} holdings without a company"
            )

        description = SubjectDescription(
            mode="portfolio",
            portfolio_id=portfolio.id,
            portfolio_name=portfolio.name,
            company_ids=[c.id for c in companies],
            owner_id=portfolio.client_id,
        )
        return SubjectSet(
            companies=companies,
            owner_id=portfolio.client_id,
            description=description,
            warnings=warnings,
        )


class CompanySelector:
    """A single company."""

    def __init__(self, company_id: str, client_id: Optional[str] = None) -> None:
        self.company_id = company_id
        self.client_id = client_id

    def describe(self) -> SubjectDescription:
        return SubjectDescription(
            mode="company", company_ids=[self.company_id], owner_id=self.client_id
        )

    def resolve(self, store: "SubjectStore") -> SubjectSet:
        company = store.get_company(self.company_id)
        if company is None:
            raise NotFoundError("Company", self.company_id)
        return SubjectSet(
            companies=[company], owner_id=self.client_id, description=self.describe()
        )


class CompaniesSelector:
    """An explicit list of companies, screened in the given order."""

    def __init__(self, company_ids: Sequence[str], client_id: Optional[str] = None) -> None:
        self.company_ids = list(company_ids)
        self.client_id = client_id

    def describe(self) -> SubjectDescription:
        return SubjectDescription(
            mode="companies", company_ids=self.company_ids, owner_id=self.client_id
        )

    def resolve(self, store: "SubjectStore") -> SubjectSet:
        ids = list(dict.fromkeys(self.company_ids))
        companies = store.get_companies(ids)
        if len(companies) != len(ids):
            known = {c.id for c in companies}
            unknown = [c for c in ids if c not in known]
            raise NotFoundError("Company", ", ".join(unknown))
        return SubjectSet(
            companies=companies, owner_id=self.client_id, description=self.describe()
        )


class _FilterSelector:
    """Shared lookup for sector and region filters."""

    mode = ""

    def __init__(self, value: str, client_id: Optional[str] = None) -> None:
        self.value = value
        self.client_id = client_id

    def describe(self) -> SubjectDescription:
        return SubjectDescription(
            mode=self.mode, owner_id=self.client_id, **{self.mode: self.value}
        )

    def resolve(self, store: "SubjectStore") -> SubjectSet:
        companies = store.find_companies(**{self.mode: self.value})
        if not companies:
            raise NotFoundError(
                "Company", self.value, f"No companies found in {self.mode}: {self.value}"
            )
        description = self.describe().model_copy(
            update={"company_ids": [c.id for c in companies]}
        )
        return SubjectSet(
            companies=companies, owner_id=self.client_id, description=description
        )


class SectorSelector(_FilterSelector):
    """Companies in a sector."""

    mode = "sector"

    @property
    def sector(self) -> str:
        return self.value


class RegionSelector(_FilterSelector):
    """Companies in a region."""

    mode = "region"

    @property
    def region(self) -> str:
        return self.value


class AllCompaniesSelector:
    """Every company known to the store."""

    def __init__(self, client_id: Optional[str] = None) -> None:
        self.client_id = client_id

    def describe(self) -> SubjectDescription:
        return SubjectDescription(mode="all", owner_id=self.client_id)

    def resolve(self, store: "SubjectStore") -> SubjectSet:
        companies = store.find_companies()
        if not companies:
            raise NotFoundError("Company", "*", "No companies available for screening")
        description = self.describe().model_copy(
            update={"company_ids": [c.id for c in companies]}
        )
        return SubjectSet(
            companies=companies, owner_id=self.client_id, description=description
        )
