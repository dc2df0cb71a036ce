"""
Pre-Screening Validator - Data Completeness Before a Screening Run.

Reports which parameters a criteria set needs and which companies have no
resolvable value for them, so a user can be warned before committing to a
screening whose results would show unresolved rules.

Design Notes:
    - Read-only, safe to call repeatedly
    - Availability only: values are resolved but never compared
    - Parameter names match case-insensitively
"""

from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Set

from esg_screener.domain.value_objects import CompanyIssue, ValidationReport
from esg_screener.rules.requirements import required_parameters

if TYPE_CHECKING:
    from esg_screener.domain.entities import Company, CriteriaSet
    from esg_screener.resolution.value_resolver import ParameterValueResolver

logger = logging.getLogger(__name__)


class PreScreeningValidator:
    """Checks parameter availability for a set of companies and a criteria set."""

    def __init__(self, resolver: "ParameterValueResolver") -> None:
        """
        Initialize validator.

        Args:
            resolver: Resolver used to determine which values exist
        """
        self.resolver = resolver

    def validate(
        self,
        companies: Sequence["Company"],
        criteria_set: "CriteriaSet",
        as_of_date: Optional[date] = None,
    ) -> ValidationReport:
        """
        Build a completeness report.

        Args:
            companies: Companies that would be screened
            criteria_set: Criteria set that would be applied
            as_of_date: Reference date (defaults to today)

        Returns:
            ValidationReport, valid when no company misses a required parameter
        """
        required = required_parameters(criteria_set.rules)
        if not required:
            return ValidationReport(
                is_valid=True,
                total_companies=len(companies),
                companies_with_complete_data=len(companies),
                companies_with_missing_data=0,
            )

        available = self.resolver.available_parameters(
            [c.id for c in companies], as_of_date
        )

        issues: List[CompanyIssue] = []
        # Parameters missing for every company seen so far
        globally_missing: Optional[Set[str]] = None

        for company in companies:
            missing = _missing_names(required, available.get(company.id, set()))
            globally_missing = (
                set(missing) if globally_missing is None else globally_missing & missing
            )
            if missing:
                issues.append(
                    CompanyIssue(
                        company_id=company.id,
                        company_name=company.name,
                        missing_parameters=sorted(missing),
                    )
                )

        # Worst first; sorted() is stable so ties keep company order
        issues = sorted(issues, key=lambda issue: issue.missing_count, reverse=True)

        report = ValidationReport(
            is_valid=not issues,
            total_companies=len(companies),
            companies_with_complete_data=len(companies) - len(issues),
            companies_with_missing_data=len(issues),
            required_parameters=sorted(required),
            missing_parameters=sorted(globally_missing or set()),
            company_issues=issues,
        )

        if not report.is_valid:
            logger.info(
                f"Pre-screening validation: {report.companies_with_missing_data}/"
                f"{report.total_companies} companies missing data, "
                f"{len(report.missing_parameters)} parameters missing everywhere"
            )
        return report


def _missing_names(required: Set[str], available: Set[str]) -> Set[str]:
    folded: Dict[str, str] = {name.casefold(): name for name in available}
    return {name for name in required if name not in available and name.casefold() not in folded}
