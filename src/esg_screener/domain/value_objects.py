"""
Value Objects for Domain Layer.

Value objects are immutable objects that describe characteristics of entities
but have no conceptual identity.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Type Aliases for improved readability
# =============================================================================

# Effective parameter values for one company: parameter name -> value
ParameterMap = Dict[str, Any]

# Effective parameter values indexed by company id
ValuesByCompany = Dict[str, ParameterMap]


class ExpressionValidation(BaseModel):
    """Result of a structural check on a rule expression."""

    valid: bool
    error: Optional[str] = None

    model_config = {"frozen": True}

    def __bool__(self) -> bool:
        return self.valid


class CompanyIssue(BaseModel):
    """Required parameters a single company has no value for."""

    company_id: str
    company_name: str
    missing_parameters: List[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def missing_count(self) -> int:
        return len(self.missing_parameters)


class ValidationReport(BaseModel):
    """Data completeness report produced before a screening run."""

    is_valid: bool
    total_companies: int = Field(ge=0)
    companies_with_complete_data: int = Field(ge=0)
    companies_with_missing_data: int = Field(ge=0)
    required_parameters: List[str] = Field(default_factory=list)
    missing_parameters: List[str] = Field(
        default_factory=list,
        description="Parameters no company in the set has a value for",
    )
    company_issues: List[CompanyIssue] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def completeness_ratio(self) -> float:
        """Share of companies with complete data (1.0 when empty)."""
        if self.total_companies == 0:
            return 1.0
        return self.companies_with_complete_data / self.total_companies

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")
