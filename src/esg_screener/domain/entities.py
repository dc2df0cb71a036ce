"""
Core Domain Entities.

This module defines the fundamental entities of the ESG screening domain:
parameters and their dated values, companies and portfolios, rules grouped
into criteria sets, and the immutable result of a screening run.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from esg_screener.domain.expressions import Comparison, Expression, ScalarValue
from esg_screener.domain.serialization import parse_expression


class DataType(str, Enum):
    """Value type of a parameter."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"


class OwnerScope(str, Enum):
    """Who may see and use a parameter."""

    GLOBAL = "global"
    CLIENT = "client"


class Severity(str, Enum):
    """Rule severity. Only EXCLUDE changes a company's overall outcome."""

    EXCLUDE = "exclude"
    WARN = "warn"
    INFO = "info"


class Parameter(BaseModel):
    """A named ESG data point that companies report values for."""

    id: str
    name: str = Field(..., min_length=1)
    data_type: DataType
    unit: Optional[str] = None
    description: Optional[str] = None
    owner_scope: OwnerScope = OwnerScope.GLOBAL
    owner_id: Optional[str] = Field(
        default=None, description="Owning client for client-scoped parameters"
    )

    model_config = {"frozen": True}

    def accepts(self, value: Any) -> bool:
        """Check whether ``value`` matches this parameter's data type."""
        if self.data_type == DataType.BOOLEAN:
            return isinstance(value, bool)
        if self.data_type == DataType.NUMBER:
            return isinstance(value, (int, float)) and not isinstance(value, bool)
        return isinstance(value, str)


class ParameterValue(BaseModel):
    """One dated observation of a parameter for a company."""

    company_id: str
    parameter_id: str
    parameter_name: str
    value: ScalarValue
    effective_date: date
    source: Optional[str] = None

    model_config = {"frozen": True}


class Company(BaseModel):
    """A company that can be screened."""

    id: str
    name: str
    ticker: Optional[str] = None
    sector: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None

    model_config = {"frozen": True}


class Holding(BaseModel):
    """Membership of a company in a portfolio."""

    company_id: str
    weight: Optional[float] = Field(default=None, ge=0)

    model_config = {"frozen": True}


class Portfolio(BaseModel):
    """A client's portfolio of holdings."""

    id: str
    name: str
    client_id: str
    holdings: List[Holding] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def company_ids(self) -> List[str]:
        return [h.company_id for h in self.holdings]


class Rule(BaseModel):
    """
    A single screening rule.

    The expression describes the undesired condition: a company whose
    values make it true violates the rule.
    """

    id: str
    name: str
    description: Optional[str] = None
    expression: Expression
    failure_message: Optional[str] = None
    severity: Severity = Severity.EXCLUDE

    model_config = {"frozen": True}

    @field_validator("expression", mode="before")
    @classmethod
    def _parse_text_expression(cls, value: Any) -> Any:
        # Stored rules carry their expression as JSON text
        if isinstance(value, (str, bytes, dict)):
            return parse_expression(value)
        return value

    @property
    def is_comparison(self) -> bool:
        return isinstance(self.expression, Comparison)


class CriteriaSet(BaseModel):
    """Versioned, ordered collection of rules."""

    id: str
    name: str
    version: int = Field(default=1, ge=1)
    description: Optional[str] = None
    is_global: bool = True
    owner_id: Optional[str] = Field(
        default=None, description="Owning client when not global"
    )
    rules: List[Rule] = Field(default_factory=list)

    model_config = {"frozen": True}

    def reference(self) -> "CriteriaSetRef":
        return CriteriaSetRef(
            id=self.id,
            name=self.name,
            version=self.version,
            is_global=self.is_global,
            owner_id=self.owner_id,
        )


class CriteriaSetRef(BaseModel):
    """Criteria set identity as recorded on a screening result."""

    id: str
    name: str
    version: int
    is_global: bool
    owner_id: Optional[str] = None

    model_config = {"frozen": True}


class RuleOutcome(str, Enum):
    """Three-valued result of checking one rule against one company."""

    SATISFIED = "satisfied"
    VIOLATED = "violated"
    INDETERMINATE = "indeterminate"


class RuleResult(BaseModel):
    """Outcome of one rule for one company."""

    rule_id: str
    rule_name: str
    passed: bool
    severity: Severity
    outcome: RuleOutcome
    failure_reason: Optional[str] = None
    actual_value: Optional[Union[ScalarValue, List[Union[int, float, str]]]] = None
    threshold: Optional[str] = None

    model_config = {"frozen": True}


class CompanyScreeningResult(BaseModel):
    """All rule results for one company."""

    company_id: str
    company_name: str
    passed: bool
    rule_results: List[RuleResult] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def failed_rules(self) -> List[RuleResult]:
        return [r for r in self.rule_results if not r.passed]


class ScreeningSummary(BaseModel):
    """Aggregate counts for a screening run."""

    total_subjects: int = Field(ge=0)
    passed: int = Field(ge=0)
    failed: int = Field(ge=0)
    pass_rate: int = Field(ge=0, le=100, description="Rounded integer percent")

    model_config = {"frozen": True}


class SubjectDescription(BaseModel):
    """How the screened companies were selected."""

    mode: str
    portfolio_id: Optional[str] = None
    portfolio_name: Optional[str] = None
    company_ids: List[str] = Field(default_factory=list)
    sector: Optional[str] = None
    region: Optional[str] = None
    owner_id: Optional[str] = None

    model_config = {"frozen": True}


class ScreeningResult(BaseModel):
    """Complete, write-once result of a screening run."""

    id: Optional[str] = None
    screened_at: datetime
    as_of_date: date
    subject: SubjectDescription
    criteria_set: CriteriaSetRef
    user_id: Optional[str] = None
    summary: ScreeningSummary
    results: List[CompanyScreeningResult] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def get_company_result(self, company_id: str) -> Optional[CompanyScreeningResult]:
        for result in self.results:
            if result.company_id == company_id:
                return result
        return None

    @property
    def passed_company_ids(self) -> List[str]:
        return [r.company_id for r in self.results if r.passed]


class ScreeningRequest(BaseModel):
    """Input for a screening or validation operation."""

    criteria_set_id: str = Field(..., min_length=1)
    as_of_date: date = Field(..., description="Point-in-time for value resolution")
    subject: SubjectDescription
    user_id: Optional[str] = None
    correlation_id: str = Field(..., description="Unique request identifier")

    model_config = {"frozen": True}
