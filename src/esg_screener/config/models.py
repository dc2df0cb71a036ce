"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class MissingDataPolicy(str, Enum):
    """How a rule that cannot be decided for lack of data is scored."""

    # Indeterminate rules fail (exclude rules then exclude the company)
    FAIL_CLOSED = "fail_closed"
    # Indeterminate rules pass
    FAIL_OPEN = "fail_open"


class GlobalConfig(BaseModel):
    """Global configuration settings."""

    max_workers: int = Field(
        default=1, ge=1, le=64, description="Threads for per-company evaluation"
    )


class EvaluationConfig(BaseModel):
    """Configuration for rule evaluation."""

    missing_data_policy: MissingDataPolicy = MissingDataPolicy.FAIL_CLOSED
    default_failure_message: str = Field(default="Rule condition not met", min_length=1)


class RequestValidationConfig(BaseModel):
    """Configuration for screening request validation."""

    enabled: bool = True
    min_as_of_date: date = Field(default=date(1970, 1, 1))
    allow_future_as_of_date: bool = False
    max_companies_per_request: Optional[int] = Field(default=5000, ge=1)


class ScreeningConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    global_settings: GlobalConfig = Field(
        default_factory=GlobalConfig,
        alias="global",
    )
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    request_validation: RequestValidationConfig = Field(
        default_factory=RequestValidationConfig,
    )

    model_config = {"populate_by_name": True}
