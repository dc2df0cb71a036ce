"""
Validation Package - Request and Data Completeness Validation.

This package provides validation for:
    - ScreeningRequestValidator: Validate screening requests before processing
    - PreScreeningValidator: Report missing parameter data before a run

Design Principles:
    - Fail fast on invalid input
    - Clear, actionable error messages
    - Missing data is reported, never raised
"""

from esg_screener.validation.request_validator import ScreeningRequestValidator
from esg_screener.validation.prescreening import PreScreeningValidator

__all__ = [
    "ScreeningRequestValidator",
    "PreScreeningValidator",
]
