"""
Request Validator - Validate Screening Requests.

Validates requests before any data is loaded:
    - As-of date not before the configured minimum
    - As-of date not in the future (unless allowed)
    - Company id lists non-empty, without duplicates, within the size cap
    - Sector / region filters not blank

Design Notes:
    - Fail-fast principle
    - All problems collected into one error message
"""

from __future__ import annotations

import logging
from datetime import date
from typing import List, Optional

from esg_screener.config.models import RequestValidationConfig, ScreeningConfig
from esg_screener.domain.entities import ScreeningRequest, SubjectDescription
from esg_screener.domain.exceptions import RequestValidationError

logger = logging.getLogger(__name__)


class ScreeningRequestValidator:
    """
    Validates screening requests before processing.

    Validates:
        - As-of date is within bounds
        - Subject selection is well formed for its mode
    """

    def __init__(self, today: Optional[date] = None) -> None:
        """
        Initialize request validator.

        Args:
            today: Fixed reference for "the future" (defaults to date.today())
        """
        self._today = today

    def validate(self, request: ScreeningRequest, config: ScreeningConfig) -> None:
        """
        Validate a screening request.

        Args:
            request: The request to validate
            config: The screening configuration

        Raises:
            RequestValidationError: If validation fails
        """
        settings = config.request_validation
        if not settings.enabled:
            return

        errors: List[str] = []

        date_error = self._validate_as_of_date(request.as_of_date, settings)
        if date_error:
            errors.append(date_error)

        errors.extend(self._validate_subject(request.subject, settings))

        if errors:
            error_message = "; ".join(errors)
            logger.error(f"Request validation failed: {error_message}")
            raise RequestValidationError(error_message)

        logger.debug(
            f"Request validated: mode={request.subject.mode}, "
            f"as_of_date={request.as_of_date.isoformat()}"
        )

    def _validate_as_of_date(
        self, as_of_date: date, settings: RequestValidationConfig
    ) -> Optional[str]:
        today = self._today or date.today()

        if not settings.allow_future_as_of_date and as_of_date > today:
            return f"As-of date {as_of_date.isoformat()} is in the future"

        if as_of_date < settings.min_as_of_date:
            return (
                f"As-of date {as_of_date.isoformat()} is before minimum "
                f"{settings.min_as_of_date.isoformat()}"
            )

        return None

    def _validate_subject(
        self, subject: SubjectDescription, settings: RequestValidationConfig
    ) -> List[str]:
        errors: List[str] = []

        if subject.mode == "companies":
            if not subject.company_ids:
                errors.append("company_ids must not be empty")
            elif len(set(subject.company_ids)) != len(subject.company_ids):
                errors.append("company_ids contains duplicates")
            cap = settings.max_companies_per_request
            if cap is not None and len(subject.company_ids) > cap:
                errors.append(
                    f"company_ids has {len(subject.company_ids)} entries, maximum is {cap}"
                )

        elif subject.mode == "sector":
            if not (subject.sector or "").strip():
                errors.append("sector must not be blank")

        elif subject.mode == "region":
            if not (subject.region or "").strip():
                errors.append("region must not be blank")

        elif subject.mode in ("portfolio", "company"):
            if not (subject.portfolio_id or subject.company_ids):
                errors.append(f"{subject.mode} selection has no identifier")

        return errors

    def validate_as_of_date_only(
        self, as_of_date: date, config: ScreeningConfig
    ) -> None:
        """
        Validate just the as-of date (utility method).

        Raises:
            RequestValidationError: If the date is out of bounds
        """
        error = self._validate_as_of_date(as_of_date, config.request_validation)
        if error:
            raise RequestValidationError(error, field="as_of_date")
