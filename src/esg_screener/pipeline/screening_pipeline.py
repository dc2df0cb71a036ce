"""
Screening Pipeline - Main Orchestrator.

The ScreeningPipeline coordinates a screening run for any subject selection:
criteria lookup, subject resolution, authorization, point-in-time value
resolution, per-company rule evaluation, aggregation and persistence.
It also exposes the read-only pre-screening validation and result management.
"""

from __future__ import annotations

import logging
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from pydantic import ValidationError

from esg_screener import __version__
from esg_screener.adapters.console_logger import RecordingAuditLogger
from esg_screener.adapters.metrics_collector import InMemoryMetricsCollector
from esg_screener.config.models import MissingDataPolicy, ScreeningConfig
from esg_screener.domain.entities import (
    Company,
    CompanyScreeningResult,
    CriteriaSet,
    Rule,
    RuleOutcome,
    RuleResult,
    ScreeningRequest,
    ScreeningResult,
    ScreeningSummary,
    Severity,
)
from esg_screener.domain.exceptions import (
    ForbiddenError,
    NotFoundError,
    PersistenceError,
    RequestValidationError,
)
from esg_screener.domain.value_objects import ParameterMap, ValidationReport, ValuesByCompany
from esg_screener.pipeline.subjects import SubjectSelector, SubjectSet
from esg_screener.resolution.value_resolver import ParameterValueResolver
from esg_screener.rules.evaluator import (
    assess,
    describe_failure,
    extract_actual_value_and_threshold,
)
from esg_screener.validation.prescreening import PreScreeningValidator
from esg_screener.validation.request_validator import ScreeningRequestValidator

if TYPE_CHECKING:
    from esg_screener.interfaces.audit_logger import AuditLogger
    from esg_screener.interfaces.metrics_collector import MetricsCollector
    from esg_screener.interfaces.stores import (
        CriteriaStore,
        ParameterValueStore,
        ResultStore,
        SubjectStore,
    )

logger = logging.getLogger(__name__)


class RequestValidatorProtocol(Protocol):
    """Protocol for request validators."""

    def validate(self, request: ScreeningRequest, config: ScreeningConfig) -> None:
        ...


def calculate_pass_rate(passed: int, total: int) -> int:
    """Integer percent rounded half up; 0 when there is nothing to screen."""
    if total <= 0:
        return 0
    return (passed * 200 + total) // (2 * total)


class ScreeningPipeline:
    """Main orchestrator for the screening workflow."""

    def __init__(
        self,
        criteria_store: "CriteriaStore",
        value_store: "ParameterValueStore",
        subject_store: "SubjectStore",
        result_store: "ResultStore",
        config: ScreeningConfig,
        audit_logger: "AuditLogger",
        metrics_collector: "MetricsCollector",
        request_validator: Optional[RequestValidatorProtocol] = None,
    ) -> None:
        """
        Initialize pipeline with all dependencies.

        Args:
            criteria_store: Source of criteria sets
            value_store: Source of dated parameter values
            subject_store: Company and portfolio lookups
            result_store: Persistence of screening results
            config: Screening configuration
            audit_logger: For audit trail
            metrics_collector: For performance metrics
            request_validator: For request validation (optional)
        """
        self.criteria_store = criteria_store
        self.subject_store = subject_store
        self.result_store = result_store
        self.config = config
        self.audit_logger = audit_logger
        self.metrics_collector = metrics_collector
        self.request_validator = request_validator
        self.resolver = ParameterValueResolver(value_store, audit_logger)
        self.prescreening = PreScreeningValidator(self.resolver)

    @classmethod
    def from_store(
        cls,
        store: Any,
        config: Optional[ScreeningConfig] = None,
        audit_logger: Optional["AuditLogger"] = None,
        metrics_collector: Optional["MetricsCollector"] = None,
        request_validator: Optional[RequestValidatorProtocol] = None,
    ) -> "ScreeningPipeline":
        """
        Build a pipeline on one object that implements every store port.

        Missing collaborators default to a recording audit logger, an
        in-memory metrics collector and the standard request validator.
        """
        return cls(
            criteria_store=store,
            value_store=store,
            subject_store=store,
            result_store=store,
            config=config or ScreeningConfig(),
            audit_logger=audit_logger or RecordingAuditLogger(),
            metrics_collector=metrics_collector or InMemoryMetricsCollector(),
            request_validator=request_validator or ScreeningRequestValidator(),
        )

    # ------------------------------------------------------------------
    # Screening
    # ------------------------------------------------------------------

    def screen(
        self,
        selector: SubjectSelector,
        criteria_set_id: str,
        as_of_date: Optional[date] = None,
        user_id: Optional[str] = None,
    ) -> ScreeningResult:
        """
        Execute a screening run and store its result.

        Args:
            selector: Which companies to screen
            criteria_set_id: Criteria set to apply
            as_of_date: Point-in-time for value resolution (defaults to today)
            user_id: Requesting user, recorded on the result

        Returns:
            The stored ScreeningResult, with its id set

        Raises:
            RequestValidationError: If the request is malformed
            NotFoundError: If the criteria set or a referenced subject does not exist
            ForbiddenError: If a client-owned criteria set is used outside its client
            PersistenceError: If the result could not be stored
        """
        start_time = time.perf_counter()
        request = self._start_request(selector, criteria_set_id, as_of_date, user_id)

        # 1. Lookup and authorization, before any evaluation
        criteria_set, subjects = self._load_and_authorize(selector, request)
        self.audit_logger.log_screening_start(
            "screen",
            len(subjects),
            {
                "criteria_set_id": criteria_set.id,
                "criteria_set_version": criteria_set.version,
                "as_of_date": request.as_of_date.isoformat(),
                "mode": request.subject.mode,
            },
        )

        # 2. Resolve values
        load_start = time.perf_counter()
        values = self.resolver.resolve(subjects.company_ids, request.as_of_date)
        self.metrics_collector.record_timing(
            "value_resolution_seconds", time.perf_counter() - load_start
        )

        # 3. Evaluate every company against every rule
        company_results = self._evaluate_companies(subjects.companies, criteria_set, values)

        # 4. Aggregate
        summary = self._build_summary(company_results)
        total_duration = time.perf_counter() - start_time
        result = ScreeningResult(
            screened_at=datetime.now(timezone.utc),
            as_of_date=request.as_of_date,
            subject=subjects.description,
            criteria_set=criteria_set.reference(),
            user_id=user_id,
            summary=summary,
            results=company_results,
            metadata=self._build_metadata(request.correlation_id, total_duration, subjects),
        )

        # 5. Persist in one write
        stored = self._persist(result)

        self.audit_logger.log_screening_end("screen", summary.passed, total_duration)
        self._record_screening_metrics(request, summary, company_results, total_duration)
        logger.info(
            f"Screened {summary.total_subjects} companies against "
            f"{criteria_set.name} v{criteria_set.version}: "
            f"{summary.passed} passed ({summary.pass_rate}%)"
        )
        return stored

    def validate(
        self,
        selector: SubjectSelector,
        criteria_set_id: str,
        as_of_date: Optional[date] = None,
    ) -> ValidationReport:
        """
        Report missing parameter data for a prospective screening run.

        Read-only: performs the same lookups and authorization as ``screen``
        but evaluates nothing and stores nothing.

        Raises:
            RequestValidationError, NotFoundError, ForbiddenError
        """
        start_time = time.perf_counter()
        request = self._start_request(selector, criteria_set_id, as_of_date, None)
        criteria_set, subjects = self._load_and_authorize(selector, request)
        self.audit_logger.log_screening_start(
            "validate", len(subjects), {"criteria_set_id": criteria_set.id}
        )

        report = self.prescreening.validate(
            subjects.companies, criteria_set, request.as_of_date
        )

        duration = time.perf_counter() - start_time
        self.audit_logger.log_screening_end(
            "validate",
            report.companies_with_complete_data,
            duration,
            {"is_valid": report.is_valid},
        )
        self.metrics_collector.record_timing("validation_total_seconds", duration)
        if report.missing_parameters:
            self.audit_logger.log_anomaly(
                f"Parameters missing for every company: "
                f"{', '.join(report.missing_parameters)}",
                severity="WARNING",
                context={"criteria_set_id": criteria_set.id},
            )
        return report

    # ------------------------------------------------------------------
    # Result management
    # ------------------------------------------------------------------

    def list_results(
        self,
        portfolio_id: Optional[str] = None,
        criteria_set_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[ScreeningResult]:
        """List stored results, newest first."""
        return self.result_store.list_results(
            portfolio_id=portfolio_id,
            criteria_set_id=criteria_set_id,
            user_id=user_id,
        )

    def get_result(self, result_id: str) -> ScreeningResult:
        """Get a stored result. Raises NotFoundError if it does not exist."""
        result = self.result_store.get_result(result_id)
        if result is None:
            raise NotFoundError("Screening result", result_id)
        return result

    def delete_result(self, result_id: str) -> None:
        """Delete a stored result. Raises NotFoundError if it does not exist."""
        if not self.result_store.delete_result(result_id):
            raise NotFoundError("Screening result", result_id)
        logger.info(f"Deleted screening result {result_id}")

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _start_request(
        self,
        selector: SubjectSelector,
        criteria_set_id: str,
        as_of_date: Optional[date],
        user_id: Optional[str],
    ) -> ScreeningRequest:
        correlation_id = str(uuid.uuid4())
        self.audit_logger.set_correlation_id(correlation_id)

        try:
            request = ScreeningRequest(
                criteria_set_id=criteria_set_id,
                as_of_date=as_of_date or date.today(),
                subject=selector.describe(),
                user_id=user_id,
                correlation_id=correlation_id,
            )
        except ValidationError as exc:
            errors = exc.errors()
            field = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
            raise RequestValidationError(f"Invalid screening request: {exc}", field=field) from exc

        if self.request_validator:
            self.request_validator.validate(request, self.config)
            logger.debug(f"Request validated: {correlation_id}")
        return request

    def _load_and_authorize(
        self, selector: SubjectSelector, request: ScreeningRequest
    ) -> tuple[CriteriaSet, SubjectSet]:
        criteria_set = self.criteria_store.get_criteria_set(request.criteria_set_id)
        if criteria_set is None:
            raise NotFoundError("Criteria set", request.criteria_set_id)

        subjects = selector.resolve(self.subject_store)
        for warning in subjects.warnings:
            self.audit_logger.log_anomaly(warning, severity="WARNING")

        self._authorize(criteria_set, subjects)
        return criteria_set, subjects

    def _authorize(self, criteria_set: CriteriaSet, subjects: SubjectSet) -> None:
        if criteria_set.is_global:
            return
        if criteria_set.owner_id is None or criteria_set.owner_id != subjects.owner_id:
            self.audit_logger.log_anomaly(
                f"Criteria set {criteria_set.id} used outside its owning client",
                severity="WARNING",
                context={
                    "criteria_set_owner": criteria_set.owner_id,
                    "subject_owner": subjects.owner_id,
                },
            )
            raise ForbiddenError(
                f"Criteria set {criteria_set.id} belongs to another client"
            )

    def _evaluate_companies(
        self,
        companies: List[Company],
        criteria_set: CriteriaSet,
        values: ValuesByCompany,
    ) -> List[CompanyScreeningResult]:
        def evaluate_one(company: Company) -> CompanyScreeningResult:
            return self._evaluate_company(company, criteria_set, values.get(company.id, {}))

        max_workers = self.config.global_settings.max_workers
        if max_workers > 1 and len(companies) > 1:
            # map() yields in submission order
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                return list(executor.map(evaluate_one, companies))
        return [evaluate_one(company) for company in companies]

    def _evaluate_company(
        self,
        company: Company,
        criteria_set: CriteriaSet,
        values: ParameterMap,
    ) -> CompanyScreeningResult:
        rule_results = [self._evaluate_rule(rule, values) for rule in criteria_set.rules]

        for rule_result in rule_results:
            if not rule_result.passed:
                self.audit_logger.log_rule_failed(
                    company.id,
                    rule_result.rule_name,
                    rule_result.severity.value,
                    rule_result.failure_reason or "",
                )

        passed = not any(
            r.severity == Severity.EXCLUDE and not r.passed for r in rule_results
        )
        return CompanyScreeningResult(
            company_id=company.id,
            company_name=company.name,
            passed=passed,
            rule_results=rule_results,
        )

    def _evaluate_rule(self, rule: Rule, values: ParameterMap) -> RuleResult:
        # The expression describes the undesired condition
        violated = assess(rule.expression, values)
        if violated is None:
            outcome = RuleOutcome.INDETERMINATE
            passed = (
                self.config.evaluation.missing_data_policy == MissingDataPolicy.FAIL_OPEN
            )
        elif violated:
            outcome = RuleOutcome.VIOLATED
            passed = False
        else:
            outcome = RuleOutcome.SATISFIED
            passed = True

        actual_value, threshold = extract_actual_value_and_threshold(rule.expression, values)
        failure_reason = None
        if not passed:
            failure_reason = describe_failure(
                rule.expression,
                values,
                rule.failure_message,
                default_message=self.config.evaluation.default_failure_message,
            )

        return RuleResult(
            rule_id=rule.id,
            rule_name=rule.name,
            passed=passed,
            severity=rule.severity,
            outcome=outcome,
            failure_reason=failure_reason,
            actual_value=actual_value,
            threshold=threshold,
        )

    def _build_summary(self, results: List[CompanyScreeningResult]) -> ScreeningSummary:
        total = len(results)
        passed = sum(1 for r in results if r.passed)
        return ScreeningSummary(
            total_subjects=total,
            passed=passed,
            failed=total - passed,
            pass_rate=calculate_pass_rate(passed, total),
        )

    def _persist(self, result: ScreeningResult) -> ScreeningResult:
        try:
            result_id = self.result_store.create_screening_result(result)
        except Exception as exc:
            logger.error(f"Failed to store screening result: {exc}")
            raise PersistenceError(f"Failed to store screening result: {exc}") from exc
        return result.model_copy(update={"id": result_id})

    def _record_screening_metrics(
        self,
        request: ScreeningRequest,
        summary: ScreeningSummary,
        results: List[CompanyScreeningResult],
        duration: float,
    ) -> None:
        tags = {"mode": request.subject.mode}
        self.metrics_collector.record_timing("screening_total_seconds", duration, tags)
        self.metrics_collector.record_count("companies_screened_total", summary.total_subjects, tags)
        self.metrics_collector.record_count(
            "rule_failures_total",
            sum(len(r.failed_rules) for r in results),
            tags,
        )
        self.metrics_collector.record_gauge("pass_rate_pct", float(summary.pass_rate), tags)

    def _build_metadata(
        self, correlation_id: str, duration: float, subjects: SubjectSet
    ) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {
            "correlation_id": correlation_id,
            "duration_seconds": duration,
            "missing_data_policy": self.config.evaluation.missing_data_policy.value,
            "version": __version__,
        }
        if subjects.warnings:
            metadata["warnings"] = list(subjects.warnings)
        return metadata
