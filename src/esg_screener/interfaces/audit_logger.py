"""
Audit Logger Protocol.

Defines the abstract interface for audit logging. The audit logger is the
observability hook of the screening core: instead of printing diagnostics,
the core emits structured events through it, so evaluation stays free of
side effects and tests can inspect what happened.

The audit logger is responsible for:
    - Logging the start and end of a screening or validation run
    - Logging rule failures per company
    - Logging value resolution fallbacks
    - Logging anomalies and warnings
    - Maintaining correlation across a run

Design Notes:
    - Structured events (event name + fields)
    - Correlation ID propagation for tracing
    - No side effects on screening logic
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import Any, Dict, Optional


@runtime_checkable
class AuditLogger(Protocol):
    """Abstract interface for audit logging."""

    def set_correlation_id(self, correlation_id: str) -> None:
        """Set correlation ID for subsequent log entries."""
        ...

    def log_screening_start(
        self,
        operation: str,
        subject_count: int,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log the start of a screening or validation run.

        Args:
            operation: "screen" or "validate"
            subject_count: Number of companies in the run
            metadata: Optional additional context (criteria set, as-of date)
        """
        ...

    def log_screening_end(
        self,
        operation: str,
        passed_count: int,
        duration_seconds: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log the end of a run.

        Args:
            operation: "screen" or "validate"
            passed_count: Companies that passed (or had complete data)
            duration_seconds: Time taken
            metadata: Optional additional context
        """
        ...

    def log_rule_failed(
        self,
        company_id: str,
        rule_name: str,
        severity: str,
        reason: str,
    ) -> None:
        """Log that a company failed a rule."""
        ...

    def log_value_fallback(self, company_id: str, as_of_date: str) -> None:
        """Log that a company had no values on or before the as-of date."""
        ...

    def log_anomaly(
        self,
        message: str,
        severity: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Log an anomaly or warning.

        Args:
            message: Description of the anomaly
            severity: INFO, WARNING, or CRITICAL
            context: Optional additional context
        """
        ...
