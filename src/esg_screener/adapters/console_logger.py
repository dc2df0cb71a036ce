"""
Audit Loggers.

Two implementations of the AuditLogger protocol:
    - ConsoleAuditLogger: human-readable lines on a text stream
    - RecordingAuditLogger: keeps structured events in memory, for tests
      and for embedding applications that forward events elsewhere
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Any, Dict, List, Optional, TextIO


class ConsoleAuditLogger:
    """Simple console-based audit logger."""

    def __init__(self, verbose: bool = True, stream: Optional[TextIO] = None) -> None:
        """
        Initialize console logger.

        Args:
            verbose: If True, log every event. If False, only run summaries
                and anomalies.
            stream: Output stream (defaults to stdout)
        """
        self._verbose = verbose
        self._stream = stream
        self._correlation_id: Optional[str] = None

    def set_correlation_id(self, correlation_id: str) -> None:
        """Set correlation ID for subsequent log entries."""
        self._correlation_id = correlation_id

    def log_screening_start(
        self,
        operation: str,
        subject_count: int,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log the start of a run."""
        if self._verbose:
            details = _format_context(metadata)
            self._log("INFO", f"Starting {operation} of {subject_count} companies{details}")

    def log_screening_end(
        self,
        operation: str,
        passed_count: int,
        duration_seconds: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log the end of a run."""
        self._log(
            "INFO",
            f"Completed {operation}: {passed_count} companies passed "
            f"({duration_seconds:.3f}s)",
        )

    def log_rule_failed(
        self,
        company_id: str,
        rule_name: str,
        severity: str,
        reason: str,
    ) -> None:
        """Log that a company failed a rule."""
        if self._verbose:
            self._log("DEBUG", f"{company_id} failed '{rule_name}' [{severity}]: {reason}")

    def log_value_fallback(self, company_id: str, as_of_date: str) -> None:
        """Log that a company's values were taken from after the as-of date."""
        if self._verbose:
            self._log(
                "DEBUG",
                f"{company_id} has no values on or before {as_of_date}, using latest",
            )

    def log_anomaly(
        self,
        message: str,
        severity: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log an anomaly or warning."""
        self._log(severity, f"ANOMALY: {message}{_format_context(context)}")

    def _log(self, level: str, message: str) -> None:
        timestamp = datetime.now().strftime("%H:%M:%S")
        corr_id = self._correlation_id[:8] if self._correlation_id else "--------"
        print(
            f"[{timestamp}] [{corr_id}] [{level:5}] {message}",
            file=self._stream or sys.stdout,
        )


def _format_context(context: Optional[Dict[str, Any]]) -> str:
    if not context:
        return ""
    return " (" + ", ".join(f"{k}={v}" for k, v in context.items()) + ")"


@dataclass(frozen=True)
class AuditEvent:
    """One recorded audit event."""

    event: str
    correlation_id: Optional[str]
    fields: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)


class RecordingAuditLogger:
    """
    Audit logger that keeps every event in memory.

    Safe to use from the worker threads of a parallel screening run.
    """

    def __init__(self) -> None:
        self._events: List[AuditEvent] = []
        self._correlation_id: Optional[str] = None
        self._lock = Lock()

    @property
    def events(self) -> List[AuditEvent]:
        with self._lock:
            return list(self._events)

    @property
    def correlation_id(self) -> Optional[str]:
        return self._correlation_id

    def events_named(self, event: str) -> List[AuditEvent]:
        """All recorded events with the given name, in order."""
        return [e for e in self.events if e.event == event]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()

    def set_correlation_id(self, correlation_id: str) -> None:
        self._correlation_id = correlation_id

    def log_screening_start(
        self,
        operation: str,
        subject_count: int,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._record(
            "screening_start",
            operation=operation,
            subject_count=subject_count,
            metadata=dict(metadata or {}),
        )

    def log_screening_end(
        self,
        operation: str,
        passed_count: int,
        duration_seconds: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._record(
            "screening_end",
            operation=operation,
            passed_count=passed_count,
            duration_seconds=duration_seconds,
            metadata=dict(metadata or {}),
        )

    def log_rule_failed(
        self,
        company_id: str,
        rule_name: str,
        severity: str,
        reason: str,
    ) -> None:
        self._record(
            "rule_failed",
            company_id=company_id,
            rule_name=rule_name,
            severity=severity,
            reason=reason,
        )

    def log_value_fallback(self, company_id: str, as_of_date: str) -> None:
        self._record("value_fallback", company_id=company_id, as_of_date=as_of_date)

    def log_anomaly(
        self,
        message: str,
        severity: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._record(
            "anomaly", message=message, severity=severity, context=dict(context or {})
        )

    def _record(self, event: str, **fields: Any) -> None:
        with self._lock:
            self._events.append(
                AuditEvent(event=event, correlation_id=self._correlation_id, fields=fields)
            )
