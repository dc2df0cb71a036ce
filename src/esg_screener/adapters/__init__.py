"""
Adapters Package - Infrastructure Implementations.

This package contains concrete implementations of the abstract
interfaces defined in the interfaces package. Following the
Hexagonal Architecture (Ports & Adapters) pattern.

Stores:
    - InMemoryScreeningStore: All store ports on dictionaries, with demo data

Loggers:
    - ConsoleAuditLogger: Simple console output
    - RecordingAuditLogger: Structured events kept in memory

Metrics:
    - InMemoryMetricsCollector: Simple in-memory collection

Design Principles:
    - All adapters implement their respective protocols
    - Easily swappable via Dependency Injection
    - No business logic in adapters
"""

from esg_screener.adapters.console_logger import (
    AuditEvent,
    ConsoleAuditLogger,
    RecordingAuditLogger,
)
from esg_screener.adapters.in_memory_store import InMemoryScreeningStore
from esg_screener.adapters.metrics_collector import InMemoryMetricsCollector

__all__ = [
    "AuditEvent",
    "ConsoleAuditLogger",
    "RecordingAuditLogger",
    "InMemoryScreeningStore",
    "InMemoryMetricsCollector",
]
