"""
Interfaces Layer - Abstract Protocols for Dependencies.

This package defines the abstract interfaces (using typing.Protocol) for all
external collaborators of the screening core. High-level modules depend on
these abstractions, not on concrete implementations.

Protocols:
    - CriteriaStore / ParameterValueStore / SubjectStore / ResultStore
    - AuditLogger: Structured observability hook
    - MetricsCollector: Performance metrics abstraction

Design Principles:
    - Use typing.Protocol (not ABC) for Pythonic interfaces
    - Interface Segregation: Small, focused interfaces
    - No implementation details leak into interfaces
"""

from esg_screener.interfaces.audit_logger import AuditLogger
from esg_screener.interfaces.metrics_collector import MetricsCollector
from esg_screener.interfaces.stores import (
    CriteriaStore,
    ParameterValueStore,
    ResultStore,
    SubjectStore,
)

__all__ = [
    "AuditLogger",
    "MetricsCollector",
    "CriteriaStore",
    "ParameterValueStore",
    "ResultStore",
    "SubjectStore",
]
