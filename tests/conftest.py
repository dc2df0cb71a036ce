"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Callable, List

import pytest

from esg_screener.adapters.console_logger import RecordingAuditLogger
from esg_screener.adapters.in_memory_store import InMemoryScreeningStore
from esg_screener.adapters.metrics_collector import InMemoryMetricsCollector
from esg_screener.config.models import ScreeningConfig
from esg_screener.domain.entities import (
    Company,
    CriteriaSet,
    DataType,
    Holding,
    Parameter,
    Portfolio,
    Rule,
    Severity,
)
from esg_screener.domain.expressions import Comparison
from esg_screener.pipeline.screening_pipeline import ScreeningPipeline
from esg_screener.validation.request_validator import ScreeningRequestValidator

AS_OF = date(2024, 6, 30)


@pytest.fixture
def project_root() -> Path:
    """Repository root (holds the shipped config/ directory)."""
    return Path(__file__).parent.parent


@pytest.fixture
def as_of() -> date:
    """Reference date used across tests."""
    return AS_OF


@pytest.fixture
def audit_logger() -> RecordingAuditLogger:
    """Create recording audit logger for testing."""
    return RecordingAuditLogger()


@pytest.fixture
def metrics_collector() -> InMemoryMetricsCollector:
    """Create metrics collector for testing."""
    return InMemoryMetricsCollector()


@pytest.fixture
def default_config() -> ScreeningConfig:
    """Create default screening configuration."""
    return ScreeningConfig()


@pytest.fixture
def carbon_rule() -> Rule:
    """Exclude companies emitting 500 or more."""
    return Rule(
        id="r-carbon",
        name="Carbon Emissions Limit",
        expression=Comparison(parameter="carbon_emissions", operator=">=", value=500),
        severity=Severity.EXCLUDE,
    )


@pytest.fixture
def store() -> InMemoryScreeningStore:
    """Store with the parameters used by tests and no companies."""
    store = InMemoryScreeningStore()
    store.add_parameter(
        Parameter(id="p-carbon", name="carbon_emissions", data_type=DataType.NUMBER)
    )
    store.add_parameter(
        Parameter(id="p-board", name="board_diversity_pct", data_type=DataType.NUMBER)
    )
    store.add_parameter(
        Parameter(id="p-policy", name="has_environmental_policy", data_type=DataType.BOOLEAN)
    )
    store.add_parameter(
        Parameter(id="p-controversy", name="controversy_level", data_type=DataType.STRING)
    )
    return store


@pytest.fixture
def add_company(store: InMemoryScreeningStore) -> Callable[..., Company]:
    """Factory adding a company with optional parameter values as of AS_OF."""

    def _add(company_id: str, sector: str = "Energy", region: str = "Europe", **values) -> Company:
        company = store.add_company(
            Company(id=company_id, name=f"{company_id.title()} Corp", sector=sector, region=region)
        )
        for name, value in values.items():
            store.add_parameter_value(company_id, name, value, AS_OF)
        return company

    return _add


@pytest.fixture
def add_portfolio(store: InMemoryScreeningStore) -> Callable[..., Portfolio]:
    """Factory adding a client portfolio holding the given companies."""

    def _add(portfolio_id: str, company_ids: List[str], client_id: str = "client-a") -> Portfolio:
        return store.add_portfolio(
            Portfolio(
                id=portfolio_id,
                name=f"Portfolio {portfolio_id}",
                client_id=client_id,
                holdings=[Holding(company_id=c) for c in company_ids],
            )
        )

    return _add


@pytest.fixture
def carbon_set(store: InMemoryScreeningStore, carbon_rule: Rule) -> CriteriaSet:
    """Global criteria set with the carbon rule only."""
    return store.add_criteria_set(
        CriteriaSet(id="cs-carbon", name="Carbon", rules=[carbon_rule])
    )


@pytest.fixture
def pipeline(
    store: InMemoryScreeningStore,
    default_config: ScreeningConfig,
    audit_logger: RecordingAuditLogger,
    metrics_collector: InMemoryMetricsCollector,
) -> ScreeningPipeline:
    """Pipeline over the test store, with request validation pinned to AS_OF."""
    return ScreeningPipeline.from_store(
        store,
        default_config,
        audit_logger=audit_logger,
        metrics_collector=metrics_collector,
        request_validator=ScreeningRequestValidator(today=AS_OF),
    )
