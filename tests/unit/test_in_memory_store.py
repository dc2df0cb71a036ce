"""
Unit Tests for InMemoryScreeningStore and the in-memory adapters.

Test Aspects Covered:
    ✅ Business Logic: Lookups, value upsert, result management
    ✅ Error Handling: Duplicate names, type mismatches, unknown references
    ✅ Protocols: Store satisfies every port
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable

import pytest

from esg_screener.adapters.console_logger import ConsoleAuditLogger, RecordingAuditLogger
from esg_screener.adapters.in_memory_store import InMemoryScreeningStore
from esg_screener.adapters.metrics_collector import InMemoryMetricsCollector
from esg_screener.domain.entities import (
    Company,
    CriteriaSetRef,
    DataType,
    Parameter,
    ScreeningResult,
    ScreeningSummary,
    SubjectDescription,
)
from esg_screener.interfaces import (
    AuditLogger,
    CriteriaStore,
    MetricsCollector,
    ParameterValueStore,
    ResultStore,
    SubjectStore,
)


def make_result(
    portfolio_id: str = "p-1",
    criteria_set_id: str = "cs-1",
    user_id: str = "u-1",
    minutes_ago: int = 0,
) -> ScreeningResult:
    """Helper to build an empty screening result."""
    return ScreeningResult(
        screened_at=datetime(2024, 6, 30, 12, tzinfo=timezone.utc) - timedelta(minutes=minutes_ago),
        as_of_date=date(2024, 6, 30),
        subject=SubjectDescription(mode="portfolio", portfolio_id=portfolio_id),
        criteria_set=CriteriaSetRef(id=criteria_set_id, name="CS", version=1, is_global=True),
        user_id=user_id,
        summary=ScreeningSummary(total_subjects=0, passed=0, failed=0, pass_rate=0),
    )


class TestReferenceData:
    """Test cases for parameters, values and companies."""

    def test_implements_all_ports(self, store: InMemoryScreeningStore) -> None:
        """
        SCENARIO: Store checked against the store protocols
        EXPECTED: Satisfies all of them
        """
        # Act & Assert
        for protocol in (CriteriaStore, ParameterValueStore, SubjectStore, ResultStore):
            assert isinstance(store, protocol)

    def test_parameter_names_unique_case_insensitively(
        self, store: InMemoryScreeningStore
    ) -> None:
        """
        SCENARIO: New parameter reuses an existing name in other case
        EXPECTED: ValueError
        """
        # Act & Assert
        with pytest.raises(ValueError, match="already exists"):
            store.add_parameter(
                Parameter(id="p-other", name="CARBON_EMISSIONS", data_type=DataType.NUMBER)
            )
        assert store.get_parameter("Carbon_Emissions").id == "p-carbon"

    def test_parameter_data_type_immutable(self, store: InMemoryScreeningStore) -> None:
        """
        SCENARIO: Re-register a parameter with another data type
        EXPECTED: ValueError
        """
        # Act & Assert
        with pytest.raises(ValueError, match="cannot change"):
            store.add_parameter(
                Parameter(id="p-carbon", name="carbon_emissions", data_type=DataType.STRING)
            )

    def test_value_type_checked(
        self, store: InMemoryScreeningStore, add_company: Callable[..., Company]
    ) -> None:
        """
        SCENARIO: String for a number parameter, bool for a number parameter
        EXPECTED: TypeError
        """
        # Arrange
        add_company("a")

        # Act & Assert
        with pytest.raises(TypeError):
            store.add_parameter_value("a", "carbon_emissions", "650", date(2024, 1, 1))
        with pytest.raises(TypeError):
            store.add_parameter_value("a", "carbon_emissions", True, date(2024, 1, 1))

    def test_unknown_references(
        self, store: InMemoryScreeningStore, add_company: Callable[..., Company]
    ) -> None:
        """
        SCENARIO: Value for an unknown parameter or company
        EXPECTED: KeyError
        """
        # Arrange
        add_company("a")

        # Act & Assert
        with pytest.raises(KeyError):
            store.add_parameter_value("a", "water_usage", 1, date(2024, 1, 1))
        with pytest.raises(KeyError):
            store.add_parameter_value("ghost", "carbon_emissions", 1, date(2024, 1, 1))

    def test_same_date_value_replaced(
        self, store: InMemoryScreeningStore, add_company: Callable[..., Company]
    ) -> None:
        """
        SCENARIO: Two values for the same company, parameter and date
        EXPECTED: Only the latest write is kept
        """
        # Arrange
        add_company("a")
        store.add_parameter_value("a", "carbon_emissions", 100, date(2024, 1, 1))

        # Act
        store.add_parameter_value("a", "CARBON_EMISSIONS", 200, date(2024, 1, 1))

        # Assert
        values = store.get_values(["a"])
        assert len(values) == 1
        assert values[0].value == 200
        assert values[0].parameter_name == "carbon_emissions"

    def test_values_filtered_and_ordered(
        self, store: InMemoryScreeningStore, add_company: Callable[..., Company]
    ) -> None:
        """
        SCENARIO: Values on several dates, with a date filter
        EXPECTED: Only values on or before the date, most recent first
        """
        # Arrange
        add_company("a")
        for day in (date(2022, 1, 1), date(2024, 1, 1), date(2023, 1, 1)):
            store.add_parameter_value("a", "carbon_emissions", day.year, day)

        # Act
        values = store.get_values(["a"], effective_date_lte=date(2023, 6, 1))

        # Assert
        assert [v.value for v in values] == [2023, 2022]

    def test_company_lookups(
        self, store: InMemoryScreeningStore, add_company: Callable[..., Company]
    ) -> None:
        """
        SCENARIO: Lookups by ids, sector and region
        EXPECTED: Request order for ids, case-insensitive filters
        """
        # Arrange
        add_company("a", sector="Energy", region="Europe")
        add_company("b", sector="Technology", region="Europe")
        add_company("c", sector="Energy", region="Asia")

        # Act & Assert
        assert [c.id for c in store.get_companies(["c", "ghost", "a"])] == ["c", "a"]
        assert [c.id for c in store.find_companies(sector="energy")] == ["a", "c"]
        assert [c.id for c in store.find_companies(region="EUROPE")] == ["a", "b"]
        assert [c.id for c in store.find_companies(sector="Energy", region="Asia")] == ["c"]
        assert len(store.find_companies()) == 3


class TestResults:
    """Test cases for result management."""

    def test_create_assigns_id(self, store: InMemoryScreeningStore) -> None:
        """
        SCENARIO: Store a result without id
        EXPECTED: Id returned and stored with the result
        """
        # Act
        result_id = store.create_screening_result(make_result())

        # Assert
        assert result_id
        assert store.get_result(result_id).id == result_id

    def test_list_filters_newest_first(self, store: InMemoryScreeningStore) -> None:
        """
        SCENARIO: Results for two portfolios at different times
        EXPECTED: Filtered list, newest first
        """
        # Arrange
        old = store.create_screening_result(make_result(minutes_ago=30))
        new = store.create_screening_result(make_result(minutes_ago=5))
        other = store.create_screening_result(make_result(portfolio_id="p-2", user_id="u-2"))

        # Act & Assert
        assert [r.id for r in store.list_results(portfolio_id="p-1")] == [new, old]
        assert [r.id for r in store.list_results(user_id="u-2")] == [other]
        assert [r.id for r in store.list_results(criteria_set_id="cs-x")] == []
        assert len(store.list_results()) == 3

    def test_delete(self, store: InMemoryScreeningStore) -> None:
        """
        SCENARIO: Delete an existing and a missing result
        EXPECTED: True then False
        """
        # Arrange
        result_id = store.create_screening_result(make_result())

        # Act & Assert
        assert store.delete_result(result_id) is True
        assert store.get_result(result_id) is None
        assert store.delete_result(result_id) is False

    def test_stored_result_is_isolated(self, store: InMemoryScreeningStore) -> None:
        """
        SCENARIO: Mutate the result passed in and the results read back
        EXPECTED: Later reads still see the original metadata
        """
        # Arrange
        original = make_result()
        result_id = store.create_screening_result(original)

        # Act
        original.metadata["tampered"] = True
        store.get_result(result_id).metadata["tampered"] = True
        store.list_results()[0].metadata["tampered"] = True

        # Assert
        assert store.get_result(result_id).metadata == {}
        assert store.get_result(result_id) is not store.get_result(result_id)


class TestDemoData:
    """Test cases for the seeded demo store."""

    def test_demo_dataset(self) -> None:
        """
        SCENARIO: Store created with demo data
        EXPECTED: Five companies, one portfolio, two criteria sets
        """
        # Act
        store = InMemoryScreeningStore.with_demo_data()

        # Assert
        assert len(store.find_companies()) == 5
        assert len(store.get_portfolio("main-portfolio").holdings) == 5
        assert len(store.get_criteria_set("standard-esg").rules) == 4
        assert store.get_criteria_set("demo-fund-climate").owner_id == "demo-fund"
        assert {v.parameter_name for v in store.get_values(["oilco"])} == {
            "carbon_emissions",
            "board_diversity_pct",
            "has_environmental_policy",
            "controversy_level",
            "renewable_energy_pct",
        }


class TestAdapters:
    """Test cases for loggers and metrics."""

    def test_loggers_implement_protocol(self) -> None:
        """
        SCENARIO: Both audit loggers checked against the protocol
        EXPECTED: Satisfy AuditLogger
        """
        # Act & Assert
        assert isinstance(ConsoleAuditLogger(), AuditLogger)
        assert isinstance(RecordingAuditLogger(), AuditLogger)
        assert isinstance(InMemoryMetricsCollector(), MetricsCollector)

    def test_recording_logger_keeps_correlation(self) -> None:
        """
        SCENARIO: Events logged after setting a correlation id
        EXPECTED: Events carry it and keep their fields
        """
        # Arrange
        audit = RecordingAuditLogger()
        audit.set_correlation_id("corr-1")

        # Act
        audit.log_rule_failed("a", "Carbon", "exclude", "too high")
        audit.log_anomaly("odd", "WARNING", {"k": 1})

        # Assert
        failed = audit.events_named("rule_failed")[0]
        assert failed.correlation_id == "corr-1"
        assert failed.fields["reason"] == "too high"
        assert audit.events_named("anomaly")[0].fields["context"] == {"k": 1}

    def test_console_logger_writes_lines(self, capsys: pytest.CaptureFixture[str]) -> None:
        """
        SCENARIO: Console logger in verbose and quiet mode
        EXPECTED: Quiet mode keeps summaries and anomalies only
        """
        # Arrange
        quiet = ConsoleAuditLogger(verbose=False)
        quiet.set_correlation_id("abcdef123456")

        # Act
        quiet.log_rule_failed("a", "Carbon", "exclude", "too high")
        quiet.log_screening_end("screen", 3, 0.5)
        quiet.log_anomaly("odd", "WARNING")

        # Assert
        out = capsys.readouterr().out
        assert "Carbon" not in out
        assert "Completed screen: 3 companies passed" in out
        assert "[abcdef12]" in out
        assert "ANOMALY: odd" in out

    def test_metrics_summary(self) -> None:
        """
        SCENARIO: Several samples for one metric
        EXPECTED: Count, total, min, max and last value
        """
        # Arrange
        metrics = InMemoryMetricsCollector()

        # Act
        metrics.record_count("rule_failures_total", 2, {"mode": "portfolio"})
        metrics.record_count("rule_failures_total", 5, {"mode": "sector"})

        # Assert
        summary = metrics.get_metrics()["rule_failures_total"]
        assert summary == {"type": "count", "count": 2, "total": 7, "min": 2, "max": 5, "last": 5}
        assert len(metrics.get_samples("rule_failures_total", {"mode": "sector"})) == 1
        metrics.clear()
        assert metrics.get_metrics() == {}
