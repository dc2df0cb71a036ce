"""
In-Memory Screening Store.

A single object implementing every store port (criteria, parameter values,
subjects, results) on plain dictionaries. Used for development, tests and
small embedded deployments.

Constraints enforced on write:
    - Parameter names are unique case-insensitively
    - Values must match the parameter's data type
    - One value per (company, parameter, effective date); re-adding replaces it
    - A screening result is stored whole or not at all
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from threading import RLock
from typing import Any, Dict, Iterable, List, Optional, Tuple

from esg_screener.domain.entities import (
    Company,
    CriteriaSet,
    DataType,
    Holding,
    Parameter,
    ParameterValue,
    Portfolio,
    Rule,
    ScreeningResult,
    Severity,
)

logger = logging.getLogger(__name__)

ValueKey = Tuple[str, str, date]


class InMemoryScreeningStore:
    """Dictionary-backed implementation of all store protocols."""

    def __init__(self) -> None:
        self._parameters: Dict[str, Parameter] = {}
        self._parameter_ids_by_name: Dict[str, str] = {}
        self._values: Dict[ValueKey, ParameterValue] = {}
        self._companies: Dict[str, Company] = {}
        self._portfolios: Dict[str, Portfolio] = {}
        self._criteria_sets: Dict[str, CriteriaSet] = {}
        self._results: Dict[str, ScreeningResult] = {}
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Reference data
    # ------------------------------------------------------------------

    def add_parameter(self, parameter: Parameter) -> Parameter:
        """
        Register a parameter.

        Raises:
            ValueError: If another parameter already uses the name
                (case-insensitive) or the id is taken
        """
        key = parameter.name.casefold()
        with self._lock:
            existing_id = self._parameter_ids_by_name.get(key)
            if existing_id is not None and existing_id != parameter.id:
                raise ValueError(f"Parameter name already exists: {parameter.name}")
            current = self._parameters.get(parameter.id)
            if current is not None and current.data_type != parameter.data_type:
                raise ValueError(f"Data type of parameter {current.name} cannot change")
            if current is not None and current.name.casefold() != key:
                del self._parameter_ids_by_name[current.name.casefold()]
            self._parameters[parameter.id] = parameter
            self._parameter_ids_by_name[key] = parameter.id
        return parameter

    def get_parameter(self, name: str) -> Optional[Parameter]:
        """Look a parameter up by name, case-insensitively."""
        parameter_id = self._parameter_ids_by_name.get(name.casefold())
        return self._parameters.get(parameter_id) if parameter_id else None

    def add_company(self, company: Company) -> Company:
        with self._lock:
            self._companies[company.id] = company
        return company

    def add_portfolio(self, portfolio: Portfolio) -> Portfolio:
        with self._lock:
            self._portfolios[portfolio.id] = portfolio
        return portfolio

    def add_criteria_set(self, criteria_set: CriteriaSet) -> CriteriaSet:
        with self._lock:
            self._criteria_sets[criteria_set.id] = criteria_set
        return criteria_set

    def add_parameter_value(
        self,
        company_id: str,
        parameter_name: str,
        value: Any,
        effective_date: date,
        source: Optional[str] = None,
    ) -> ParameterValue:
        """
        Record a dated value, replacing any value for the same date.

        Raises:
            KeyError: If the company or parameter is unknown
            TypeError: If ``value`` does not match the parameter's data type
        """
        parameter = self.get_parameter(parameter_name)
        if parameter is None:
            raise KeyError(f"Unknown parameter: {parameter_name}")
        if company_id not in self._companies:
            raise KeyError(f"Unknown company: {company_id}")
        if not parameter.accepts(value):
            raise TypeError(
                f"Value {value!r} does not match {parameter.data_type.value} "
                f"parameter {parameter.name}"
            )

        record = ParameterValue(
            company_id=company_id,
            parameter_id=parameter.id,
            parameter_name=parameter.name,
            value=value,
            effective_date=effective_date,
            source=source,
        )
        with self._lock:
            self._values[(company_id, parameter.id, effective_date)] = record
        return record

    # ------------------------------------------------------------------
    # CriteriaStore / ParameterValueStore / SubjectStore
    # ------------------------------------------------------------------

    def get_criteria_set(self, criteria_set_id: str) -> Optional[CriteriaSet]:
        return self._criteria_sets.get(criteria_set_id)

    def get_values(
        self,
        company_ids: Iterable[str],
        effective_date_lte: Optional[date] = None,
    ) -> List[ParameterValue]:
        wanted = set(company_ids)
        with self._lock:
            rows = [
                v
                for v in self._values.values()
                if v.company_id in wanted
                and (effective_date_lte is None or v.effective_date <= effective_date_lte)
            ]
        rows.sort(key=lambda v: v.effective_date, reverse=True)
        return rows

    def get_company(self, company_id: str) -> Optional[Company]:
        return self._companies.get(company_id)

    def get_companies(self, company_ids: Iterable[str]) -> List[Company]:
        return [self._companies[c] for c in company_ids if c in self._companies]

    def find_companies(
        self,
        sector: Optional[str] = None,
        region: Optional[str] = None,
    ) -> List[Company]:
        def matches(actual: Optional[str], wanted: Optional[str]) -> bool:
            if wanted is None:
                return True
            return actual is not None and actual.casefold() == wanted.casefold()

        return [
            c
            for c in self._companies.values()
            if matches(c.sector, sector) and matches(c.region, region)
        ]

    def get_portfolio(self, portfolio_id: str) -> Optional[Portfolio]:
        return self._portfolios.get(portfolio_id)

    # ------------------------------------------------------------------
    # ResultStore
    # ------------------------------------------------------------------

    def create_screening_result(self, result: ScreeningResult) -> str:
        result_id = result.id or str(uuid.uuid4())
        # Stored records never share containers with caller-held objects
        stored = result.model_copy(update={"id": result_id}, deep=True)
        with self._lock:
            if result_id in self._results:
                raise ValueError(f"Screening result already exists: {result_id}")
            self._results[result_id] = stored
        logger.debug(f"Stored screening result {result_id}")
        return result_id

    def list_results(
        self,
        portfolio_id: Optional[str] = None,
        criteria_set_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> List[ScreeningResult]:
        with self._lock:
            results = list(self._results.values())
        selected = [
            r
            for r in results
            if (portfolio_id is None or r.subject.portfolio_id == portfolio_id)
            and (criteria_set_id is None or r.criteria_set.id == criteria_set_id)
            and (user_id is None or r.user_id == user_id)
        ]
        # Newest first; later insertions win ties
        selected.reverse()
        selected.sort(key=lambda r: r.screened_at, reverse=True)
        return [r.model_copy(deep=True) for r in selected]

    def get_result(self, result_id: str) -> Optional[ScreeningResult]:
        with self._lock:
            stored = self._results.get(result_id)
        return None if stored is None else stored.model_copy(deep=True)

    def delete_result(self, result_id: str) -> bool:
        with self._lock:
            return self._results.pop(result_id, None) is not None

    # ------------------------------------------------------------------
    # Demo data
    # ------------------------------------------------------------------

    @classmethod
    def with_demo_data(cls) -> "InMemoryScreeningStore":
        """
        Create a store seeded with a small ESG dataset.

        Five companies with values as of 2024-01-01, one client portfolio
        holding all of them, the global "Standard ESG Screen" criteria set
        and a client-owned climate set.
        """
        store = cls()
        as_of = date(2024, 1, 1)

        for parameter in (
            Parameter(
                id="p-carbon",
                name="carbon_emissions",
                data_type=DataType.NUMBER,
                unit="tons CO2/year",
                description="Annual carbon emissions",
            ),
            Parameter(
                id="p-board",
                name="board_diversity_pct",
                data_type=DataType.NUMBER,
                unit="%",
                description="Percentage of board members from underrepresented groups",
            ),
            Parameter(
                id="p-policy",
                name="has_environmental_policy",
                data_type=DataType.BOOLEAN,
                description="Company has formal environmental policy",
            ),
            Parameter(
                id="p-controversy",
                name="controversy_level",
                data_type=DataType.STRING,
                description="Level of ESG controversies (none, low, medium, high)",
            ),
            Parameter(
                id="p-renewable",
                name="renewable_energy_pct",
                data_type=DataType.NUMBER,
                unit="%",
                description="Percentage of energy from renewable sources",
            ),
        ):
            store.add_parameter(parameter)

        demo = [
            # id, name, ticker, sector, carbon, board, policy, controversy, renewable
            ("greentech", "GreenTech Corp", "GTC", "Technology", 50, 40, True, "none", 80),
            ("oilco", "OilCo Industries", "OCI", "Energy", 5000, 15, False, "high", 5),
            ("cleanenergy", "CleanEnergy Inc", "CEI", "Utilities", 20, 50, True, "none", 95),
            ("fastfashion", "FastFashion Ltd", "FFL", "Consumer", 200, 25, True, "medium", 30),
            ("sustainablegoods", "SustainableGoods Co", "SGC", "Consumer", 30, 45, True, "low", 70),
        ]
        for company_id, name, ticker, sector, *values in demo:
            store.add_company(
                Company(id=company_id, name=name, ticker=ticker, sector=sector, region="Europe")
            )
            for parameter_name, value in zip(
                (
                    "carbon_emissions",
                    "board_diversity_pct",
                    "has_environmental_policy",
                    "controversy_level",
                    "renewable_energy_pct",
                ),
                values,
            ):
                store.add_parameter_value(company_id, parameter_name, value, as_of, "seed")

        store.add_portfolio(
            Portfolio(
                id="main-portfolio",
                name="Main Portfolio",
                client_id="demo-fund",
                holdings=[Holding(company_id=c[0], weight=20.0) for c in demo],
            )
        )

        store.add_criteria_set(
            CriteriaSet(
                id="standard-esg",
                name="Standard ESG Screen",
                version=1,
                rules=[
                    Rule(
                        id="r-carbon",
                        name="Carbon Emissions Limit",
                        description="Carbon emissions must stay below 500 tons/year",
                        expression='{"type": "comparison", "parameter": "carbon_emissions", "operator": ">=", "value": 500}',
                        failure_message="Carbon emissions exceed acceptable limit",
                    ),
                    Rule(
                        id="r-board",
                        name="Board Diversity Minimum",
                        description="Board diversity must be at least 30%",
                        expression='{"type": "comparison", "parameter": "board_diversity_pct", "operator": "<", "value": 30}',
                        failure_message="Board diversity below minimum threshold",
                    ),
                    Rule(
                        id="r-policy",
                        name="Environmental Policy Required",
                        expression='{"type": "comparison", "parameter": "has_environmental_policy", "operator": "==", "value": false}',
                        failure_message="No environmental policy in place",
                        severity=Severity.WARN,
                    ),
                    Rule(
                        id="r-controversy",
                        name="No High Controversies",
                        expression='{"type": "comparison", "parameter": "controversy_level", "operator": "==", "value": "high"}',
                        failure_message="Company has high-level ESG controversies",
                    ),
                ],
            )
        )

        store.add_criteria_set(
            CriteriaSet(
                id="demo-fund-climate",
                name="Demo Fund Climate Screen",
                is_global=False,
                owner_id="demo-fund",
                rules=[
                    Rule(
                        id="r-renewable",
                        name="Renewable Transition",
                        description="High emitters need a majority renewable energy mix",
                        expression={
                            "type": "AND",
                            "conditions": [
                                {"type": "comparison", "parameter": "carbon_emissions", "operator": ">", "value": 100},
                                {"type": "comparison", "parameter": "renewable_energy_pct", "operator": "<", "value": 50},
                            ],
                        },
                    ),
                ],
            )
        )
        return store
