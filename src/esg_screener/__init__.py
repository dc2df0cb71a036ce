"""
ESG Screener - Rule-Based Portfolio Screening Engine.

Screens investment portfolios and ad hoc company sets against configurable
ESG criteria sets. Each company is evaluated against every rule of the set
using its parameter values as of a reference date, producing per-rule
outcomes, a per-company pass/fail decision and aggregate statistics.

Architecture:
    - Hexagonal Architecture (Ports & Adapters)
    - Dependency Injection for testability
    - Strategy Pattern for subject selection (portfolio, sector, ...)
    - Configuration-driven behavior via YAML

Main Components:
    - domain: Entities, expression tree, serialization, exceptions
    - rules: Expression evaluator and parameter requirement extraction
    - resolution: Point-in-time parameter value resolution
    - validation: Request validation and pre-screening completeness checks
    - pipeline: Subject selectors and the screening orchestrator
    - interfaces: Protocols for stores, audit logging and metrics
    - adapters: In-memory store, console/recording loggers, metrics
    - config: Configuration models and loaders

Example:
    >>> from esg_screener import ScreeningPipeline, PortfolioSelector
    >>> pipeline = ScreeningPipeline.from_store(store, config)
    >>> result = pipeline.screen(PortfolioSelector("p-1"), "cs-1")
    >>> print(f"{result.summary.passed}/{result.summary.total_subjects} passed")

"""

import logging

__version__ = "0.4.0"


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for ESG Screener.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import esg_screener
        >>> esg_screener.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("esg_screener").setLevel(level)


from esg_screener.pipeline.screening_pipeline import ScreeningPipeline  # noqa: E402
from esg_screener.pipeline.subjects import (  # noqa: E402
    AllCompaniesSelector,
    CompaniesSelector,
    CompanySelector,
    PortfolioSelector,
    RegionSelector,
    SectorSelector,
)

__all__ = [
    "__version__",
    "configure_logging",
    "ScreeningPipeline",
    "AllCompaniesSelector",
    "CompaniesSelector",
    "CompanySelector",
    "PortfolioSelector",
    "RegionSelector",
    "SectorSelector",
]
