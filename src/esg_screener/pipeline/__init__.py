"""
Pipeline Package - Orchestration and Subject Selection.

This package contains the screening orchestrator and the strategies that
decide which companies a run covers.

Components:
    - ScreeningPipeline: Main orchestrator for screening and validation
    - Subject selectors: Portfolio, company, companies, sector, region, all

The pipeline is responsible for:
    - Validating screening requests
    - Resolving subjects and authorizing the criteria set
    - Evaluating every company against every rule
    - Aggregating and persisting the final ScreeningResult

Design Principles:
    - All dependencies injected via constructor
    - One orchestrator for every screening mode
    - Stateless operation between runs
"""

from esg_screener.pipeline.screening_pipeline import ScreeningPipeline, calculate_pass_rate
from esg_screener.pipeline.subjects import (
    AllCompaniesSelector,
    CompaniesSelector,
    CompanySelector,
    PortfolioSelector,
    RegionSelector,
    SectorSelector,
    SubjectSelector,
    SubjectSet,
)

__all__ = [
    "ScreeningPipeline",
    "calculate_pass_rate",
    "AllCompaniesSelector",
    "CompaniesSelector",
    "CompanySelector",
    "PortfolioSelector",
    "RegionSelector",
    "SectorSelector",
    "SubjectSelector",
    "SubjectSet",
]
