"""
Configuration Package - Models and Loaders.

This package handles all configuration aspects of the ESG Screener:
    - Pydantic models for type-safe configuration
    - YAML loader with validation
    - Support for configuration profiles

Configuration Structure:
    - ScreeningConfig: Root configuration object
    - GlobalConfig: Global settings (worker threads)
    - EvaluationConfig: Missing-data policy, default failure message
    - RequestValidationConfig: As-of date bounds, request size cap
"""

from esg_screener.config.loader import ConfigLoader, load_config
from esg_screener.config.models import (
    EvaluationConfig,
    GlobalConfig,
    MissingDataPolicy,
    RequestValidationConfig,
    ScreeningConfig,
)

__all__ = [
    "ConfigLoader",
    "load_config",
    "EvaluationConfig",
    "GlobalConfig",
    "MissingDataPolicy",
    "RequestValidationConfig",
    "ScreeningConfig",
]
