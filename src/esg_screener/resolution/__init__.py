"""
Resolution Package - Point-in-Time Parameter Values.

Components:
    - ParameterValueResolver: Effective value per (company, parameter) at a date
"""

from esg_screener.resolution.value_resolver import ParameterValueResolver

__all__ = ["ParameterValueResolver"]
