"""
Domain Layer - Core Business Entities and Value Objects.

This package contains the core domain model for the ESG Screener.
All types here are pure Python with no infrastructure dependencies
(except Pydantic for validation).

Entities:
    - Parameter / ParameterValue: ESG data points and their dated values
    - Company / Portfolio: What gets screened
    - Rule / CriteriaSet: What companies are screened against
    - ScreeningResult: Complete, write-once result of a screening run

Expressions:
    - Comparison / Logical: The tagged rule condition tree

Value Objects:
    - ValidationReport: Pre-screening data completeness
    - ExpressionValidation: Structural check result

Design Principles:
    - Immutable where possible (frozen models)
    - Lossless JSON round trip for expressions and values
    - No infrastructure dependencies
"""
