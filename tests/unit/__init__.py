"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested in isolation against the in-memory store.
Unit tests should be fast, deterministic, and focused.

Test Files:
    - test_evaluator.py: Expression evaluation, validation, display helpers
    - test_requirements.py: Parameter requirement extraction
    - test_serialization.py: Expression/value text and shorthand
    - test_value_resolver.py: Point-in-time value resolution
    - test_prescreening_validator.py: Data completeness reports
    - test_request_validator.py: Request validation
    - test_config_loader.py: Configuration loading/validation
    - test_in_memory_store.py: Store, loggers and metrics adapters
"""
