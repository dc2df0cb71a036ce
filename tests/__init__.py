"""
Test Suite for ESG Screener.

Test organization:
    - unit/: Unit tests for individual components
    - integration/: End-to-end screening over the in-memory store

Running Tests:
    pytest tests/                           # All tests
    pytest tests/unit/                      # Unit tests only
    pytest tests/integration/               # Integration tests only
"""
