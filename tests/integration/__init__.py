"""
Integration Tests - End-to-End Pipeline Tests.

These tests verify that all components work together correctly.
Integration tests use the InMemoryScreeningStore to avoid external
dependencies while testing the full workflow.

Test Files:
    - test_screening_pipeline.py: Screening, validation and result management
"""
