"""Test suite for countsplit.

Test organization:
- fixtures/: Simulated count matrix generators
- unit/: Unit tests for individual modules and statistical properties

Run tests with:
    pytest tests/
    pytest tests/unit/ -v --tb=short
"""
