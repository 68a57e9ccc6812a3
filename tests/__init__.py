"""
FUJIALIGN Test Suite

This package contains all tests for the FUJIALIGN alignment engine.

Test Organization:
    tests/
    ├── __init__.py          # This file
    ├── conftest.py          # Shared sites, dates and engine fixtures
    ├── fixtures/            # Scripted celestial position provider
    ├── integration/         # Tests against the real JPL ephemeris
    └── unit/                # Unit tests (no external data)

Running Tests:
    # Run all tests
    pytest tests/

    # Run ephemeris-backed integration tests (downloads DE421 once)
    FUJIALIGN_EPHEMERIS_TESTS=1 pytest tests/integration/

    # Run with coverage
    pytest tests/ --cov=services --cov=fujialign --cov-report=html

Requirements:
    pip install -e ".[test]"
"""
