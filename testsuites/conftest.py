"""
================================================================================
Root Pytest Configuration
================================================================================

This module provides the root pytest configuration for the entire test suite.
It registers common markers and provides shared fixtures.

================================================================================
"""

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "unit: Framework tests against the in-memory DOM driver"
    )
    config.addinivalue_line(
        "markers", "ui: Tests that drive a real browser"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that wait for a full timeout budget"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "locator: Tests related to locator composition"
    )
    config.addinivalue_line(
        "markers", "rules: Tests related to component rule validation"
    )
    config.addinivalue_line(
        "markers", "wait: Tests related to bounded waits"
    )
    config.addinivalue_line(
        "markers", "lifecycle: Tests related to component resolution and readiness"
    )
    config.addinivalue_line(
        "markers", "collection: Tests related to component collections"
    )
    config.addinivalue_line(
        "markers", "scope: Tests related to frames and dialogs"
    )
    config.addinivalue_line(
        "markers", "config: Tests related to configuration loading"
    )


def pytest_collection_modifyitems(config, items):
    """
    Modify collected test items.

    Adds suite markers based on where a test lives.
    """
    for item in items:
        # Auto-add 'unit' marker to tests in unit directory
        if "unit" in item.path.parts:
            item.add_marker(pytest.mark.unit)

        # Auto-add 'ui' marker to tests in ui_testing directory
        if "ui_testing" in item.path.parts:
            item.add_marker(pytest.mark.ui)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "Pomkit Page-Object Framework",
        "=" * 60,
        "",
    ]
