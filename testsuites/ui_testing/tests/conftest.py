"""
================================================================================
UI Testing Pytest Configuration
================================================================================

This module configures pytest for UI tests, providing fixtures for browser
management, page objects, and test setup/teardown.

Key Features:
- One browser per session, one isolated context per test
- Page Object fixtures for the showcase page
- Screenshot capture on failure

================================================================================
"""

from pathlib import Path
from typing import Generator

import pytest
from loguru import logger
from playwright.sync_api import Error as PlaywrightError

from pomkit.common import FrameworkConfig
from pomkit.exceptions import DriverError, PomkitError
from pomkit.framework import BasePage, BrowserManager, PlaywrightDriver, open_page
from testsuites.ui_testing.pages.showcase_page import ShowcasePage


RESOURCES_DIR = Path(__file__).parent.parent / "resources"


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def browser_manager(framework_config: FrameworkConfig) -> Generator[BrowserManager, None, None]:
    """
    Session-scoped browser manager fixture.

    Provides a single browser for all tests in the session, reducing browser
    launch overhead. UI tests are skipped when no browser can be launched.
    """
    manager = BrowserManager(framework_config)
    try:
        manager.start()
    except (DriverError, PlaywrightError) as e:
        manager.close()
        pytest.skip(f"Browser unavailable: {e}")
    yield manager
    manager.close()


@pytest.fixture(scope="function")
def driver(browser_manager: BrowserManager) -> Generator[PlaywrightDriver, None, None]:
    """
    Function-scoped driver fixture.

    Creates a new browser context for each test, providing isolation.
    """
    driver = browser_manager.new_driver()
    yield driver
    driver.page.context.close()


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def ui_config(framework_config: FrameworkConfig) -> FrameworkConfig:
    """Framework config pointing base_url at the bundled static pages."""
    return framework_config.with_overrides(base_url=RESOURCES_DIR.resolve().as_uri())


@pytest.fixture
def showcase_page(driver: PlaywrightDriver, ui_config: FrameworkConfig) -> ShowcasePage:
    """Provides an opened and ready ShowcasePage."""
    return open_page(ShowcasePage, driver, ui_config, navigate=True)


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Hook to capture screenshots on test failure.

    Takes a screenshot when a UI test with a page object fixture fails and
    attaches it to the Allure report.
    """
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        pages = [arg for arg in getattr(item, "funcargs", {}).values() if isinstance(arg, BasePage)]
        for page in pages:
            try:
                page.capture_failure(item.name)
            except PomkitError as e:
                # Log but don't fail if screenshot capture fails
                logger.warning(f"Failed to capture screenshot on failure: {e}")
