"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

A page is the root scope: its declared components resolve against the
top-level document of the driver.

Provides:
    - Navigation and reload
    - Page readiness (document ready state + additional_wait hook)
    - Screenshot and debugging utilities

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Type, TypeVar

import allure
from loguru import logger

from pomkit.common.global_config import FrameworkConfig, default_config
from pomkit.exceptions import PageCreationError, PomkitError, UnexpectedPageError
from pomkit.framework.component import Scoped
from pomkit.framework.driver import Driver
from pomkit.framework.wait_helpers import wait_until
from pomkit.report_tools.allure_utils import attach_png, attach_text


P = TypeVar("P", bound="BasePage")


def wait_for_document_ready(driver: Driver, config: FrameworkConfig, description: str) -> None:
    """Wait until document.readyState of the current query context is 'complete'."""
    wait_until(
        lambda: driver.ready_state() == "complete",
        config.wait_timeout_ms,
        config.effective_poll_interval_ms,
        description=f"{description} document to load",
    )


class BasePage(Scoped):
    """
    Base class for all page objects.

    Usage:
        class LoginPage(BasePage):
            URL_PATH = "/login"

            username = component(css.descendant("input", by_id("username")), Textbox)
            password = component(css.descendant("input", by_id("password")), Textbox)
            submit = component(css.descendant("button", by_type("submit")), Button)

            def additional_wait(self) -> None:
                self.username.wait_for_displayed()

            def login(self, user: str, secret: str) -> None:
                self.username.enter_text(user)
                self.password.enter_text(secret)
                self.submit.click()
    """

    # Override in subclasses
    URL_PATH: str = "/"

    def __init__(
        self,
        driver: Driver,
        config: Optional[FrameworkConfig] = None,
        base_url: str = "",
    ):
        """
        Initialize page object.

        Args:
            driver: Browser driver
            config: Framework settings; defaults to the process-wide config
            base_url: Base URL for the application; defaults to config.base_url
        """
        self.driver = driver
        self.config = config or default_config()
        self.base_url = (base_url or self.config.base_url).rstrip("/")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.URL_PATH})"

    @property
    def url(self) -> str:
        """Get full page URL."""
        return f"{self.base_url}{self.URL_PATH}"

    def navigate(self) -> None:
        """Navigate to this page."""
        with allure.step(f"Navigate to {self.URL_PATH}"):
            self.driver.navigate(self.url)
            logger.debug(f"Navigated to: {self.url}")

    def reload(self) -> None:
        """Reload the browser and wait for this page again."""
        with allure.step(f"Reload {type(self).__name__}"):
            self.driver.reload()
            self.wait_for_page()

    def wait_for_page(self) -> None:
        """
        Wait until the browser shows this page.

        Raises:
            UnexpectedPageError: If the document never loads or
                ``additional_wait`` fails.
        """
        with allure.step(f"Wait for {type(self).__name__}"):
            try:
                wait_for_document_ready(self.driver, self.config, type(self).__name__)
                self.additional_wait()
            except PomkitError as e:
                raise UnexpectedPageError(
                    f"{type(self).__name__} was not displayed (url: {self.driver.current_url}): {e}"
                ) from e
            logger.info(f"✅ {type(self).__name__} is ready")

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    def screenshot(self, name: str, attach_to_allure: bool = True) -> Path:
        """
        Take screenshot and optionally attach to Allure.

        Args:
            name: Screenshot name (without extension)
            attach_to_allure: Whether to attach to Allure report

        Returns:
            Path to saved screenshot
        """
        screenshot_dir = Path(self.config.screenshot_dir)
        screenshot_dir.mkdir(parents=True, exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = screenshot_dir / f"{name}_{timestamp}.png"

        png = self.driver.screenshot(str(filepath))
        if attach_to_allure:
            attach_png(png, name=name)

        logger.debug(f"Screenshot saved: {filepath}")
        return filepath

    def capture_failure(self, test_name: str) -> None:
        """Attach a screenshot and the current URL to the Allure report."""
        with allure.step("Capture failure details"):
            self.screenshot(f"failure_{test_name}")
            attach_text(self.driver.current_url, name="Current URL")


def open_page(
    page_type: Type[P],
    driver: Driver,
    config: Optional[FrameworkConfig] = None,
    navigate: bool = False,
) -> P:
    """
    Create a page object and wait until the browser shows it.

    Args:
        page_type: BasePage subclass
        driver: Browser driver
        config: Framework settings
        navigate: Load ``page_type.URL_PATH`` first

    Raises:
        PageCreationError: If the page type cannot be instantiated.
        UnexpectedPageError: If the page never becomes ready.
    """
    try:
        page = page_type(driver, config)
    except PomkitError:
        raise
    except Exception as e:
        raise PageCreationError(f"Unable to create {getattr(page_type, '__name__', page_type)}: {e}") from e

    if navigate:
        page.navigate()
    page.wait_for_page()
    return page


__all__ = [
    "BasePage",
    "open_page",
    "wait_for_document_ready",
]
