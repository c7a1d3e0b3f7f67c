"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation (Playwright sync API).

Features:
    - Single browser instance per manager
    - Isolated contexts for test independence
    - Browser selection and headless mode from FrameworkConfig
    - Ready-to-use PlaywrightDriver instances

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.sync_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    sync_playwright,
)
from playwright.sync_api import Error as PlaywrightError

from pomkit.common.global_config import FrameworkConfig, default_config
from pomkit.exceptions import DriverError
from pomkit.framework.driver import PlaywrightDriver


SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


class BrowserManager:
    """
    Manages browser instances and contexts for UI testing.

    Usage:
        with BrowserManager(config) as manager:
            driver = manager.new_driver()
            page = open_page(LoginPage, driver, config, navigate=True)
    """

    # Default browser launch options
    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": [
            "--ignore-certificate-errors",
        ],
    }

    # Default context options
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(self, config: Optional[FrameworkConfig] = None):
        """
        Initialize browser manager.

        Args:
            config: Framework settings (browser name, headless mode, timeouts)
        """
        self.config = config or default_config()
        if self.config.browser not in SUPPORTED_BROWSERS:
            raise DriverError(
                f"Unsupported browser '{self.config.browser}'; expected one of {list(SUPPORTED_BROWSERS)}"
            )

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    def __enter__(self) -> "BrowserManager":
        """Context manager entry - start browser."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close browser."""
        self.close()

    def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = sync_playwright().start()
        browser_launcher = getattr(self._playwright, self.config.browser)

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.config.headless,
        }

        try:
            self._browser = browser_launcher.launch(**launch_options)
        except PlaywrightError as e:
            self._playwright.stop()
            self._playwright = None
            raise DriverError(f"Unable to launch {self.config.browser}: {e}") from e
        logger.debug(
            f"Browser started: {self.config.browser} "
            f"(headless={self.config.headless})"
        )

    def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                context.close()
            except PlaywrightError as e:
                logger.warning(f"Failed to close browser context: {e}")
        self._contexts.clear()

        if self._browser:
            self._browser.close()
            self._browser = None

        if self._playwright:
            self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new browser context.

        Each context is isolated - separate cookies, localStorage, etc.

        Args:
            **options: Additional context options
        """
        if not self._browser:
            raise DriverError("Browser not started. Call start() first.")

        context_options = {**self.DEFAULT_CONTEXT_OPTIONS, **options}
        context = self._browser.new_context(**context_options)
        self._contexts.append(context)
        return context

    def new_page(self, context: Optional[BrowserContext] = None, **context_options: Any) -> Page:
        """Create new page in new or existing context."""
        if context is None:
            context = self.new_context(**context_options)
        return context.new_page()

    def new_driver(self, **context_options: Any) -> PlaywrightDriver:
        """Create a PlaywrightDriver on a fresh page in its own context."""
        return PlaywrightDriver(self.new_page(**context_options), self.config.wait_timeout_ms)

    @property
    def browser(self) -> Optional[Browser]:
        """Get browser instance."""
        return self._browser


__all__ = [
    "BrowserManager",
    "SUPPORTED_BROWSERS",
]
