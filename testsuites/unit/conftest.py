"""
Unit suite fixtures: a short wait budget and pages over the in-memory DOM driver.
"""

from typing import Callable, Type

import pytest

from pomkit.common import FrameworkConfig
from pomkit.framework.page_base import BasePage
from testsuites.unit.dom_driver import InMemoryDomDriver


@pytest.fixture
def fast_config() -> FrameworkConfig:
    """300 ms budget, 20 ms polling: timeouts stay cheap but measurable."""
    return FrameworkConfig(wait_timeout_ms=300, poll_interval_ms=20, screenshot_dir="reports/screenshots")


@pytest.fixture
def make_page(fast_config: FrameworkConfig) -> Callable[..., BasePage]:
    """Build ``page_type`` over a fresh InMemoryDomDriver for ``html``."""

    def _make(html: str, page_type: Type[BasePage] = BasePage) -> BasePage:
        return page_type(InMemoryDomDriver(html), fast_config)

    return _make
