"""
================================================================================
Driver Boundary
================================================================================

The framework talks to the browser through a small capability surface:

    - find_elements(scope, locator)   ordered element refs
    - read_facts(element)             tag, attributes, visibility, geometry...
    - perform(element, action, payload)
    - enter_scope(element) / exit_scope()   frame boundary crossing

plus a few page-level operations (navigate, reload, ready state, screenshot).

PlaywrightDriver implements it on top of the Playwright sync API. Element refs
are Playwright ElementHandles; Playwright errors are translated into
StaleElementError (transient) or DriverError at this boundary.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from playwright.sync_api import ElementHandle, Frame, Page
from playwright.sync_api import Error as PlaywrightError

from pomkit.exceptions import DriverError, SelectorError, StaleElementError
from pomkit.framework.locator import CompiledLocator


@dataclass(frozen=True)
class BoundingBox:
    """Element geometry in CSS pixels."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ElementFacts:
    """
    A snapshot of everything the framework needs to know about one element.

    Attributes:
        tag: Lower-case tag name
        attributes: Attribute name -> value
        is_displayed: Visible per the driver
        is_enabled: Interactable per the driver
        bounding_box: Geometry, or None when not rendered
        text: Rendered text
        value: Form value, if the element has one
        is_selected: Checked / selected state
    """
    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    is_displayed: bool = True
    is_enabled: bool = True
    bounding_box: Optional[BoundingBox] = None
    text: str = ""
    value: Optional[str] = None
    is_selected: bool = False

    @property
    def id(self) -> Optional[str]:
        return self.attributes.get("id")

    @property
    def css_classes(self) -> Tuple[str, ...]:
        return tuple(self.attributes.get("class", "").split())


class Action(str, Enum):
    """Interactions a component can ask the driver to perform."""
    CLICK = "click"
    DOUBLE_CLICK = "double_click"
    HOVER = "hover"
    FILL = "fill"
    CLEAR = "clear"
    TYPE = "type"
    PRESS = "press"
    SELECT_OPTION = "select_option"
    SCROLL_INTO_VIEW = "scroll_into_view"


class Driver(ABC):
    """Capability surface the framework needs from a browser automation backend."""

    @abstractmethod
    def find_elements(self, scope: Optional[Any], locator: CompiledLocator) -> List[Any]:
        """
        Query elements in document order.

        Args:
            scope: Element to search under, or None for the current document.
                Ignored for absolute locators.
            locator: Compiled query.
        """

    @abstractmethod
    def read_facts(self, element: Any) -> ElementFacts:
        """Read a snapshot of the element. Raises StaleElementError if detached."""

    @abstractmethod
    def perform(self, element: Any, action: Action, payload: Any = None) -> None:
        """Perform an interaction on the element."""

    @abstractmethod
    def enter_scope(self, element: Any) -> None:
        """Make the document inside a frame element the current query context."""

    @abstractmethod
    def exit_scope(self) -> None:
        """Restore the query context that was current before the last enter_scope."""

    # Page-level operations

    @abstractmethod
    def navigate(self, url: str) -> None:
        """Load a URL in the top-level document."""

    @abstractmethod
    def reload(self) -> None:
        """Reload the top-level document."""

    @abstractmethod
    def ready_state(self) -> str:
        """document.readyState of the current query context."""

    @property
    @abstractmethod
    def current_url(self) -> str:
        """URL of the top-level document."""

    @abstractmethod
    def screenshot(self, path: str) -> bytes:
        """Capture the viewport to ``path`` and return the PNG bytes."""


# ============================================================
# Playwright implementation
# ============================================================

_FACTS_SCRIPT = """
e => ({
    tag: e.tagName.toLowerCase(),
    attributes: Object.fromEntries(Array.from(e.attributes, a => [a.name, a.value])),
    text: e.innerText !== undefined ? e.innerText : (e.textContent || ""),
    value: ("value" in e && e.value !== undefined && e.value !== null) ? String(e.value) : null,
    selected: Boolean(e.selected || e.checked),
})
"""

_STALE_MARKERS = (
    "not attached",
    "detached",
    "Execution context was destroyed",
    "Cannot find context",
    "Element is not connected",
)

_SELECTOR_MARKERS = (
    "is not a valid selector",
    "Unexpected token",
    "Failed to evaluate",
)


def _translate(error: PlaywrightError, doing: str) -> Exception:
    message = str(error)
    if any(marker in message for marker in _STALE_MARKERS):
        return StaleElementError(f"Element went stale while trying to {doing}: {message}")
    if any(marker in message for marker in _SELECTOR_MARKERS):
        return SelectorError(f"Driver rejected the selector while trying to {doing}: {message}")
    return DriverError(f"Failed to {doing}: {message}")


class PlaywrightDriver(Driver):
    """
    Driver backed by a Playwright sync Page.

    Usage:
        with BrowserManager(config) as manager:
            driver = PlaywrightDriver(manager.new_page())
            page = open_page(LoginPage, driver, config)
    """

    def __init__(self, page: Page, action_timeout_ms: int = 5000):
        """
        Initialize the driver.

        Args:
            page: Playwright Page object
            action_timeout_ms: Timeout Playwright applies to single actions
        """
        self.page = page
        self.action_timeout_ms = action_timeout_ms
        self._frames: List[Frame] = []

    @property
    def _context(self) -> Frame:
        return self._frames[-1] if self._frames else self.page.main_frame

    def find_elements(self, scope: Optional[ElementHandle], locator: CompiledLocator) -> List[ElementHandle]:
        root = self._context if scope is None or locator.absolute else scope
        try:
            return root.query_selector_all(locator.selector)
        except PlaywrightError as e:
            raise _translate(e, f"query {locator.selector}") from e

    def read_facts(self, element: ElementHandle) -> ElementFacts:
        try:
            raw = element.evaluate(_FACTS_SCRIPT)
            box = element.bounding_box()
            displayed = element.is_visible()
            enabled = element.is_enabled()
        except PlaywrightError as e:
            raise _translate(e, "read element facts") from e
        return ElementFacts(
            tag=raw["tag"],
            attributes=raw["attributes"],
            is_displayed=displayed,
            is_enabled=enabled,
            bounding_box=BoundingBox(box["x"], box["y"], box["width"], box["height"]) if box else None,
            text=raw["text"] or "",
            value=raw["value"],
            is_selected=raw["selected"],
        )

    def perform(self, element: ElementHandle, action: Action, payload: Any = None) -> None:
        timeout = self.action_timeout_ms
        logger.debug(f"Perform {action.value} (payload={payload!r})")
        try:
            if action is Action.CLICK:
                element.click(timeout=timeout)
            elif action is Action.DOUBLE_CLICK:
                element.dblclick(timeout=timeout)
            elif action is Action.HOVER:
                element.hover(timeout=timeout)
            elif action is Action.FILL:
                element.fill(payload, timeout=timeout)
            elif action is Action.CLEAR:
                element.fill("", timeout=timeout)
            elif action is Action.TYPE:
                element.type(payload, timeout=timeout)
            elif action is Action.PRESS:
                element.press(payload, timeout=timeout)
            elif action is Action.SELECT_OPTION:
                element.select_option(label=payload, timeout=timeout)
            elif action is Action.SCROLL_INTO_VIEW:
                element.scroll_into_view_if_needed(timeout=timeout)
            else:
                raise DriverError(f"Unsupported action: {action}")
        except PlaywrightError as e:
            raise _translate(e, action.value) from e

    def enter_scope(self, element: ElementHandle) -> None:
        try:
            frame = element.content_frame()
        except PlaywrightError as e:
            raise _translate(e, "enter frame") from e
        if frame is None:
            raise DriverError("Element is not a frame; cannot enter its document")
        self._frames.append(frame)
        logger.debug(f"Entered frame scope (depth={len(self._frames)})")

    def exit_scope(self) -> None:
        if not self._frames:
            raise DriverError("exit_scope() called without a matching enter_scope()")
        self._frames.pop()
        logger.debug(f"Exited frame scope (depth={len(self._frames)})")

    def navigate(self, url: str) -> None:
        try:
            self.page.goto(url)
        except PlaywrightError as e:
            raise _translate(e, f"navigate to {url}") from e

    def reload(self) -> None:
        try:
            self.page.reload()
        except PlaywrightError as e:
            raise _translate(e, "reload") from e

    def ready_state(self) -> str:
        try:
            return self._context.evaluate("document.readyState")
        except PlaywrightError as e:
            raise _translate(e, "read document.readyState") from e

    @property
    def current_url(self) -> str:
        return self.page.url

    def screenshot(self, path: str) -> bytes:
        try:
            return self.page.screenshot(path=path)
        except PlaywrightError as e:
            raise _translate(e, "take screenshot") from e


__all__ = [
    "Action",
    "BoundingBox",
    "Driver",
    "ElementFacts",
    "PlaywrightDriver",
]
