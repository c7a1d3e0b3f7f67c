"""
================================================================================
Scope Containers
================================================================================

Components whose children resolve relative to them, with an extra settle
step before those children become resolvable.

    Frame / FrameContent   an embedded document; entering the frame switches
                           the driver's query context, leaving restores it
    Dialog                 an overlay in the same document; children wait
                           for the dialog to be displayed first

Usage:
    class EditorFrame(FrameContent):
        body = component(css.descendant("textarea"), Textbox)

        def additional_wait(self) -> None:
            self.body.wait_for_displayed()

    class ExamplePage(BasePage):
        editor = frame(css.descendant("iframe", by_id("editor")), EditorFrame)
        confirm = dialog(css.descendant("dialog", by_id("confirm")), ConfirmDialog)

    with page.editor as content:
        content.body.enter_text("hello")

    with page.confirm as d:       # waits displayed on enter, hidden on exit
        d.ok.click()

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Type, TypeVar

import allure
from loguru import logger

from pomkit.exceptions import ComponentCreationError, PomkitError, ScopeError
from pomkit.framework.component import Component, Scoped
from pomkit.framework.component_rule import RuleBuilder
from pomkit.framework.locator import LocatorNode
from pomkit.framework.page_base import wait_for_document_ready


T = TypeVar("T")


class FrameContent(Scoped):
    """
    Declarative content of a frame's document.

    Children resolve against the frame's document, so they are only usable
    while the frame is entered.
    """

    def __init__(self, frame: "Frame"):
        self.frame = frame
        self.driver = frame.driver
        self.config = frame.config
        self.active = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(in {self.frame!r})"

    def _require_active(self) -> None:
        if not self.active:
            raise ScopeError(f"{self!r} is only usable inside 'with <frame> as content:'")

    def _settle_as_scope(self) -> None:
        self._require_active()

    def _scope_element_once(self) -> Optional[Any]:
        # Every lookup, waiting or not, must stay inside the frame's document
        self._require_active()
        return None

    def wait_for_page(self) -> None:
        """Wait for the frame's document to load, then run ``additional_wait``."""
        wait_for_document_ready(self.driver, self.config, repr(self))
        self.additional_wait()


class Frame(Component):
    """<frame>/<iframe> whose document is described by a FrameContent type."""

    content_type: Type[FrameContent] = FrameContent

    def __init__(
        self,
        locator: LocatorNode,
        scope: Scoped,
        name: Optional[str] = None,
        index: int = 0,
        content_type: Optional[Type[FrameContent]] = None,
    ):
        super().__init__(locator, scope, name, index)
        if content_type is not None:
            self.content_type = content_type
        self._entered: List[FrameContent] = []

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().one_of("frame", "iframe")

    def _new_content(self) -> FrameContent:
        try:
            return self.content_type(self)
        except PomkitError:
            raise
        except Exception as e:
            raise ComponentCreationError(f"Unable to create {self.content_type.__name__}: {e}") from e

    def __enter__(self) -> FrameContent:
        with allure.step(f"Enter {self!r}"):
            element, _ = self._displayed()
            content = self._new_content()
            self.driver.enter_scope(element)
            content.active = True
            try:
                content.wait_for_page()
            except Exception:
                content.active = False
                self.driver.exit_scope()
                raise
            self._entered.append(content)
            logger.debug(f"Entered {self!r}")
            return content

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        content = self._entered.pop()
        content.active = False
        self.driver.exit_scope()
        logger.debug(f"Left {self!r}")

    def run(self, action: Callable[[Any], T]) -> T:
        """Run ``action(content)`` inside the frame."""
        with self as content:
            return action(content)


class Dialog(Component):
    """
    An overlay in the current document.

    Its children wait for the dialog to be displayed before they resolve.
    Subclasses narrow the rule, e.g. ``rule.tag().equals("dialog")``.
    """

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.any()

    def _settle_as_scope(self) -> None:
        self._displayed()
        self.additional_wait()

    def __enter__(self) -> "Dialog":
        with allure.step(f"Wait for {self!r} to open"):
            self._settle_as_scope()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        # Leave failures untouched; only a clean block must close the dialog
        if exc_type is None:
            self.wait_for_hidden()

    def run(self, action: Callable[["Dialog"], T]) -> T:
        """Run ``action(dialog)`` once it is open, then wait for it to close."""
        with self as opened:
            return action(opened)


__all__ = [
    "Dialog",
    "Frame",
    "FrameContent",
]
