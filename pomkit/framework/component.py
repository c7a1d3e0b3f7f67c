"""
================================================================================
Component Base and Capabilities
================================================================================

A component is a typed handle on "the element that this locator and this
rule identify, relative to this scope". It never caches its element between
operations: every operation resolves again from the locator, waits for the
readiness the operation needs, then acts.

Capabilities are small mixins assembled by the concrete component kinds:

    Scoped               owns children, settles before they resolve
    Locatable            locator + scope + single-shot resolution
    RuleValidated        per-class ComponentRule built from ``rules(rule)``
    Displayable          visibility waits
    Enableable           interactability waits
    AnimationSettleable  geometry-stability waits
    Clickable            click / double-click / hover gated by readiness

Lifecycle per operation:
    UNRESOLVED -> FOUND -> DISPLAYED -> (ANIMATING) -> READY

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

import allure
from loguru import logger

from pomkit.common.global_config import FrameworkConfig
from pomkit.exceptions import (
    ComponentAnimatingError,
    ComponentCreationError,
    ComponentNotDisplayedError,
    ComponentNotEnabledError,
    ElementNotFoundError,
    PomkitError,
    StaleElementError,
    TransientLookupError,
    WaitTimeoutError,
)
from pomkit.framework.component_rule import ComponentRule, RuleBuilder
from pomkit.framework.driver import Action, BoundingBox, Driver, ElementFacts
from pomkit.framework.locator import LocatorNode
from pomkit.framework.wait_helpers import poll_until, wait_until


C = TypeVar("C")

Resolved = Tuple[Any, ElementFacts]


class ComponentState(str, Enum):
    UNRESOLVED = "unresolved"
    FOUND = "found"
    DISPLAYED = "displayed"
    ANIMATING = "animating"
    READY = "ready"


def resolve_matches(
    driver: Driver,
    scope_element: Optional[Any],
    locator: LocatorNode,
    rule: ComponentRule,
) -> Tuple[List[Resolved], List[str]]:
    """
    Query candidates once and keep those that satisfy the rule.

    Returns:
        (matches in document order, violations of the first rejected candidate)

    Raises:
        ElementNotFoundError: If the locator matched no element at all.
    """
    compiled = locator.compile()
    candidates = driver.find_elements(scope_element, compiled)
    if not candidates:
        raise ElementNotFoundError("No element matched", compiled.selector)

    matches: List[Resolved] = []
    first_violations: List[str] = []
    for candidate in candidates:
        try:
            facts = driver.read_facts(candidate)
        except StaleElementError:
            continue
        violations = rule.validate(facts)
        if violations:
            if not first_violations:
                first_violations = violations
            continue
        matches.append((candidate, facts))
    return matches, first_violations


# ============================================================
# Scoped
# ============================================================

class Scoped:
    """
    Something child components resolve relative to: a page, a frame's
    document, or another component.
    """

    driver: Driver
    config: FrameworkConfig

    def child(self, locator: LocatorNode, kind: Type[C], name: Optional[str] = None, **options: Any) -> C:
        """
        Create a child component (or collection) scoped to this owner.

        Raises:
            ComponentCreationError: If ``kind`` cannot be instantiated.
        """
        if not isinstance(kind, type):
            raise ComponentCreationError(f"Component kind must be a class, got {kind!r}")
        try:
            return kind(locator, scope=self, name=name, **options)
        except PomkitError:
            raise
        except Exception as e:
            raise ComponentCreationError(f"Unable to create {kind.__name__}: {e}") from e

    def additional_wait(self) -> None:
        """Extra readiness gate run before children resolve. Override as needed."""

    def _settle_as_scope(self) -> None:
        """Block until children of this owner may resolve."""

    def _scope_element_once(self) -> Optional[Any]:
        """Element children search under, or None for the current document."""
        return None


# ============================================================
# Locatable / RuleValidated
# ============================================================

class RuleValidated:
    """Per-class rule, declared through the ``rules`` hook."""

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        raise NotImplementedError(f"{cls.__name__} must declare rules(); use rule.any() to accept any element")

    @classmethod
    def component_rule(cls) -> ComponentRule:
        cached = cls.__dict__.get("_component_rule")
        if cached is None:
            cached = ComponentRule.build(cls.rules)
            setattr(cls, "_component_rule", cached)
        return cached


class Locatable(Scoped, RuleValidated):
    """Locator + owning scope + single-shot resolution."""

    def __init__(
        self,
        locator: LocatorNode,
        scope: Scoped,
        name: Optional[str] = None,
        index: int = 0,
    ):
        if not isinstance(locator, LocatorNode):
            raise ComponentCreationError(f"Expected a LocatorNode, got {locator!r}")
        self.locator = locator
        self.scope = scope
        self.name = name
        self.index = index
        self.driver = scope.driver
        self.config = scope.config
        self.state = ComponentState.UNRESOLVED
        self._element: Optional[Any] = None
        # Build the rule eagerly so a broken rules() hook fails at creation
        self.rule = type(self).component_rule()

    def __repr__(self) -> str:
        label = self.name or str(self.locator)
        suffix = f"[{self.index}]" if self.index else ""
        return f"{type(self).__name__}({label}{suffix})"

    @property
    def element(self) -> Optional[Any]:
        """Driver handle from the most recent resolution. Never reused for lookups."""
        return self._element

    @property
    def _timeout_ms(self) -> int:
        return self.config.wait_timeout_ms

    @property
    def _interval_ms(self) -> int:
        return self.config.effective_poll_interval_ms

    def _find_once(self) -> Resolved:
        """Resolve the element right now, without waiting."""
        scope_element = self.scope._scope_element_once()
        matches, violations = resolve_matches(self.driver, scope_element, self.locator, self.rule)
        if self.index < len(matches):
            element, facts = matches[self.index]
            self._element = element
            self.state = ComponentState.FOUND
            return element, facts
        if matches:
            raise ElementNotFoundError(
                f"Only {len(matches)} element(s) matched; none at index {self.index}",
                self.locator.expression,
            )
        raise ElementNotFoundError(
            "No candidate satisfied the component rule",
            self.locator.expression,
            violations,
        )

    def _begin(self) -> None:
        self.state = ComponentState.UNRESOLVED
        self.scope._settle_as_scope()

    def _poll(
        self,
        accept: Callable[[Resolved], bool],
        description: str,
        error: Type[WaitTimeoutError] = WaitTimeoutError,
        message: Optional[str] = None,
    ) -> Resolved:
        """
        Resolve repeatedly until ``accept`` approves the element.

        Raises:
            ElementNotFoundError: If no evaluation found the element at all.
            error: If the element was found but never accepted.
        """
        found = [False]

        def resolve() -> Resolved:
            resolved = self._find_once()
            found[0] = True
            return resolved

        try:
            return poll_until(
                resolve,
                accept,
                self._timeout_ms,
                self._interval_ms,
                description=f"{self!r} {description}",
                error=error,
                message=message,
            )
        except WaitTimeoutError as timeout:
            if found[0]:
                raise
            raise ElementNotFoundError(
                f"{self!r} was not found within {timeout.timeout_ms} ms",
                self.locator.expression,
                getattr(timeout.__cause__, "violations", None),
            ) from timeout

    def _existing(self) -> Resolved:
        """Wait until the element is present."""
        self._begin()
        return self._poll(lambda resolved: True, "to exist")

    # --------------------------------------------------------
    # Scope behaviour for children
    # --------------------------------------------------------

    def _settle_as_scope(self) -> None:
        self._existing()
        self.additional_wait()

    def _scope_element_once(self) -> Optional[Any]:
        return self._find_once()[0]

    # --------------------------------------------------------
    # Queries
    # --------------------------------------------------------

    def exists(self) -> bool:
        """True if the element can be resolved right now."""
        try:
            self._find_once()
            return True
        except TransientLookupError:
            return False

    def wait_for_existence(self) -> None:
        self._existing()

    def wait_for_absent(self) -> None:
        """Wait until the element can no longer be resolved."""
        wait_until(
            lambda: not self.exists(),
            self._timeout_ms,
            self._interval_ms,
            description=f"{self!r} to disappear",
            message=f"{self!r} still exists after {self._timeout_ms} ms",
        )

    def facts(self) -> ElementFacts:
        return self._existing()[1]

    def text(self) -> str:
        return self.facts().text.strip()

    def key(self) -> str:
        """Identity of this component inside a collection. Defaults to its text."""
        return self.text()

    def attribute(self, name: str) -> Optional[str]:
        return self.facts().attributes.get(name)

    def tag(self) -> str:
        return self.facts().tag

    def css_classes(self) -> Tuple[str, ...]:
        return self.facts().css_classes

    def bounding_box(self) -> Optional[BoundingBox]:
        return self.facts().bounding_box


# ============================================================
# Readiness capabilities
# ============================================================

class Displayable:
    """Visibility waits. Requires Locatable."""

    def is_displayed(self) -> bool:
        try:
            return self._find_once()[1].is_displayed
        except TransientLookupError:
            return False

    def _displayed(self) -> Resolved:
        self._begin()
        resolved = self._poll(
            lambda r: r[1].is_displayed,
            "to be displayed",
            error=ComponentNotDisplayedError,
            message=f"{self!r} was not displayed within {self._timeout_ms} ms",
        )
        self.state = ComponentState.DISPLAYED
        return resolved

    def wait_for_displayed(self) -> None:
        with allure.step(f"Wait for {self!r} to be displayed"):
            self._displayed()

    def wait_for_hidden(self) -> None:
        """Wait until the element is absent or not visible."""
        with allure.step(f"Wait for {self!r} to be hidden"):
            wait_until(
                lambda: not self.is_displayed(),
                self._timeout_ms,
                self._interval_ms,
                description=f"{self!r} to be hidden",
                message=f"{self!r} was still displayed after {self._timeout_ms} ms",
            )

    def scroll_into_view(self) -> None:
        element, _ = self._displayed()
        self.driver.perform(element, Action.SCROLL_INTO_VIEW)


class Enableable:
    """Interactability waits. Requires Locatable."""

    def is_enabled(self) -> bool:
        try:
            return self._find_once()[1].is_enabled
        except TransientLookupError:
            return False

    def _enabled(self) -> Resolved:
        return self._poll(
            lambda r: r[1].is_enabled,
            "to be enabled",
            error=ComponentNotEnabledError,
            message=f"{self!r} was not enabled within {self._timeout_ms} ms",
        )

    def wait_for_enabled(self) -> None:
        self._begin()
        self._enabled()


class AnimationSettleable:
    """Waits for the element's geometry to stop changing. Requires Locatable."""

    def _stopped_animating(self) -> Resolved:
        previous: List[Optional[BoundingBox]] = []

        def settled(resolved: Resolved) -> bool:
            facts = resolved[1]
            box = facts.bounding_box if facts.is_displayed else None
            stable = box is not None and bool(previous) and previous[-1] == box
            previous[:] = [box]
            return stable

        self.state = ComponentState.ANIMATING
        return self._poll(
            settled,
            "to stop animating",
            error=ComponentAnimatingError,
            message=f"{self!r} was still animating after {self._timeout_ms} ms",
        )

    def wait_for_stopped_animating(self) -> None:
        self._begin()
        self._stopped_animating()


class Clickable(Enableable, AnimationSettleable):
    """Click-style interactions, each gated on displayed, settled and enabled."""

    def _ready(self) -> Any:
        """
        Wait displayed, then settled, then enabled.

        Each stage is a named wait with the full ``wait_timeout_ms``, so one
        action can block for up to three times that budget.
        """
        self._displayed()
        self._stopped_animating()
        element, _ = self._enabled()
        self.state = ComponentState.READY
        return element

    def click(self) -> None:
        with allure.step(f"Click {self!r}"):
            element = self._ready()
            logger.info(f"Clicking {self!r}")
            self.driver.perform(element, Action.CLICK)

    def double_click(self) -> None:
        with allure.step(f"Double-click {self!r}"):
            element = self._ready()
            self.driver.perform(element, Action.DOUBLE_CLICK)

    def hover(self) -> None:
        with allure.step(f"Hover {self!r}"):
            element = self._ready()
            self.driver.perform(element, Action.HOVER)


class Component(Displayable, Locatable):
    """
    Base for all concrete component kinds.

    Subclasses declare their rule:

        class SaveButton(Button):
            @classmethod
            def rules(cls, rule):
                super().rules(rule)
                rule.id().equals("save")
    """


__all__ = [
    "AnimationSettleable",
    "Clickable",
    "Component",
    "ComponentState",
    "Displayable",
    "Enableable",
    "Locatable",
    "RuleValidated",
    "Scoped",
    "resolve_matches",
]
