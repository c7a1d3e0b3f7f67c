"""
================================================================================
Pomkit Exceptions
================================================================================

Failure taxonomy for component resolution and synchronization.

Every error is terminal for the current test step. The only errors a wait
treats as "not yet" are the TransientLookupError family; everything else
propagates as soon as it is raised.

Hierarchy:
    PomkitError
    ├── ConfigError
    ├── SelectorError
    ├── ComponentRulesError
    ├── DriverError
    ├── TransientLookupError
    │   ├── ElementNotFoundError
    │   └── StaleElementError
    ├── EntryNotFoundError
    ├── WaitTimeoutError
    │   ├── ComponentNotDisplayedError
    │   ├── ComponentNotEnabledError
    │   └── ComponentAnimatingError
    ├── ComponentCreationError
    ├── PageCreationError
    ├── UnexpectedPageError
    └── ScopeError

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import List, Optional, Union


class PomkitError(Exception):
    """Base class for all framework errors."""
    pass


class ConfigError(PomkitError):
    """Raised when configuration cannot be loaded or holds an invalid value."""
    pass


class SelectorError(PomkitError):
    """Raised when a locator is built from values that cannot form a valid query."""
    pass


class ComponentRulesError(PomkitError):
    """Raised when a component type declares an unusable rule set."""
    pass


class DriverError(PomkitError):
    """Raised when the browser driver fails for a reason other than a lookup miss."""
    pass


# ============================================================
# Transient lookup failures (retried by the wait engine)
# ============================================================

class TransientLookupError(PomkitError):
    """A lookup that may succeed if tried again later."""
    pass


class ElementNotFoundError(TransientLookupError):
    """
    Raised when a locator and rule matched zero elements.

    Attributes:
        expression: The compiled locator expression that was queried
        violations: Rule violations of the first rejected candidate, if any
    """

    def __init__(
        self,
        message: str,
        expression: Optional[str] = None,
        violations: Optional[List[str]] = None,
    ):
        self.expression = expression
        self.violations = list(violations or [])
        details = message
        if expression:
            details = f"{details} (locator: {expression})"
        if self.violations:
            details = f"{details}; " + "; ".join(self.violations)
        super().__init__(details)


class StaleElementError(TransientLookupError):
    """Raised when an element reference is no longer attached to the document."""
    pass


# ============================================================
# Collection lookups
# ============================================================

class EntryNotFoundError(PomkitError):
    """
    Raised when a collection has no entry for a key or index.

    Attributes:
        key: The key that was looked up, or None for index lookups
        index: The index that was looked up, or None for key lookups
    """

    def __init__(self, key: Optional[str] = None, index: Optional[int] = None):
        self.key = key
        self.index = index
        if index is not None:
            message = f"Unable to find entry with index: {index}"
        else:
            message = f"Unable to find entry with key: {key}"
        super().__init__(message)

    @property
    def lookup(self) -> Union[str, int, None]:
        """The key or index that was not found."""
        return self.index if self.index is not None else self.key


# ============================================================
# Timeouts
# ============================================================

class WaitTimeoutError(PomkitError):
    """
    Raised when a bounded wait exhausts its time budget.

    The last transient failure observed while polling, if any, is chained
    as ``__cause__``.

    Attributes:
        timeout_ms: The configured budget in milliseconds
    """

    def __init__(self, timeout_ms: int, message: Optional[str] = None):
        self.timeout_ms = timeout_ms
        super().__init__(
            message
            or "Wait time-out: The condition was not met within the wait "
            f"duration limit of {timeout_ms} milliseconds"
        )


class ComponentNotDisplayedError(WaitTimeoutError):
    """Raised when a component never became visible within the timeout."""
    pass


class ComponentNotEnabledError(WaitTimeoutError):
    """Raised when a component never became interactable within the timeout."""
    pass


class ComponentAnimatingError(WaitTimeoutError):
    """Raised when a component's geometry never settled within the timeout."""
    pass


# ============================================================
# Construction
# ============================================================

class ComponentCreationError(PomkitError):
    """Raised when a declared component type cannot be instantiated."""
    pass


class PageCreationError(PomkitError):
    """Raised when a page type cannot be instantiated."""
    pass


class UnexpectedPageError(PomkitError):
    """Raised when the browser is not showing the page that was expected."""
    pass


class ScopeError(PomkitError):
    """Raised when frame content is used outside of its frame."""
    pass


__all__ = [
    "PomkitError",
    "ConfigError",
    "SelectorError",
    "ComponentRulesError",
    "DriverError",
    "TransientLookupError",
    "ElementNotFoundError",
    "StaleElementError",
    "EntryNotFoundError",
    "WaitTimeoutError",
    "ComponentNotDisplayedError",
    "ComponentNotEnabledError",
    "ComponentAnimatingError",
    "ComponentCreationError",
    "PageCreationError",
    "UnexpectedPageError",
    "ScopeError",
]
