"""
================================================================================
Component Rule
================================================================================

Structural rules a candidate element must satisfy to count as a given
component type. Rules are declared once per component class through the
``rules(rule)`` hook and evaluated against ElementFacts read from the driver.

Validation is conjunctive: every declared facet must hold. Facets that are
not declared are unconstrained.

Usage:
    class Textbox(Component):
        @classmethod
        def rules(cls, rule: RuleBuilder) -> None:
            rule.tag().one_of("input", "textarea")
            rule.for_tag("input").type().one_of("text", "password", "email")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from pomkit.exceptions import ComponentRulesError
from pomkit.framework.driver import ElementFacts


@dataclass(frozen=True)
class FacetCheck:
    """
    One declared expectation.

    Attributes:
        facet: Human-readable facet name (e.g. "tag", "attribute 'type'")
        description: Expectation text (e.g. "is 'div'")
        test: Returns True when the facts satisfy the expectation
        actual: Extracts the observed value for error messages
        only_for_tag: Skip the check unless the candidate has this tag
    """
    facet: str
    description: str
    test: Callable[[ElementFacts], bool]
    actual: Callable[[ElementFacts], Any]
    only_for_tag: Optional[str] = None

    def violation(self, facts: ElementFacts) -> Optional[str]:
        if self.only_for_tag and facts.tag != self.only_for_tag:
            return None
        if self.test(facts):
            return None
        return (
            f"Expected that {self.facet} {self.description}, but it is not. "
            f"(actual: {self.actual(facts)!r})"
        )


class ComponentRule:
    """An immutable, conjunctive set of facet checks."""

    def __init__(self, checks: List[FacetCheck], accepts_any: bool = False):
        self._checks = tuple(checks)
        self.accepts_any = accepts_any

    @classmethod
    def build(cls, populate: Callable[["RuleBuilder"], None]) -> "ComponentRule":
        """
        Run a ``rules`` hook against a fresh builder.

        Raises:
            ComponentRulesError: If the hook declared nothing.
        """
        builder = RuleBuilder()
        populate(builder)
        if not builder.checks and not builder.accepts_any:
            raise ComponentRulesError(
                "No rules were declared. Use rule.any() to accept any element."
            )
        return cls(builder.checks, builder.accepts_any)

    @property
    def checks(self) -> tuple:
        return self._checks

    def validate(self, facts: ElementFacts) -> List[str]:
        """Return every violated expectation; an empty list means the element is accepted."""
        violations = []
        for check in self._checks:
            message = check.violation(facts)
            if message:
                violations.append(message)
        return violations

    def is_satisfied_by(self, facts: ElementFacts) -> bool:
        return all(check.violation(facts) is None for check in self._checks)

    def __repr__(self) -> str:
        if self.accepts_any and not self._checks:
            return "ComponentRule(any)"
        parts = ", ".join(f"{c.facet} {c.description}" for c in self._checks)
        return f"ComponentRule({parts})"


# ============================================================
# Builders
# ============================================================

class RuleBuilder:
    """Collects facet checks passed to a component's ``rules`` hook."""

    def __init__(self, checks: Optional[List[FacetCheck]] = None, only_for_tag: Optional[str] = None):
        self.checks: List[FacetCheck] = checks if checks is not None else []
        self._only_for_tag = only_for_tag
        self._any = [False]

    @property
    def accepts_any(self) -> bool:
        return self._any[0]

    def any(self) -> None:
        """Accept any element."""
        self._any[0] = True

    def for_tag(self, tag: str) -> "RuleBuilder":
        """Facets declared on the returned builder only apply to elements with ``tag``."""
        scoped = RuleBuilder(self.checks, tag.lower())
        scoped._any = self._any
        return scoped

    def tag(self) -> "AttributeRule":
        return AttributeRule(self, "tag", lambda f: f.tag, normalize=str.lower)

    def attr(self, name: str) -> "AttributeRule":
        return AttributeRule(self, f"attribute '{name}'", lambda f: f.attributes.get(name))

    def id(self) -> "AttributeRule":
        return self.attr("id")

    def type(self) -> "AttributeRule":
        return self.attr("type")

    def name(self) -> "AttributeRule":
        return self.attr("name")

    def href(self) -> "AttributeRule":
        return self.attr("href")

    def title(self) -> "AttributeRule":
        return self.attr("title")

    def css_classes(self) -> "CssClassRule":
        return CssClassRule(self)

    def _add(self, facet: str, description: str, test, actual) -> None:
        self.checks.append(FacetCheck(facet, description, test, actual, self._only_for_tag))


class AttributeRule:
    """Conditions on a single string-valued facet (tag or attribute)."""

    def __init__(
        self,
        builder: RuleBuilder,
        facet: str,
        getter: Callable[[ElementFacts], Optional[str]],
        normalize: Callable[[str], str] = lambda v: v,
    ):
        self._builder = builder
        self._facet = facet
        self._get = getter
        self._normalize = normalize

    def _declare(self, description: str, test: Callable[[Optional[str]], bool]) -> None:
        getter = self._get
        self._builder._add(self._facet, description, lambda f: test(getter(f)), getter)

    def present(self) -> None:
        self._declare("is present", lambda v: v is not None)

    def absent(self) -> None:
        self._declare("is absent", lambda v: v is None)

    def equals(self, expected: str) -> None:
        expected = self._normalize(expected)
        self._declare(f"is '{expected}'", lambda v: v == expected)

    def not_equals(self, expected: str) -> None:
        expected = self._normalize(expected)
        self._declare(f"is not '{expected}'", lambda v: v != expected)

    def one_of(self, *expected: str, allow_absent: bool = False) -> None:
        options = tuple(self._normalize(e) for e in expected)
        description = f"is one of {list(options)}" + (" or absent" if allow_absent else "")
        self._declare(description, lambda v: v in options or (allow_absent and v is None))

    def contains(self, fragment: str) -> None:
        self._declare(f"contains '{fragment}'", lambda v: v is not None and fragment in v)

    def not_contains(self, fragment: str) -> None:
        self._declare(f"does not contain '{fragment}'", lambda v: v is None or fragment not in v)

    def starts_with(self, prefix: str) -> None:
        self._declare(f"starts with '{prefix}'", lambda v: v is not None and v.startswith(prefix))

    def ends_with(self, suffix: str) -> None:
        self._declare(f"ends with '{suffix}'", lambda v: v is not None and v.endswith(suffix))

    def matches(self, pattern: str) -> None:
        """The whole value matches a regular expression."""
        compiled = re.compile(pattern)
        self._declare(
            f"matches /{pattern}/",
            lambda v: v is not None and compiled.fullmatch(v) is not None,
        )


class CssClassRule:
    """Conditions on the element's class list."""

    def __init__(self, builder: RuleBuilder):
        self._builder = builder

    @staticmethod
    def _classes(facts: ElementFacts):
        return facts.css_classes

    def _declare(self, description: str, test: Callable[[tuple], bool]) -> None:
        self._builder._add("css classes", description, lambda f: test(f.css_classes), self._classes)

    def present(self) -> None:
        self._builder._add(
            "class attribute",
            "is present",
            lambda f: "class" in f.attributes,
            lambda f: f.attributes.get("class"),
        )

    def absent(self) -> None:
        self._builder._add(
            "class attribute",
            "is absent",
            lambda f: "class" not in f.attributes,
            lambda f: f.attributes.get("class"),
        )

    def has(self, name: str) -> None:
        self._declare(f"include '{name}'", lambda classes: name in classes)

    def lacks(self, name: str) -> None:
        self._declare(f"do not include '{name}'", lambda classes: name not in classes)

    def has_all_of(self, *names: str) -> None:
        self._declare(f"include all of {list(names)}", lambda classes: all(n in classes for n in names))

    def has_any_of(self, *names: str) -> None:
        self._declare(f"include any of {list(names)}", lambda classes: any(n in classes for n in names))

    def has_none_of(self, *names: str) -> None:
        self._declare(
            f"include none of {list(names)}",
            lambda classes: not any(n in classes for n in names),
        )


__all__ = [
    "ComponentRule",
    "FacetCheck",
    "RuleBuilder",
    "AttributeRule",
    "CssClassRule",
]
