"""
================================================================================
Locator Algebra
================================================================================

Immutable, composable element-location expressions.

A locator is a chain of LocatorNode values. Each node holds a combinator
(how it relates to the node before it), an optional tag and an ordered set of
predicates. Chains are built once, at page-object definition time, and
shared freely; every method returns a new node.

Features:
    - CSS and XPath rendering from the same tree
    - Per-node dialect choice (XPath only where CSS cannot express the step)
    - Relative CSS anchored with :scope, so the scope element never matches a step
    - Safe literal quoting for both dialects
    - Validation at construction time

Usage:
    from pomkit.framework.locator import css, xpath, by_id, css_classes, attr

    SUBMIT = css.descendant("form", by_id("login")).child("button", by_type("submit"))
    ROWS = css.descendant("table").descendant("tr", css_classes("data"))
    LABEL_FOR = xpath.descendant("input", by_id("name")).preceding_sibling("label")

    str(SUBMIT)  # "css=:scope form#login > button[type='submit']"

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import cached_property
from typing import Optional, Tuple, Union

from pomkit.exceptions import SelectorError


_TAG_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_.-]*$")
_ATTRIBUTE_PATTERN = re.compile(r"^[A-Za-z_:][A-Za-z0-9_:.-]*$")


class Dialect(str, Enum):
    """Query language a compiled locator is written in."""
    CSS = "css"
    XPATH = "xpath"


class Combinator(str, Enum):
    """Relation between a node and the node before it (or the scope, at the root)."""
    PAGE = "page"
    DESCENDANT = "descendant"
    CHILD = "child"
    NEXT_SIBLING = "next-sibling"
    SIBLING = "sibling"
    FOLLOWING = "following"
    PRECEDING = "preceding"
    PRECEDING_SIBLING = "preceding-sibling"
    PARENT = "parent"


_XPATH_AXES = {
    Combinator.PAGE: "/descendant::",
    Combinator.DESCENDANT: "/descendant::",
    Combinator.CHILD: "/child::",
    Combinator.NEXT_SIBLING: "/following-sibling::",
    Combinator.SIBLING: "/following-sibling::",
    Combinator.FOLLOWING: "/following::",
    Combinator.PRECEDING: "/preceding::",
    Combinator.PRECEDING_SIBLING: "/preceding-sibling::",
    Combinator.PARENT: "/parent::",
}

_CSS_COMBINATORS = {
    Combinator.DESCENDANT: " ",
    Combinator.CHILD: " > ",
    Combinator.NEXT_SIBLING: " + ",
    Combinator.SIBLING: " ~ ",
}

# Combinators CSS can express relative to the query scope
_CSS_ROOT_COMBINATORS = (Combinator.PAGE, Combinator.DESCENDANT, Combinator.CHILD)

# Anchors relative CSS to the scope element so the scope itself never matches a step
SCOPE_PSEUDO = ":scope"

# Steps allowed without a tag or predicate
_UNRESTRICTED_OK = (Combinator.NEXT_SIBLING, Combinator.PARENT)


# ============================================================
# Literal quoting
# ============================================================

def _xpath_literal(value: str) -> str:
    """Quote a string for XPath 1.0, falling back to concat() for mixed quotes."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{part}'" for part in parts) + ")"


def _css_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\a ")
    return f"'{escaped}'"


def _css_ident(value: str) -> str:
    """Escape a value for use as a CSS identifier (#id, .class)."""
    out = []
    for i, ch in enumerate(value):
        leading_digit = ch.isdigit() and (i == 0 or (i == 1 and value[0] == "-"))
        if leading_digit:
            out.append(f"\\3{ch} ")
        elif ch.isalnum() or ch in "-_" or ord(ch) > 127:
            out.append(ch)
        else:
            out.append("\\" + ch)
    return "".join(out)


def _check_token(kind: str, value: str) -> str:
    if not value:
        raise SelectorError(f"{kind} must not be empty")
    if any(ch.isspace() for ch in value):
        raise SelectorError(f"{kind} must not contain whitespace: '{value}'")
    return value


# ============================================================
# Predicates
# ============================================================

class Predicate:
    """
    A condition on a single locator step.

    Subclasses are frozen dataclasses. ``css()`` returns None when the
    condition has no CSS form; ``xpath()`` always returns the bracket body.
    """

    negated: bool

    def css(self) -> Optional[str]:
        raise NotImplementedError

    def xpath(self, tag: str) -> str:
        raise NotImplementedError

    def negate(self) -> "Predicate":
        return replace(self, negated=not self.negated)

    def _wrap_css(self, selector: str) -> str:
        return f":not({selector})" if self.negated else selector

    def _wrap_xpath(self, expression: str) -> str:
        return f"not({expression})" if self.negated else expression


class AttributeOperator(str, Enum):
    EQUALS = "equals"
    PRESENT = "present"
    CONTAINS = "contains"
    STARTS_WITH = "starts-with"
    ENDS_WITH = "ends-with"
    WHOLE_WORD = "whole-word"
    CONTAINS_ALL_OF = "contains-all-of"


@dataclass(frozen=True)
class AttributePredicate(Predicate):
    """
    Condition on one attribute.

    ``value`` is a string, or a tuple of class names for CONTAINS_ALL_OF.
    """
    attribute: str
    operator: AttributeOperator
    value: Union[str, Tuple[str, ...], None] = None
    negated: bool = False

    def css(self) -> Optional[str]:
        op = self.operator
        if op is AttributeOperator.CONTAINS_ALL_OF:
            classes = "".join(f".{_css_ident(name)}" for name in self.value)
            if self.negated and len(self.value) > 1:
                # :not() over a compound selector is not portable
                return None
            return self._wrap_css(classes)
        if op is AttributeOperator.EQUALS and self.attribute == "id":
            return self._wrap_css(f"#{_css_ident(self.value)}")
        if op is AttributeOperator.PRESENT:
            return self._wrap_css(f"[{self.attribute}]")
        symbol = {
            AttributeOperator.EQUALS: "=",
            AttributeOperator.CONTAINS: "*=",
            AttributeOperator.STARTS_WITH: "^=",
            AttributeOperator.ENDS_WITH: "$=",
            AttributeOperator.WHOLE_WORD: "~=",
        }[op]
        return self._wrap_css(f"[{self.attribute}{symbol}{_css_string(self.value)}]")

    def xpath(self, tag: str) -> str:
        return self._wrap_xpath(_string_condition(f"@{self.attribute}", self.operator, self.value))


class TextOperator(str, Enum):
    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "starts-with"
    ENDS_WITH = "ends-with"
    WHOLE_WORD = "whole-word"


@dataclass(frozen=True)
class TextPredicate(Predicate):
    """Condition on an element's own text nodes. XPath only."""
    operator: TextOperator
    value: str
    negated: bool = False

    def css(self) -> Optional[str]:
        return None

    def xpath(self, tag: str) -> str:
        return self._wrap_xpath(
            _string_condition("text()", AttributeOperator(self.operator.value), self.value)
        )


def _string_condition(subject: str, operator: AttributeOperator, value) -> str:
    if operator is AttributeOperator.PRESENT:
        return subject
    if operator is AttributeOperator.CONTAINS_ALL_OF:
        return " and ".join(
            f"contains(concat(' ', normalize-space({subject}), ' '), {_xpath_literal(f' {name} ')})"
            for name in value
        )
    literal = _xpath_literal(value)
    if operator is AttributeOperator.EQUALS:
        return f"{subject}={literal}"
    if operator is AttributeOperator.CONTAINS:
        return f"contains({subject}, {literal})"
    if operator is AttributeOperator.STARTS_WITH:
        return f"starts-with({subject}, {literal})"
    if operator is AttributeOperator.ENDS_WITH:
        return (
            f"substring({subject}, string-length({subject}) - string-length({literal}) + 1)"
            f" = {literal}"
        )
    # whole word
    return f"contains(concat(' ', normalize-space({subject}), ' '), {_xpath_literal(f' {value} ')})"


class Position(str, Enum):
    INDEX = "index"
    FIRST = "first"
    LAST = "last"


@dataclass(frozen=True)
class PositionPredicate(Predicate):
    """Position among the matches of a step. XPath only; index is 0-based."""
    kind: Position
    index: int = 0
    negated: bool = False

    def css(self) -> Optional[str]:
        return None

    def xpath(self, tag: str) -> str:
        if self.kind is Position.LAST:
            expression = "position()=last()"
        else:
            expression = f"position()={self.index + 1}"
        return self._wrap_xpath(expression)


class Structure(str, Enum):
    NTH_CHILD = "nth-child"
    FIRST_CHILD = "first-child"
    LAST_CHILD = "last-child"
    NTH_OF_TYPE = "nth-of-type"
    FIRST_OF_TYPE = "first-of-type"
    LAST_OF_TYPE = "last-of-type"


@dataclass(frozen=True)
class StructuralPredicate(Predicate):
    """Position among siblings. Index is 0-based."""
    kind: Structure
    index: int = 0
    negated: bool = False

    @property
    def needs_tag(self) -> bool:
        return self.kind in (Structure.NTH_OF_TYPE, Structure.FIRST_OF_TYPE, Structure.LAST_OF_TYPE)

    def css(self) -> Optional[str]:
        if self.kind in (Structure.NTH_CHILD, Structure.NTH_OF_TYPE):
            return self._wrap_css(f":{self.kind.value}({self.index + 1})")
        return self._wrap_css(f":{self.kind.value}")

    def xpath(self, tag: str) -> str:
        siblings = tag if self.needs_tag else "*"
        if self.kind in (Structure.NTH_CHILD, Structure.NTH_OF_TYPE):
            expression = f"count(preceding-sibling::{siblings})={self.index}"
        elif self.kind in (Structure.FIRST_CHILD, Structure.FIRST_OF_TYPE):
            expression = f"not(preceding-sibling::{siblings})"
        else:
            expression = f"not(following-sibling::{siblings})"
        return self._wrap_xpath(expression)


# ============================================================
# Predicate factories
# ============================================================

class AttributeCondition:
    """Builder returned by ``attr(name)``."""

    def __init__(self, name: str):
        if not _ATTRIBUTE_PATTERN.match(name or ""):
            raise SelectorError(f"Invalid attribute name: '{name}'")
        self.name = name

    def equals(self, value: str) -> AttributePredicate:
        return AttributePredicate(self.name, AttributeOperator.EQUALS, value)

    def present(self) -> AttributePredicate:
        return AttributePredicate(self.name, AttributeOperator.PRESENT)

    def contains(self, value: str) -> AttributePredicate:
        return self._non_empty(AttributeOperator.CONTAINS, value)

    def starts_with(self, value: str) -> AttributePredicate:
        return self._non_empty(AttributeOperator.STARTS_WITH, value)

    def ends_with(self, value: str) -> AttributePredicate:
        return self._non_empty(AttributeOperator.ENDS_WITH, value)

    def whole_word(self, value: str) -> AttributePredicate:
        _check_token("Whole-word value", value)
        return AttributePredicate(self.name, AttributeOperator.WHOLE_WORD, value)

    def _non_empty(self, operator: AttributeOperator, value: str) -> AttributePredicate:
        if not value:
            raise SelectorError(f"'{operator.value}' on @{self.name} needs a non-empty value")
        return AttributePredicate(self.name, operator, value)


class TextCondition:
    """Builder returned by ``text()``."""

    def equals(self, value: str) -> TextPredicate:
        return TextPredicate(TextOperator.EQUALS, value)

    def contains(self, value: str) -> TextPredicate:
        return TextPredicate(TextOperator.CONTAINS, value)

    def starts_with(self, value: str) -> TextPredicate:
        return TextPredicate(TextOperator.STARTS_WITH, value)

    def ends_with(self, value: str) -> TextPredicate:
        return TextPredicate(TextOperator.ENDS_WITH, value)

    def whole_word(self, value: str) -> TextPredicate:
        return TextPredicate(TextOperator.WHOLE_WORD, _check_token("Whole-word text", value))


def attr(name: str) -> AttributeCondition:
    return AttributeCondition(name)


def by_id(value: str) -> AttributePredicate:
    return AttributePredicate("id", AttributeOperator.EQUALS, _check_token("Id", value))


def by_type(value: str) -> AttributePredicate:
    return attr("type").equals(value)


def by_name(value: str) -> AttributePredicate:
    return attr("name").equals(value)


def css_classes(*names: str) -> AttributePredicate:
    """Element carries every one of the given classes."""
    if not names:
        raise SelectorError("css_classes() needs at least one class name")
    for name in names:
        _check_token("Class name", name)
    return AttributePredicate("class", AttributeOperator.CONTAINS_ALL_OF, tuple(names))


def text() -> TextCondition:
    return TextCondition()


def at_index(index: int) -> PositionPredicate:
    if index < 0:
        raise SelectorError(f"Index must be >= 0, got {index}")
    return PositionPredicate(Position.INDEX, index)


def first() -> PositionPredicate:
    return PositionPredicate(Position.FIRST, 0)


def last() -> PositionPredicate:
    return PositionPredicate(Position.LAST)


def nth_child(index: int) -> StructuralPredicate:
    if index < 0:
        raise SelectorError(f"Index must be >= 0, got {index}")
    return StructuralPredicate(Structure.NTH_CHILD, index)


def first_child() -> StructuralPredicate:
    return StructuralPredicate(Structure.FIRST_CHILD)


def last_child() -> StructuralPredicate:
    return StructuralPredicate(Structure.LAST_CHILD)


def nth_of_type(index: int) -> StructuralPredicate:
    if index < 0:
        raise SelectorError(f"Index must be >= 0, got {index}")
    return StructuralPredicate(Structure.NTH_OF_TYPE, index)


def first_of_type() -> StructuralPredicate:
    return StructuralPredicate(Structure.FIRST_OF_TYPE)


def last_of_type() -> StructuralPredicate:
    return StructuralPredicate(Structure.LAST_OF_TYPE)


def not_(predicate: Predicate) -> Predicate:
    """Negate a predicate."""
    return predicate.negate()


# ============================================================
# Locator tree
# ============================================================

@dataclass(frozen=True)
class CompiledLocator:
    """
    A locator rendered to a query string.

    Attributes:
        expression: Query text in ``dialect``
        dialect: CSS or XPath
        absolute: Resolve from the document root instead of the scope element
    """
    expression: str
    dialect: Dialect
    absolute: bool = False

    @property
    def selector(self) -> str:
        """Selector in Playwright's engine-prefixed form."""
        return f"{self.dialect.value}={self.expression}"

    def __str__(self) -> str:
        return self.selector


LocatorArg = Union[str, Predicate]


def _split_args(args: Tuple[LocatorArg, ...]) -> Tuple[Optional[str], Tuple[Predicate, ...]]:
    tag: Optional[str] = None
    rest = args
    if args and isinstance(args[0], str):
        tag, rest = args[0], args[1:]
    for arg in rest:
        if not isinstance(arg, Predicate):
            raise SelectorError(f"Expected a predicate, got {arg!r}")
    # Ordered set: drop repeats, keep first position
    return tag, tuple(dict.fromkeys(rest))


@dataclass(frozen=True)
class LocatorNode:
    """
    One step of a locator chain.

    Compilation is a pure function of the chain: equal chains compile to
    equal expressions, and nodes can be shared between threads.
    """
    combinator: Combinator
    tag: Optional[str] = None
    predicates: Tuple[Predicate, ...] = ()
    parent: Optional["LocatorNode"] = field(default=None, repr=False)
    preferred: Dialect = Dialect.CSS
    raw: Optional[str] = None

    def __post_init__(self) -> None:
        if self.tag is not None:
            if self.tag in ("", "*"):
                object.__setattr__(self, "tag", None)
            elif not _TAG_PATTERN.match(self.tag):
                raise SelectorError(f"Invalid tag name: '{self.tag}'")
        if self.raw is not None:
            if not self.raw.strip():
                raise SelectorError("Raw selector must not be empty")
        elif (
            self.tag is None
            and not self.predicates
            and self.combinator not in _UNRESTRICTED_OK
        ):
            raise SelectorError(
                f"A '{self.combinator.value}' step needs a tag or a predicate; "
                "otherwise it would match every element"
            )
        for predicate in self.predicates:
            if isinstance(predicate, StructuralPredicate) and predicate.needs_tag and self.tag is None:
                raise SelectorError(f":{predicate.kind.value} needs a tag on the same step")
        # Surface dialect conflicts (raw CSS under an XPath-only step) at definition time
        _ = self.expression

    # --------------------------------------------------------
    # Composition
    # --------------------------------------------------------

    def _extend(self, combinator: Combinator, args: Tuple[LocatorArg, ...]) -> "LocatorNode":
        tag, predicates = _split_args(args)
        return LocatorNode(combinator, tag, predicates, parent=self, preferred=self.preferred)

    def descendant(self, *args: LocatorArg) -> "LocatorNode":
        return self._extend(Combinator.DESCENDANT, args)

    def child(self, *args: LocatorArg) -> "LocatorNode":
        return self._extend(Combinator.CHILD, args)

    def next_sibling(self, *args: LocatorArg) -> "LocatorNode":
        """The immediately following sibling, if it matches."""
        return self._extend(Combinator.NEXT_SIBLING, args)

    def sibling(self, *args: LocatorArg) -> "LocatorNode":
        """Any following sibling that matches."""
        return self._extend(Combinator.SIBLING, args)

    def following(self, *args: LocatorArg) -> "LocatorNode":
        return self._extend(Combinator.FOLLOWING, args)

    def preceding(self, *args: LocatorArg) -> "LocatorNode":
        return self._extend(Combinator.PRECEDING, args)

    def preceding_sibling(self, *args: LocatorArg) -> "LocatorNode":
        return self._extend(Combinator.PRECEDING_SIBLING, args)

    def parent_node(self, *args: LocatorArg) -> "LocatorNode":
        return self._extend(Combinator.PARENT, args)

    # --------------------------------------------------------
    # Dialect
    # --------------------------------------------------------

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def raw_dialect(self) -> Optional[Dialect]:
        return self.preferred if self.raw is not None else None

    @cached_property
    def css_capable(self) -> bool:
        """Whether this step alone can be written in CSS."""
        if self.raw is not None:
            return self.preferred is Dialect.CSS
        if self.is_root:
            allowed = self.combinator in _CSS_ROOT_COMBINATORS
        else:
            allowed = self.combinator in _CSS_COMBINATORS
        return allowed and all(p.css() is not None for p in self.predicates)

    @cached_property
    def dialect(self) -> Dialect:
        """CSS when the whole chain prefers and supports it, otherwise XPath."""
        if self.preferred is Dialect.XPATH or not self.css_capable:
            return Dialect.XPATH
        if self.parent is not None and self.parent.dialect is Dialect.XPATH:
            return Dialect.XPATH
        return Dialect.CSS

    @cached_property
    def absolute(self) -> bool:
        if self.parent is not None:
            return self.parent.absolute
        if self.raw is not None:
            return self.preferred is Dialect.XPATH and self.raw.lstrip().startswith(("/", "("))
        return self.combinator is Combinator.PAGE

    # --------------------------------------------------------
    # Compilation
    # --------------------------------------------------------

    @cached_property
    def expression(self) -> str:
        if self.dialect is Dialect.CSS:
            return self._css_text
        return self._xpath_text

    def compile(self) -> CompiledLocator:
        return CompiledLocator(self.expression, self.dialect, self.absolute)

    @cached_property
    def _css_text(self) -> str:
        if self.raw is not None:
            if self.raw.lstrip().startswith(SCOPE_PSEUDO):
                return self.raw.strip()
            return f"{SCOPE_PSEUDO} {self.raw.strip()}"
        clause = (self.tag or "") + "".join(p.css() for p in self.predicates)
        clause = clause or "*"
        if self.parent is None:
            if self.combinator is Combinator.PAGE:
                return clause
            return SCOPE_PSEUDO + _CSS_COMBINATORS[self.combinator] + clause
        return self.parent._css_text + _CSS_COMBINATORS[self.combinator] + clause

    @cached_property
    def _xpath_text(self) -> str:
        if self.raw is not None:
            if self.preferred is Dialect.CSS:
                raise SelectorError(
                    f"Raw CSS selector '{self.raw}' cannot be combined with an XPath-only step"
                )
            if self.absolute or self.raw.startswith("."):
                return self.raw
            return "./" + self.raw

        name = self.tag or "*"
        if self.combinator is Combinator.NEXT_SIBLING:
            step = "*[1]" + (f"[self::{self.tag}]" if self.tag else "")
        else:
            step = name
        step += "".join(f"[{p.xpath(name)}]" for p in self.predicates)
        step = _XPATH_AXES[self.combinator] + step

        if self.parent is None:
            return step if self.absolute else "." + step
        return self.parent._xpath_text + step

    def __str__(self) -> str:
        return self.compile().selector


# ============================================================
# Root builders
# ============================================================

class LocatorBuilder:
    """Entry point for a locator chain in a preferred dialect."""

    def __init__(self, dialect: Dialect):
        self._dialect = dialect

    def _root(self, combinator: Combinator, args: Tuple[LocatorArg, ...]) -> LocatorNode:
        tag, predicates = _split_args(args)
        return LocatorNode(combinator, tag, predicates, preferred=self._dialect)

    def descendant(self, *args: LocatorArg) -> LocatorNode:
        """Any descendant of the owning scope."""
        return self._root(Combinator.DESCENDANT, args)

    def child(self, *args: LocatorArg) -> LocatorNode:
        """A direct child of the owning scope."""
        return self._root(Combinator.CHILD, args)

    def page(self, *args: LocatorArg) -> LocatorNode:
        """Any element of the document, ignoring the owning scope."""
        return self._root(Combinator.PAGE, args)

    def raw(self, expression: str) -> LocatorNode:
        """A hand-written query used verbatim."""
        return LocatorNode(Combinator.DESCENDANT, raw=expression, preferred=self._dialect)


class XPathBuilder(LocatorBuilder):
    """XPath entry point; adds axes CSS cannot express from the scope."""

    def __init__(self):
        super().__init__(Dialect.XPATH)

    def next_sibling(self, *args: LocatorArg) -> LocatorNode:
        return self._root(Combinator.NEXT_SIBLING, args)

    def sibling(self, *args: LocatorArg) -> LocatorNode:
        return self._root(Combinator.SIBLING, args)

    def following(self, *args: LocatorArg) -> LocatorNode:
        return self._root(Combinator.FOLLOWING, args)

    def preceding(self, *args: LocatorArg) -> LocatorNode:
        return self._root(Combinator.PRECEDING, args)

    def preceding_sibling(self, *args: LocatorArg) -> LocatorNode:
        return self._root(Combinator.PRECEDING_SIBLING, args)

    def parent(self, *args: LocatorArg) -> LocatorNode:
        return self._root(Combinator.PARENT, args)


css = LocatorBuilder(Dialect.CSS)
xpath = XPathBuilder()


__all__ = [
    "Dialect",
    "Combinator",
    "Predicate",
    "AttributePredicate",
    "AttributeOperator",
    "TextPredicate",
    "PositionPredicate",
    "StructuralPredicate",
    "CompiledLocator",
    "SCOPE_PSEUDO",
    "LocatorNode",
    "LocatorBuilder",
    "XPathBuilder",
    "css",
    "xpath",
    "attr",
    "by_id",
    "by_type",
    "by_name",
    "css_classes",
    "text",
    "at_index",
    "first",
    "last",
    "nth_child",
    "first_child",
    "last_child",
    "nth_of_type",
    "first_of_type",
    "last_of_type",
    "not_",
]
