"""
================================================================================
Component Collection
================================================================================

An ordered group of sibling components sharing one locator template.

The DOM is enumerated again on every call; nothing is cached between calls.
Items are addressed by position among the elements that match both the
template and the item type's rule, in document order.

Usage:
    class ResultsTable(Component):
        rows = components(css.descendant("tr", css_classes("data")), ResultRow)

    table.rows.at(0).text()
    table.rows.by_key("Tokyo").click()
    [row.key() for row in table.rows]

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Callable, Generic, Iterator, List, Optional, Type, TypeVar, Union

from loguru import logger

from pomkit.exceptions import (
    ComponentCreationError,
    ElementNotFoundError,
    EntryNotFoundError,
    PomkitError,
)
from pomkit.framework.component import Component, Scoped, resolve_matches
from pomkit.framework.locator import LocatorNode


T = TypeVar("T", bound=Component)


class ComponentCollection(Generic[T]):
    """
    Lazily enumerated components of one type.

    Subclasses may fix the item type with the ``item_type`` class attribute.
    """

    item_type: Optional[Type[Component]] = None

    def __init__(
        self,
        locator: LocatorNode,
        scope: Scoped,
        name: Optional[str] = None,
        item_type: Optional[Type[T]] = None,
    ):
        item_type = item_type or self.item_type
        if item_type is None or not (isinstance(item_type, type) and issubclass(item_type, Component)):
            raise ComponentCreationError(
                f"{type(self).__name__} needs a Component item type, got {item_type!r}"
            )
        self.locator = locator
        self.scope = scope
        self.name = name
        self.item_type = item_type
        self.driver = scope.driver
        self.config = scope.config

    def __repr__(self) -> str:
        return f"{type(self).__name__}[{self.item_type.__name__}]({self.name or self.locator})"

    # --------------------------------------------------------
    # Enumeration
    # --------------------------------------------------------

    def size(self) -> int:
        """Number of matching items right now."""
        self.scope._settle_as_scope()
        scope_element = self.scope._scope_element_once()
        try:
            matches, _ = resolve_matches(
                self.driver, scope_element, self.locator, self.item_type.component_rule()
            )
        except ElementNotFoundError:
            return 0
        return len(matches)

    def _item(self, index: int) -> T:
        label = f"{self.name or self.item_type.__name__}[{index}]"
        try:
            return self.item_type(self.locator, scope=self.scope, name=label, index=index)
        except PomkitError:
            raise
        except Exception as e:
            raise ComponentCreationError(f"Unable to create {self.item_type.__name__}: {e}") from e

    def all(self) -> Iterator[T]:
        """
        Yield every item in document order.

        The count is taken when iteration starts; call again to re-query.
        """
        count = self.size()
        logger.debug(f"{self!r} enumerated {count} item(s)")
        for index in range(count):
            yield self._item(index)

    def __iter__(self) -> Iterator[T]:
        return self.all()

    def __len__(self) -> int:
        return self.size()

    def __getitem__(self, lookup: Union[int, str]) -> T:
        if isinstance(lookup, int):
            return self.at(lookup)
        return self.by_key(lookup)

    # --------------------------------------------------------
    # Lookups
    # --------------------------------------------------------

    def at(self, index: int) -> T:
        """
        Item at ``index`` (negative counts from the end).

        Raises:
            EntryNotFoundError: If the index is out of range right now.
        """
        count = self.size()
        position = index + count if index < 0 else index
        if not 0 <= position < count:
            raise EntryNotFoundError(index=index)
        return self._item(position)

    def by_key(self, key: str) -> T:
        """
        First item whose ``key()`` equals ``key``.

        Keys are computed one item at a time, in document order, stopping at
        the first match.

        Raises:
            EntryNotFoundError: If no item has that key.
        """
        for item in self.all():
            if item.key() == key:
                return item
        raise EntryNotFoundError(key=key)

    def first(self) -> T:
        return self.at(0)

    def last(self) -> T:
        return self.at(-1)

    def is_empty(self) -> bool:
        return self.size() == 0

    def contains_key(self, key: str) -> bool:
        return any(item.key() == key for item in self.all())

    def keys(self) -> List[str]:
        return [item.key() for item in self.all()]

    def texts(self) -> List[str]:
        return [item.text() for item in self.all()]

    def filter(self, predicate: Callable[[T], bool]) -> List[T]:
        return [item for item in self.all() if predicate(item)]


__all__ = [
    "ComponentCollection",
]
