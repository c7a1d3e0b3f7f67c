"""
================================================================================
Component Declarations
================================================================================

Class-level factories that bind a locator and a component kind to an owner
(page, frame content, dialog or any other component):

    component(locator, Kind)              one component
    components(locator, Kind)             ComponentCollection of Kind
    frame(locator, ContentType)           Frame whose document is ContentType
    dialog(locator, DialogKind)           Dialog scope container

Each factory returns a descriptor. Reading it from an owner instance builds
the child once (through ``owner.child``) and keeps it on the instance; the
child itself still resolves its element again on every operation.

Usage:
    class SearchPage(BasePage):
        query = component(css.descendant("input", by_name("q")), Textbox)
        results = components(css.descendant("li", css_classes("result")), ResultItem)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, Generic, Optional, Type, TypeVar

from pomkit.exceptions import ComponentCreationError
from pomkit.framework.collection import ComponentCollection
from pomkit.framework.component import Locatable
from pomkit.framework.locator import LocatorNode
from pomkit.framework.scope import Dialog, Frame, FrameContent


C = TypeVar("C")


class ComponentField(Generic[C]):
    """Descriptor created by the declaration factories."""

    def __init__(self, locator: LocatorNode, kind: Type[C], **options: Any):
        if not isinstance(locator, LocatorNode):
            raise ComponentCreationError(f"Expected a LocatorNode, got {locator!r}")
        self.locator = locator
        self.kind = kind
        self.options: Dict[str, Any] = options
        self.name: Optional[str] = None

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name}: {self.kind.__name__} at {self.locator})"

    def __get__(self, instance: Any, owner: type) -> Any:
        if instance is None:
            return self
        built = instance.child(self.locator, self.kind, name=self.name, **self.options)
        # Non-data descriptor: the instance attribute shadows it from now on
        instance.__dict__[self.name] = built
        return built


def _require_subclass(kind: Any, base: type, factory: str) -> None:
    if not (isinstance(kind, type) and issubclass(kind, base)):
        raise ComponentCreationError(f"{factory}() needs a {base.__name__} subclass, got {kind!r}")


def component(locator: LocatorNode, kind: Type[C]) -> C:
    """Declare a single child component."""
    _require_subclass(kind, Locatable, "component")
    return ComponentField(locator, kind)  # type: ignore[return-value]


def components(
    locator: LocatorNode,
    kind: Type[C],
    collection: Type[ComponentCollection] = ComponentCollection,
) -> ComponentCollection[C]:
    """
    Declare a collection of child components sharing ``locator``.

    Args:
        locator: Template matching every item
        kind: Item component type
        collection: ComponentCollection subclass to build (e.g. RadioButtonGroup)
    """
    _require_subclass(kind, Locatable, "components")
    _require_subclass(collection, ComponentCollection, "components")
    return ComponentField(locator, collection, item_type=kind)  # type: ignore[return-value]


def frame(
    locator: LocatorNode,
    content_type: Type[FrameContent] = FrameContent,
    kind: Type[Frame] = Frame,
) -> Frame:
    """Declare a frame whose document is described by ``content_type``."""
    _require_subclass(content_type, FrameContent, "frame")
    _require_subclass(kind, Frame, "frame")
    return ComponentField(locator, kind, content_type=content_type)  # type: ignore[return-value]


def dialog(locator: LocatorNode, kind: Type[C] = Dialog) -> C:
    """Declare a dialog scope container."""
    _require_subclass(kind, Dialog, "dialog")
    return ComponentField(locator, kind)  # type: ignore[return-value]


__all__ = [
    "ComponentField",
    "component",
    "components",
    "dialog",
    "frame",
]
