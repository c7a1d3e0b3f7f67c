"""
================================================================================
Pomkit Framework
================================================================================

Page-object UI automation core.

Components:
    - locator: Locator composition algebra (css / xpath builders, predicates)
    - component_rule: Structural rules a resolved element must satisfy
    - wait_helpers: Bounded polling primitive
    - component: Capability mixins and component lifecycle
    - components: Concrete component kinds (Button, Textbox, ...)
    - collection: ComponentCollection
    - scope: Frame / FrameContent / Dialog scope containers
    - declarations: component / components / frame / dialog factories
    - page_base: BasePage root scope and open_page
    - driver: Driver boundary and Playwright implementation
    - browser_manager: Browser lifecycle management

Author: Automation Team
License: MIT
================================================================================
"""

from .browser_manager import BrowserManager
from .collection import ComponentCollection
from .component import Component, ComponentState
from .component_rule import ComponentRule, RuleBuilder
from .components import (
    Button,
    Checkbox,
    Dropdown,
    GenericComponent,
    Image,
    Link,
    MultiSelect,
    Option,
    RadioButton,
    RadioButtonGroup,
    Textbox,
)
from .declarations import component, components, dialog, frame
from .driver import Action, BoundingBox, Driver, ElementFacts, PlaywrightDriver
from .locator import (
    attr,
    at_index,
    by_id,
    by_name,
    by_type,
    css,
    css_classes,
    first,
    first_child,
    first_of_type,
    last,
    last_child,
    last_of_type,
    not_,
    nth_child,
    nth_of_type,
    text,
    xpath,
)
from .page_base import BasePage, open_page
from .scope import Dialog, Frame, FrameContent
from .wait_helpers import poll_until, wait_until

__all__ = [
    "Action",
    "BasePage",
    "BoundingBox",
    "BrowserManager",
    "Button",
    "Checkbox",
    "Component",
    "ComponentCollection",
    "ComponentRule",
    "ComponentState",
    "Dialog",
    "Driver",
    "Dropdown",
    "ElementFacts",
    "Frame",
    "FrameContent",
    "GenericComponent",
    "Image",
    "Link",
    "MultiSelect",
    "Option",
    "PlaywrightDriver",
    "RadioButton",
    "RadioButtonGroup",
    "RuleBuilder",
    "Textbox",
    "at_index",
    "attr",
    "by_id",
    "by_name",
    "by_type",
    "component",
    "components",
    "css",
    "css_classes",
    "dialog",
    "first",
    "first_child",
    "first_of_type",
    "frame",
    "last",
    "last_child",
    "last_of_type",
    "not_",
    "nth_child",
    "nth_of_type",
    "open_page",
    "poll_until",
    "text",
    "wait_until",
    "xpath",
]
