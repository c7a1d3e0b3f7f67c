"""
================================================================================
Concrete Component Kinds
================================================================================

Ready-made component types for common HTML controls. Each declares the rule
an element must satisfy and the interactions that make sense for it.

    GenericComponent   any element
    Button             <button>, <input type=button|submit|reset>
    Link               <a>
    Textbox            <textarea>, text-like <input>
    Checkbox           <input type=checkbox>
    RadioButton        <input type=radio>
    RadioButtonGroup   collection of RadioButton
    Image              <img>
    Option             <option>
    Dropdown           <select> (single)
    MultiSelect        <select multiple>

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import List, Optional

import allure
from loguru import logger

from pomkit.framework.collection import ComponentCollection
from pomkit.framework.component import Clickable, Component
from pomkit.framework.component_rule import RuleBuilder
from pomkit.framework.driver import Action
from pomkit.framework.locator import css, xpath


TEXT_INPUT_TYPES = ("text", "password", "email", "tel", "search", "number", "hidden", "url")
BUTTON_INPUT_TYPES = ("button", "submit", "reset")


class GenericComponent(Clickable, Component):
    """Any element. Use for containers, labels and rows without a dedicated kind."""

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.any()


class Button(Clickable, Component):

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().one_of("button", "input")
        rule.for_tag("input").type().one_of(*BUTTON_INPUT_TYPES)

    def text(self) -> str:
        facts = self.facts()
        if facts.tag == "input":
            return (facts.value or "").strip()
        return facts.text.strip()


class Link(Clickable, Component):

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().equals("a")

    def href(self) -> Optional[str]:
        return self.attribute("href")


class Textbox(Clickable, Component):
    """Single- or multi-line text entry."""

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().one_of("input", "textarea")
        rule.for_tag("input").type().one_of(*TEXT_INPUT_TYPES, allow_absent=True)

    def value(self) -> str:
        return self.facts().value or ""

    def is_read_only(self) -> bool:
        return self.attribute("readonly") is not None

    def clear(self) -> None:
        with allure.step(f"Clear {self!r}"):
            element = self._ready()
            self.driver.perform(element, Action.CLEAR)

    def enter_text(self, text: str) -> None:
        """Replace the current value: clear, focus, then type."""
        shown = "*" * len(text) if self.attribute("type") == "password" else text
        with allure.step(f"Enter '{shown}' into {self!r}"):
            element = self._ready()
            logger.info(f"Entering text into {self!r}: {shown}")
            self.driver.perform(element, Action.CLEAR)
            self.driver.perform(element, Action.CLICK)
            self.driver.perform(element, Action.TYPE, text)


class _Selectable(Clickable, Component):
    """Checkable inputs. Their text is the text of the enclosing element (usually a label)."""

    def is_selected(self) -> bool:
        return self.facts().is_selected

    def text(self) -> str:
        return self.child(xpath.parent(), GenericComponent).text()


class Checkbox(_Selectable):

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().equals("input")
        rule.type().equals("checkbox")

    def select(self) -> None:
        """Check the box unless it already is."""
        if not self.is_selected():
            self.click()

    def deselect(self) -> None:
        """Uncheck the box unless it already is."""
        if self.is_selected():
            self.click()


class RadioButton(_Selectable):

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().equals("input")
        rule.type().equals("radio")

    def select(self) -> None:
        if not self.is_selected():
            self.click()


class RadioButtonGroup(ComponentCollection[RadioButton]):
    """Radio buttons addressed by their label text."""

    item_type = RadioButton

    def select(self, key: str) -> None:
        with allure.step(f"Select '{key}' in {self!r}"):
            self.by_key(key).select()

    def selected(self) -> Optional[RadioButton]:
        for item in self.all():
            if item.is_selected():
                return item
        return None

    def selected_text(self) -> Optional[str]:
        item = self.selected()
        return item.text() if item is not None else None


class Image(Component):

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().equals("img")

    def src(self) -> Optional[str]:
        return self.attribute("src")

    def alt(self) -> Optional[str]:
        return self.attribute("alt")

    def text(self) -> str:
        return self.src() or ""


class Option(Component):

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().equals("option")

    def is_selected(self) -> bool:
        return self.facts().is_selected


class _Select(Clickable, Component):

    def options(self) -> ComponentCollection[Option]:
        return self.child(css.descendant("option"), ComponentCollection, name=f"{self!r}.options", item_type=Option)

    def option_texts(self) -> List[str]:
        return self.options().texts()

    def _selected_texts(self) -> List[str]:
        return [option.text() for option in self.options() if option.is_selected()]


class Dropdown(_Select):
    """Single-choice <select>."""

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().equals("select")
        rule.attr("multiple").absent()

    def select(self, text: str) -> None:
        """Select the option whose visible text is ``text``."""
        with allure.step(f"Select '{text}' in {self!r}"):
            element = self._ready()
            self.driver.perform(element, Action.SELECT_OPTION, text)

    def selected_text(self) -> Optional[str]:
        texts = self._selected_texts()
        return texts[0] if texts else None


class MultiSelect(_Select):
    """<select multiple>."""

    @classmethod
    def rules(cls, rule: RuleBuilder) -> None:
        rule.tag().equals("select")
        rule.attr("multiple").present()

    def select(self, *texts: str) -> None:
        """Make exactly ``texts`` the selected options."""
        with allure.step(f"Select {list(texts)} in {self!r}"):
            element = self._ready()
            self.driver.perform(element, Action.SELECT_OPTION, list(texts))

    def selected_texts(self) -> List[str]:
        return self._selected_texts()


__all__ = [
    "Button",
    "Checkbox",
    "Dropdown",
    "GenericComponent",
    "Image",
    "Link",
    "MultiSelect",
    "Option",
    "RadioButton",
    "RadioButtonGroup",
    "Textbox",
    "TEXT_INPUT_TYPES",
    "BUTTON_INPUT_TYPES",
]
