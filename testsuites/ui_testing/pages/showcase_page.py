"""
================================================================================
Showcase Page Object
================================================================================

Page object for the static showcase page shipped with the UI suite
(testsuites/ui_testing/resources/showcase.html).

It exercises every building block of the framework against a real browser:
    - Form controls (Textbox, Checkbox, Dropdown, Button)
    - A modal <dialog> scope
    - An iframe scope with its own page-like content
    - A keyed collection of rows
    - A sliding drawer whose button animates into place

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import allure

from pomkit.framework import (
    BasePage,
    Button,
    Checkbox,
    Dialog,
    Dropdown,
    FrameContent,
    GenericComponent,
    Textbox,
    by_id,
    component,
    components,
    css,
    css_classes,
    dialog,
    frame,
)


class NoteDialog(Dialog):
    """Modal dialog that stores a short note."""

    note = component(css.descendant("input", by_id("note")), Textbox)
    ok = component(css.descendant("button", by_id("confirm-ok")), Button)

    @classmethod
    def rules(cls, rule) -> None:
        rule.tag().equals("dialog")


class EditorContent(FrameContent):
    """Document inside the editor iframe."""

    title = component(css.descendant("h2"), GenericComponent)
    body = component(css.descendant("textarea", by_id("body")), Textbox)

    def additional_wait(self) -> None:
        self.body.wait_for_displayed()


class OrderRow(GenericComponent):
    """One order line; keyed by its order id."""

    order_id = component(css.child("span", css_classes("order-id")), GenericComponent)
    status_cell = component(css.child("span", css_classes("status")), GenericComponent)

    def key(self) -> str:
        return self.order_id.text()

    def status(self) -> str:
        return self.status_cell.text()


class ShowcasePage(BasePage):
    """Showcase page object."""

    URL_PATH = "/showcase.html"

    heading = component(css.descendant("h1", by_id("heading")), GenericComponent)

    # Sign-up form
    username = component(css.descendant("input", by_id("username")), Textbox)
    remember = component(css.descendant("input", by_id("remember")), Checkbox)
    plan = component(css.descendant("select", by_id("plan")), Dropdown)
    submit = component(css.descendant("button", by_id("submit")), Button)
    greeting = component(css.descendant("div", by_id("greeting")), GenericComponent)

    # Dialog
    open_confirm = component(css.descendant("button", by_id("open-confirm")), Button)
    confirm = dialog(css.descendant("dialog", by_id("confirm")), NoteDialog)
    saved_note = component(css.descendant("div", by_id("saved-note")), GenericComponent)

    # Frame
    editor = frame(css.descendant("iframe", by_id("editor")), EditorContent)

    # Collection
    orders = components(css.descendant("div", by_id("orders")).child("div", css_classes("order")), OrderRow)

    # Animated drawer
    toggle_drawer = component(css.descendant("button", by_id("toggle-drawer")), Button)
    drawer_close = component(css.descendant("button", by_id("drawer-close")), Button)
    drawer_state = component(css.descendant("div", by_id("drawer-state")), GenericComponent)

    def additional_wait(self) -> None:
        self.heading.wait_for_displayed()

    @allure.step("Sign up as {name} on the {plan_name} plan")
    def sign_up(self, name: str, plan_name: str = "Free") -> None:
        self.username.enter_text(name)
        self.plan.select(plan_name)
        self.submit.click()
        self.greeting.wait_for_displayed()

    @allure.step("Add note: {text}")
    def add_note(self, text: str) -> None:
        self.open_confirm.click()
        with self.confirm as opened:
            opened.note.enter_text(text)
            opened.ok.click()


__all__ = [
    "EditorContent",
    "NoteDialog",
    "OrderRow",
    "ShowcasePage",
]
