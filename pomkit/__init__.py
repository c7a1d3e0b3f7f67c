"""
================================================================================
Pomkit
================================================================================

Page-object framework for browser UI tests: declare components as typed
objects bound to a DOM location and interact with them through operations
that wait for the element to be usable.

Modules:
    - common: Configuration and logging setup
    - exceptions: Failure taxonomy
    - framework: Locators, rules, waits, components, pages
    - report_tools: Allure attachment helpers

Example:
    from pomkit.framework import BasePage, Button, Textbox, component, css, by_id

    class LoginPage(BasePage):
        URL_PATH = "/login"
        username = component(css.descendant("input", by_id("username")), Textbox)
        submit = component(css.descendant("button", by_id("submit")), Button)

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "exceptions",
    "framework",
    "report_tools",
]
