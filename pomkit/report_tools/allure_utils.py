"""
================================================================================
Allure Report Utilities
================================================================================

Attachment helpers used by pages and tests to enrich Allure reports with
screenshots, page state and diagnostic data.

Features:
- Text / JSON / PNG attachment helpers
- Component snapshot attachment for failure analysis

================================================================================
"""

import json
from typing import Any

import allure
from loguru import logger

from pomkit.exceptions import PomkitError


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_json(data: Any, name: str = "Data"):
    """
    Attach JSON data to Allure report.

    Args:
        data: Data to attach (will be JSON serialized)
        name: Attachment name
    """
    json_str = json.dumps(data, indent=2, default=str)
    allure.attach(
        json_str,
        name=name,
        attachment_type=allure.attachment_type.JSON
    )


def attach_text(text: str, name: str = "Text"):
    """
    Attach text content to Allure report.

    Args:
        text: Text to attach
        name: Attachment name
    """
    allure.attach(
        text,
        name=name,
        attachment_type=allure.attachment_type.TEXT
    )


def attach_png(png: bytes, name: str = "Screenshot"):
    """
    Attach a PNG image to Allure report.

    Args:
        png: Image bytes
        name: Attachment name
    """
    allure.attach(
        png,
        name=name,
        attachment_type=allure.attachment_type.PNG
    )


def attach_component_facts(component: Any, name: str = "Component"):
    """
    Attach what the driver currently reports about a component.

    Lookup failures are attached as text instead of raising, so this is safe
    to call from failure hooks.
    """
    try:
        facts = component.facts()
    except PomkitError as e:
        logger.debug(f"Could not read facts for {component!r}: {e}")
        attach_text(f"{component!r}: {e}", name=f"{name} (unresolved)")
        return

    attach_json(
        {
            "component": repr(component),
            "locator": component.locator.expression,
            "state": component.state.value,
            "tag": facts.tag,
            "attributes": facts.attributes,
            "is_displayed": facts.is_displayed,
            "is_enabled": facts.is_enabled,
            "bounding_box": facts.bounding_box,
            "text": facts.text,
        },
        name=name,
    )


__all__ = [
    "attach_component_facts",
    "attach_json",
    "attach_png",
    "attach_text",
]
