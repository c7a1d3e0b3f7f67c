"""
================================================================================
Pomkit Report Tools
================================================================================

Allure attachment helpers.

================================================================================
"""

from .allure_utils import (
    attach_component_facts,
    attach_json,
    attach_png,
    attach_text,
)

__all__ = [
    "attach_component_facts",
    "attach_json",
    "attach_png",
    "attach_text",
]
