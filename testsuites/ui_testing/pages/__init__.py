"""
================================================================================
Page Objects
================================================================================

Page Object Model implementations for the bundled UI suite pages.

Each page class encapsulates:
    - Component declarations
    - Page-specific actions
    - Readiness checks (additional_wait)

Author: Automation Team
License: MIT
================================================================================
"""

from .showcase_page import EditorContent, NoteDialog, OrderRow, ShowcasePage

__all__ = [
    "EditorContent",
    "NoteDialog",
    "OrderRow",
    "ShowcasePage",
]
