"""
================================================================================
In-Memory DOM Driver
================================================================================

A Driver implementation over an lxml HTML tree, used by the unit suite to
exercise locators, rules, waits and scopes without a browser.

Rendering model:
    - displayed: no ancestor-or-self carries ``hidden``, ``display: none``
      in its style, or is a <dialog> without ``open``; <input type=hidden>
      is never displayed
    - enabled: no ``disabled`` attribute
    - geometry: ``data-box="x,y,w,h"``, else a fixed box while displayed
    - stale: the element is no longer attached to any known document
    - frames: an <iframe>'s document is parsed from its ``srcdoc``

DOM changes scheduled with ``after(seconds, change)`` are applied at the
start of the first driver call made once they are due, so waits observe
them without background threads.

================================================================================
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import lxml.html
from cssselect import GenericTranslator
from cssselect import SelectorError as CssSyntaxError
from lxml import etree
from lxml.cssselect import CSSSelector

from pomkit.exceptions import DriverError, SelectorError, StaleElementError
from pomkit.framework.driver import Action, BoundingBox, Driver, ElementFacts
from pomkit.framework.locator import SCOPE_PSEUDO, CompiledLocator, Dialect


DEFAULT_BOX = BoundingBox(0, 0, 100, 20)

# XPath axis for the combinator right after a leading :scope
_SCOPE_AXES = {"": "descendant::", ">": "child::", "~": "following-sibling::"}

Change = Callable[["InMemoryDomDriver"], None]


class InMemoryDomDriver(Driver):
    """
    Driver over a parsed HTML document.

    Usage:
        driver = InMemoryDomDriver("<div id='a'><span>hi</span></div>")
        driver.after(0.1, lambda d: d.set_attribute("#a", "hidden", None))
    """

    def __init__(self, html: str, url: str = "http://localhost:3000/"):
        self.root = lxml.html.document_fromstring(html)
        self._frame_documents: Dict[str, Any] = {}
        self._scopes: List[Any] = []
        self._scheduled: List[Tuple[float, int, Change]] = []
        self._sequence = 0
        self._url = url
        self.ready = "complete"
        self.journal: List[str] = []
        self.performed: List[Tuple[Action, Optional[str], Any]] = []
        self.click_handlers: Dict[str, Change] = {}

    # --------------------------------------------------------
    # Test helpers
    # --------------------------------------------------------

    def after(self, seconds: float, change: Change) -> None:
        """Apply ``change(driver)`` once ``seconds`` have passed."""
        self._sequence += 1
        self._scheduled.append((time.monotonic() + seconds, self._sequence, change))
        self._scheduled.sort()

    def query(self, selector: str, document: Optional[Any] = None) -> Any:
        """First element matching a CSS selector (top-level document by default)."""
        matches = CSSSelector(selector)(document if document is not None else self.root)
        assert matches, f"Test DOM has no element matching {selector!r}"
        return matches[0]

    def set_attribute(self, selector: str, name: str, value: Optional[str]) -> None:
        element = self.query(selector)
        if value is None:
            element.attrib.pop(name, None)
        else:
            element.set(name, value)

    def replace(self, selector: str, html: str) -> None:
        """Swap an element for a freshly parsed one (same place in the tree)."""
        old = self.query(selector)
        new = lxml.html.fragment_fromstring(html)
        old.getparent().replace(old, new)

    def remove(self, selector: str) -> None:
        element = self.query(selector)
        element.getparent().remove(element)

    def append(self, selector: str, html: str) -> None:
        self.query(selector).append(lxml.html.fragment_fromstring(html))

    def frame_document(self, frame_id: str) -> Any:
        return self._frame_documents[frame_id]

    @property
    def depth(self) -> int:
        return len(self._scopes)

    # --------------------------------------------------------
    # Internals
    # --------------------------------------------------------

    def _tick(self) -> None:
        now = time.monotonic()
        while self._scheduled and self._scheduled[0][0] <= now:
            _, _, change = self._scheduled.pop(0)
            change(self)

    @property
    def _document(self) -> Any:
        return self._scopes[-1] if self._scopes else self.root

    def _known_roots(self) -> List[Any]:
        return [self.root, *self._frame_documents.values()]

    def _check_attached(self, element: Any) -> None:
        top = element.getroottree().getroot()
        if not any(top is root for root in self._known_roots()):
            raise StaleElementError(f"<{element.tag}> is no longer attached to the document")

    @staticmethod
    def _is_displayed(element: Any) -> bool:
        if element.tag == "input" and element.get("type") == "hidden":
            return False
        node = element
        while node is not None:
            style = (node.get("style") or "").replace(" ", "").lower()
            if node.get("hidden") is not None or "display:none" in style:
                return False
            if node.tag == "dialog" and node.get("open") is None:
                return False
            node = node.getparent()
        return True

    @staticmethod
    def _box(element: Any, displayed: bool) -> Optional[BoundingBox]:
        if not displayed:
            return None
        raw = element.get("data-box")
        if not raw:
            return DEFAULT_BOX
        x, y, width, height = (float(part) for part in raw.split(","))
        return BoundingBox(x, y, width, height)

    @staticmethod
    def _value(element: Any) -> Optional[str]:
        if element.tag == "textarea":
            return element.text or ""
        if element.tag == "select":
            chosen = [o for o in element.iter("option") if o.get("selected") is not None]
            return chosen[0].text_content() if chosen else None
        return element.get("value")

    @staticmethod
    def _scoped_css_to_xpath(expression: str) -> str:
        """Translate ':scope <combinator> rest' into an XPath relative to the scope element."""
        rest = expression[len(SCOPE_PSEUDO):].lstrip()
        combinator = rest[:1] if rest[:1] in (">", "~", "+") else ""
        if combinator not in _SCOPE_AXES:
            raise SelectorError(f"Unsupported combinator after :scope in {expression!r}")
        rest = rest[len(combinator):].lstrip()
        return GenericTranslator().css_to_xpath(rest, prefix=_SCOPE_AXES[combinator])

    # --------------------------------------------------------
    # Driver surface
    # --------------------------------------------------------

    def find_elements(self, scope: Optional[Any], locator: CompiledLocator) -> List[Any]:
        self._tick()
        if scope is not None and not locator.absolute:
            self._check_attached(scope)
            context = scope
        else:
            context = self._document

        try:
            if locator.dialect is Dialect.CSS and locator.expression.startswith(SCOPE_PSEUDO):
                found = context.xpath(self._scoped_css_to_xpath(locator.expression))
            elif locator.dialect is Dialect.CSS:
                found = CSSSelector(locator.expression)(context)
            else:
                found = context.xpath(locator.expression)
        except (CssSyntaxError, etree.XPathError) as e:
            raise SelectorError(f"Invalid {locator.dialect.value} selector {locator.expression!r}: {e}") from e

        return [e for e in found if isinstance(e, etree.ElementBase) and isinstance(e.tag, str)]

    def read_facts(self, element: Any) -> ElementFacts:
        self._tick()
        self._check_attached(element)
        displayed = self._is_displayed(element)
        return ElementFacts(
            tag=element.tag.lower(),
            attributes=dict(element.attrib),
            is_displayed=displayed,
            is_enabled=element.get("disabled") is None,
            bounding_box=self._box(element, displayed),
            text=element.text_content(),
            value=self._value(element),
            is_selected=element.get("checked") is not None or element.get("selected") is not None,
        )

    def perform(self, element: Any, action: Action, payload: Any = None) -> None:
        self._tick()
        self._check_attached(element)
        self.performed.append((action, element.get("id"), payload))

        if action is Action.CLICK:
            self._click(element)
        elif action in (Action.CLEAR, Action.FILL):
            self._set_value(element, payload or "")
        elif action is Action.TYPE:
            self._set_value(element, (self._value(element) or "") + payload)
        elif action is Action.SELECT_OPTION:
            labels = payload if isinstance(payload, list) else [payload]
            for option in element.iter("option"):
                if option.text_content().strip() in labels:
                    option.set("selected", "")
                else:
                    option.attrib.pop("selected", None)

    def _click(self, element: Any) -> None:
        kind = element.get("type")
        if element.tag == "input" and kind == "checkbox":
            if element.get("checked") is None:
                element.set("checked", "")
            else:
                element.attrib.pop("checked", None)
        elif element.tag == "input" and kind == "radio":
            for other in element.getroottree().iter("input"):
                if other.get("type") == "radio" and other.get("name") == element.get("name"):
                    other.attrib.pop("checked", None)
            element.set("checked", "")
        handler = self.click_handlers.get(element.get("id"))
        if handler is not None:
            handler(self)

    @staticmethod
    def _set_value(element: Any, value: str) -> None:
        if element.tag == "textarea":
            element.text = value
        else:
            element.set("value", value)

    def enter_scope(self, element: Any) -> None:
        self._tick()
        self._check_attached(element)
        if element.tag not in ("iframe", "frame"):
            raise DriverError(f"<{element.tag}> is not a frame")
        frame_id = element.get("id") or f"frame-{len(self._frame_documents)}"
        if frame_id not in self._frame_documents:
            self._frame_documents[frame_id] = lxml.html.document_fromstring(element.get("srcdoc") or "<html></html>")
        self._scopes.append(self._frame_documents[frame_id])
        self.journal.append(f"enter:{frame_id}")

    def exit_scope(self) -> None:
        if not self._scopes:
            raise DriverError("exit_scope() without enter_scope()")
        self._scopes.pop()
        self.journal.append("exit")

    def navigate(self, url: str) -> None:
        self._url = url
        self.journal.append(f"navigate:{url}")

    def reload(self) -> None:
        self.journal.append("reload")

    def ready_state(self) -> str:
        self._tick()
        return self.ready

    @property
    def current_url(self) -> str:
        return self._url

    def screenshot(self, path: str) -> bytes:
        png = b"\x89PNG\r\n\x1a\n"
        with open(path, "wb") as f:
            f.write(png)
        return png
