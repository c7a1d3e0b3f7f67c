import time

import pytest

from pomkit.exceptions import (
    ComponentNotDisplayedError,
    ElementNotFoundError,
    ScopeError,
    WaitTimeoutError,
)
from pomkit.framework.components import Button, GenericComponent, Textbox
from pomkit.framework.declarations import component, dialog, frame
from pomkit.framework.locator import by_id, css
from pomkit.framework.page_base import BasePage
from pomkit.framework.scope import Dialog, FrameContent


pytestmark = pytest.mark.scope


# ============================================================
# Frames
# ============================================================

FRAME_HTML = """
<h1>Top</h1>
<div id="not-a-frame"></div>
<iframe id="editor" srcdoc="&lt;textarea id='body'&gt;draft&lt;/textarea&gt;"></iframe>
<iframe id="empty" srcdoc="&lt;p&gt;nothing here&lt;/p&gt;"></iframe>
"""


class EditorContent(FrameContent):
    body = component(css.descendant("textarea", by_id("body")), Textbox)

    def additional_wait(self) -> None:
        self.body.wait_for_displayed()


class EditorPage(BasePage):
    title = component(css.descendant("h1"), GenericComponent)
    editor = frame(css.descendant("iframe", by_id("editor")), EditorContent)
    empty = frame(css.descendant("iframe", by_id("empty")), EditorContent)
    bogus = frame(css.descendant("div", by_id("not-a-frame")), EditorContent)


@pytest.fixture
def editor_page(make_page):
    return make_page(FRAME_HTML, EditorPage)


def test_frame_content_resolves_inside_frame(editor_page):
    driver = editor_page.driver

    with editor_page.editor as content:
        assert driver.depth == 1
        assert content.body.value() == "draft"

    assert driver.depth == 0
    assert driver.journal == ["enter:editor", "exit"]
    assert editor_page.title.text() == "Top"


def test_frame_run_returns_action_result(editor_page):
    assert editor_page.editor.run(lambda content: content.body.value()) == "draft"
    assert editor_page.driver.depth == 0


def test_frame_content_outside_frame_raises_scope_error(editor_page):
    with editor_page.editor as content:
        pass

    with pytest.raises(ScopeError):
        content.body.text()


class PlainContent(FrameContent):
    body = component(css.descendant("textarea", by_id("body")), Textbox)


class ShadowedPage(BasePage):
    empty = frame(css.descendant("iframe", by_id("empty")), PlainContent)


def test_frame_content_never_falls_back_to_top_document(make_page):
    page = make_page('<textarea id="body">top</textarea>' + FRAME_HTML, ShadowedPage)

    with page.empty as content:
        assert not content.body.exists()
        assert not content.body.is_displayed()

    with pytest.raises(ScopeError):
        content.body.exists()
    with pytest.raises(ScopeError):
        content.body.is_displayed()
    with pytest.raises(ScopeError):
        content.body.is_enabled()


def test_scope_is_exited_when_block_fails(editor_page):
    with pytest.raises(RuntimeError):
        with editor_page.editor:
            raise RuntimeError("boom")

    assert editor_page.driver.depth == 0
    assert editor_page.driver.journal == ["enter:editor", "exit"]


def test_failed_additional_wait_leaves_scope(editor_page):
    with pytest.raises(ElementNotFoundError):
        with editor_page.empty:
            pytest.fail("block must not run")

    assert editor_page.driver.depth == 0
    assert editor_page.driver.journal == ["enter:empty", "exit"]


def test_frame_waits_for_document_ready(editor_page):
    driver = editor_page.driver
    driver.ready = "loading"
    driver.after(0.05, lambda d: setattr(d, "ready", "complete"))

    with editor_page.editor as content:
        assert content.body.value() == "draft"


def test_frame_rule_requires_frame_element(editor_page):
    with pytest.raises(ElementNotFoundError):
        with editor_page.bogus:
            pass
    assert editor_page.driver.journal == []


# ============================================================
# Dialogs
# ============================================================

DIALOG_HTML = """
<button id="open">Open</button>
<dialog id="x">
  <input id="name" value="n">
  <button id="ok">OK</button>
</dialog>
"""


class NameDialog(Dialog):
    name = component(css.descendant("input", by_id("name")), Textbox)
    ok = component(css.descendant("button", by_id("ok")), Button)

    @classmethod
    def rules(cls, rule):
        rule.tag().equals("dialog")
        rule.id().equals("x")


class DialogPage(BasePage):
    opener = component(css.descendant("button", by_id("open")), Button)
    dlg = dialog(css.descendant("dialog", by_id("x")), NameDialog)


@pytest.fixture
def dialog_page(make_page):
    return make_page(DIALOG_HTML, DialogPage)


@pytest.mark.slow
def test_child_of_closed_dialog_raises_not_displayed(dialog_page):
    start = time.monotonic()
    with pytest.raises(ComponentNotDisplayedError) as excinfo:
        dialog_page.dlg.name.value()
    elapsed_ms = (time.monotonic() - start) * 1000

    assert excinfo.value.timeout_ms == 300
    assert 300 <= elapsed_ms < 1000


def test_child_resolves_once_dialog_opens(dialog_page):
    dialog_page.driver.after(0.1, lambda d: d.set_attribute("#x", "open", ""))

    assert dialog_page.dlg.name.value() == "n"


def test_dialog_context_waits_open_then_closed(dialog_page):
    driver = dialog_page.driver
    driver.click_handlers["open"] = lambda d: d.after(0.05, lambda later: later.set_attribute("#x", "open", ""))
    driver.click_handlers["ok"] = lambda d: d.set_attribute("#x", "open", None)

    dialog_page.opener.click()
    with dialog_page.dlg as opened:
        opened.name.enter_text("Zed")
        opened.ok.click()

    assert not dialog_page.dlg.is_displayed()
    assert driver.query("#name").get("value") == "Zed"


def test_dialog_left_open_fails_on_exit(dialog_page):
    dialog_page.driver.set_attribute("#x", "open", "")

    with pytest.raises(WaitTimeoutError):
        with dialog_page.dlg:
            pass


def test_dialog_does_not_mask_block_errors(dialog_page):
    dialog_page.driver.set_attribute("#x", "open", "")

    with pytest.raises(ValueError):
        with dialog_page.dlg:
            raise ValueError("assertion inside dialog")


def test_dialog_run(dialog_page):
    driver = dialog_page.driver
    driver.set_attribute("#x", "open", "")
    driver.click_handlers["ok"] = lambda d: d.set_attribute("#x", "open", None)

    def confirm(opened):
        value = opened.name.value()
        opened.ok.click()
        return value

    assert dialog_page.dlg.run(confirm) == "n"
