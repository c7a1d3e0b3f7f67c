import pytest

from pomkit.exceptions import (
    ComponentAnimatingError,
    ComponentCreationError,
    ComponentNotDisplayedError,
    ComponentNotEnabledError,
    ComponentRulesError,
    ElementNotFoundError,
    StaleElementError,
    WaitTimeoutError,
)
from pomkit.framework.component import Component, ComponentState
from pomkit.framework.components import (
    Button,
    Checkbox,
    Dropdown,
    GenericComponent,
    Image,
    Link,
    MultiSelect,
    RadioButton,
    RadioButtonGroup,
    Textbox,
)
from pomkit.framework.declarations import component, components
from pomkit.framework.driver import Action
from pomkit.framework.locator import attr, by_id, by_name, css
from pomkit.framework.page_base import BasePage
from testsuites.unit.dom_driver import InMemoryDomDriver


pytestmark = pytest.mark.lifecycle


FORM_HTML = """
<form id="profile">
  <div id="banner" hidden>Saved</div>
  <input id="name" type="text" value="Ann">
  <input id="secret" type="password">
  <button id="save" type="submit">Save</button>
  <button id="locked" disabled>Locked</button>
  <a id="home" href="/home" data-role="action">Home</a>
  <button id="go" data-role="action">Go</button>
  <img id="logo" src="/logo.png" alt="Logo">
  <label><input id="agree" type="checkbox"> I agree</label>
  <label><input type="radio" name="color" value="r"> Red</label>
  <label><input type="radio" name="color" value="g" checked> Green</label>
  <label><input type="radio" name="color" value="b"> Blue</label>
  <select id="size"><option>S</option><option selected>M</option><option>L</option></select>
  <select id="tags" multiple><option>a</option><option>b</option><option>c</option></select>
</form>
"""


class ProfilePage(BasePage):
    URL_PATH = "/profile"

    banner = component(css.descendant("div", by_id("banner")), GenericComponent)
    name = component(css.descendant("input", by_id("name")), Textbox)
    secret = component(css.descendant("input", by_id("secret")), Textbox)
    save = component(css.descendant("button", by_id("save")), Button)
    locked = component(css.descendant("button", by_id("locked")), Button)
    home = component(css.descendant("a", by_id("home")), Link)
    home_as_button = component(css.descendant("a", by_id("home")), Button)
    action = component(css.descendant(attr("data-role").equals("action")), Button)
    missing = component(css.descendant("button", by_id("nope")), Button)
    logo = component(css.descendant("img", by_id("logo")), Image)
    agree = component(css.descendant("input", by_id("agree")), Checkbox)
    colors = components(css.descendant("input", by_name("color")), RadioButton, collection=RadioButtonGroup)
    size = component(css.descendant("select", by_id("size")), Dropdown)
    tags = component(css.descendant("select", by_id("tags")), MultiSelect)


class MovingDriver(InMemoryDomDriver):
    """Shifts #save by one pixel on each of the next ``moves`` reads."""

    def __init__(self, html, moves):
        super().__init__(html)
        self.moves = moves

    def read_facts(self, element):
        facts = super().read_facts(element)
        if self.moves > 0 and element.get("id") == "save":
            self.moves -= 1
            element.set("data-box", f"{self.moves},0,100,20")
        return facts


@pytest.fixture
def page(make_page):
    return make_page(FORM_HTML, ProfilePage)


# ============================================================
# Resolution
# ============================================================

def test_component_resolves_and_reads_facts(page):
    assert page.save.exists()
    assert page.save.text() == "Save"
    assert page.save.tag() == "button"
    assert page.save.attribute("type") == "submit"
    assert page.save.state is ComponentState.FOUND


def test_missing_element_raises_not_found_after_timeout(page):
    assert not page.missing.exists()

    with pytest.raises(ElementNotFoundError) as excinfo:
        page.missing.wait_for_existence()

    assert "button#nope" in str(excinfo.value)
    timeout = excinfo.value.__cause__
    assert isinstance(timeout, WaitTimeoutError)
    assert timeout.timeout_ms == 300
    assert isinstance(timeout.__cause__, ElementNotFoundError)
    assert page.missing.state is ComponentState.UNRESOLVED


def test_rule_rejection_counts_as_not_found(page):
    with pytest.raises(ElementNotFoundError) as excinfo:
        page.home_as_button.text()

    assert excinfo.value.violations == [
        "Expected that tag is one of ['button', 'input'], but it is not. (actual: 'a')"
    ]


def test_first_candidate_satisfying_rule_is_accepted(page):
    assert page.action.attribute("id") == "go"


def test_component_is_created_once_per_owner(page):
    assert page.save is page.save
    assert repr(page.save) == "Button(save)"


def test_each_access_resolves_again_after_dom_churn(page):
    assert page.banner.text() == "Saved"
    first_element = page.banner.element

    page.driver.replace("#banner", '<div id="banner">Replaced</div>')

    assert page.banner.text() == "Replaced"
    assert page.banner.element is not first_element
    with pytest.raises(StaleElementError):
        page.driver.read_facts(first_element)


def test_child_of_missing_parent_fails_on_parent(make_page):
    class Card(GenericComponent):
        title = component(css.descendant("h2"), GenericComponent)

    class CardsPage(BasePage):
        card = component(css.descendant("div", by_id("card")), Card)

    cards = make_page("<div id='other'><h2>x</h2></div>", CardsPage)

    with pytest.raises(ElementNotFoundError) as excinfo:
        cards.card.title.text()
    assert "div#card" in str(excinfo.value)


def test_child_resolves_inside_its_parent_only(make_page):
    class Card(GenericComponent):
        title = component(css.descendant("h2"), GenericComponent)

    class CardsPage(BasePage):
        second = component(css.descendant("div", by_id("second")), Card)

    cards = make_page(
        "<div id='first'><h2>One</h2></div><div id='second'><h2>Two</h2></div>",
        CardsPage,
    )

    assert cards.second.title.text() == "Two"


def test_owner_element_is_not_part_of_child_chain(make_page):
    class Panel(GenericComponent):
        label = component(css.descendant("div").descendant("span"), GenericComponent)

    class PanelPage(BasePage):
        panel = component(css.descendant("div", by_id("panel")), Panel)

    panels = make_page(
        "<div id='panel'><span>direct</span><div><span>nested</span></div></div>",
        PanelPage,
    )

    assert panels.panel.label.text() == "nested"


# ============================================================
# Readiness
# ============================================================

def test_wait_for_displayed_succeeds_once_visible(page):
    page.driver.after(0.1, lambda d: d.set_attribute("#banner", "hidden", None))

    assert not page.banner.is_displayed()
    page.banner.wait_for_displayed()

    assert page.banner.is_displayed()
    assert page.banner.state is ComponentState.DISPLAYED


@pytest.mark.slow
def test_never_displayed_raises_not_displayed(page):
    with pytest.raises(ComponentNotDisplayedError) as excinfo:
        page.banner.wait_for_displayed()

    assert excinfo.value.timeout_ms == 300


def test_disabled_button_cannot_be_clicked(page):
    with pytest.raises(ComponentNotEnabledError) as excinfo:
        page.locked.click()

    assert excinfo.value.timeout_ms == 300
    assert (Action.CLICK, "locked", None) not in page.driver.performed


def test_click_waits_until_enabled(page):
    page.driver.after(0.1, lambda d: d.set_attribute("#locked", "disabled", None))

    page.locked.click()

    assert (Action.CLICK, "locked", None) in page.driver.performed
    assert page.locked.state is ComponentState.READY


def test_each_readiness_wait_gets_its_own_budget(page):
    driver = page.driver
    driver.set_attribute("#locked", "hidden", "")
    driver.after(0.2, lambda d: d.set_attribute("#locked", "hidden", None))
    driver.after(0.4, lambda d: d.set_attribute("#locked", "disabled", None))

    page.locked.click()

    assert (Action.CLICK, "locked", None) in driver.performed


def test_click_waits_for_animation_to_settle(fast_config):
    driver = MovingDriver(FORM_HTML, moves=3)
    page = ProfilePage(driver, fast_config)

    page.save.click()

    assert driver.moves == 0
    assert driver.performed == [(Action.CLICK, "save", None)]


def test_endless_animation_raises_animating(fast_config):
    driver = MovingDriver(FORM_HTML, moves=10 ** 6)
    page = ProfilePage(driver, fast_config)

    with pytest.raises(ComponentAnimatingError):
        page.save.click()
    assert driver.performed == []


def test_wait_for_hidden_and_absent(page):
    page.banner.wait_for_hidden()

    page.driver.after(0.05, lambda d: d.remove("#save"))
    page.save.wait_for_absent()

    assert not page.save.exists()


def test_wait_for_absent_times_out_while_present(page):
    with pytest.raises(WaitTimeoutError):
        page.save.wait_for_absent()


# ============================================================
# Concrete kinds
# ============================================================

def test_textbox_enter_text_clears_clicks_then_types(page):
    page.name.enter_text("Bob")

    assert page.name.value() == "Bob"
    assert page.driver.performed == [
        (Action.CLEAR, "name", None),
        (Action.CLICK, "name", None),
        (Action.TYPE, "name", "Bob"),
    ]


def test_textbox_clear(page):
    page.name.clear()

    assert page.name.value() == ""


def test_link_and_image(page):
    assert page.home.href() == "/home"
    assert page.logo.src() == "/logo.png"
    assert page.logo.alt() == "Logo"
    assert page.logo.text() == "/logo.png"


def test_checkbox_select_and_deselect(page):
    assert page.agree.text() == "I agree"
    assert not page.agree.is_selected()

    page.agree.select()
    page.agree.select()
    assert page.agree.is_selected()

    page.agree.deselect()
    assert not page.agree.is_selected()


def test_radio_group_select_by_label(page):
    assert page.colors.keys() == ["Red", "Green", "Blue"]
    assert page.colors.selected_text() == "Green"

    page.colors.select("Blue")

    assert page.colors.selected_text() == "Blue"
    assert not page.colors.by_key("Green").is_selected()


def test_dropdown(page):
    assert page.size.option_texts() == ["S", "M", "L"]
    assert page.size.selected_text() == "M"

    page.size.select("L")

    assert page.size.selected_text() == "L"


def test_multiselect(page):
    page.tags.select("a", "c")

    assert page.tags.selected_texts() == ["a", "c"]


# ============================================================
# Construction failures
# ============================================================

def test_child_of_non_component_type_fails(page):
    with pytest.raises(ComponentCreationError):
        page.child(css.descendant("div"), int)
    with pytest.raises(ComponentCreationError):
        page.child(css.descendant("div"), "Button")


def test_component_without_rules_fails_at_creation(page):
    class Undeclared(Component):
        pass

    class Empty(Component):
        @classmethod
        def rules(cls, rule):
            pass

    with pytest.raises(ComponentCreationError):
        page.child(css.descendant("div"), Undeclared)
    with pytest.raises(ComponentRulesError):
        page.child(css.descendant("div"), Empty)


def test_declaration_factories_validate_kinds():
    with pytest.raises(ComponentCreationError):
        component(css.descendant("div"), str)
    with pytest.raises(ComponentCreationError):
        components(css.descendant("li"), Button, collection=list)
    with pytest.raises(ComponentCreationError):
        component("div", Button)
