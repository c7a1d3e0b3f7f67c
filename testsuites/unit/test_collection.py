import pytest

from pomkit.exceptions import ComponentCreationError, EntryNotFoundError
from pomkit.framework.collection import ComponentCollection
from pomkit.framework.components import Button, GenericComponent
from pomkit.framework.declarations import component, components
from pomkit.framework.locator import by_id, css, css_classes
from pomkit.framework.page_base import BasePage


pytestmark = pytest.mark.collection


CITIES_HTML = """
<ul id="other"><li class="item">outside</li></ul>
<div id="cities">
  <div class="row"><span class="name">a</span><span>Tokyo</span></div>
  <div class="row"><span class="name">b</span><span>Lima</span></div>
  <div class="header"><span>not a row</span></div>
  <div class="row"><span class="name">c</span><span>Oslo</span></div>
</div>
"""

KEY_READS = []


class CityRow(GenericComponent):
    name_cell = component(css.child("span", css_classes("name")), GenericComponent)

    def key(self) -> str:
        KEY_READS.append(self.index)
        return self.name_cell.text()

    def city(self) -> str:
        return self.child(css.child("span").next_sibling("span"), GenericComponent).text()


class CityTable(GenericComponent):
    rows = components(css.descendant("div", css_classes("row")), CityRow)


class CitiesPage(BasePage):
    table = component(css.descendant("div", by_id("cities")), CityTable)
    items = components(css.descendant("li", css_classes("item")), GenericComponent)
    buttons = components(css.descendant("button"), Button)


@pytest.fixture
def page(make_page):
    KEY_READS.clear()
    return make_page(CITIES_HTML, CitiesPage)


def test_items_follow_document_order(page):
    rows = page.table.rows

    assert len(rows) == 3
    assert rows.keys() == ["a", "b", "c"]
    assert [row.city() for row in rows] == ["Tokyo", "Lima", "Oslo"]


def test_by_key_returns_matching_item(page):
    row = page.table.rows.by_key("b")

    assert row.index == 1
    assert row.city() == "Lima"


def test_by_key_stops_at_first_match(page):
    page.table.rows.by_key("a")

    assert KEY_READS == [0]


def test_missing_key_raises_entry_not_found(page):
    with pytest.raises(EntryNotFoundError) as excinfo:
        page.table.rows.by_key("z")

    assert excinfo.value.key == "z"
    assert excinfo.value.lookup == "z"
    assert str(excinfo.value) == "Unable to find entry with key: z"


def test_index_out_of_range_raises_entry_not_found(page):
    with pytest.raises(EntryNotFoundError) as excinfo:
        page.table.rows.at(5)

    assert excinfo.value.index == 5
    assert str(excinfo.value) == "Unable to find entry with index: 5"


def test_at_supports_negative_index(page):
    rows = page.table.rows

    assert rows.at(-1).key() == "c"
    assert rows.first().key() == "a"
    assert rows.last().key() == "c"
    assert rows[1].key() == "b"
    assert rows["c"].city() == "Oslo"


def test_collection_is_scoped_to_its_owner(page):
    assert page.items.texts() == ["outside"]
    assert page.table.rows.contains_key("a")
    assert not page.table.rows.contains_key("outside")


def test_enumeration_reflects_live_dom(page):
    rows = page.table.rows
    assert rows.size() == 3

    page.driver.append("#cities", '<div class="row"><span class="name">d</span><span>Rome</span></div>')
    page.driver.remove("div.row")

    assert rows.keys() == ["b", "c", "d"]


def test_empty_collection(page):
    assert page.buttons.is_empty()
    assert list(page.buttons) == []
    with pytest.raises(EntryNotFoundError):
        page.buttons.first()


def test_filter(page):
    rows = page.table.rows.filter(lambda row: row.city().endswith("o"))

    assert [row.key() for row in rows] == ["a", "c"]


def test_collection_needs_component_item_type(page):
    with pytest.raises(ComponentCreationError):
        ComponentCollection(css.descendant("li"), page)
    with pytest.raises(ComponentCreationError):
        ComponentCollection(css.descendant("li"), page, item_type=dict)
