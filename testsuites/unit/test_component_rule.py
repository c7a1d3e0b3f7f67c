import pytest

from pomkit.exceptions import ComponentRulesError
from pomkit.framework.component_rule import ComponentRule
from pomkit.framework.components import Button, Textbox
from pomkit.framework.driver import ElementFacts


pytestmark = pytest.mark.rules


def facts(tag, **attributes):
    return ElementFacts(tag=tag, attributes={k.rstrip("_"): v for k, v in attributes.items()})


def div_with_foo(rule):
    rule.tag().equals("div")
    rule.css_classes().has("foo")


def test_rule_is_conjunctive():
    rule = ComponentRule.build(div_with_foo)

    assert rule.is_satisfied_by(facts("div", class_="foo bar"))
    assert not rule.is_satisfied_by(facts("div", class_="bar"))
    assert not rule.is_satisfied_by(facts("span", class_="foo"))


def test_violations_name_the_failed_facet():
    rule = ComponentRule.build(div_with_foo)

    violations = rule.validate(facts("span", class_="bar"))

    assert violations == [
        "Expected that tag is 'div', but it is not. (actual: 'span')",
        "Expected that css classes include 'foo', but it is not. (actual: ('bar',))",
    ]


def test_undeclared_facets_are_unconstrained():
    rule = ComponentRule.build(lambda r: r.id().equals("x"))

    assert rule.is_satisfied_by(facts("dialog", id="x", class_="anything", role="alert"))


def test_empty_rule_is_rejected():
    with pytest.raises(ComponentRulesError):
        ComponentRule.build(lambda r: None)


def test_any_accepts_everything():
    rule = ComponentRule.build(lambda r: r.any())

    assert rule.validate(facts("table")) == []
    assert repr(rule) == "ComponentRule(any)"


def test_for_tag_only_applies_to_that_tag():
    rule = Button.component_rule()

    assert rule.is_satisfied_by(facts("button"))
    assert rule.is_satisfied_by(facts("input", type="submit"))
    assert not rule.is_satisfied_by(facts("input", type="text"))
    assert not rule.is_satisfied_by(facts("a"))


def test_one_of_with_absent_allowed():
    rule = Textbox.component_rule()

    assert rule.is_satisfied_by(facts("input"))
    assert rule.is_satisfied_by(facts("input", type="password"))
    assert rule.is_satisfied_by(facts("textarea"))
    assert not rule.is_satisfied_by(facts("input", type="checkbox"))


def test_tag_expectation_is_case_insensitive():
    rule = ComponentRule.build(lambda r: r.tag().equals("DIV"))

    assert rule.is_satisfied_by(facts("div"))


@pytest.mark.parametrize(
    "declare, accepted, rejected",
    [
        (lambda r: r.attr("role").present(), {"role": "x"}, {}),
        (lambda r: r.attr("role").absent(), {}, {"role": "x"}),
        (lambda r: r.attr("role").not_equals("x"), {"role": "y"}, {"role": "x"}),
        (lambda r: r.href().contains("/docs"), {"href": "/docs/1"}, {"href": "/blog"}),
        (lambda r: r.href().not_contains("/docs"), {"href": "/blog"}, {"href": "/docs/1"}),
        (lambda r: r.title().starts_with("Re"), {"title": "Reply"}, {"title": "Forward"}),
        (lambda r: r.name().ends_with("_id"), {"name": "user_id"}, {"name": "user"}),
        (lambda r: r.id().matches(r"row-\d+"), {"id": "row-12"}, {"id": "row-12a"}),
        (lambda r: r.css_classes().present(), {"class": ""}, {}),
        (lambda r: r.css_classes().absent(), {}, {"class": "a"}),
        (lambda r: r.css_classes().lacks("off"), {"class": "on"}, {"class": "on off"}),
        (lambda r: r.css_classes().has_all_of("a", "b"), {"class": "b a"}, {"class": "a"}),
        (lambda r: r.css_classes().has_any_of("a", "b"), {"class": "b"}, {"class": "c"}),
        (lambda r: r.css_classes().has_none_of("a", "b"), {"class": "c"}, {"class": "c b"}),
    ],
)
def test_facet_conditions(declare, accepted, rejected):
    rule = ComponentRule.build(declare)

    assert rule.is_satisfied_by(ElementFacts(tag="div", attributes=accepted))
    assert not rule.is_satisfied_by(ElementFacts(tag="div", attributes=rejected))


def test_rule_is_built_once_per_class():
    assert Button.component_rule() is Button.component_rule()
    assert Button.component_rule() is not Textbox.component_rule()
