"""Tests for DOM snapshots built from markup and from serialized payloads."""

from formreplay.dom import DomDocument, parse_html
from formreplay.locators import css_locator, structural_path


def test_parse_html_wraps_fragment_in_html_and_body():
    document = parse_html("<form><input name='a'></form>")

    assert document.root.tag == "html"
    assert document.body.tag == "body"
    form = document.find_first(lambda node: node.tag == "form")
    assert form is not None
    assert form.parent is document.body


def test_parse_html_skips_script_content(contact_document):
    forms = contact_document.find_all(lambda node: node.tag == "form")

    assert len(forms) == 1
    assert contact_document.title == "Contact Acme"


def test_rendering_is_inherited_from_hidden_ancestors(contact_document):
    honeypot = contact_document.find_first(lambda node: node.get("name") == "honeypot")
    csrf = contact_document.find_first(lambda node: node.get("name") == "csrf")
    email = contact_document.find_first(lambda node: node.get("name") == "email")

    assert honeypot.rendered is False
    assert csrf.rendered is False
    assert email.rendered is True


def test_textarea_value_comes_from_its_text():
    document = parse_html("<textarea name='note'>hello\nthere</textarea>")
    textarea = document.find_first(lambda node: node.tag == "textarea")

    assert textarea.value == "hello\nthere"


def test_unclosed_options_are_closed_implicitly():
    document = parse_html(
        "<select name='s'><option value='1'>One<option value='2'>Two</select>"
    )
    select = document.find_first(lambda node: node.tag == "select")

    assert [child.get("value") for child in select.elements()] == ["1", "2"]


def test_snapshot_payload_round_trips_through_dict(contact_document):
    restored = DomDocument.from_dict(contact_document.to_dict())
    parsed_input = contact_document.find_first(lambda node: node.id == "full-name")
    restored_input = restored.find_first(lambda node: node.id == "full-name")

    assert structural_path(restored_input) == structural_path(parsed_input)
    assert restored.title == contact_document.title


def test_snapshot_payload_lowercases_attribute_names():
    payload = {
        "url": "https://example.com",
        "title": "t",
        "root": {
            "tag": "HTML",
            "attrs": {},
            "children": [
                {
                    "tag": "BODY",
                    "attrs": {},
                    "children": [
                        {"tag": "INPUT", "attrs": {"ID": "q"}, "rendered": False},
                    ],
                }
            ],
        },
    }
    document = DomDocument.from_dict(payload)
    element = document.get_element_by_id("q")

    assert element.tag == "input"
    assert element.rendered is False
    assert css_locator(element) == "#q"
