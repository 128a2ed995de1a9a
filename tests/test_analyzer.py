"""Tests for the discovery orchestrator."""

from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError

from formreplay import analyzer
from formreplay.analyzer import (
    DEFAULT_FORM_NAME,
    analyze_document,
    describe_source,
    detect_form_name,
    discover_form,
)
from formreplay.dom import parse_html
from formreplay.errors import NoFormFound, PageUnreachable
from formreplay.form_models import FieldType
from tests.helpers import load_fixture, make_page, parse_fixture

URL = "https://www.example.com/contact"


def _patch_session(monkeypatch, page):
    opened = []

    @contextmanager
    def fake_session(config=None):
        opened.append(config)
        yield page

    monkeypatch.setattr(analyzer, "open_session", fake_session)
    return opened


def test_contact_page_is_described(contact_document):
    form = analyze_document(contact_document, URL)

    assert form.url == URL
    assert form.name == "Get in touch"
    assert form.description == "Discovered on example.com"
    assert len(form.fields) == 6
    assert form.submit.text == "Send message"
    assert form.created == form.updated
    assert form.id is None


def test_name_from_title_class_inside_container():
    assert detect_form_name(parse_fixture("div_form.html")) == "Join our list"


def test_name_from_heading_near_form():
    document = parse_html(
        "<body><section><h3>Request a demo</h3><div><form><input name='a'>"
        "</form></div></section></body>"
    )

    assert detect_form_name(document) == "Request a demo"


def test_default_name_when_no_heading():
    form = analyze_document(parse_fixture("loose_inputs.html"), URL)

    assert form.name == DEFAULT_FORM_NAME
    assert [field.type for field in form.fields] == [FieldType.TEXT, FieldType.NUMBER]


def test_no_form_raises():
    with pytest.raises(NoFormFound):
        analyze_document(parse_html("<body><p>About us</p></body>"), URL)


def test_page_without_submit_control_still_describes_form():
    form = analyze_document(
        parse_html("<body><form><input name='email'></form></body>"), URL
    )

    assert form.submit.found is False
    assert form.fields[0].type is FieldType.EMAIL


def test_describe_source_handles_missing_host():
    assert describe_source("not a url") is None


def test_discover_form_snapshots_live_page(monkeypatch):
    page = make_page(load_fixture("contact_form.html"))
    opened = _patch_session(monkeypatch, page)

    form = discover_form(URL, settle_ms=10)

    assert form.name == "Get in touch"
    assert len(opened) == 1
    page.goto.assert_called_once_with(URL, wait_until="domcontentloaded", timeout=45000)
    page.wait_for_timeout.assert_called_once_with(10)


def test_discover_form_reports_unreachable_page(monkeypatch):
    page = MagicMock(name="page")
    page.goto.side_effect = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")
    _patch_session(monkeypatch, page)

    with pytest.raises(PageUnreachable) as excinfo:
        discover_form("https://missing.invalid/")

    assert isinstance(excinfo.value.__cause__, PlaywrightError)
    page.evaluate.assert_not_called()


def test_discover_form_propagates_missing_form(monkeypatch):
    _patch_session(monkeypatch, make_page("<body><p>Nothing</p></body>"))

    with pytest.raises(NoFormFound):
        discover_form(URL)


def test_text_typed_email_field_is_sniffed_and_send_button_found():
    document = parse_html(
        '<form><input name="email" type="text"><button type="submit">Send</button></form>'
    )

    form = analyze_document(document, URL)

    (field,) = form.fields
    assert field.name == "email"
    assert field.type is FieldType.EMAIL
    assert form.submit.text == "Send"
    assert form.submit.selector == 'button[type="submit"]'


def test_repeated_discovery_is_deterministic():
    html = load_fixture("contact_form.html")

    first = analyze_document(parse_html(html), URL)
    second = analyze_document(parse_html(html), URL)

    def shape(form):
        return [(f.name, f.type, f.label, f.xpath) for f in form.fields]

    assert shape(first) == shape(second)
