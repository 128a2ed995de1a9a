from contextlib import contextmanager

import pytest

from formreplay import analyzer, service
from formreplay.errors import FormNotFound, NavigationFailed
from formreplay.filler import FillResult
from formreplay.form_models import SubmissionStatus
from formreplay.service import (
    analyze_and_store,
    analyze_html_and_store,
    submit_stored_form,
)
from tests.helpers import make_page

URL = "https://www.example.com/contact"


def test_offline_analysis_is_stored(store, contact_html):
    form = analyze_html_and_store(contact_html, URL, store)

    assert store.get_form(form.id).name == "Get in touch"


def test_live_analysis_is_stored(monkeypatch, store, contact_html):
    @contextmanager
    def fake_session(config=None):
        yield make_page(contact_html)

    monkeypatch.setattr(analyzer, "open_session", fake_session)

    form = analyze_and_store(URL, store)

    assert [stored.id for stored in store.list_forms()] == [form.id]


def test_successful_fill_is_recorded(monkeypatch, store, contact_html):
    form = analyze_html_and_store(contact_html, URL, store)
    previous_update = store.get_form(form.id).updated
    seen = {}

    def fake_fill(stored_form, values, options=None, *, config=None, logger=None):
        seen["url"] = stored_form.url
        return FillResult(success=True, submitted=True, filled_fields=["email"])

    monkeypatch.setattr(service, "fill_form", fake_fill)

    outcome = submit_stored_form(form.id, {"email": "a@b.co"}, store)

    assert seen["url"] == URL
    assert outcome.record.status is SubmissionStatus.SUCCESS
    assert outcome.to_dict()["result"]["submitted"] is True
    assert store.list_submissions(form.id)[0].values == {"email": "a@b.co"}
    assert store.get_form(form.id).updated >= previous_update


def test_soft_submit_failure_still_records_success(monkeypatch, store, contact_html):
    form = analyze_html_and_store(contact_html, URL, store)
    monkeypatch.setattr(
        service,
        "fill_form",
        lambda *args, **kwargs: FillResult(
            success=True, submitted=False, submit_error="Submit button not found"
        ),
    )

    outcome = submit_stored_form(form.id, {}, store)

    assert outcome.record.status is SubmissionStatus.SUCCESS
    assert outcome.result.submit_error == "Submit button not found"


def test_fatal_fill_error_is_recorded_then_reraised(monkeypatch, store, contact_html):
    form = analyze_html_and_store(contact_html, URL, store)

    def failing_fill(*args, **kwargs):
        raise NavigationFailed("Could not load page")

    monkeypatch.setattr(service, "fill_form", failing_fill)

    with pytest.raises(NavigationFailed):
        submit_stored_form(form.id, {"email": "a@b.co"}, store)

    (record,) = store.list_submissions(form.id)
    assert record.status is SubmissionStatus.ERROR
    assert record.error == "Could not load page"


def test_unknown_form_is_rejected_without_recording(store):
    with pytest.raises(FormNotFound):
        submit_stored_form("0" * 24, {}, store)

    assert store.list_submissions("0" * 24) == []
