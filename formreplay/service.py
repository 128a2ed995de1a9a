"""Tie discovery and replay to the store."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from .analyzer import analyze_document, discover_form
from .browser import BrowserConfig
from .dom import parse_html
from .filler import FillOptions, FillResult, fill_form
from .form_models import FormDescriptor, SubmissionRecord
from .store import FormStore

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SubmissionOutcome:
    record: SubmissionRecord
    result: Optional[FillResult] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"submission": self.record.to_dict()}
        if self.result is not None:
            payload["result"] = self.result.to_dict()
        return payload


def analyze_and_store(
    url: str,
    store: FormStore,
    *,
    config: Optional[BrowserConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> FormDescriptor:
    log = logger or LOGGER
    form = discover_form(url, config=config, logger=log)
    store.save_form(form)
    log.info("Stored form %s for %s", form.id, url)
    return form


def analyze_html_and_store(
    raw_html: str,
    url: str,
    store: FormStore,
    *,
    logger: Optional[logging.Logger] = None,
) -> FormDescriptor:
    """Offline discovery against saved markup instead of a live page."""
    log = logger or LOGGER
    form = analyze_document(parse_html(raw_html, url=url), url, logger=log)
    store.save_form(form)
    log.info("Stored form %s for %s", form.id, url)
    return form


def submit_stored_form(
    form_id: str,
    values: Mapping[str, Any],
    store: FormStore,
    *,
    options: Optional[FillOptions] = None,
    config: Optional[BrowserConfig] = None,
    logger: Optional[logging.Logger] = None,
) -> SubmissionOutcome:
    """Replay a stored form and record the attempt whatever its outcome.

    Fatal fill errors are re-raised after the error record is saved.
    """
    log = logger or LOGGER
    form = store.get_form(form_id)
    try:
        result = fill_form(form, values, options, config=config, logger=log)
    except Exception as exc:
        failure = SubmissionRecord.failure(form_id, dict(values), str(exc))
        _record(store, form, failure, log)
        raise
    record = _record(store, form, SubmissionRecord.success(form_id, dict(values)), log)
    return SubmissionOutcome(record=record, result=result)


def _record(
    store: FormStore,
    form: FormDescriptor,
    record: SubmissionRecord,
    log: logging.Logger,
) -> SubmissionRecord:
    store.save_submission(record)
    form.touch()
    store.save_form(form)
    log.info("Recorded %s submission %s", record.status.value, record.id)
    return record


__all__ = [
    "SubmissionOutcome",
    "analyze_and_store",
    "analyze_html_and_store",
    "submit_stored_form",
]
