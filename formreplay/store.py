"""JSON-file persistence for form descriptors and submission records."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .errors import FormNotFound, StoreError
from .form_models import FormDescriptor, SubmissionRecord
from .io_utils import generate_record_id, is_record_id, read_json, write_json
from .page_utils import registrable_domain

FORMS_DIRNAME = "forms"
SUBMISSIONS_DIRNAME = "submissions"

LOGGER = logging.getLogger(__name__)


class FormStore:
    """One JSON document per record, under ``forms/`` and ``submissions/``.

    Deleting a form leaves its submission history in place.
    """

    def __init__(self, root: Path, logger: Optional[logging.Logger] = None) -> None:
        self.root = Path(root)
        self.forms_dir = self.root / FORMS_DIRNAME
        self.submissions_dir = self.root / SUBMISSIONS_DIRNAME
        self.logger = logger or LOGGER
        self.forms_dir.mkdir(parents=True, exist_ok=True)
        self.submissions_dir.mkdir(parents=True, exist_ok=True)

    def _form_path(self, form_id: str) -> Path:
        if not is_record_id(form_id):
            raise FormNotFound(form_id)
        return self.forms_dir / f"{form_id}.json"

    def save_form(self, form: FormDescriptor) -> FormDescriptor:
        if form.id is None:
            form.id = generate_record_id()
        write_json(self._form_path(form.id), form.to_dict())
        self.logger.debug("Saved form %s (%s)", form.id, form.url)
        return form

    def get_form(self, form_id: str) -> FormDescriptor:
        path = self._form_path(form_id)
        if not path.exists():
            raise FormNotFound(form_id)
        return self._load_form(path)

    def _load_form(self, path: Path) -> FormDescriptor:
        try:
            return FormDescriptor.from_dict(read_json(path))
        except (ValueError, KeyError) as exc:
            raise StoreError(f"Corrupt form document {path.name}: {exc}") from exc

    def list_forms(self, domain: Optional[str] = None) -> List[FormDescriptor]:
        forms = [self._load_form(path) for path in sorted(self.forms_dir.glob("*.json"))]
        if domain:
            wanted = registrable_domain(domain if "://" in domain else f"http://{domain}")
            forms = [form for form in forms if registrable_domain(form.url) == wanted]
        forms.sort(key=lambda form: form.updated, reverse=True)
        return forms

    def delete_form(self, form_id: str) -> None:
        path = self._form_path(form_id)
        if not path.exists():
            raise FormNotFound(form_id)
        path.unlink()
        self.logger.debug("Deleted form %s", form_id)

    def clear_forms(self) -> int:
        removed = 0
        for path in self.forms_dir.glob("*.json"):
            path.unlink()
            removed += 1
        self.logger.debug("Cleared %d forms", removed)
        return removed

    def save_submission(self, record: SubmissionRecord) -> SubmissionRecord:
        if record.id is None:
            record.id = generate_record_id()
        write_json(self.submissions_dir / f"{record.id}.json", record.to_dict())
        self.logger.debug(
            "Saved %s submission %s for form %s",
            record.status.value,
            record.id,
            record.form_id,
        )
        return record

    def list_submissions(self, form_id: str) -> List[SubmissionRecord]:
        records: List[SubmissionRecord] = []
        for path in self.submissions_dir.glob("*.json"):
            try:
                record = SubmissionRecord.from_dict(read_json(path))
            except (ValueError, KeyError) as exc:
                raise StoreError(
                    f"Corrupt submission document {path.name}: {exc}"
                ) from exc
            if record.form_id == form_id:
                records.append(record)
        records.sort(key=lambda record: record.timestamp, reverse=True)
        return records


__all__ = ["FormStore"]
