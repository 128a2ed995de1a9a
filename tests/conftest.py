from __future__ import annotations

import pytest

from formreplay.dom import DomDocument
from formreplay.store import FormStore
from tests.helpers import load_fixture, parse_fixture


@pytest.fixture
def contact_document() -> DomDocument:
    return parse_fixture("contact_form.html")


@pytest.fixture
def contact_html() -> str:
    return load_fixture("contact_form.html")


@pytest.fixture
def store(tmp_path) -> FormStore:
    return FormStore(tmp_path / "data")
