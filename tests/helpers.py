from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional
from unittest.mock import MagicMock

from formreplay.dom import SNAPSHOT_SCRIPT, DomDocument, parse_html
from formreplay.filler import CONTROL_KIND_SCRIPT

FIXTURES = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


def parse_fixture(name: str, url: str = "https://www.example.com/contact") -> DomDocument:
    return parse_html(load_fixture(name), url=url)


def make_handle(kind: str = "input") -> MagicMock:
    """An element handle whose control-kind script answers ``kind``."""
    handle = MagicMock(name=f"handle<{kind}>")

    def evaluate(script, *args):
        if script == CONTROL_KIND_SCRIPT:
            return kind
        return None

    handle.evaluate.side_effect = evaluate
    return handle


def make_page(
    html: str,
    handles: Optional[Dict[str, MagicMock]] = None,
    url: str = "https://www.example.com/contact",
) -> MagicMock:
    """A Playwright page double serving a snapshot of ``html``.

    ``handles`` maps locator strings to the element handle
    ``query_selector`` returns for them; anything else resolves to None.
    """
    snapshot = parse_html(html, url=url).to_dict()
    handles = handles or {}
    page = MagicMock(name="page")
    page.url = url

    def evaluate(script, *args):
        if script == SNAPSHOT_SCRIPT:
            return snapshot
        return None

    page.evaluate.side_effect = evaluate
    page.query_selector.side_effect = lambda locator: handles.get(locator)
    return page
