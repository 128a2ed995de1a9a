"""Discover a form on a live page and describe it as a FormDescriptor."""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from .browser import BrowserConfig, open_session
from .dom import DomDocument, DomNode, snapshot_page
from .errors import PageUnreachable
from .field_extraction import clean_text, extract_fields
from .form_detection import form_elements, locate_form_container
from .form_models import FormDescriptor, utcnow
from .page_utils import open_page, registrable_domain
from .submit_detection import locate_submit_control

DEFAULT_FORM_NAME = "Contact Form"
DISCOVERY_SETTLE_MS = 2000
HEADING_TAGS = ("h1", "h2", "h3", "h4")

LOGGER = logging.getLogger(__name__)


def _scoped(scope: Callable[[DomNode], bool], target: Callable[[DomNode], bool]):
    return lambda node: target(node) and any(scope(a) for a in node.ancestors())


def _is_form(node: DomNode) -> bool:
    return node.tag == "form"


def _has_form_class(node: DomNode) -> bool:
    return "form" in node.class_list


def _class_mentions_form(node: DomNode) -> bool:
    return "form" in node.get("class")


def _heading(tag: str) -> Callable[[DomNode], bool]:
    return lambda node: node.tag == tag


def _title(node: DomNode) -> bool:
    return "title" in node.class_list


FORM_NAME_SELECTORS: Tuple[Tuple[str, Callable[[DomNode], bool]], ...] = (
    *((f"form {tag}", _scoped(_is_form, _heading(tag))) for tag in HEADING_TAGS),
    *((f".form {tag}", _scoped(_has_form_class, _heading(tag))) for tag in HEADING_TAGS),
    *(
        (f'[class*="form"] {tag}', _scoped(_class_mentions_form, _heading(tag)))
        for tag in HEADING_TAGS
    ),
    ("form .title", _scoped(_is_form, _title)),
    (".form .title", _scoped(_has_form_class, _title)),
    ('[class*="form"] .title', _scoped(_class_mentions_form, _title)),
)


def detect_form_name(document: DomDocument) -> str:
    for _, matcher in FORM_NAME_SELECTORS:
        element = document.find_first(matcher)
        if element is not None:
            text = clean_text(element.text_content())
            if text:
                return text
    forms = form_elements(document)
    if forms:
        body = document.body
        for ancestor in forms[0].ancestors():
            if ancestor is body:
                break
            heading = ancestor.find_first(lambda node: node.tag in HEADING_TAGS)
            if heading is not None:
                text = clean_text(heading.text_content())
                if text:
                    return text
    return ""


def describe_source(url: str) -> Optional[str]:
    domain = registrable_domain(url)
    return f"Discovered on {domain}" if domain else None


def analyze_document(
    document: DomDocument, url: str, logger: Optional[logging.Logger] = None
) -> FormDescriptor:
    """Run location, extraction, and submit detection against a snapshot."""
    log = logger or LOGGER
    locate_form_container(document, logger=log)
    fields = extract_fields(document, logger=log)
    submit = locate_submit_control(document, logger=log)
    name = detect_form_name(document) or DEFAULT_FORM_NAME
    now = utcnow()
    descriptor = FormDescriptor(
        url=url,
        name=name,
        description=describe_source(url),
        fields=fields,
        submit=submit,
        created=now,
        updated=now,
    )
    log.info(
        "Discovered '%s' with %d fields (submit control: %s)",
        descriptor.name,
        len(descriptor.fields),
        "yes" if submit.found else "no",
    )
    return descriptor


def discover_form(
    url: str,
    *,
    config: Optional[BrowserConfig] = None,
    settle_ms: int = DISCOVERY_SETTLE_MS,
    logger: Optional[logging.Logger] = None,
) -> FormDescriptor:
    log = logger or LOGGER
    browser_config = config or BrowserConfig()
    with open_session(browser_config) as page:
        log.info("Navigating to %s", url)
        open_page(
            page,
            url,
            error_cls=PageUnreachable,
            timeout_ms=browser_config.navigation_timeout_ms,
            logger=log,
        )
        page.wait_for_timeout(settle_ms)
        document = snapshot_page(page)
        return analyze_document(document, url, logger=log)


__all__ = [
    "DEFAULT_FORM_NAME",
    "DISCOVERY_SETTLE_MS",
    "FORM_NAME_SELECTORS",
    "detect_form_name",
    "describe_source",
    "analyze_document",
    "discover_form",
]
