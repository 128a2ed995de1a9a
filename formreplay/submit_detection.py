"""Find the control most likely to submit the form."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

from .dom import DomDocument, DomNode
from .field_extraction import clean_text
from .form_detection import input_type
from .form_models import SubmitControl
from .locators import css_locator, structural_path

VERIFY_KEYWORDS = ("submit", "send", "request")
FALLBACK_KEYWORDS = ("submit", "send")


def _typed(tag: str, type_name: str) -> Callable[[DomNode], bool]:
    return lambda node: node.tag == tag and node.get("type").strip().lower() == type_name


def _has_role_button(node: DomNode) -> bool:
    return node.get("role") == "button"


SUBMIT_SELECTORS: Tuple[Tuple[str, Callable[[DomNode], bool]], ...] = (
    ('button[type="submit"]', _typed("button", "submit")),
    ('input[type="submit"]', _typed("input", "submit")),
    ("button", lambda node: node.tag == "button"),
    ('[role="button"]', _has_role_button),
    ("button.submit", lambda node: node.tag == "button" and "submit" in node.class_list),
    (
        ".submit button",
        lambda node: node.tag == "button"
        and any("submit" in ancestor.class_list for ancestor in node.ancestors()),
    ),
    (
        "button.submit-button",
        lambda node: node.tag == "button" and "submit-button" in node.class_list,
    ),
    ("button#submit", lambda node: node.tag == "button" and node.id == "submit"),
    (
        'button[class*="submit"]',
        lambda node: node.tag == "button" and "submit" in node.get("class"),
    ),
    ('button[id*="submit"]', lambda node: node.tag == "button" and "submit" in node.id),
    (
        'input[class*="submit"]',
        lambda node: node.tag == "input" and "submit" in node.get("class"),
    ),
    ('input[id*="submit"]', lambda node: node.tag == "input" and "submit" in node.id),
)

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class SubmitMatch:
    element: DomNode
    control: SubmitControl
    strategy: str


def _button_like(node: DomNode) -> bool:
    if node.tag == "button" or _has_role_button(node):
        return True
    return node.tag == "input" and input_type(node) == "submit"


def _mentions(node: DomNode, keywords: Sequence[str], *, include_id: bool) -> bool:
    haystacks = [
        node.text_content().lower(),
        (node.value if node.value is not None else node.get("value")).lower(),
        " ".join(node.class_list).lower(),
    ]
    if include_id:
        haystacks.append(node.id.lower())
    return any(keyword in haystack for haystack in haystacks for keyword in keywords)


def _control_text(node: DomNode) -> Optional[str]:
    text = clean_text(node.text_content())
    if text:
        return text
    return clean_text(node.get("value")) or None


def _build_match(node: DomNode, selector: str, strategy: str) -> SubmitMatch:
    return SubmitMatch(
        element=node,
        control=SubmitControl(
            selector=selector,
            xpath=structural_path(node),
            text=_control_text(node),
        ),
        strategy=strategy,
    )


def find_submit_element(document: DomDocument) -> Optional[SubmitMatch]:
    for selector, matcher in SUBMIT_SELECTORS:
        candidate = document.find_first(matcher)
        if candidate is not None and _mentions(
            candidate, VERIFY_KEYWORDS, include_id=True
        ):
            return _build_match(candidate, selector, "selector")
    for candidate in document.find_all(_button_like):
        if _mentions(candidate, FALLBACK_KEYWORDS, include_id=False):
            return _build_match(candidate, css_locator(candidate), "text")
    return None


def locate_submit_control(
    document: DomDocument, logger: Optional[logging.Logger] = None
) -> SubmitControl:
    log = logger or LOGGER
    match = find_submit_element(document)
    if match is None:
        log.warning("No submit control found")
        return SubmitControl()
    log.info(
        "Submit control '%s' via %s match (%s)",
        match.control.text or "",
        match.strategy,
        match.control.selector or match.control.xpath,
    )
    return match.control


__all__ = [
    "SUBMIT_SELECTORS",
    "SubmitMatch",
    "find_submit_element",
    "locate_submit_control",
]
