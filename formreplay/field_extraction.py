"""Enumerate fillable controls and infer a descriptor for each one."""

from __future__ import annotations

import logging
import re
from typing import Callable, List, Optional, Tuple

from .dom import DomDocument, DomNode
from .form_detection import (
    IGNORED_INPUT_TYPES,
    container_candidates,
    form_elements,
    input_type,
)
from .form_models import FieldDescriptor, FieldType, FieldValidation
from .locators import css_locator, structural_path

UNTITLED_FIELD = "Untitled Field"
SLUG_PATTERN = re.compile(r"[^a-z0-9]+")
WHITESPACE_PATTERN = re.compile(r"\s+")

INPUT_SELECTOR_KINDS: Tuple[Tuple[str, Callable[[DomNode], bool]], ...] = (
    (
        'input:not([type="hidden"]):not([type="submit"])'
        ':not([type="button"]):not([type="reset"]):not([type="image"])',
        lambda node: node.tag == "input" and input_type(node) not in IGNORED_INPUT_TYPES,
    ),
    ("textarea", lambda node: node.tag == "textarea"),
    ("select", lambda node: node.tag == "select"),
)

# Applied in order; a later match overrides an earlier one.
TYPE_SNIFFING_RULES: Tuple[Tuple[Tuple[str, ...], FieldType], ...] = (
    (("email",), FieldType.EMAIL),
    (("phone", "mobile"), FieldType.TEL),
    (("message", "comment"), FieldType.TEXTAREA),
)

LOGGER = logging.getLogger(__name__)

LabelStrategy = Callable[[DomNode, DomDocument], str]


def clean_text(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text or "").strip()


def slugify_label(label: str) -> str:
    return SLUG_PATTERN.sub("_", label.lower()).strip("_")


def _aria_label(element: DomNode, document: DomDocument) -> str:
    return clean_text(element.get("aria-label"))


def _aria_labelledby(element: DomNode, document: DomDocument) -> str:
    texts = []
    for reference in element.get("aria-labelledby").split():
        target = document.get_element_by_id(reference)
        if target is not None:
            texts.append(clean_text(target.text_content()))
    return " ".join(text for text in texts if text)


def _label_for(element: DomNode, document: DomDocument) -> str:
    if not element.id:
        return ""
    label = document.find_first(
        lambda node: node.tag == "label" and node.get("for") == element.id
    )
    return clean_text(label.text_content()) if label else ""


def _ancestor_label(element: DomNode, document: DomDocument) -> str:
    parent = element.parent
    while parent is not None and parent.tag != "form" and not parent.tag.startswith("#"):
        label = parent.find_first(lambda node: node.tag == "label")
        if label is not None:
            text = clean_text(label.text_content())
            if text:
                return text
        parent = parent.parent
    return ""


def _placeholder(element: DomNode, document: DomDocument) -> str:
    return element.get("placeholder")


def _name_attribute(element: DomNode, document: DomDocument) -> str:
    return element.get("name")


def _id_attribute(element: DomNode, document: DomDocument) -> str:
    return element.id


LABEL_STRATEGIES: Tuple[Tuple[str, LabelStrategy], ...] = (
    ("aria-label", _aria_label),
    ("aria-labelledby", _aria_labelledby),
    ("label-for", _label_for),
    ("ancestor-label", _ancestor_label),
    ("placeholder", _placeholder),
    ("name", _name_attribute),
    ("id", _id_attribute),
)


def resolve_label(element: DomNode, document: DomDocument) -> str:
    for _, strategy in LABEL_STRATEGIES:
        label = strategy(element, document)
        if label:
            return label
    return UNTITLED_FIELD


def native_field_type(element: DomNode) -> FieldType:
    if element.tag == "textarea":
        return FieldType.TEXTAREA
    if element.tag == "select":
        return FieldType.SELECT
    return FieldType.from_native(element.get("type"))


def sniff_field_type(name: str, native: FieldType) -> FieldType:
    """Override ``native`` from substrings of the resolved field name."""
    lowered = name.lower()
    resolved = native
    for keywords, field_type in TYPE_SNIFFING_RULES:
        if any(keyword in lowered for keyword in keywords):
            resolved = field_type
    return resolved


def _field_options(element: DomNode, scope: DomNode) -> List[str]:
    if element.tag == "select":
        options = []
        for option in element.find_all(lambda node: node.tag == "option"):
            text = clean_text(option.text_content())
            options.append(text or option.get("value"))
        return options
    if element.tag == "input" and input_type(element) == "radio" and element.get("name"):
        group = scope.find_all(
            lambda node: node.tag == "input"
            and input_type(node) == "radio"
            and node.get("name") == element.get("name")
        )
        return [radio.get("value", "on") or "on" for radio in group]
    return []


def _parse_int(raw: str) -> Optional[int]:
    try:
        return int(raw.strip())
    except (AttributeError, ValueError):
        return None


def _parse_number(raw: str) -> Optional[float | int]:
    value = _parse_int(raw)
    if value is not None:
        return value
    try:
        return float(raw.strip())
    except (AttributeError, ValueError):
        return None


def _capture_validation(element: DomNode) -> Optional[FieldValidation]:
    validation = FieldValidation(
        required=True if element.has_attr("required") else None,
        min_length=_parse_int(element.get("minlength")),
        max_length=_parse_int(element.get("maxlength")),
        min=_parse_number(element.get("min")),
        max=_parse_number(element.get("max")),
        pattern=element.get("pattern") or None,
    )
    return None if validation.is_empty() else validation


def build_field_descriptor(
    element: DomNode, document: DomDocument, scope: DomNode
) -> FieldDescriptor:
    label = resolve_label(element, document)
    name = element.get("name") or element.id or slugify_label(label) or "untitled_field"
    return FieldDescriptor(
        name=name,
        label=label,
        type=sniff_field_type(name, native_field_type(element)),
        required=element.has_attr("required"),
        options=_field_options(element, scope),
        validation=_capture_validation(element),
        selector=css_locator(element),
        xpath=structural_path(element),
        placeholder=element.get("placeholder") or None,
    )


def extraction_scopes(document: DomDocument) -> List[DomNode]:
    """Forms when present, else form-like containers, else the whole body."""
    forms = form_elements(document)
    if forms:
        return forms
    containers = container_candidates(document)
    if containers:
        return containers
    return [document.body]


def extract_fields(
    document: DomDocument, logger: Optional[logging.Logger] = None
) -> List[FieldDescriptor]:
    log = logger or LOGGER
    descriptors: List[FieldDescriptor] = []
    seen = set()
    for scope in extraction_scopes(document):
        for _, matcher in INPUT_SELECTOR_KINDS:
            for element in scope.find_all(matcher):
                if element in seen:
                    continue
                seen.add(element)
                if native_field_type(element) is FieldType.HIDDEN or not element.rendered:
                    log.debug("Skipping non-rendered control %s", structural_path(element))
                    continue
                descriptor = build_field_descriptor(element, document, scope)
                log.debug(
                    "Field '%s' (%s) labelled '%s' at %s",
                    descriptor.name,
                    descriptor.type.value,
                    descriptor.label,
                    descriptor.xpath,
                )
                descriptors.append(descriptor)
    log.info("Extracted %d fields", len(descriptors))
    return descriptors


__all__ = [
    "UNTITLED_FIELD",
    "INPUT_SELECTOR_KINDS",
    "TYPE_SNIFFING_RULES",
    "LABEL_STRATEGIES",
    "clean_text",
    "slugify_label",
    "resolve_label",
    "native_field_type",
    "sniff_field_type",
    "build_field_descriptor",
    "extraction_scopes",
    "extract_fields",
]
