"""Locate the most probable form container on a page snapshot."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from .dom import DomDocument, DomNode
from .errors import NoFormFound
from .form_models import STRUCTURAL_TYPES, FieldType

FIELD_TAGS = ("input", "textarea", "select")
IGNORED_INPUT_TYPES = {FieldType.HIDDEN.value} | {kind.value for kind in STRUCTURAL_TYPES}

Matcher = Callable[[DomNode], bool]

CONTAINER_PATTERNS: Tuple[Tuple[str, Matcher], ...] = (
    (".form", lambda node: "form" in node.class_list),
    (".contact-form", lambda node: "contact-form" in node.class_list),
    (".contact", lambda node: "contact" in node.class_list),
    (".form-container", lambda node: "form-container" in node.class_list),
    ('[class*="form"]', lambda node: "form" in node.get("class")),
    ('[id*="form"]', lambda node: "form" in node.id),
)

LOGGER = logging.getLogger(__name__)


class ContainerTier(str, Enum):
    FORM = "form"
    CONTAINER = "container"
    INPUT_CLUSTER = "input-group"


@dataclass(slots=True)
class FormContainer:
    tier: ContainerTier
    element: DomNode
    input_count: int
    has_submit_control: bool


def input_type(node: DomNode) -> str:
    return node.get("type").strip().lower() or "text"


def is_field_candidate(node: DomNode) -> bool:
    if node.tag not in FIELD_TAGS:
        return False
    return node.tag != "input" or input_type(node) not in IGNORED_INPUT_TYPES


def is_fillable(node: DomNode) -> bool:
    return is_field_candidate(node) and node.rendered


def fillable_inputs(scope: DomNode) -> List[DomNode]:
    return scope.find_all(is_fillable)


def matches_container_pattern(node: DomNode) -> bool:
    return any(matcher(node) for _, matcher in CONTAINER_PATTERNS)


def container_candidates(document: DomDocument) -> List[DomNode]:
    return document.find_all(matches_container_pattern)


def form_elements(document: DomDocument) -> List[DomNode]:
    return document.find_all(lambda node: node.tag == "form")


def lowest_common_ancestor(nodes: Sequence[DomNode]) -> Optional[DomNode]:
    """Reduce the parents of ``nodes`` pairwise to their deepest shared ancestor."""
    parents = [node.parent for node in nodes if node.parent is not None]
    if not parents:
        return None
    common = parents[0]
    for other in parents[1:]:
        common = _pairwise_ancestor(common, other)
        if common is None:
            return None
    return common


def _pairwise_ancestor(first: DomNode, second: DomNode) -> Optional[DomNode]:
    lineage = {first, *first.ancestors()}
    if second in lineage:
        return second
    for ancestor in second.ancestors():
        if ancestor in lineage:
            return ancestor
    return None


def _declares_submit(node: DomNode) -> bool:
    if node.tag == "button":
        return node.get("type").strip().lower() in {"", "submit"}
    return node.tag == "input" and input_type(node) == "submit"


def _looks_like_submit(node: DomNode) -> bool:
    if node.tag == "button":
        return True
    if node.tag == "input" and input_type(node) == "submit":
        return True
    return "submit" in node.get("class") or "submit" in node.id


def _explicit_form_tier(document: DomDocument) -> Optional[FormContainer]:
    forms = form_elements(document)
    if not forms:
        return None
    chosen = next((form for form in forms if fillable_inputs(form)), forms[0])
    return FormContainer(
        tier=ContainerTier.FORM,
        element=chosen,
        input_count=len(fillable_inputs(chosen)),
        has_submit_control=chosen.find_first(_declares_submit) is not None,
    )


def _container_class_tier(document: DomDocument) -> Optional[FormContainer]:
    for container in container_candidates(document):
        inputs = fillable_inputs(container)
        if inputs:
            return FormContainer(
                tier=ContainerTier.CONTAINER,
                element=container,
                input_count=len(inputs),
                has_submit_control=container.find_first(_looks_like_submit) is not None,
            )
    return None


def _input_cluster_tier(document: DomDocument) -> Optional[FormContainer]:
    inputs = fillable_inputs(document.body)
    if not inputs:
        return None
    common = lowest_common_ancestor(inputs)
    if common is None:
        return None
    return FormContainer(
        tier=ContainerTier.INPUT_CLUSTER,
        element=common,
        input_count=len(inputs),
        has_submit_control=common.find_first(_looks_like_submit) is not None,
    )


FORM_TIERS: Tuple[Callable[[DomDocument], Optional[FormContainer]], ...] = (
    _explicit_form_tier,
    _container_class_tier,
    _input_cluster_tier,
)


def locate_form_container(
    document: DomDocument, logger: Optional[logging.Logger] = None
) -> FormContainer:
    log = logger or LOGGER
    for tier in FORM_TIERS:
        container = tier(document)
        if container is not None:
            log.info(
                "Found form via %s tier: <%s> with %d inputs (submit control: %s)",
                container.tier.value,
                container.element.tag,
                container.input_count,
                container.has_submit_control,
            )
            return container
    log.warning("No form container or fillable inputs found")
    raise NoFormFound()


__all__ = [
    "FIELD_TAGS",
    "IGNORED_INPUT_TYPES",
    "CONTAINER_PATTERNS",
    "ContainerTier",
    "FormContainer",
    "FORM_TIERS",
    "input_type",
    "is_field_candidate",
    "is_fillable",
    "fillable_inputs",
    "matches_container_pattern",
    "container_candidates",
    "form_elements",
    "lowest_common_ancestor",
    "locate_form_container",
]
