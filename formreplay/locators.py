"""Structural and CSS-like locators for snapshot elements."""

from __future__ import annotations

import re

from .dom import DomNode

PLAIN_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


def structural_path(node: DomNode) -> str:
    """Return an absolute XPath built from tag names and id or sibling-index steps."""
    segments = []
    current = node
    while current is not None and not current.is_text and not current.tag.startswith("#"):
        segments.append(_path_segment(current))
        current = current.parent
    return "/" + "/".join(reversed(segments))


def css_locator(node: DomNode) -> str:
    element_id = node.id
    if element_id:
        if PLAIN_IDENTIFIER.match(element_id):
            return f"#{element_id}"
        return f"[id={quote_attribute(element_id)}]"
    name = node.get("name")
    if name:
        return f"[name={quote_attribute(name)}]"
    return ""


def quote_attribute(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _path_segment(node: DomNode) -> str:
    if node.id:
        return f"{node.tag}[@id={_xpath_literal(node.id)}]"
    return f"{node.tag}[{_sibling_index(node)}]"


def _sibling_index(node: DomNode) -> int:
    if node.parent is None:
        return 1
    index = 1
    for sibling in node.parent.elements():
        if sibling is node:
            break
        if sibling.tag == node.tag:
            index += 1
    return index


def _xpath_literal(value: str) -> str:
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{part}'" for part in parts) + ")"


__all__ = ["structural_path", "css_locator", "quote_attribute"]
