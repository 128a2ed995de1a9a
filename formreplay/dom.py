"""Serializable DOM snapshots that the discovery heuristics run against."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from html.parser import HTMLParser
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from playwright.sync_api import Page

TEXT_TAG = "#text"
DOCUMENT_TAG = "#document"
VOID_ELEMENTS = {
    "area",
    "base",
    "br",
    "col",
    "embed",
    "hr",
    "img",
    "input",
    "link",
    "meta",
    "param",
    "source",
    "track",
    "wbr",
}
SKIPPED_CONTENT_TAGS = {"script", "style", "noscript", "template"}
IMPLICITLY_CLOSED = {
    "option": {"option"},
    "li": {"li"},
    "p": {"p"},
    "tr": {"tr", "td", "th"},
    "td": {"td", "th"},
    "th": {"td", "th"},
}
VALUE_TAGS = {"input", "button", "option", "select", "textarea"}
DISPLAY_NONE_PATTERN = re.compile(r"display\s*:\s*none", re.IGNORECASE)

NodePredicate = Callable[["DomNode"], bool]


@dataclass(slots=True, eq=False)
class DomNode:
    tag: str
    attrs: Dict[str, str] = field(default_factory=dict)
    text: str = ""
    rendered: bool = True
    value: Optional[str] = None
    children: List["DomNode"] = field(default_factory=list)
    parent: Optional["DomNode"] = field(default=None, repr=False)

    @property
    def is_text(self) -> bool:
        return self.tag == TEXT_TAG

    @property
    def id(self) -> str:
        return self.attrs.get("id", "")

    @property
    def class_list(self) -> List[str]:
        return self.attrs.get("class", "").split()

    def get(self, name: str, default: str = "") -> str:
        return self.attrs.get(name, default)

    def has_attr(self, name: str) -> bool:
        return name in self.attrs

    def append(self, child: "DomNode") -> "DomNode":
        child.parent = self
        self.children.append(child)
        return child

    def elements(self) -> List["DomNode"]:
        return [child for child in self.children if not child.is_text]

    def iter_descendants(self) -> Iterator["DomNode"]:
        """Yield descendant elements in document order."""
        stack = list(reversed(self.elements()))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.elements()))

    def ancestors(self) -> Iterator["DomNode"]:
        current = self.parent
        while current is not None and current.tag != DOCUMENT_TAG:
            yield current
            current = current.parent

    def closest(self, predicate: NodePredicate) -> Optional["DomNode"]:
        if predicate(self):
            return self
        for ancestor in self.ancestors():
            if predicate(ancestor):
                return ancestor
        return None

    def find_first(self, predicate: NodePredicate) -> Optional["DomNode"]:
        for node in self.iter_descendants():
            if predicate(node):
                return node
        return None

    def find_all(self, predicate: NodePredicate) -> List["DomNode"]:
        return [node for node in self.iter_descendants() if predicate(node)]

    def text_content(self) -> str:
        if self.is_text:
            return self.text
        parts: List[str] = []
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if node.is_text:
                parts.append(node.text)
            else:
                stack.extend(reversed(node.children))
        return "".join(parts)

    def to_dict(self) -> Dict[str, object]:
        if self.is_text:
            return {"tag": TEXT_TAG, "text": self.text}
        payload: Dict[str, object] = {
            "tag": self.tag,
            "attrs": dict(self.attrs),
            "rendered": self.rendered,
            "children": [child.to_dict() for child in self.children],
        }
        if self.value is not None:
            payload["value"] = self.value
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "DomNode":
        root = _node_from_entry(payload)
        pending: List[Tuple[DomNode, Dict[str, object]]] = [(root, payload)]
        while pending:
            node, entry = pending.pop()
            for child_entry in entry.get("children") or []:
                child = node.append(_node_from_entry(child_entry))
                pending.append((child, child_entry))
        return root


def _node_from_entry(entry: Dict[str, object]) -> DomNode:
    tag = str(entry.get("tag") or "").lower()
    if tag == TEXT_TAG:
        return DomNode(tag=TEXT_TAG, text=str(entry.get("text") or ""))
    value = entry.get("value")
    return DomNode(
        tag=tag,
        attrs={str(k).lower(): str(v) for k, v in (entry.get("attrs") or {}).items()},
        rendered=bool(entry.get("rendered", True)),
        value=None if value is None else str(value),
    )


@dataclass(slots=True)
class DomDocument:
    root: DomNode
    url: str = ""
    title: str = ""

    @property
    def body(self) -> DomNode:
        if self.root.tag == "body":
            return self.root
        return self.root.find_first(lambda node: node.tag == "body") or self.root

    def iter_elements(self) -> Iterator[DomNode]:
        yield self.root
        yield from self.root.iter_descendants()

    def find_first(self, predicate: NodePredicate) -> Optional[DomNode]:
        for node in self.iter_elements():
            if predicate(node):
                return node
        return None

    def find_all(self, predicate: NodePredicate) -> List[DomNode]:
        return [node for node in self.iter_elements() if predicate(node)]

    def get_element_by_id(self, element_id: str) -> Optional[DomNode]:
        if not element_id:
            return None
        return self.find_first(lambda node: node.id == element_id)

    def to_dict(self) -> Dict[str, object]:
        return {"url": self.url, "title": self.title, "root": self.root.to_dict()}

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "DomDocument":
        root_entry = payload.get("root") or {"tag": "html", "children": []}
        return cls(
            root=DomNode.from_dict(root_entry),
            url=str(payload.get("url") or ""),
            title=str(payload.get("title") or ""),
        )


SNAPSHOT_SCRIPT = """
() => {
  const SKIPPED = new Set(['SCRIPT', 'STYLE', 'NOSCRIPT', 'TEMPLATE']);
  const VALUE_TAGS = new Set(['INPUT', 'BUTTON', 'OPTION', 'SELECT', 'TEXTAREA']);
  const isRendered = (el) => {
    if (el === document.body || el === document.documentElement) return true;
    if (el.offsetParent !== null) return true;
    const style = window.getComputedStyle(el);
    return style.position === 'fixed' && el.getClientRects().length > 0;
  };
  const walk = (node) => {
    if (node.nodeType === Node.TEXT_NODE) {
      return node.nodeValue ? { tag: '#text', text: node.nodeValue } : null;
    }
    if (node.nodeType !== Node.ELEMENT_NODE) return null;
    const attrs = {};
    for (const attr of Array.from(node.attributes || [])) {
      attrs[attr.name] = attr.value;
    }
    const entry = {
      tag: node.tagName.toLowerCase(),
      attrs,
      rendered: isRendered(node),
      children: [],
    };
    if (VALUE_TAGS.has(node.tagName)) entry.value = String(node.value ?? '');
    if (SKIPPED.has(node.tagName)) return entry;
    for (const child of Array.from(node.childNodes)) {
      const serialized = walk(child);
      if (serialized) entry.children.push(serialized);
    }
    return entry;
  };
  return { url: location.href, title: document.title, root: walk(document.documentElement) };
}
"""


def snapshot_page(page: Page) -> DomDocument:
    payload = page.evaluate(SNAPSHOT_SCRIPT) or {}
    return DomDocument.from_dict(payload)


class _SnapshotBuilder(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.document = DomNode(tag=DOCUMENT_TAG)
        self.stack: List[DomNode] = [self.document]
        self.skip_depth = 0
        self.title_parts: List[str] = []

    @property
    def current(self) -> DomNode:
        return self.stack[-1]

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, str | None]]) -> None:
        tag_lower = tag.lower()
        if self.skip_depth:
            if tag_lower in SKIPPED_CONTENT_TAGS:
                self.skip_depth += 1
            return
        closes = IMPLICITLY_CLOSED.get(tag_lower)
        if closes and self.current.tag in closes:
            self.stack.pop()
        attr_map = {name.lower(): (value or "") for name, value in attrs if name}
        node = self.current.append(DomNode(tag=tag_lower, attrs=attr_map))
        if tag_lower in VALUE_TAGS and "value" in attr_map:
            node.value = attr_map["value"]
        if tag_lower in VOID_ELEMENTS:
            return
        self.stack.append(node)
        if tag_lower in SKIPPED_CONTENT_TAGS:
            self.skip_depth = 1

    def handle_endtag(self, tag: str) -> None:
        tag_lower = tag.lower()
        if self.skip_depth:
            if tag_lower in SKIPPED_CONTENT_TAGS:
                self.skip_depth -= 1
                if not self.skip_depth:
                    self._close(tag_lower)
            return
        if tag_lower in VOID_ELEMENTS:
            return
        self._close(tag_lower)

    def handle_data(self, data: str) -> None:
        if self.skip_depth or not data:
            return
        if self.current.tag == "title":
            self.title_parts.append(data)
        self.current.append(DomNode(tag=TEXT_TAG, text=data))

    def _close(self, tag: str) -> None:
        for index in range(len(self.stack) - 1, 0, -1):
            if self.stack[index].tag == tag:
                del self.stack[index:]
                return


def parse_html(raw_html: str, *, url: str = "") -> DomDocument:
    """Build a snapshot from static markup, approximating rendering from markup alone."""
    builder = _SnapshotBuilder()
    builder.feed(raw_html)
    builder.close()
    root = _normalize_root(builder.document)
    _mark_rendered(root)
    for node in root.iter_descendants():
        if node.tag == "textarea" and node.value is None:
            node.value = node.text_content()
    return DomDocument(root=root, url=url, title="".join(builder.title_parts).strip())


def _normalize_root(document: DomNode) -> DomNode:
    html = next((node for node in document.elements() if node.tag == "html"), None)
    if html is None:
        html = DomNode(tag="html")
        for child in list(document.children):
            html.append(child)
    html.parent = None
    body = next((node for node in html.elements() if node.tag == "body"), None)
    if body is None:
        body = DomNode(tag="body")
        kept: List[DomNode] = []
        for child in html.children:
            if child.tag == "head":
                kept.append(child)
            else:
                body.append(child)
        html.children = kept
        html.append(body)
    return html


def _hidden_by_markup(node: DomNode) -> bool:
    if node.has_attr("hidden"):
        return True
    if DISPLAY_NONE_PATTERN.search(node.get("style")):
        return True
    return node.tag == "input" and node.get("type").strip().lower() == "hidden"


def _mark_rendered(root: DomNode) -> None:
    pending: List[Tuple[DomNode, bool]] = [(root, True)]
    while pending:
        node, parent_rendered = pending.pop()
        if node.tag in {"html", "body"}:
            node.rendered = True
        elif node.tag == "head":
            node.rendered = False
        else:
            node.rendered = parent_rendered and not _hidden_by_markup(node)
        for child in node.elements():
            pending.append((child, node.rendered))


__all__ = [
    "DomNode",
    "DomDocument",
    "SNAPSHOT_SCRIPT",
    "snapshot_page",
    "parse_html",
]
