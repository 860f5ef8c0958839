"""BeautifulSoup helpers shared by the card walkers.

bs4 compares tags structurally, so two identical ``<div>`` rows are ``==``.
Everything here tracks nodes by identity instead.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

from bs4 import BeautifulSoup, Tag

from ledgerlab.errors import MalformedHTMLError
from ledgerlab.parsing.text import normalize_spaces

ODDS_SPAN = 'span[aria-label^="Odds"]'
LEG_CARD = "div.v.z.x.y.jk.t.ab.h"
ICON_NODES = "svg, path, svg *"

_MARKUP = re.compile(r"<\s*[A-Za-z!/]")


def parse_document(html: str | bytes) -> BeautifulSoup:
    """Build a DOM for one parse call; raises for input that is not markup."""

    if isinstance(html, bytes):
        html = html.decode("utf-8", errors="replace")
    if not isinstance(html, str):
        raise MalformedHTMLError(f"expected HTML text, got {type(html).__name__}")
    if not _MARKUP.search(html):
        raise MalformedHTMLError("input contains no HTML elements")
    soup = BeautifulSoup(html, "lxml")
    if soup.find(True) is None:
        raise MalformedHTMLError("input did not parse into any elements")
    return soup


def text_of(node: Tag | None) -> str:
    """Whitespace-collapsed ``textContent``."""

    if node is None:
        return ""
    return normalize_spaces(node.get_text())


def raw_text_of(node: Tag | None) -> str:
    return node.get_text() if node is not None else ""


def aria_of(node: Tag | None) -> str:
    if node is None:
        return ""
    value = node.get("aria-label")
    if isinstance(value, list):
        value = " ".join(value)
    return normalize_spaces(value or "")


def attr(node: Tag, name: str) -> str:
    value = node.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value or ""


def is_element(node: object) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def ancestors(node: Tag, limit: int | None = None) -> Iterator[Tag]:
    """Yield element ancestors, nearest first, stopping below the document."""

    depth = 0
    parent = node.parent
    while is_element(parent) and parent.name not in ("html", "body"):
        if limit is not None and depth >= limit:
            return
        yield parent
        depth += 1
        parent = parent.parent


def contains(outer: Tag, inner: Tag) -> bool:
    """DOM ``Node.contains``: true when ``inner`` is ``outer`` or a descendant."""

    if outer is inner:
        return True
    return any(parent is outer for parent in inner.parents)


def closest(node: Tag, name: str) -> Tag | None:
    if node.name == name:
        return node
    found = node.find_parent(name)
    return found if is_element(found) else None


def element_children(node: Tag) -> list[Tag]:
    return [child for child in node.children if isinstance(child, Tag)]


def previous_element_siblings(node: Tag) -> Iterator[Tag]:
    for sibling in node.previous_siblings:
        if isinstance(sibling, Tag):
            yield sibling


def has_odds_span(node: Tag) -> bool:
    return node.select_one(ODDS_SPAN) is not None


class NodeSet:
    """Insertion-ordered set of tags keyed by identity."""

    def __init__(self, nodes: Iterable[Tag] = ()) -> None:
        self._nodes: dict[int, Tag] = {}
        for node in nodes:
            self.add(node)

    def add(self, node: Tag) -> None:
        self._nodes.setdefault(id(node), node)

    def update(self, nodes: Iterable[Tag]) -> None:
        for node in nodes:
            self.add(node)

    def __contains__(self, node: object) -> bool:
        return id(node) in self._nodes

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)


def unique_nodes(nodes: Iterable[Tag]) -> list[Tag]:
    return list(NodeSet(nodes))


class Scope:
    """A subtree with optional exclusion zones.

    Queries never leave ``root`` and skip anything inside an excluded subtree,
    which is how one nested SGP container is kept from reading a sibling's rows.
    """

    def __init__(self, root: Tag, exclusions: Iterable[Tag] = ()) -> None:
        self.root = root
        self.exclusions = [zone for zone in exclusions if zone is not root and contains(root, zone)]

    def owns(self, node: Tag) -> bool:
        if not contains(self.root, node):
            return False
        return not any(contains(zone, node) for zone in self.exclusions)

    def select(self, selector: str) -> list[Tag]:
        return [node for node in self.root.select(selector) if self.owns(node)]
