"""Leg settlement state from icon fills, void markers and the footer fallback."""

from __future__ import annotations

import re
from collections.abc import Sequence
from enum import Enum

from bs4 import Tag

from ledgerlab.ledger.types import BetLeg, LegResult
from ledgerlab.parsing.dom import ICON_NODES, ancestors, attr, text_of

WIN_FILL = "#128000"
LOSS_FILL = "#d22839"
VOID_FILL = "#c15400"

_VOID_TEXT = re.compile(r"\bvoid(ed)?\b", re.I)

_LEG_RESULTS = {
    "win": LegResult.WIN,
    "loss": LegResult.LOSS,
    "push": LegResult.PUSH,
    "void": LegResult.PUSH,
    "voided": LegResult.PUSH,
    "pending": LegResult.PENDING,
    "unknown": LegResult.UNKNOWN,
}


def to_leg_result(value: str | Enum | None) -> LegResult:
    """Map a bet or leg result onto a leg result; void counts as push, unknown input as pending."""

    if value is None:
        return LegResult.PENDING
    raw = value.value if isinstance(value, Enum) else value
    if not raw:
        return LegResult.PENDING
    return _LEG_RESULTS.get(str(raw).lower(), LegResult.PENDING)


def icon_result(node: Tag) -> LegResult | None:
    node_id = attr(node, "id").lower()
    fill = attr(node, "fill").lower()
    if fill == WIN_FILL:
        return LegResult.WIN
    if fill == LOSS_FILL:
        return LegResult.LOSS
    if "cross-circle" in node_id or "cross_circle" in node_id:
        return LegResult.LOSS
    if "tick-circle" in node_id or "tick_circle" in node_id:
        return LegResult.WIN
    return None


def _icon_nodes(root: Tag) -> list[Tag]:
    nodes = [root] if root.name in ("svg", "path") else []
    nodes.extend(root.select(ICON_NODES))
    return nodes


def _first_icon_result(root: Tag) -> LegResult | None:
    for node in _icon_nodes(root):
        found = icon_result(node)
        if found is not None:
            return found
    return None


def has_void_icon(root: Tag) -> bool:
    """Orange fill or a ``warning`` icon id marks a voided selection."""

    for node in _icon_nodes(root):
        if attr(node, "fill").lower() == VOID_FILL or "warning" in attr(node, "id").lower():
            return True
    return False


def resolve_leg_result(
    row: Tag,
    scope: Tag | None = None,
    fallback: str | Enum | None = None,
) -> LegResult:
    """Row icons, then the scope node, then four ancestor levels, then void text, then ``fallback``."""

    search: list[Tag] = [row]
    if scope is not None and scope is not row:
        search.append(scope)
    for parent in ancestors(row, limit=4):
        if not any(parent is seen for seen in search):
            search.append(parent)

    for element in search:
        found = _first_icon_result(element)
        if found is not None:
            return found

    if _VOID_TEXT.search(text_of(row)):
        return LegResult.VOID
    return to_leg_result(fallback)


def _settlement(result: LegResult) -> LegResult:
    return LegResult.PUSH if result is LegResult.VOID else to_leg_result(result)


def aggregate_child_results(children: Sequence[BetLeg], fallback: str | Enum | None = None) -> LegResult:
    """Group result: any push (or void) > any loss > any pending > any unknown > all win."""

    results = [_settlement(child.result) for child in children]
    for outcome in (LegResult.PUSH, LegResult.LOSS, LegResult.PENDING, LegResult.UNKNOWN):
        if outcome in results:
            return outcome
    if results and all(result is LegResult.WIN for result in results):
        return LegResult.WIN
    return to_leg_result(fallback)


def propagate_void(children: list[BetLeg]) -> list[BetLeg]:
    """One voided selection voids its whole nested parlay: siblings become PUSH."""

    if not any(child.result in (LegResult.VOID, LegResult.PUSH) for child in children):
        return children
    for child in children:
        if child.result is not LegResult.VOID:
            child.result = LegResult.PUSH
    return children
