"""Reconstruct nested same-game parlays (group legs) inside a parlay card."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from bs4 import Tag

from ledgerlab.ledger.types import BetLeg, LegResult
from ledgerlab.parsing.dom import LEG_CARD, NodeSet, aria_of, contains, has_odds_span, text_of
from ledgerlab.parsing.extractors import extract_odds
from ledgerlab.parsing.filters import drop_generic_duplicate_legs, filter_meaningful_legs, leg_keys_loose
from ledgerlab.parsing.legs import LegOptions, build_legs_from_rows, parse_leg_from_node
from ledgerlab.parsing.matchups import clean_matchup_target, extract_game_matchup, find_matchup_in_text
from ledgerlab.parsing.results import aggregate_child_results, propagate_void, to_leg_result
from ledgerlab.parsing.rows import find_leg_rows_within
from ledgerlab.parsing.text import normalize_spaces, strip_date_time_noise

logger = logging.getLogger(__name__)

SGP_MARKET = "Same Game Parlay"

_LEG_ARIA = re.compile(
    r"to record|to score|\d+\+\s+(yards|receptions|points|assists|made threes|triple double)", re.I
)
_PLAYER_MARKET = re.compile(
    r"[A-Z][a-z]+\s+[A-Z][a-z]+.*to\s+(record|score).*(triple double|double double|\d+\+\s+\w+)", re.I
)
_LEG_COUNT_SELECTOR = '.leg-row, [aria-label*="To Record"], [aria-label*="To Score"]'
_LOOSE_MATCHUP = re.compile(r"(?:^|\s)([A-Za-z][A-Za-z'.\s]+?\s+@\s+[A-Za-z][A-Za-z'.\s]+?)(?:\s|$)")
_MONTH_TOKEN = re.compile(r"\b(Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)\b\.?", re.I)
_MATCHUP_ONLY = re.compile(
    r"([A-Za-z][A-Za-z0-9']+(?:\s+[A-Za-z][A-Za-z0-9']+){0,2}\s+@\s+[A-Za-z][A-Za-z0-9']+(?:\s+[A-Za-z][A-Za-z0-9']+){0,2})"
)
_STAT_PAIR = re.compile(r"\b\d{1,3}\s+\d{1,3}\b")


@dataclass
class GroupStage:
    """Group legs plus every node they consumed, so leftovers can become extra legs."""

    groups: list[BetLeg] = field(default_factory=list)
    consumed: NodeSet = field(default_factory=NodeSet)


def _is_sgp_candidate(div: Tag) -> bool:
    text = text_of(div).lower()
    if "same game parlay" not in text:
        return False
    if "parlay+" in text or "parlay plus" in text or "includes:" in text:
        return False

    has_leg_rows = any(_LEG_ARIA.search(aria_of(node)) for node in div.select("[aria-label]"))
    has_button_role = div.get("role") == "button" or div.select_one('[role="button"]') is not None
    return (
        has_odds_span(div)
        or div.select_one(LEG_CARD) is not None
        or (has_button_role and (has_leg_rows or div.select_one(".leg-row") is not None))
        or (has_leg_rows and bool(_PLAYER_MARKET.search(text)))
    )


def find_sgp_containers(root: Tag) -> list[Tag]:
    """Innermost divs that look like one nested same-game parlay.

    A banner div holding only "Same Game Parlay" and its odds owns no leg
    rows, so it never counts as a container.
    """

    candidates = [div for div in root.select("div") if _is_sgp_candidate(div) and find_leg_rows_within(div)]

    def leg_count(node: Tag) -> int:
        return len(node.select(_LEG_COUNT_SELECTOR))

    def shadowed(div: Tag) -> bool:
        for other in candidates:
            if other is div or not contains(other, div):
                continue
            if has_odds_span(div) and has_odds_span(other) and leg_count(div) <= leg_count(other):
                return True
        return False

    containers = [
        div
        for div in candidates
        if not any(other is not div and contains(div, other) for other in candidates) and not shadowed(div)
    ]
    return containers or candidates


def _infer_group_matchup(container: Tag, rows: list[Tag]) -> str | None:
    """Matchup read from the container and its own rows only; None rather than a card-wide guess."""

    event = extract_game_matchup(container) or extract_game_matchup(rows[0])
    combined = normalize_spaces(" ".join(node.get_text() for node in [container, *rows]))
    if not event:
        loose = _LOOSE_MATCHUP.search(combined)
        if loose:
            event = normalize_spaces(loose.group(1))

    if not event:
        return clean_matchup_target(combined)

    event = _MONTH_TOKEN.sub("", normalize_spaces(strip_date_time_noise(event)))
    only = _MATCHUP_ONLY.search(event)
    if only:
        event = only.group(1)
    refined = clean_matchup_target(event)
    return normalize_spaces(refined or event) or None


def build_group_leg(
    container: Tag,
    rows: list[Tag],
    bet_result: str | Enum | None,
    odds: int | None = None,
) -> BetLeg | None:
    """One group leg whose children are the container's rows with their odds suppressed."""

    if not rows:
        return None
    children = build_legs_from_rows(
        rows,
        LegOptions(fallback_result=to_leg_result(bet_result), result_scope=container, skip_odds=True),
    )
    children = drop_generic_duplicate_legs(filter_meaningful_legs(children))
    if not children:
        return None
    for child in children:
        child.odds = None
    propagate_void(children)
    container_odds = extract_odds(container)

    return BetLeg(
        market=SGP_MARKET,
        target=_infer_group_matchup(container, rows),
        odds=container_odds if container_odds is not None else odds,
        result=aggregate_child_results(children, bet_result),
        is_group_leg=True,
        children=children,
    )


def build_sgp_group_legs(
    card: Tag,
    card_rows: list[Tag],
    bet_result: str | Enum | None,
    header_odds: int | None,
) -> GroupStage:
    """A plain SGP ticket: exactly one group from the narrowest container."""

    containers = find_sgp_containers(card)
    container = containers[0] if containers else card
    stage = GroupStage()
    stage.consumed.add(container)

    rows = find_leg_rows_within(container)
    if not rows or (card_rows and len(rows) < len(card_rows)):
        rows = card_rows
    stage.consumed.update(rows)

    odds = extract_odds(container)
    group = build_group_leg(container, rows, bet_result, odds if odds is not None else header_odds)
    if group is not None:
        stage.groups.append(group)
    return stage


@dataclass
class _ContainerInfo:
    container: Tag
    rows: list[Tag]
    odds: int | None
    event_hint: str | None


def build_sgp_plus_group_legs(card: Tag, bet_result: str | Enum | None) -> GroupStage:
    """One group leg per distinct nested SGP; duplicates sharing odds keep the narrower container."""

    best: dict[str | int, _ContainerInfo] = {}
    for container in find_sgp_containers(card):
        rows = find_leg_rows_within(container)
        hint = extract_game_matchup(container) or (extract_game_matchup(rows[0]) if rows else None)
        info = _ContainerInfo(container, rows, extract_odds(container), hint)
        # containers without odds are never merged with each other
        key = str(info.odds) if info.odds is not None else id(container)
        if key not in best or len(info.rows) < len(best[key].rows):
            best[key] = info

    stage = GroupStage()
    seen: set[str] = set()
    for info in best.values():
        stage.consumed.add(info.container)
        stage.consumed.update(info.rows)
        signature = "|".join(text_of(row) for row in info.rows)
        odds_key = info.odds if info.odds is not None else id(info.container)
        key = f"{odds_key}|{info.event_hint or ''}|{len(info.rows)}|{len(signature)}"
        if key in seen:
            continue
        group = build_group_leg(info.container, info.rows, bet_result, info.odds)
        if group is not None:
            seen.add(key)
            stage.groups.append(group)
    logger.debug("built %d SGP+ group legs from %d containers", len(stage.groups), len(best))
    return stage


def cluster_legs_by_odds(
    rows: list[Tag],
    card: Tag,
    card_text: str,
    bet_result: str | Enum | None,
) -> GroupStage:
    """Fallback grouping: two or more rows sharing one odds figure form a synthesized group."""

    fallback = to_leg_result(bet_result)
    buckets: dict[int, list[tuple[Tag, BetLeg]]] = {}
    for row in rows:
        leg = parse_leg_from_node(row, LegOptions(fallback_result=fallback, result_scope=card))
        if leg is None or leg.odds is None:
            continue
        # a WIN with no stat pair on the row leaked in from an ancestor icon
        if leg.result is LegResult.WIN and not _STAT_PAIR.search(text_of(row)):
            leg.result = fallback
        buckets.setdefault(leg.odds, []).append((row, leg))

    stage = GroupStage()
    for odds, entries in buckets.items():
        if len(entries) < 2:
            continue
        children: list[BetLeg] = []
        keys: set[str] = set()
        for _, leg in entries:
            leg_keys = leg_keys_loose(leg)
            if any(key in keys for key in leg_keys):
                continue
            children.append(leg.model_copy(update={"odds": None}))
            keys.update(leg_keys)
        propagate_void(children)
        stage.consumed.update(row for row, _ in entries)
        stage.groups.append(
            BetLeg(
                market=SGP_MARKET,
                target=_matchup_near_odds(odds, card_text),
                odds=odds,
                result=aggregate_child_results(children, bet_result),
                is_group_leg=True,
                children=children,
            )
        )
    return stage


def _matchup_near_odds(odds: int, card_text: str) -> str | None:
    """Matchup printed near the shared odds figure; None rather than a card-wide guess."""

    index = card_text.find(str(odds))
    if index == -1:
        return None
    return find_matchup_in_text(card_text[max(0, index - 100): index + 140])
