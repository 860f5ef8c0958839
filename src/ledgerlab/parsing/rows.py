"""Locate the DOM nodes that hold individual selections inside a bet card."""

from __future__ import annotations

import re

from bs4 import Tag

from ledgerlab.parsing.dom import (
    LEG_CARD,
    ODDS_SPAN,
    Scope,
    aria_of,
    closest,
    contains,
    has_odds_span,
    raw_text_of,
    text_of,
    unique_nodes,
)
from ledgerlab.parsing.legs import scan_stat_text
from ledgerlab.parsing.text import PLAYER_NAME_PATTERN, is_sgp_plus_text

_MARKET_TEXT = re.compile(
    r"SPREAD BETTING|MONEYLINE|TOTAL|TO RECORD|TO SCORE|MADE THREES|ASSISTS|REBOUNDS|POINTS|OVER|UNDER|"
    r"YARDS|RECEPTIONS|REC\b|YDS",
    re.I,
)
_SCOPED_MARKET_TEXT = re.compile(_MARKET_TEXT.pattern + r"|TRIPLE DOUBLE|DOUBLE DOUBLE", re.I)
_FOOTER_TEXT = re.compile(r"TOTAL WAGER|BET ID|PLACED:", re.I)
_LETTERS = re.compile(r"[A-Za-z]{3,}")
_PLAYER_ANY_CASE = re.compile(f"({PLAYER_NAME_PATTERN})", re.I)
_LEG_MARKET_KEY = re.compile(r"(To Record|To Score|\d+\+\s+\w+)", re.I)
_PLAYER_RECORD_SCORE = re.compile(
    r"[A-Z][a-z]+\s+[A-Z][a-z]+.*to\s+(record|score).*"
    r"(triple double|double double|\d+\+\s+(assists|points|rebounds|yards|receptions|made threes))",
    re.I,
)
_SIGNATURE_PLAYER = re.compile(r"([A-Z][a-z]+\s+[A-Z][a-z]+)")
_SIGNATURE_MARKET = re.compile(
    r"(to\s+record|to\s+score|triple\s+double|\d+\+\s+(assists|points|rebounds|yards|receptions|made\s+threes))", re.I
)
_SCOREBOARD = re.compile(r"\d{1,3}\s+\d{1,3}\s*Finished|Box Score|Play-by-play", re.I)
_PARLAY_BANNER = re.compile(r"\b\d+\s+leg\s+parlay\b|same game parlay\s*(?:plus|available)", re.I)
_HEADER_BANNER = re.compile(r"\bleg parlay\b|same game parlay", re.I)


def _is_banner(node: Tag, text: str, has_market: bool, candidates: list[Tag]) -> bool:
    """A parlay header: banner text with no selection of its own, or one wrapping other rows."""

    if not _HEADER_BANNER.search(text):
        return False
    return not has_market or any(other is not node and contains(node, other) for other in candidates)


def _is_sgp_header_aria(aria: str) -> bool:
    lowered = aria.lower()
    return "same game parlay" in lowered and not any(
        token in lowered for token in ("to record", "to score", "triple double")
    )


def _rows_from_stat_text(card: Tag, candidates: list[Tag]) -> list[Tag]:
    """Map ``Name N+ Stat`` phrases in the card text back to their smallest matching div."""

    found: list[Tag] = []
    seen: set[str] = set()
    divs = card.select("div")
    for match in scan_stat_text(raw_text_of(card)):
        key = f"{match.player}_{match.market}_{match.target or ''}".lower()
        if key in seen:
            continue
        seen.add(key)

        matching = []
        for div in divs:
            text = text_of(div)
            has_market = (
                (match.target or "") in text
                or match.market in text
                or (match.market == "TD" and "Triple Double" in text)
                or (match.market == "3pt" and ("Made Threes" in text or "3pt" in text))
            )
            if (
                match.player in text
                and has_market
                and not _PARLAY_BANNER.search(text)
                and not _FOOTER_TEXT.search(text)
                and not _SCOREBOARD.search(text)
            ):
                matching.append(div)
        if not matching:
            continue

        best = matching[0]
        for div in matching[1:]:
            length = len(text_of(div))
            if 20 < length < len(text_of(best)):
                best = div

        known = candidates + found
        if not any(
            node is best or (match.player in text_of(node) and (contains(node, best) or contains(best, node)))
            for node in known
        ):
            found.append(best)
    return found


def find_leg_rows(card: Tag) -> list[Tag]:
    """Ordered, de-duplicated leg rows of one bet card."""

    candidates: list[Tag] = list(card.select(LEG_CARD))
    candidates.extend(node for node in card.select("[aria-label]") if node.name != "span")
    for span in card.select(ODDS_SPAN):
        parent = closest(span, "div")
        if parent is not None:
            candidates.append(parent)
    candidates = unique_nodes(candidates)

    card_text = raw_text_of(card)
    sgp_plus = is_sgp_plus_text(card_text)
    if not candidates and ("same game parlay" in card_text.lower() or sgp_plus):
        candidates = _rows_from_stat_text(card, candidates)

    filtered = []
    for node in candidates:
        aria = aria_of(node)
        text = text_of(node)
        has_market = bool(_MARKET_TEXT.search(aria) or _MARKET_TEXT.search(text))
        if _HEADER_BANNER.search(aria):
            continue
        if _FOOTER_TEXT.search(text) or re.search(r"TOTAL WAGER", aria, re.I):
            continue
        if not _LETTERS.search(aria or text):
            continue
        if not aria and _is_banner(node, text, has_market, candidates):
            continue
        if sgp_plus and has_market:
            filtered.append(node)
        elif has_odds_span(node) or has_market:
            filtered.append(node)

    if sgp_plus:
        top_level = [node for node in filtered if not _shadowed_by_same_player(node, filtered)]
    else:
        top_level = [node for node in filtered if not any(other is not node and contains(other, node) for other in filtered)]

    unique: list[Tag] = []
    seen: set[str] = set()
    for node in top_level:
        text = text_of(node)
        key = text
        if sgp_plus:
            player = _PLAYER_ANY_CASE.search(text)
            market = _LEG_MARKET_KEY.search(text)
            key = f"{player.group(1)}_{market.group(1)}".lower() if player and market else text.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(node)
    return unique


def _shadowed_by_same_player(node: Tag, candidates: list[Tag]) -> bool:
    player = _PLAYER_ANY_CASE.search(text_of(node))
    if not player:
        return False
    for other in candidates:
        if other is node or not contains(other, node):
            continue
        other_player = _PLAYER_ANY_CASE.search(text_of(other))
        if other_player and other_player.group(1) == player.group(1):
            return True
    return False


def _is_sgp_block(node: Tag) -> bool:
    text = text_of(node).lower()
    return (
        "same game parlay" in text
        and "parlay+" not in text
        and "includes:" not in text
        and has_odds_span(node)
    )


def nested_sgp_scope(container: Tag) -> Scope:
    """The container minus any nested SGP block that carries its own odds."""

    zones = [node for node in container.find_all(True) if _is_sgp_block(node)]
    return Scope(container, zones)


def find_leg_rows_within(container: Tag) -> list[Tag]:
    """Leg rows of one SGP container; never reads rows of a sibling or nested SGP."""

    # every pass goes through the scope; the container is never one of its own rows
    scope = nested_sgp_scope(container)
    candidates: list[Tag] = scope.select(LEG_CARD)
    candidates.extend(scope.select(".leg-row"))
    for node in scope.select("[aria-label]"):
        if node.name != "span" and not _is_sgp_header_aria(aria_of(node)):
            candidates.append(node)

    for span in scope.select(ODDS_SPAN):
        parent = closest(span, "div")
        if parent is None or parent is container or not scope.owns(parent):
            continue
        if not any(parent is node for node in candidates) and not _is_sgp_header_aria(aria_of(parent)):
            candidates.append(parent)

    for div in scope.select("div"):
        if any(div is node for node in candidates):
            continue
        combined = f"{text_of(div)} {aria_of(div)}".lower()
        if _PLAYER_RECORD_SCORE.search(combined) and "same game parlay" not in combined and "includes:" not in combined:
            candidates.append(div)

    candidates = unique_nodes(candidates)
    filtered = []
    for node in candidates:
        aria = aria_of(node)
        text = text_of(node)
        has_market = bool(_SCOPED_MARKET_TEXT.search(aria) or _SCOPED_MARKET_TEXT.search(text))
        if _FOOTER_TEXT.search(text) or re.search(r"TOTAL WAGER", aria, re.I):
            continue
        if re.match(r"same\s+game\s+parlay", aria, re.I) and not has_market:
            continue
        if not aria and _is_banner(node, text, has_market, candidates):
            continue
        if not _LETTERS.search(aria or text):
            continue
        player_and_market = bool(re.match(r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+", aria or text, re.I)) and has_market
        if has_odds_span(node) or has_market or player_and_market:
            filtered.append(node)

    unique: list[Tag] = []
    signatures: set[str] = set()
    for node in filtered:
        text = text_of(node)
        aria = aria_of(node)
        player = _SIGNATURE_PLAYER.search(text or aria)
        market = _SIGNATURE_MARKET.search(text or aria)
        if player and market:
            signature = f"{player.group(1)}_{market.group(1)}".lower()
            if signature in signatures:
                continue
            signatures.add(signature)

        duplicate = any(
            other is not node
            and contains(other, node)
            and ((text and text in text_of(other)) or (aria and aria in aria_of(other)))
            for other in filtered
        )
        if not duplicate:
            unique.append(node)
    return unique
