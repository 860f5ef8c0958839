"""Build ``BetLeg`` records from leg-row nodes or plain text fragments."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from bs4 import Tag

from ledgerlab.ledger.types import BetLeg, HeaderInfo, LegResult
from ledgerlab.parsing.dom import aria_of, raw_text_of, text_of
from ledgerlab.parsing.extractors import (
    MAX_SPREAD,
    clean_entity_name,
    derive_fields,
    extract_odds,
    extract_spread_target,
    plausible_spread,
    strip_target_from_name,
    target_looks_like_odds,
)
from ledgerlab.parsing.markets import GENERIC_MARKET, guess_market_from_text
from ledgerlab.parsing.results import has_void_icon, resolve_leg_result, to_leg_result
from ledgerlab.parsing.text import PLAYER_NAME_PATTERN, TEAM_TOKENS, normalize_spaces, strip_scoreboard_text

_VOID_WORD = re.compile(r"\bVoid(ed)?\b", re.I)
_LEG_PHRASE_END = re.compile(
    r"(?:Points|Assists|Yards|Receptions|Made Threes|Triple Double|Rebounds)\s*$", re.I
)
_ODDS_TOKEN = re.compile(r"\b([+\-]\d{3,})\b")
_TARGETLESS_MARKETS = ("TD", "DD")

_STAT_PATTERNS = (
    ("threes", re.compile(rf"({PLAYER_NAME_PATTERN})\s+(\d+\+)\s+(?i:Made\s+Threes)")),
    (
        "stat",
        re.compile(
            rf"({PLAYER_NAME_PATTERN})\s+(\d+\+)\s+"
            r"(?i:(Yards|Receptions|Yds|Rec|Points|Assists|Receiving Yds|Alt Receiving Yds|Alt Receptions))"
        ),
    ),
    (
        "record",
        re.compile(rf"({PLAYER_NAME_PATTERN})\s+(?i:To\s+Record\s+(?:A\s+)?)((?i:Triple Double)|\d+\+\s+\w+)"),
    ),
    ("score", re.compile(rf"({PLAYER_NAME_PATTERN})\s+(?i:To\s+Score)\s+(\d+\+)\s+(?i:(Points))")),
)
_LEADING_STAT_WORDS = re.compile(
    r"^(?:(?:Points|Pts|Rebounds|Reb|Assists|Ast|Yards|Yds|Receptions|Rec|Made|Threes|Parlay|Plus|Void(?:ed)?)\s+)+",
    re.I,
)
_SPAN_LEG = re.compile(r"\d+\+\s+(Yards|Receptions|Points|Assists|Made Threes|Threes|Yds|Rec)|To Record\s+\d+\+\s+\w+", re.I)
_TEAM_LEAD = re.compile(rf"^[A-Z][a-z]+\s+[A-Z][a-z]+\s+({PLAYER_NAME_PATTERN})")


@dataclass
class LegOptions:
    """Fallback hints for building a leg from a row."""

    fallback_odds: int | None = None
    fallback_market: str | None = None
    fallback_result: str | Enum | None = None
    result_scope: Tag | None = None
    skip_odds: bool = False


@dataclass(frozen=True)
class StatMatch:
    full: str
    player: str
    target: str | None
    market: str
    start: int
    is_void: bool = False


def stat_market(word: str) -> str:
    if "Made Threes" in word or word.lower() == "made threes":
        return "3pt"
    if any(token in word for token in ("Yards", "Yds", "Receiving")):
        return "Yds"
    if "Receptions" in word or "Rec" in word:
        return "Rec"
    if "Points" in word or "Pts" in word:
        return "Pts"
    if "Assists" in word or "Ast" in word:
        return "Ast"
    if "Rebounds" in word or "Reb" in word:
        return "Reb"
    if "Threes" in word or "3pt" in word:
        return "3pt"
    return word


def _stat_player(raw: str) -> str:
    """The name alone: the greedy name pattern also swallows a preceding stat word or team name."""

    words = _LEADING_STAT_WORDS.sub("", raw).split()
    teams = [index for index, word in enumerate(words) if word.lower() in TEAM_TOKENS]
    if teams and len(words) - teams[-1] > 2:
        words = words[teams[-1] + 1:]
    return clean_entity_name(" ".join(words))


def scan_stat_text(raw_text: str) -> Iterator[StatMatch]:
    """Find ``Name N+ Stat`` / ``Name To Record|Score ...`` phrases in flattened card text.

    ``full`` is rebuilt from the cleaned name and the text after it, so
    ``"Points Zion Williamson To Record 8+ Rebounds"`` yields
    ``"Zion Williamson To Record 8+ Rebounds"``.
    """

    for kind, pattern in _STAT_PATTERNS:
        for match in pattern.finditer(raw_text):
            player = _stat_player(match.group(1))
            if not player:
                continue
            target: str | None = match.group(2)
            if kind == "threes":
                market = "Made Threes"
            elif kind in ("stat", "score"):
                market = match.group(3)
            elif re.search(r"triple double", match.group(2), re.I):
                target, market = None, "TD"
            else:
                record = re.match(r"(\d+\+)\s+(\w+)", match.group(2))
                if not record:
                    continue
                target, market = record.group(1), record.group(2)

            after = raw_text[match.end(): match.end() + 20].strip()
            is_void = bool(re.match(r"Void\b", after, re.I)) or bool(re.search(r".+?\s+Void\s*$", match.group(0), re.I))
            full = normalize_spaces(f"{player} {match.group(0)[len(match.group(1)):]}")
            yield StatMatch(full, player, target, stat_market(market), match.start(), is_void)


def _resolve_target(market: str, line: str | None, cleaned: str, fallback_text: str) -> str | None:
    target = line or (extract_spread_target(cleaned) if market == "Spread" else None)
    if market in _TARGETLESS_MARKETS:
        target = None
    if target_looks_like_odds(target):
        target = None
    if market == "Spread" and not target:
        target = plausible_spread(cleaned) or plausible_spread(fallback_text)
    if market == "Spread" and target and re.fullmatch(r"[+\-]?\d+(?:\.\d+)?", target):
        if abs(float(target)) > MAX_SPREAD:
            target = None
    return target


def _entity_list(name: str | None, target: str | None) -> list[str] | None:
    if not name:
        return None
    entity = clean_entity_name(strip_target_from_name(name, target))
    entity = re.sub(r"^Void(ed)?\s+", "", entity, flags=re.I).strip()
    return [entity] if entity else None


def parse_leg_from_text(
    text: str,
    odds: int | None = None,
    result: str | Enum | None = None,
    skip_odds: bool = False,
) -> BetLeg | None:
    cleaned = strip_scoreboard_text(text)
    if not cleaned:
        return None

    # "Void" only counts when it trails a complete leg phrase
    is_void = False
    before_void = re.match(r"(.+?)\s+Void\b", text, re.I)
    if before_void:
        phrase = before_void.group(1).strip()
        is_void = bool(_LEG_PHRASE_END.search(phrase) or re.search(r"To Score|To Record", phrase, re.I))

    leg_odds = odds
    if not leg_odds and not skip_odds:
        token = _ODDS_TOKEN.search(cleaned)
        if token and int(token.group(1)[1:]) >= 100:
            leg_odds = int(token.group(1))

    derived = derive_fields(cleaned, cleaned)
    market = derived.type or guess_market_from_text(cleaned) or GENERIC_MARKET
    target = _resolve_target(market, derived.line, cleaned, normalize_spaces(text))
    entities = _entity_list(derived.name, target)
    if not entities and market == GENERIC_MARKET:
        return None

    return BetLeg(
        entities=entities,
        market=market,
        target=target,
        ou=derived.ou,
        odds=None if skip_odds else leg_odds,
        result=LegResult.VOID if is_void else to_leg_result(result),
    )


def parse_leg_from_node(node: Tag, options: LegOptions | None = None) -> BetLeg | None:
    """One leg from a row node; ``None`` when neither an entity nor a market is recognised."""

    options = options or LegOptions()
    aria = aria_of(node)
    text = text_of(node)
    source = strip_scoreboard_text(aria or text)
    extracted_odds = None if options.skip_odds else extract_odds(node)

    is_void = bool(_VOID_WORD.search(text) or _VOID_WORD.search(aria)) or has_void_icon(node)
    cleaned = _VOID_WORD.sub("", source).strip()

    resolved = resolve_leg_result(node, options.result_scope, options.fallback_result)
    if resolved is LegResult.VOID:
        is_void = True

    derived = derive_fields(cleaned, cleaned)
    market = derived.type or options.fallback_market or guess_market_from_text(cleaned) or GENERIC_MARKET
    if market == GENERIC_MARKET and derived.line and re.fullmatch(r"[+\-]\d+(\.\d+)?", derived.line):
        if abs(float(derived.line)) <= MAX_SPREAD:
            market = "Spread"

    target = _resolve_target(market, derived.line, cleaned, normalize_spaces(f"{raw_text_of(node)} {aria}"))
    entities = _entity_list(derived.name, target)
    if not entities and market == GENERIC_MARKET:
        return None
    if not target and derived.ou and derived.line:
        target = derived.line

    odds = extracted_odds
    if not options.skip_odds and odds is None:
        odds = options.fallback_odds

    return BetLeg(
        entities=entities,
        market=market,
        target=target,
        ou=derived.ou,
        odds=None if options.skip_odds else odds,
        result=LegResult.VOID if is_void else resolved,
    )


def build_legs_from_rows(rows: Iterable[Tag], options: LegOptions | None = None) -> list[BetLeg]:
    legs = []
    for row in rows:
        leg = parse_leg_from_node(row, options)
        if leg is not None:
            legs.append(leg)
    return legs


def build_legs_from_description(description: str, result: str | Enum | None, skip_odds: bool = False) -> list[BetLeg]:
    """Comma-separated selection summaries, one leg per part."""

    legs = []
    for part in re.split(r",\s*", description or ""):
        part = normalize_spaces(part)
        if not part:
            continue
        leg = parse_leg_from_text(part, None, result, skip_odds)
        if leg is not None:
            legs.append(leg)
    return legs


def build_legs_from_stat_text(raw_text: str, result: str | Enum | None) -> list[BetLeg]:
    if not raw_text:
        return []
    legs: list[BetLeg] = []
    seen: set[str] = set()
    for found in scan_stat_text(raw_text):
        key = f"{found.player}_{found.market}_{found.target or ''}".lower()
        if key in seen:
            continue
        seen.add(key)

        leg = parse_leg_from_text(re.sub(r"^Void\s+", "", found.full, flags=re.I), None, result, False)
        if leg is None:
            leg = BetLeg(entities=[found.player], market=found.market, target=found.target, result=to_leg_result(result))
        if found.is_void:
            leg.result = LegResult.VOID
        legs.append(leg)
    return legs


def build_legs_from_spans(root: Tag, result: str | Enum | None) -> list[BetLeg]:
    legs: list[BetLeg] = []
    seen: set[str] = set()
    for span in root.select("span"):
        text = text_of(span)
        if not text or not _SPAN_LEG.search(text):
            continue
        # drop a team name glued in front of the player
        text = _TEAM_LEAD.sub(r"\1", text)
        if text in seen:
            continue
        seen.add(text)
        leg = parse_leg_from_text(text, None, result)
        if leg is not None:
            legs.append(leg)
    return legs


def build_primary_leg_from_header(header: HeaderInfo, result: str | Enum | None) -> BetLeg:
    entity = clean_entity_name(header.name) if header.name else ""
    return BetLeg(
        entities=[entity] if entity else None,
        market=header.type or "",
        target=header.line,
        ou=header.ou,
        odds=header.odds,
        result=to_leg_result(result),
    )
