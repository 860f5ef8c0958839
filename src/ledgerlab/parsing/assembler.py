"""Bet assembly: header, footer and leg list combined into one ``Bet``.

One assembler serves every bet type. Singles build a leg from the header;
multi-leg tickets run an optional grouping stage (SGP, SGP+ or the odds
cluster fallback) and then add flat legs from whatever the groups did not
consume.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace

from bs4 import Tag

from ledgerlab.config import get_settings
from ledgerlab.ledger.types import Bet, BetLeg, BetResult, BetType, FooterMeta, HeaderInfo, LegResult
from ledgerlab.parsing.describe import (
    build_sgp_plus_description,
    format_description,
    format_leg_summary,
    format_legs,
)
from ledgerlab.parsing.dom import NodeSet, contains, text_of
from ledgerlab.parsing.filters import (
    dedupe_legs,
    drop_generic_duplicate_legs,
    filter_meaningful_legs,
    leg_matches_key_set,
    looks_like_matchup,
    loose_key_set,
)
from ledgerlab.parsing.groups import (
    GroupStage,
    build_sgp_group_legs,
    build_sgp_plus_group_legs,
    cluster_legs_by_odds,
)
from ledgerlab.parsing.legs import (
    LegOptions,
    build_legs_from_description,
    build_legs_from_rows,
    build_legs_from_spans,
    build_legs_from_stat_text,
    build_primary_leg_from_header,
)
from ledgerlab.parsing.markets import infer_market_category
from ledgerlab.parsing.matchups import clean_matchup_target, extract_odds_matchups, infer_matchup_for_entity
from ledgerlab.parsing.results import to_leg_result
from ledgerlab.parsing.text import is_sgp_plus_text, normalize_spaces, strip_scoreboard_text

_GENERIC_SINGLE = re.compile(r"Spread BETTING|Total Points|Moneyline", re.I)
_PLUS_SELECTIONS = (
    re.compile(r"includes:\s*\d+\s+same\s+game\s+parlay\s*\+\s*\d+\s+selection", re.I),
    re.compile(r"includes:\s*\d+\s+same\s+game\s+parlay.*\+.*selection", re.I | re.S),
)
_STAT_TARGET = re.compile(r"^-?\d+(?:\.\d+)?\+?$")
_SETTLED_IGNORED = frozenset({LegResult.PENDING, LegResult.UNKNOWN})


@dataclass
class CardContext:
    """Everything the page walk learned about one bet card."""

    header: Tag
    rows: list[Tag]
    bet_type: BetType
    info: HeaderInfo
    meta: FooterMeta
    result: BetResult
    placed_at: str

    @property
    def bet_id(self) -> str:
        return self.meta.bet_id or ""


def _bet_shell(card: CardContext, **fields) -> Bet:
    book = get_settings().book_name
    return Bet(
        id=f"{book}:{card.bet_id}:{card.placed_at}",
        book=book,
        bet_id=card.bet_id,
        placed_at=card.placed_at,
        bet_type=card.bet_type,
        sport=card.info.sport,
        stake=card.meta.stake or 0.0,
        payout=card.meta.payout or 0.0,
        result=card.result,
        is_live=card.info.is_live,
        raw=f"{card.info.raw_text}\n----\n{card.meta.raw_text}",
        **fields,
    )


# ------------------------------------------------------------------ singles


def _backfill_single(card: CardContext) -> HeaderInfo:
    info = card.info
    if len(card.rows) != 1:
        return info
    legs = build_legs_from_rows(card.rows, LegOptions(fallback_result=LegResult.PENDING, fallback_odds=info.odds))
    if not legs:
        return info
    leg = legs[0]
    info = replace(
        info,
        name=info.name or leg.entity or None,
        type=info.type or leg.market or None,
        line=info.line or leg.target,
        ou=info.ou or leg.ou,
        odds=leg.odds if leg.odds is not None else info.odds,
    )
    if not info.description or _GENERIC_SINGLE.search(info.description):
        info.description = format_description(
            format_leg_summary(leg), info.type, info.name, info.line, info.ou, BetType.SINGLE
        )
    return info


def _assemble_single(card: CardContext) -> Bet:
    info = _backfill_single(card)
    description = format_description(info.description, info.type, info.name, info.line, info.ou, BetType.SINGLE)

    name = info.name
    if name and info.type == "Spread" and info.line and info.line in name:
        name = re.sub(rf"\s*[+\-]?{re.escape(info.line)}\s*$", "", name).strip()

    leg = build_primary_leg_from_header(replace(info, name=name), card.result)
    return _bet_shell(
        card,
        market_category=infer_market_category(BetType.SINGLE, info.type, f"{info.description} {info.raw_text}"),
        description=description,
        name=name,
        odds=info.odds or 0,
        type=info.type,
        line=info.line,
        ou=info.ou,
        legs=[leg],
    )


# ------------------------------------------------------------------ multi-leg


def _combined_legs(card: CardContext, rows: list[Tag], skip_odds: bool) -> list[BetLeg]:
    """Flat legs from rows, description, stat text and spans; the header itself is the last resort."""

    fallback = to_leg_result(card.result)
    options = LegOptions(fallback_result=fallback, result_scope=card.header, skip_odds=skip_odds)
    from_rows = build_legs_from_rows(rows, options)
    from_description = (
        build_legs_from_description(card.info.description, fallback, skip_odds) if card.info.description else []
    )
    from_stat_text = build_legs_from_stat_text(card.info.raw_text, fallback)
    from_spans = build_legs_from_spans(card.header, fallback)
    from_header = (
        build_legs_from_rows([card.header], options) if not (from_rows or from_stat_text or from_spans) else []
    )

    combined = dedupe_legs(
        drop_generic_duplicate_legs(
            filter_meaningful_legs([*from_rows, *from_description, *from_stat_text, *from_spans, *from_header])
        )
    )
    if skip_odds:
        for leg in combined:
            leg.odds = None
    return combined


def _unclaimed_rows(rows: list[Tag], consumed: NodeSet) -> list[Tag]:
    """Rows that are neither inside nor wrapped around anything a group consumed."""

    return [row for row in rows if not any(contains(node, row) or contains(row, node) for node in consumed)]


def _row_legs(card: CardContext, rows: list[Tag]) -> list[BetLeg]:
    options = LegOptions(fallback_result=to_leg_result(card.result), result_scope=card.header)
    return dedupe_legs(drop_generic_duplicate_legs(filter_meaningful_legs(build_legs_from_rows(rows, options))))


def _group_stage(card: CardContext, sgp_plus: bool) -> GroupStage:
    if card.bet_type is BetType.SGP:
        return build_sgp_group_legs(card.header, card.rows, card.result, card.info.odds)
    if not sgp_plus:
        return GroupStage()
    stage = build_sgp_plus_group_legs(card.header, card.result)
    if card.bet_type is BetType.SGP_PLUS and not stage.groups and card.rows:
        stage = cluster_legs_by_odds(card.rows, card.header, card.info.raw_text, card.result)
    return stage


def _additional_stat_legs(card: CardContext, groups: list[BetLeg], extras: list[BetLeg]) -> list[BetLeg]:
    """SGP+ selections that only appear in the flattened card text, read when the header says "+ N selection"."""

    text = f"{card.info.description} {card.info.raw_text}"
    if not any(pattern.search(text) for pattern in _PLUS_SELECTIONS):
        return []
    child_keys = loose_key_set(child for group in groups for child in group.children or [])
    extra_keys = loose_key_set(extras)

    additional = []
    for leg in build_legs_from_stat_text(card.info.raw_text, LegResult.PENDING):
        if leg_matches_key_set(leg, child_keys) or leg_matches_key_set(leg, extra_keys):
            continue
        target = leg.target or ""
        inside_group = any(group.target and target and target in group.target for group in groups)
        if leg.odds is not None or not inside_group:
            additional.append(leg)
    return additional


def _is_stat_target(target: str | None) -> bool:
    if not target or not target.strip() or re.search(r"[A-Za-z]", target):
        return False
    return bool(_STAT_TARGET.match(target.strip()))


def _settle_group_targets(card: CardContext, legs: list[BetLeg]) -> None:
    odds_matchups = extract_odds_matchups(card.info.raw_text)
    # a plain SGP covers one game, so its card text is that game; nested SGPs never borrow it
    card_text = f"{card.info.raw_text} {text_of(card.header)}" if card.bet_type is BetType.SGP else ""
    for leg in legs:
        if not leg.is_group_leg:
            if card.bet_type is BetType.SGP_PLUS and looks_like_matchup(leg.target) and not _is_stat_target(leg.target):
                leg.target = None
            continue
        first_entity = leg.children[0].entity if leg.children else ""
        raw_target = normalize_spaces(
            leg.target
            or (odds_matchups.get(leg.odds, "") if leg.odds is not None else "")
            or infer_matchup_for_entity(card.info.raw_text, first_entity)
            or card_text
        )
        cleaned = clean_matchup_target(strip_scoreboard_text(raw_target)) or leg.target
        if cleaned:
            leg.target = normalize_spaces(cleaned)


def _check_consistency(card: CardContext, legs: list[BetLeg], logger: logging.Logger | logging.LoggerAdapter) -> None:
    results = []
    for leg in legs:
        if leg.is_group_leg and leg.children:
            results.extend(child.result for child in leg.children)
        results.append(leg.result)
    settled = [result for result in results if result not in _SETTLED_IGNORED]
    if settled and all(result is LegResult.WIN for result in settled) and card.result is BetResult.LOSS:
        logger.warning(
            "bet %s settled as loss but all %d parsed legs show WIN; legs may be missing, keeping footer result",
            card.bet_id,
            len(settled),
        )


def _multi_leg_name(card: CardContext, legs: list[BetLeg]) -> str | None:
    if card.bet_type is BetType.SGP_PLUS:
        return "SGP+"
    if card.bet_type is BetType.SGP:
        only_group = len(legs) == 1 and legs[0].is_group_leg and legs[0].children
        count = len(legs[0].children) if only_group else len(legs)
        return f"SGP ({count} legs)" if count >= 4 else "SGP"
    count = len(legs) or len(card.rows)
    return f"Parlay ({count})" if count else "Parlay"


def _multi_leg_description(card: CardContext, legs: list[BetLeg]) -> str:
    info = card.info
    if not legs:
        return format_description(info.description, info.type, info.name, info.line, info.ou, card.bet_type)
    if card.bet_type is BetType.SGP_PLUS:
        return build_sgp_plus_description(legs)

    condensed = (
        card.bet_type is BetType.SGP
        and len(legs) == 1
        and legs[0].is_group_leg
        and legs[0].children is not None
        and len(legs[0].children) <= 3
    )
    if condensed:
        group = legs[0]
        return f"{format_legs(group.children or [])} {group.target or ''}".strip()
    return format_legs(legs)


def _assemble_multi_leg(card: CardContext, logger: logging.Logger | logging.LoggerAdapter) -> Bet:
    sgp_plus = card.bet_type is BetType.SGP_PLUS or is_sgp_plus_text(card.info.raw_text)
    stage = _group_stage(card, sgp_plus)
    groups = stage.groups

    if card.bet_type is BetType.SGP and groups:
        extras: list[BetLeg] = []
    else:
        if groups:
            extras = _row_legs(card, _unclaimed_rows(card.rows, stage.consumed))
        else:
            extras = _combined_legs(card, card.rows, card.bet_type is BetType.SGP and not sgp_plus)
        child_keys = loose_key_set(child for group in groups for child in group.children or [])
        extras = [leg for leg in extras if not leg_matches_key_set(leg, child_keys)]

    additional = _additional_stat_legs(card, groups, extras) if sgp_plus else []
    legs = [*groups, *extras, *additional]
    logger.debug(
        "bet %s: %d group legs, %d extra legs, %d text legs", card.bet_id, len(groups), len(extras), len(additional)
    )

    if card.bet_type in (BetType.SGP, BetType.SGP_PLUS):
        _settle_group_targets(card, legs)
        _check_consistency(card, legs, logger)

    return _bet_shell(
        card,
        market_category=infer_market_category(card.bet_type),
        description=_multi_leg_description(card, legs),
        name=_multi_leg_name(card, legs),
        odds=card.info.odds or 0,
        legs=legs or None,
    )


def assemble_bet(card: CardContext, logger: logging.Logger | logging.LoggerAdapter | None = None) -> Bet:
    """Build the ``Bet`` for one card; the footer result is kept even when the legs disagree."""

    log = logger or logging.getLogger(__name__)
    if card.bet_type is BetType.SINGLE:
        return _assemble_single(card)
    return _assemble_multi_leg(card, log)
