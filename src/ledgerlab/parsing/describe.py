"""Human-readable leg summaries and ticket descriptions."""

from __future__ import annotations

import re
from collections.abc import Sequence

from ledgerlab.config import get_settings
from ledgerlab.ledger.types import BetLeg, BetType
from ledgerlab.parsing.extractors import clean_entity_name
from ledgerlab.parsing.matchups import shorten_matchup
from ledgerlab.parsing.text import strip_promotional_text, truncate

OU_MARKET_WORDS = {
    "Reb": "Rebounds",
    "Yds": "Yards",
    "Rec": "Receptions",
    "Ast": "Assists",
    "3pt": "Made Threes",
}

_PARLAY_CLEANUP = (
    (re.compile(r"\s*Spread Betting\s*", re.I), ""),
    (re.compile(r",\s*"), ", "),
    (re.compile(r"^parlay\s*™?\s*", re.I), ""),
    (re.compile(r"^same\s+game\s+parlay\s*", re.I), ""),
    (re.compile(r"^available\s+same\s+game\s*", re.I), ""),
    (re.compile(r"\s*Finished\s*", re.I), " "),
    (re.compile(r"\s*Box\s+Score.*$", re.I), " "),
    (re.compile(r"\s*Play-by-play.*$", re.I), " "),
    (re.compile(r"\b\d{6,}\s+\d{6,}\b"), " "),
    (re.compile(r"\b\d{6,}\b"), " "),
)
_FINAL_CLEANUP = (
    (re.compile(r"\s*Finished\s*", re.I), " "),
    (re.compile(r"\s*Box\s+Score.*$", re.I), " "),
    (re.compile(r"\s*Play-by-play.*$", re.I), " "),
    (re.compile(r"\b\d{6,}\s+\d{6,}\b"), " "),
)


def format_leg_summary(leg: BetLeg) -> str:
    """``"<Name> <Target> <Market>"`` with phrasing for spreads, moneylines, threes and group legs."""

    if leg.is_group_leg and leg.children:
        label = f"Same Game Parlay - {leg.target}" if leg.target else "Same Game Parlay"
        children = format_legs(leg.children)
        return f"{label}: {children}" if children else label

    name = clean_entity_name(leg.entity)
    market = leg.market or ""
    target = leg.target or ""
    lowered = market.lower()

    if lowered == "spread" and target:
        return f"{name} {target}" if name else target
    if lowered == "moneyline":
        return f"{name} Moneyline" if name else "Moneyline"
    if lowered == "3pt":
        made = f"{target} Made Threes" if target else "Made Threes"
        return f"{name} {made}" if name else made
    if name and target and market:
        return f"{name} {target} {market}"
    if name and market:
        return f"{name} {market}"
    if market and target:
        return f"{target} {market}"
    return name or market


def format_leg_summary_short(leg: BetLeg) -> str:
    if leg.market.lower() == "3pt" and leg.target:
        return f"{leg.entity} {leg.target} 3pt" if leg.entity else f"{leg.target} 3pt"
    return format_leg_summary(leg)


def format_legs(legs: Sequence[BetLeg]) -> str:
    return ", ".join(summary for summary in map(format_leg_summary, legs) if summary)


def format_description(
    description: str,
    market: str | None = None,
    name: str | None = None,
    line: str | None = None,
    ou: str | None = None,
    bet_type: BetType | None = None,
) -> str:
    """Render a ticket description; a description that already reads well is returned unchanged."""

    if not description:
        return ""
    limit = get_settings().description_max_length

    if bet_type is not None and bet_type.is_multi_leg:
        cleaned = strip_promotional_text(description)
        for pattern, repl in _PARLAY_CLEANUP:
            cleaned = pattern.sub(repl, cleaned)
        return truncate(cleaned.strip(), limit)

    if "Spread Betting" in description and "," in description:
        return re.sub(r",\s*", ", ", re.sub(r"\s*Spread Betting\s*", "", description, flags=re.I)).strip()

    if market == "Total" and line and ou:
        return f"{ou} {line} Total Points"
    if not name:
        return description

    if market == "Pts" and line:
        if ou:
            return f"{name} {ou} {line} Points"
        if "+" in line:
            return f"{name} To Score {line} Points"
        return f"{name} {line} Points"

    description = re.sub(r"TOTAL POINTS", "Total Points", description, count=1, flags=re.I)
    if market == "Spread" and line:
        return f"{name} {line} Spread"
    if market == "Moneyline":
        return f"{name} Moneyline"
    if ou and line and market in OU_MARKET_WORDS:
        return f"{name} {ou} {line} {OU_MARKET_WORDS[market]}"

    for pattern, repl in _FINAL_CLEANUP:
        description = pattern.sub(repl, description)
    return truncate(description.strip(), limit)


def _is_ladder(children: Sequence[BetLeg]) -> bool:
    markets = {child.market.lower() for child in children}
    return len(markets) <= 2 and (
        "yds" in markets or "rec" in markets or (len(markets) == 1 and not markets & {"3pt", "ast"})
    )


def _sgp_chunk(group: BetLeg) -> str:
    return f"SGP ({shorten_matchup(group.target)})" if group.target else "SGP"


def build_sgp_plus_description(legs: Sequence[BetLeg]) -> str:
    """``"<N>-leg Same Game Parlay Plus: SGP (<matchup> - children) + extras"`` and its variants."""

    groups = [leg for leg in legs if leg.is_group_leg]
    extras = [leg for leg in legs if not leg.is_group_leg]
    total = sum(len(group.children or []) for group in groups) + len(extras)

    if len(groups) > 1:
        if not extras:
            children = [child for group in groups for child in group.children or []]
            if _is_ladder(children):
                return format_legs(children)
            return f"{total}-leg Same Game Parlay Plus: " + " + ".join(map(_sgp_chunk, groups))
        parts = [*map(_sgp_chunk, groups), *filter(None, map(format_leg_summary_short, extras))]
        return f"{total}-leg Same Game Parlay Plus: " + " + ".join(parts)

    if not groups:
        return format_legs(legs)

    group = groups[0]
    children = group.children or []
    matchup = shorten_matchup(group.target) if group.target else ""
    child_summaries = [summary for summary in map(format_leg_summary, children) if summary]
    extra_summaries = [summary for summary in map(format_leg_summary, extras) if summary]

    rec_only = bool(children) and all(child.market.lower() == "rec" for child in children)
    if rec_only and len(extras) == 1 and extras[0].market.lower() == "rec" and extra_summaries:
        count = len(children) + 1
        return f"{count}-leg Same Game Parlay Plus: {_sgp_chunk(group)} + {extra_summaries[0]}".strip()

    if matchup and child_summaries:
        chunk = f"SGP ({matchup} - {', '.join(child_summaries)})"
    elif matchup:
        chunk = f"SGP ({matchup})"
    elif child_summaries:
        chunk = f"SGP ({', '.join(child_summaries)})"
    else:
        chunk = "SGP"

    if not extra_summaries:
        return f"{len(children)}-leg Same Game Parlay Plus: {chunk}" if children else chunk
    count = len(children) + len(extra_summaries)
    return f"{count}-leg Same Game Parlay Plus: " + " + ".join([chunk, *extra_summaries])
