"""Leg de-duplication and promotional-noise filtering."""

from __future__ import annotations

import re
from collections.abc import Iterable

from ledgerlab.ledger.types import BetLeg
from ledgerlab.parsing.markets import GENERIC_MARKET

_PROMO = re.compile(
    r"same game parlay|parlay available|same-game parlay|plus available|includes|profit boost|profitboost|parlay™",
    re.I,
)
_GENERIC_ENTITIES = frozenset(
    {"made", "yards", "receptions", "available same game", "same game", "parlay", "parlay™", "parlaytm"}
)
_PROMO_ENTITIES = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r"^parlay™$",
        r"^parlay$",
        r"^same\s+game$",
        r"^available\s+same\s+game$",
        r"^made\s+threes?$",
        r"^to\s+record$",
        r"^to\s+score$",
    )
)
_MARKET_WORDS = frozenset(
    {"made", "yards", "receptions", "points", "rebounds", "assists", "threes", "moneyline", "spread", "total"}
)
_PROP_MARKETS = frozenset({"pts", "reb", "ast", "yds", "rec", "3pt"})
TEAM_NAMES = frozenset(
    {
        "los angeles rams", "arizona cardinals", "san francisco 49ers", "seattle seahawks",
        "baltimore ravens", "cleveland browns", "denver broncos", "detroit pistons", "atlanta hawks",
        "orlando magic", "phoenix suns", "portland trail blazers", "utah jazz", "los angeles lakers",
        "golden state warriors", "new orleans pelicans", "chicago bulls",
    }
)


def _entity(leg: BetLeg) -> str:
    return leg.entity.lower()


def _target(leg: BetLeg) -> str:
    return "" if leg.target is None else str(leg.target).strip()


def dedupe_legs(legs: Iterable[BetLeg]) -> list[BetLeg]:
    """Keep the first leg per (entity, market, target, ou); backfill its odds from later copies."""

    seen: dict[tuple[str, str, str, str], BetLeg] = {}
    for leg in legs:
        key = (_entity(leg), leg.market.lower(), _target(leg).lower(), (leg.ou or "").lower())
        existing = seen.get(key)
        if existing is None:
            seen[key] = leg
        elif existing.odds is None and leg.odds is not None:
            seen[key] = existing.model_copy(update={"odds": leg.odds})
    return list(seen.values())


def looks_like_matchup(value: str | None) -> bool:
    if not value:
        return False
    lowered = value.lower()
    return "@" in value or " vs " in lowered or " at " in lowered


def is_meaningful(leg: BetLeg) -> bool:
    entity = leg.entity.strip()
    lowered = entity.lower()
    market = leg.market.lower()
    has_target = bool(_target(leg))
    useful_market = bool(market) and market != GENERIC_MARKET.lower()

    if not entity:
        return False
    if lowered in _GENERIC_ENTITIES or entity[0].isdigit():
        return False
    if any(pattern.search(entity) for pattern in _PROMO_ENTITIES):
        return False
    if len(entity.split()) == 1 and lowered in _MARKET_WORDS:
        return False
    if market in _PROP_MARKETS and lowered in TEAM_NAMES:
        return False
    if any(token in text for text in (lowered, market) for token in ("same game parlay", "same-game parlay")):
        return False
    if (_PROMO.search(entity) or _PROMO.search(leg.market)) and not has_target and not leg.odds:
        return False
    if re.match(r"alt\s+", entity, re.I):
        return False
    if not useful_market and re.fullmatch(r"[+\-]?\d{3,}", re.sub(r"\s+", "", _target(leg))):
        return False
    if market in _PROP_MARKETS and looks_like_matchup(leg.target):
        return False
    return True


def filter_meaningful_legs(legs: Iterable[BetLeg]) -> list[BetLeg]:
    return [leg for leg in legs if is_meaningful(leg)]


def drop_generic_duplicate_legs(legs: list[BetLeg]) -> list[BetLeg]:
    """Drop an ``Other`` leg when a specific market already covers the same entity and target."""

    specific = {
        (_entity(leg), _target(leg))
        for leg in legs
        if _entity(leg) and leg.market and leg.market.lower() != GENERIC_MARKET.lower()
    }
    return [
        leg
        for leg in legs
        if not (leg.market.lower() == GENERIC_MARKET.lower() and (_entity(leg), _target(leg)) in specific)
    ]


def leg_keys_loose(leg: BetLeg) -> list[str]:
    """Full ``entity|market|target`` key, plus an ``entity|market`` wildcard when the target is empty."""

    base = f"{_entity(leg)}|{leg.market.lower()}"
    keys = [f"{base}|{_target(leg)}"]
    if not _target(leg):
        keys.append(base)
    return keys


def leg_matches_key_set(leg: BetLeg, keys: set[str]) -> bool:
    """Loose membership: an empty target on either side matches any target."""

    if any(key in keys for key in leg_keys_loose(leg)):
        return True
    entity, market = _entity(leg), leg.market.lower()
    if not entity and not market:
        return False
    wildcard = f"{entity}|{market}"
    if wildcard in keys:
        return True
    if not _target(leg):
        return any(key.startswith(wildcard + "|") for key in keys)
    return False


def loose_key_set(legs: Iterable[BetLeg]) -> set[str]:
    keys: set[str] = set()
    for leg in legs:
        keys.update(leg_keys_loose(leg))
    return keys
