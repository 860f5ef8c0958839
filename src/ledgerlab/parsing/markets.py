"""Market codes, market categories and sport detection."""

from __future__ import annotations

import re
from collections.abc import Iterable

from ledgerlab.ledger.types import BetType, MarketCategory

PROP_MARKETS = frozenset({"pts", "reb", "ast", "pra", "3pt"})
PLAYER_PROP_MARKETS = frozenset({"Pts", "Reb", "Ast", "3pt", "Yds", "Rec", "TD", "DD", "FB", "Top Pts"})
GENERIC_MARKET = "Other"

_FUTURES = re.compile(
    r"\bfutures?\b|\boutright\b|\bmvp\b|\bseason\s+win\s+total\b|"
    r"\bto\s+win\s+(?:the\s+)?(?:championship|title|super\s+bowl|nba\s+finals|conference|division)\b",
    re.I,
)

_SPORT_TEAMS = (
    (
        "NBA",
        ("PISTONS", "MAGIC", "HAWKS", "LAKERS", "WARRIORS", "CELTICS", "HEAT", "SUNS", "TRAIL BLAZERS",
         "GRIZZLIES", "SPURS", "JAZZ", "PELICANS", "BULLS", "MAVERICKS"),
    ),
    (
        "NFL",
        ("PATRIOTS", "COWBOYS", "PACKERS", "CHIEFS", "RAVENS", "BROWNS", "BRONCOS", "SEAHAWKS", "RAMS",
         "CARDINALS", "49ERS", "NINERS"),
    ),
    ("MLB", ("YANKEES", "RED SOX", "DODGERS")),
)


def guess_market_from_text(text: str) -> str:
    """Canonical market code for free text, or ``""`` when nothing is recognised."""

    upper = text.upper()
    if "SPREAD" in upper:
        return "Spread"
    if "MONEYLINE" in upper:
        return "Moneyline"
    if "TRIPLE DOUBLE" in upper:
        return "TD"
    if "DOUBLE DOUBLE" in upper:
        return "DD"
    if any(token in upper for token in ("FIRST BASKET", "FIRST FIELD GOAL", "FIRST FG")):
        return "FB"
    if any(token in upper for token in ("TOP SCORER", "TOP POINT", "TOP PTS")):
        return "Top Pts"
    if "TOTAL" in upper:
        return "Total"
    # assists before threes: "10+ ASSISTS" is not a threes line
    if "ASSIST" in upper:
        return "Ast"
    if re.search(r"MADE THREES|3PT|THREES", upper):
        return "3pt"
    if "POINT" in upper:
        return "Pts"
    if "REBOUND" in upper:
        return "Reb"
    if "YARD" in upper:
        return "Yds"
    if "RECEPTION" in upper:
        return "Rec"
    return ""


def market_from_stat(stat: str) -> str:
    upper = stat.upper()
    if "ASSIST" in upper:
        return "Ast"
    if "POINT" in upper:
        return "Pts"
    if "REBOUND" in upper:
        return "Reb"
    if "THREE" in upper or "3PT" in upper:
        return "3pt"
    if "YARD" in upper or upper == "YDS":
        return "Yds"
    if "RECEPTION" in upper or upper == "REC":
        return "Rec"
    return stat


def infer_market_category(bet_type: BetType, market: str | None = None, text: str = "") -> MarketCategory:
    if bet_type.is_multi_leg:
        return MarketCategory.PARLAYS
    if text and _FUTURES.search(text):
        return MarketCategory.FUTURES
    if market and market.lower() in PROP_MARKETS:
        return MarketCategory.PROPS
    return MarketCategory.MAIN_MARKETS


def infer_sport(text: str, market_types: Iterable[str] = ()) -> str:
    """NBA, NFL, MLB or ``""``: market codes, then keywords, then leagues, then team names."""

    upper = text.upper()
    markets = [market.upper() for market in market_types if market]
    if any(m in ("YDS", "REC") or "YARD" in m or "RECEPTION" in m for m in markets):
        return "NFL"
    if any(
        m in ("PTS", "REB", "AST", "3PT") or any(word in m for word in ("POINT", "REBOUND", "ASSIST", "THREE"))
        for m in markets
    ):
        return "NBA"

    if re.search(r"YARDS|YDS|RECEPTIONS|REC\b", upper) and not re.search(r"POINTS|REBOUNDS|ASSISTS", upper):
        return "NFL"
    if re.search(r"POINTS|REBOUNDS|ASSISTS|MADE THREES|3PT", upper) and not re.search(r"YARDS|RECEPTIONS", upper):
        return "NBA"

    for sport, words in (("NFL", ("NFL", "FOOTBALL")), ("NBA", ("NBA", "BASKETBALL")), ("MLB", ("MLB", "BASEBALL"))):
        if any(word in upper for word in words):
            return sport

    for sport, teams in _SPORT_TEAMS:
        if any(team in upper for team in teams):
            return sport
    return ""
