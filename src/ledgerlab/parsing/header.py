"""Header and footer cards: description fields, amounts, bet type, result and pairing."""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

from bs4 import Tag

from ledgerlab.config import get_settings
from ledgerlab.ledger.types import BetResult, BetType, FooterMeta, HeaderInfo
from ledgerlab.parsing.describe import OU_MARKET_WORDS
from ledgerlab.parsing.dom import (
    LEG_CARD,
    NodeSet,
    aria_of,
    element_children,
    has_odds_span,
    is_element,
    previous_element_siblings,
    raw_text_of,
    text_of,
)
from ledgerlab.parsing.extractors import derive_fields, extract_odds, parse_money
from ledgerlab.parsing.markets import infer_sport
from ledgerlab.parsing.text import (
    PLAYER_NAME_PATTERN,
    clean_description_from_aria,
    clean_parlay_leg_text,
    is_sgp_plus_text,
    normalize_spaces,
    strip_date_time_noise,
    strip_promotional_text,
    truncate,
)

logger = logging.getLogger(__name__)

_N_LEG_PARLAY = re.compile(r"\d+\s+leg\s+parlay", re.I)
_LEG_INDICATORS = re.compile(
    r"To Record|To Score|Made Threes|Spread Betting|Moneyline|Total|Receptions|Yards|Pass Attempts|Assists|Points",
    re.I,
)

# ------------------------------------------------------------------ header

_SPREAD_BETTING = re.compile(r"\s*Spread Betting\s*", re.I)
_SPREAD_PAIR = re.compile(
    r"([A-Za-z\s]+[+\-]\d+(?:\.\d+)?\s*Spread Betting[^,]*,\s*[A-Za-z\s]+[+\-]\d+(?:\.\d+)?\s*Spread Betting)"
)
_SGP_SECTION = re.compile(r"Same Game Parlay.*?([A-Za-z].*)", re.I | re.S)
_PROP_LEG = re.compile(rf"({PLAYER_NAME_PATTERN}\s+(?:To Record|To Score)\s+\d+\+\s+\w+)", re.I)
_THREES_LEG = re.compile(rf"({PLAYER_NAME_PATTERN}\s+\d+\+\s+Made Threes)", re.I)
_LOOSE_PROP_LEG = re.compile(r"([A-Z][^,]+(?:To Record|To Score|Made Threes)[^,]+)", re.I)
_TEAM_LINE = re.compile(r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s*[+\-]\d+(?:\.\d+)?")
_AFTER_PARLAY = re.compile(
    r"(?:parlay|same game parlay)[^,]*?([A-Z].+?)(?:\s+\d{8,}|\s+Finished|\s+Settled|$)", re.I | re.S
)
_NAME_MARKET = re.compile(
    r"([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\s*,?\s*(TO SCORE|POINTS|SPREAD|MONEYLINE|TOTAL)", re.I
)
_STANDALONE_ODDS = re.compile(r"\b[+\-]\d{3,}\b")
_LIVE = re.compile(r"live bet|in-play", re.I)

_MARKET_HINTS = (
    (re.compile(r"YARDS|YDS"), "Yds"),
    (re.compile(r"RECEPTIONS|REC\b"), "Rec"),
    (re.compile(r"POINTS|PTS"), "Pts"),
    (re.compile(r"REBOUNDS|REB"), "Reb"),
    (re.compile(r"ASSISTS|AST"), "Ast"),
    (re.compile(r"MADE THREES|3PT|THREES"), "3pt"),
)


def _without_spread_betting(text: str) -> str:
    return re.sub(r",\s*", ", ", _SPREAD_BETTING.sub("", text)).strip()


def _spread_parlay_description(header: Tag, raw: str) -> str:
    for span in header.select("span"):
        text = raw_text_of(span)
        if re.search(r"Spread Betting", text, re.I) and "," in text and re.search(r"[+\-]\d", text):
            return _without_spread_betting(text.strip())
    pair = _SPREAD_PAIR.search(raw)
    return _without_spread_betting(pair.group(1)) if pair else ""


def _prop_parlay_description(raw: str) -> str:
    section_match = _SGP_SECTION.search(raw)
    section = section_match.group(1) if section_match else raw

    description = ""
    props = _PROP_LEG.findall(section)
    if len(props) >= 2:
        cleaned = (clean_parlay_leg_text(leg) for leg in props)
        description = ", ".join(leg for leg in cleaned if len(leg) > 10 and "Same Game Parlay" not in leg)

    if len(description) < 20:
        threes = _THREES_LEG.findall(section)
        if threes and props:
            cleaned = (clean_parlay_leg_text(leg) for leg in [*props, *threes])
            description = ", ".join(leg for leg in cleaned if len(leg) > 10)

    if len(description) >= 20:
        return description

    loose = _LOOSE_PROP_LEG.findall(raw)
    if len(loose) >= 2:
        description = ", ".join(leg for leg in map(clean_parlay_leg_text, loose) if len(leg) > 10)
    if not description:
        teams = _TEAM_LINE.findall(raw)
        if len(teams) >= 2:
            description = ", ".join(_SPREAD_BETTING.sub("", team).strip() for team in teams)
    if not description:
        tail = _AFTER_PARLAY.search(raw)
        if tail:
            description = normalize_spaces(_STANDALONE_ODDS.sub("", tail.group(1)))[:200]
    return description


def _with_made_threes(description: str, raw: str) -> str:
    extras = [leg for leg in map(clean_parlay_leg_text, _THREES_LEG.findall(raw)) if leg]
    if not extras:
        return description
    parts = [normalize_spaces(part) for part in re.split(r",\s*", description)] if description else []
    for leg in extras:
        if leg not in parts:
            parts.append(leg)
    return ", ".join(parts).strip()


def _single_description(header: Tag, raw: str) -> str:
    aria_node = header.select_one("[aria-label]")
    description = clean_description_from_aria(aria_of(aria_node)) if aria_node is not None else ""
    if description.strip():
        return description

    name_market = _NAME_MARKET.search(raw)
    if name_market:
        return f"{name_market.group(1)} {name_market.group(2)}"
    words = [word for word in raw.split() if len(word) > 2 and not word.isdigit()]
    return " ".join(words[:5])


def _line_after(word: str, raw: str) -> str | None:
    found = re.search(rf"\b{word}\s+(\d+(?:\.\d+)?)", raw, re.I)
    return found.group(1) if found else None


def _repair_over_name(description: str, name: str, ou: str, line: str, market: str) -> str:
    """``"Onyeka Okongwu Over Okongwu - REBOUNDS"`` becomes ``"Onyeka Okongwu Over 8.5 Rebounds"``."""

    has_line = re.search(rf"Over\s+{re.escape(line)}", description, re.I)
    if has_line:
        return description
    last_name = name.split()[-1]
    malformed = re.search(rf"{re.escape(name)}\s+Over\s+[A-Za-z]", description, re.I) or re.search(
        rf"Over\s+{re.escape(last_name)}", description, re.I
    )
    if not malformed:
        return description
    word = OU_MARKET_WORDS.get(market)
    return f"{name} {ou} {line} {word}" if word else f"{name} {ou} {line}"


def extract_header_info(header: Tag, bet_type: BetType | None = None) -> HeaderInfo:
    """Description, odds, sport and live flag of a header card; single bets also get name/type/line/ou."""

    raw = strip_date_time_noise(text_of(header))
    odds = extract_odds(header)
    is_parlay = (bet_type is not None and bet_type.is_multi_leg) or bool(re.search(r"leg\s+parlay", raw, re.I))

    name = market = line = ou = None
    if is_parlay:
        description = _spread_parlay_description(header, raw) or _prop_parlay_description(raw)
        description = _with_made_threes(description, raw)
    else:
        description = _single_description(header, raw)
        derived = derive_fields(description, raw)
        name, market, line, ou = derived.name, derived.type, derived.line, derived.ou
        if ou and not line:
            line = _line_after(ou, raw)
        if market == "Total" and not line:
            total = re.search(r"(Over|Under)\s+(\d+(?:\.\d+)?)", raw, re.I)
            if total:
                ou = "Over" if total.group(1).lower() == "over" else "Under"
                line = total.group(2)

    market_types = [market] if market else []
    upper = description.upper()
    market_types.extend(code for pattern, code in _MARKET_HINTS if pattern.search(upper))
    sport = infer_sport(raw, market_types)

    description = re.sub(r"TOTAL POINTS", "Total Points", description, count=1, flags=re.I)
    if market == "Total" and line and ou and description.strip().lower() in ("", "total"):
        description = f"{ou} {line} Total Points"
    if name and ou and line and market:
        description = _repair_over_name(description, name, ou, line, market)
    if description:
        description = truncate(strip_promotional_text(description), get_settings().description_max_length)

    return HeaderInfo(
        description=description,
        raw_text=raw,
        name=name,
        type=market,
        line=line,
        ou=ou,
        odds=odds,
        sport=sport,
        is_live=bool(_LIVE.search(raw)),
    )


# ------------------------------------------------------------------ footer

_BET_ID_PATTERNS = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r"BET ID:\s*([A-Z0-9/]+)(?=\s*PLACED)",
        r"BET ID:\s*([A-Z0-9/]+)",
        r"BET\s*ID[:\s]+([A-Z0-9/]+)",
        r"BET\s*ID:([A-Z0-9/]+)",
    )
)
_PLACED_IN_SPAN = re.compile(r"PLACED:\s*(.+?)(?:\s*$|BET ID)", re.I)
_PLACED_PATTERNS = (
    re.compile(r"PLACED:\s*(.+?)(?:\s*$|\s*BET ID)", re.I),
    re.compile(r"PLACED[:\s]+(.+?)(?:\s*$|\s*BET ID)", re.I),
)


def _dollar_amount(node: Tag | None) -> float | None:
    if node is None:
        return None
    text = raw_text_of(node)
    return parse_money(text) if "$" in text else None


def _span_of(node: Tag) -> Tag | None:
    return node.select_one("span") or (node if node.name == "span" else None)


def extract_labeled_amount(root: Tag, label: str) -> float | None:
    """Dollar amount rendered next to a label span such as ``TOTAL WAGER``.

    Layouts put the value after the label, before it, or nested in a sibling
    ``div``; each placement is tried from the most to the least reliable.
    """

    wanted = label.upper()
    spans = root.select("span")
    position = next((index for index, span in enumerate(spans) if text_of(span).upper() == wanted), None)
    if position is None:
        return None
    label_span = spans[position]
    parent = label_span.parent if is_element(label_span.parent) else None

    if parent is not None:
        children = element_children(parent)
        index = next(i for i, child in enumerate(children) if child is label_span)
        for child in [*children[index + 1:], *reversed(children[:index])]:
            amount = _dollar_amount(_span_of(child))
            if amount is not None:
                return amount
        before = children[:index]
        for span in parent.select("span"):
            if span is label_span or any(span is child for child in before):
                continue
            amount = _dollar_amount(span)
            if amount is not None:
                return amount

    for span in spans[max(0, position - 3): position + 3]:
        if span is label_span:
            continue
        amount = _dollar_amount(span)
        if amount is not None:
            return amount

    if parent is not None:
        for div in parent.select("div"):
            amount = _dollar_amount(div.select_one("span"))
            if amount is not None:
                return amount
        first_div = parent.select_one("div")
        value_span = first_div.select_one("span") if first_div is not None else None
        if value_span is not None:
            amount = parse_money(raw_text_of(value_span))
            if amount is not None:
                return amount

    for sibling in previous_element_siblings(label_span):
        amount = _dollar_amount(sibling)
        if amount is not None:
            return amount

    if parent is not None:
        text = raw_text_of(parent)
        for pattern in (
            rf"\$([0-9,]+(?:\.[0-9]{{2}})?)\s*{re.escape(wanted)}",
            rf"{re.escape(wanted)}\s*\$([0-9,]+(?:\.[0-9]{{2}})?)",
        ):
            found = re.search(pattern, text, re.I)
            if found:
                return parse_money(found.group(1))
    return None


def _first_amount(root: Tag, labels: Sequence[str]) -> float | None:
    # a zero amount falls through to the next label
    amount = None
    for label in labels:
        amount = extract_labeled_amount(root, label)
        if amount:
            return amount
    return amount


def extract_footer_meta(footer: Tag) -> FooterMeta:
    raw = text_of(footer)

    bet_id = None
    for pattern in _BET_ID_PATTERNS:
        found = pattern.search(raw)
        if found:
            bet_id = found.group(1).strip()
            break

    placed = None
    placed_span = next((span for span in footer.select("span") if "PLACED:" in text_of(span)), None)
    if placed_span is not None:
        found = _PLACED_IN_SPAN.search(text_of(placed_span))
        placed = found.group(1).strip() if found else None
    if not placed:
        for pattern in _PLACED_PATTERNS:
            found = pattern.search(raw)
            if found:
                placed = found.group(1).strip()
                break

    won = _first_amount(footer, ("WON ON FANDUEL", "WON", "PAID"))
    returned = _first_amount(footer, ("RETURNED", "REFUNDED"))
    return FooterMeta(
        bet_id=bet_id,
        placed_at_raw=placed,
        stake=_first_amount(footer, ("TOTAL WAGER", "WAGER", "STAKE")),
        payout=won if won is not None else returned,
        has_won_on_fanduel=won is not None,
        raw_text=raw,
    )


_PLACED_AT = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})\s+(\d{1,2}):(\d{2})\s*(AM|PM)\s+ET", re.I)


def _et_zone() -> timezone:
    offset = get_settings().et_utc_offset
    sign = -1 if offset.startswith("-") else 1
    hours, minutes = offset[1:].split(":")
    return timezone(sign * timedelta(hours=int(hours), minutes=int(minutes)))


def parse_placed_at(raw: str | None, now: datetime) -> str:
    """``11/18/2025 11:09PM ET`` as ISO 8601 in the configured ET offset; ``now`` when unreadable."""

    found = _PLACED_AT.search(raw or "")
    if not found:
        return now.isoformat()
    month, day, year, hour, minute, meridiem = found.groups()
    hour24 = int(hour) % 12 + (12 if meridiem.upper() == "PM" else 0)
    try:
        placed = datetime(int(year), int(month), int(day), hour24, int(minute), tzinfo=_et_zone())
    except ValueError:
        logger.debug("unreadable placed-at %r", raw)
        return now.isoformat()
    return placed.isoformat()


# ------------------------------------------------------------------ classification


def infer_bet_type(header: Tag, leg_count: int) -> BetType:
    text = text_of(header)
    lowered = text.lower()
    aria_node = header.select_one("[aria-label]")
    aria = aria_of(aria_node).lower() if aria_node is not None else ""

    if is_sgp_plus_text(text):
        return BetType.SGP_PLUS

    has_sgp_text = "same game parlay" in lowered
    promo_only = ("parlay available" in lowered or "parlay available" in aria) and not _LEG_INDICATORS.search(text)
    if has_sgp_text and not promo_only:
        return BetType.SGP
    if _N_LEG_PARLAY.search(lowered):
        return BetType.PARLAY
    if _N_LEG_PARLAY.search(aria):
        return BetType.PARLAY

    if (
        ("parlay" in lowered or "parlay" in aria)
        and "parlay available" not in lowered
        and "parlay available" not in aria
        and leg_count >= 2
        and (lowered.count(",") >= 2 or re.search(r"\d+\s+leg", lowered))
    ):
        return BetType.SGP if "same game" in lowered else BetType.PARLAY

    for span in header.select("span"):
        span_text = text_of(span).lower()
        if "leg parlay" in span_text or ("parlay" in span_text and "leg" in span_text):
            return BetType.PARLAY

    if text.count("Spread Betting") > 1 and leg_count >= 2:
        return BetType.PARLAY
    return BetType.SINGLE


def infer_result(stake: float | None, payout: float | None, footer: Tag, has_won: bool) -> BetResult:
    if has_won:
        return BetResult.WIN
    text = text_of(footer).lower()
    returned = "returned" in text
    settled = any(token in text for token in ("finished", "settled", "returned", "won on fanduel")) or payout is not None

    def equal(a: float, b: float) -> bool:
        return abs(a - b) < 0.0001

    if returned:
        if stake is not None and payout is not None and payout > 0 and equal(payout, stake):
            return BetResult.PUSH
        if not payout:
            return BetResult.LOSS
    if settled and payout == 0:
        return BetResult.LOSS
    if settled and payout is None and not returned:
        return BetResult.LOSS
    if stake is not None and payout is not None:
        if payout > stake:
            return BetResult.WIN
        if equal(payout, stake):
            return BetResult.PUSH
    return BetResult.PENDING


# ------------------------------------------------------------------ pairing


def is_footer(item: Tag) -> bool:
    return "BET ID:" in raw_text_of(item)


def _footer_like(item: Tag, *, strict: bool = False) -> bool:
    text = text_of(item).lower()
    return (
        "bet id" in text
        or ("total wager" in text and "won on fanduel" in text)
        or (strict and "placed:" in text)
    )


def is_own_header(footer: Tag) -> bool:
    """A footer card that also holds the selections: "N leg parlay" banners or leg content."""

    return bool(_N_LEG_PARLAY.search(text_of(footer))) or has_odds_span(footer) or footer.select_one(LEG_CARD) is not None


def find_header_for_footer(footer: Tag, items: Sequence[Tag], claimed: NodeSet) -> Tag:
    """Nearest earlier header card that no other footer has claimed, else the footer itself."""

    if is_own_header(footer):
        return footer
    for sibling in previous_element_siblings(footer):
        if sibling.name == "li" and sibling not in claimed and not _footer_like(sibling):
            return sibling

    position = next((index for index, item in enumerate(items) if item is footer), len(items))
    for candidate in reversed(items[:position]):
        if candidate.name == "li" and candidate not in claimed and not _footer_like(candidate, strict=True):
            return candidate
    return footer
