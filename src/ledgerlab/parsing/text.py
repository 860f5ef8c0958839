"""Whitespace and noise normalization for text lifted out of bet cards."""

from __future__ import annotations

import re

PLAYER_NAME_PATTERN = r"[A-Z][A-Za-z'\.]+(?:\s+[A-Z][A-Za-z'\.]+)*"

# Team words that sometimes precede a player name in flattened card text.
TEAM_TOKENS = frozenset(
    {
        "spurs", "grizzlies", "hawks", "bulls", "magic", "pistons", "pelicans",
        "warriors", "mavericks", "blazers", "suns", "lakers", "jazz", "ravens",
        "chiefs", "browns", "broncos", "seahawks", "rams", "bills", "cardinals",
        "niners", "49ers", "celtics", "heat", "cavaliers", "clippers", "kings",
        "wizards", "knicks", "nets", "raptors",
    }
)

_WS = re.compile(r"\s+")
_DATE_TIME = re.compile(r"[A-Z][a-z]{2}\s+\d{1,2},\s*\d{1,2}:\d{2}\s*(?:am|pm)\s*ET", re.I)
_BARE_TIME = re.compile(r"\b\d{1,2}:\d{2}\s*(?:am|pm)\s*ET\b", re.I)
_GLUED_MONTH = re.compile(
    r"(?:@|\bat\b)?\s*[A-Z][a-z]+\s*[A-Z][a-z]+Nov\s+\d{1,2},\s*\d{1,2}:\d{2}\s*(?:am|pm)\s*ET",
    re.I,
)

_SCOREBOARD_BANNERS = (
    re.compile(r"Finished", re.I),
    re.compile(r"Box Score.*$", re.I),
    re.compile(r"Play-by-play.*$", re.I),
)
_SCOREBOARD_DIGITS = (
    re.compile(r"\b\d{1,3}\b(\s+\d{1,3}){3,}"),
    re.compile(r"\b\d{6,}\b"),
    re.compile(r"\s+\d{1,3}\s+\d{1,3}\s*$"),
    re.compile(r"\b\d{3,6}\s+\d{3,6}\b"),
)

_PROMO_PATTERNS = (
    (re.compile(r"^available\s+Same\s+Game\s*", re.I), ""),
    (re.compile(r"\s*available\s+Same\s+Game\s*", re.I), ""),
    (re.compile(r"^same\s+game\s+parlay\s+available\s*", re.I), ""),
    (re.compile(r"\s*same\s+game\s+parlay\s+available\s*", re.I), ""),
    (re.compile(r"^parlay\s+available\s*", re.I), ""),
    (re.compile(r"\s*parlay\s+available\s*", re.I), ""),
    (re.compile(r"^parlay\s*™\s*", re.I), ""),
    (re.compile(r"\bparlay™", re.I), ""),
    (re.compile(r"™"), ""),
    (re.compile(r"^same\s+game\s+parlay\s*", re.I), ""),
    (re.compile(r"^includes[:\s]*", re.I), ""),
    (re.compile(r"^plus\s+available\s*", re.I), ""),
    (re.compile(r"\s*Finished\s*", re.I), " "),
    (re.compile(r"\s*Box\s+Score.*$", re.I), " "),
    (re.compile(r"\s*Play-by-play.*$", re.I), " "),
    (re.compile(r"\b\d{6,}\s+\d{6,}\b"), " "),
    (re.compile(r"\b\d{6,}\b"), " "),
    (re.compile(r"\s*Current\s+\w+:\s*\d+\s*", re.I), " "),
    (re.compile(r"^,\s*"), ""),
    (re.compile(r"\s*,\s*$"), ""),
)
_PROMO_LEADING = re.compile(r"^(parlay|parlay™|same\s+game|available\s+same\s+game)", re.I)
_PROMO_PART = re.compile(
    r"^(parlay|parlay™|same\s+game|available\s+same\s+game|includes|plus\s+available)", re.I
)


def normalize_spaces(text: str | None) -> str:
    return _WS.sub(" ", text or "").strip()


def strip_date_time_noise(text: str | None) -> str:
    """Drop schedule fragments such as ``Nov 16, 8:12pm ET`` glued to names."""

    if not text:
        return ""
    cleaned = _DATE_TIME.sub(" ", text)
    cleaned = _BARE_TIME.sub(" ", cleaned)
    cleaned = _GLUED_MONTH.sub(" ", cleaned)
    return normalize_spaces(cleaned)


def strip_scoreboard_text(text: str | None) -> str:
    """Remove live-scoreboard residue: banners, period scores, IDs and stat pairs."""

    cleaned = normalize_spaces(text)
    for pattern in _SCOREBOARD_BANNERS:
        cleaned = pattern.sub(" ", cleaned)
    cleaned = strip_date_time_noise(cleaned)
    for pattern in _SCOREBOARD_DIGITS:
        cleaned = pattern.sub(" ", cleaned)
    return normalize_spaces(cleaned)


def strip_promotional_text(text: str) -> str:
    """Strip marketing banners and scoreboard tails from a description."""

    cleaned = text
    for pattern, repl in _PROMO_PATTERNS:
        cleaned = pattern.sub(repl, cleaned)
    cleaned = cleaned.strip()
    if _PROMO_LEADING.match(cleaned):
        meaningful = [part for part in re.split(r",\s*", cleaned) if not _PROMO_PART.match(part.strip())]
        if meaningful:
            cleaned = ", ".join(meaningful).strip()
    return cleaned


def truncate(text: str, limit: int) -> str:
    if len(text) > limit:
        return text[: limit - 3].strip() + "..."
    return text


def clean_description_from_aria(aria: str | None) -> str:
    """Turn an accessible label into a readable selection description.

    ``"Cade Cunningham, TO SCORE 30+ POINTS, +240, Pistons @ Hawks, Nov 16, 7:30pm ET"``
    becomes ``"Cade Cunningham To SCORE 30+ POINTS"``.
    """

    if not aria:
        return ""
    desc = aria.strip()

    desc = re.sub(r",\s*[A-Z][^,]*@[^,]*,\s*[^,]*,\s*[^,]*ET.*$", "", desc, flags=re.I)
    desc = re.sub(r",\s*[A-Z][^,]*vs[^,]*,\s*[^,]*,\s*[^,]*ET.*$", "", desc, flags=re.I)
    desc = re.sub(r",?\s*Odds\s*[+\-]\d+.*$", "", desc, flags=re.I)
    desc = re.sub(r",\s*[+\-]\d+.*$", "", desc)
    desc = re.sub(r"\s[+\-]\d+$", "", desc)
    desc = re.sub(r",\s*,+", ",", desc)
    desc = re.sub(r",\s*$", "", desc).strip()
    desc = re.sub(r"\s*Finished\s*", " ", desc, flags=re.I).strip()
    desc = re.sub(r"\s*Current\s+\w+:\s*\d+\s*", " ", desc, flags=re.I).strip()

    # "Onyeka Okongwu Over Onyeka OKONGWU - REBOUNDS" -> "Onyeka Okongwu Over REBOUNDS"
    over_name = re.match(r"^([A-Za-z' .-]+)\s+Over\s+([A-Z][A-Z\s]+)", desc, flags=re.I)
    if over_name:
        name = over_name.group(1).strip()
        after_over = over_name.group(2).strip()
        if re.fullmatch(r"[A-Z\s]+", after_over) or re.match(r"^[A-Z][a-z]+\s+[A-Z]", after_over):
            market = re.search(r"-\s*(\w+)", desc)
            desc = f"{name} Over {market.group(1)}" if market else f"{name} Over"

    lead = re.match(r"^([A-Za-z' .-]+?)(?:\s|,)", desc)
    if lead:
        name = lead.group(1).strip()
        if name:
            name_re = re.compile(re.escape(name), re.I)
            parts = name_re.split(desc)
            if len(parts) > 2:
                desc = name + " " + " ".join(parts[1:]).strip()

    parts = [part.strip() for part in desc.split(",") if part.strip()]
    if len(parts) >= 2:
        words = " ".join(parts[1:]).split()
        if words:
            words[0] = words[0][:1].upper() + words[0][1:].lower()
        return f"{parts[0]} {' '.join(words)}"
    return desc


_SGP_INCLUDES = re.compile(r"includes:\s*\d+\s+same\s+game\s+parlay", re.I)


def is_sgp_plus_text(text: str | None) -> bool:
    """True for "Same Game Parlay Plus" / "Parlay+" banners or an "Includes: N Same Game Parlay" line."""

    if not text or not text.strip():
        return False
    lowered = text.lower()
    if "same game parlay plus" in lowered or "same game parlay+" in lowered:
        return True
    return "includes:" in lowered and bool(_SGP_INCLUDES.search(lowered))


_LEG_STAT = re.compile(r"\b(To Record|To Score|Made Threes)\b", re.I)


def clean_parlay_leg_text(leg: str) -> str:
    """Trim one flattened parlay leg to ``"<Name> To Record ..."``.

    Keeps at most three name tokens before the stat phrase and drops team
    words glued in front of the player.
    """

    normalized = strip_date_time_noise(normalize_spaces(leg))
    normalized = re.sub(r"Finished\s*", " ", normalized, flags=re.I)
    normalized = re.sub(r"\b\d{6,}\b", " ", normalized)

    stat = _LEG_STAT.search(normalized)
    if stat and stat.start() > 0:
        before = normalized[: stat.start()].split()
        tokens = before[-3:]
        while tokens and tokens[0].lower() in TEAM_TOKENS:
            tokens = tokens[1:]
        name = " ".join(tokens) or (before[-1] if before else "")
        normalized = f"{name} {normalized[stat.start():].strip()}"
    return normalize_spaces(normalized)
