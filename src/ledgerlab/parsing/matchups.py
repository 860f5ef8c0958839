"""Game matchup inference (``"Team @ Team"``) from noisy card text."""

from __future__ import annotations

import re

from bs4 import Tag

from ledgerlab.config import get_settings
from ledgerlab.parsing.dom import aria_of, text_of
from ledgerlab.parsing.text import normalize_spaces, strip_scoreboard_text

KNOWN_TEAMS = (
    "Chicago Bulls", "Utah Jazz", "Golden State Warriors", "New Orleans Pelicans", "Atlanta Hawks",
    "Phoenix Suns", "Portland Trail Blazers", "Detroit Pistons", "Orlando Magic", "Los Angeles Lakers",
    "Seattle Seahawks", "Los Angeles Rams", "San Francisco 49ers", "Arizona Cardinals",
    "Kansas City Chiefs", "Denver Broncos", "Baltimore Ravens", "Cleveland Browns", "Dallas Mavericks",
    "Memphis Grizzlies", "Boston Celtics",
)

TEAM_NICKNAMES = frozenset(
    {
        # NFL
        "ravens", "browns", "chiefs", "broncos", "seahawks", "rams", "cardinals", "49ers", "niners",
        "bills", "dolphins", "patriots", "jets", "steelers", "bengals", "cowboys", "eagles", "giants",
        "commanders", "bears", "lions", "packers", "vikings", "falcons", "panthers", "saints",
        "buccaneers", "colts", "texans", "jaguars", "titans", "raiders", "chargers",
        # NBA
        "hawks", "celtics", "nets", "hornets", "bulls", "cavaliers", "mavericks", "nuggets", "pistons",
        "warriors", "rockets", "pacers", "clippers", "lakers", "grizzlies", "heat", "bucks",
        "timberwolves", "pelicans", "knicks", "thunder", "magic", "sixers", "76ers", "suns", "blazers",
        "kings", "spurs", "raptors", "jazz", "wizards",
    }
)

# City-only forms used in ticket descriptions.
TEAM_SHORT_NAMES = {
    "Golden State Warriors": "Golden State",
    "New Orleans Pelicans": "New Orleans",
    "Detroit Pistons": "Detroit",
    "Los Angeles Lakers": "Lakers",
    "Los Angeles Clippers": "Clippers",
    "Portland Trail Blazers": "Portland",
    "Orlando Magic": "Orlando",
    "San Francisco 49ers": "San Francisco",
    "Kansas City Chiefs": "Kansas City",
    "Denver Broncos": "Denver",
    "Baltimore Ravens": "Baltimore",
    "Cleveland Browns": "Cleveland",
    "Arizona Cardinals": "Arizona",
    "Dallas Mavericks": "Dallas",
}

# Team words may lead with digits: 49ers, 76ers.
_TEAM_WORD = r"(?:[A-Z][A-Za-z']+|\d+[A-Za-z]+)"
_TEAM = rf"{_TEAM_WORD}(?:\s+{_TEAM_WORD}){{0,2}}"
_AT_PATTERN = re.compile(rf"({_TEAM})\s+@\s+({_TEAM})")
_VS_PATTERN = re.compile(rf"({_TEAM})\s+vs\.?\s+({_TEAM})", re.I)
_SCORE_PATTERN = re.compile(rf"({_TEAM})\s+\d{{2,}}(?:\s+\d{{2,}})*\s+({_TEAM})")
_STAT_WORDS = re.compile(r"Rebounds|Record|Assists|Points|Made", re.I)
_SIDES = re.compile(r"\s+@\s+|\s+vs\.?\s+", re.I)
_LEADING_NOISE = re.compile(r"^(Same Game Parlay|Parlay|Threes|Made Threes|Double|TD)\s+", re.I)
_MIN_TEAM_LENGTH = 4

_TEAM_TEXT = r"[A-Za-z][A-Za-z0-9'\s]+"
_SGP_ODDS_MATCHUP = re.compile(rf"Same Game Parlay™\s*\+?(-?\d+)\s+({_TEAM_TEXT}@\s+{_TEAM_TEXT})", re.I)
_ODDS_MATCHUP = re.compile(rf"([+\-]?\d{{2,5}})[^\n]{{0,60}}?({_TEAM_TEXT}@\s+{_TEAM_TEXT})", re.I)


def infer_matchup_from_teams(text: str | None) -> str | None:
    """First two distinct known team names in reading order, joined with ``@``."""

    if not text:
        return None
    lowered = text.lower()
    hits = sorted(
        (index, name) for name in KNOWN_TEAMS if (index := lowered.find(name.lower())) != -1
    )
    names: list[str] = []
    for _, name in hits:
        if name not in names:
            names.append(name)
        if len(names) == 2:
            return f"{names[0]} @ {names[1]}"
    return None


def strip_trailing_player_name(matchup: str) -> str:
    """Cut anything after the last team nickname on the away side."""

    parts = _SIDES.split(matchup)
    if len(parts) != 2:
        return matchup
    separator = " @ " if "@" in matchup else " vs "
    home, away = parts[0].strip(), parts[1].strip()
    words = away.split()
    for index in range(len(words) - 1, -1, -1):
        if words[index].lower() in TEAM_NICKNAMES:
            away = " ".join(words[: index + 1])
            break
    return f"{home}{separator}{away}"


def _plausible_sides(candidate: str) -> bool:
    sides = _SIDES.split(candidate)
    return all(len(side.strip()) >= _MIN_TEAM_LENGTH for side in sides)


def find_matchup_in_text(text: str | None) -> str | None:
    """Shortest ``Team @ Team`` (then ``Team vs Team``) candidate in ``text``."""

    if not text:
        return None
    cleaned = strip_scoreboard_text(re.sub(r"Finished", " ", text, flags=re.I))
    for pattern, separator in ((_AT_PATTERN, "@"), (_VS_PATTERN, "vs")):
        best: str | None = None
        for match in pattern.finditer(cleaned):
            candidate = normalize_spaces(f"{match.group(1)} {separator} {match.group(2)}")
            if _STAT_WORDS.search(candidate):
                continue
            candidate = strip_trailing_player_name(candidate)
            if not _plausible_sides(candidate):
                continue
            if best is None or len(candidate) < len(best):
                best = candidate
        if best:
            return best
    return None


def _valid_team(name: str) -> bool:
    if re.search(r"finished|box\s*score|play.by.play", name, re.I):
        return False
    words = name.split()
    if len(words) == 2 and words[-1].lower() not in TEAM_NICKNAMES:
        return False
    return True


def clean_matchup_target(text: str | None) -> str | None:
    """Direct matchup, then known team names, then a validated ``Team 21 17 Team`` score line."""

    if not text:
        return None
    normalized = _LEADING_NOISE.sub("", normalize_spaces(text))

    direct = find_matchup_in_text(normalized)
    if direct:
        return normalize_spaces(direct)
    from_teams = infer_matchup_from_teams(normalized)
    if from_teams:
        return from_teams

    score = _SCORE_PATTERN.search(normalized)
    if score:
        home, away = normalize_spaces(score.group(1)), normalize_spaces(score.group(2))
        if _valid_team(home) and _valid_team(away):
            return f"{home} @ {away}"
    return None


def extract_game_matchup(element: Tag) -> str | None:
    for candidate in [element, *element.select("span, div")]:
        combined = f"{text_of(candidate)} {aria_of(candidate)}".strip()
        if not combined:
            continue
        matchup = find_matchup_in_text(combined)
        if matchup:
            return matchup
    return None


def extract_odds_matchups(text: str) -> dict[int, str]:
    """Map each combined SGP odds figure in the card text to the matchup printed after it."""

    mapping: dict[int, str] = {}
    if not text:
        return mapping
    normalized = normalize_spaces(text)
    for pattern, overwrite in ((_SGP_ODDS_MATCHUP, True), (_ODDS_MATCHUP, False)):
        for match in pattern.finditer(normalized):
            odds = int(match.group(1))
            if not overwrite and odds in mapping:
                continue
            matchup = normalize_spaces(match.group(2))
            mapping[odds] = infer_matchup_from_teams(matchup) or strip_trailing_player_name(matchup)
    return mapping


def infer_matchup_for_entity(raw_text: str, entity: str | None) -> str | None:
    """Matchup printed near the first mention of ``entity``."""

    if not raw_text or not entity:
        return None
    index = raw_text.lower().find(entity.lower())
    if index == -1:
        return None
    settings = get_settings()
    window = raw_text[max(0, index - settings.matchup_window_before): index + settings.matchup_window_after]
    matchup = clean_matchup_target(window) or find_matchup_in_text(window)
    return normalize_spaces(matchup) if matchup else None


def shorten_matchup(matchup: str) -> str:
    shortened = matchup
    for full, short in TEAM_SHORT_NAMES.items():
        shortened = re.sub(re.escape(full), short, shortened, flags=re.I)
    return shortened
