"""Field extractors: odds, money, the derive-fields rule cascade and entity cleanup.

Every extractor returns ``None`` (or an empty string) when nothing matches;
missing fields are the normal outcome of heuristics over vendor markup.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field

from bs4 import Tag

from ledgerlab.ledger.types import OverUnder
from ledgerlab.parsing.dom import ODDS_SPAN, ancestors, element_children, raw_text_of
from ledgerlab.parsing.text import normalize_spaces, strip_date_time_noise

# --------------------------------------------------------------------------- odds

_ODDS_EXACT = re.compile(r"^([+\-−]\d{3,})$")
_ODDS_IN_TEXT = re.compile(r"\b([+\-]\d{3,})\b")
_ODDS_FREE_TEXT = (re.compile(r"([+\-]\d{3,})\b"), re.compile(r"\b([+\-]\d{2,})\b"))


def _odds_from_spans(node: Tag) -> str:
    labelled = node.select_one(ODDS_SPAN)
    if labelled is not None:
        text = labelled.get_text().strip()
        if text:
            return text
    for span in node.select("span"):
        match = _ODDS_EXACT.match(span.get_text())
        if match:
            return match.group(1)
    return ""


def _odds_from_siblings(node: Tag) -> str:
    parent = node.parent
    if parent is None:
        return ""
    for sibling in element_children(parent):
        if sibling is node:
            continue
        labelled = sibling.select_one(ODDS_SPAN)
        if labelled is not None and labelled.get_text().strip():
            return labelled.get_text().strip()
        match = _ODDS_IN_TEXT.search(sibling.get_text())
        if match:
            return match.group(1)
    return ""


def _odds_from_free_text(node: Tag) -> str:
    text = raw_text_of(node)
    for pattern in _ODDS_FREE_TEXT:
        match = pattern.search(text)
        if match and int(match.group(1)[1:]) >= 100:
            return match.group(1)
    return ""


def parse_american_odds(text: str) -> int | None:
    cleaned = re.sub(r"[^+\-0-9]", "", text.replace("−", "-"))
    match = re.match(r"[+\-]?\d+", cleaned)
    return int(match.group(0)) if match else None


def extract_odds(root: Tag) -> int | None:
    """American odds for ``root``: labelled span, bare span, ancestors, siblings, free text."""

    text = _odds_from_spans(root)
    if not text:
        for parent in ancestors(root):
            text = _odds_from_spans(parent)
            if text:
                break
    if not text:
        text = _odds_from_siblings(root)
    if not text:
        text = _odds_from_free_text(root)
    if not text:
        return None
    return parse_american_odds(text)


def parse_money(raw: str | None) -> float | None:
    cleaned = re.sub(r"[^0-9.\-]", "", raw or "")
    if not cleaned:
        return None
    match = re.match(r"-?(?:\d+\.?\d*|\.\d+)", cleaned)
    return float(match.group(0)) if match else None


# ------------------------------------------------------------------ derive fields

_NUM = r"\d+(?:\.\d+)?"
_NAME = r"[A-Za-z' .-]"


@dataclass
class DerivedFields:
    name: str | None = None
    type: str | None = None
    line: str | None = None
    ou: OverUnder | None = None


@dataclass
class CascadeState:
    desc: str
    raw: str
    fields: DerivedFields = field(default_factory=DerivedFields)
    ou_leading: bool = False

    def source(self, key: str) -> str:
        if key == "raw":
            return self.raw
        if key == "combined":
            return f"{self.desc} {self.raw}"
        return self.desc

    def assign(self, **values: str | None) -> None:
        for key, value in values.items():
            setattr(self.fields, key, value)

    def fill(self, **values: str | None) -> None:
        for key, value in values.items():
            if not getattr(self.fields, key):
                setattr(self.fields, key, value)


Apply = Callable[[re.Match[str], CascadeState], None]
Guard = Callable[[CascadeState], bool]


@dataclass(frozen=True)
class FieldRule:
    """One pattern plus the field setter that runs when it matches."""

    label: str
    pattern: re.Pattern[str]
    apply: Apply
    source: str = "desc"
    when: Guard | None = None


@dataclass(frozen=True)
class RuleStage:
    label: str
    rules: tuple[FieldRule, ...]
    guard: Guard = lambda state: True
    exhaustive: bool = False


def _rule(label: str, pattern: str, apply: Apply, *, source: str = "desc", when: Guard | None = None) -> FieldRule:
    return FieldRule(label, re.compile(pattern, re.I), apply, source, when)


def _ou(word: str) -> OverUnder:
    return "Over" if word.lower() == "over" else "Under"


def _set_type(market: str) -> Apply:
    return lambda m, s: s.assign(type=market)


def _name_and_type(market: str) -> Apply:
    return lambda m, s: s.assign(name=m.group(1).strip(), type=market)


def _name_line_type(market: str) -> Apply:
    return lambda m, s: s.assign(name=m.group(1).strip(), line=f"{m.group(2)}+", type=market)


def _ou_leading(m: re.Match[str], s: CascadeState) -> None:
    s.ou_leading = True
    s.assign(ou=_ou(m.group(1)), line=m.group(2), name=None)


def _made_threes_prefix(m: re.Match[str], s: CascadeState) -> None:
    s.assign(name=m.group(1).strip())
    line = re.search(r"(\d+)\+", s.desc)
    if line:
        s.assign(line=f"{line.group(1)}+")


def _leading_words(m: re.Match[str], s: CascadeState) -> None:
    words: list[str] = []
    for word in s.desc.split()[:3]:
        if word[:1].isdigit():
            break
        words.append(word)
    if words:
        s.assign(name=" ".join(words))


def _spread_line(m: re.Match[str], s: CascadeState) -> None:
    if not (s.fields.name and m.group(1) in s.fields.name):
        s.assign(line=m.group(1))


def _record_line(m: re.Match[str], s: CascadeState) -> None:
    s.assign(line=f"{m.group(1)}+")
    if re.search(r"ASSIST", m.group(2), re.I):
        s.assign(type="Ast")


def _plus_line(market: str | None = None) -> Apply:
    def apply(m: re.Match[str], s: CascadeState) -> None:
        s.assign(line=f"{m.group(1)}+")
        if market:
            s.assign(type=market)

    return apply


def _plus_line_default_type(market: str) -> Apply:
    def apply(m: re.Match[str], s: CascadeState) -> None:
        s.assign(line=f"{m.group(1)}+")
        s.fill(type=market)

    return apply


def _ou_line(word: OverUnder) -> Apply:
    def apply(m: re.Match[str], s: CascadeState) -> None:
        s.fill(ou=word, line=m.group(1))

    return apply


def _total_from_raw(m: re.Match[str], s: CascadeState) -> None:
    s.fill(ou=_ou(m.group(1)), line=m.group(2))


_PROP_WORDS = re.compile(r"POINTS|REBOUNDS|ASSISTS|MADE THREES|THREES", re.I)

FIELD_RULES: tuple[RuleStage, ...] = (
    RuleStage(
        "named markets",
        (
            _rule("triple double", rf"^({_NAME}+?)\s+To\s+RECORD\s+A\s+TRIPLE\s+DOUBLE", _name_and_type("TD")),
            _rule("top scorer", rf"^({_NAME}+?)\s+Top\s+POINTS?\s+SCORER", _name_and_type("Top Pts")),
            _rule("first basket", rf"^({_NAME}+?)\s+First\s+BASKET", _name_and_type("FB")),
            _rule(
                "to record assists",
                rf"^({_NAME}+?)\s+To\s+Record\s+({_NUM})\+\s+Assists",
                _name_line_type("Ast"),
                when=lambda s: not s.fields.name,
            ),
            _rule(
                "to score points",
                rf"^({_NAME}+?)\s+To\s+Score\s+({_NUM})\+\s+Points",
                _name_line_type("Pts"),
                when=lambda s: not s.fields.name,
            ),
            _rule("leading over/under", rf"^(Over|Under)\s+({_NUM})", _ou_leading),
        ),
        exhaustive=True,
    ),
    RuleStage(
        "subject",
        (
            _rule("comma", r"^([^,]+),", lambda m, s: s.assign(name=m.group(1).strip())),
            _rule(
                "name over/under line",
                rf"^({_NAME}+)\s+(Over|Under)\s+({_NUM})",
                lambda m, s: s.assign(name=m.group(1).strip(), ou=_ou(m.group(2)), line=m.group(3)),
            ),
            _rule(
                "name over/under",
                rf"^({_NAME}+)\s+(Over|Under)\b",
                lambda m, s: s.assign(name=m.group(1).strip(), ou=_ou(m.group(2))),
            ),
            _rule(
                "name spread",
                rf"^({_NAME}+)\s*([+\-]{_NUM})\b",
                lambda m, s: s.assign(name=m.group(1).strip(), line=m.group(2)),
            ),
            _rule("made threes prefix", rf"^Made\s+Threes\s+({_NAME}+)", _made_threes_prefix),
            _rule(
                "name made threes",
                rf"^({_NAME}+?)\s+(\d+)\+\s+(MADE THREES|THREES|3PT)",
                lambda m, s: s.assign(name=m.group(1).strip(), line=f"{m.group(2)}+"),
            ),
            _rule(
                "name points",
                rf"^({_NAME}+?)\s+(\d+)\+\s+(POINTS|TO SCORE)",
                lambda m, s: s.assign(name=m.group(1).strip(), line=f"{m.group(2)}+"),
            ),
            _rule(
                "name stat line",
                rf"^({_NAME}+?)\s+(\d+)\+\s+"
                r"(Yards|Yds|Receptions|Rec|Points|Pts|Rebounds|Reb|Assists|Ast|Made\s+Threes|3pt|Threes)",
                lambda m, s: s.assign(name=m.group(1).strip(), line=f"{m.group(2)}+"),
            ),
            _rule(
                "name before market",
                rf"^({_NAME}+?)(?:\s+(?:Under|Over|To|Top|First|TO SCORE|MONEYLINE|SPREAD|MADE THREES|"
                r"THREES|3PT|POINTS|REBOUNDS|ASSISTS|TRIPLE DOUBLE|TOP POINTS|FIRST BASKET))",
                lambda m, s: s.assign(name=m.group(1).strip()),
            ),
            _rule("leading words", r"^\S+\s+\S", _leading_words),
        ),
        guard=lambda s: not s.fields.name and not s.ou_leading,
    ),
    RuleStage(
        "over/under line",
        (
            _rule("over", rf"\bOver\s+({_NUM})\b", _ou_line("Over")),
            _rule("under", rf"\bUnder\s+({_NUM})\b", _ou_line("Under")),
        ),
        guard=lambda s: (not s.fields.ou or not s.fields.line) and not s.ou_leading,
    ),
    RuleStage(
        "over/under line anywhere",
        (
            _rule("over", rf"\bOver\s+({_NUM})", lambda m, s: s.assign(line=m.group(1)), when=lambda s: s.fields.ou == "Over"),
            _rule("under", rf"\bUnder\s+({_NUM})", lambda m, s: s.assign(line=m.group(1)), when=lambda s: s.fields.ou == "Under"),
        ),
        guard=lambda s: bool(s.fields.ou) and not s.fields.line,
    ),
    RuleStage(
        "total from raw text",
        (_rule("total", rf"(Over|Under)\s+({_NUM})", _total_from_raw, source="raw"),),
        guard=lambda s: s.fields.type == "Total" and (not s.fields.line or s.desc.lower().strip() == "total"),
    ),
    RuleStage(
        "spread line",
        (_rule("signed", rf"\b([+\-]{_NUM})\b", _spread_line),),
        guard=lambda s: not s.fields.line,
    ),
    RuleStage(
        "plus lines",
        (
            _rule("to score", r"TO SCORE\s+(\d+)\+\s+POINTS", _plus_line()),
            _rule("made threes", r"(\d+)\+\s+(MADE THREES|THREES|3PT)", _plus_line()),
            _rule("inline stat", r"\b(\d+)\+\s+(MADE THREES|THREES|3PT|POINTS|REBOUNDS|ASSISTS)", _plus_line()),
            _rule("to record", r"TO RECORD\s+(\d+)\+\s+(\w+)", _record_line),
            _rule("assists", r"(\d+)\+\s+ASSISTS", _plus_line("Ast")),
            _rule("stat", r"(\d+)\+\s+(REBOUNDS|POINTS|THREES|MADE THREES)", _plus_line()),
        ),
        guard=lambda s: not s.fields.line,
    ),
    RuleStage(
        "yardage lines",
        (
            _rule("yards", r"(\d+)\+\s+Yards", _plus_line_default_type("Yds")),
            _rule("receptions", r"(\d+)\+\s+Receptions", _plus_line_default_type("Rec")),
            _rule("yds", r"(\d+)\+\s+Yds", _plus_line_default_type("Yds")),
        ),
        guard=lambda s: not s.fields.line,
    ),
    RuleStage(
        "yardage type",
        (
            _rule("yards", r"YARDS|YDS", _set_type("Yds")),
            _rule("receptions", r"RECEPTIONS|REC\b", _set_type("Rec")),
        ),
        guard=lambda s: not s.fields.type,
        exhaustive=True,
    ),
    RuleStage(
        "market type",
        (
            _rule("total", r"TOTAL POINTS|TOTALS|TOTAL\b", _set_type("Total"), source="combined"),
            _rule("moneyline", r"MONEYLINE", _set_type("Moneyline"), source="combined"),
            _rule("spread", r"\bSPREAD\b", _set_type("Spread"), source="combined"),
            _rule(
                "signed line",
                rf"\b[+\-]{_NUM}\b",
                _set_type("Spread"),
                when=lambda s: not _PROP_WORDS.search(s.source("combined")),
            ),
            _rule("first basket", r"FIRST BASKET|FIRST FIELD GOAL|FIRST FG", _set_type("FB"), source="combined"),
            _rule("top scorer", r"TOP SCORER|TOP POINTS|TOP PTS", _set_type("Top Pts"), source="combined"),
            _rule("triple double", r"TRIPLE DOUBLE", _set_type("TD"), source="combined"),
            _rule("double double", r"DOUBLE DOUBLE", _set_type("DD"), source="combined"),
            _rule("assists", r"ASSISTS|TO RECORD.*ASSISTS|\d+\+\s+ASSISTS", _set_type("Ast"), source="combined"),
            _rule("threes", r"MADE THREES|3PT|THREE POINT|THREES|MADE 3", _set_type("3pt"), source="combined"),
            _rule("three", r"MADE THREES|3PT|THREE", _set_type("3pt")),
            _rule("points", r"POINTS", _set_type("Pts"), source="combined"),
            _rule("rebounds", r"REBOUNDS", _set_type("Reb"), source="combined"),
            _rule("yards", r"YARDS|YDS", _set_type("Yds"), source="combined"),
            _rule("receptions", r"RECEPTIONS|REC\b", _set_type("Rec"), source="combined"),
        ),
    ),
)


def run_cascade(stages: tuple[RuleStage, ...], description: str, raw_text: str) -> DerivedFields:
    """Evaluate rule stages in order; a stage stops at its first matching rule unless exhaustive."""

    state = CascadeState(desc=description.strip(), raw=raw_text)
    for stage in stages:
        if not stage.guard(state):
            continue
        for rule in stage.rules:
            if rule.when is not None and not rule.when(state):
                continue
            match = rule.pattern.search(state.source(rule.source))
            if match is None:
                continue
            rule.apply(match, state)
            if not stage.exhaustive:
                break
    fields_ = state.fields
    if fields_.name and fields_.name.lower() in ("over", "under"):
        fields_.name = None
    return fields_


def derive_fields(description: str, raw_text: str) -> DerivedFields:
    """Name, market type, line and over/under from a selection description."""

    return run_cascade(FIELD_RULES, description, raw_text)


# --------------------------------------------------------------- targets & names

_SPREAD_TARGET = re.compile(
    r"\b([+\-]\d+(?:\.\d+)?)(?=(?:\s+[+\-]?\d{2,4})?\s*(?:SPREAD\b|SPREAD BETTING\b|$))", re.I
)
_ODDS_LIKE_TARGET = (
    re.compile(r"^[+\-]?\d{3,}$"),
    re.compile(r"^[+\-]1[0-9]{2,}$"),
    re.compile(r"^[+\-][2-9]\d{2,}$"),
)
_SIGNED_NUMBER = re.compile(r"[+\-]\d+(?:\.\d+)?")
MAX_SPREAD = 60.0


def extract_spread_target(text: str) -> str | None:
    match = _SPREAD_TARGET.search(text)
    return match.group(1) if match else None


def target_looks_like_odds(target: str | None) -> bool:
    if not target:
        return False
    compact = re.sub(r"\s+", "", target)
    return any(pattern.match(compact) for pattern in _ODDS_LIKE_TARGET)


def plausible_spread(text: str) -> str | None:
    """First signed number in ``text`` when it is small enough to be a spread."""

    match = _SIGNED_NUMBER.search(text)
    if match and abs(float(match.group(0))) <= MAX_SPREAD:
        return match.group(0)
    return None


def strip_target_from_name(name: str, target: str | None) -> str:
    if not target:
        return name
    return re.sub(rf"\s*{re.escape(target)}\s*$", "", name).strip()


_STAT_WORDS = r"Yards|Yds|Receptions|Rec|Points|Pts|Rebounds|Reb|Assists|Ast|Made\s+Threes|3pt|Threes"
_COMMA_TAIL = re.compile(rf"^([^,]+?)(?:\s+\d+\+\s*(?:{_STAT_WORDS}))?\s*,\s*", re.I)
_DESCRIPTIVE_TAIL = re.compile(
    r"alt\s+(receiving|rushing|yards|receptions)|[+\-]\d{3,}|@|et\b|nov|dec|jan|feb|mar|apr|may|jun|jul|aug|sep|oct",
    re.I,
)
GENERIC_ENTITY_WORDS = frozenset(
    {"made", "yards", "receptions", "available same game", "same game", "parlay", "parlay™"}
)
_ENTITY_SCRUBS = tuple(
    re.compile(pattern, re.I)
    for pattern in (
        r"^parlay™\s*",
        r"^parlay\s*",
        r"^same\s+game\s*",
        r"^play[-\s]*",
        r"^plus available[-\s]*",
        r"^includes[-\s]*",
        r"^available\s+same\s+game\s*",
        r"^made\s+threes\s+",
        r"^made\s+three\s+",
        r"^to\s+record\s+",
        r"^to\s+score\s+",
        r"^to\s+record\s+a\s+",
        r"\s+Top\s*$",
        r"\s+First\s*$",
        r"\.?To\s+(Record|Score).*$",
        r"\.?To\s*$",
        r"\s+Triple\s+Double\s*$",
        r"^Triple\s+Double\s+",
        rf"\s+\d+\+\s*({_STAT_WORDS})\s*$",
        r"\s*-\s*Alt\s+(Receiving|Rushing)\s+(Yds|Yards|Receptions|Rec)\s*$",
        r"^Alt\s+(Receiving|Rushing)\s+(Yds|Yards|Receptions|Rec)\s+",
        r"^Alt\s+(Receptions|Receiving|Rushing)\s+",
        r"^Points\s+Void\s+",
        r"^Void\s+",
        r"^(Cleveland\s+Browns|Denver\s+Broncos|Los\s+Angeles\s+Rams|Arizona\s+Cardinals|"
        r"San\s+Francisco\s+49ers|Seattle\s+Seahawks|Baltimore\s+Ravens)\s+",
        r"^(Detroit\s+Pistons|Atlanta\s+Hawks|Orlando\s+Magic|Phoenix\s+Suns|Portland\s+Trail\s+Blazers|"
        r"Utah\s+Jazz|Los\s+Angeles\s+Lakers|Golden\s+State\s+Warriors|New\s+Orleans\s+Pelicans|Chicago\s+Bulls)\s+",
        r"\d+\+\s*Made.*$",
        r"\d+\+\s*$",
        r"\s*[+\-]\d{2,}.*$",
        r"\s*[+\-]?\d+(?:\.\d+)?\s*(?:Spread)?$",
        r"\s*[+\-]\s*$",
    )
)


def clean_entity_name(raw: str | None) -> str:
    """Reduce a noisy subject string to the player or team name."""

    if not raw:
        return ""
    cleaned = strip_date_time_noise(normalize_spaces(raw))

    comma = _COMMA_TAIL.match(cleaned)
    if comma and _DESCRIPTIVE_TAIL.search(cleaned[comma.end():]):
        cleaned = comma.group(1).strip()

    if cleaned.lower() in GENERIC_ENTITY_WORDS:
        return ""

    for pattern in _ENTITY_SCRUBS:
        cleaned = pattern.sub("", cleaned, count=1)

    words = cleaned.split()
    if len(words) >= 4 and " ".join(words[:2]).lower() == " ".join(words[-2:]).lower():
        cleaned = " ".join(words[:2])
    return cleaned.strip()
