"""Field extractor tests."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup

from ledgerlab.parsing import extractors


def _node(html: str):
    return BeautifulSoup(html, "lxml").body.contents[0]


def test_parse_american_odds_handles_unicode_minus() -> None:
    assert extractors.parse_american_odds("+360") == 360
    assert extractors.parse_american_odds("−110") == -110
    assert extractors.parse_american_odds("EVEN") is None


def test_parse_money() -> None:
    assert extractors.parse_money("$1,234.50") == 1234.5
    assert extractors.parse_money("$0.00") == 0.0
    assert extractors.parse_money("") is None
    assert extractors.parse_money(None) is None


def test_extract_odds_prefers_labelled_span() -> None:
    row = _node('<div><span>Cade Cunningham</span> <span aria-label="Odds +240">+240</span></div>')
    assert extractors.extract_odds(row) == 240


def test_extract_odds_reads_bare_span_and_free_text() -> None:
    assert extractors.extract_odds(_node("<div><span>Jalen Duren</span><span>-115</span></div>")) == -115
    assert extractors.extract_odds(_node("<div>Moneyline +150 tonight</div>")) == 150
    assert extractors.extract_odds(_node("<div>Cade Cunningham 25+ Points</div>")) is None


def test_derive_fields_total_points() -> None:
    fields = extractors.derive_fields("Over 232.5 Total Points", "Over 232.5 Total Points")
    assert fields.type == "Total"
    assert fields.ou == "Over"
    assert fields.line == "232.5"
    assert fields.name is None


def test_derive_fields_made_threes() -> None:
    fields = extractors.derive_fields("Will Richard 3+ MADE THREES", "Will Richard 3+ MADE THREES")
    assert (fields.name, fields.type, fields.line) == ("Will Richard", "3pt", "3+")


def test_derive_fields_to_score_points() -> None:
    fields = extractors.derive_fields("Cade Cunningham To Score 25+ Points", "")
    assert (fields.name, fields.type, fields.line) == ("Cade Cunningham", "Pts", "25+")


def test_derive_fields_player_over_line() -> None:
    fields = extractors.derive_fields("Onyeka Okongwu Over 8.5 Rebounds", "")
    assert (fields.name, fields.ou, fields.line, fields.type) == ("Onyeka Okongwu", "Over", "8.5", "Reb")


def test_cascade_stage_stops_at_first_rule() -> None:
    stage = extractors.RuleStage(
        "markets",
        (
            extractors.FieldRule("a", re.compile("X"), lambda m, s: s.assign(type="first")),
            extractors.FieldRule("b", re.compile("X"), lambda m, s: s.assign(type="second")),
        ),
    )
    assert extractors.run_cascade((stage,), "X", "").type == "first"


def test_spread_helpers() -> None:
    assert extractors.target_looks_like_odds("+240")
    assert not extractors.target_looks_like_odds("-3.5")
    assert extractors.plausible_spread("Pistons -3.5 -110") == "-3.5"
    assert extractors.plausible_spread("Pistons -110") is None


def test_clean_entity_name() -> None:
    assert extractors.clean_entity_name("Cade Cunningham Nov 16, 7:30pm ET") == "Cade Cunningham"
    assert extractors.clean_entity_name("Cade Cunningham To Score 25+ Points") == "Cade Cunningham"
    assert extractors.clean_entity_name("Detroit Pistons Cade Cunningham") == "Cade Cunningham"
    assert extractors.clean_entity_name("Parlay") == ""
