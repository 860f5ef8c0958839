"""Leg builder tests."""

from __future__ import annotations

from bs4 import BeautifulSoup

from ledgerlab.ledger.types import HeaderInfo, LegResult
from ledgerlab.parsing import legs


def test_parse_leg_from_text_single_prop() -> None:
    leg = legs.parse_leg_from_text("Will Richard 3+ MADE THREES", 360, "win")
    assert leg is not None
    assert leg.entities == ["Will Richard"]
    assert (leg.market, leg.target, leg.odds) == ("3pt", "3+", 360)
    assert leg.result is LegResult.WIN


def test_parse_leg_from_text_skip_odds() -> None:
    leg = legs.parse_leg_from_text("Cade Cunningham To Score 25+ Points +240", None, "loss", skip_odds=True)
    assert leg is not None
    assert leg.odds is None
    assert (leg.market, leg.target) == ("Pts", "25+")


def test_parse_leg_from_text_trailing_void() -> None:
    leg = legs.parse_leg_from_text("Cade Cunningham To Score 25+ Points Void", None, "loss")
    assert leg is not None
    assert leg.result is LegResult.VOID


def test_parse_leg_from_node_reads_odds_and_icon() -> None:
    soup = BeautifulSoup(
        '<div aria-label="Will Richard, 3+ MADE THREES, +360"><span>Will Richard</span> '
        '<span aria-label="Odds +360">+360</span><svg id="tick-circle"></svg></div>',
        "lxml",
    )
    leg = legs.parse_leg_from_node(soup.div, legs.LegOptions(fallback_result=LegResult.LOSS))
    assert leg is not None
    assert leg.entities == ["Will Richard"]
    assert (leg.market, leg.target, leg.odds) == ("3pt", "3+", 360)
    assert leg.result is LegResult.WIN


def test_parse_leg_from_node_skip_odds_suppresses_odds() -> None:
    soup = BeautifulSoup(
        '<div aria-label="Will Richard, 3+ MADE THREES, +360"><span aria-label="Odds +360">+360</span></div>', "lxml"
    )
    leg = legs.parse_leg_from_node(soup.div, legs.LegOptions(skip_odds=True, fallback_odds=-110))
    assert leg is not None
    assert leg.odds is None


def test_scan_stat_text_finds_each_phrase() -> None:
    found = list(legs.scan_stat_text("Jared Goff 250+ Yards Sam LaPorta 6+ Receptions"))
    assert [(match.player, match.target, match.market) for match in found] == [
        ("Jared Goff", "250+", "Yds"),
        ("Sam LaPorta", "6+", "Rec"),
    ]


def test_build_legs_from_stat_text_marks_void() -> None:
    built = legs.build_legs_from_stat_text("Cade Cunningham 25+ Points, Ausar Thompson 2+ Made Threes Void", "win")
    by_entity = {leg.entity: leg for leg in built}
    assert by_entity["Ausar Thompson"].result is LegResult.VOID
    assert by_entity["Cade Cunningham"].result is LegResult.WIN


def test_build_legs_from_description_splits_on_commas() -> None:
    built = legs.build_legs_from_description(
        "Cade Cunningham To Score 25+ Points, Jalen Duren To Record 10+ Rebounds", "pending"
    )
    assert [leg.entity for leg in built] == ["Cade Cunningham", "Jalen Duren"]
    assert [leg.market for leg in built] == ["Pts", "Reb"]


def test_build_primary_leg_from_header() -> None:
    header = HeaderInfo(description="", raw_text="", name="Detroit Pistons", type="Spread", line="-3.5", odds=-110)
    leg = legs.build_primary_leg_from_header(header, "win")
    assert leg.entities == ["Detroit Pistons"]
    assert (leg.market, leg.target, leg.odds, leg.result) == ("Spread", "-3.5", -110, LegResult.WIN)


def test_implausible_spread_line_is_dropped() -> None:
    leg = legs.parse_leg_from_text("Los Angeles Lakers +75.5 Spread", -110, "win")
    assert leg is not None
    assert leg.entities == ["Los Angeles Lakers"]
    assert (leg.market, leg.target) == ("Spread", None)

    soup = BeautifulSoup("<div>Los Angeles Lakers +75.5 Spread</div>", "lxml")
    from_node = legs.parse_leg_from_node(soup.div)
    assert from_node is not None
    assert from_node.entities == ["Los Angeles Lakers"]
    assert (from_node.market, from_node.target) == ("Spread", None)


def test_scan_stat_text_drops_previous_stat_word_from_name() -> None:
    text = "Stephen Curry To Score 25+ Points Zion Williamson To Record 8+ Rebounds"
    found = list(legs.scan_stat_text(text))

    assert [(match.player, match.market, match.target) for match in found] == [
        ("Stephen Curry", "Pts", "25+"),
        ("Zion Williamson", "Reb", "8+"),
        ("Stephen Curry", "Pts", "25+"),
    ]
    assert found[1].full == "Zion Williamson To Record 8+ Rebounds"


def test_scan_stat_text_drops_team_name_glued_to_player() -> None:
    found = list(legs.scan_stat_text("Memphis Grizzlies @ San Antonio Spurs Victor Wembanyama To Score 25+ Points"))
    assert found
    assert {(match.player, match.target) for match in found} == {("Victor Wembanyama", "25+")}


def test_build_legs_from_stat_text_keeps_names_clean() -> None:
    built = legs.build_legs_from_stat_text(
        "Stephen Curry To Score 25+ Points Zion Williamson To Record 8+ Rebounds", "win"
    )
    assert [(leg.entity, leg.market, leg.target) for leg in built] == [
        ("Stephen Curry", "Pts", "25+"),
        ("Zion Williamson", "Reb", "8+"),
    ]
