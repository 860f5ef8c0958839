"""Matchup inference tests."""

from __future__ import annotations

from bs4 import BeautifulSoup

from ledgerlab.parsing import matchups


def test_score_noise_does_not_truncate_team_names() -> None:
    text = "San Francisco 49ers 21 17 Arizona Cardinals"
    assert matchups.clean_matchup_target(text) == "San Francisco 49ers @ Arizona Cardinals"


def test_find_matchup_keeps_digit_led_team_word() -> None:
    found = matchups.find_matchup_in_text("San Francisco 49ers @ Arizona Cardinals")
    assert found == "San Francisco 49ers @ Arizona Cardinals"


def test_find_matchup_strips_trailing_player() -> None:
    assert matchups.find_matchup_in_text("Pistons @ Hawks Cade") == "Pistons @ Hawks"
    assert matchups.find_matchup_in_text("no teams here") is None


def test_infer_matchup_from_teams_reading_order() -> None:
    text = "Atlanta Hawks 101 Detroit Pistons 99"
    assert matchups.infer_matchup_from_teams(text) == "Atlanta Hawks @ Detroit Pistons"


def test_infer_matchup_for_entity_uses_window() -> None:
    raw = "Cade Cunningham To Score 25+ Points Detroit Pistons @ Atlanta Hawks"
    assert matchups.infer_matchup_for_entity(raw, "Cade Cunningham") == "Detroit Pistons @ Atlanta Hawks"
    assert matchups.infer_matchup_for_entity(raw, "Somebody Else") is None


def test_extract_game_matchup_from_element() -> None:
    soup = BeautifulSoup("<div><span>Golden State Warriors @ New Orleans Pelicans</span></div>", "lxml")
    assert matchups.extract_game_matchup(soup.div) == "Golden State Warriors @ New Orleans Pelicans"


def test_extract_odds_matchups() -> None:
    mapping = matchups.extract_odds_matchups("Same Game Parlay™ +450 Detroit Pistons @ Atlanta Hawks")
    assert mapping[450] == "Detroit Pistons @ Atlanta Hawks"


def test_shorten_matchup() -> None:
    assert matchups.shorten_matchup("Golden State Warriors @ New Orleans Pelicans") == "Golden State @ New Orleans"
