"""Dedup and noise filter tests."""

from __future__ import annotations

from ledgerlab.ledger.types import BetLeg
from ledgerlab.parsing import filters


def _leg(entity: str, market: str = "Pts", target: str | None = "25+", odds: int | None = None) -> BetLeg:
    return BetLeg(entities=[entity] if entity else None, market=market, target=target, odds=odds)


def test_dedupe_keeps_first_and_backfills_odds() -> None:
    legs = [_leg("Cade Cunningham"), _leg("cade cunningham", odds=-110), _leg("Jalen Duren", "Reb", "10+")]
    deduped = filters.dedupe_legs(legs)
    assert [leg.entity for leg in deduped] == ["Cade Cunningham", "Jalen Duren"]
    assert deduped[0].odds == -110


def test_dedupe_keeps_distinct_targets() -> None:
    legs = [_leg("Cade Cunningham", target="25+"), _leg("Cade Cunningham", target="30+")]
    assert len(filters.dedupe_legs(legs)) == 2


def test_is_meaningful_rejects_promotional_noise() -> None:
    assert filters.is_meaningful(_leg("Cade Cunningham"))
    assert not filters.is_meaningful(_leg(""))
    assert not filters.is_meaningful(_leg("Parlay"))
    assert not filters.is_meaningful(_leg("Made Threes", market="3pt"))
    assert not filters.is_meaningful(_leg("Detroit Pistons", market="Pts"))
    assert not filters.is_meaningful(_leg("Cade Cunningham", target="Pistons @ Hawks"))
    assert not filters.is_meaningful(_leg("Detroit Pistons", market="Other", target="+240"))


def test_missing_odds_leg_is_still_meaningful() -> None:
    assert filters.is_meaningful(_leg("Jalen Duren", "Reb", "10+", odds=None))


def test_drop_generic_duplicate_legs() -> None:
    legs = [_leg("Cade Cunningham"), _leg("Cade Cunningham", market="Other")]
    assert [leg.market for leg in filters.drop_generic_duplicate_legs(legs)] == ["Pts"]


def test_loose_key_matching_treats_empty_target_as_wildcard() -> None:
    keys = filters.loose_key_set([_leg("Cade Cunningham", target="25+")])
    assert filters.leg_matches_key_set(_leg("Cade Cunningham", target=None), keys)
    assert filters.leg_matches_key_set(_leg("Cade Cunningham", target="25+"), keys)
    assert not filters.leg_matches_key_set(_leg("Cade Cunningham", target="30+"), keys)


def test_looks_like_matchup() -> None:
    assert filters.looks_like_matchup("Pistons @ Hawks")
    assert filters.looks_like_matchup("Pistons vs Hawks")
    assert not filters.looks_like_matchup("25+")
    assert not filters.looks_like_matchup(None)


def test_bare_market_word_is_not_an_entity() -> None:
    assert not filters.is_meaningful(_leg("Moneyline", market="Moneyline", target=None))
    assert not filters.is_meaningful(_leg("Spread", market="Spread", target="-3.5"))
    assert filters.is_meaningful(_leg("Atlanta Hawks", market="Moneyline", target=None))
