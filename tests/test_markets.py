"""Market classifier tests."""

from __future__ import annotations

from ledgerlab.ledger.types import BetType, MarketCategory
from ledgerlab.parsing import markets


def test_guess_market_from_text() -> None:
    assert markets.guess_market_from_text("Detroit Pistons SPREAD BETTING") == "Spread"
    assert markets.guess_market_from_text("Cade Cunningham 10+ ASSISTS") == "Ast"
    assert markets.guess_market_from_text("Will Richard 3+ MADE THREES") == "3pt"
    assert markets.guess_market_from_text("Jalen Duren to record a triple double") == "TD"
    assert markets.guess_market_from_text("Nothing here") == ""


def test_market_from_stat() -> None:
    assert markets.market_from_stat("Rebounds") == "Reb"
    assert markets.market_from_stat("Yds") == "Yds"
    assert markets.market_from_stat("Blocks") == "Blocks"


def test_infer_market_category() -> None:
    assert markets.infer_market_category(BetType.PARLAY) is MarketCategory.PARLAYS
    assert markets.infer_market_category(BetType.SGP_PLUS, "Pts") is MarketCategory.PARLAYS
    assert markets.infer_market_category(BetType.SINGLE, "Pts") is MarketCategory.PROPS
    assert markets.infer_market_category(BetType.SINGLE, "3pt") is MarketCategory.PROPS
    assert markets.infer_market_category(BetType.SINGLE, "Spread") is MarketCategory.MAIN_MARKETS
    assert markets.infer_market_category(BetType.SINGLE, None, "Cade Cunningham NBA MVP") is MarketCategory.FUTURES


def test_infer_sport() -> None:
    assert markets.infer_sport("", ["Yds"]) == "NFL"
    assert markets.infer_sport("", ["3pt"]) == "NBA"
    assert markets.infer_sport("Detroit Pistons -3.5") == "NBA"
    assert markets.infer_sport("Baltimore Ravens Moneyline") == "NFL"
    assert markets.infer_sport("Something else") == ""
