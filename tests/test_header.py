"""Header and footer card tests."""

from __future__ import annotations

from datetime import datetime, timezone

from bs4 import BeautifulSoup

from ledgerlab.ledger.types import BetResult, BetType
from ledgerlab.parsing import header
from ledgerlab.parsing.dom import NodeSet

NOW = datetime(2025, 11, 20, 12, 0, tzinfo=timezone.utc)


def _li(html: str):
    return BeautifulSoup(f"<ul>{html}</ul>", "lxml").li


def _footer(*pairs: tuple[str, str], bet_id: str = "O/0242888/0027982", placed: str = "11/18/2025 11:09PM ET"):
    amounts = "".join(f"<div><span>{label}</span> <span>{value}</span></div>" for label, value in pairs)
    return _li(f"<li>{amounts}<div><span>BET ID: {bet_id}</span> <span>PLACED: {placed}</span></div></li>")


def test_extract_header_info_total_bet() -> None:
    card = _li('<li><div aria-label="Over 232.5 Total Points"><span>Over 232.5</span> <span>Total Points</span>'
               '</div> <span aria-label="Odds -110">-110</span></li>')
    info = header.extract_header_info(card, BetType.SINGLE)
    assert info.description == "Over 232.5 Total Points"
    assert (info.type, info.ou, info.line, info.odds) == ("Total", "Over", "232.5", -110)


def test_extract_header_info_prop_bet() -> None:
    card = _li('<li><div aria-label="Will Richard, 3+ MADE THREES, +360"><span>Will Richard</span> '
               '<span>3+ MADE THREES</span> <span aria-label="Odds +360">+360</span></div></li>')
    info = header.extract_header_info(card, BetType.SINGLE)
    assert info.description == "Will Richard 3+ MADE THREES"
    assert (info.name, info.type, info.line, info.odds, info.sport) == ("Will Richard", "3pt", "3+", 360, "NBA")
    assert not info.is_live


def test_extract_header_info_live_flag() -> None:
    card = _li('<li><div aria-label="Detroit Pistons, MONEYLINE"><span>Detroit Pistons</span></div>'
               '<span>Live Bet</span></li>')
    assert header.extract_header_info(card).is_live


def test_infer_bet_type() -> None:
    assert header.infer_bet_type(_li("<li><span>2 leg parlay</span></li>"), 2) is BetType.PARLAY
    assert header.infer_bet_type(_li("<li><span>Same Game Parlay Plus</span></li>"), 3) is BetType.SGP_PLUS
    sgp = _li("<li><span>Same Game Parlay</span> <span>Cade Cunningham To Score 25+ Points</span></li>")
    assert header.infer_bet_type(sgp, 2) is BetType.SGP
    assert header.infer_bet_type(_li("<li><span>Will Richard 3+ MADE THREES</span></li>"), 1) is BetType.SINGLE


def test_extract_footer_meta_won() -> None:
    meta = header.extract_footer_meta(_footer(("TOTAL WAGER", "$1.00"), ("WON ON FANDUEL", "$4.60")))
    assert meta.bet_id == "O/0242888/0027982"
    assert meta.placed_at_raw == "11/18/2025 11:09PM ET"
    assert (meta.stake, meta.payout, meta.has_won_on_fanduel) == (1.0, 4.6, True)


def test_extract_footer_meta_returned() -> None:
    meta = header.extract_footer_meta(_footer(("TOTAL WAGER", "$5.00"), ("RETURNED", "$5.00")))
    assert (meta.stake, meta.payout, meta.has_won_on_fanduel) == (5.0, 5.0, False)


def test_extract_labeled_amount_value_before_label() -> None:
    card = _li("<li><div><span>$12.50</span> <span>TOTAL WAGER</span></div></li>")
    assert header.extract_labeled_amount(card, "TOTAL WAGER") == 12.5
    assert header.extract_labeled_amount(card, "RETURNED") is None


def test_infer_result() -> None:
    won = _footer(("TOTAL WAGER", "$1.00"), ("WON ON FANDUEL", "$4.60"))
    assert header.infer_result(1.0, 4.6, won, True) is BetResult.WIN

    returned = _footer(("TOTAL WAGER", "$5.00"), ("RETURNED", "$5.00"))
    assert header.infer_result(5.0, 5.0, returned, False) is BetResult.PUSH

    zero = _footer(("TOTAL WAGER", "$5.00"), ("WON ON FANDUEL", "$0.00"))
    meta = header.extract_footer_meta(zero)
    assert meta.payout is None
    assert header.infer_result(meta.stake, meta.payout, zero, meta.has_won_on_fanduel) is BetResult.LOSS

    open_bet = _footer(("TOTAL WAGER", "$5.00"))
    assert header.infer_result(5.0, None, open_bet, False) is BetResult.PENDING


def test_parse_placed_at() -> None:
    assert header.parse_placed_at("11/18/2025 11:09PM ET", NOW) == "2025-11-18T23:09:00-05:00"
    assert header.parse_placed_at("1/2/2025 12:05 AM ET", NOW) == "2025-01-02T00:05:00-05:00"
    assert header.parse_placed_at("yesterday", NOW) == NOW.isoformat()
    assert header.parse_placed_at(None, NOW) == NOW.isoformat()


def test_find_header_for_footer_pairs_previous_card() -> None:
    soup = BeautifulSoup(
        "<ul><li id='h1'><span>Detroit Pistons MONEYLINE</span></li>"
        "<li id='f1'><span>BET ID: A1</span></li>"
        "<li id='h2'><span>Atlanta Hawks MONEYLINE</span></li>"
        "<li id='f2'><span>BET ID: A2</span></li></ul>",
        "lxml",
    )
    items = soup.select("li")
    claimed = NodeSet()
    first = header.find_header_for_footer(soup.select_one("#f1"), items, claimed)
    claimed.add(first)
    second = header.find_header_for_footer(soup.select_one("#f2"), items, claimed)
    assert (first.get("id"), second.get("id")) == ("h1", "h2")


def test_footer_with_leg_content_is_its_own_header() -> None:
    card = _li('<li><span>2 leg parlay</span> <span>BET ID: A1</span></li>')
    assert header.find_header_for_footer(card, [card], NodeSet()) is card
