"""Leg row locator tests."""

from __future__ import annotations

from bs4 import BeautifulSoup

from ledgerlab.parsing import rows

SGP_CARD = """
<li>
  <div id="sgp">
    <span>Detroit Pistons @ Atlanta Hawks</span>
    <span>Same Game Parlay</span> <span aria-label="Odds +450">+450</span>
    <div class="leg" aria-label="Cade Cunningham To Score 25+ Points">
      <span>Cade Cunningham To Score 25+ Points</span>
    </div>
    <div class="leg" aria-label="Jalen Duren To Record 10+ Rebounds">
      <span>Jalen Duren To Record 10+ Rebounds</span>
    </div>
  </div>
</li>
"""

PARLAY_CARD = """
<li>
  <div id="ticket">
    <span>2 leg parlay</span> <span aria-label="Odds +260">+260</span>
    <div aria-label="Detroit Pistons -3.5, Spread Betting, -110">
      <span>Detroit Pistons -3.5</span> <span>Spread Betting</span> <span aria-label="Odds -110">-110</span>
    </div>
    <div aria-label="Atlanta Hawks, Moneyline, +150">
      <span>Atlanta Hawks</span> <span>Moneyline</span> <span aria-label="Odds +150">+150</span>
    </div>
  </div>
</li>
"""

NESTED_SGP = """
<div id="outer">
  <span>Same Game Parlay</span> <span aria-label="Odds +500">+500</span>
  <div class="leg-row">Stephen Curry To Score 25+ Points</div>
  <div id="inner">
    <span>Same Game Parlay</span> <span aria-label="Odds +300">+300</span>
    <div class="leg-row">Zion Williamson To Record 8+ Rebounds</div>
  </div>
</div>
"""


def _labels(nodes) -> list[str]:
    return [node.get("aria-label") or node.get_text(strip=True) for node in nodes]


def test_container_is_never_its_own_row() -> None:
    soup = BeautifulSoup(SGP_CARD, "lxml")
    found = rows.find_leg_rows_within(soup.select_one("#sgp"))

    assert all(node.get("id") != "sgp" for node in found)
    assert _labels(found) == ["Cade Cunningham To Score 25+ Points", "Jalen Duren To Record 10+ Rebounds"]


def test_card_rows_skip_the_sgp_wrapper() -> None:
    soup = BeautifulSoup(SGP_CARD, "lxml")
    found = rows.find_leg_rows(soup.li)
    assert _labels(found) == ["Cade Cunningham To Score 25+ Points", "Jalen Duren To Record 10+ Rebounds"]


def test_parlay_banner_wrapper_is_not_a_row() -> None:
    soup = BeautifulSoup(PARLAY_CARD, "lxml")
    found = rows.find_leg_rows(soup.li)

    assert all(node.get("id") != "ticket" for node in found)
    assert _labels(found) == ["Detroit Pistons -3.5, Spread Betting, -110", "Atlanta Hawks, Moneyline, +150"]


def test_nested_sgp_rows_stay_with_their_own_block() -> None:
    soup = BeautifulSoup(NESTED_SGP, "lxml")
    found = rows.find_leg_rows_within(soup.select_one("#outer"))
    assert _labels(found) == ["Stephen Curry To Score 25+ Points"]
