"""SGP group builder tests."""

from __future__ import annotations

from bs4 import BeautifulSoup

from ledgerlab.ledger.types import LegResult
from ledgerlab.parsing import groups

SGP_CARD = """
<li id="card">
  <div id="sgp">
    <span>Detroit Pistons @ Atlanta Hawks</span>
    <span>Same Game Parlay</span> <span aria-label="Odds +450">+450</span>
    <div class="leg" aria-label="Cade Cunningham To Score 25+ Points">
      <span>Cade Cunningham To Score 25+ Points</span><svg id="tick-circle"></svg>
    </div>
    <div class="leg" aria-label="Jalen Duren To Record 10+ Rebounds">
      <span>Jalen Duren To Record 10+ Rebounds</span> <svg id="warning-icon"></svg> Void
    </div>
  </div>
</li>
"""

SGP_PLUS_CARD = """
<li>
  <div id="outer">
    <span>Includes: 2 Same Game Parlay</span>
    <div id="first"><span>Same Game Parlay</span> <span aria-label="Odds +450">+450</span>
      <div aria-label="Cade Cunningham To Score 25+ Points"><span>Cade Cunningham To Score 25+ Points</span></div></div>
    <div id="second"><span>Same Game Parlay</span> <span aria-label="Odds +600">+600</span>
      <div aria-label="Stephen Curry To Score 30+ Points"><span>Stephen Curry To Score 30+ Points</span></div></div>
  </div>
</li>
"""


def test_void_leg_pushes_its_group() -> None:
    soup = BeautifulSoup(SGP_CARD, "lxml")
    container = soup.select_one("#sgp")
    group = groups.build_group_leg(container, soup.select("div.leg"), "loss")

    assert group is not None
    assert group.is_group_leg
    assert group.market == groups.SGP_MARKET
    assert group.odds == 450
    assert group.target == "Detroit Pistons @ Atlanta Hawks"
    assert [child.result for child in group.children] == [LegResult.PUSH, LegResult.VOID]
    assert group.result is LegResult.PUSH


def test_group_children_never_carry_odds() -> None:
    soup = BeautifulSoup(SGP_CARD, "lxml")
    group = groups.build_group_leg(soup.select_one("#sgp"), soup.select("div.leg"), "loss")
    assert group is not None
    assert all(child.odds is None for child in group.children)
    assert [child.entity for child in group.children] == ["Cade Cunningham", "Jalen Duren"]


def test_build_group_leg_without_rows() -> None:
    soup = BeautifulSoup(SGP_CARD, "lxml")
    assert groups.build_group_leg(soup.select_one("#sgp"), [], "loss") is None


def test_find_sgp_containers_skips_plus_wrapper() -> None:
    soup = BeautifulSoup(SGP_PLUS_CARD, "lxml")
    found = groups.find_sgp_containers(soup.li)
    assert [div.get("id") for div in found] == ["first", "second"]


def test_banner_div_is_not_a_container() -> None:
    html = """
    <li>
      <div id="sgp">
        <div id="banner"><span>Same Game Parlay</span> <span aria-label="Odds +300">+300</span></div>
        <div aria-label="Stephen Curry To Score 25+ Points"><span>Stephen Curry To Score 25+ Points</span></div>
        <div aria-label="Zion Williamson To Record 8+ Rebounds"><span>Zion Williamson To Record 8+ Rebounds</span></div>
      </div>
    </li>
    """
    soup = BeautifulSoup(html, "lxml")
    assert [div.get("id") for div in groups.find_sgp_containers(soup.li)] == ["sgp"]


def test_containers_without_odds_stay_separate() -> None:
    html = """
    <li>
      <div id="outer">
        <span>Same Game Parlay Plus</span>
        <div id="first" role="button"><span>Same Game Parlay</span>
          <div aria-label="Stephen Curry To Score 25+ Points"><span>Stephen Curry To Score 25+ Points</span></div>
          <div aria-label="Zion Williamson To Record 8+ Rebounds"><span>Zion Williamson To Record 8+ Rebounds</span></div>
        </div>
        <div id="second" role="button"><span>Same Game Parlay</span>
          <div aria-label="Cade Cunningham To Score 30+ Points"><span>Cade Cunningham To Score 30+ Points</span></div>
        </div>
      </div>
    </li>
    """
    soup = BeautifulSoup(html, "lxml")
    stage = groups.build_sgp_plus_group_legs(soup.li, "win")

    assert [[child.entity for child in group.children] for group in stage.groups] == [
        ["Stephen Curry", "Zion Williamson"],
        ["Cade Cunningham"],
    ]
    assert [group.odds for group in stage.groups] == [None, None]


def test_group_matchup_never_borrows_a_sibling_game() -> None:
    html = """
    <li>
      <div id="first"><span>Same Game Parlay</span> <span aria-label="Odds +300">+300</span>
        <div aria-label="Stephen Curry To Score 25+ Points"><span>Stephen Curry To Score 25+ Points</span></div>
      </div>
      <div id="second"><span>Detroit Pistons @ Atlanta Hawks</span>
        <span>Same Game Parlay</span> <span aria-label="Odds +400">+400</span>
        <div aria-label="Cade Cunningham To Score 30+ Points"><span>Cade Cunningham To Score 30+ Points</span></div>
      </div>
    </li>
    """
    soup = BeautifulSoup(html, "lxml")
    stage = groups.build_sgp_plus_group_legs(soup.li, "win")

    assert [(group.odds, group.target) for group in stage.groups] == [
        (300, None),
        (400, "Detroit Pistons @ Atlanta Hawks"),
    ]


def test_cluster_group_leaves_matchup_unset_when_none_is_printed() -> None:
    html = """
    <li>
      <div aria-label="Stephen Curry To Score 25+ Points"><span>Stephen Curry To Score 25+ Points</span>
        <span aria-label="Odds +300">+300</span></div>
      <div aria-label="Zion Williamson To Record 8+ Rebounds"><span>Zion Williamson To Record 8+ Rebounds</span>
        <span aria-label="Odds +300">+300</span></div>
    </li>
    """
    soup = BeautifulSoup(html, "lxml")
    rows = soup.select("li > div")
    stage = groups.cluster_legs_by_odds(rows, soup.li, soup.li.get_text(), "win")

    assert len(stage.groups) == 1
    group = stage.groups[0]
    assert (group.odds, group.target) == (300, None)
    assert [child.entity for child in group.children] == ["Stephen Curry", "Zion Williamson"]
    assert all(child.odds is None for child in group.children)
