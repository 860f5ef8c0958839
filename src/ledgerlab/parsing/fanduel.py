"""Public entry point: FanDuel settled-bets HTML to ``Bet`` records."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from bs4 import Tag

from ledgerlab.ledger.types import Bet, BetType, FooterMeta
from ledgerlab.parsing.assembler import CardContext, assemble_bet
from ledgerlab.parsing.dom import NodeSet, parse_document, text_of
from ledgerlab.parsing.header import (
    extract_footer_meta,
    extract_header_info,
    find_header_for_footer,
    infer_bet_type,
    infer_result,
    is_footer,
    parse_placed_at,
)
from ledgerlab.parsing.rows import find_leg_rows
from ledgerlab.parsing.text import is_sgp_plus_text

BET_LIST = "ul.t.h.di"

Logger = logging.Logger | logging.LoggerAdapter


def _bet_cards(html: str | bytes) -> list[Tag]:
    document = parse_document(html)
    container = document.select_one(BET_LIST) or document.select_one("ul")
    return container.select("li") if container is not None else []


def _parse_card(footer: Tag, header: Tag, meta: FooterMeta, now: datetime, log: Logger) -> Bet:
    rows = find_leg_rows(header)
    bet_type = infer_bet_type(header, len(rows))
    if bet_type in (BetType.PARLAY, BetType.SGP_PLUS) and len(rows) == 1 and is_sgp_plus_text(text_of(header)):
        bet_type = BetType.SGP_PLUS

    card = CardContext(
        header=header,
        rows=rows,
        bet_type=bet_type,
        info=extract_header_info(header, bet_type),
        meta=meta,
        result=infer_result(meta.stake, meta.payout, footer, meta.has_won_on_fanduel),
        placed_at=parse_placed_at(meta.placed_at_raw, now),
    )
    log.debug("bet %s: %s with %d leg rows", meta.bet_id, bet_type.value, len(rows))
    return assemble_bet(card, log)


def parse_fanduel(
    html: str | bytes,
    *,
    now: datetime | None = None,
    logger: Logger | None = None,
) -> list[Bet]:
    """Parse a pasted FanDuel "settled bets" page.

    Args:
        html: the page markup. Blank input yields an empty list.
        now: timestamp used when a card's placed-at date cannot be read.
        logger: receives debug traces and data warnings; defaults to this module's logger.

    Raises:
        MalformedHTMLError: when ``html`` is not markup at all.
    """

    log = logger if logger is not None else logging.getLogger(__name__)
    if isinstance(html, (str, bytes)) and not html.strip():
        return []
    now = now or datetime.now(timezone.utc)

    items = _bet_cards(html)
    footers = [item for item in items if is_footer(item)]
    log.debug("found %d bet cards with %d footers", len(items), len(footers))

    bets: list[Bet] = []
    claimed = NodeSet()
    for footer in footers:
        bet_id = None
        try:
            meta = extract_footer_meta(footer)
            bet_id = meta.bet_id
            if not bet_id:
                log.debug("skipping footer without a bet id")
                continue
            header = find_header_for_footer(footer, items, claimed)
            claimed.add(header)
            bets.append(_parse_card(footer, header, meta, now, log))
        except Exception:
            log.exception("failed to parse bet card %s", bet_id or text_of(footer)[:80])
    return bets
