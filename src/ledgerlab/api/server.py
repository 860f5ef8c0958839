"""FastAPI surface over the FanDuel parser."""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ledgerlab.api.schemas import ParseRequest, ParseResponse
from ledgerlab.errors import ParseError
from ledgerlab.ledger.types import bets_to_wire
from ledgerlab.parsing.fanduel import parse_fanduel

logger = logging.getLogger(__name__)

app = FastAPI(
    title="LedgerLab FanDuel API",
    version="0.1.0",
    description="Turns pasted FanDuel settled-bets HTML into normalized bet records.",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/parse/fanduel", response_model=ParseResponse)
def parse_fanduel_page(payload: ParseRequest) -> ParseResponse:
    try:
        bets = parse_fanduel(payload.html, logger=logger)
    except ParseError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return ParseResponse(count=len(bets), bets=bets_to_wire(bets))
