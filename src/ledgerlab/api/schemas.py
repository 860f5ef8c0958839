"""Pydantic schemas for the LedgerLab API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ParseRequest(BaseModel):
    html: str = Field(description="Markup of a FanDuel settled-bets page.")


class ParseResponse(BaseModel):
    count: int
    bets: list[dict[str, Any]]
