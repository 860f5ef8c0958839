"""Ledger models: the Bet/BetLeg wire contract plus transient parse records."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field, model_serializer
from pydantic.alias_generators import to_camel

OverUnder = Literal["Over", "Under"]


class BetType(str, Enum):
    SINGLE = "single"
    PARLAY = "parlay"
    SGP = "sgp"
    SGP_PLUS = "sgp_plus"

    @property
    def is_multi_leg(self) -> bool:
        return self is not BetType.SINGLE


class BetResult(str, Enum):
    WIN = "win"
    LOSS = "loss"
    PUSH = "push"
    PENDING = "pending"


class LegResult(str, Enum):
    WIN = "WIN"
    LOSS = "LOSS"
    PUSH = "PUSH"
    PENDING = "PENDING"
    VOID = "VOID"
    UNKNOWN = "UNKNOWN"


class MarketCategory(str, Enum):
    PROPS = "Props"
    MAIN_MARKETS = "Main Markets"
    PARLAYS = "Parlays"
    FUTURES = "Futures"


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Optional fields are omitted from the wire form instead of emitted as null.
    _always_emit: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _omit_absent(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        keep = self._always_emit
        return {key: value for key, value in data.items() if value is not None or key in keep}


class BetLeg(_WireModel):
    """One selection; group legs carry a nested SGP as ``children``."""

    _always_emit: ClassVar[frozenset[str]] = frozenset({"odds"})

    entities: list[str] | None = None
    market: str = ""
    target: str | None = None
    ou: OverUnder | None = None
    odds: int | None = None
    result: LegResult = LegResult.PENDING
    is_group_leg: bool | None = None
    children: list[BetLeg] | None = None

    @property
    def entity(self) -> str:
        return self.entities[0] if self.entities else ""


class Bet(_WireModel):
    """One wager ticket as emitted to storage and UI layers."""

    id: str
    book: str
    bet_id: str
    placed_at: str
    settled_at: str | None = None
    bet_type: BetType
    market_category: MarketCategory
    sport: str = ""
    description: str = ""
    name: str | None = None
    odds: int = 0
    stake: float = 0.0
    payout: float = 0.0
    result: BetResult = BetResult.PENDING
    type: str | None = None
    line: str | None = None
    ou: OverUnder | None = None
    legs: list[BetLeg] | None = None
    is_live: bool = False
    raw: str = Field(default="", repr=False)


def bets_to_wire(bets: list[Bet]) -> list[dict[str, Any]]:
    """Serialize bets to the camelCase JSON-ready contract."""

    return [bet.model_dump(mode="json", by_alias=True) for bet in bets]


@dataclass
class HeaderInfo:
    description: str
    raw_text: str
    name: str | None = None
    type: str | None = None
    line: str | None = None
    ou: OverUnder | None = None
    odds: int | None = None
    sport: str = ""
    is_live: bool = False


@dataclass
class FooterMeta:
    bet_id: str | None
    placed_at_raw: str | None
    stake: float | None
    payout: float | None
    has_won_on_fanduel: bool
    raw_text: str
