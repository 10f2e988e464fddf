"""
Event and market data model consumed by the betting engine.

Odds sources hand the engine a list of :class:`Event` objects; every
scanner treats them as read-only snapshots. Models are frozen pydantic
models so they can be validated straight from JSON (snake_case or the
camelCase shape used by the web client) and shared between concurrent
scans without copying.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MarketType(str, Enum):
    """Two-way markets covered by the engine."""

    MONEYLINE = "moneyline"
    SPREAD = "spread"
    TOTAL = "total"

    @classmethod
    def from_key(cls, key: str) -> "MarketType":
        """Resolve a market type from its own value or a provider market key."""
        key = key.strip().lower()
        if key in PROVIDER_MARKET_KEYS:
            return PROVIDER_MARKET_KEYS[key]
        return cls(key)

    @property
    def provider_key(self) -> str:
        """The Odds API market key for this market type."""
        return {
            MarketType.MONEYLINE: "h2h",
            MarketType.SPREAD: "spreads",
            MarketType.TOTAL: "totals",
        }[self]


PROVIDER_MARKET_KEYS: dict[str, MarketType] = {
    "h2h": MarketType.MONEYLINE,
    "spreads": MarketType.SPREAD,
    "totals": MarketType.TOTAL,
}


class _EngineModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class BookOdds(_EngineModel):
    """A single bookmaker's price on one outcome."""

    book_id: str = Field(alias="bookId")
    odds: int
    line: Optional[float] = None
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")


class MarketOutcome(_EngineModel):
    """One side of a market (team name, Over or Under) and its quotes."""

    name: str
    point: Optional[float] = None
    book_odds: list[BookOdds] = Field(default_factory=list, alias="bookOdds")

    @property
    def best_odds(self) -> Optional[BookOdds]:
        """
        Quote with the numerically greatest American odds.

        Derived from ``book_odds`` on every access, so it always reflects
        the current quote set. Ties keep the first quote seen.
        """
        best: Optional[BookOdds] = None
        for quote in self.book_odds:
            if best is None or quote.odds > best.odds:
                best = quote
        return best

    def line_for(self, quote: BookOdds) -> Optional[float]:
        """Line attached to a quote, falling back to the outcome's point."""
        if quote.line is not None:
            return quote.line
        return self.point


class Market(_EngineModel):
    """A market on an event with its outcomes."""

    type: MarketType
    outcomes: list[MarketOutcome] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_market_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return MarketType.from_key(value)
        return value

    @property
    def is_two_way(self) -> bool:
        """Only two-outcome markets can be priced pairwise."""
        return len(self.outcomes) == 2


class Event(_EngineModel):
    """A sporting event with the markets offered on it."""

    id: str
    sport_key: str = Field(alias="sportKey")
    home_team: str = Field(alias="homeTeam")
    away_team: str = Field(alias="awayTeam")
    commence_time: datetime = Field(alias="commenceTime")
    markets: list[Market] = Field(default_factory=list)

    @property
    def description(self) -> str:
        """Human-readable matchup, e.g. ``Buffalo Bills @ New York Jets``."""
        return f"{self.away_team} @ {self.home_team}"

    def get_market(self, market_type: MarketType) -> Optional[Market]:
        """Return the first market of the given type, if offered."""
        for market in self.markets:
            if market.type == market_type:
                return market
        return None

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return self.model_dump(mode="json")


def event_from_dict(data: dict[str, Any]) -> Event:
    """Validate a native event dictionary into an :class:`Event`."""
    return Event.model_validate(data)


def events_from_list(data: list[dict[str, Any]]) -> list[Event]:
    """Validate a list of native event dictionaries."""
    return [event_from_dict(item) for item in data]
