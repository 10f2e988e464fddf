"""
Data layer for the odds engine.

Provides:
- Event, market, outcome and book quote models
- The Odds API payload transformation
"""
from .events import (
    MarketType,
    PROVIDER_MARKET_KEYS,
    BookOdds,
    MarketOutcome,
    Market,
    Event,
    event_from_dict,
    events_from_list,
)
from .odds_api import parse_events, transform_to_event

__all__ = [
    # Models
    "MarketType",
    "PROVIDER_MARKET_KEYS",
    "BookOdds",
    "MarketOutcome",
    "Market",
    "Event",
    "event_from_dict",
    "events_from_list",
    # The Odds API
    "parse_events",
    "transform_to_event",
]
