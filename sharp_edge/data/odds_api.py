"""
Transform The Odds API v4 payloads into engine events.

Pure parsing only: fetching the payloads is left to the caller. Each
provider event becomes an :class:`~sharp_edge.data.events.Event` whose
markets hold one outcome per (name, point) with every mapped book's
quote attached.
"""
from __future__ import annotations

from typing import Any, Mapping, Optional

from loguru import logger

from ..config.constants import BOOK_KEY_MAP
from .events import (
    PROVIDER_MARKET_KEYS,
    BookOdds,
    Event,
    Market,
    MarketOutcome,
    MarketType,
)

_MARKET_ORDER = [MarketType.MONEYLINE, MarketType.SPREAD, MarketType.TOTAL]

_log = logger.bind(component="odds_api")


def _valid_price(price: Any) -> bool:
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        return False
    if isinstance(price, float) and not price.is_integer():
        return False
    return price != 0


def transform_to_event(
    payload: Mapping[str, Any],
    book_map: Mapping[str, Optional[str]] = BOOK_KEY_MAP,
) -> Event:
    """
    Convert one provider event into an Event.

    Args:
        payload: Raw event dict from The Odds API (``oddsFormat=american``)
        book_map: Provider bookmaker key -> sportsbook id. Books missing
            from the map, or mapped to None, are dropped.

    Returns:
        Event with markets ordered moneyline, spread, total

    Raises:
        KeyError: If the payload lacks id, teams or commence_time
    """
    home_team = payload["home_team"]
    away_team = payload["away_team"]

    # market type -> (outcome name, point) -> quotes
    grouped: dict[MarketType, dict[tuple[str, Optional[float]], list[BookOdds]]] = {
        market_type: {} for market_type in _MARKET_ORDER
    }

    for bookmaker in payload.get("bookmakers", []):
        book_id = book_map.get(bookmaker.get("key", ""))
        if not book_id:
            continue

        for market in bookmaker.get("markets", []):
            market_type = PROVIDER_MARKET_KEYS.get(market.get("key", ""))
            if market_type is None:
                continue

            for outcome in market.get("outcomes", []):
                price = outcome.get("price")
                if not _valid_price(price):
                    _log.warning(
                        f"Dropping {book_id} {market_type.value} quote on "
                        f"{outcome.get('name')} for event {payload['id']}: bad price {price!r}"
                    )
                    continue

                point = outcome.get("point")
                key = (outcome["name"], point)
                grouped[market_type].setdefault(key, []).append(
                    BookOdds(
                        book_id=book_id,
                        odds=int(price),
                        line=point,
                        updated_at=market.get("last_update"),
                    )
                )

    markets: list[Market] = []
    for market_type in _MARKET_ORDER:
        outcome_map = grouped[market_type]
        if not outcome_map:
            continue

        outcomes = [
            MarketOutcome(name=name, point=point, book_odds=quotes)
            for (name, point), quotes in outcome_map.items()
        ]

        # Totals: Over first. Others: away team first.
        if market_type == MarketType.TOTAL:
            outcomes.sort(key=lambda o: o.name != "Over")
        else:
            outcomes.sort(key=lambda o: o.name != away_team)

        markets.append(Market(type=market_type, outcomes=outcomes))

    return Event(
        id=payload["id"],
        sport_key=payload.get("sport_key", ""),
        home_team=home_team,
        away_team=away_team,
        commence_time=payload["commence_time"],
        markets=markets,
    )


def parse_events(
    payloads: list[Mapping[str, Any]],
    book_map: Mapping[str, Optional[str]] = BOOK_KEY_MAP,
) -> list[Event]:
    """
    Convert a list of provider events, skipping malformed ones.

    Args:
        payloads: Raw event dicts from The Odds API
        book_map: Provider bookmaker key -> sportsbook id

    Returns:
        Parsed events, in input order
    """
    events: list[Event] = []
    for payload in payloads:
        try:
            events.append(transform_to_event(payload, book_map))
        except (KeyError, ValueError) as e:
            _log.warning(f"Skipping malformed event {payload.get('id', '?')}: {e}")

    _log.info(f"Parsed {len(events)} of {len(payloads)} provider events")
    return events
