"""
Shared builders for engine tests.

Quotes are written as ``(book_id, odds)`` or ``(book_id, odds, line)``
tuples to keep market fixtures readable.
"""
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from sharp_edge.config.settings import get_settings
from sharp_edge.data.events import BookOdds, Event, Market, MarketOutcome, MarketType

AWAY = "Buffalo Bills"
HOME = "New York Jets"


def quotes(*entries):
    """Build BookOdds from ``(book_id, odds[, line])`` tuples."""
    built = []
    for entry in entries:
        book_id, odds = entry[0], entry[1]
        line = entry[2] if len(entry) > 2 else None
        built.append(BookOdds(book_id=book_id, odds=odds, line=line))
    return built


def outcome(name, *entries, point=None):
    return MarketOutcome(name=name, point=point, book_odds=quotes(*entries))


def market(market_type, *outcomes):
    return Market(type=market_type, outcomes=list(outcomes))


def moneyline(away_quotes, home_quotes):
    """Two-way moneyline market, away side first."""
    return market(
        MarketType.MONEYLINE,
        outcome(AWAY, *away_quotes),
        outcome(HOME, *home_quotes),
    )


def event(*markets, event_id="evt-1"):
    return Event(
        id=event_id,
        sport_key="americanfootball_nfl",
        home_team=HOME,
        away_team=AWAY,
        commence_time=datetime(2026, 9, 13, 17, 0, tzinfo=timezone.utc),
        markets=list(markets),
    )


@pytest.fixture
def build():
    """Namespace of builder helpers for use inside tests."""
    return SimpleNamespace(
        quotes=quotes,
        outcome=outcome,
        market=market,
        moneyline=moneyline,
        event=event,
        AWAY=AWAY,
        HOME=HOME,
    )


@pytest.fixture
def arb_moneyline_event():
    """
    Moneyline where the best prices on each side sum below 100% implied.

    Best prices are +120 (draftkings) and -110 (fanduel), so each is
    worth about +2.21% EV against best-price fair odds.
    """
    return event(
        moneyline(
            [("fanduel", -110), ("draftkings", 120)],
            [("fanduel", -110), ("draftkings", -140)],
        )
    )


@pytest.fixture
def outlier_moneyline_event():
    """Moneyline where betmgm hangs an outlier +115 on the away side."""
    return event(
        moneyline(
            [("fanduel", -110), ("draftkings", -110), ("betmgm", 115)],
            [("fanduel", -110), ("draftkings", -110), ("betmgm", -135)],
        )
    )


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached per process; reset between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
