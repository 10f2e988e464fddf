"""
Cross-book arbitrage and middle scanner.

Identifies guaranteed profit opportunities by pairing opposite-side
quotes from different bookmakers, and separately reports middles:
spread/total pairs whose lines leave a window where both bets win.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable, Iterator, Optional

from loguru import logger

from ..data.events import BookOdds, Event, Market, MarketOutcome, MarketType
from .arbitrage import calculate_arbitrage_stakes, detect_arbitrage, detect_middle
from .odds_converter import InvalidOddsError, american_to_implied, format_american

if TYPE_CHECKING:
    from ..config.settings import Settings


@dataclass
class ArbitrageLeg:
    """One bet of an arbitrage."""

    outcome_name: str
    book_id: str
    odds: int
    stake_ratio: float  # Share of total stake, legs sum to 1
    suggested_stake: float  # Dollars, rounded to cents
    line: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome_name": self.outcome_name,
            "book_id": self.book_id,
            "odds": self.odds,
            "stake_ratio": self.stake_ratio,
            "suggested_stake": self.suggested_stake,
            "line": self.line,
        }


@dataclass
class ArbitrageOpportunity:
    """Represents a guaranteed profit arbitrage opportunity."""

    event: Event
    market_type: MarketType
    profit_percentage: float  # Guaranteed profit as % of total stake
    legs: list[ArbitrageLeg]
    total_stake: float
    guaranteed_profit: float
    detected_at: datetime = field(default_factory=datetime.now)

    @property
    def event_id(self) -> str:
        return self.event.id

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "event_id": self.event_id,
            "event": self.event.description,
            "commence_time": self.event.commence_time.isoformat(),
            "market_type": self.market_type.value,
            "profit_percentage": self.profit_percentage,
            "legs": [leg.to_dict() for leg in self.legs],
            "total_stake": self.total_stake,
            "guaranteed_profit": self.guaranteed_profit,
            "detected_at": self.detected_at.isoformat(),
        }

    def summary(self) -> str:
        """Get formatted one-line summary."""
        legs = " / ".join(
            f"{leg.outcome_name} {format_american(leg.odds)} ({leg.book_id}) ${leg.suggested_stake:.2f}"
            for leg in self.legs
        )
        return (
            f"{self.event.description} {self.market_type.value} | "
            f"{self.profit_percentage:.2f}% | {legs} | profit ${self.guaranteed_profit:.2f}"
        )


@dataclass
class MiddleLeg:
    """One bet of a middle."""

    outcome_name: str
    book_id: str
    odds: int
    line: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "outcome_name": self.outcome_name,
            "book_id": self.book_id,
            "odds": self.odds,
            "line": self.line,
        }


@dataclass
class MiddleOpportunity:
    """
    Spread/total pair that wins both legs if the result lands between
    the lines. Not a guaranteed profit unless ``is_arbitrage`` is set.
    """

    event: Event
    market_type: MarketType
    legs: list[MiddleLeg]
    middle_window: float
    is_arbitrage: bool
    total_implied: float
    detected_at: datetime = field(default_factory=datetime.now)

    @property
    def event_id(self) -> str:
        return self.event.id

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event": self.event.description,
            "market_type": self.market_type.value,
            "legs": [leg.to_dict() for leg in self.legs],
            "middle_window": self.middle_window,
            "is_arbitrage": self.is_arbitrage,
            "total_implied": self.total_implied,
            "detected_at": self.detected_at.isoformat(),
        }

    def summary(self) -> str:
        legs = " / ".join(
            f"{leg.outcome_name} {leg.line:g} {format_american(leg.odds)} ({leg.book_id})"
            for leg in self.legs
        )
        tag = " [ARB]" if self.is_arbitrage else ""
        return f"{self.event.description} {self.market_type.value} | window {self.middle_window:g}{tag} | {legs}"


@dataclass
class ArbScanResult:
    """Results from scanning for arbitrage and middle opportunities."""

    opportunities: list[ArbitrageOpportunity] = field(default_factory=list)
    middles: list[MiddleOpportunity] = field(default_factory=list)
    min_profit: float = 0.0
    total_stake: float = 0.0
    events_scanned: int = 0
    markets_scanned: int = 0
    scanned_at: datetime = field(default_factory=datetime.now)

    @property
    def count(self) -> int:
        return len(self.opportunities)

    def to_dict(self) -> dict[str, Any]:
        return {
            "opportunities": [o.to_dict() for o in self.opportunities],
            "middles": [m.to_dict() for m in self.middles],
            "count": self.count,
            "events_scanned": self.events_scanned,
            "markets_scanned": self.markets_scanned,
            "min_profit": self.min_profit,
            "total_stake": self.total_stake,
            "scanned_at": self.scanned_at.isoformat(),
        }


def dedupe_by_market(opportunities: list[Any]) -> list[Any]:
    """
    Keep the first opportunity seen per (event id, market type).

    Callers sort best-first before deduplicating.
    """
    seen: set[tuple[str, MarketType]] = set()
    kept = []
    for opp in opportunities:
        key = (opp.event_id, opp.market_type)
        if key in seen:
            continue
        seen.add(key)
        kept.append(opp)
    return kept


class ArbitrageScanner:
    """
    Pairs every quote on one side of a market with every quote on the
    other side from a different book.

    A pairing is an arbitrage when its implied probabilities sum below
    100%; only the most profitable pairing per event and market is kept.
    Spread and total pairings are also checked for middles, which are
    reported separately.

    Example:
        fanduel Bills ML @ +120 (implied 45.5%)
        betmgm Jets ML @ +110 (implied 47.6%)
        Total implied: 93.1% -> 6.9% locked in

    Usage:
        >>> scanner = ArbitrageScanner(min_profit=0.5)
        >>> result = scanner.scan(events)
        >>> for arb in result.opportunities:
        ...     print(arb.summary())
    """

    DEFAULT_MIN_PROFIT = 0.1  # 0.1%
    DEFAULT_TOTAL_STAKE = 100.0

    def __init__(
        self,
        min_profit: float = DEFAULT_MIN_PROFIT,
        total_stake: float = DEFAULT_TOTAL_STAKE,
        excluded_books: Iterable[str] = (),
    ):
        """
        Initialize the arbitrage scanner.

        Args:
            min_profit: Minimum profit percentage to report (0.1 = 0.1%)
            total_stake: Total stake split across the legs
            excluded_books: Bookmakers never used as a leg

        Raises:
            ValueError: If total_stake is not positive
        """
        if total_stake <= 0:
            raise ValueError(f"total_stake must be positive, got {total_stake!r}")

        self.min_profit = min_profit
        self.total_stake = total_stake
        self.excluded_books = frozenset(b.lower() for b in excluded_books)
        self.logger = logger.bind(component="arbitrage_scanner")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ArbitrageScanner":
        """Build a scanner from application settings."""
        return cls(
            min_profit=settings.arbitrage.min_profit,
            total_stake=settings.arbitrage.total_stake,
            excluded_books=settings.arbitrage.excluded_bookmakers,
        )

    def _two_way_markets(
        self,
        events: Iterable[Event],
        market_types: Optional[set[MarketType]] = None,
    ) -> Iterator[tuple[Event, Market, MarketOutcome, MarketOutcome]]:
        """Yield each scannable two-way market with its two sides."""
        for event in events:
            for market in event.markets:
                if market_types is not None and market.type not in market_types:
                    continue
                if not market.is_two_way:
                    self.logger.debug(
                        f"Skipping {event.id} {market.type.value}: {len(market.outcomes)} outcomes"
                    )
                    continue
                outcome1, outcome2 = market.outcomes
                if not outcome1.book_odds or not outcome2.book_odds:
                    continue
                yield event, market, outcome1, outcome2

    def _cross_book_pairs(
        self,
        outcome1: MarketOutcome,
        outcome2: MarketOutcome,
    ) -> Iterator[tuple[BookOdds, BookOdds]]:
        """Yield every quote pairing across different, non-excluded books."""
        for quote1 in outcome1.book_odds:
            if quote1.book_id.lower() in self.excluded_books:
                continue
            for quote2 in outcome2.book_odds:
                if quote2.book_id.lower() in self.excluded_books:
                    continue
                # Can't arbitrage with the same book
                if quote1.book_id == quote2.book_id:
                    continue
                yield quote1, quote2

    def find_arbitrage(self, events: Iterable[Event]) -> list[ArbitrageOpportunity]:
        """
        Find arbitrage opportunities, best pairing per event and market.

        Args:
            events: Events to scan; not modified

        Returns:
            Opportunities sorted by profit percentage, highest first
        """
        opportunities: list[ArbitrageOpportunity] = []

        for event, market, outcome1, outcome2 in self._two_way_markets(events):
            for quote1, quote2 in self._cross_book_pairs(outcome1, outcome2):
                opp = self._evaluate_pair(event, market, outcome1, outcome2, quote1, quote2)
                if opp is not None:
                    opportunities.append(opp)

        opportunities.sort(key=lambda o: o.profit_percentage, reverse=True)
        return dedupe_by_market(opportunities)

    def _evaluate_pair(
        self,
        event: Event,
        market: Market,
        outcome1: MarketOutcome,
        outcome2: MarketOutcome,
        quote1: BookOdds,
        quote2: BookOdds,
    ) -> Optional[ArbitrageOpportunity]:
        if market.type in (MarketType.SPREAD, MarketType.TOTAL):
            line1 = outcome1.line_for(quote1)
            line2 = outcome2.line_for(quote2)
            if line1 is not None and line2 is not None:
                gap = _line_gap(market.type, outcome1, outcome2, line1, line2)
                # Both legs can lose inside a negative gap
                if gap is None or gap < 0:
                    self.logger.debug(
                        f"Skipping {quote1.book_id}/{quote2.book_id} on {event.id} "
                        f"{market.type.value}: lines {line1:g}/{line2:g} leave a losing gap"
                    )
                    return None

        try:
            result = detect_arbitrage(quote1.odds, quote2.odds)
        except InvalidOddsError as e:
            self.logger.debug(
                f"Skipping {quote1.book_id}/{quote2.book_id} on {event.id} {market.type.value}: {e}"
            )
            return None

        if not result.is_arbitrage or result.profit_percentage < self.min_profit:
            return None

        stakes = calculate_arbitrage_stakes(quote1.odds, quote2.odds, self.total_stake)
        if stakes is None:
            return None

        legs = [
            ArbitrageLeg(
                outcome_name=outcome1.name,
                book_id=quote1.book_id,
                odds=quote1.odds,
                stake_ratio=result.stake1_ratio,
                suggested_stake=stakes.stake1,
                line=outcome1.line_for(quote1),
            ),
            ArbitrageLeg(
                outcome_name=outcome2.name,
                book_id=quote2.book_id,
                odds=quote2.odds,
                stake_ratio=result.stake2_ratio,
                suggested_stake=stakes.stake2,
                line=outcome2.line_for(quote2),
            ),
        ]

        return ArbitrageOpportunity(
            event=event,
            market_type=market.type,
            profit_percentage=result.profit_percentage,
            legs=legs,
            total_stake=self.total_stake,
            guaranteed_profit=stakes.guaranteed_profit,
        )

    def find_middles(self, events: Iterable[Event]) -> list[MiddleOpportunity]:
        """
        Find middles on spread and total markets.

        Only gaps that favour the bettor are reported: an Over line below
        the Under line, or spread lines that sum above zero. The widest
        window per event and market is kept.

        Args:
            events: Events to scan; not modified

        Returns:
            Middles sorted by window (widest first), then cheapest pair
        """
        middles: list[MiddleOpportunity] = []

        market_types = {MarketType.SPREAD, MarketType.TOTAL}
        for event, market, outcome1, outcome2 in self._two_way_markets(events, market_types):
            for quote1, quote2 in self._cross_book_pairs(outcome1, outcome2):
                middle = self._evaluate_middle(event, market, outcome1, outcome2, quote1, quote2)
                if middle is not None:
                    middles.append(middle)

        middles.sort(key=lambda m: (-m.middle_window, m.total_implied))
        return dedupe_by_market(middles)

    def _evaluate_middle(
        self,
        event: Event,
        market: Market,
        outcome1: MarketOutcome,
        outcome2: MarketOutcome,
        quote1: BookOdds,
        quote2: BookOdds,
    ) -> Optional[MiddleOpportunity]:
        line1 = outcome1.line_for(quote1)
        line2 = outcome2.line_for(quote2)
        if line1 is None or line2 is None:
            return None

        gap = _line_gap(market.type, outcome1, outcome2, line1, line2)
        if gap is None or gap <= 0:
            return None

        if market.type == MarketType.TOTAL:
            compare1, compare2 = line1, line2
        else:
            # Express side 2's line from side 1's perspective
            compare1, compare2 = line1, -line2

        try:
            middle = detect_middle(compare1, compare2, quote1.odds, quote2.odds)
            total_implied = american_to_implied(quote1.odds) + american_to_implied(quote2.odds)
        except InvalidOddsError as e:
            self.logger.debug(f"Skipping middle pair on {event.id}: {e}")
            return None

        if not middle.is_middle:
            return None

        return MiddleOpportunity(
            event=event,
            market_type=market.type,
            legs=[
                MiddleLeg(outcome1.name, quote1.book_id, quote1.odds, line1),
                MiddleLeg(outcome2.name, quote2.book_id, quote2.odds, line2),
            ],
            middle_window=middle.middle_window,
            is_arbitrage=middle.is_arbitrage,
            total_implied=total_implied,
        )

    def scan(self, events: Iterable[Event]) -> ArbScanResult:
        """
        Scan events for arbitrage opportunities and middles.

        Returns:
            ArbScanResult with both categories kept separate
        """
        events = list(events)
        opportunities = self.find_arbitrage(events)
        middles = self.find_middles(events)
        markets_scanned = sum(1 for _ in self._two_way_markets(events))

        self.logger.info(
            f"Arbitrage scan: {len(opportunities)} arbs, {len(middles)} middles across "
            f"{markets_scanned} markets in {len(events)} events (min profit {self.min_profit}%)"
        )

        return ArbScanResult(
            opportunities=opportunities,
            middles=middles,
            min_profit=self.min_profit,
            total_stake=self.total_stake,
            events_scanned=len(events),
            markets_scanned=markets_scanned,
        )


def _line_gap(
    market_type: MarketType,
    outcome1: MarketOutcome,
    outcome2: MarketOutcome,
    line1: float,
    line2: float,
) -> Optional[float]:
    """
    Signed gap between two spread/total lines, from the bettor's side.

    Positive: a window where both legs win. Zero: same number. Negative:
    a window where both legs lose. None for totals whose sides aren't
    Over/Under.
    """
    if market_type == MarketType.SPREAD:
        return line1 + line2

    name1 = outcome1.name.strip().lower()
    name2 = outcome2.name.strip().lower()
    if name1 == "over" and name2 == "under":
        return line2 - line1
    if name1 == "under" and name2 == "over":
        return line1 - line2
    return None


def find_arbitrage_opportunities(
    events: Iterable[Event],
    min_profit: float = ArbitrageScanner.DEFAULT_MIN_PROFIT,
    total_stake: float = ArbitrageScanner.DEFAULT_TOTAL_STAKE,
) -> list[ArbitrageOpportunity]:
    """
    Convenience function to find arbitrage opportunities.

    Returns:
        One opportunity per (event, market), sorted by profit, highest first
    """
    scanner = ArbitrageScanner(min_profit=min_profit, total_stake=total_stake)
    return scanner.find_arbitrage(events)


def find_middle_opportunities(events: Iterable[Event]) -> list[MiddleOpportunity]:
    """Convenience function to find middles on spread and total markets."""
    return ArbitrageScanner().find_middles(events)
