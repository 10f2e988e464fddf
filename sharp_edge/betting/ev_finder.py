"""
+EV opportunity detection.

Compares every bookmaker's price against no-vig fair odds derived from
the market itself and flags prices that beat fair value by at least a
minimum EV percentage.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterable, Optional

from loguru import logger

from ..data.events import Event, Market, MarketOutcome, MarketType
from .expected_value import calculate_ev
from .fair_odds import ConsensusMethod, fair_probabilities
from .kelly_calculator import DEFAULT_KELLY_FRACTION, kelly_stake_american
from .odds_converter import InvalidOddsError, format_american

if TYPE_CHECKING:
    from ..config.settings import Settings


@dataclass
class EVOpportunity:
    """A single bookmaker price that beats fair value."""

    event: Event
    market_type: MarketType
    outcome_name: str
    book_id: str
    book_odds: int
    fair_odds: int
    fair_probability: float
    ev_percentage: float
    edge: float
    kelly_suggestion: Optional[float] = None
    point: Optional[float] = None

    @property
    def event_id(self) -> str:
        return self.event.id

    @property
    def pick_description(self) -> str:
        """Formatted pick, e.g. ``Buffalo Bills -3.5 @ +105 (fanduel)``."""
        pick = self.outcome_name
        if self.point is not None and self.market_type == MarketType.SPREAD:
            pick = f"{pick} {self.point:+g}"
        elif self.point is not None:
            pick = f"{pick} {self.point:g}"
        return f"{pick} @ {format_american(self.book_odds)} ({self.book_id})"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "event_id": self.event_id,
            "event": self.event.description,
            "commence_time": self.event.commence_time.isoformat(),
            "market_type": self.market_type.value,
            "outcome_name": self.outcome_name,
            "point": self.point,
            "book_id": self.book_id,
            "book_odds": self.book_odds,
            "fair_odds": self.fair_odds,
            "fair_probability": self.fair_probability,
            "ev_percentage": self.ev_percentage,
            "edge": self.edge,
            "kelly_suggestion": self.kelly_suggestion,
        }

    def summary(self) -> str:
        """Get formatted one-line summary."""
        line = (
            f"{self.event.description} | {self.pick_description} | "
            f"EV {self.ev_percentage:+.2f}% | fair {format_american(self.fair_odds)}"
        )
        if self.kelly_suggestion:
            line += f" | stake ${self.kelly_suggestion:.2f}"
        return line


@dataclass
class EVScanResult:
    """Result of an EV scan with metadata for the consumer."""

    opportunities: list[EVOpportunity]
    min_ev: float
    events_scanned: int = 0
    markets_scanned: int = 0
    scanned_at: datetime = field(default_factory=datetime.now)

    @property
    def count(self) -> int:
        return len(self.opportunities)

    @property
    def best(self) -> Optional[EVOpportunity]:
        """Opportunity with the highest EV percentage."""
        return self.opportunities[0] if self.opportunities else None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "opportunities": [o.to_dict() for o in self.opportunities],
            "count": self.count,
            "events_scanned": self.events_scanned,
            "markets_scanned": self.markets_scanned,
            "min_ev": self.min_ev,
            "scanned_at": self.scanned_at.isoformat(),
        }


class EVFinder:
    """
    Scans events for +EV prices.

    For every two-way market, fair probabilities are derived from the
    market's own quotes (best price on each side by default). Every quote
    on either side is then priced against its side's fair probability.
    Each qualifying quote is reported; several books on the same outcome
    can all qualify.

    Example:
        >>> finder = EVFinder(min_ev=2.0)
        >>> result = finder.scan(events)
        >>> for opp in result.opportunities:
        ...     print(opp.summary())
    """

    DEFAULT_MIN_EV = 1.0  # 1% EV
    DEFAULT_BANKROLL = 1000.0

    def __init__(
        self,
        min_ev: float = DEFAULT_MIN_EV,
        bankroll: float = DEFAULT_BANKROLL,
        kelly_fraction: float = DEFAULT_KELLY_FRACTION,
        method: ConsensusMethod = ConsensusMethod.BEST_PRICE,
    ):
        """
        Initialize the EV finder.

        Args:
            min_ev: Minimum EV percentage to report (1.0 = 1%)
            bankroll: Bankroll for Kelly stake suggestions
            kelly_fraction: Kelly fraction (0.25 = quarter Kelly)
            method: Consensus method for fair probabilities
        """
        self.min_ev = min_ev
        self.bankroll = bankroll
        self.kelly_fraction = kelly_fraction
        self.method = method
        self.logger = logger.bind(component="ev_finder")

    @classmethod
    def from_settings(cls, settings: Settings) -> "EVFinder":
        """Build a finder from application settings."""
        return cls(
            min_ev=settings.ev.min_ev,
            bankroll=settings.ev.bankroll,
            kelly_fraction=settings.ev.kelly_fraction,
            method=settings.ev.consensus_method,
        )

    def scan(self, events: Iterable[Event]) -> EVScanResult:
        """
        Scan events for +EV opportunities.

        Args:
            events: Events to scan; not modified

        Returns:
            EVScanResult sorted by EV percentage, highest first
        """
        opportunities: list[EVOpportunity] = []
        events_scanned = 0
        markets_scanned = 0

        for event in events:
            events_scanned += 1
            for market in event.markets:
                found = self._scan_market(event, market)
                if found is None:
                    continue
                markets_scanned += 1
                opportunities.extend(found)

        opportunities.sort(key=lambda o: o.ev_percentage, reverse=True)

        self.logger.info(
            f"EV scan: {len(opportunities)} opportunities across "
            f"{markets_scanned} markets in {events_scanned} events (min EV {self.min_ev}%)"
        )

        return EVScanResult(
            opportunities=opportunities,
            min_ev=self.min_ev,
            events_scanned=events_scanned,
            markets_scanned=markets_scanned,
        )

    def _scan_market(self, event: Event, market: Market) -> Optional[list[EVOpportunity]]:
        """Evaluate one market. Returns None when the market can't be priced."""
        if not market.is_two_way:
            self.logger.debug(
                f"Skipping {event.id} {market.type.value}: {len(market.outcomes)} outcomes"
            )
            return None

        outcome1, outcome2 = market.outcomes
        if not outcome1.book_odds or not outcome2.book_odds:
            return None

        try:
            fair = fair_probabilities(outcome1, outcome2, self.method)
        except InvalidOddsError as e:
            self.logger.debug(f"Skipping {event.id} {market.type.value}: {e}")
            return None
        if fair is None:
            return None

        found: list[EVOpportunity] = []
        for outcome, fair_prob, fair_odds in (
            (outcome1, fair.fair_prob1, fair.fair_odds1),
            (outcome2, fair.fair_prob2, fair.fair_odds2),
        ):
            found.extend(
                self._evaluate_outcome(event, market, outcome, fair_prob, fair_odds)
            )
        return found

    def _evaluate_outcome(
        self,
        event: Event,
        market: Market,
        outcome: MarketOutcome,
        fair_prob: float,
        fair_odds: int,
    ) -> list[EVOpportunity]:
        """Price every quote on one side against its fair probability."""
        found: list[EVOpportunity] = []

        for quote in outcome.book_odds:
            try:
                ev = calculate_ev(quote.odds, fair_prob)
            except InvalidOddsError as e:
                self.logger.debug(f"Skipping {quote.book_id} quote on {outcome.name}: {e}")
                continue

            if ev.ev_percentage < self.min_ev:
                continue

            found.append(
                EVOpportunity(
                    event=event,
                    market_type=market.type,
                    outcome_name=outcome.name,
                    book_id=quote.book_id,
                    book_odds=quote.odds,
                    fair_odds=fair_odds,
                    fair_probability=fair_prob,
                    ev_percentage=ev.ev_percentage,
                    edge=ev.edge,
                    kelly_suggestion=kelly_stake_american(
                        fair_prob, quote.odds, self.bankroll, self.kelly_fraction
                    ),
                    point=outcome.line_for(quote),
                )
            )

        return found


def find_ev_opportunities(
    events: Iterable[Event],
    min_ev: float = EVFinder.DEFAULT_MIN_EV,
    bankroll: float = EVFinder.DEFAULT_BANKROLL,
    kelly_fraction: float = DEFAULT_KELLY_FRACTION,
    method: ConsensusMethod = ConsensusMethod.BEST_PRICE,
) -> list[EVOpportunity]:
    """
    Convenience function to find +EV opportunities.

    Returns:
        Opportunities sorted by EV percentage, highest first
    """
    finder = EVFinder(
        min_ev=min_ev,
        bankroll=bankroll,
        kelly_fraction=kelly_fraction,
        method=method,
    )
    return finder.scan(events).opportunities
