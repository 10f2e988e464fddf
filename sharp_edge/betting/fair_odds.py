"""
No-vig fair odds estimation.

Removes the bookmaker margin from a two-way market to estimate true
outcome probabilities. Two consensus methods are supported:

- ``BEST_PRICE``: de-vig the best available price on each side. Sharper,
  and the default for the EV finder.
- ``AVERAGE``: average each side's implied probability across every
  book before normalizing. More stable, less aggressive.
"""
from enum import Enum
from typing import Iterable, NamedTuple, Optional

from ..data.events import BookOdds, MarketOutcome
from .odds_converter import InvalidOddsError, american_to_implied, implied_to_american


class ConsensusMethod(str, Enum):
    """How fair probabilities are derived from a market's quotes."""

    BEST_PRICE = "best_price"
    AVERAGE = "average"


class NoVigResult(NamedTuple):
    """Two-way line with the vig removed."""

    fair_prob1: float
    fair_prob2: float
    fair_odds1: int
    fair_odds2: int
    vig_percentage: float
    hold: float
    total_implied: float


class FairOdds(NamedTuple):
    """Fair probabilities and odds for both sides of a market."""

    fair_prob1: float
    fair_prob2: float
    fair_odds1: int
    fair_odds2: int


def normalize_implied(implied1: float, implied2: float) -> NoVigResult:
    """
    Normalize two implied probabilities so they sum to 1.

    Uses the multiplicative method: each side is divided by the total
    implied probability, so the margin is spread proportionally.

    Args:
        implied1: Implied probability for outcome 1 (vig included)
        implied2: Implied probability for outcome 2 (vig included)

    Returns:
        NoVigResult with fair probabilities, fair odds and hold
    """
    total_implied = implied1 + implied2
    hold = total_implied - 1

    fair_prob1 = implied1 / total_implied
    fair_prob2 = implied2 / total_implied

    return NoVigResult(
        fair_prob1=fair_prob1,
        fair_prob2=fair_prob2,
        fair_odds1=implied_to_american(fair_prob1),
        fair_odds2=implied_to_american(fair_prob2),
        vig_percentage=hold * 100,
        hold=hold,
        total_implied=total_implied,
    )


def calculate_no_vig_odds(odds1: float, odds2: float) -> NoVigResult:
    """
    Calculate no-vig (fair) odds from a two-way market.

    Args:
        odds1: American odds for outcome 1
        odds2: American odds for outcome 2

    Returns:
        NoVigResult with fair probabilities summing to 1

    Examples:
        >>> result = calculate_no_vig_odds(-110, -110)
        >>> result.fair_prob1, result.fair_odds1
        (0.5, 100)
        >>> round(result.vig_percentage, 2)
        4.76
    """
    return normalize_implied(american_to_implied(odds1), american_to_implied(odds2))


def calculate_market_consensus(
    outcome1: MarketOutcome,
    outcome2: MarketOutcome,
) -> Optional[FairOdds]:
    """
    Fair odds from the best available price on each side.

    Returns:
        FairOdds, or None if either side has no quotes
    """
    best1 = outcome1.best_odds
    best2 = outcome2.best_odds
    if best1 is None or best2 is None:
        return None

    no_vig = calculate_no_vig_odds(best1.odds, best2.odds)
    return FairOdds(
        fair_prob1=no_vig.fair_prob1,
        fair_prob2=no_vig.fair_prob2,
        fair_odds1=no_vig.fair_odds1,
        fair_odds2=no_vig.fair_odds2,
    )


def _average_implied(quotes: Iterable[BookOdds]) -> Optional[float]:
    implied = []
    for quote in quotes:
        try:
            implied.append(american_to_implied(quote.odds))
        except InvalidOddsError:
            continue
    if not implied:
        return None
    return sum(implied) / len(implied)


def calculate_average_consensus(
    outcome1: MarketOutcome,
    outcome2: MarketOutcome,
) -> Optional[FairOdds]:
    """
    Fair odds from the average implied probability across all books.

    Quotes whose odds can't be converted are left out of the average.

    Returns:
        FairOdds, or None if either side has no valid quotes
    """
    avg_implied1 = _average_implied(outcome1.book_odds)
    avg_implied2 = _average_implied(outcome2.book_odds)
    if avg_implied1 is None or avg_implied2 is None:
        return None

    no_vig = normalize_implied(avg_implied1, avg_implied2)
    return FairOdds(
        fair_prob1=no_vig.fair_prob1,
        fair_prob2=no_vig.fair_prob2,
        fair_odds1=no_vig.fair_odds1,
        fair_odds2=no_vig.fair_odds2,
    )


def fair_probabilities(
    outcome1: MarketOutcome,
    outcome2: MarketOutcome,
    method: ConsensusMethod = ConsensusMethod.BEST_PRICE,
) -> Optional[FairOdds]:
    """Dispatch to the requested consensus method."""
    if method == ConsensusMethod.AVERAGE:
        return calculate_average_consensus(outcome1, outcome2)
    return calculate_market_consensus(outcome1, outcome2)
