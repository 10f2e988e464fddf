"""
Two-way arbitrage and middle detection.

Arbitrage exists when the implied probabilities of opposite sides, taken
from different bookmakers, sum to less than 100%. Staking each side in
proportion to its implied probability returns the same amount whichever
side wins.
"""
from typing import Iterable, NamedTuple, Optional

from loguru import logger

from ..data.events import BookOdds
from .odds_converter import american_to_decimal, decimal_to_implied

# Returns from the two sides may drift apart by float error only
_RETURN_TOLERANCE = 0.01


class ArbitrageResult(NamedTuple):
    """Result of checking one pair of prices for arbitrage."""

    is_arbitrage: bool
    profit_percentage: float
    stake1_ratio: float
    stake2_ratio: float
    total_implied: float


class ArbitrageStakes(NamedTuple):
    """Dollar stakes for an arbitrage, rounded to cents."""

    stake1: float
    stake2: float
    total_stake: float
    guaranteed_profit: float
    return_percentage: float


class BestArbitrage(NamedTuple):
    """Most profitable cross-book pairing for a market."""

    book1: str
    book2: str
    odds1: int
    odds2: int
    profit_percentage: float


class MiddleResult(NamedTuple):
    """Line gap between two spread/total quotes."""

    is_middle: bool
    middle_window: float
    is_arbitrage: bool


def detect_arbitrage(odds1: float, odds2: float) -> ArbitrageResult:
    """
    Detect an arbitrage between two opposite-side prices.

    Args:
        odds1: American odds for outcome 1
        odds2: American odds for outcome 2

    Returns:
        ArbitrageResult; all zeros when no arbitrage exists

    Examples:
        >>> detect_arbitrage(-110, -110).is_arbitrage
        False
        >>> result = detect_arbitrage(120, 120)
        >>> round(result.profit_percentage, 2), result.stake1_ratio
        (9.09, 0.5)
    """
    implied1 = decimal_to_implied(american_to_decimal(odds1))
    implied2 = decimal_to_implied(american_to_decimal(odds2))

    total_implied = implied1 + implied2

    if total_implied < 1:
        return ArbitrageResult(
            is_arbitrage=True,
            profit_percentage=(1 - total_implied) * 100,
            stake1_ratio=implied1 / total_implied,
            stake2_ratio=implied2 / total_implied,
            total_implied=total_implied,
        )

    return ArbitrageResult(
        is_arbitrage=False,
        profit_percentage=0.0,
        stake1_ratio=0.0,
        stake2_ratio=0.0,
        total_implied=total_implied,
    )


def calculate_arbitrage_stakes(
    odds1: float,
    odds2: float,
    total_stake: float,
) -> Optional[ArbitrageStakes]:
    """
    Calculate stakes that lock in equal profit on either outcome.

    Args:
        odds1: American odds for outcome 1
        odds2: American odds for outcome 2
        total_stake: Total amount to distribute across both bets

    Returns:
        ArbitrageStakes, or None if the prices are not an arbitrage
    """
    arb = detect_arbitrage(odds1, odds2)
    if not arb.is_arbitrage:
        return None

    stake1 = total_stake * arb.stake1_ratio
    stake2 = total_stake * arb.stake2_ratio

    return1 = stake1 * american_to_decimal(odds1)
    return2 = stake2 * american_to_decimal(odds2)
    if abs(return1 - return2) > _RETURN_TOLERANCE:
        logger.warning(
            f"Arbitrage returns diverge for {odds1}/{odds2}: "
            f"{return1:.4f} vs {return2:.4f}"
        )

    guaranteed_profit = return1 - total_stake

    return ArbitrageStakes(
        stake1=round(stake1, 2),
        stake2=round(stake2, 2),
        total_stake=total_stake,
        guaranteed_profit=round(guaranteed_profit, 2),
        return_percentage=guaranteed_profit / total_stake * 100,
    )


def find_best_arbitrage(
    outcome1_odds: Iterable[BookOdds],
    outcome2_odds: Iterable[BookOdds],
) -> Optional[BestArbitrage]:
    """
    Find the most profitable arbitrage across books for a two-way market.

    Same-book pairs are skipped. Ties keep the first pairing found.

    Args:
        outcome1_odds: Quotes from different books for outcome 1
        outcome2_odds: Quotes from different books for outcome 2

    Returns:
        BestArbitrage, or None if no pairing is an arbitrage
    """
    outcome2_odds = list(outcome2_odds)
    best: Optional[BestArbitrage] = None

    for quote1 in outcome1_odds:
        for quote2 in outcome2_odds:
            if quote1.book_id == quote2.book_id:
                continue

            result = detect_arbitrage(quote1.odds, quote2.odds)
            if not result.is_arbitrage:
                continue

            if best is None or result.profit_percentage > best.profit_percentage:
                best = BestArbitrage(
                    book1=quote1.book_id,
                    book2=quote2.book_id,
                    odds1=quote1.odds,
                    odds2=quote2.odds,
                    profit_percentage=result.profit_percentage,
                )

    return best


def detect_middle(
    line1: float,
    line2: float,
    odds1: float,
    odds2: float,
) -> MiddleResult:
    """
    Check two spread/total lines for a middle.

    Any nonzero gap between the lines counts as a middle window. A middle
    only pays both legs if the result lands inside the window, so it is
    not a guaranteed profit unless the prices are also an arbitrage.

    Examples:
        >>> detect_middle(45.5, 47.5, -110, -110)
        MiddleResult(is_middle=True, middle_window=2.0, is_arbitrage=False)
    """
    middle_window = abs(line1 - line2)
    is_arbitrage = detect_arbitrage(odds1, odds2).is_arbitrage

    return MiddleResult(
        is_middle=middle_window > 0,
        middle_window=middle_window,
        is_arbitrage=is_arbitrage,
    )
