"""
Expected value and edge calculation.

Compares a quoted price against an estimated fair probability.
"""
from typing import NamedTuple, Optional

from .fair_odds import calculate_no_vig_odds
from .odds_converter import american_to_decimal, decimal_to_implied


class EVResult(NamedTuple):
    """Expected value of a bet at a quoted price."""

    ev: float  # EV in dollars for the given stake
    ev_percentage: float  # EV as % of stake
    edge: float  # fair prob - implied prob of the quoted price
    is_positive_ev: bool


def calculate_ev(
    book_odds: float,
    fair_probability: float,
    stake: float = 100.0,
) -> EVResult:
    """
    Calculate expected value of a bet.

    EV = (p * profit) - ((1 - p) * stake)

    Args:
        book_odds: American odds being offered
        fair_probability: Estimated true probability of the outcome (0-1)
        stake: Stake amount (100 makes ev equal to ev_percentage)

    Returns:
        EVResult with EV in dollars, as a percentage, and edge

    Examples:
        >>> result = calculate_ev(100, 0.55)
        >>> round(result.ev_percentage, 2), result.is_positive_ev
        (10.0, True)
    """
    decimal_odds = american_to_decimal(book_odds)
    potential_profit = stake * (decimal_odds - 1)

    ev = fair_probability * potential_profit - (1 - fair_probability) * stake
    ev_percentage = ev / stake * 100

    # Edge is measured against the vig-included quote
    edge = fair_probability - decimal_to_implied(decimal_odds)

    return EVResult(
        ev=ev,
        ev_percentage=ev_percentage,
        edge=edge,
        is_positive_ev=ev > 0,
    )


def find_ev_opportunity(
    book_odds: float,
    sharp_odds1: float,
    sharp_odds2: float,
    min_ev: float = 1.0,
) -> Optional[EVResult]:
    """
    Price a book's offer on outcome 1 against a sharp two-way line.

    Args:
        book_odds: American odds offered on outcome 1
        sharp_odds1: Sharp odds for outcome 1 (used for fair odds)
        sharp_odds2: Sharp odds for outcome 2
        min_ev: Minimum EV% to report

    Returns:
        EVResult if EV% meets the threshold, None otherwise
    """
    no_vig = calculate_no_vig_odds(sharp_odds1, sharp_odds2)
    result = calculate_ev(book_odds, no_vig.fair_prob1)

    if result.ev_percentage >= min_ev:
        return result
    return None
