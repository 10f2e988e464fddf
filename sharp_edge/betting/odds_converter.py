"""
Odds conversion utilities.

Provides functions for converting between American odds, decimal odds
and implied probability, plus payout helpers used by every other
betting component.
"""
from typing import NamedTuple, Optional


class InvalidOddsError(ValueError):
    """Raised when an odds or probability value cannot be converted."""

    def __init__(self, message: str, odds: Optional[float] = None):
        super().__init__(message)
        self.odds = odds


class OddsFormats(NamedTuple):
    """Container for odds in multiple formats."""

    american: float
    decimal: float
    implied_probability: float


def american_to_decimal(american: float) -> float:
    """
    Convert American odds to decimal odds.

    Args:
        american: American odds (e.g., -110, +150)

    Returns:
        Decimal odds (e.g., 1.909, 2.50)

    Raises:
        InvalidOddsError: If odds are zero

    Examples:
        >>> american_to_decimal(-110)
        1.9090909090909092
        >>> american_to_decimal(150)
        2.5
    """
    if american == 0:
        raise InvalidOddsError("American odds of 0 are not a valid price", odds=american)
    if american > 0:
        return american / 100 + 1
    return 100 / abs(american) + 1


def decimal_to_american(decimal_odds: float) -> int:
    """
    Convert decimal odds to American odds, rounded to the nearest integer.

    Args:
        decimal_odds: Decimal odds (e.g., 1.91, 2.50)

    Returns:
        American odds (e.g., -110, +150)

    Raises:
        InvalidOddsError: If decimal odds are not greater than 1

    Examples:
        >>> decimal_to_american(1.909)
        -110
        >>> decimal_to_american(2.5)
        150
    """
    if decimal_odds <= 1:
        raise InvalidOddsError(
            f"Decimal odds must be greater than 1, got {decimal_odds!r}",
            odds=decimal_odds,
        )
    if decimal_odds >= 2:
        return round((decimal_odds - 1) * 100)
    return round(-100 / (decimal_odds - 1))


def decimal_to_implied(decimal_odds: float) -> float:
    """
    Convert decimal odds to implied probability.

    Examples:
        >>> decimal_to_implied(2.0)
        0.5
    """
    if decimal_odds <= 0:
        raise InvalidOddsError(
            f"Decimal odds must be positive, got {decimal_odds!r}",
            odds=decimal_odds,
        )
    return 1 / decimal_odds


def implied_to_decimal(probability: float) -> float:
    """
    Convert implied probability to decimal odds.

    Args:
        probability: Implied probability (0-1]

    Returns:
        Decimal odds

    Examples:
        >>> implied_to_decimal(0.5)
        2.0
    """
    if not 0 < probability <= 1:
        raise InvalidOddsError(
            f"Probability must be in (0, 1], got {probability!r}",
            odds=probability,
        )
    return 1 / probability


def american_to_implied(american: float) -> float:
    """
    Convert American odds to implied probability.

    Note: This includes the bookmaker's vig, so both sides of a market
    will sum to more than 1.

    Examples:
        >>> round(american_to_implied(-110), 4)
        0.5238
        >>> american_to_implied(150)
        0.4
    """
    return decimal_to_implied(american_to_decimal(american))


def implied_to_american(probability: float) -> int:
    """
    Convert implied probability to American odds.

    Examples:
        >>> implied_to_american(0.5)
        100
        >>> implied_to_american(0.6)
        -150
    """
    return decimal_to_american(implied_to_decimal(probability))


def convert_odds(american: float) -> OddsFormats:
    """
    Convert American odds to all formats.

    Args:
        american: American odds

    Returns:
        OddsFormats with american, decimal, and implied probability
    """
    decimal_odds = american_to_decimal(american)
    return OddsFormats(
        american=american,
        decimal=decimal_odds,
        implied_probability=decimal_to_implied(decimal_odds),
    )


def format_american(american: float) -> str:
    """
    Format American odds with proper sign.

    Examples:
        >>> format_american(-110)
        '-110'
        >>> format_american(150)
        '+150'
    """
    if american > 0:
        return f"+{american:g}"
    return f"{american:g}"


def calculate_payout(stake: float, american: float) -> float:
    """
    Calculate total payout (stake + profit) for a winning bet.

    Examples:
        >>> round(calculate_payout(100, -110), 2)
        190.91
    """
    return stake * american_to_decimal(american)


def calculate_profit(stake: float, american: float) -> float:
    """
    Calculate profit for a winning bet, excluding the returned stake.

    Examples:
        >>> calculate_profit(100, 150)
        150.0
    """
    return calculate_payout(stake, american) - stake
