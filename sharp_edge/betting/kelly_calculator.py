"""
Kelly Criterion bet sizing.

Full Kelly: f* = (bp - q) / b
    where b = net odds, p = win prob, q = lose prob
Fractional Kelly scales f* down (25% by default) to reduce variance.
"""
from .odds_converter import InvalidOddsError, american_to_decimal

DEFAULT_KELLY_FRACTION = 0.25


def full_kelly(win_probability: float, decimal_odds: float) -> float:
    """
    Calculate the full Kelly fraction of bankroll.

    Unclamped: negative values mean the bet has negative edge.

    Args:
        win_probability: Probability of winning (0-1)
        decimal_odds: Decimal odds, must be greater than 1

    Returns:
        Kelly fraction

    Raises:
        InvalidOddsError: If decimal odds are not greater than 1
    """
    if decimal_odds <= 1:
        raise InvalidOddsError(
            f"Decimal odds must be greater than 1 for Kelly sizing, got {decimal_odds!r}",
            odds=decimal_odds,
        )

    b = decimal_odds - 1  # Net odds (profit per unit wagered)
    q = 1 - win_probability

    return (win_probability * b - q) / b


def kelly_stake(
    fair_probability: float,
    decimal_odds: float,
    bankroll: float,
    fraction: float = DEFAULT_KELLY_FRACTION,
) -> float:
    """
    Calculate recommended stake in dollars.

    Args:
        fair_probability: True probability of winning (0-1)
        decimal_odds: Decimal odds being offered
        bankroll: Total bankroll
        fraction: Kelly fraction (0.25 = quarter Kelly)

    Returns:
        Stake clamped to [0, bankroll]

    Examples:
        >>> round(kelly_stake(0.55, 2.0, 1000), 2)
        25.0
        >>> kelly_stake(0.40, 2.0, 1000)
        0.0
    """
    fractional = full_kelly(fair_probability, decimal_odds) * fraction

    # Never bet negative or more than bankroll
    return max(0.0, min(fractional * bankroll, bankroll))


def kelly_stake_american(
    fair_probability: float,
    american_odds: float,
    bankroll: float,
    fraction: float = DEFAULT_KELLY_FRACTION,
) -> float:
    """Calculate Kelly stake from American odds."""
    return kelly_stake(
        fair_probability,
        american_to_decimal(american_odds),
        bankroll,
        fraction,
    )
