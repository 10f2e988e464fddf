"""
Betting math and opportunity scanners.

Provides tools for:
- Odds conversion between American, decimal and implied probability
- No-vig fair odds and market consensus
- Expected value and Kelly Criterion bet sizing
- Cross-book arbitrage and middle detection
- +EV and arbitrage scanning over events
"""

from .odds_converter import (
    InvalidOddsError,
    OddsFormats,
    american_to_decimal,
    american_to_implied,
    decimal_to_american,
    decimal_to_implied,
    implied_to_american,
    implied_to_decimal,
    convert_odds,
    format_american,
    calculate_payout,
    calculate_profit,
)

from .fair_odds import (
    ConsensusMethod,
    NoVigResult,
    FairOdds,
    normalize_implied,
    calculate_no_vig_odds,
    calculate_market_consensus,
    calculate_average_consensus,
    fair_probabilities,
)

from .expected_value import (
    EVResult,
    calculate_ev,
    find_ev_opportunity,
)

from .kelly_calculator import (
    DEFAULT_KELLY_FRACTION,
    full_kelly,
    kelly_stake,
    kelly_stake_american,
)

from .arbitrage import (
    ArbitrageResult,
    ArbitrageStakes,
    BestArbitrage,
    MiddleResult,
    detect_arbitrage,
    calculate_arbitrage_stakes,
    find_best_arbitrage,
    detect_middle,
)

from .ev_finder import (
    EVFinder,
    EVOpportunity,
    EVScanResult,
    find_ev_opportunities,
)

from .arbitrage_scanner import (
    ArbitrageScanner,
    ArbitrageLeg,
    ArbitrageOpportunity,
    MiddleLeg,
    MiddleOpportunity,
    ArbScanResult,
    find_arbitrage_opportunities,
    find_middle_opportunities,
)

__all__ = [
    # Odds converter
    "InvalidOddsError",
    "OddsFormats",
    "american_to_decimal",
    "american_to_implied",
    "decimal_to_american",
    "decimal_to_implied",
    "implied_to_american",
    "implied_to_decimal",
    "convert_odds",
    "format_american",
    "calculate_payout",
    "calculate_profit",
    # Fair odds
    "ConsensusMethod",
    "NoVigResult",
    "FairOdds",
    "normalize_implied",
    "calculate_no_vig_odds",
    "calculate_market_consensus",
    "calculate_average_consensus",
    "fair_probabilities",
    # Expected value
    "EVResult",
    "calculate_ev",
    "find_ev_opportunity",
    # Kelly sizing
    "DEFAULT_KELLY_FRACTION",
    "full_kelly",
    "kelly_stake",
    "kelly_stake_american",
    # Arbitrage math
    "ArbitrageResult",
    "ArbitrageStakes",
    "BestArbitrage",
    "MiddleResult",
    "detect_arbitrage",
    "calculate_arbitrage_stakes",
    "find_best_arbitrage",
    "detect_middle",
    # EV finder
    "EVFinder",
    "EVOpportunity",
    "EVScanResult",
    "find_ev_opportunities",
    # Arbitrage scanner
    "ArbitrageScanner",
    "ArbitrageLeg",
    "ArbitrageOpportunity",
    "MiddleLeg",
    "MiddleOpportunity",
    "ArbScanResult",
    "find_arbitrage_opportunities",
    "find_middle_opportunities",
]
