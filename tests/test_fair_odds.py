"""
Tests for fair_odds.py

Run with: pytest tests/test_fair_odds.py -v
"""

import pytest

from sharp_edge.betting.fair_odds import (
    ConsensusMethod,
    calculate_average_consensus,
    calculate_market_consensus,
    calculate_no_vig_odds,
    fair_probabilities,
)
from sharp_edge.betting.odds_converter import InvalidOddsError


class TestNoVigOdds:
    """Test vig removal on a two-way line."""

    def test_standard_juice(self):
        """-110/-110 is a coin flip with 4.76% hold."""
        result = calculate_no_vig_odds(-110, -110)

        assert result.fair_prob1 == pytest.approx(0.5)
        assert result.fair_prob2 == pytest.approx(0.5)
        assert result.fair_odds1 == 100
        assert result.fair_odds2 == 100
        assert result.vig_percentage == pytest.approx(4.76, abs=0.01)
        assert result.total_implied == pytest.approx(1.0476, abs=1e-4)

    def test_favorite_and_underdog(self):
        result = calculate_no_vig_odds(-150, 130)

        assert result.fair_prob1 == pytest.approx(0.5798, abs=1e-3)
        assert result.fair_prob1 > result.fair_prob2
        assert result.fair_odds1 == -138
        assert result.fair_odds2 == 138

    @pytest.mark.parametrize(
        "odds1,odds2",
        [(-110, -110), (-150, 130), (-300, 250), (120, 120), (-105, -115), (500, -800)],
    )
    def test_probabilities_sum_to_one(self, odds1, odds2):
        result = calculate_no_vig_odds(odds1, odds2)
        assert result.fair_prob1 + result.fair_prob2 == pytest.approx(1.0, abs=1e-9)

    def test_arbitrage_line_has_negative_hold(self):
        assert calculate_no_vig_odds(120, 120).hold < 0

    def test_zero_odds_rejected(self):
        with pytest.raises(InvalidOddsError):
            calculate_no_vig_odds(0, -110)


class TestMarketConsensus:
    """Test fair odds from a market's quotes."""

    def test_best_price_uses_best_quote_per_side(self, build):
        side1 = build.outcome("A", ("fanduel", -110), ("draftkings", -105))
        side2 = build.outcome("B", ("fanduel", -110), ("betmgm", -115))

        fair = calculate_market_consensus(side1, side2)
        expected = calculate_no_vig_odds(-105, -110)

        assert fair.fair_prob1 == pytest.approx(expected.fair_prob1)
        assert fair.fair_odds2 == expected.fair_odds2

    def test_missing_side_returns_none(self, build):
        side1 = build.outcome("A", ("fanduel", -110))
        side2 = build.outcome("B")

        assert calculate_market_consensus(side1, side2) is None
        assert calculate_average_consensus(side1, side2) is None

    def test_average_consensus(self, build):
        side1 = build.outcome("A", ("fanduel", -110), ("draftkings", -120))
        side2 = build.outcome("B", ("fanduel", -110), ("draftkings", 100))

        fair = calculate_average_consensus(side1, side2)

        assert fair.fair_prob1 == pytest.approx(0.5109, abs=1e-3)
        assert fair.fair_prob1 + fair.fair_prob2 == pytest.approx(1.0, abs=1e-9)

    def test_average_ignores_zero_quote(self, build):
        side1 = build.outcome("A", ("fanduel", -110), ("draftkings", -120), ("bet365", 0))
        side2 = build.outcome("B", ("fanduel", -110), ("draftkings", 100))
        clean = build.outcome("A", ("fanduel", -110), ("draftkings", -120))

        assert calculate_average_consensus(side1, side2) == calculate_average_consensus(
            clean, side2
        )

    def test_average_needs_a_valid_quote_per_side(self, build):
        side1 = build.outcome("A", ("bet365", 0))
        side2 = build.outcome("B", ("fanduel", -110))

        assert calculate_average_consensus(side1, side2) is None
        assert calculate_average_consensus(build.outcome("A"), side2) is None

    def test_dispatch_by_method(self, build):
        side1 = build.outcome("A", ("fanduel", -110), ("draftkings", -120))
        side2 = build.outcome("B", ("fanduel", -110), ("draftkings", 100))

        assert fair_probabilities(side1, side2) == calculate_market_consensus(side1, side2)
        assert fair_probabilities(
            side1, side2, ConsensusMethod.AVERAGE
        ) == calculate_average_consensus(side1, side2)

    def test_method_from_string(self):
        assert ConsensusMethod("average") is ConsensusMethod.AVERAGE
