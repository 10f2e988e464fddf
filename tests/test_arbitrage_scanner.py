"""
Tests for arbitrage_scanner.py

Run with: pytest tests/test_arbitrage_scanner.py -v
"""

import pytest

from sharp_edge.betting.arbitrage_scanner import (
    ArbitrageScanner,
    find_arbitrage_opportunities,
    find_middle_opportunities,
)
from sharp_edge.betting.odds_converter import american_to_decimal
from sharp_edge.config.settings import ArbitrageSettings, Settings
from sharp_edge.data.events import MarketType


@pytest.fixture
def two_arb_event(build):
    """fanduel +120 pairs with betmgm +110 (~6.93%) and caesars +102 (~5.04%)."""
    return build.event(
        build.moneyline(
            [("fanduel", 120)],
            [("betmgm", 110), ("caesars", 102)],
        )
    )


def _total(build, over_quotes, under_quotes):
    return build.market(
        MarketType.TOTAL,
        build.outcome("Over", *over_quotes),
        build.outcome("Under", *under_quotes),
    )


class TestFindArbitrage:
    """Test arbitrage scanning."""

    def test_keeps_best_pairing_per_market(self, two_arb_event):
        opportunities = find_arbitrage_opportunities([two_arb_event])

        assert len(opportunities) == 1
        arb = opportunities[0]
        assert arb.profit_percentage == pytest.approx(6.93, abs=0.01)
        assert [leg.book_id for leg in arb.legs] == ["fanduel", "betmgm"]

    def test_legs_and_profit(self, two_arb_event):
        arb = find_arbitrage_opportunities([two_arb_event], total_stake=200)[0]

        assert arb.total_stake == 200
        assert sum(leg.suggested_stake for leg in arb.legs) == pytest.approx(200, abs=0.02)
        assert sum(leg.stake_ratio for leg in arb.legs) == pytest.approx(1.0)
        for leg in arb.legs:
            assert leg.suggested_stake == round(leg.suggested_stake, 2)
            payout = leg.stake_ratio * 200 * american_to_decimal(leg.odds)
            assert payout - 200 == pytest.approx(arb.guaranteed_profit, abs=0.01)

    def test_same_book_pairs_excluded(self, build):
        event = build.event(build.moneyline([("fanduel", 120)], [("fanduel", 120)]))
        assert find_arbitrage_opportunities([event]) == []

    def test_excluded_books(self, build):
        event = build.event(
            build.moneyline([("fanduel", 120), ("draftkings", 120)], [("betmgm", 110)])
        )
        scanner = ArbitrageScanner(excluded_books=["BetMGM"])
        assert scanner.find_arbitrage([event]) == []

    def test_min_profit_threshold(self, two_arb_event):
        assert find_arbitrage_opportunities([two_arb_event], min_profit=8.0) == []
        kept = find_arbitrage_opportunities([two_arb_event], min_profit=6.0)
        assert len(kept) == 1

    def test_no_arbitrage_in_standard_market(self, build):
        event = build.event(build.moneyline([("fanduel", -110)], [("draftkings", -110)]))
        assert find_arbitrage_opportunities([event]) == []

    def test_sorted_across_events(self, build, two_arb_event):
        small = build.event(
            build.moneyline([("fanduel", 105)], [("draftkings", 102)]),
            event_id="evt-2",
        )
        opportunities = find_arbitrage_opportunities([small, two_arb_event])

        assert [o.event_id for o in opportunities] == ["evt-1", "evt-2"]

    def test_one_per_market_type(self, build):
        spread = build.market(
            MarketType.SPREAD,
            build.outcome(build.AWAY, ("fanduel", 105), point=-3.5),
            build.outcome(build.HOME, ("betmgm", 105), point=3.5),
        )
        event = build.event(
            build.moneyline([("fanduel", 120)], [("betmgm", 110)]),
            spread,
        )
        opportunities = find_arbitrage_opportunities([event])

        assert {o.market_type for o in opportunities} == {MarketType.MONEYLINE, MarketType.SPREAD}
        spread_arb = next(o for o in opportunities if o.market_type is MarketType.SPREAD)
        assert [leg.line for leg in spread_arb.legs] == [-3.5, 3.5]

    def test_zero_quote_skipped(self, build):
        event = build.event(
            build.moneyline([("fanduel", 120), ("bet365", 0)], [("betmgm", 110)])
        )
        opportunities = find_arbitrage_opportunities([event])

        assert len(opportunities) == 1
        assert opportunities[0].legs[0].book_id == "fanduel"

    def test_total_with_losing_gap_is_not_arbitrage(self, build):
        """Over 47.5 and Under 45.5 both lose on a total of 46 or 47."""
        event = build.event(
            _total(build, [("fanduel", 105, 47.5)], [("betmgm", 105, 45.5)])
        )
        assert find_arbitrage_opportunities([event]) == []

    def test_spread_with_losing_gap_is_not_arbitrage(self, build):
        """Bills -3.5 and Jets +2.5 both lose on a 3 point Bills win."""
        spread = build.market(
            MarketType.SPREAD,
            build.outcome(build.AWAY, ("fanduel", 105), point=-3.5),
            build.outcome(build.HOME, ("betmgm", 105), point=2.5),
        )
        assert find_arbitrage_opportunities([build.event(spread)]) == []

    def test_total_at_same_line_is_arbitrage(self, build):
        event = build.event(
            _total(build, [("fanduel", 105, 46.5)], [("betmgm", 105, 46.5)])
        )
        opportunities = find_arbitrage_opportunities([event])

        assert len(opportunities) == 1
        assert [leg.line for leg in opportunities[0].legs] == [46.5, 46.5]

    @pytest.mark.parametrize("total_stake", [0, -100])
    def test_total_stake_must_be_positive(self, total_stake):
        with pytest.raises(ValueError):
            ArbitrageScanner(total_stake=total_stake)

    def test_summary_and_dict(self, two_arb_event):
        arb = find_arbitrage_opportunities([two_arb_event])[0]
        data = arb.to_dict()

        assert data["event_id"] == "evt-1"
        assert data["market_type"] == "moneyline"
        assert len(data["legs"]) == 2
        assert "6.93%" in arb.summary()


class TestFindMiddles:
    """Test middle scanning."""

    def test_total_middle(self, build):
        event = build.event(
            _total(
                build,
                [("fanduel", -110, 45.5), ("draftkings", -105, 46.5)],
                [("betmgm", -110, 47.5), ("fanduel", -110, 45.5)],
            )
        )
        middles = find_middle_opportunities([event])

        assert len(middles) == 1
        middle = middles[0]
        assert middle.middle_window == pytest.approx(2.0)
        assert [leg.book_id for leg in middle.legs] == ["fanduel", "betmgm"]
        assert [leg.line for leg in middle.legs] == [45.5, 47.5]
        assert not middle.is_arbitrage

    def test_total_unfavourable_gap_ignored(self, build):
        """Over 47.5 and Under 45.5 can both lose."""
        event = build.event(
            _total(build, [("fanduel", -110, 47.5)], [("betmgm", -110, 45.5)])
        )
        assert find_middle_opportunities([event]) == []

    def test_total_under_listed_first(self, build):
        total = build.market(
            MarketType.TOTAL,
            build.outcome("Under", ("betmgm", -110, 47.5)),
            build.outcome("Over", ("fanduel", -110, 45.5)),
        )
        middles = find_middle_opportunities([build.event(total)])

        assert len(middles) == 1
        assert middles[0].middle_window == pytest.approx(2.0)

    def test_spread_middle(self, build):
        """Bills -2.5 and Jets +3.5 both win on a 3 point Bills win."""
        spread = build.market(
            MarketType.SPREAD,
            build.outcome(build.AWAY, ("fanduel", -110), point=-2.5),
            build.outcome(build.HOME, ("draftkings", -110), point=3.5),
        )
        middles = find_middle_opportunities([build.event(spread)])

        assert len(middles) == 1
        assert middles[0].middle_window == pytest.approx(1.0)
        assert middles[0].market_type is MarketType.SPREAD

    @pytest.mark.parametrize("away_point,home_point", [(-3.5, 2.5), (-3.0, 3.0)])
    def test_spread_without_favourable_gap(self, build, away_point, home_point):
        spread = build.market(
            MarketType.SPREAD,
            build.outcome(build.AWAY, ("fanduel", -110), point=away_point),
            build.outcome(build.HOME, ("draftkings", -110), point=home_point),
        )
        assert find_middle_opportunities([build.event(spread)]) == []

    def test_middle_that_is_also_arbitrage(self, build):
        event = build.event(
            _total(build, [("fanduel", 105, 45.5)], [("betmgm", 105, 47.5)])
        )
        middles = find_middle_opportunities([event])

        assert middles[0].is_arbitrage
        # The arbitrage list reports it on its own terms
        assert len(find_arbitrage_opportunities([event])) == 1

    def test_middles_not_reported_as_arbitrage(self, build):
        event = build.event(
            _total(build, [("fanduel", -110, 45.5)], [("betmgm", -110, 47.5)])
        )
        assert len(find_middle_opportunities([event])) == 1
        assert find_arbitrage_opportunities([event]) == []

    def test_moneyline_ignored(self, two_arb_event):
        assert find_middle_opportunities([two_arb_event]) == []

    def test_missing_line_skipped(self, build):
        event = build.event(_total(build, [("fanduel", -110)], [("betmgm", -110, 47.5)]))
        assert find_middle_opportunities([event]) == []

    def test_sorted_by_window(self, build):
        narrow = build.event(
            _total(build, [("fanduel", -110, 46.5)], [("betmgm", -110, 47.5)]),
            event_id="evt-narrow",
        )
        wide = build.event(
            _total(build, [("fanduel", -110, 44.5)], [("betmgm", -110, 47.5)]),
            event_id="evt-wide",
        )
        middles = find_middle_opportunities([narrow, wide])

        assert [m.event_id for m in middles] == ["evt-wide", "evt-narrow"]


class TestScan:
    """Test the combined scan result."""

    def test_scan_keeps_categories_separate(self, build, two_arb_event):
        middle_event = build.event(
            _total(build, [("fanduel", -110, 45.5)], [("betmgm", -110, 47.5)]),
            event_id="evt-2",
        )
        result = ArbitrageScanner(min_profit=0.5, total_stake=250).scan(
            [two_arb_event, middle_event]
        )

        assert result.count == 1
        assert len(result.middles) == 1
        assert result.events_scanned == 2
        assert result.markets_scanned == 2

        data = result.to_dict()
        assert data["count"] == 1
        assert data["min_profit"] == 0.5
        assert data["total_stake"] == 250
        assert len(data["middles"]) == 1
        assert "scanned_at" in data

    def test_events_not_modified(self, two_arb_event):
        before = two_arb_event.to_dict()
        ArbitrageScanner().scan([two_arb_event])
        assert two_arb_event.to_dict() == before

    def test_from_settings(self):
        settings = Settings(
            arbitrage=ArbitrageSettings(
                min_profit=1.5,
                total_stake=500,
                excluded_bookmakers=["bet365"],
            )
        )
        scanner = ArbitrageScanner.from_settings(settings)

        assert scanner.min_profit == 1.5
        assert scanner.total_stake == 500
        assert scanner.excluded_books == frozenset({"bet365"})
