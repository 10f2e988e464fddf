"""Sportsbook odds engine: fair odds, +EV and arbitrage detection."""

__version__ = "0.1.0"
