"""
Constants for the sharp-edge odds engine.

Contains sportsbook identifiers and provider key mappings.
"""
from typing import Final, Optional


# =============================================================================
# SPORTSBOOKS
# =============================================================================
# NY legal sportsbooks
SPORTSBOOKS: Final[list[str]] = [
    "fanduel",
    "draftkings",
    "betmgm",
    "caesars",
    "betrivers",
    "fanatics",
    "ballybet",
    "bet365",
    "thescore",
]

BOOKMAKER_DISPLAY_NAMES: Final[dict[str, str]] = {
    "fanduel": "FanDuel",
    "draftkings": "DraftKings",
    "betmgm": "BetMGM",
    "caesars": "Caesars",
    "betrivers": "BetRivers",
    "fanatics": "Fanatics",
    "ballybet": "Bally Bet",
    "bet365": "bet365",
    "thescore": "theScore Bet",
}

# The Odds API bookmaker key -> sportsbook id (None = not a NY book, ignored)
BOOK_KEY_MAP: Final[dict[str, Optional[str]]] = {
    "fanduel": "fanduel",
    "draftkings": "draftkings",
    "betmgm": "betmgm",
    "williamhill_us": "caesars",  # Caesars was formerly William Hill
    "betrivers": "betrivers",
    "fanatics": "fanatics",
    "ballybet": "ballybet",
    "bet365": "bet365",
    "thescore": "thescore",
    "bovada": None,
    "betonlineag": None,
    "pinnacle": None,
    "mybookieag": None,
    "lowvig": None,
    "superbook": None,
    "betparx": None,
    "espnbet": None,
    "fliff": None,
    "hardrockbet": None,
    "pointsbetus": None,
    "unibet_us": None,
    "wynnbet": None,
}


def bookmaker_display_name(book_id: str) -> str:
    """Display name for a sportsbook id, falling back to the id itself."""
    return BOOKMAKER_DISPLAY_NAMES.get(book_id, book_id)
