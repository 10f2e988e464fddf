#!/usr/bin/env python3
"""
sharp-edge - command line entry point.

Scans a JSON file of events for +EV bets, arbitrage opportunities or
middles and prints the results as a table or as JSON.

Usage:
    sharp-edge ev events.json                       # +EV bets, settings defaults
    sharp-edge ev odds.json --format odds-api       # Raw The Odds API payloads
    sharp-edge arb events.json --min-profit 0.5     # Arbitrage above 0.5%
    sharp-edge middles events.json --json           # Middles as JSON
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from sharp_edge.betting.arbitrage_scanner import ArbitrageScanner, ArbScanResult
from sharp_edge.betting.ev_finder import EVFinder, EVScanResult
from sharp_edge.betting.fair_odds import ConsensusMethod
from sharp_edge.betting.odds_converter import format_american
from sharp_edge.config.constants import bookmaker_display_name
from sharp_edge.config.settings import ArbitrageSettings, EVSettings, Settings, get_settings
from sharp_edge.data.events import Event, events_from_list
from sharp_edge.data.odds_api import parse_events

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name} | {message}"


def configure_logging(level: str) -> None:
    """Route loguru output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)


def load_events(path: Path, input_format: str) -> list[Event]:
    """
    Load events from a JSON file.

    Args:
        path: File holding a JSON list of events
        input_format: ``native`` for the engine's own event shape,
            ``odds-api`` for raw The Odds API v4 payloads

    Raises:
        OSError: If the file can't be read
        ValueError: If the file isn't a JSON list of valid events
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of events")

    if input_format == "odds-api":
        return parse_events(data)
    return events_from_list(data)


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return settings with any command line thresholds applied."""
    ev_overrides = {
        key: value
        for key, value in {
            "min_ev": getattr(args, "min_ev", None),
            "bankroll": getattr(args, "bankroll", None),
            "kelly_fraction": getattr(args, "kelly_fraction", None),
            "consensus_method": getattr(args, "method", None),
        }.items()
        if value is not None
    }
    arb_overrides = {
        key: value
        for key, value in {
            "min_profit": getattr(args, "min_profit", None),
            "total_stake": getattr(args, "total_stake", None),
        }.items()
        if value is not None
    }

    return settings.model_copy(
        update={
            "ev": EVSettings.model_validate({**settings.ev.model_dump(), **ev_overrides}),
            "arbitrage": ArbitrageSettings.model_validate(
                {**settings.arbitrage.model_dump(), **arb_overrides}
            ),
        }
    )


def render_ev_table(result: EVScanResult) -> Table:
    """Build a Rich table of +EV opportunities."""
    table = Table(
        title=f"+EV Bets (min {result.min_ev:g}%)",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
        expand=True,
    )

    table.add_column("Game", style="white", no_wrap=True)
    table.add_column("Market", style="dim")
    table.add_column("Bet", style="white")
    table.add_column("Book", style="dim")
    table.add_column("Odds", justify="right")
    table.add_column("Fair", justify="right")
    table.add_column("EV", justify="right")
    table.add_column("Stake", justify="right", style="green")

    if not result.opportunities:
        table.add_row("[dim]No +EV bets found[/dim]", "", "", "", "", "", "", "")
        return table

    for opp in result.opportunities:
        pick = opp.outcome_name
        if opp.point is not None:
            pick = f"{pick} {opp.point:g}"
        table.add_row(
            opp.event.description,
            opp.market_type.value,
            pick,
            bookmaker_display_name(opp.book_id),
            format_american(opp.book_odds),
            format_american(opp.fair_odds),
            f"{opp.ev_percentage:+.2f}%",
            f"${opp.kelly_suggestion:.2f}" if opp.kelly_suggestion else "",
        )

    return table


def render_arb_table(result: ArbScanResult) -> Table:
    """Build a Rich table of arbitrage opportunities."""
    table = Table(
        title=f"Arbitrage (min {result.min_profit:g}%, ${result.total_stake:.0f} staked)",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
        expand=True,
    )

    table.add_column("Game", style="white", no_wrap=True)
    table.add_column("Market", style="dim")
    table.add_column("Leg 1", style="white")
    table.add_column("Leg 2", style="white")
    table.add_column("Profit", justify="right")
    table.add_column("Guaranteed", justify="right", style="green")

    if not result.opportunities:
        table.add_row("[dim]No arbitrage found[/dim]", "", "", "", "", "")
        return table

    for arb in result.opportunities:
        legs = [
            f"{leg.outcome_name} {format_american(leg.odds)} "
            f"@ {bookmaker_display_name(leg.book_id)} (${leg.suggested_stake:.2f})"
            for leg in arb.legs
        ]
        table.add_row(
            arb.event.description,
            arb.market_type.value,
            legs[0],
            legs[1],
            f"{arb.profit_percentage:.2f}%",
            f"${arb.guaranteed_profit:.2f}",
        )

    return table


def render_middles_table(result: ArbScanResult) -> Table:
    """Build a Rich table of middles."""
    table = Table(
        title="Middles",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
        expand=True,
    )

    table.add_column("Game", style="white", no_wrap=True)
    table.add_column("Market", style="dim")
    table.add_column("Leg 1", style="white")
    table.add_column("Leg 2", style="white")
    table.add_column("Window", justify="right")
    table.add_column("Arb", justify="center")

    if not result.middles:
        table.add_row("[dim]No middles found[/dim]", "", "", "", "", "")
        return table

    for middle in result.middles:
        legs = [
            f"{leg.outcome_name} {leg.line:g} {format_american(leg.odds)} "
            f"@ {bookmaker_display_name(leg.book_id)}"
            for leg in middle.legs
        ]
        table.add_row(
            middle.event.description,
            middle.market_type.value,
            legs[0],
            legs[1],
            f"{middle.middle_window:g}",
            "[green]yes[/green]" if middle.is_arbitrage else "[dim]no[/dim]",
        )

    return table


def run(args: argparse.Namespace, console: Optional[Console] = None) -> int:
    """
    Execute one CLI command.

    Returns:
        Process exit code
    """
    console = console or Console()

    try:
        settings = _apply_overrides(get_settings(), args)
    except ValidationError as e:
        logger.error(f"Invalid settings: {e}")
        return 2

    configure_logging("DEBUG" if args.debug or settings.debug else settings.log_level)

    try:
        events = load_events(args.events_file, args.format)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read events from {args.events_file}: {e}")
        return 1

    logger.debug(f"Loaded {len(events)} events from {args.events_file}")

    result: Any
    if args.command == "ev":
        result = EVFinder.from_settings(settings).scan(events)
        output = result.to_dict()
        table = render_ev_table(result)
    else:
        result = ArbitrageScanner.from_settings(settings).scan(events)
        if args.command == "arb":
            output = {k: v for k, v in result.to_dict().items() if k != "middles"}
            table = render_arb_table(result)
        else:
            output = {k: v for k, v in result.to_dict().items() if k != "opportunities"}
            output["count"] = len(result.middles)
            table = render_middles_table(result)

    if args.json:
        console.print_json(data=output)
    else:
        console.print(table)

    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="sharp-edge",
        description="sharp-edge - +EV, arbitrage and middle detection over sportsbook odds",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    sharp-edge ev events.json                   +EV bets with settings defaults
    sharp-edge ev odds.json --format odds-api   Read raw The Odds API payloads
    sharp-edge arb events.json --min-profit 0.5 Arbitrage above 0.5%
    sharp-edge middles events.json --json       Middles as JSON
        """,
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "events_file",
        type=Path,
        help="JSON file containing a list of events",
    )
    common.add_argument(
        "--format",
        choices=["native", "odds-api"],
        default="native",
        help="Input format (default: native)",
    )
    common.add_argument(
        "--json",
        action="store_true",
        help="Print results as JSON instead of a table",
    )
    common.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    ev = subparsers.add_parser("ev", parents=[common], help="Find +EV bets")
    ev.add_argument("--min-ev", type=float, help="Minimum EV percentage (overrides config)")
    ev.add_argument("--bankroll", type=float, help="Bankroll for Kelly stakes")
    ev.add_argument("--kelly-fraction", type=float, help="Kelly fraction, e.g. 0.25")
    ev.add_argument(
        "--method",
        choices=[m.value for m in ConsensusMethod],
        help="Fair odds consensus method",
    )

    for name, help_text in (("arb", "Find arbitrage opportunities"), ("middles", "Find middles")):
        sub = subparsers.add_parser(name, parents=[common], help=help_text)
        sub.add_argument("--min-profit", type=float, help="Minimum profit percentage")
        sub.add_argument("--total-stake", type=float, help="Total stake split across legs")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main entry point for CLI."""
    args = build_parser().parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
