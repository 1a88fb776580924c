#!/usr/bin/env python3
"""
Racecard Parser - Main Entry Point

Command-line front end for the scraping pipeline: scrape a single race card,
aggregate a whole racing schedule, or run the extractors over an HTML file
saved earlier.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from . import adapters  # noqa: F401  (registers adapters)
from .config_manager import config_manager
from .racecard import parse_race_card, resolve_selectors
from .reporting import format_race_card_json, format_schedule_json, write_json
from .schedule import COMPLETED, UPCOMING, parse_schedule
from .sources import get_adapter

# =============================================================================
# --- SETUP & HELPERS ---
# =============================================================================

def setup_logging(log_file: Optional[str], verbose: bool = False):
    """Configures logging for the application."""
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(exist_ok=True, parents=True)
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=handlers,
        force=True,
    )


def safe_async_run(coro, operation_name: str = "Operation") -> Optional[Any]:
    """Runs a coroutine, logging any failure instead of raising it."""
    try:
        logging.info(f"Starting {operation_name}...")
        return asyncio.run(coro)
    except KeyboardInterrupt:
        logging.warning(f"{operation_name} cancelled by user.")
    except Exception as e:
        logging.error(f"{operation_name} failed: {e}", exc_info=True)
    return None


def _build_adapter(source_id: str = "sportsbet"):
    adapter = get_adapter(source_id)(config_manager)
    if not adapter.initialize():
        logging.error(f"Source '{source_id}' is disabled or missing from the configuration.")
        return None
    return adapter

# =============================================================================
# --- COMMANDS ---
# =============================================================================

async def _scrape_race_card(adapter, race_url: str):
    try:
        horses = await adapter.scrape_race_card(race_url)
    finally:
        await adapter.close()
    return format_race_card_json(horses, race_url)


async def _scrape_schedule(adapter, scope: Optional[str], with_cards: bool, only: Optional[str]):
    try:
        tracks = await adapter.scrape_schedule(scope, with_cards=with_cards, only=only)
    finally:
        await adapter.close()
    return format_schedule_json(tracks, scope or adapter.site_config.get("default_scope"))


def _parse_file(path: str, as_schedule: bool):
    site_config = config_manager.get_adapter_config("sportsbet") or {}
    html = Path(path).read_text(encoding="utf-8")
    if as_schedule:
        tracks = parse_schedule(
            html,
            country=site_config.get("country"),
            excluded_track_slugs=site_config.get("excluded_track_slugs") or [],
        )
        return format_schedule_json(tracks, scope=path)
    horses = parse_race_card(html, resolve_selectors(site_config.get("selectors")))
    return format_race_card_json(horses, race_url=path)


def create_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="racecard-parser",
        description="Scrape horse-racing race cards and schedules from Sportsbet.",
    )
    parser.add_argument("--config", help="Path to a JSON settings file.")
    parser.add_argument("--output", "-o", help="Write the JSON report here instead of stdout.")
    parser.add_argument("--log-file", help="Also write logs to this file.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")

    subparsers = parser.add_subparsers(dest="command", required=True)

    race_card = subparsers.add_parser("race-card", help="Scrape a single race card.")
    race_card.add_argument("url", help="Absolute or site-relative race URL.")

    schedule = subparsers.add_parser("schedule", help="Scrape every race on a schedule page.")
    schedule.add_argument(
        "scope", nargs="?", default=None,
        help="Schedule scope, e.g. 'horse/today', 'tomorrow' or '2025-10-25'.",
    )
    status = schedule.add_mutually_exclusive_group()
    status.add_argument("--completed", dest="only", action="store_const", const=COMPLETED,
                        help="Only races that already have a result.")
    status.add_argument("--upcoming", dest="only", action="store_const", const=UPCOMING,
                        help="Only races still to run.")
    schedule.add_argument("--no-cards", action="store_true",
                          help="List races without fetching each race card.")

    parse_file = subparsers.add_parser("parse-file", help="Parse a saved HTML page offline.")
    parse_file.add_argument("path", help="Path to the saved HTML file.")
    parse_file.add_argument("--schedule", action="store_true",
                            help="Treat the file as a schedule page rather than a race card.")
    return parser


def main_cli(args: argparse.Namespace) -> int:
    if args.command == "parse-file":
        try:
            payload = _parse_file(args.path, args.schedule)
        except OSError as e:
            logging.error(f"Could not read '{args.path}': {e}")
            return 1
    else:
        adapter = _build_adapter()
        if adapter is None:
            return 1
        if args.command == "race-card":
            payload = safe_async_run(_scrape_race_card(adapter, args.url), "race card scrape")
        else:
            payload = safe_async_run(
                _scrape_schedule(adapter, args.scope, not args.no_cards, args.only),
                "schedule scrape",
            )
        if payload is None:
            return 1

    text = write_json(payload, args.output)
    if not args.output:
        print(text)
    return 0


def main(argv=None) -> int:
    args = create_cli_parser().parse_args(argv)
    if args.config:
        config_manager.reload(args.config)
    setup_logging(args.log_file or config_manager.get_config().get("LOG_FILE"), args.verbose)
    logging.info(f"Starting {config_manager.get_config().get('APP_NAME', 'Racecard Parser')}")
    return main_cli(args)


if __name__ == "__main__":
    sys.exit(main())
