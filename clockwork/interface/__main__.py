"""
Run Clockwork headless.

Usage:
    python -m clockwork.interface [--saves-dir saves] [--log-level INFO] [--pretty]
                                  [--name Ada] [--start station] [--remember]

Reads JSON commands from stdin, writes JSON results and events to stdout.
Logs go to stderr so they never interleave with the JSON stream.
"""

import argparse
import logging
import sys

from .config import (
    load_config,
    set_debug,
    set_log_level,
    set_player_name,
    set_pretty,
    set_start_location,
)
from .headless import run_headless


def _remember(args) -> None:
    """Persist command line options to the config file."""
    if args.log_level:
        set_log_level(args.log_level, args.saves_dir)
    if args.pretty:
        set_pretty(True, args.saves_dir)
    if args.debug:
        set_debug(True, args.saves_dir)
    if args.name:
        set_player_name(args.name, args.saves_dir)
    if args.start:
        set_start_location(args.start, args.saves_dir)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Clockwork - headless narrative engine")
    parser.add_argument(
        "--saves-dir", "-s",
        default="saves",
        help="Directory holding save slots and config"
    )
    parser.add_argument(
        "--log-level", "-l",
        default=None,
        help="DEBUG, INFO, WARNING or ERROR (overrides config)"
    )
    parser.add_argument(
        "--pretty", "-p",
        action="store_true",
        help="Include a rich rendering of the scene in each result"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-only content"
    )
    parser.add_argument(
        "--name", "-n",
        default=None,
        help="Player name for new games"
    )
    parser.add_argument(
        "--start",
        default=None,
        help="Start location id for new games"
    )
    parser.add_argument(
        "--remember",
        action="store_true",
        help="Save the options given here as the new defaults"
    )
    args = parser.parse_args()

    if args.remember:
        _remember(args)

    config = load_config(args.saves_dir)
    config["saves_dir"] = args.saves_dir
    if args.pretty:
        config["pretty"] = True
    if args.debug:
        config["debug"] = True
    if args.name:
        config["player_name"] = args.name
    if args.start:
        config["start_location"] = args.start

    level = (args.log_level or config.get("log_level") or "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format='%(asctime)s [%(levelname)s] %(message)s',
        stream=sys.stderr,
    )

    run_headless(args.saves_dir, config)


if __name__ == "__main__":
    main()
