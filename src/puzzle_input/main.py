"""CLI entry point for puzzle input acquisition.

Usage:
    # Store a session token (copied from the browser cookie) and show config:
    python -m src.puzzle_input.main login 53616c7465645f5f...

    # Print the input for a puzzle, fetching it on first use:
    python -m src.puzzle_input.main fetch 2023 1
    python -m src.puzzle_input.main fetch 2023 2 --no-wait

    # Show when the next request is allowed:
    python -m src.puzzle_input.main status
"""

from __future__ import annotations

import argparse
import logging
import math
import sys

from src.common.config import (
    Settings,
    ThrottlePolicy,
    load_config,
    read_session_token,
    save_session_token,
)
from src.common.exceptions import AocError, MissingCredential
from src.common.logging import setup_logging

from .fetcher import InputFetcher
from .models import PuzzleKey
from .throttle import ThrottleGate

logger = logging.getLogger(__name__)


def _run_login(args: argparse.Namespace, settings: Settings) -> int:
    if args.session_token:
        save_session_token(args.session_token, settings)

    try:
        token = read_session_token(settings)
        token_status = f"set ({len(token)} characters)"
    except MissingCredential:
        token_status = "not set"

    print(f"session token:   {token_status}")
    print(f"session file:    {settings.session_file}")
    print(f"data dir:        {settings.data_dir}")
    print(f"throttle policy: {settings.throttle_policy.value}")
    print(f"user agent:      {settings.user_agent}")
    return 0


def _run_fetch(args: argparse.Namespace, settings: Settings) -> int:
    key = PuzzleKey(args.year, args.day)
    if args.no_wait:
        settings = settings.model_copy(update={"throttle_policy": ThrottlePolicy.FAIL})

    config = load_config(settings)
    with InputFetcher(config) as fetcher:
        text = fetcher.get_input(key)

    sys.stdout.write(text)
    return 0


def _run_status(args: argparse.Namespace, settings: Settings) -> int:
    gate = ThrottleGate(settings.throttle_file, settings.throttle_policy)
    state = gate.read_state()
    wait = gate.wait_time(state)

    last = state.last_request.isoformat() if state.last_request else "never"
    print(f"last request: {last}")
    if wait.total_seconds() > 0:
        print(f"next request allowed in {math.ceil(wait.total_seconds())}s")
    else:
        print("next request allowed now")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aoc", description="Advent of Code puzzle input fetcher"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser(
        "login", help="Store a session token and/or display session information"
    )
    login.add_argument(
        "session_token",
        nargs="?",
        help="If provided, store the session token for future use",
    )
    login.set_defaults(handler=_run_login)

    fetch = sub.add_parser("fetch", help="Print the input for one puzzle")
    fetch.add_argument("year", type=int, help="Event year (e.g., 2023)")
    fetch.add_argument("day", type=int, help="Puzzle day (1-25)")
    fetch.add_argument(
        "--no-wait",
        action="store_true",
        help="Fail instead of waiting when rate limited",
    )
    fetch.set_defaults(handler=_run_fetch)

    status = sub.add_parser("status", help="Show rate limit state")
    status.set_defaults(handler=_run_status)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        settings = Settings.load()
        return args.handler(args, settings)
    except AocError as exc:
        logger.error("%s", exc)
        return 1
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    sys.exit(main())
