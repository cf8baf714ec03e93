from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from dealtrack.app import run_deal_tracking, track_account, track_deals_once, untrack_account
from dealtrack.config import ConfigurationError, configure_logging, get_tracking_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from dealtrack.config import DealTrackingConfig
    from dealtrack.domain.scheduling import CycleReport

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Track storage deal state on chain")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log per-page and per-deal detail",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Reconcile tracked accounts on a fixed interval")
    run.add_argument(
        "--interval",
        type=float,
        help="Seconds between the end of one cycle and the start of the next (defaults to config)",
    )
    run.add_argument(
        "--max-cycles",
        type=int,
        help="Stop after this many cycles",
    )

    subparsers.add_parser("once", help="Run a single reconciliation cycle")

    track = subparsers.add_parser("track", help="Add an account to the watch list")
    track.add_argument("address", type=str, help="Client account address, e.g. f1...")

    untrack = subparsers.add_parser("untrack", help="Remove an account from the watch list")
    untrack.add_argument("address", type=str, help="Client account address, e.g. f1...")

    return parser.parse_args(list(argv))


def _tracking_config(args: argparse.Namespace) -> DealTrackingConfig:
    tracking = get_tracking_config()
    interval = getattr(args, "interval", None)
    if interval is not None:
        if interval < 0:
            raise ValueError("Interval must be non-negative")
        tracking = replace(tracking, interval_seconds=interval)
    max_cycles = getattr(args, "max_cycles", None)
    if max_cycles is not None and max_cycles < 1:
        raise ValueError("Max cycles must be at least 1")
    return tracking


def _log_report(report: CycleReport) -> None:
    for outcome in report.failed:
        log.warning(
            "Account %s failed: index=%s, chain=%s",
            outcome.client,
            outcome.index_error,
            outcome.chain_error,
        )
    log.info(
        "Cycle finished: accounts=%s, failed=%s", len(report.accounts), len(report.failed)
    )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        tracking = _tracking_config(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "run":
            asyncio.run(run_deal_tracking(tracking=tracking, max_cycles=parsed_args.max_cycles))
        elif parsed_args.command == "once":
            _log_report(asyncio.run(track_deals_once(tracking=tracking)))
        elif parsed_args.command == "track":
            if track_account(parsed_args.address):
                log.info("Now tracking %s", parsed_args.address)
            else:
                log.info("Already tracking %s", parsed_args.address)
        elif parsed_args.command == "untrack":
            if untrack_account(parsed_args.address):
                log.info("Stopped tracking %s", parsed_args.address)
            else:
                log.info("%s was not tracked", parsed_args.address)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during deal tracking")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
