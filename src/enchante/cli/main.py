# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Enchante CLI."""

from __future__ import annotations

import argparse
import json
import signal
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from ..errors import AuthResolutionError, ConfigError
from ..log import EventLogger, get_event_logger, setup_logging
from ..models import RunSummary
from ..probe import ProbeContext
from ..runtime import Enchante

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Enchante concurrent HTTP probe")
    parser.add_argument(
        "--config",
        default="probe_config.yaml",
        help="Path to the probe configuration file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the run summary as JSON",
    )
    return parser


@contextmanager
def cancel_on_signals(context: ProbeContext, logger: EventLogger) -> Iterator[None]:
    """Cancel ``context`` on SIGINT/SIGTERM for the duration of the block."""

    def _handler(signum: int, _frame: Any) -> None:
        logger.warning("Shutdown signal received, exiting gracefully...", signal=signal.Signals(signum).name)
        context.cancel()

    previous: dict[int, Any] = {}
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            previous[signum] = signal.signal(signum, _handler)
        except ValueError:
            # Not the main thread; the caller owns cancellation.
            continue
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def _format_seconds(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value * 1000:.1f}ms"


def _pretty_print(summary: RunSummary) -> None:
    print(f"[Enchante] Status: {summary.status}")
    print(f"Requests: {summary.processed} processed / {summary.dispatched} dispatched")
    print(f"Succeeded: {summary.succeeded}  Failed: {summary.failed}")
    if summary.average is None:
        print("Average response time: - (no successful requests)")
    else:
        print(f"Average response time: {_format_seconds(summary.average)}")
    print(f"Duration: {summary.elapsed:.3f}s")


def _print_json(summary: RunSummary) -> None:
    json.dump(summary.to_dict(), sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(debug=args.debug)
    logger = get_event_logger()
    logger.info("Starting probe service", debug_enabled=args.debug)

    context = ProbeContext()
    with Enchante(logger=logger) as enchante:
        try:
            config = enchante.load(args.config)
        except ConfigError as exc:
            logger.error("Failed to load config", error=str(exc))
            return EXIT_ERROR

        with cancel_on_signals(context, logger):
            try:
                summary = enchante.probe(config, context)
            except AuthResolutionError as exc:
                logger.error("Probe aborted", error=str(exc))
                return EXIT_ERROR

    if args.json:
        _print_json(summary)
    else:
        _pretty_print(summary)

    logger.info("Probe execution completed")
    return EXIT_CANCELLED if summary.cancelled else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
