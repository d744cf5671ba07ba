"""Command line entry point: ``catalogsync import``."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import threading
from signal import SIGINT, signal
from typing import TYPE_CHECKING, NoReturn

from dotenv import load_dotenv

from catalogsync.adapters.run_lock import RunAlreadyActiveError
from catalogsync.app import apply_memory_limit, run_feed_import
from catalogsync.config import ConfigurationError, configure_logging, get_run_limits

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_USAGE = 2
EXIT_LOCKED = 3

_STOP_REQUESTED = threading.Event()


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return number


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return number


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise ValueError(message)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = _ArgumentParser(prog="catalogsync", description="Reconcile the vendor feed")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True, parser_class=_ArgumentParser)

    importer = subparsers.add_parser("import", help="Import the product feed into the catalog")
    importer.add_argument(
        "--feed-url",
        type=str,
        help="Feed endpoint (defaults to CATALOGSYNC_FEED_URL)",
    )
    importer.add_argument(
        "--timeout",
        type=_positive_float,
        help="Feed fetch timeout in seconds (default: 300)",
    )
    importer.add_argument(
        "--image-timeout",
        type=_positive_float,
        help="Per-image download timeout in seconds (default: 30)",
    )
    importer.add_argument(
        "--time-budget",
        type=_positive_float,
        help="Stop before the next record once this many seconds have passed",
    )
    importer.add_argument(
        "--memory-limit-mb",
        type=_positive_int,
        help="Address space ceiling for the import process (default: 1024)",
    )
    importer.add_argument(
        "--skip-media",
        action="store_true",
        help="Reconcile product data only; do not download images",
    )
    importer.add_argument(
        "--json",
        action="store_true",
        help="Print the run summary as JSON on stdout",
    )
    return parser.parse_args(list(argv))


def _stop_requested() -> bool:
    return _STOP_REQUESTED.is_set()


def main(argv: Sequence[str] | None = None) -> int:
    """Main application entry point; returns the process exit code."""

    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
    except ValueError:
        configure_logging()
        log.exception("CLI validation error")
        return EXIT_USAGE

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        limits = get_run_limits(
            time_budget_seconds=parsed_args.time_budget,
            memory_limit_mb=parsed_args.memory_limit_mb,
        )
        apply_memory_limit(limits.memory_limit_mb)
        summary = run_feed_import(
            feed_url=parsed_args.feed_url,
            feed_timeout=parsed_args.timeout,
            image_timeout=parsed_args.image_timeout,
            limits=limits,
            skip_media=parsed_args.skip_media,
            should_stop=_stop_requested,
        )
    except ConfigurationError:
        log.exception("Configuration error")
        return EXIT_USAGE
    except RunAlreadyActiveError as exc:
        log.error("%s; not starting another import", exc)  # noqa: TRY400
        return EXIT_LOCKED
    except Exception:
        log.exception("Fatal error during import")
        return EXIT_FATAL

    if parsed_args.json:
        sys.stdout.write(json.dumps(summary.as_dict(), indent=2) + "\n")
    if summary.fatal_error is not None:
        log.error("Import aborted: %s", summary.fatal_error)
        return EXIT_FATAL
    return EXIT_OK


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """First Ctrl+C stops after the current record, a second one exits at once."""

    if _STOP_REQUESTED.is_set():
        log.info("Closed by user (Ctrl+C)")
        sys.exit(130)
    log.info("Stop requested; finishing the current record")
    _STOP_REQUESTED.set()


def run() -> None:
    """Console-script entry point."""

    load_dotenv()
    signal(SIGINT, sigint_handler)
    sys.exit(main())


if __name__ == "__main__":
    run()
