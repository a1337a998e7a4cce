from __future__ import annotations

import argparse
import logging
import sys
import traceback
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from shreconcile.app import import_github_affiliations, merge_stores
from shreconcile.common import configure_logging
from shreconcile.config import get_run_config

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile Sorting Hat identity stores")
    subparsers = parser.add_subparsers(dest="command", required=True)

    merge = subparsers.add_parser(
        "merge", help="Merge the SH1 and SH2 stores into the SH store"
    )
    affiliations = subparsers.add_parser(
        "affiliations", help="Import GitHub affiliations into the SH store"
    )
    affiliations.add_argument(
        "--cleanup",
        action="store_true",
        help="Delete all enrollments and organizations before importing",
    )

    for sub in (merge, affiliations):
        sub.add_argument(
            "--debug",
            action="store_true",
            help="Log at DEBUG level (also enabled by SH_DEBUG)",
        )
        sub.add_argument(
            "--test-connect",
            action="store_true",
            help="Only check the database connections (also enabled by SH_TEST_CONNECT)",
        )

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)

    run_config = get_run_config().with_overrides(
        cleanup=getattr(parsed_args, "cleanup", False),
        debug=parsed_args.debug,
        test_connect=parsed_args.test_connect,
    )
    if run_config.debug:
        configure_logging(debug=True, force=True)

    try:
        if parsed_args.command == "merge":
            merge_stores(run_config=run_config)
        elif parsed_args.command == "affiliations":
            import_github_affiliations(run_config=run_config)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception as exc:
        log.exception("Fatal error during %s", parsed_args.command)
        print(f"Error: {exc}")  # noqa: T201
        traceback.print_exc(file=sys.stdout)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
