from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from propsynth.adapters.csv import CsvCertificateSource, CsvScheduleSource, TextGroupListSource
from propsynth.app import build_staging
from propsynth.config import ConfigurationError, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Synthesize commission proposals from certificate split records"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Build proposals and write staging tables")
    build.add_argument(
        "--certificates",
        type=Path,
        required=True,
        help="CSV export of certificate split rows",
    )
    build.add_argument(
        "--schedules",
        type=Path,
        help="CSV of ScheduleCode,ScheduleId pairs used to resolve participant schedules",
    )
    build.add_argument(
        "--exclude-groups",
        type=Path,
        help="Text file with one group id per line to leave out of the batch",
    )
    build.add_argument(
        "--group",
        dest="groups",
        action="append",
        help="Only process this group id (repeatable)",
    )
    build.add_argument(
        "--database-uri",
        type=str,
        help="SQLAlchemy URI of the staging database (defaults to config)",
    )
    build.add_argument(
        "--include-inactive",
        action="store_true",
        help="Keep rows whose certificate or record status is not active",
    )
    build.add_argument(
        "--append",
        action="store_true",
        help="Append to the staging tables instead of replacing their contents",
    )
    build.add_argument(
        "--dry-run",
        action="store_true",
        help="Run the build and report counts without writing anything",
    )
    build.add_argument(
        "--no-entropy",
        action="store_true",
        help="Disable entropy-based routing even when thresholds are configured",
    )

    return parser.parse_args(list(argv))


def _validate_paths(args: argparse.Namespace) -> None:
    for option in ("certificates", "schedules", "exclude_groups"):
        path: Path | None = getattr(args, option)
        if path is not None and not path.is_file():
            raise ValueError(f"File not found for --{option.replace('_', '-')}: {path}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(level=logging.DEBUG, force=True)
        _validate_paths(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command != "build":
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
        report = build_staging(
            certificates=CsvCertificateSource(
                parsed_args.certificates, active_only=not parsed_args.include_inactive
            ),
            schedules=CsvScheduleSource(parsed_args.schedules) if parsed_args.schedules else None,
            excluded_groups=(
                TextGroupListSource(parsed_args.exclude_groups)
                if parsed_args.exclude_groups
                else None
            ),
            groups=parsed_args.groups,
            entropy_from_env=not parsed_args.no_entropy,
            database_uri=parsed_args.database_uri,
            dry_run=parsed_args.dry_run,
            replace=not parsed_args.append,
        )
        log.info(
            "Build finished: proposals=%s, quarantine=%s, hierarchies=%s",
            report.counts["proposals"],
            report.counts["policy_hierarchy_assignments"],
            report.counts["hierarchies"],
        )
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during proposal build")
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
