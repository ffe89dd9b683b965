from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from demokit.app import run_bulk_import
from demokit.config import ConfigurationError, configure_logging, get_import_settings
from demokit.domain.import_pipeline import PHASE_NAMES

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from demokit.config import ImportSettings

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load demo data into a Mattermost server")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_cmd = subparsers.add_parser("import", help="Run the bulk import pipeline")
    import_cmd.add_argument(
        "--file",
        type=str,
        default=None,
        help="Bulk import JSONL file (defaults to bulk_import.jsonl or ../bulk_import.jsonl)",
    )
    import_cmd.add_argument(
        "--force-plugins",
        action="store_true",
        help="Reinstall local plugins even if already installed",
    )
    import_cmd.add_argument(
        "--force-github-plugins",
        action="store_true",
        help="Reinstall every plugin, including GitHub releases",
    )
    import_cmd.add_argument(
        "--poll-interval",
        type=float,
        default=None,
        help="Seconds between import job status checks (defaults to config)",
    )
    import_cmd.add_argument(
        "--job-timeout",
        type=float,
        default=None,
        help="Seconds to wait for each import job, 0 to wait forever (defaults to config)",
    )

    subparsers.add_parser("phases", help="List the import phases in execution order")

    return parser.parse_args(list(argv))


def _build_settings(args: argparse.Namespace) -> ImportSettings:
    settings = get_import_settings()
    if args.poll_interval is not None:
        if args.poll_interval < 0:
            raise ValueError("Poll interval must be non-negative")
        settings = replace(settings, poll_interval=args.poll_interval)
    if args.job_timeout is not None:
        if args.job_timeout < 0:
            raise ValueError("Job timeout must be non-negative")
        settings = replace(settings, job_timeout=args.job_timeout)
    return settings


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    settings: ImportSettings | None = None
    try:
        parsed_args = _parse_args(args_list)
        if parsed_args.verbose:
            configure_logging(verbose=True, force=True)
        if parsed_args.command == "import":
            settings = _build_settings(parsed_args)
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "phases":
            for index, name in enumerate(PHASE_NAMES, start=1):
                log.info("%d. %s", index, name)
        elif parsed_args.command == "import":
            result = run_bulk_import(
                source_path=parsed_args.file,
                settings=settings,
                force_plugins=parsed_args.force_plugins,
                force_github_plugins=parsed_args.force_github_plugins,
            )
            for phase in result.phases:
                log.info(
                    "%s: processed=%s, skipped=%s, errors=%s",
                    phase.phase,
                    phase.processed,
                    phase.skipped,
                    phase.errors,
                )
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except ConfigurationError:
        log.exception("Configuration error")
        sys.exit(2)
    except Exception:
        log.exception("Fatal error during import")
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
