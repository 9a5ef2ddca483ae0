"""Main entry point for HH Tracker."""

import argparse
import asyncio
import json
import sqlite3
import sys
from pathlib import Path

from pydantic import ValidationError

from hh_tracker import __version__
from hh_tracker.bot.handler import format_stats
from hh_tracker.config.settings import Settings
from hh_tracker.parser.pipeline import ingest
from hh_tracker.tracker.repository import TrackerRepository
from hh_tracker.tracker.service import FinalizeOutcome, TrackerService
from hh_tracker.utils.logging import configure_logging


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="hh-tracker",
        description="HH Tracker: parse hh.ru response pastes and keep stats",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m hh_tracker parse responses.txt
  python -m hh_tracker paste --user 42 responses.txt
  python -m hh_tracker done --user 42
  python -m hh_tracker stats --user 42 --days 7
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )
    parser.add_argument(
        "--db",
        type=Path,
        default=None,
        help="SQLite database path (overrides TRACKER_DB_PATH)",
    )

    subparsers = parser.add_subparsers(dest="command", title="commands")

    parse_parser = subparsers.add_parser(
        "parse", help="Parse a paste and print the records as JSON (nothing is stored)"
    )
    parse_parser.add_argument("source", help="File with pasted text, or - for stdin")

    paste_parser = subparsers.add_parser("paste", help="Append text to a user's buffer")
    paste_parser.add_argument("--user", type=int, required=True, help="User id")
    paste_parser.add_argument("source", help="File with pasted text, or - for stdin")

    done_parser = subparsers.add_parser(
        "done", help="Parse the buffer, store new responses and clear it"
    )
    done_parser.add_argument("--user", type=int, required=True, help="User id")

    reset_parser = subparsers.add_parser("reset", help="Clear a user's buffer")
    reset_parser.add_argument("--user", type=int, required=True, help="User id")

    stats_parser = subparsers.add_parser("stats", help="Show stats for a user")
    stats_parser.add_argument("--user", type=int, required=True, help="User id")
    window = stats_parser.add_mutually_exclusive_group()
    window.add_argument(
        "--days", type=_positive_int, default=None, help="Trailing window in days"
    )
    window.add_argument("--all", action="store_true", help="Use all stored responses")
    stats_parser.add_argument("--json", action="store_true", help="Print JSON")

    list_parser = subparsers.add_parser("list", help="List stored responses")
    list_parser.add_argument("--user", type=int, required=True, help="User id")
    list_parser.add_argument(
        "--limit", type=_positive_int, default=None, help="Maximum rows"
    )

    return parser


async def _run_storage_command(parsed: argparse.Namespace, settings: Settings) -> int:
    repo = TrackerRepository(parsed.db or settings.tracker_db_path)
    service = TrackerService(
        repo, noise=settings.noise_substrings, top_k=settings.top_companies
    )
    try:
        await repo.initialize()

        if parsed.command == "paste":
            text = _read_source(parsed.source)
            await service.append_text(parsed.user, text)
            print("ok")
            return 0

        if parsed.command == "reset":
            await service.reset(parsed.user)
            print("ok")
            return 0

        if parsed.command == "done":
            result = await service.finalize(parsed.user)
            if result.outcome == FinalizeOutcome.EMPTY_BUFFER:
                print("Buffer is empty", file=sys.stderr)
                return 1
            if result.outcome == FinalizeOutcome.NOTHING_PARSED:
                print("No complete responses in buffer", file=sys.stderr)
                return 1
            print(f"inserted={result.inserted} duplicates={result.duplicates}")
            return 0

        if parsed.command == "stats":
            days = None if parsed.all else (parsed.days or settings.stats_window_days)
            stats = await service.stats(parsed.user, days)
            if parsed.json:
                print(json.dumps(stats.to_dict(), ensure_ascii=False, indent=2))
            else:
                print(format_stats(stats))
            return 0

        if parsed.command == "list":
            limit = parsed.limit or settings.list_limit
            for rec in await repo.list_records(parsed.user, limit=limit):
                print(
                    f"{rec.imported_at.isoformat()} {rec.fingerprint} {rec.raw_summary} "
                    f"[{rec.role_family.value}/{rec.grade.value}]"
                )
            return 0

        print("Unknown command", file=sys.stderr)
        return 1
    finally:
        await repo.close()


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        settings = Settings()
    except ValidationError as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    if parsed.command is None:
        parser.print_help()
        return 0

    logger.debug(f"HH Tracker v{__version__} running {parsed.command}")

    try:
        if parsed.command == "parse":
            records = ingest(_read_source(parsed.source), settings.noise_substrings)
            print(
                json.dumps(
                    [record.to_dict() for record in records],
                    ensure_ascii=False,
                    indent=2,
                )
            )
            return 0

        return asyncio.run(_run_storage_command(parsed, settings))
    except (OSError, sqlite3.Error) as e:
        logger.error(f"{parsed.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
