"""Command-line interface for the PLN staging server."""

import argparse
import json
import logging
import sys
from pathlib import Path

from pln_staging.clients import GatewayClient
from pln_staging.processing import STAGES, StageRunner
from pln_staging.services import DEFAULT_MIN_OJS_VERSION, Ping
from pln_staging.stores import JsonDepositStore, JsonJournalStore, JsonWhitelistStore, StoreError

DEFAULT_DATA_DIR = Path("./workspace/data")
DEFAULT_TIMEOUT = 30.0


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def process_stage(args: argparse.Namespace) -> int:
    """Execute a processing stage command (e.g. validate-bag).

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    store = JsonDepositStore(args.data_dir / "deposits")
    if args.recover:
        recovered = store.recover_orphaned_deposits()
        logger.info(f"Recovered {len(recovered)} orphaned deposit(s)")

    stage = STAGES[args.command]()
    runner = StageRunner(store)

    try:
        report = runner.run(
            stage,
            retry=args.retry,
            deposit_ids=args.deposit_ids or None,
            limit=args.limit,
            dry_run=args.dry_run,
        )
    except StoreError as e:
        logger.error(f"Failed to run {args.command}: {e}")
        return 1

    logger.info(f"Stage {report.stage}: processed {report.processed} deposit(s)")
    logger.info(f"  Succeeded: {len(report.succeeded)}")
    logger.info(f"  Failed: {len(report.failed)}")
    if report.conflicts:
        logger.warning(f"  Moved by another worker: {', '.join(report.conflicts)}")

    unsaved = [d for d in report.errors if d not in report.failed]
    if unsaved:
        logger.error(f"  Not saved: {', '.join(unsaved)}")
        return 1

    return 0


def ping_journals(args: argparse.Namespace) -> int:
    """Execute the ping command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    journal_store = JsonJournalStore(args.data_dir / "journals")
    whitelist = JsonWhitelistStore(args.data_dir / "whitelist")

    try:
        if args.journal_uuids:
            journals = [journal_store.get(uuid) for uuid in args.journal_uuids]
        else:
            journals = journal_store.all()
    except StoreError as e:
        logger.error(f"Failed to load journals: {e}")
        return 1

    config = {"timeout": args.timeout}
    failed = []

    try:
        with GatewayClient(config) as client:
            ping = Ping(args.min_ojs_version, whitelist, client)
            for journal in journals:
                result = ping.ping(journal)
                if result.has_error:
                    logger.warning(f"{journal.uuid} {journal.url}: {result.error_text}")
                else:
                    logger.info(
                        f"{journal.uuid} {journal.url}: OJS {result.ojs_release}, "
                        f"status {journal.status}"
                    )

                if args.dry_run:
                    ping.discard()
                    continue
                try:
                    journal_store.save(journal)
                    ping.flush()
                except (OSError, StoreError) as e:
                    logger.error(f"Could not save journal {journal.uuid}: {e}")
                    ping.discard()
                    failed.append(journal.uuid)
    except ValueError as e:
        logger.error(f"Failed to ping journals: {e}")
        return 1

    logger.info(f"Pinged {len(journals)} journal(s)")
    if failed:
        logger.error(f"  Not saved: {', '.join(failed)}")
        return 1
    return 0


def show_status(args: argparse.Namespace) -> int:
    """Print the number of deposits in each state as JSON."""
    setup_logging(args.verbose)

    store = JsonDepositStore(args.data_dir / "deposits")
    snapshot = store.snapshot
    counts = {state: len(info["waiting"]) for state, info in snapshot.items()}
    in_process = {
        state: info["in_process"] for state, info in snapshot.items() if info["in_process"]
    }
    print(json.dumps({"deposits": counts, "in_process": in_process}, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="pln-staging",
        description="Process journal deposits and monitor journal health for the PKP PLN",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help=f"Directory holding deposit, journal and whitelist records (default: {DEFAULT_DATA_DIR})",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    for name, factory in STAGES.items():
        stage_parser = subparsers.add_parser(
            name,
            help=factory.__doc__,
            description=factory.__doc__,
        )
        stage_parser.add_argument(
            "deposit_ids",
            nargs="*",
            help="Only process deposits with these ids",
        )
        stage_parser.add_argument(
            "--retry",
            action="store_true",
            help="Retry deposits sitting in the stage's error state",
        )
        stage_parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Do not update deposit state",
        )
        stage_parser.add_argument(
            "--limit",
            type=int,
            default=None,
            help="Process at most this many deposits",
        )
        stage_parser.add_argument(
            "--recover",
            action="store_true",
            help="Release claims left by interrupted runs before processing",
        )
        stage_parser.set_defaults(func=process_stage)

    ping_parser = subparsers.add_parser(
        "ping",
        help="Ping journal gateways and update journal health",
        description="Ping each journal's PLN gateway, record its health, and whitelist journals running a recent OJS release.",
    )
    ping_parser.add_argument(
        "journal_uuids",
        nargs="*",
        help="Only ping journals with these UUIDs",
    )
    ping_parser.add_argument(
        "--min-ojs-version",
        type=str,
        default=DEFAULT_MIN_OJS_VERSION,
        help=f"Oldest OJS release eligible for the whitelist (default: {DEFAULT_MIN_OJS_VERSION})",
    )
    ping_parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT})",
    )
    ping_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Do not save journals or whitelist entries",
    )
    ping_parser.set_defaults(func=ping_journals)

    status_parser = subparsers.add_parser(
        "status",
        help="Show how many deposits are in each state",
    )
    status_parser.set_defaults(func=show_status)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
