import argparse
import asyncio
import getpass
from collections.abc import Sequence
from pathlib import Path

from statement_ledger.config.settings import Settings
from statement_ledger.database.connection import close_pool, init_pool
from statement_ledger.ledger.models import DocumentKind
from statement_ledger.logging.logger import Log
from statement_ledger.persistence.postgres_store import PostgresSnapshotStore
from statement_ledger.session import LedgerSession, build_overview, build_session

SUMMARY = "summary"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="statement-ledger",
        description="Analyze PDF statements and summarize them by billing period.",
    )
    parser.add_argument(
        "kind",
        choices=[*(k.value for k in DocumentKind), SUMMARY],
        help="statement kind to analyze, or 'summary' for the monthly overview of both",
    )
    parser.add_argument("pdfs", nargs="*", type=Path, help="PDF statements to analyze")
    parser.add_argument("--load", action="store_true", help="Restore the saved snapshot first")
    parser.add_argument("--save", action="store_true", help="Save results to the snapshot store")
    parser.add_argument("--import", dest="import_path", type=Path, help="Restore from a .json backup")
    parser.add_argument("--export", dest="export_path", type=Path, help="Write a .json backup")
    parser.add_argument("--cutoff-day", type=int, help="Credit-card billing cutoff day (1-31)")
    args = parser.parse_args(argv)
    if args.kind == SUMMARY and (args.pdfs or args.save or args.export_path):
        parser.error("summary only reads saved results; it takes no PDFs, --save or --export")
    return args


async def _prompt_password() -> str | None:
    """Ask on the terminal; an empty answer or EOF cancels."""
    try:
        password = await asyncio.to_thread(getpass.getpass, "PDF password (empty to skip): ")
    except EOFError:
        return None
    return password or None


def _report(session: LedgerSession) -> None:
    view = session.view()
    for period in view.periods:
        for group in period.institutions:
            subtotals = ", ".join(
                f"{name}={table.subtotal:.2f}" for name, table in group.tables.items()
            )
            Log.info(
                f"{period.period} {group.institution}: {subtotals}",
                statements=group.statement_count,
            )
    if view.total_balance is not None:
        Log.info(f"Current total balance: {view.total_balance:.2f}")


def summarize(settings: Settings, args: argparse.Namespace) -> int:
    """Restore both statement kinds and log the monthly overview."""
    cards = build_session(settings, DocumentKind.CREDIT_CARD)
    banks = build_session(settings, DocumentKind.BANK_STATEMENT)
    if args.cutoff_day is not None:
        cards.set_cutoff_day(args.cutoff_day)
    for session in (cards, banks):
        if args.import_path:
            session.import_file(args.import_path)
        else:
            session.load_snapshot()

    overview = build_overview(cards, banks)
    for month in overview.months:
        Log.info(
            f"{month.period}: income {month.total_income:.2f}, "
            f"bank spending {month.bank_spending:.2f}, card spending {month.card_spending:.2f}, "
            f"balance {month.running_balance:.2f}"
        )
    Log.info(f"Current total balance: {overview.latest_total_balance:.2f}")
    return 0


def run(settings: Settings, args: argparse.Namespace) -> int:
    if args.kind == SUMMARY:
        return summarize(settings, args)
    session = build_session(settings, DocumentKind(args.kind))
    if args.cutoff_day is not None:
        session.set_cutoff_day(args.cutoff_day)
    if args.load:
        session.load_snapshot()
    if args.import_path:
        session.import_file(args.import_path)

    for path in args.pdfs:
        session.upload(path)
    summary = asyncio.run(session.analyze(_prompt_password))

    _report(session)
    if args.save:
        session.save_snapshot()
    if args.export_path:
        session.export_file(args.export_path)
    return 1 if summary.failed else 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: configure -> build the session -> analyze -> report."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    use_database = settings.snapshot_backend.lower() == "postgres"
    if use_database:
        init_pool(settings)
    try:
        if use_database:
            PostgresSnapshotStore(settings.snapshot_key).ensure_schema()
        return run(settings, args)
    finally:
        if use_database:
            close_pool()


if __name__ == "__main__":
    raise SystemExit(main())
