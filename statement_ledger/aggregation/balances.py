from collections.abc import Iterable
from datetime import date

from statement_ledger.aggregation.dates import parse_lenient_date
from statement_ledger.ledger.models import BankStatement


def account_identity(record: BankStatement) -> tuple[str, str | None]:
    return record.institution_name, record.account_number


def latest_per_account(
    records: Iterable[BankStatement],
) -> dict[tuple[str, str | None], BankStatement]:
    """Keep only the most recent statement of every account.

    Undated statements count as the oldest; on equal dates the first one seen stays.
    Holders of hand-entered rows carry no balance and are skipped.
    """
    latest: dict[tuple[str, str | None], BankStatement] = {}
    for record in records:
        if record.is_manual:
            continue
        identity = account_identity(record)
        current = latest.get(identity)
        if current is None or _statement_day(record) > _statement_day(current):
            latest[identity] = record
    return latest


def current_total_balance(records: Iterable[BankStatement]) -> float:
    """Sum of ending balances across accounts, one latest statement per account."""
    return sum(r.ending_balance for r in latest_per_account(records).values())


def _statement_day(record: BankStatement) -> date:
    return parse_lenient_date(record.statement_date) or date.min
