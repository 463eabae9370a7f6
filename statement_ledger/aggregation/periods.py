from statement_ledger.aggregation.dates import parse_lenient_date
from statement_ledger.ledger.models import UNKNOWN_PERIOD


def billing_period(statement_date: str | None, cutoff_day: int | None = None) -> str:
    """Return the ``YYYY-MM`` billing period a statement belongs to.

    With a cutoff day, statements dated before it belong to the previous
    month. Unparseable dates map to UNKNOWN_PERIOD.
    """
    parsed = parse_lenient_date(statement_date)
    if parsed is None:
        return UNKNOWN_PERIOD
    year, month = parsed.year, parsed.month
    if cutoff_day and parsed.day < cutoff_day:
        year, month = (year - 1, 12) if month == 1 else (year, month - 1)
    return f"{year:04d}-{month:02d}"


def sort_periods_newest_first(periods: set[str] | list[str]) -> list[str]:
    known = sorted((p for p in periods if p != UNKNOWN_PERIOD), reverse=True)
    if UNKNOWN_PERIOD in periods:
        known.append(UNKNOWN_PERIOD)
    return known
