"""Cross-kind monthly overview: income, spending and balances per month."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from statement_ledger.aggregation.balances import latest_per_account
from statement_ledger.aggregation.periods import billing_period
from statement_ledger.ledger.models import (
    OTHER_CATEGORY,
    UNKNOWN_PERIOD,
    BankStatement,
    CreditCardStatement,
)


@dataclass
class MonthSummary:
    period: str
    total_income: float = 0.0
    bank_spending: float = 0.0
    card_spending: float = 0.0
    income_by_category: dict[str, float] = field(default_factory=dict)
    card_spending_by_category: dict[str, float] = field(default_factory=dict)
    # latest ending balance per (institution, account number) within the month
    bank_balances: dict[tuple[str, str | None], float] = field(default_factory=dict)
    # sum of every account's latest balance up to and including this month
    running_balance: float = 0.0


@dataclass
class MonthlyOverview:
    months: list[MonthSummary]
    latest_total_balance: float

    @property
    def total_income(self) -> float:
        return sum(m.total_income for m in self.months)

    @property
    def total_bank_spending(self) -> float:
        return sum(m.bank_spending for m in self.months)

    @property
    def total_card_spending(self) -> float:
        return sum(m.card_spending for m in self.months)

    def month(self, period: str) -> MonthSummary:
        for summary in self.months:
            if summary.period == period:
                return summary
        raise KeyError(period)


def build_monthly_overview(
    bank_records: Iterable[BankStatement],
    card_records: Iterable[CreditCardStatement],
    cutoff_day: int | None = None,
) -> MonthlyOverview:
    """Summarize both statement kinds per month, oldest month first.

    Bank statements use calendar months, credit-card statements the cutoff
    rule. Unknown periods are left out of the overview.
    """
    months: dict[str, MonthSummary] = {}

    def month_for(period: str) -> MonthSummary:
        if period not in months:
            months[period] = MonthSummary(period=period)
        return months[period]

    bank_list = list(bank_records)
    by_month: dict[str, list[BankStatement]] = {}
    for record in bank_list:
        period = billing_period(record.statement_date)
        if period == UNKNOWN_PERIOD:
            continue
        summary = month_for(period)
        for item in record.deposits:
            amount = item.amount or 0.0
            summary.total_income += amount
            category = item.category or OTHER_CATEGORY
            summary.income_by_category[category] = (
                summary.income_by_category.get(category, 0.0) + amount
            )
        summary.bank_spending += sum(item.amount or 0.0 for item in record.withdrawals)
        by_month.setdefault(period, []).append(record)

    for period, records in by_month.items():
        month_for(period).bank_balances = {
            identity: r.ending_balance for identity, r in latest_per_account(records).items()
        }

    for record in card_records:
        period = billing_period(record.statement_date, cutoff_day)
        if period == UNKNOWN_PERIOD:
            continue
        summary = month_for(period)
        for item in record.transactions:
            if item.amount is None or item.amount <= 0:
                continue
            summary.card_spending += item.amount
            category = item.category or OTHER_CATEGORY
            summary.card_spending_by_category[category] = (
                summary.card_spending_by_category.get(category, 0.0) + item.amount
            )

    ordered = [months[p] for p in sorted(months)]
    carried: dict[tuple[str, str | None], float] = {}
    for summary in ordered:
        carried.update(summary.bank_balances)
        summary.running_balance = sum(carried.values())

    latest = latest_per_account(bank_list)
    return MonthlyOverview(
        months=ordered,
        latest_total_balance=sum(r.ending_balance for r in latest.values()),
    )

