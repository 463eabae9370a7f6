"""Groups successful entries into billing period, institution and table.

Everything here is recomputed from the entries on each call; no total is
stored between calls.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from statement_ledger.aggregation.balances import current_total_balance
from statement_ledger.aggregation.periods import billing_period, sort_periods_newest_first
from statement_ledger.aggregation.sorting import SortPreferences, SortState, TableId, sort_rows
from statement_ledger.ledger.models import (
    OTHER_CATEGORY,
    BankStatement,
    CreditCardStatement,
    DocumentEntry,
    DocumentKind,
    EntryStatus,
    LineItem,
    LineItemKey,
    StatementRecord,
    line_item_arrays,
)

# tables whose positive amounts are broken down by category per period
BREAKDOWN_ARRAYS: dict[DocumentKind, tuple[str, ...]] = {
    DocumentKind.CREDIT_CARD: ("transactions",),
    DocumentKind.BANK_STATEMENT: ("withdrawals", "deposits"),
}


@dataclass
class LedgerRow:
    key: LineItemKey
    item: LineItem


@dataclass
class LedgerTable:
    table_id: TableId
    rows: list[LedgerRow]
    sort_state: SortState | None = None

    @property
    def subtotal(self) -> float:
        return sum(row.item.amount or 0.0 for row in self.rows)


@dataclass
class InstitutionGroup:
    institution: str
    tables: dict[str, LedgerTable]
    entry_ids: list[str] = field(default_factory=list)
    # sum of totalAmount (credit card) or endingBalance (bank)
    statement_total: float = 0.0

    @property
    def statement_count(self) -> int:
        return len(self.entry_ids)


@dataclass
class CategoryBreakdown:
    total: float = 0.0
    by_category: dict[str, float] = field(default_factory=dict)

    def add(self, item: LineItem) -> None:
        if item.amount is None or item.amount <= 0:
            return
        category = item.category or OTHER_CATEGORY
        self.total += item.amount
        self.by_category[category] = self.by_category.get(category, 0.0) + item.amount


@dataclass
class BillingPeriodGroup:
    period: str
    institutions: list[InstitutionGroup]
    breakdowns: dict[str, CategoryBreakdown]

    def institution(self, name: str) -> InstitutionGroup:
        for group in self.institutions:
            if group.institution == name:
                return group
        raise KeyError(name)


@dataclass
class LedgerView:
    kind: DocumentKind
    periods: list[BillingPeriodGroup]
    # bank statements only
    total_balance: float | None = None

    def period(self, key: str) -> BillingPeriodGroup:
        for group in self.periods:
            if group.period == key:
                return group
        raise KeyError(key)

    def table(self, table_id: TableId) -> LedgerTable:
        return self.period(table_id.period).institution(table_id.institution).tables[
            table_id.array_name
        ]


class Aggregator:
    """Pure function of the entry list to a LedgerView.

    The cutoff day only shifts credit-card statements; bank statements are
    always grouped by their calendar month.
    """

    def __init__(self, kind: DocumentKind, cutoff_day: int | None = None) -> None:
        self._kind = kind
        self._cutoff_day = cutoff_day

    @property
    def cutoff_day(self) -> int | None:
        return self._cutoff_day

    @cutoff_day.setter
    def cutoff_day(self, value: int | None) -> None:
        self._cutoff_day = value

    def period_of(self, record: StatementRecord) -> str:
        cutoff = self._cutoff_day if self._kind is DocumentKind.CREDIT_CARD else None
        return billing_period(record.statement_date, cutoff)

    def aggregate(
        self,
        entries: Iterable[DocumentEntry],
        sort_preferences: SortPreferences | None = None,
    ) -> LedgerView:
        counted = self._counted_entries(entries)

        by_period: dict[str, dict[str, list[DocumentEntry]]] = {}
        for entry in counted:
            assert entry.result is not None
            period = self.period_of(entry.result)
            institution = entry.result.institution_name
            by_period.setdefault(period, {}).setdefault(institution, []).append(entry)

        periods = [
            self._build_period(period, by_period[period], sort_preferences)
            for period in sort_periods_newest_first(list(by_period))
        ]

        total_balance = None
        if self._kind is DocumentKind.BANK_STATEMENT:
            total_balance = current_total_balance(
                e.result for e in counted if isinstance(e.result, BankStatement)
            )
        return LedgerView(kind=self._kind, periods=periods, total_balance=total_balance)

    def _counted_entries(self, entries: Iterable[DocumentEntry]) -> list[DocumentEntry]:
        """Successful entries of this kind; a billHash is counted once."""
        seen: set[str] = set()
        counted: list[DocumentEntry] = []
        for entry in entries:
            record = entry.result
            if entry.status is not EntryStatus.SUCCESS or record is None:
                continue
            if record.kind is not self._kind:
                continue
            if record.bill_hash:
                if record.bill_hash in seen:
                    continue
                seen.add(record.bill_hash)
            counted.append(entry)
        return counted

    def _build_period(
        self,
        period: str,
        institutions: dict[str, list[DocumentEntry]],
        sort_preferences: SortPreferences | None,
    ) -> BillingPeriodGroup:
        breakdowns = {name: CategoryBreakdown() for name in BREAKDOWN_ARRAYS[self._kind]}
        groups: list[InstitutionGroup] = []
        for institution in sorted(institutions):
            entries = institutions[institution]
            groups.append(self._build_institution(period, institution, entries, sort_preferences))
            for entry in entries:
                for array_name, breakdown in breakdowns.items():
                    for item in getattr(entry.result, array_name):
                        breakdown.add(item)
        return BillingPeriodGroup(period=period, institutions=groups, breakdowns=breakdowns)

    def _build_institution(
        self,
        period: str,
        institution: str,
        entries: list[DocumentEntry],
        sort_preferences: SortPreferences | None,
    ) -> InstitutionGroup:
        tables: dict[str, LedgerTable] = {}
        for array_name in line_item_arrays(self._kind):
            table_id = TableId(period, institution, array_name)
            # keys are derived fresh from current positions on every call
            rows = [
                (LineItemKey(entry.id, array_name, position), item)
                for entry in entries
                for position, item in enumerate(getattr(entry.result, array_name))
            ]
            state = sort_preferences.get(table_id) if sort_preferences else None
            tables[array_name] = LedgerTable(
                table_id=table_id,
                rows=[LedgerRow(key, item) for key, item in sort_rows(rows, state)],
                sort_state=state,
            )

        group = InstitutionGroup(institution=institution, tables=tables)
        for entry in entries:
            group.entry_ids.append(entry.id)
            group.statement_total += _statement_total(entry.result)
        return group


def _statement_total(record: StatementRecord | None) -> float:
    if isinstance(record, CreditCardStatement):
        return record.total_amount
    if isinstance(record, BankStatement):
        return record.ending_balance
    return 0.0
