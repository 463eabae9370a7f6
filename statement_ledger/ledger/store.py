import calendar
import uuid
from collections.abc import Iterable

from statement_ledger.ledger.exceptions import (
    EntryNotFoundError,
    LineItemNotFoundError,
    UnknownFieldError,
)
from statement_ledger.ledger.models import (
    MANUAL_DESCRIPTION,
    MANUAL_ID_PREFIX,
    OTHER_CATEGORY,
    RECORD_TYPES,
    UNKNOWN_PERIOD,
    DocumentEntry,
    DocumentKind,
    DocumentSource,
    EntryStatus,
    LineItem,
    LineItemKey,
    StatementRecord,
)
from statement_ledger.ledger.numbers import parse_amount_or_zero
from statement_ledger.logging.logger import Log


_NUMERIC_FIELDS = frozenset({"amount", "foreign_amount"})
_TEXT_FIELDS = frozenset({"date", "description", "category", "foreign_currency"})
_FIELD_ALIASES = {"foreignAmount": "foreign_amount", "foreignCurrency": "foreign_currency"}


def synthetic_entry_id(period: str, institution: str) -> str:
    return f"{MANUAL_ID_PREFIX}{period}-{institution}"


class ResultStore:
    """Owns the Document Entry list of one session for one document kind.

    Every other component receives the store and reads or mutates entries
    through it. Nothing here caches totals: aggregation always re-reads the
    entries, so any mutation is reflected on the next aggregate call.
    """

    def __init__(self, kind: DocumentKind) -> None:
        self._kind = kind
        self._entries: list[DocumentEntry] = []

    @property
    def kind(self) -> DocumentKind:
        return self._kind

    @property
    def entries(self) -> list[DocumentEntry]:
        return list(self._entries)

    def get(self, entry_id: str) -> DocumentEntry:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise EntryNotFoundError(f"Entry {entry_id} not found")

    def pending_entries(self) -> list[DocumentEntry]:
        return [e for e in self._entries if e.status is EntryStatus.PENDING]

    def successful_entries(self) -> list[DocumentEntry]:
        return [
            e for e in self._entries
            if e.status is EntryStatus.SUCCESS and e.result is not None
        ]

    # ------------------------------------------------------------------
    # Queue membership
    # ------------------------------------------------------------------

    def ingest_upload(self, source: DocumentSource) -> DocumentEntry:
        """Append a new pending entry for an uploaded document."""
        entry = DocumentEntry(id=f"file-{uuid.uuid4()}", source=source)
        self._entries.append(entry)
        Log.info(f"Queued {source.name}", entry=entry.id)
        return entry

    def restore_from_snapshot(self, records: Iterable[StatementRecord]) -> int:
        """Replace the whole queue with restored, successful entries.

        Records sharing a billHash collapse into one entry. Returns the number
        of entries created.
        """
        restored: list[DocumentEntry] = []
        seen_hashes: set[str] = set()
        for record in records:
            if record.bill_hash:
                if record.bill_hash in seen_hashes:
                    Log.debug(f"Skipping duplicate record {record.bill_hash}")
                    continue
                seen_hashes.add(record.bill_hash)
            entry_id = f"file-loaded-{record.bill_hash or uuid.uuid4()}"
            name = f"Restored: {record.institution_name} ({record.statement_date or 'no date'})"
            restored.append(
                DocumentEntry(
                    id=entry_id,
                    source=DocumentSource(name=name),
                    status=EntryStatus.SUCCESS,
                    fingerprint=record.bill_hash,
                    result=record,
                    is_from_persisted_snapshot=True,
                )
            )
        self._entries = restored
        Log.info(f"Restored {len(restored)} {self._kind} records from snapshot")
        return len(restored)

    def remove_entry(self, entry_id: str) -> None:
        entry = self.get(entry_id)
        self._entries.remove(entry)
        Log.info(f"Removed {entry.display_name}", entry=entry_id)

    def reanalyze(self, entry_id: str) -> None:
        """Send a failed entry back to pending for the next queue run."""
        entry = self.get(entry_id)
        entry.transition(EntryStatus.PENDING)
        entry.result = None
        entry.error_message = ""

    def mark_failed(self, entry_id: str, reason: str = "Marked as failed by user") -> None:
        """Reject a successful result; the entry can then be reanalyzed."""
        entry = self.get(entry_id)
        entry.transition(EntryStatus.ERROR)
        entry.result = None
        entry.error_message = reason

    def find_cached_result(self, fingerprint: str, exclude_id: str) -> DocumentEntry | None:
        """Return another successful entry already holding a result for *fingerprint*.

        Restored entries are preferred over results analyzed in this session.
        """
        candidates = [
            e for e in self.successful_entries()
            if e.id != exclude_id
            and fingerprint in (e.fingerprint, e.result.bill_hash if e.result else None)
        ]
        candidates.sort(key=lambda e: not e.is_from_persisted_snapshot)
        return candidates[0] if candidates else None

    # ------------------------------------------------------------------
    # Line-item editing
    # ------------------------------------------------------------------

    def resolve(self, key: LineItemKey) -> LineItem:
        """Return the line item *key* points at, or raise if the key is stale."""
        items = self._line_items(key.entry_id, key.array_name)
        if not 0 <= key.position < len(items):
            raise LineItemNotFoundError(
                f"No {key.array_name} item at position {key.position} in {key.entry_id}"
            )
        return items[key.position]

    def apply_manual_edit(self, key: LineItemKey, field: str, value: str) -> LineItem:
        """Overwrite one field of one line item with user input.

        Numeric fields are parsed leniently and fall back to 0; text fields
        keep the raw input. No value is ever rejected.
        """
        attribute = _FIELD_ALIASES.get(field, field)
        item = self.resolve(key)
        if attribute in _NUMERIC_FIELDS:
            setattr(item, attribute, parse_amount_or_zero(value))
        elif attribute in _TEXT_FIELDS:
            setattr(item, attribute, value)
        else:
            raise UnknownFieldError(f"Line items have no field '{field}'")
        return item

    def delete_line_item(self, key: LineItemKey) -> LineItem:
        """Remove one item; later positions in the same array shift down by one."""
        items = self._line_items(key.entry_id, key.array_name)
        self.resolve(key)
        return items.pop(key.position)

    def add_manual_line_item(
        self,
        period: str,
        institution: str,
        array_name: str,
        cutoff_day: int | None = None,
    ) -> LineItemKey:
        """Append a blank hand-entered item to the synthetic entry for (period, institution)."""
        if array_name not in RECORD_TYPES[self._kind].line_item_arrays:
            raise UnknownFieldError(f"{self._kind} statements have no '{array_name}' table")
        entry = self._find_or_create_synthetic(period, institution, cutoff_day)
        assert entry.result is not None
        items: list[LineItem] = getattr(entry.result, array_name)
        category = None if array_name == "rewards" else OTHER_CATEGORY
        items.append(LineItem(description=MANUAL_DESCRIPTION, amount=0.0, category=category))
        return LineItemKey(entry.id, array_name, len(items) - 1)

    def _find_or_create_synthetic(
        self, period: str, institution: str, cutoff_day: int | None
    ) -> DocumentEntry:
        synthetic_id = synthetic_entry_id(period, institution)
        for entry in self.successful_entries():
            if synthetic_id in (entry.id, entry.result.bill_hash if entry.result else None):
                return entry

        record_type = RECORD_TYPES[self._kind]
        record = record_type(
            institution_name=institution,
            statement_date=self._synthetic_statement_date(period, cutoff_day),
            bill_hash=synthetic_id,
        )
        entry = DocumentEntry(
            id=synthetic_id,
            source=DocumentSource(name=f"Manual entries - {institution} ({period})"),
            status=EntryStatus.SUCCESS,
            fingerprint=synthetic_id,
            result=record,
            is_from_persisted_snapshot=True,
        )
        self._entries.append(entry)
        Log.info(f"Created manual entry holder for {institution} {period}", entry=entry.id)
        return entry

    def _synthetic_statement_date(self, period: str, cutoff_day: int | None) -> str | None:
        # The date must map back to *period* under the same cutoff rule.
        if period == UNKNOWN_PERIOD:
            return None
        if self._kind is not DocumentKind.CREDIT_CARD or not cutoff_day:
            return f"{period}-01"
        try:
            year, month = (int(part) for part in period.split("-"))
            days_in_month = calendar.monthrange(year, month)[1]
        except (ValueError, calendar.IllegalMonthError):
            return f"{period}-01"
        if cutoff_day <= days_in_month:
            return f"{period}-{cutoff_day:02d}"
        # day 1 of the next month falls before the cutoff, so it rolls back
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
        return f"{year:04d}-{month:02d}-01"

    def _line_items(self, entry_id: str, array_name: str) -> list[LineItem]:
        entry = self.get(entry_id)
        if entry.result is None:
            raise LineItemNotFoundError(f"Entry {entry_id} has no result")
        if array_name not in entry.result.line_item_arrays:
            raise LineItemNotFoundError(
                f"{type(entry.result).__name__} has no '{array_name}' table"
            )
        items: list[LineItem] = getattr(entry.result, array_name)
        return items
