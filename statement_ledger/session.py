from pathlib import Path

from statement_ledger.aggregation.aggregator import Aggregator, LedgerView
from statement_ledger.aggregation.overview import MonthlyOverview, build_monthly_overview
from statement_ledger.aggregation.sorting import SortPreferences, SortState, TableId
from statement_ledger.config.settings import Settings
from statement_ledger.decryption.presets import PasswordPresets
from statement_ledger.decryption.resolver import DecryptionResolver, PasswordPrompt
from statement_ledger.extraction.selector import ExtractionModeSelector
from statement_ledger.extraction.text_density import MeaningfulCharCounter
from statement_ledger.inference.client_base import BaseInferenceClient
from statement_ledger.inference.factory import AnalyzerFactory
from statement_ledger.ledger.models import (
    BankStatement,
    CreditCardStatement,
    DocumentEntry,
    DocumentKind,
    DocumentSource,
    LineItem,
    LineItemKey,
    StatementRecord,
)
from statement_ledger.ledger.store import ResultStore
from statement_ledger.logging.logger import Log
from statement_ledger.pdf.factory import PdfCodecFactory
from statement_ledger.persistence.base import BaseSnapshotStore
from statement_ledger.persistence.factory import SnapshotStoreFactory
from statement_ledger.persistence.file_store import export_snapshot, import_snapshot
from statement_ledger.persistence.snapshot import (
    RECORDS_KEY,
    Snapshot,
    build_section,
    merge_section,
    parse_section,
)
from statement_ledger.processor.file_loader import FileLoader
from statement_ledger.processor.queue import AnalysisQueue, QueueRunSummary
from statement_ledger.processor.steps import (
    BuildPayloadStep,
    CacheLookupStep,
    FingerprintStep,
    OpenDocumentStep,
    ReadSourceStep,
)
from statement_ledger.redaction.factory import RedactorFactory


class LedgerSession:
    """One document kind's working set: queue, ledger view, edits and snapshots.

    The snapshot store keeps one section per document kind; saving replaces
    this session's section and leaves the other kind's records alone.
    """

    def __init__(
        self,
        store: ResultStore,
        queue: AnalysisQueue,
        aggregator: Aggregator,
        snapshot_store: BaseSnapshotStore,
        presets: PasswordPresets,
        sort_preferences: SortPreferences | None = None,
    ) -> None:
        self._store = store
        self._queue = queue
        self._aggregator = aggregator
        self._snapshot_store = snapshot_store
        self._presets = presets
        self._sort_preferences = sort_preferences or SortPreferences()

    @property
    def kind(self) -> DocumentKind:
        return self._store.kind

    @property
    def store(self) -> ResultStore:
        return self._store

    @property
    def presets(self) -> PasswordPresets:
        return self._presets

    @property
    def cutoff_day(self) -> int | None:
        return self._aggregator.cutoff_day

    def set_cutoff_day(self, day: int | None) -> None:
        if day is not None and not 1 <= day <= 31:
            raise ValueError(f"Cutoff day must be between 1 and 31, got {day}")
        self._aggregator.cutoff_day = day
        Log.info(f"Cutoff day set to {day}")

    # ------------------------------------------------------------------
    # Queue
    # ------------------------------------------------------------------

    def upload(self, source: Path | bytes, name: str | None = None) -> DocumentEntry:
        if isinstance(source, Path):
            return self._store.ingest_upload(DocumentSource(name=name or source.name, path=source))
        return self._store.ingest_upload(DocumentSource(name=name or "upload.pdf", data=source))

    async def analyze(self, prompt: PasswordPrompt) -> QueueRunSummary:
        return await self._queue.run(prompt)

    def remove(self, entry_id: str) -> None:
        self._store.remove_entry(entry_id)

    def reanalyze(self, entry_id: str) -> None:
        self._store.reanalyze(entry_id)

    def mark_failed(self, entry_id: str) -> None:
        self._store.mark_failed(entry_id)

    # ------------------------------------------------------------------
    # Ledger view and editing
    # ------------------------------------------------------------------

    def view(self) -> LedgerView:
        return self._aggregator.aggregate(self._store.entries, self._sort_preferences)

    def records(self) -> list[StatementRecord]:
        """Successful records in queue order; a billHash is counted once."""
        seen: set[str] = set()
        records: list[StatementRecord] = []
        for entry in self._store.successful_entries():
            record = entry.result
            if record is None or (record.bill_hash and record.bill_hash in seen):
                continue
            if record.bill_hash:
                seen.add(record.bill_hash)
            records.append(record)
        return records

    def toggle_sort(self, table_id: TableId, key: str) -> SortState:
        return self._sort_preferences.toggle(table_id, key)

    def edit(self, key: LineItemKey, field: str, value: str) -> LineItem:
        return self._store.apply_manual_edit(key, field, value)

    def delete(self, key: LineItemKey) -> LineItem:
        return self._store.delete_line_item(key)

    def add_manual_item(self, period: str, institution: str, array_name: str) -> LineItemKey:
        return self._store.add_manual_line_item(
            period, institution, array_name, cutoff_day=self._aggregator.cutoff_day
        )

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def save_snapshot(self) -> int:
        """Write this kind's successful records to the snapshot store.

        Returns the number of records written; nothing is written when there
        are none.
        """
        snapshot, count = self._merged_snapshot()
        if count == 0:
            Log.warning(f"No successful {self.kind} results to save")
            return 0
        self._snapshot_store.save(snapshot)
        Log.info(f"Saved {count} {self.kind} records")
        return count

    def load_snapshot(self) -> int:
        """Replace the queue with the stored records. Returns how many were restored."""
        snapshot = self._snapshot_store.load()
        if snapshot is None:
            return 0
        return self._restore(snapshot)

    def clear_snapshot(self) -> None:
        self._snapshot_store.clear()

    def import_file(self, path: Path) -> int:
        return self._restore(import_snapshot(path))

    def export_file(self, path: Path) -> int:
        snapshot, count = self._merged_snapshot()
        export_snapshot(snapshot, path)
        Log.info(f"Exported {count} {self.kind} records to {path}")
        return count

    def _merged_snapshot(self) -> tuple[Snapshot, int]:
        section = build_section(self._store.entries)
        count = sum(len(group[RECORDS_KEY]) for group in section.values())
        return merge_section(self._snapshot_store.load(), self.kind, section), count

    def _restore(self, snapshot: Snapshot) -> int:
        # parsed in full before the store is touched
        records = parse_section(snapshot.get(self.kind.value), self.kind)
        self._sort_preferences.clear()
        return self._store.restore_from_snapshot(records)


def build_session(
    settings: Settings,
    kind: DocumentKind,
    client: BaseInferenceClient | None = None,
) -> LedgerSession:
    """Build a LedgerSession with all required adapters.

    *client* overrides the inference client chosen by the provider setting.
    """
    store = ResultStore(kind)
    presets = PasswordPresets(settings.password_presets)
    resolver = DecryptionResolver(PdfCodecFactory.create(settings), presets)
    selector = ExtractionModeSelector(
        counter=MeaningfulCharCounter(settings.meaningful_script),
        redactor=RedactorFactory.create(settings),
        threshold=settings.text_sufficiency_threshold,
        render_scale=settings.render_scale,
        contrast_factor=settings.image_contrast_factor,
        jpeg_quality=settings.image_jpeg_quality,
    )
    analyzer = AnalyzerFactory.create(settings, kind, client)
    steps = [
        ReadSourceStep(FileLoader()),
        FingerprintStep(),
        CacheLookupStep(store),
        OpenDocumentStep(resolver),
        BuildPayloadStep(selector, analyzer.build_instructions),
    ]
    return LedgerSession(
        store=store,
        queue=AnalysisQueue(store, steps, analyzer),
        aggregator=Aggregator(kind, settings.cutoff_day),
        snapshot_store=SnapshotStoreFactory.create(settings),
        presets=presets,
    )


def build_overview(cards: LedgerSession, banks: LedgerSession) -> MonthlyOverview:
    """Monthly income, spending and balances across a card and a bank session."""
    if cards.kind is not DocumentKind.CREDIT_CARD or banks.kind is not DocumentKind.BANK_STATEMENT:
        raise ValueError(
            f"Expected a {DocumentKind.CREDIT_CARD} and a {DocumentKind.BANK_STATEMENT} session, "
            f"got {cards.kind} and {banks.kind}"
        )
    return build_monthly_overview(
        bank_records=[r for r in banks.records() if isinstance(r, BankStatement)],
        card_records=[r for r in cards.records() if isinstance(r, CreditCardStatement)],
        cutoff_day=cards.cutoff_day,
    )
