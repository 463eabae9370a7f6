"""Two-phase analysis of every pending entry in a ResultStore.

Phase A prepares entries one at a time: read, fingerprint, cache lookup,
decrypt and payload building. Phase B sends one inference call per distinct
fingerprint, all at once, and waits for every call to settle. A failure in
either phase marks only the affected entries as errors.
"""

import asyncio
import copy
from collections.abc import Sequence
from dataclasses import dataclass, field

from statement_ledger.decryption.resolver import PasswordPrompt
from statement_ledger.inference.analyzer import StatementAnalyzer
from statement_ledger.ledger.models import DocumentEntry, EntryStatus, StatementRecord
from statement_ledger.ledger.store import ResultStore
from statement_ledger.logging.logger import Log
from statement_ledger.processor.pipeline import PipelineContext, PipelineStep


@dataclass
class QueueRunSummary:
    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    cache_hits: int = 0
    inference_calls: int = 0

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.failed)


class AnalysisQueue:
    def __init__(
        self,
        store: ResultStore,
        steps: Sequence[PipelineStep],
        analyzer: StatementAnalyzer,
    ) -> None:
        self._store = store
        self._steps = list(steps)
        self._analyzer = analyzer

    async def run(self, prompt: PasswordPrompt) -> QueueRunSummary:
        """Process all pending entries. Never raises for a per-document failure."""
        summary = QueueRunSummary()
        pending = self._store.pending_entries()
        if not pending:
            Log.info("No pending documents to analyze")
            return summary

        Log.info(f"Analyzing {len(pending)} pending documents")
        ready: dict[str, list[PipelineContext]] = {}
        for entry in pending:
            context = await self._prepare(entry, prompt, summary)
            if context is not None:
                ready.setdefault(context.fingerprint, []).append(context)

        if ready:
            await self._infer(ready, summary)

        Log.info(
            f"Queue run finished: {len(summary.succeeded)} succeeded, "
            f"{len(summary.failed)} failed, {summary.cache_hits} from cache, "
            f"{summary.inference_calls} inference calls"
        )
        return summary

    async def _prepare(
        self,
        entry: DocumentEntry,
        prompt: PasswordPrompt,
        summary: QueueRunSummary,
    ) -> PipelineContext | None:
        entry.transition(EntryStatus.PROCESSING)
        context = PipelineContext(entry=entry, prompt=prompt)
        try:
            for step in self._steps:
                context = await step.run(context)
                if context.is_settled:
                    break
        except Exception as exc:
            self._fail(entry, exc, summary)
            return None
        finally:
            context.close_document()

        if context.cached_from is not None:
            source = context.cached_from
            self._succeed(entry, copy.deepcopy(source.result), summary)
            entry.is_from_persisted_snapshot = source.is_from_persisted_snapshot
            summary.cache_hits += 1
            return None
        if context.payload is None:
            self._fail(entry, ValueError("No analysis payload was built"), summary)
            return None
        return context

    async def _infer(
        self,
        ready: dict[str, list[PipelineContext]],
        summary: QueueRunSummary,
    ) -> None:
        fingerprints = list(ready)
        summary.inference_calls += len(fingerprints)
        outcomes = await asyncio.gather(
            *(self._analyzer.analyze(ready[fp][0].payload) for fp in fingerprints),  # type: ignore[arg-type]
            return_exceptions=True,
        )
        for fp, outcome in zip(fingerprints, outcomes):
            for position, context in enumerate(ready[fp]):
                if isinstance(outcome, BaseException):
                    self._fail(context.entry, outcome, summary)
                    continue
                record = outcome if position == 0 else copy.deepcopy(outcome)
                self._stamp_bill_hash(record, fp)
                self._succeed(context.entry, record, summary)

    @staticmethod
    def _stamp_bill_hash(record: StatementRecord, fingerprint: str) -> None:
        if record.bill_hash != fingerprint:
            if record.bill_hash:
                Log.warning(
                    f"Model echoed billHash {record.bill_hash[:12]}, "
                    f"replacing with {fingerprint[:12]}"
                )
            record.bill_hash = fingerprint

    @staticmethod
    def _succeed(
        entry: DocumentEntry,
        record: StatementRecord | None,
        summary: QueueRunSummary,
    ) -> None:
        entry.result = record
        entry.error_message = ""
        entry.transition(EntryStatus.SUCCESS)
        summary.succeeded.append(entry.id)

    @staticmethod
    def _fail(entry: DocumentEntry, exc: BaseException, summary: QueueRunSummary) -> None:
        entry.result = None
        entry.error_message = str(exc) or type(exc).__name__
        entry.transition(EntryStatus.ERROR)
        summary.failed.append(entry.id)
        Log.error(
            f"Failed to analyze {entry.display_name}: {type(exc).__name__}: {exc}",
            entry=entry.id,
        )
