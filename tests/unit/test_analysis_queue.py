import json
from unittest.mock import AsyncMock, MagicMock

from statement_ledger.decryption.presets import PasswordPresets
from statement_ledger.decryption.resolver import DecryptionResolver
from statement_ledger.extraction.selector import ExtractionModeSelector
from statement_ledger.extraction.text_density import MeaningfulCharCounter
from statement_ledger.inference.analyzer import StatementAnalyzer
from statement_ledger.inference.client_base import BaseInferenceClient
from statement_ledger.inference.exceptions import InferenceNetworkError
from statement_ledger.ledger.fingerprint import fingerprint
from statement_ledger.ledger.models import (
    CreditCardStatement,
    DocumentKind,
    DocumentSource,
    EntryStatus,
)
from statement_ledger.ledger.store import ResultStore
from statement_ledger.pdf.pymupdf_adapter import PyMuPdfAdapter
from statement_ledger.processor.file_loader import FileLoader
from statement_ledger.processor.queue import AnalysisQueue
from statement_ledger.processor.steps import (
    BuildPayloadStep,
    CacheLookupStep,
    FingerprintStep,
    OpenDocumentStep,
    ReadSourceStep,
)
from statement_ledger.redaction.redactor import Redactor

_CARD_RESPONSE = {
    "bankName": "Cathay",
    "billHash": None,
    "statementDate": "2025-03-20",
    "totalAmount": 100,
    "transactions": [{"date": "03/01", "description": "Coffee", "amount": 100}],
    "rewards": [],
}


def _make_client(response: dict[str, object] | None = None) -> MagicMock:
    client = MagicMock(spec=BaseInferenceClient)
    client.create_completion = AsyncMock(return_value=json.dumps(response or _CARD_RESPONSE))
    return client


def _make_queue(
    store: ResultStore,
    client: MagicMock,
    presets: PasswordPresets | None = None,
) -> AnalysisQueue:
    analyzer = StatementAnalyzer(client=client, model="m", kind=store.kind)
    selector = ExtractionModeSelector(
        counter=MeaningfulCharCounter(),
        redactor=Redactor(),
        threshold=0,
    )
    resolver = DecryptionResolver(PyMuPdfAdapter(), presets or PasswordPresets())
    steps = [
        ReadSourceStep(FileLoader()),
        FingerprintStep(),
        CacheLookupStep(store),
        OpenDocumentStep(resolver),
        BuildPayloadStep(selector, analyzer.build_instructions),
    ]
    return AnalysisQueue(store, steps, analyzer)


def _make_prompt(answers: list[str | None]) -> tuple[AsyncMock, list[str | None]]:
    remaining = list(answers)
    prompt = AsyncMock(side_effect=lambda: remaining.pop(0))
    return prompt, remaining


def _upload(store: ResultStore, name: str, data: bytes) -> str:
    return store.ingest_upload(DocumentSource(name=name, data=data)).id


class TestAnalysisQueue:
    async def test_no_pending_entries(self) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        client = _make_client()
        summary = await _make_queue(store, client).run(AsyncMock())
        assert summary.processed == 0
        client.create_completion.assert_not_awaited()

    async def test_successful_entry_gets_record(self, sample_pdf_bytes: bytes) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        entry_id = _upload(store, "a.pdf", sample_pdf_bytes)
        summary = await _make_queue(store, _make_client()).run(AsyncMock())
        entry = store.get(entry_id)
        assert entry.status is EntryStatus.SUCCESS
        assert summary.succeeded == [entry_id]
        assert entry.result is not None
        assert entry.result.bill_hash == fingerprint(sample_pdf_bytes)

    async def test_cancelled_password_fails_only_that_entry(
        self,
        sample_pdf_bytes: bytes,
        encrypted_pdf_bytes: bytes,
        multi_page_pdf_bytes: bytes,
    ) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        first = _upload(store, "a.pdf", sample_pdf_bytes)
        locked = _upload(store, "locked.pdf", encrypted_pdf_bytes)
        third = _upload(store, "c.pdf", multi_page_pdf_bytes)
        prompt, _ = _make_prompt([None])

        summary = await _make_queue(store, _make_client()).run(prompt)

        assert store.get(first).status is EntryStatus.SUCCESS
        assert store.get(third).status is EntryStatus.SUCCESS
        assert store.get(locked).status is EntryStatus.ERROR
        assert "cancelled" in store.get(locked).error_message
        assert summary.failed == [locked]
        assert summary.inference_calls == 2

    async def test_prompted_password_unlocks(self, encrypted_pdf_bytes: bytes) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        entry_id = _upload(store, "locked.pdf", encrypted_pdf_bytes)
        prompt, remaining = _make_prompt(["wrong", "secret"])
        await _make_queue(store, _make_client()).run(prompt)
        assert store.get(entry_id).status is EntryStatus.SUCCESS
        assert remaining == []

    async def test_preset_password_skips_prompt(self, encrypted_pdf_bytes: bytes) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        entry_id = _upload(store, "locked.pdf", encrypted_pdf_bytes)
        prompt = AsyncMock()
        await _make_queue(store, _make_client(), PasswordPresets(["secret"])).run(prompt)
        assert store.get(entry_id).status is EntryStatus.SUCCESS
        prompt.assert_not_awaited()

    async def test_duplicate_content_one_inference_call(self, sample_pdf_bytes: bytes) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        first = _upload(store, "a.pdf", sample_pdf_bytes)
        second = _upload(store, "copy of a.pdf", sample_pdf_bytes)
        client = _make_client()

        summary = await _make_queue(store, client).run(AsyncMock())

        assert client.create_completion.await_count == 1
        assert summary.inference_calls == 1
        a, b = store.get(first), store.get(second)
        assert a.status is b.status is EntryStatus.SUCCESS
        assert a.result == b.result
        assert a.result is not b.result

    async def test_restored_result_is_reused(self, sample_pdf_bytes: bytes) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        store.restore_from_snapshot(
            [CreditCardStatement(institution_name="Saved", bill_hash=fingerprint(sample_pdf_bytes))]
        )
        entry_id = _upload(store, "a.pdf", sample_pdf_bytes)
        client = _make_client()

        summary = await _make_queue(store, client).run(AsyncMock())

        client.create_completion.assert_not_awaited()
        assert summary.cache_hits == 1
        entry = store.get(entry_id)
        assert entry.status is EntryStatus.SUCCESS
        assert entry.is_from_persisted_snapshot
        assert entry.result is not None
        assert entry.result.institution_name == "Saved"

    async def test_inference_failure_marks_entry(self, sample_pdf_bytes: bytes) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        entry_id = _upload(store, "a.pdf", sample_pdf_bytes)
        client = MagicMock(spec=BaseInferenceClient)
        client.create_completion = AsyncMock(side_effect=InferenceNetworkError("down"))

        summary = await _make_queue(store, client).run(AsyncMock())

        entry = store.get(entry_id)
        assert entry.status is EntryStatus.ERROR
        assert entry.result is None
        assert entry.error_message == "down"
        assert summary.failed == [entry_id]

    async def test_non_pdf_fails(self) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        entry_id = _upload(store, "notes.txt", b"hello")
        await _make_queue(store, _make_client()).run(AsyncMock())
        assert store.get(entry_id).status is EntryStatus.ERROR

    async def test_echoed_hash_is_replaced(self, sample_pdf_bytes: bytes) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        entry_id = _upload(store, "a.pdf", sample_pdf_bytes)
        client = _make_client({**_CARD_RESPONSE, "billHash": "made-up"})
        await _make_queue(store, client).run(AsyncMock())
        result = store.get(entry_id).result
        assert result is not None
        assert result.bill_hash == fingerprint(sample_pdf_bytes)

    async def test_failed_entry_can_be_reanalyzed(self, sample_pdf_bytes: bytes) -> None:
        store = ResultStore(DocumentKind.CREDIT_CARD)
        entry_id = _upload(store, "a.pdf", sample_pdf_bytes)
        client = MagicMock(spec=BaseInferenceClient)
        client.create_completion = AsyncMock(
            side_effect=[InferenceNetworkError("down"), json.dumps(_CARD_RESPONSE)]
        )
        queue = _make_queue(store, client)

        await queue.run(AsyncMock())
        store.reanalyze(entry_id)
        await queue.run(AsyncMock())

        assert store.get(entry_id).status is EntryStatus.SUCCESS
