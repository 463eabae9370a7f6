import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from statement_ledger.extraction.models import AnalysisPayload, ExtractionMode, TextPart
from statement_ledger.inference.analyzer import StatementAnalyzer
from statement_ledger.inference.client_base import BaseInferenceClient
from statement_ledger.inference.exceptions import InferenceError, InferenceValidationError
from statement_ledger.ledger.models import BankStatement, CreditCardStatement, DocumentKind


def _make_payload() -> AnalysisPayload:
    return AnalysisPayload("fp", ExtractionMode.TEXT, [TextPart("statement text")])


def _make_analyzer(
    response: str,
    kind: DocumentKind = DocumentKind.CREDIT_CARD,
    temperature: float = 0.0,
) -> tuple[StatementAnalyzer, MagicMock]:
    client = MagicMock(spec=BaseInferenceClient)
    client.create_completion = AsyncMock(return_value=response)
    analyzer = StatementAnalyzer(client=client, model="m", kind=kind, temperature=temperature)
    return analyzer, client


_CARD_JSON = json.dumps(
    {
        "bankName": "Cathay",
        "billHash": "fp",
        "statementDate": "2025-03-20",
        "totalAmount": 100,
        "transactions": [{"date": "03/01", "description": "Coffee", "amount": 100}],
        "rewards": [],
    }
)


class TestStatementAnalyzer:
    async def test_returns_record(self) -> None:
        analyzer, _ = _make_analyzer(_CARD_JSON)
        record = await analyzer.analyze(_make_payload())
        assert isinstance(record, CreditCardStatement)
        assert record.institution_name == "Cathay"
        assert record.transactions[0].amount == 100.0

    async def test_strips_code_fences(self) -> None:
        analyzer, _ = _make_analyzer(f"```json\n{_CARD_JSON}\n```")
        record = await analyzer.analyze(_make_payload())
        assert record.total_amount == 100.0

    async def test_bank_kind(self) -> None:
        raw = json.dumps({"bankName": "Esun", "endingBalance": 10, "deposits": []})
        analyzer, _ = _make_analyzer(raw, kind=DocumentKind.BANK_STATEMENT)
        record = await analyzer.analyze(_make_payload())
        assert isinstance(record, BankStatement)

    async def test_invalid_json_raises(self) -> None:
        analyzer, _ = _make_analyzer("not json")
        with pytest.raises(InferenceError, match="Invalid JSON"):
            await analyzer.analyze(_make_payload())

    async def test_non_object_json_raises(self) -> None:
        analyzer, _ = _make_analyzer("[1, 2]")
        with pytest.raises(InferenceError, match="must be an object"):
            await analyzer.analyze(_make_payload())

    async def test_wrong_shape_raises_validation_error(self) -> None:
        analyzer, _ = _make_analyzer(json.dumps({"endingBalance": 1, "withdrawals": []}))
        with pytest.raises(InferenceValidationError):
            await analyzer.analyze(_make_payload())

    async def test_temperature_is_clamped(self) -> None:
        analyzer, client = _make_analyzer(_CARD_JSON, temperature=0.9)
        await analyzer.analyze(_make_payload())
        assert client.create_completion.call_args.kwargs["temperature"] == 0.2

    async def test_passes_payload_parts(self) -> None:
        analyzer, client = _make_analyzer(_CARD_JSON)
        payload = _make_payload()
        await analyzer.analyze(payload)
        assert client.create_completion.call_args.kwargs["parts"] == payload.parts

    def test_build_instructions_embeds_fingerprint(self) -> None:
        analyzer, _ = _make_analyzer(_CARD_JSON)
        assert "deadbeef" in analyzer.build_instructions("deadbeef")
