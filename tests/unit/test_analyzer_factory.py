from unittest.mock import patch

import pytest

from statement_ledger.config.settings import Settings
from statement_ledger.extraction.models import AnalysisPayload, ExtractionMode, TextPart
from statement_ledger.inference.analyzer import StatementAnalyzer
from statement_ledger.inference.example_client_adapter import ExampleClientAdapter
from statement_ledger.inference.factory import AnalyzerFactory
from statement_ledger.ledger.models import DocumentKind

_ADAPTER = "statement_ledger.inference.factory.OpenAIClientAdapter"


class TestAnalyzerFactory:
    def test_example_provider_needs_no_model(self) -> None:
        settings = Settings(inference_provider="example")
        analyzer = AnalyzerFactory.create(settings, DocumentKind.CREDIT_CARD)
        assert isinstance(analyzer, StatementAnalyzer)
        assert analyzer.kind is DocumentKind.CREDIT_CARD

    def test_openai_provider(self) -> None:
        settings = Settings(inference_provider="openai", inference_model_name="gpt-4o-mini")
        with patch(_ADAPTER) as adapter_cls:
            AnalyzerFactory.create(settings, DocumentKind.BANK_STATEMENT)
        assert adapter_cls.call_args.kwargs["base_url"] is None

    def test_known_compatible_provider_uses_default_url(self) -> None:
        settings = Settings(inference_provider="gemini", inference_model_name="gemini-2.5-flash")
        with patch(_ADAPTER) as adapter_cls:
            AnalyzerFactory.create(settings, DocumentKind.CREDIT_CARD)
        assert adapter_cls.call_args.kwargs["base_url"] == (
            "https://generativelanguage.googleapis.com/v1beta/openai/"
        )

    def test_base_url_override(self) -> None:
        settings = Settings(
            inference_provider="ollama",
            inference_model_name="llava",
            inference_base_url="http://gpu-box:11434/v1",
        )
        with patch(_ADAPTER) as adapter_cls:
            AnalyzerFactory.create(settings, DocumentKind.CREDIT_CARD)
        assert adapter_cls.call_args.kwargs["base_url"] == "http://gpu-box:11434/v1"

    def test_openai_compatible_requires_base_url(self) -> None:
        settings = Settings(inference_provider="openai_compatible", inference_model_name="m")
        with pytest.raises(ValueError, match="inference_base_url is required"):
            AnalyzerFactory.create(settings, DocumentKind.CREDIT_CARD)

    def test_missing_model_name_raises(self) -> None:
        settings = Settings(inference_provider="openai", inference_model_name="")
        with patch(_ADAPTER), pytest.raises(ValueError, match="inference_model_name"):
            AnalyzerFactory.create(settings, DocumentKind.CREDIT_CARD)

    def test_unknown_provider_raises(self) -> None:
        settings = Settings(inference_provider="nope", inference_model_name="m")
        with pytest.raises(ValueError, match="Unknown inference provider"):
            AnalyzerFactory.create(settings, DocumentKind.CREDIT_CARD)

    async def test_injected_client_replaces_provider_adapter(self) -> None:
        client = ExampleClientAdapter({"bankName": "Esun", "endingBalance": 10})
        settings = Settings(inference_provider="openai", inference_model_name="gpt-4o-mini")
        with patch(_ADAPTER) as adapter_cls:
            analyzer = AnalyzerFactory.create(settings, DocumentKind.BANK_STATEMENT, client)
            record = await analyzer.analyze(
                AnalysisPayload(fingerprint="f", mode=ExtractionMode.TEXT, parts=[TextPart("x")])
            )
        adapter_cls.assert_not_called()
        assert record.institution_name == "Esun"

    def test_injected_client_still_checks_provider(self) -> None:
        settings = Settings(inference_provider="nope", inference_model_name="m")
        with pytest.raises(ValueError, match="Unknown inference provider"):
            AnalyzerFactory.create(settings, DocumentKind.CREDIT_CARD, ExampleClientAdapter())
