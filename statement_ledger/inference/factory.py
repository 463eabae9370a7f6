from typing import ClassVar

from statement_ledger.config.settings import Settings
from statement_ledger.inference.analyzer import StatementAnalyzer
from statement_ledger.inference.client_base import BaseInferenceClient
from statement_ledger.inference.example_client_adapter import ExampleClientAdapter
from statement_ledger.inference.openai_client_adapter import OpenAIClientAdapter
from statement_ledger.ledger.models import DocumentKind


class AnalyzerFactory:
    """Creates the configured statement analyzer."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/",
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(
        cls,
        settings: Settings,
        kind: DocumentKind,
        client: BaseInferenceClient | None = None,
    ) -> StatementAnalyzer:
        """Create a configured analyzer for one statement kind.

        A given *client* is used instead of the one the provider would get.
        """
        provider = settings.inference_provider.lower()
        if provider == "example":
            return StatementAnalyzer(
                client=client or ExampleClientAdapter(),
                model="example",
                kind=kind,
                temperature=0.0,
            )
        base_url = cls._resolve_base_url(provider, settings)
        if client is None:
            client = OpenAIClientAdapter(
                api_key=settings.inference_api_key,
                timeout_seconds=settings.inference_timeout_seconds,
                base_url=base_url,
            )
        return StatementAnalyzer(
            client=client,
            model=cls._resolve_model_name(provider, settings),
            kind=kind,
            temperature=settings.inference_temperature,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        override = settings.inference_base_url.strip()
        if provider == "openai":
            return override or None
        if provider == "openai_compatible":
            if not override:
                raise ValueError(
                    "inference_base_url is required for "
                    "inference_provider=openai_compatible"
                )
            return override
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return override or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown inference provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        model = settings.inference_model_name.strip()
        if not model:
            raise ValueError(
                f"inference_model_name is required for inference_provider={provider}"
            )
        return model
