from typing import Any

import httpx
import openai

from statement_ledger.extraction.models import ImagePart, PayloadPart, TextPart
from statement_ledger.inference.client_base import BaseInferenceClient
from statement_ledger.inference.exceptions import (
    InferenceBlockedError,
    InferenceError,
    InferenceNetworkError,
)


class OpenAIClientAdapter(BaseInferenceClient):
    """Inference client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    async def create_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        parts: list[PayloadPart],
    ) -> str:
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": self._build_content(parts)})

        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format={"type": "json_object"},
                messages=messages,  # type: ignore[arg-type]
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise InferenceNetworkError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise InferenceNetworkError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise InferenceError("AI returned no choices")
        choice = response.choices[0]
        refusal = getattr(choice.message, "refusal", None)
        if refusal:
            raise InferenceBlockedError(refusal)
        if choice.finish_reason == "content_filter":
            raise InferenceBlockedError("content_filter")
        content = choice.message.content
        if not content:
            raise InferenceError("AI returned empty response")
        return content

    @staticmethod
    def _build_content(parts: list[PayloadPart]) -> list[dict[str, Any]]:
        content: list[dict[str, Any]] = []
        for part in parts:
            if isinstance(part, TextPart):
                content.append({"type": "text", "text": part.text})
            elif isinstance(part, ImagePart):
                content.append(
                    {"type": "image_url", "image_url": {"url": part.image.data_uri}}
                )
        return content
