"""AI-powered statement analyzer."""

import json
from pathlib import Path
from typing import Any

from statement_ledger.extraction.models import AnalysisPayload
from statement_ledger.inference.client_base import BaseInferenceClient
from statement_ledger.inference.exceptions import InferenceError, InferenceValidationError
from statement_ledger.inference.prompt_loader import build_instructions, load_prompt_template
from statement_ledger.ledger.exceptions import StatementValidationError
from statement_ledger.ledger.models import DocumentKind, StatementRecord
from statement_ledger.ledger.validator import validate_and_build
from statement_ledger.logging.logger import Log


class StatementAnalyzer:
    """Turns an analysis payload into a validated statement record of one kind."""

    def __init__(
        self,
        *,
        client: BaseInferenceClient,
        model: str,
        kind: DocumentKind,
        temperature: float = 0.0,
        prompt_template_path: Path | None = None,
        system_prompt: str = "",
    ) -> None:
        self._client = client
        self._model = model
        self._kind = kind
        self._temperature = max(0.0, min(0.2, temperature))
        self._system_prompt = system_prompt
        self._prompt_template = load_prompt_template(kind, prompt_template_path)

    @property
    def kind(self) -> DocumentKind:
        return self._kind

    def build_instructions(self, fingerprint: str) -> str:
        return build_instructions(self._prompt_template, fingerprint)

    async def analyze(self, payload: AnalysisPayload) -> StatementRecord:
        Log.debug(
            f"Sending {len(payload.parts)} parts ({payload.image_count} images) "
            f"in {payload.mode} mode",
            fingerprint=payload.fingerprint[:12],
        )
        raw_response = await self._client.create_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=self._system_prompt,
            parts=payload.parts,
        )
        Log.debug(f"AI raw response:\n{raw_response}")

        parsed = self._parse_json(raw_response)
        try:
            record = validate_and_build(parsed, self._kind)
        except StatementValidationError as exc:
            raise InferenceValidationError(f"Unexpected statement shape: {exc}") from exc

        Log.info(
            f"Analysis complete: {record.institution_name}, {record.statement_date}",
            fingerprint=payload.fingerprint[:12],
        )
        return record

    @staticmethod
    def _parse_json(raw: str) -> dict[str, Any]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise InferenceError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise InferenceError("JSON response must be an object")
        return parsed
