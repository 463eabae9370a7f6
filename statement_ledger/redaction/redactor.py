"""Deterministic redaction of high-risk identifiers before text leaves the process.

Processing flow:
1. Normalize Unicode (NFC).
2. Fold full-width forms to half-width via ICU, keeping a char mapping
   (folded -> original), so "０９１２" is caught like "0912".
3. Detect national IDs, card numbers and mobile phone numbers by regex.
4. Map detected spans back to the original text and merge overlaps.
5. Replace each span with a deterministic placeholder.
"""

from __future__ import annotations

import re
import unicodedata
from typing import ClassVar

import icu  # type: ignore[import-untyped]

from statement_ledger.logging.logger import Log
from statement_ledger.redaction.base import BaseRedactor
from statement_ledger.redaction.exceptions import RedactionError
from statement_ledger.redaction.models import Artifact, RedactionResult


class Redactor(BaseRedactor):
    """Regex redactor for identifiers found on statements. No AI involved."""

    _ICU_TRANSFORM: ClassVar[str] = "Fullwidth-Halfwidth"

    _NATIONAL_ID_RE: ClassVar[re.Pattern[str]] = re.compile(r"[A-Z][12]\d{8}")
    _CARD_NUMBER_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b\d{4}[- ]?\d{4}[- ]?\d{4}[- ]?\d{4}\b",
    )
    _PHONE_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b09\d{2}[- ]?\d{3}[- ]?\d{3}\b",
    )

    _REGEX_RULES: ClassVar[list[tuple[str, re.Pattern[str]]]] = [
        ("NATIONAL_ID", _NATIONAL_ID_RE),
        ("CARD_NUMBER", _CARD_NUMBER_RE),
        ("PHONE", _PHONE_RE),
    ]

    def __init__(self) -> None:
        self._transliterator: icu.Transliterator = icu.Transliterator.createInstance(
            self._ICU_TRANSFORM
        )

    def redact(self, text: str) -> RedactionResult:
        try:
            return self._run(text)
        except RedactionError:
            raise
        except Exception as exc:
            raise RedactionError(f"Redaction failed: {exc}") from exc

    def _run(self, text: str) -> RedactionResult:
        if not text:
            return RedactionResult(redacted_text="")

        normalized = unicodedata.normalize("NFC", text)
        folded, folded_to_orig = self._fold_with_mapping(normalized)

        detections = [
            (entity_type, m.start(), m.end())
            for entity_type, pattern in self._REGEX_RULES
            for m in pattern.finditer(folded)
        ]
        if not detections:
            return RedactionResult(redacted_text=normalized)

        spans = self._map_to_original(detections, folded_to_orig)
        result = self._replace(normalized, spans)
        Log.info(f"Redacted {len(result.artifacts)} identifiers")
        return result

    def _fold_with_mapping(self, text: str) -> tuple[str, list[int]]:
        """Fold *text* char by char; mapping[j] is the index in *text* behind folded char j."""
        parts: list[str] = []
        mapping: list[int] = []
        for orig_idx, ch in enumerate(text):
            folded = self._transliterator.transliterate(ch)
            parts.append(folded)
            mapping.extend([orig_idx] * len(folded))
        return "".join(parts), mapping

    @staticmethod
    def _map_to_original(
        detections: list[tuple[str, int, int]],
        folded_to_orig: list[int],
    ) -> list[tuple[str, int, int]]:
        """Return sorted, non-overlapping (entity_type, orig_start, orig_end)."""
        raw = [
            (entity_type, folded_to_orig[start], folded_to_orig[end - 1] + 1)
            for entity_type, start, end in detections
        ]
        # longer span first when two start together
        raw.sort(key=lambda x: (x[1], -x[2]))

        merged: list[tuple[str, int, int]] = []
        for entity_type, start, end in raw:
            if merged and start < merged[-1][2]:
                prev_type, prev_start, prev_end = merged[-1]
                merged[-1] = (prev_type, prev_start, max(prev_end, end))
            else:
                merged.append((entity_type, start, end))
        return merged

    @staticmethod
    def _replace(original: str, spans: list[tuple[str, int, int]]) -> RedactionResult:
        """Same value -> same placeholder everywhere in the text."""
        counters: dict[str, int] = {}
        placeholders: dict[tuple[str, str], str] = {}
        for entity_type, start, end in spans:
            key = (entity_type, original[start:end])
            if key not in placeholders:
                counters[entity_type] = counters.get(entity_type, 0) + 1
                placeholders[key] = f"{entity_type}_{counters[entity_type]}"

        artifacts: list[Artifact] = []
        result = original
        # right to left keeps earlier offsets valid
        for entity_type, start, end in reversed(spans):
            value = original[start:end]
            placeholder = placeholders[(entity_type, value)]
            result = result[:start] + placeholder + result[end:]
            artifacts.append(Artifact(type=entity_type, original=value, replacement=placeholder))
        artifacts.reverse()

        return RedactionResult(redacted_text=result, artifacts=artifacts)
