"""Chooses between direct text extraction and page images for one document."""

import asyncio
from collections.abc import Callable

from statement_ledger.extraction.models import (
    AnalysisPayload,
    ExtractionMode,
    ImagePart,
    PayloadPart,
    TextPart,
)
from statement_ledger.extraction.text_density import MeaningfulCharCounter
from statement_ledger.imaging.normalizer import PreparedImage, normalize_page_image
from statement_ledger.logging.logger import Log
from statement_ledger.pdf.base import PdfDocument
from statement_ledger.redaction.base import BaseRedactor

InstructionBuilder = Callable[[str], str]

_IMAGE_HINT = (
    "\n\n---\n# Recognition hint\n\n"
    "This document is probably a scan. The text below was extracted from it "
    "and may be partial or garbled; use it only as a hint while reading the "
    "page images.\n\n```\n{partial_text}\n```\n\n---\n# Main task\n\n"
    "Analyze the page images that follow.\n---"
)
_TEXT_BODY = "\n\n---\nStatement text to analyze:\n---\n{text}\n---"


class ExtractionModeSelector:
    """Builds the analysis payload for an opened document.

    Fewer meaningful characters than *threshold* selects IMAGE mode: every
    page is rasterized and normalized, and the partial text rides along as a
    hint. Otherwise TEXT mode sends the redacted text only.
    """

    def __init__(
        self,
        *,
        counter: MeaningfulCharCounter,
        redactor: BaseRedactor,
        threshold: int = 150,
        render_scale: float = 3.0,
        contrast_factor: float = 1.4,
        jpeg_quality: int = 90,
    ) -> None:
        self._counter = counter
        self._redactor = redactor
        self._threshold = threshold
        self._render_scale = render_scale
        self._contrast_factor = contrast_factor
        self._jpeg_quality = jpeg_quality

    async def select(
        self,
        document: PdfDocument,
        fingerprint: str,
        build_instructions: InstructionBuilder,
    ) -> AnalysisPayload:
        page_texts = await asyncio.to_thread(document.extract_page_texts)
        full_text = "\n".join(page_texts)
        meaningful = self._counter.count(full_text)
        instructions = build_instructions(fingerprint)

        if meaningful < self._threshold:
            Log.info(
                f"Only {meaningful} meaningful chars, using page images "
                f"for {document.page_count} pages",
                fingerprint=fingerprint[:12],
            )
            parts: list[PayloadPart] = [
                TextPart(instructions + _IMAGE_HINT.format(partial_text=full_text))
            ]
            for index in range(document.page_count):
                parts.append(ImagePart(await self._prepare_page(document, index)))
            return AnalysisPayload(fingerprint, ExtractionMode.IMAGE, parts)

        redacted = self._redactor.redact(full_text)
        Log.info(
            f"{meaningful} meaningful chars, sending redacted text",
            fingerprint=fingerprint[:12],
        )
        return AnalysisPayload(
            fingerprint,
            ExtractionMode.TEXT,
            [TextPart(instructions + _TEXT_BODY.format(text=redacted.redacted_text))],
        )

    async def _prepare_page(self, document: PdfDocument, index: int) -> PreparedImage:
        raster = await asyncio.to_thread(document.render_page, index, self._render_scale)
        return await asyncio.to_thread(
            normalize_page_image, raster, self._contrast_factor, self._jpeg_quality
        )
