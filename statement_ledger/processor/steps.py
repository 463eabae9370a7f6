import asyncio

from statement_ledger.decryption.resolver import DecryptionResolver
from statement_ledger.extraction.selector import ExtractionModeSelector, InstructionBuilder
from statement_ledger.ledger.fingerprint import fingerprint
from statement_ledger.ledger.store import ResultStore
from statement_ledger.logging.logger import Log
from statement_ledger.processor.exceptions import UnsupportedFormatError
from statement_ledger.processor.file_loader import FileLoader
from statement_ledger.processor.pipeline import PipelineContext, PipelineStep

PDF_HEADER = b"%PDF-"
# some generators emit junk before the header; readers tolerate up to 1 KiB
_HEADER_SEARCH_WINDOW = 1024


class ReadSourceStep(PipelineStep):
    def __init__(self, file_loader: FileLoader) -> None:
        self._file_loader = file_loader

    async def run(self, context: PipelineContext) -> PipelineContext:
        raw_bytes = await asyncio.to_thread(self._file_loader.load, context.entry.source)
        if PDF_HEADER not in raw_bytes[:_HEADER_SEARCH_WINDOW]:
            raise UnsupportedFormatError(f"'{context.entry.display_name}' is not a PDF")
        context.raw_bytes = raw_bytes
        Log.info(f"Loaded {len(raw_bytes)} bytes", entry=context.entry.id)
        return context


class FingerprintStep(PipelineStep):
    async def run(self, context: PipelineContext) -> PipelineContext:
        context.fingerprint = fingerprint(context.raw_bytes)
        context.entry.fingerprint = context.fingerprint
        return context


class OpenDocumentStep(PipelineStep):
    def __init__(self, resolver: DecryptionResolver) -> None:
        self._resolver = resolver

    async def run(self, context: PipelineContext) -> PipelineContext:
        context.document = await self._resolver.open(context.raw_bytes, context.prompt)
        Log.info(
            f"Opened document with {context.document.page_count} pages",
            entry=context.entry.id,
        )
        return context


class BuildPayloadStep(PipelineStep):
    def __init__(
        self,
        selector: ExtractionModeSelector,
        build_instructions: InstructionBuilder,
    ) -> None:
        self._selector = selector
        self._build_instructions = build_instructions

    async def run(self, context: PipelineContext) -> PipelineContext:
        if context.document is None:
            raise ValueError("PipelineContext.document must be set before payload building")
        context.payload = await self._selector.select(
            context.document, context.fingerprint, self._build_instructions
        )
        return context


class CacheLookupStep(PipelineStep):
    """Settles the entry from another entry's result for the same content."""

    def __init__(self, store: ResultStore) -> None:
        self._store = store

    async def run(self, context: PipelineContext) -> PipelineContext:
        cached = self._store.find_cached_result(context.fingerprint, context.entry.id)
        if cached is not None:
            context.cached_from = cached
            Log.info(
                f"Reusing result of {cached.display_name}",
                entry=context.entry.id,
                fingerprint=context.fingerprint[:12],
            )
        return context
