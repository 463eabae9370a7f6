from abc import ABC, abstractmethod
from dataclasses import dataclass

from statement_ledger.decryption.resolver import PasswordPrompt
from statement_ledger.extraction.models import AnalysisPayload
from statement_ledger.ledger.models import DocumentEntry
from statement_ledger.pdf.base import PdfDocument


@dataclass(slots=True)
class PipelineContext:
    entry: DocumentEntry
    prompt: PasswordPrompt
    raw_bytes: bytes = b""
    fingerprint: str = ""
    document: PdfDocument | None = None
    payload: AnalysisPayload | None = None
    # set when another entry already holds a result for the same content
    cached_from: DocumentEntry | None = None

    @property
    def is_settled(self) -> bool:
        return self.cached_from is not None

    def close_document(self) -> None:
        if self.document is not None:
            self.document.close()
            self.document = None


class PipelineStep(ABC):
    @abstractmethod
    async def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
