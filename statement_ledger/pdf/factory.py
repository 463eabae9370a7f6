from statement_ledger.config.settings import Settings
from statement_ledger.pdf.base import BasePdfCodec
from statement_ledger.pdf.pdfplumber_adapter import PdfPlumberAdapter
from statement_ledger.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfCodecFactory:
    """Creates the correct document codec based on settings."""

    ADAPTERS: dict[str, type[BasePdfCodec]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfCodec:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
