import io

import pdfplumber
from pdfminer.pdfdocument import PDFPasswordIncorrect
from pdfplumber.utils.exceptions import PdfminerException

from statement_ledger.pdf.base import BasePdfCodec, PdfDocument
from statement_ledger.pdf.exceptions import PdfCorruptError, PdfPasswordError

_BASE_RESOLUTION = 72


class PdfPlumberDocument(PdfDocument):
    def __init__(self, pdf: pdfplumber.PDF) -> None:
        self._pdf = pdf

    @property
    def page_count(self) -> int:
        return len(self._pdf.pages)

    def extract_page_texts(self) -> list[str]:
        try:
            return [page.extract_text() or "" for page in self._pdf.pages]
        except Exception as exc:
            raise PdfCorruptError(f"pdfplumber text extraction failed: {exc}") from exc

    def render_page(self, index: int, scale: float) -> bytes:
        try:
            page = self._pdf.pages[index]
            image = page.to_image(resolution=int(_BASE_RESOLUTION * scale))
            buffer = io.BytesIO()
            image.original.save(buffer, format="PNG")
            return buffer.getvalue()
        except Exception as exc:
            raise PdfCorruptError(
                f"pdfplumber failed to render page {index}: {exc}"
            ) from exc

    def close(self) -> None:
        self._pdf.close()


class PdfPlumberAdapter(BasePdfCodec):
    """Opens and decrypts PDF documents using pdfplumber (pdfminer.six)."""

    def open(self, pdf_bytes: bytes, password: str | None = None) -> PdfDocument:
        try:
            pdf = pdfplumber.open(io.BytesIO(pdf_bytes), password=password or "")
        except Exception as exc:
            raise self._open_error(exc, password) from exc
        try:
            # pdfminer parses lazily; touching the page list surfaces corruption now
            _ = pdf.pages
        except Exception as exc:
            pdf.close()
            raise self._open_error(exc, password) from exc
        return PdfPlumberDocument(pdf)

    @staticmethod
    def _open_error(exc: Exception, password: str | None) -> PdfPasswordError | PdfCorruptError:
        # pdfplumber wraps the pdfminer error as its first argument
        if isinstance(exc, PdfminerException) and exc.args:
            if isinstance(exc.args[0], PDFPasswordIncorrect):
                return PdfPasswordError(
                    "Password required" if password is None else "Incorrect password"
                )
        return PdfCorruptError(f"pdfplumber could not open document: {exc}")
