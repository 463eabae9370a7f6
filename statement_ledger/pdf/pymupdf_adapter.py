import pymupdf

from statement_ledger.pdf.base import BasePdfCodec, PdfDocument
from statement_ledger.pdf.exceptions import PdfCorruptError, PdfPasswordError


class PyMuPdfDocument(PdfDocument):
    def __init__(self, doc: pymupdf.Document) -> None:
        self._doc = doc

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def extract_page_texts(self) -> list[str]:
        try:
            return [page.get_text() for page in self._doc]
        except Exception as exc:
            raise PdfCorruptError(f"pymupdf text extraction failed: {exc}") from exc

    def render_page(self, index: int, scale: float) -> bytes:
        try:
            page = self._doc[index]
            pixmap = page.get_pixmap(matrix=pymupdf.Matrix(scale, scale))
            return pixmap.tobytes("png")
        except Exception as exc:
            raise PdfCorruptError(f"pymupdf failed to render page {index}: {exc}") from exc

    def close(self) -> None:
        self._doc.close()


class PyMuPdfAdapter(BasePdfCodec):
    """Opens, decrypts and rasterizes PDF documents using PyMuPDF."""

    def open(self, pdf_bytes: bytes, password: str | None = None) -> PdfDocument:
        try:
            doc = pymupdf.open(stream=pdf_bytes, filetype="pdf")  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise PdfCorruptError(f"pymupdf could not open document: {exc}") from exc

        if doc.needs_pass:
            # authenticate() returns 0 on failure
            if password is None or not doc.authenticate(password):
                doc.close()
                raise PdfPasswordError(
                    "Password required" if password is None else "Incorrect password"
                )
        return PyMuPdfDocument(doc)
