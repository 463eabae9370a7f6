import io
from unittest.mock import MagicMock, PropertyMock, patch

import pytest
from PIL import Image

from statement_ledger.pdf.base import BasePdfCodec
from statement_ledger.pdf.exceptions import PdfCorruptError, PdfPasswordError
from statement_ledger.pdf.pdfplumber_adapter import PdfPlumberAdapter
from statement_ledger.pdf.pymupdf_adapter import PyMuPdfAdapter

ADAPTERS = [PyMuPdfAdapter, PdfPlumberAdapter]


@pytest.fixture(params=ADAPTERS, ids=["pymupdf", "pdfplumber"])
def codec(request: pytest.FixtureRequest) -> BasePdfCodec:
    return request.param()


class TestOpenPlainDocument:
    def test_extracts_text(self, codec: BasePdfCodec, sample_pdf_bytes: bytes) -> None:
        with codec.open(sample_pdf_bytes) as doc:
            assert doc.page_count == 1
            assert "Hello PDF World" in doc.extract_page_texts()[0]

    def test_extracts_every_page(self, codec: BasePdfCodec, multi_page_pdf_bytes: bytes) -> None:
        with codec.open(multi_page_pdf_bytes) as doc:
            texts = doc.extract_page_texts()
        assert len(texts) == 2
        assert "Page one content" in texts[0]
        assert "Page two content" in texts[1]

    def test_blank_page_yields_no_text(self, codec: BasePdfCodec, empty_pdf_bytes: bytes) -> None:
        with codec.open(empty_pdf_bytes) as doc:
            assert doc.extract_page_texts()[0].strip() == ""

    def test_render_page_returns_png(self, codec: BasePdfCodec, sample_pdf_bytes: bytes) -> None:
        with codec.open(sample_pdf_bytes) as doc:
            png = doc.render_page(0, 1.0)
        image = Image.open(io.BytesIO(png))
        assert image.format == "PNG"
        assert image.width > 0

    def test_render_scale_grows_image(self, codec: BasePdfCodec, sample_pdf_bytes: bytes) -> None:
        with codec.open(sample_pdf_bytes) as doc:
            small = Image.open(io.BytesIO(doc.render_page(0, 1.0)))
            large = Image.open(io.BytesIO(doc.render_page(0, 2.0)))
        assert large.width > small.width

    def test_invalid_bytes_raise_corrupt(self, codec: BasePdfCodec) -> None:
        with pytest.raises(PdfCorruptError):
            codec.open(b"not a pdf")


class TestOpenEncryptedDocument:
    def test_without_password(self, codec: BasePdfCodec, encrypted_pdf_bytes: bytes) -> None:
        with pytest.raises(PdfPasswordError, match="Password required"):
            codec.open(encrypted_pdf_bytes)

    def test_wrong_password(self, codec: BasePdfCodec, encrypted_pdf_bytes: bytes) -> None:
        with pytest.raises(PdfPasswordError, match="Incorrect password"):
            codec.open(encrypted_pdf_bytes, "wrong")

    def test_right_password(self, codec: BasePdfCodec, encrypted_pdf_bytes: bytes) -> None:
        with codec.open(encrypted_pdf_bytes, "secret") as doc:
            assert "Locked statement" in doc.extract_page_texts()[0]


class TestPdfPlumberOpenFailure:
    @patch("statement_ledger.pdf.pdfplumber_adapter.pdfplumber.open")
    def test_handle_closed_when_pages_fail(self, mock_open: MagicMock) -> None:
        pdf = MagicMock()
        type(pdf).pages = PropertyMock(side_effect=ValueError("broken xref"))
        mock_open.return_value = pdf

        with pytest.raises(PdfCorruptError, match="broken xref"):
            PdfPlumberAdapter().open(b"%PDF-1.4 broken")

        pdf.close.assert_called_once()
