from abc import ABC, abstractmethod
from types import TracebackType


class PdfDocument(ABC):
    """An opened (and, if needed, decrypted) document handle."""

    @property
    @abstractmethod
    def page_count(self) -> int: ...

    @abstractmethod
    def extract_page_texts(self) -> list[str]:
        """Return the embedded text of every page, in page order.

        Pages with no text layer yield an empty string.
        """

    @abstractmethod
    def render_page(self, index: int, scale: float) -> bytes:
        """Rasterize one zero-based page and return it PNG encoded.

        Raises:
            PdfCorruptError: if the page cannot be rendered.
        """

    @abstractmethod
    def close(self) -> None: ...

    def __enter__(self) -> "PdfDocument":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class BasePdfCodec(ABC):
    """Contract for all document codec adapters."""

    @abstractmethod
    def open(self, pdf_bytes: bytes, password: str | None = None) -> PdfDocument:
        """Open PDF bytes, optionally with a password.

        Args:
            pdf_bytes: Raw PDF file content.
            password: Candidate password, or None to try without one.

        Returns:
            An opened document handle. The caller must close it.

        Raises:
            PdfPasswordError: if the document is encrypted and the password
                is missing or wrong.
            PdfCorruptError: for any other failure to open the document.
        """
