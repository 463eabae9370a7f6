from statement_ledger.ledger.models import DocumentSource
from statement_ledger.processor.exceptions import FileReadError


class FileLoader:
    """Reads the raw bytes behind a document source."""

    def load(self, source: DocumentSource) -> bytes:
        """Return in-memory bytes, or read them from the source path.

        Raises:
            FileReadError: if the source has neither bytes nor a readable path.
        """
        if source.data is not None:
            return source.data
        if source.path is None:
            raise FileReadError(f"Document '{source.name}' has no content")
        try:
            return source.path.read_bytes()
        except OSError as exc:
            raise FileReadError(f"Cannot read {source.path}: {exc}") from exc
