class PdfError(Exception):
    """Base exception for all document codec errors."""


class PdfPasswordError(PdfError):
    """Raised when a document is encrypted and the password is missing or wrong."""


class PdfCorruptError(PdfError):
    """Raised when a document cannot be parsed or rendered."""
