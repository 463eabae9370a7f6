class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class FileReadError(ProcessorError):
    """Raised when a document's bytes cannot be read."""


class UnsupportedFormatError(ProcessorError):
    """Raised when a document is not a PDF."""
