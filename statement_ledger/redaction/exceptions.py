class RedactionError(Exception):
    """Raised when redaction of extracted text fails."""
