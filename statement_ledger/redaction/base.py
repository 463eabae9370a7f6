from abc import ABC, abstractmethod

from statement_ledger.redaction.models import RedactionResult


class BaseRedactor(ABC):
    """Contract for all redaction adapters."""

    @abstractmethod
    def redact(self, text: str) -> RedactionResult:
        """Replace high-risk identifiers in text with labeled placeholders.

        Args:
            text: Plain text extracted from a statement.

        Returns:
            RedactionResult with redacted text and artifact list.

        Raises:
            RedactionError: on any failure.
        """
