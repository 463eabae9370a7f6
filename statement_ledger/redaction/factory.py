from statement_ledger.config.settings import Settings
from statement_ledger.redaction.base import BaseRedactor
from statement_ledger.redaction.redactor import Redactor


class RedactorFactory:
    """Creates the configured redaction adapter."""

    @classmethod
    def create(cls, settings: Settings) -> BaseRedactor:
        _ = settings
        return Redactor()
