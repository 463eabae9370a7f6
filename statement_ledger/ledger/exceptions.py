class LedgerError(Exception):
    """Base exception for ledger store and record errors."""


class StatementValidationError(LedgerError):
    """Raised when a raw record does not match the statement shape for its kind."""


class EntryNotFoundError(LedgerError):
    """Raised when no entry with the given id exists in the store."""


class LineItemNotFoundError(LedgerError):
    """Raised when a line-item key no longer resolves to an item."""


class UnknownFieldError(LedgerError):
    """Raised when an edit targets a field line items do not have."""


class InvalidTransitionError(LedgerError):
    """Raised when an entry status change is not allowed by the state machine."""
