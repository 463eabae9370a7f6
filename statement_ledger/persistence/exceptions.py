class PersistenceError(Exception):
    """Base exception for snapshot persistence errors."""


class SnapshotFormatError(PersistenceError):
    """Raised when a persisted snapshot is malformed; the reason says where."""


class SnapshotStorageError(PersistenceError):
    """Raised when the snapshot backend cannot be read or written."""
