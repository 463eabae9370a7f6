from abc import ABC, abstractmethod

from statement_ledger.persistence.snapshot import Snapshot


class BaseSnapshotStore(ABC):
    """Contract for snapshot storage backends."""

    @abstractmethod
    def save(self, snapshot: Snapshot) -> None:
        """Replace the stored snapshot.

        Raises:
            SnapshotStorageError: if the backend cannot be written.
        """

    @abstractmethod
    def load(self) -> Snapshot | None:
        """Return the stored snapshot, or None if nothing was saved yet.

        Raises:
            SnapshotFormatError: if the stored data is malformed.
            SnapshotStorageError: if the backend cannot be read.
        """

    @abstractmethod
    def clear(self) -> None:
        """Delete the stored snapshot, if any."""
