from pathlib import Path

from statement_ledger.config.settings import Settings
from statement_ledger.persistence.base import BaseSnapshotStore
from statement_ledger.persistence.file_store import JsonFileSnapshotStore
from statement_ledger.persistence.postgres_store import PostgresSnapshotStore


class SnapshotStoreFactory:
    """Creates the configured snapshot backend.

    The postgres backend expects the connection pool to be initialized.
    """

    BACKENDS = ("file", "postgres")

    @classmethod
    def create(cls, settings: Settings) -> BaseSnapshotStore:
        backend = settings.snapshot_backend.lower()
        if backend == "file":
            return JsonFileSnapshotStore(Path(settings.snapshot_path))
        if backend == "postgres":
            return PostgresSnapshotStore(settings.snapshot_key)
        raise ValueError(
            f"Unknown snapshot backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
