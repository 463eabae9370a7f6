import json
import os
from pathlib import Path
from typing import Any

from statement_ledger.logging.logger import Log
from statement_ledger.persistence.base import BaseSnapshotStore
from statement_ledger.persistence.exceptions import SnapshotFormatError, SnapshotStorageError
from statement_ledger.persistence.snapshot import Snapshot, validate_snapshot

SNAPSHOT_SUFFIX = ".json"


class JsonFileSnapshotStore(BaseSnapshotStore):
    """Keeps the snapshot in one JSON file, replaced atomically on save."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def save(self, snapshot: Snapshot) -> None:
        _write_json(self._path, snapshot)
        Log.info(f"Snapshot saved to {self._path}")

    def load(self) -> Snapshot | None:
        if not self._path.exists():
            Log.info(f"No snapshot at {self._path}")
            return None
        return validate_snapshot(_read_json(self._path))

    def clear(self) -> None:
        try:
            self._path.unlink(missing_ok=True)
        except OSError as exc:
            raise SnapshotStorageError(f"Cannot delete {self._path}: {exc}") from exc
        Log.info(f"Snapshot {self._path} cleared")


def export_snapshot(snapshot: Snapshot, path: Path) -> None:
    """Write *snapshot* to a standalone ``.json`` file."""
    if path.suffix.lower() != SNAPSHOT_SUFFIX:
        raise SnapshotFormatError(f"Export file must end with {SNAPSHOT_SUFFIX}: {path.name}")
    _write_json(path, snapshot)
    Log.info(f"Snapshot exported to {path}")


def import_snapshot(path: Path) -> Snapshot:
    """Read and validate a standalone ``.json`` snapshot file."""
    if path.suffix.lower() != SNAPSHOT_SUFFIX:
        raise SnapshotFormatError(f"Please choose a {SNAPSHOT_SUFFIX} file: {path.name}")
    if not path.exists():
        raise SnapshotStorageError(f"Snapshot file not found: {path}")
    return validate_snapshot(_read_json(path))


def _read_json(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SnapshotStorageError(f"Cannot read {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise SnapshotFormatError(f"{path.name} is not valid JSON: {exc}") from exc


def _write_json(path: Path, snapshot: Snapshot) -> None:
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(
            json.dumps(snapshot, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        os.replace(tmp_path, path)
    except OSError as exc:
        raise SnapshotStorageError(f"Cannot write {path}: {exc}") from exc
