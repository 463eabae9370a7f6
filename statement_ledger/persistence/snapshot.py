"""Snapshot codec.

A snapshot is a plain JSON-ready mapping::

    {
        "version": 1,
        "creditCard": {"<institution>": {"records": [<record>, ...]}},
        "bankStatement": {"<institution>": {"records": [<record>, ...]}},
    }

Older snapshots without "version", or keeping records under "results", load
unchanged.
"""

import copy
from collections.abc import Iterable
from typing import Any

from statement_ledger.ledger.exceptions import StatementValidationError
from statement_ledger.ledger.models import DocumentEntry, DocumentKind, EntryStatus, StatementRecord
from statement_ledger.ledger.validator import record_to_dict, validate_and_build
from statement_ledger.persistence.exceptions import SnapshotFormatError

SNAPSHOT_VERSION = 1
RECORDS_KEY = "records"
_LEGACY_RECORDS_KEY = "results"

Snapshot = dict[str, Any]
Section = dict[str, dict[str, list[dict[str, Any]]]]


def empty_snapshot() -> Snapshot:
    return {"version": SNAPSHOT_VERSION}


def build_section(entries: Iterable[DocumentEntry]) -> Section:
    """Group successful records by institution; a billHash is written once."""
    section: Section = {}
    seen: set[str] = set()
    for entry in entries:
        record = entry.result
        if entry.status is not EntryStatus.SUCCESS or record is None:
            continue
        if record.bill_hash:
            if record.bill_hash in seen:
                continue
            seen.add(record.bill_hash)
        group = section.setdefault(record.institution_name, {RECORDS_KEY: []})
        group[RECORDS_KEY].append(record_to_dict(record))
    return section


def validate_snapshot(raw: Any) -> Snapshot:
    """Check the top-level shape of a loaded snapshot.

    Raises:
        SnapshotFormatError: if the snapshot is not an object, comes from a
            newer format version, or holds a section that is not an object.
    """
    if not isinstance(raw, dict):
        raise SnapshotFormatError("Snapshot must be a JSON object")
    version = raw.get("version", SNAPSHOT_VERSION)
    if not isinstance(version, int) or isinstance(version, bool):
        raise SnapshotFormatError(f"Snapshot version must be an integer, got {version!r}")
    if version > SNAPSHOT_VERSION:
        raise SnapshotFormatError(
            f"Snapshot version {version} is newer than supported version {SNAPSHOT_VERSION}"
        )
    for kind in DocumentKind:
        section = raw.get(kind.value)
        if section is not None and not isinstance(section, dict):
            raise SnapshotFormatError(f"Section '{kind}' must be an object")
    return raw


def parse_section(raw: Any, kind: DocumentKind) -> list[StatementRecord]:
    """Validate one kind's section and return its records in file order.

    Raises:
        SnapshotFormatError: naming the institution and record that failed.
    """
    if raw is None:
        return []
    if not isinstance(raw, dict):
        raise SnapshotFormatError(f"Section '{kind}' must be an object")

    records: list[StatementRecord] = []
    for institution, group in raw.items():
        if not isinstance(group, dict):
            raise SnapshotFormatError(f"{kind}/{institution}: group must be an object")
        items = group.get(RECORDS_KEY, group.get(_LEGACY_RECORDS_KEY))
        if not isinstance(items, list):
            raise SnapshotFormatError(f"{kind}/{institution}: missing '{RECORDS_KEY}' list")
        for index, item in enumerate(items):
            if isinstance(item, dict) and not item.get("bankName"):
                item = {**item, "bankName": institution}
            try:
                records.append(validate_and_build(item, kind))
            except StatementValidationError as exc:
                raise SnapshotFormatError(
                    f"{kind}/{institution} record {index}: {exc}"
                ) from exc
    return records


def merge_section(snapshot: Snapshot | None, kind: DocumentKind, section: Section) -> Snapshot:
    """Return a copy of *snapshot* with *kind*'s section replaced; other kinds are kept."""
    merged = copy.deepcopy(snapshot) if snapshot else empty_snapshot()
    merged["version"] = SNAPSHOT_VERSION
    merged[kind.value] = section
    return merged
