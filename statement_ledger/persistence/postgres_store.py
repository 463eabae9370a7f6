from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from statement_ledger.database.connection import get_connection
from statement_ledger.logging.logger import Log
from statement_ledger.persistence.base import BaseSnapshotStore
from statement_ledger.persistence.snapshot import Snapshot, validate_snapshot


class PostgresSnapshotStore(BaseSnapshotStore):
    """Keeps snapshots in the ledger_snapshots table, one row per key."""

    def __init__(self, key: str = "default") -> None:
        self._key = key

    def ensure_schema(self) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    CREATE TABLE IF NOT EXISTS ledger_snapshots (
                        key        text PRIMARY KEY,
                        payload    jsonb NOT NULL,
                        updated_at timestamptz NOT NULL DEFAULT now()
                    )
                    """
                )
            conn.commit()

    def save(self, snapshot: Snapshot) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO ledger_snapshots (key, payload, updated_at)
                    VALUES (%s, %s, now())
                    ON CONFLICT (key) DO UPDATE
                    SET payload = EXCLUDED.payload,
                        updated_at = EXCLUDED.updated_at
                    """,
                    (self._key, Jsonb(snapshot)),
                )
            conn.commit()
        Log.info(f"Snapshot '{self._key}' saved to database")

    def load(self) -> Snapshot | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT payload FROM ledger_snapshots WHERE key = %s",
                    (self._key,),
                )
                row = cur.fetchone()

        if row is None:
            Log.info(f"No snapshot '{self._key}' in database")
            return None
        return validate_snapshot(row["payload"])

    def clear(self) -> None:
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM ledger_snapshots WHERE key = %s", (self._key,))
            conn.commit()
        Log.info(f"Snapshot '{self._key}' cleared")
