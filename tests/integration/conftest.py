import os
from collections.abc import Generator

import pytest

from statement_ledger.config.settings import Settings
from statement_ledger.database.connection import close_pool, get_connection, init_pool
from statement_ledger.persistence.postgres_store import PostgresSnapshotStore


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "statement_ledger_test")
    return Settings()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute("SELECT 1")
    except Exception as e:
        close_pool()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        PostgresSnapshotStore().ensure_schema()
        yield
    finally:
        close_pool()


@pytest.fixture
def snapshot_key(integration_pool: None) -> Generator[str, None, None]:
    key = f"test-{os.getpid()}"
    yield key
    PostgresSnapshotStore(key).clear()
