"""Shared test fixtures for doctable."""

import os
from collections.abc import Generator
from pathlib import Path

import pytest
from sqlalchemy import event, text

from doctable import Collection, DocumentStore, Settings


def _psycopg_available() -> bool:
    """Check if psycopg is installed."""
    try:
        import psycopg  # noqa: F401

        return True
    except ImportError:
        return False


def _postgresql_connectable(url: str) -> bool:
    """Check if we can connect to PostgreSQL."""
    if not _psycopg_available():
        return False
    try:
        from doctable.core.connection import DatabaseConnection

        conn = DatabaseConnection(url)
        result = conn.test_connection()
        conn.close()
        return result
    except Exception:
        return False


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """SQLite file database; schemas are attached files in the same directory."""
    return f"sqlite:///{tmp_path / 'main.db'}"


@pytest.fixture
def store(sqlite_url: str) -> Generator[DocumentStore, None, None]:
    """Document store on a fresh SQLite database."""
    database = DocumentStore(sqlite_url, settings=Settings())
    yield database
    database.close()


@pytest.fixture
def orders(store: DocumentStore) -> Collection:
    """Empty 'shop.orders' collection."""
    return store.create_collection("shop", "orders")


@pytest.fixture
def statements(store: DocumentStore) -> Generator[list[str], None, None]:
    """Records every SQL statement the store's engine executes."""
    executed: list[str] = []

    def record(conn, cursor, statement, parameters, context, executemany) -> None:  # type: ignore[no-untyped-def]
        executed.append(statement)

    engine = store.connection.engine
    event.listen(engine, "before_cursor_execute", record)
    yield executed
    event.remove(engine, "before_cursor_execute", record)


@pytest.fixture
def postgresql_url() -> str:
    """Get PostgreSQL URL from environment or use default.

    Skips when psycopg is missing or the server is unreachable.
    """
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        url = "postgresql://localhost/doctable_test"

    if not _psycopg_available():
        pytest.skip("psycopg not installed")

    if not _postgresql_connectable(url):
        pytest.skip(f"Cannot connect to PostgreSQL at {url}")

    return url


@pytest.fixture
def pg_store(postgresql_url: str) -> Generator[DocumentStore, None, None]:
    """Document store on PostgreSQL; drops the test schemas afterwards."""
    database = DocumentStore(postgresql_url, settings=Settings())
    yield database
    with database.connection.begin() as conn:
        for schema in ("doctable_test", "doctable_test_other"):
            conn.execute(text(f'DROP SCHEMA IF EXISTS "{schema}" CASCADE'))
    database.close()
