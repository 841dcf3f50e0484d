"""Bootstrap of schemas, metadata tables and collection tables.

Layout per logical database:
- schema ``"<database>"`` (an attached file on SQLite)
- ``"<database>"."_meta"``: one row per collection with its running byte size
- ``"<database>"."<table>"``: one table per collection, ``(id, data)``

The collection adapter never creates or drops schemas or metadata rows;
everything structural lives here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import Connection, text
from sqlalchemy.exc import SQLAlchemyError

from doctable.exceptions import PersistenceError
from doctable.naming import (
    META_TABLE_NAME,
    primary_key_name,
    qualified_meta_table_name,
    qualified_table_name,
    quote_identifier,
    table_name,
)

if TYPE_CHECKING:
    from doctable.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)


class TableManager:
    """Manages DDL for collection tables and per-database metadata tables."""

    def __init__(self, connection: DatabaseConnection) -> None:
        """Initialize table manager.

        Args:
            connection: Connection source
        """
        self._connection = connection
        self._is_postgresql = connection.is_postgresql

    def ensure_database(self, database_name: str) -> None:
        """Create the schema and metadata table of a database if missing.

        Idempotent - safe to call multiple times.
        """
        schema = self._connection.register_schema(database_name)
        meta_table = qualified_meta_table_name(database_name)
        statements: list[str | tuple[str, dict[str, object]]] = []
        if self._is_postgresql:
            statements.append(f"CREATE SCHEMA IF NOT EXISTS {quote_identifier(schema)}")
        statements.append(
            f"CREATE TABLE IF NOT EXISTS {meta_table} ("
            "collection_name TEXT NOT NULL PRIMARY KEY, "
            "datasize BIGINT NOT NULL DEFAULT 0)"
        )
        self._run("create database", schema, statements)

    def create_collection(
        self, database_name: str, collection_name: str, if_not_exists: bool = False
    ) -> str:
        """Create the table of a collection and its metadata record.

        Args:
            database_name: Logical database
            collection_name: Logical collection
            if_not_exists: Skip creation if the table already exists

        Returns:
            The schema-qualified table name
        """
        self.ensure_database(database_name)
        physical = table_name(collection_name)
        qualified = qualified_table_name(database_name, collection_name)
        pk = quote_identifier(primary_key_name(physical))
        exists_clause = "IF NOT EXISTS " if if_not_exists else ""

        if self._is_postgresql:
            create = (
                f"CREATE TABLE {exists_clause}{qualified} ("
                f"id BIGSERIAL CONSTRAINT {pk} PRIMARY KEY, "
                "data json NOT NULL)"
            )
        else:
            # AUTOINCREMENT keeps positions from being reused after deletes
            create = (
                f"CREATE TABLE {exists_clause}{qualified} ("
                f"id INTEGER CONSTRAINT {pk} PRIMARY KEY AUTOINCREMENT, "
                "data TEXT NOT NULL)"
            )
        register = (
            f"INSERT INTO {qualified_meta_table_name(database_name)} (collection_name, datasize)"
            " VALUES (:name, 0) ON CONFLICT (collection_name) DO NOTHING"
        )
        self._run("create collection", qualified, [create, (register, {"name": collection_name})])
        logger.info(f"Created collection table {qualified}")
        return qualified

    def table_exists(self, database_name: str, collection_name: str) -> bool:
        """Check if the table of a collection exists."""
        schema = self._connection.register_schema(database_name)
        physical = table_name(collection_name)
        try:
            return self._has_table(schema, physical)
        except SQLAlchemyError as e:
            raise PersistenceError("look up table", f"{schema}.{physical}", e) from e

    def list_collections(self, database_name: str) -> list[str]:
        """Collections registered in a database's metadata table."""
        schema = self._connection.register_schema(database_name)
        meta_table = qualified_meta_table_name(database_name)
        try:
            if not self._has_table(schema, META_TABLE_NAME):
                return []
            with self._connection.connect() as conn:
                result = conn.execute(
                    text(f"SELECT collection_name FROM {meta_table} ORDER BY collection_name")
                )
                return [row[0] for row in result]
        except SQLAlchemyError as e:
            raise PersistenceError("list collections of", meta_table, e) from e

    def delete_metadata(self, database_name: str, collection_name: str) -> None:
        """Remove the metadata record of a dropped collection."""
        meta_table = qualified_meta_table_name(database_name)
        self._run(
            "delete metadata in",
            meta_table,
            [
                (
                    f"DELETE FROM {meta_table} WHERE collection_name = :name",
                    {"name": collection_name},
                )
            ],
        )

    def rename_metadata(
        self,
        database_name: str,
        old_name: str,
        new_name: str,
        conn: Connection | None = None,
    ) -> None:
        """Move the metadata record of a renamed collection to its new name.

        With ``conn`` the update joins the caller's open transaction.
        """
        meta_table = qualified_meta_table_name(database_name)
        self._run(
            "rename metadata in",
            meta_table,
            [
                (
                    f"UPDATE {meta_table} SET collection_name = :new WHERE collection_name = :old",
                    {"old": old_name, "new": new_name},
                )
            ],
            conn,
        )

    def _has_table(self, schema: str, physical: str) -> bool:
        if self._is_postgresql:
            sql = (
                "SELECT table_name FROM information_schema.tables"
                " WHERE table_schema = :schema AND table_name = :table"
            )
            params = {"schema": schema, "table": physical}
        else:
            sql = (
                f"SELECT name FROM {quote_identifier(schema)}.sqlite_master"
                " WHERE type = 'table' AND name = :table"
            )
            params = {"table": physical}
        with self._connection.connect() as conn:
            return conn.execute(text(sql), params).fetchone() is not None

    def _run(
        self,
        operation: str,
        target: str,
        statements: list[str | tuple[str, dict[str, object]]],
        conn: Connection | None = None,
    ) -> None:
        """Run DDL/DML statements in a single transaction."""
        try:
            if conn is not None:
                self._execute(conn, statements)
            else:
                with self._connection.begin() as own:
                    self._execute(own, statements)
        except SQLAlchemyError as e:
            raise PersistenceError(operation, target, e) from e

    @staticmethod
    def _execute(conn: Connection, statements: list[str | tuple[str, dict[str, object]]]) -> None:
        for statement in statements:
            if isinstance(statement, tuple):
                conn.execute(text(statement[0]), statement[1])
            else:
                conn.execute(text(statement))
