"""Collection adapter storing documents as JSON rows of an auto-numbered table.

Each collection is one table ``"<database>"."<collection>"`` with columns
``(id, data)``:
- ``id`` is the position: engine-generated, strictly increasing, never reused
- ``data`` holds the whole document as JSON text

Documents are addressed two ways. Deletes go through the position; content
updates and lookups go through the value of the identifier field, compared
with the stored field by the identifier condition of the dialect. Query
predicates are checked up front and evaluated in process after a full,
ordered scan.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import TextClause, text
from sqlalchemy.exc import SQLAlchemyError

from doctable.core.types import CollectionInfo, Document
from doctable.data.codec import DocumentCodec, JsonCodec, to_json_query_value, to_query_value
from doctable.data.matcher import MISSING, FilterMatcher, Matcher, resolve_field
from doctable.data.sort import SortSpec, order_by_clause
from doctable.exceptions import (
    ConsistencyError,
    CorruptPayloadError,
    InvalidArgumentError,
    PersistenceError,
    SerializationError,
    UnsupportedOperation,
)
from doctable.naming import (
    DATA_COLUMN,
    POSITION_COLUMN,
    data_key,
    identifier_condition,
    primary_key_name,
    qualified_meta_table_name,
    qualified_table_name,
    quote_identifier,
    table_name,
)

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from doctable.core.connection import DatabaseConnection

logger = logging.getLogger(__name__)


class Collection:
    """Document collection backed by one relational table.

    Every operation borrows its own connection from the connection source
    and returns it before the call ends, on success and on error alike.
    Nothing is cached between calls.
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        database_name: str,
        collection_name: str,
        id_field: str = "_id",
        codec: DocumentCodec | None = None,
        matcher: Matcher | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            connection: Connection source
            database_name: Logical database (maps to a schema)
            collection_name: Logical collection (maps to a table)
            id_field: Identifier field of stored documents
            codec: Document codec (defaults to JsonCodec)
            matcher: Predicate matcher used by scans (defaults to FilterMatcher)

        Raises:
            NamingError: If any of the names contain unsafe characters
        """
        self._connection = connection
        self._database_name = database_name
        self._collection_name = collection_name
        self._table = qualified_table_name(database_name, collection_name)
        connection.register_schema(database_name)
        self._meta_table = qualified_meta_table_name(database_name)
        # Raises NamingError for unsafe id fields
        data_key(id_field, "postgresql")
        self._id_field = id_field
        self._codec: DocumentCodec = codec or JsonCodec()
        self._matcher: Matcher = matcher or FilterMatcher()

    def __repr__(self) -> str:
        return f"Collection({self._database_name}.{self._collection_name})"

    @property
    def database_name(self) -> str:
        """Logical database name."""
        return self._database_name

    @property
    def collection_name(self) -> str:
        """Logical collection name."""
        return self._collection_name

    @property
    def id_field(self) -> str:
        """Identifier field of stored documents."""
        return self._id_field

    @property
    def qualified_table_name(self) -> str:
        """Schema-qualified, quoted name of the backing table."""
        return self._table

    # === Reads ===

    def count(self) -> int:
        """Number of documents stored in the collection.

        Raises:
            ConsistencyError: If COUNT(*) does not yield exactly one row
            PersistenceError: If the statement fails
        """
        rows = self._fetch_all("count documents in", f"SELECT COUNT(*) FROM {self._table}")
        return self._single_value(rows, "count")

    def scan(
        self,
        query: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> Iterator[Document]:
        """Lazily yield documents matching a query.

        The whole table is read in the requested order and every decoded
        document is checked by the matcher. Only matches count towards skip
        and limit. A positive limit ends the scan (and closes its cursor) as
        soon as that many documents were yielded; zero or negative means no
        limit.

        The sort specification and the query are validated here, before any
        SQL runs; the connection is opened on the first next() call. Close
        the returned generator to release the connection early.

        Args:
            query: Filter evaluated in process (None matches everything)
            sort: Ordered (field, direction) pairs; "$natural" sorts by position
            skip: Number of matches to discard
            limit: Maximum number of matches to yield

        Raises:
            InvalidArgumentError: If a sort direction is not 1 or -1, or the
                query is malformed
            CorruptPayloadError: If a stored payload cannot be decoded
            PersistenceError: If the statement fails
        """
        order_by = order_by_clause(sort, self._connection.dialect)
        self._matcher.validate(query)
        sql = f"SELECT {self._payload_column()} FROM {self._table}"
        if order_by:
            sql = f"{sql} {order_by}"
        return self._scan(text(sql), query, max(skip, 0), limit)

    def find(
        self,
        query: Mapping[str, Any] | None = None,
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> list[Document]:
        """Eager variant of scan() returning a list."""
        return list(self.scan(query, sort=sort, skip=skip, limit=limit))

    def _scan(
        self, statement: TextClause, query: Mapping[str, Any] | None, skip: int, limit: int
    ) -> Iterator[Document]:
        matched = 0
        returned = 0
        logger.debug(f"Scanning {self._table} (skip={skip}, limit={limit})")
        try:
            with self._connection.connect() as conn:
                result = conn.execution_options(stream_results=True).execute(statement)
                try:
                    for row in result:
                        document = self._decode(row[0])
                        if not self._matcher.matches(document, query):
                            continue
                        matched += 1
                        if matched <= skip:
                            continue
                        yield document
                        returned += 1
                        if limit > 0 and returned >= limit:
                            return
                finally:
                    result.close()
        except SQLAlchemyError as e:
            raise PersistenceError("query", self._table, e) from e

    def find_position_by_identifier(self, document: Mapping[str, Any]) -> int | None:
        """Position of the stored document with the same identifier value.

        Returns:
            The position, or None if no stored document has that identifier

        Raises:
            UnsupportedOperation: If the document has no identifier field
            ConsistencyError: If several rows share the identifier value
            PersistenceError: If the statement fails
        """
        id_value = self._identifier_value(document, "find_position_by_identifier")
        rows = self._fetch_all(
            "find document position in",
            f"SELECT {POSITION_COLUMN} FROM {self._table} WHERE {self._id_condition()}",
            {"id": id_value},
        )
        if not rows:
            return None
        if len(rows) > 1:
            raise ConsistencyError(
                "find_position_by_identifier",
                self._table,
                f"got more than one id for {self._id_field}={id_value!r}",
            )
        return int(rows[0][0])

    def get_document(self, position: int) -> Document:
        """Position-based document lookup is not implemented by this adapter.

        Raises:
            UnsupportedOperation: Always
        """
        raise UnsupportedOperation(
            "get_document",
            self._table,
            "documents can only be read through scan() or located by identifier",
        )

    def scan_positions(
        self,
        query: Mapping[str, Any] | None,
        positions: Iterable[int],
        sort: SortSpec | None = None,
        skip: int = 0,
        limit: int = 0,
    ) -> Iterator[Document]:
        """Scanning a preselected set of positions is not implemented.

        Raises:
            UnsupportedOperation: Always
        """
        raise UnsupportedOperation(
            "scan_positions",
            self._table,
            "paging over positions found by non-identifier criteria is not implemented",
        )

    # === Writes ===

    def insert(self, document: Mapping[str, Any]) -> int:
        """Store a document and return its new position.

        Raises:
            SerializationError: If the document cannot be encoded
            PersistenceError: If the insert fails
        """
        payload = self._encode(document)
        rows = self._execute_in_transaction(
            "insert document into",
            f"INSERT INTO {self._table} ({DATA_COLUMN}) VALUES ({self._payload_parameter()})"
            f" RETURNING {POSITION_COLUMN}",
            {"data": payload},
            returns_rows=True,
        )
        position = self._single_value(rows, "insert")
        logger.debug(f"Inserted document at position {position} into {self._table}")
        return position

    def update_by_identifier(self, document: Mapping[str, Any]) -> None:
        """Overwrite the stored document that has the same identifier value.

        Does nothing when no stored document matches.

        Raises:
            UnsupportedOperation: If the document has no identifier field
            SerializationError: If the document cannot be encoded
            PersistenceError: If the update fails
        """
        id_value = self._identifier_value(document, "update_by_identifier")
        payload = self._encode(document)
        self._execute_in_transaction(
            "update document in",
            f"UPDATE {self._table} SET {DATA_COLUMN} = {self._payload_parameter()}"
            f" WHERE {self._id_condition()}",
            {"data": payload, "id": id_value},
        )

    def delete_by_position(self, position: int) -> None:
        """Remove the document at a position. Missing positions are ignored."""
        self._execute_in_transaction(
            "remove document from",
            f"DELETE FROM {self._table} WHERE {POSITION_COLUMN} = :position",
            {"position": int(position)},
        )

    def drop(self) -> None:
        """Drop the backing table.

        Indexes and the metadata record are not touched; cleaning those up
        is the caller's job.
        """
        self._execute_in_transaction("drop", f"DROP TABLE {self._table}")
        logger.info(f"Dropped collection table {self._table}")

    def rename_to(
        self,
        new_database_name: str,
        new_collection_name: str,
        conn: Connection | None = None,
    ) -> None:
        """Rename the backing table and its primary-key constraint.

        Rows and positions are preserved. Both statements run in one
        transaction, the caller's when ``conn`` is given. The metadata
        record keeps its old key.

        Raises:
            UnsupportedOperation: If the new database differs from the current one
            NamingError: If the new collection name is unsafe
            PersistenceError: If the rename fails
        """
        if new_database_name != self._database_name:
            raise UnsupportedOperation(
                "rename",
                self._table,
                f"cannot move a collection from database '{self._database_name}'"
                f" to '{new_database_name}'",
            )

        old_table = table_name(self._collection_name)
        new_table = table_name(new_collection_name)
        new_qualified = qualified_table_name(new_database_name, new_collection_name)

        statements = []
        # SQLite cannot rename constraints; its primary key is unnamed
        if self._connection.is_postgresql:
            statements.append(
                f"ALTER TABLE {self._table} RENAME CONSTRAINT "
                f"{quote_identifier(primary_key_name(old_table))} TO "
                f"{quote_identifier(primary_key_name(new_table))}"
            )
        statements.append(f"ALTER TABLE {self._table} RENAME TO {quote_identifier(new_table)}")

        try:
            if conn is not None:
                for statement in statements:
                    conn.execute(text(statement))
            else:
                with self._connection.begin() as own:
                    for statement in statements:
                        own.execute(text(statement))
        except SQLAlchemyError as e:
            raise PersistenceError("rename", self._table, e) from e

        logger.info(f"Renamed {self._table} to {new_qualified}")
        self._collection_name = new_collection_name
        self._table = new_qualified

    # === Size accounting ===

    def update_stored_byte_size(self, delta: int) -> None:
        """Add delta (may be negative) to the collection's running byte size."""
        if isinstance(delta, bool) or not isinstance(delta, int):
            raise InvalidArgumentError(
                f"Size delta must be an integer, got {type(delta).__name__}",
                {"delta": repr(delta)},
            )
        self._execute_in_transaction(
            "update datasize of",
            f"UPDATE {self._meta_table} SET datasize = datasize + :delta"
            " WHERE collection_name = :name",
            {"delta": delta, "name": self._collection_name},
        )

    def get_stored_byte_size(self) -> int:
        """Running byte size stored in the metadata record.

        Raises:
            ConsistencyError: If there is no metadata record (or several)
        """
        rows = self._fetch_all(
            "retrieve datasize of",
            f"SELECT datasize FROM {self._meta_table} WHERE collection_name = :name",
            {"name": self._collection_name},
        )
        return self._single_value(rows, "get_stored_byte_size")

    def info(self) -> CollectionInfo:
        """Describe the collection, including live count and stored size."""
        return CollectionInfo(
            database=self._database_name,
            collection=self._collection_name,
            table=self._table,
            id_field=self._id_field,
            count=self.count(),
            stored_byte_size=self.get_stored_byte_size(),
        )

    # === Helpers ===

    def _id_condition(self) -> str:
        return identifier_condition(self._id_field, self._connection.dialect)

    def _payload_column(self) -> str:
        # Read json back as its original text so key order survives
        if self._connection.is_postgresql:
            return f"CAST({DATA_COLUMN} AS TEXT)"
        return DATA_COLUMN

    def _payload_parameter(self) -> str:
        if self._connection.is_postgresql:
            return "CAST(:data AS json)"
        return ":data"

    def _identifier_value(self, document: Mapping[str, Any], operation: str) -> str:
        value = resolve_field(document, self._id_field)
        if value is MISSING:
            raise UnsupportedOperation(
                operation,
                self._table,
                f"document has no '{self._id_field}' field and there is no other key to search by",
            )
        if self._connection.is_postgresql:
            return to_query_value(value)
        return to_json_query_value(value)

    def _encode(self, document: Mapping[str, Any]) -> str:
        try:
            return self._codec.encode(dict(document))
        except (TypeError, ValueError) as e:
            raise SerializationError("serialize document", self._table, e) from e

    def _decode(self, payload: Any) -> Document:
        try:
            return self._codec.decode(payload)
        except (TypeError, ValueError) as e:
            raise CorruptPayloadError("decode stored document", self._table, e) from e

    def _fetch_all(
        self, operation: str, sql: str, params: dict[str, Any] | None = None
    ) -> Sequence[Any]:
        """Run a read statement on a borrowed connection and return all rows."""
        logger.debug(f"{operation} {self._table}")
        try:
            with self._connection.connect() as conn:
                return conn.execute(text(sql), params or {}).fetchall()
        except SQLAlchemyError as e:
            raise PersistenceError(operation, self._table, e) from e

    def _execute_in_transaction(
        self,
        operation: str,
        sql: str,
        params: dict[str, Any] | None = None,
        returns_rows: bool = False,
    ) -> Sequence[Any]:
        """Run a write statement in its own transaction."""
        logger.debug(f"{operation} {self._table}")
        try:
            with self._connection.begin() as conn:
                result = conn.execute(text(sql), params or {})
                return result.fetchall() if returns_rows else []
        except SQLAlchemyError as e:
            raise PersistenceError(operation, self._table, e) from e

    def _single_value(self, rows: Sequence[Any], operation: str) -> int:
        if not rows:
            raise ConsistencyError(operation, self._table, "got no result")
        if len(rows) > 1:
            raise ConsistencyError(operation, self._table, "got more than one result")
        return int(rows[0][0])
