"""doctable - document collections stored as JSON rows in relational tables.

Each collection is an auto-numbered table with one JSON column. Documents
keep a caller-chosen identifier field; the table's generated id is their
position. Queries are matched in process after an ordered table scan.

Example:
    from doctable import DocumentStore

    store = DocumentStore("sqlite:///./docs.db")
    orders = store.create_collection("shop", "orders", if_not_exists=True)

    position = orders.insert({"_id": "o-1", "status": "open", "total": 42})
    orders.find({"status": "open"}, sort={"total": -1}, limit=10)
    orders.find_position_by_identifier({"_id": "o-1"}) == position

    orders.update_stored_byte_size(120)
    orders.rename_to("shop", "orders_archived")
"""

from doctable.core.config import Settings
from doctable.core.connection import DatabaseConnection
from doctable.core.store import DocumentStore
from doctable.core.types import CollectionInfo, Document, SortKey
from doctable.data.codec import JsonCodec
from doctable.data.collection import Collection
from doctable.data.matcher import FilterMatcher, Matcher
from doctable.exceptions import (
    CollectionNotFoundError,
    ConnectionError,
    ConsistencyError,
    CorruptPayloadError,
    DocTableError,
    InvalidArgumentError,
    NamingError,
    PersistenceError,
    SerializationError,
    UnsupportedOperation,
)
from doctable.storage.table_manager import TableManager

__version__ = "0.1.0"

__all__ = [
    # Main classes
    "DocumentStore",
    "Collection",
    "DatabaseConnection",
    "TableManager",
    "Settings",
    # Boundaries
    "JsonCodec",
    "FilterMatcher",
    "Matcher",
    # Types
    "CollectionInfo",
    "Document",
    "SortKey",
    # Exceptions
    "DocTableError",
    "NamingError",
    "InvalidArgumentError",
    "PersistenceError",
    "ConnectionError",
    "SerializationError",
    "CorruptPayloadError",
    "ConsistencyError",
    "CollectionNotFoundError",
    "UnsupportedOperation",
]
