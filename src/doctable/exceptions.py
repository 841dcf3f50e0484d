"""Custom exceptions for doctable.

Every error names the logical operation and the table it affected:
- Naming and argument errors are raised before any SQL is issued
- Persistence errors always chain the underlying engine error
"""

from __future__ import annotations

from typing import Any


class DocTableError(Exception):
    """Base exception for all doctable errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class NamingError(DocTableError, ValueError):
    """A database, collection or field name contains unsafe characters."""

    def __init__(self, kind: str, name: str, allowed: str) -> None:
        message = f"Illegal {kind} name '{name}'. Allowed characters: {allowed}"
        super().__init__(message, {"kind": kind, "name": name, "allowed": allowed})
        self.kind = kind
        self.name = name


class InvalidArgumentError(DocTableError, ValueError):
    """A caller-supplied argument is malformed (detected before I/O)."""

    pass


class PersistenceError(DocTableError):
    """The database engine reported a failure while running a statement."""

    def __init__(self, operation: str, target: str, cause: BaseException | None = None) -> None:
        message = f"Failed to {operation} {target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, {"operation": operation, "target": target})
        self.operation = operation
        self.target = target


class ConnectionError(PersistenceError):
    """Failed to connect to the database."""

    def __init__(self, message: str) -> None:
        DocTableError.__init__(self, message, {"operation": "connect"})
        self.operation = "connect"
        self.target = ""


class SerializationError(DocTableError):
    """A document could not be converted to or from its JSON text."""

    def __init__(self, operation: str, target: str, cause: BaseException | None = None) -> None:
        message = f"Failed to {operation} for {target}"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message, {"operation": operation, "target": target})
        self.operation = operation
        self.target = target


class CorruptPayloadError(SerializationError):
    """A stored payload could not be decoded into a document."""

    pass


class ConsistencyError(DocTableError):
    """A query expected exactly one row and observed zero or several."""

    def __init__(self, operation: str, target: str, detail: str) -> None:
        message = f"Consistency failure during {operation} on {target}: {detail}"
        super().__init__(message, {"operation": operation, "target": target, "detail": detail})
        self.operation = operation
        self.target = target
        self.detail = detail


class CollectionNotFoundError(DocTableError):
    """Collection does not exist in the database."""

    def __init__(
        self, collection_name: str, database_name: str, available: list[str] | None = None
    ) -> None:
        names = available or []
        if names:
            message = (
                f"Collection '{collection_name}' not found in '{database_name}'. "
                f"Available collections: {', '.join(names)}"
            )
        else:
            message = (
                f"Collection '{collection_name}' not found in '{database_name}'. "
                "No collections exist yet."
            )
        super().__init__(
            message,
            {
                "collection_name": collection_name,
                "database_name": database_name,
                "available_collections": names,
            },
        )
        self.collection_name = collection_name
        self.database_name = database_name


class UnsupportedOperation(NotImplementedError):
    """A feature deliberately not implemented by the adapter.

    Not a DocTableError: it marks a design boundary rather than a fault.
    """

    def __init__(self, operation: str, target: str, reason: str) -> None:
        message = f"{operation} is not supported for {target}: {reason}"
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.target = target
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        """Return signal as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": {"operation": self.operation, "target": self.target},
        }
