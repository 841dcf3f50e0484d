"""CLI context management for the document store and shared state."""

from dataclasses import dataclass, field

from doctable import DocumentStore
from doctable.core.config import get_database_url

__all__ = ["CLIContext", "get_database_url"]


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Manages the store lifecycle and output preferences.
    """

    database_url: str
    echo: bool
    json_output: bool
    _store: DocumentStore | None = field(default=None, init=False, repr=False)

    def get_store(self) -> DocumentStore:
        """Get or create the document store (lazy initialization)."""
        if self._store is None:
            self._store = DocumentStore(self.database_url, echo=self.echo)
        return self._store

    def close(self) -> None:
        """Close the store if open."""
        if self._store is not None:
            self._store.close()
            self._store = None
