"""Core components for doctable."""

from doctable.core.config import Settings
from doctable.core.connection import DatabaseConnection
from doctable.core.types import CollectionInfo, Document, SortKey

__all__ = [
    "DatabaseConnection",
    "Settings",
    "CollectionInfo",
    "Document",
    "SortKey",
]
