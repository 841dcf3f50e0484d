"""Core types for doctable.

All types are JSON-serializable so they can be printed by the CLI.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from doctable.naming import NATURAL_ORDER_KEY

Document = dict[str, Any]


class SortKey(BaseModel):
    """One key of a sort specification."""

    field: str = Field(..., description="Field name, or $natural for position order")
    direction: Literal[1, -1] = Field(default=1, description="1 ascending, -1 descending")

    model_config = {"frozen": True}

    @property
    def is_natural(self) -> bool:
        """Whether this key sorts by position instead of a document field."""
        return self.field == NATURAL_ORDER_KEY


class CollectionInfo(BaseModel):
    """Summary of a collection and its backing table."""

    database: str = Field(..., description="Logical database name")
    collection: str = Field(..., description="Logical collection name")
    table: str = Field(..., description="Schema-qualified physical table name")
    id_field: str = Field(..., description="Identifier field of stored documents")
    count: int | None = Field(default=None, description="Number of stored documents")
    stored_byte_size: int | None = Field(
        default=None, description="Running total byte size from the metadata table"
    )
