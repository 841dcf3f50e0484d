"""JSON text codec for stored documents.

Documents are stored as one JSON object per row. Key order is preserved in
both directions, so decode(encode(doc)) == doc for JSON-representable
documents.
"""

from __future__ import annotations

import json
from typing import Any, Protocol

from doctable.core.types import Document
from doctable.exceptions import InvalidArgumentError


class DocumentCodec(Protocol):
    """Converts documents to and from their stored text form."""

    def encode(self, document: Document) -> str: ...

    def decode(self, payload: str) -> Document: ...


class JsonCodec:
    """Compact JSON codec.

    encode() raises TypeError/ValueError for values JSON cannot represent
    (sets, bytes, NaN); decode() raises ValueError for invalid JSON or a
    payload that is not an object. The collection adapter turns these into
    SerializationError/CorruptPayloadError with operation context.
    """

    def encode(self, document: Document) -> str:
        return json.dumps(
            document,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )

    def decode(self, payload: str) -> Document:
        document = json.loads(payload)
        if not isinstance(document, dict):
            raise ValueError(f"expected a JSON object, got {type(document).__name__}")
        return document


def _identifier_json(value: Any) -> str:
    if value is None:
        raise InvalidArgumentError("Identifier value must not be null")
    try:
        return json.dumps(value, ensure_ascii=False, allow_nan=False, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise InvalidArgumentError(
            f"Identifier value is not JSON-representable: {e}", {"value": repr(value)}
        ) from e


def to_query_value(value: Any) -> str:
    """Text form of an identifier value, as produced by the data key expression.

    Strings are returned as-is, booleans as true/false, numbers and
    containers as compact JSON.

    Raises:
        InvalidArgumentError: If the value is None or not JSON-representable
    """
    if isinstance(value, str):
        return value
    return _identifier_json(value)


def to_json_query_value(value: Any) -> str:
    """Compact JSON document holding an identifier value.

    Used where the engine parses the bound value as JSON and compares it with
    the stored field by type and value.

    Raises:
        InvalidArgumentError: If the value is None or not JSON-representable
    """
    return _identifier_json(value)
