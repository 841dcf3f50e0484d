"""Translation of document-store sort specifications into ORDER BY clauses."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from doctable.core.types import SortKey
from doctable.exceptions import InvalidArgumentError
from doctable.naming import POSITION_COLUMN, Dialect, data_key, data_type

SortSpec = Mapping[str, Any] | Iterable[tuple[str, Any]]

DIRECTIONS = {1: "ASC", -1: "DESC"}

# JSON type names reported by json_typeof (PostgreSQL) and json_type (SQLite)
JSON_TYPE_NAMES: dict[str, dict[str, tuple[str, ...]]] = {
    "postgresql": {
        "number": ("number",),
        "string": ("string",),
        "other": ("boolean", "object", "array"),
    },
    "sqlite": {
        "number": ("integer", "real"),
        "string": ("text",),
        "other": ("true", "false", "object", "array"),
    },
}


def parse_sort_spec(sort_spec: SortSpec | None) -> list[SortKey]:
    """Validate a sort specification and return its keys in order.

    Accepts an ordered mapping ({"age": -1, "name": 1}) or a sequence of
    (field, direction) pairs. None or empty means natural order.

    Raises:
        InvalidArgumentError: If a direction is anything but 1 or -1
    """
    if not sort_spec:
        return []

    pairs = sort_spec.items() if isinstance(sort_spec, Mapping) else sort_spec
    keys: list[SortKey] = []
    for field, direction in pairs:
        # bool is an int subclass; True must not pass as 1
        if (
            isinstance(direction, bool)
            or not isinstance(direction, int)
            or direction not in DIRECTIONS
        ):
            raise InvalidArgumentError(
                f"Illegal sort value for '{field}': {direction!r}. Expected 1 or -1",
                {"field": field, "direction": repr(direction)},
            )
        keys.append(SortKey(field=field, direction=int(direction)))
    return keys


def _type_in(expression: str, names: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{name}'" for name in names)
    return f"{expression} IN ({quoted})"


def sort_expressions(field_name: str, dialect: Dialect) -> list[str]:
    """ORDER BY expressions for one document field, most significant first.

    Values are bracketed by JSON type (numbers, then strings, then booleans,
    objects and arrays), numbers compare numerically and everything else
    compares as JSON text in binary collation. Missing fields and JSON null
    yield NULL in every expression. Both dialects produce the same order.
    """
    kind = data_type(field_name, dialect)
    value = data_key(field_name, dialect)
    names = JSON_TYPE_NAMES[dialect]
    rank = (
        f"CASE WHEN {_type_in(kind, names['number'])} THEN 1"
        f" WHEN {_type_in(kind, names['string'])} THEN 2"
        f" WHEN {_type_in(kind, names['other'])} THEN 3 END"
    )
    if dialect == "postgresql":
        number = f"CASE WHEN {_type_in(kind, names['number'])} THEN CAST({value} AS numeric) END"
        text = (
            f"(CASE WHEN {_type_in(kind, names['string'] + names['other'])} THEN {value} END)"
            ' COLLATE "C"'
        )
    else:
        # json_extract turns booleans into 1/0; the type name is their JSON text
        number = f"CASE WHEN {_type_in(kind, names['number'])} THEN {value} END"
        text = (
            f"CASE WHEN {_type_in(kind, ('true', 'false'))} THEN {kind}"
            f" WHEN {_type_in(kind, ('text', 'object', 'array'))} THEN {value} END"
        )
    return [rank, number, text]


def order_by_clause(sort_spec: SortSpec | None, dialect: Dialect) -> str:
    """Build the ORDER BY clause for a sort specification.

    Every expression sorts nulls (missing fields) last regardless of
    direction. Keys keep their specification order. Returns "" for natural
    order.

    Examples:
        {"$natural": 1}   -> "ORDER BY id ASC NULLS LAST"
        {"age": -1}       -> "ORDER BY CASE ... END DESC NULLS LAST, ..."
    """
    keys = parse_sort_spec(sort_spec)
    if not keys:
        return ""

    clauses = []
    for key in keys:
        expressions = (
            [POSITION_COLUMN] if key.is_natural else sort_expressions(key.field, dialect)
        )
        for expression in expressions:
            clauses.append(f"{expression} {DIRECTIONS[key.direction]} NULLS LAST")
    return "ORDER BY " + ", ".join(clauses)
