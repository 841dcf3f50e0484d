"""Mapping of logical database/collection names to physical SQL identifiers.

Identifiers cannot be sent as bound parameters, so every name that ends up
in SQL text is validated against a restricted character class first and
then quoted.
"""

from __future__ import annotations

import re
from typing import Literal

from doctable.exceptions import NamingError

Dialect = Literal["postgresql", "sqlite"]

COLLECTION_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_.-]+$")
DATABASE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
FIELD_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9_$-]+(\.[a-zA-Z0-9_$-]+)*$")

META_TABLE_NAME = "_meta"
NATURAL_ORDER_KEY = "$natural"
POSITION_COLUMN = "id"
DATA_COLUMN = "data"


def table_name(collection_name: str) -> str:
    """Convert a collection name into a physical table name.

    Dots act as a namespace separator upstream and are replaced by
    underscores.

    Raises:
        NamingError: If the name contains characters outside [a-zA-Z0-9_.-]
    """
    if not COLLECTION_NAME_PATTERN.match(collection_name):
        raise NamingError("collection", collection_name, "a-z A-Z 0-9 _ . -")
    return collection_name.replace(".", "_")


def schema_name(database_name: str) -> str:
    """Physical schema name for a logical database."""
    if not DATABASE_NAME_PATTERN.match(database_name):
        raise NamingError("database", database_name, "a-z A-Z 0-9 _ -")
    return database_name


def quote_identifier(name: str) -> str:
    """Quote a SQL identifier, doubling embedded quotes."""
    return '"' + name.replace('"', '""') + '"'


def qualified_table_name(database_name: str, collection_name: str) -> str:
    """Schema-qualified, quoted table name, e.g. ``"shop"."orders_2024"``."""
    return (
        quote_identifier(schema_name(database_name))
        + "."
        + quote_identifier(table_name(collection_name))
    )


def qualified_meta_table_name(database_name: str) -> str:
    """Schema-qualified, quoted name of the per-database metadata table."""
    return quote_identifier(schema_name(database_name)) + "." + quote_identifier(META_TABLE_NAME)


def primary_key_name(physical_table_name: str) -> str:
    """Name of the primary-key constraint of a collection table."""
    return f"pk_{physical_table_name}"


def _field_keys(field_name: str) -> list[str]:
    if not FIELD_NAME_PATTERN.match(field_name):
        raise NamingError("field", field_name, "a-z A-Z 0-9 _ $ - and . as separator")
    return field_name.split(".")


def json_path(field_name: str) -> str:
    """SQLite JSON path of a (possibly nested) field, e.g. ``$.address.city``.

    Raises:
        NamingError: If the field name contains unsafe characters
    """
    keys = _field_keys(field_name)
    return "$" + "".join(f'."{key}"' if "$" in key or "-" in key else f".{key}" for key in keys)


def data_key(field_name: str, dialect: Dialect) -> str:
    """SQL expression addressing a (possibly nested) field of the data column.

    PostgreSQL extracts the value as text with ``#>>``; SQLite uses
    ``json_extract`` with a JSON path, which yields a typed value. A missing
    field yields NULL on both.

    Args:
        field_name: Field name, dots address nested documents ("address.city")
        dialect: Database dialect name

    Raises:
        NamingError: If the field name contains unsafe characters
    """
    if dialect == "postgresql":
        return f"{DATA_COLUMN} #>> '{{{','.join(_field_keys(field_name))}}}'"
    return f"json_extract({DATA_COLUMN}, '{json_path(field_name)}')"


def data_type(field_name: str, dialect: Dialect) -> str:
    """SQL expression yielding the JSON type name of a field (NULL when missing).

    PostgreSQL reports number/string/boolean/object/array/null via
    ``json_typeof``; SQLite reports integer/real/text/true/false/object/
    array/null via ``json_type``.
    """
    if dialect == "postgresql":
        return f"json_typeof({DATA_COLUMN} #> '{{{','.join(_field_keys(field_name))}}}')"
    return f"json_type({DATA_COLUMN}, '{json_path(field_name)}')"


def identifier_condition(field_name: str, dialect: Dialect, parameter: str = "id") -> str:
    """WHERE condition matching a field against a bound identifier value.

    PostgreSQL compares the field's JSON text with the parameter bound as
    to_query_value() text. SQLite compares type and typed value with the
    parameter bound as a JSON document, so both sides go through the same
    JSON parser and numbers, booleans and strings never collide.
    """
    if dialect == "postgresql":
        return f"{data_key(field_name, dialect)} = :{parameter}"
    return (
        f"{data_type(field_name, dialect)} = json_type(:{parameter})"
        f" AND {data_key(field_name, dialect)} = json_extract(:{parameter}, '$')"
    )
