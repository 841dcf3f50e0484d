"""Input parsing utilities for CLI commands."""

import json
from pathlib import Path
from typing import Any


def parse_json_object(value: str, what: str) -> dict[str, Any]:
    """Parse a JSON object given on the command line.

    Raises:
        ValueError: If the text is not valid JSON or not an object
    """
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON for {what}: {e.msg}") from e
    if not isinstance(parsed, dict):
        raise ValueError(f"Expected a JSON object for {what}, got {type(parsed).__name__}")
    return parsed


def parse_sort(spec: str | None) -> list[tuple[str, int]] | None:
    """Parse a sort specification.

    Accepts a JSON object or a comma-separated list of field:direction pairs.

    Examples:
        '{"age": -1, "name": 1}' → [("age", -1), ("name", 1)]
        "age:-1,name"             → [("age", -1), ("name", 1)]

    Raises:
        ValueError: If a direction is not an integer
    """
    if not spec:
        return None
    if spec.lstrip().startswith("{"):
        return list(parse_json_object(spec, "sort").items())

    keys = []
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        field, _, direction = part.partition(":")
        try:
            keys.append((field, int(direction) if direction else 1))
        except ValueError as e:
            raise ValueError(
                f"Invalid sort direction '{direction}' for '{field}'. Use 1 or -1"
            ) from e
    return keys


def read_json_file(path: str) -> dict[str, Any]:
    """Read single JSON object from file.

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file does not contain a JSON object
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with file_path.open("r") as f:
        return parse_json_object(f.read(), path)


def read_jsonl_file(path: str) -> list[dict[str, Any]]:
    """Read JSON Lines (JSONL) file.

    Each line should contain a separate JSON object.

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If any line contains invalid JSON
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    documents = []
    with file_path.open("r") as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                documents.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise json.JSONDecodeError(
                    f"Invalid JSON on line {line_num}: {e.msg}",
                    e.doc,
                    e.pos,
                ) from e

    return documents
