"""In-process predicate matching for scanned documents.

The relational layer only fetches and orders rows; deciding whether a
decoded document satisfies a query happens here, one document at a time.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from doctable.core.types import Document
from doctable.exceptions import InvalidArgumentError

MISSING = object()


class Matcher(Protocol):
    """Decides whether a document satisfies a query. Must be side-effect free."""

    def validate(self, query: Mapping[str, Any] | None) -> None:
        """Raise InvalidArgumentError for a malformed query, before any I/O."""
        ...

    def matches(self, document: Document, query: Mapping[str, Any] | None) -> bool: ...


def resolve_field(document: Mapping[str, Any], field_name: str) -> Any:
    """Look up a possibly dotted field; returns MISSING when absent."""
    value: Any = document
    for key in field_name.split("."):
        if not isinstance(value, Mapping) or key not in value:
            return MISSING
        value = value[key]
    return value


class FilterMatcher:
    """Matches documents against filter dicts.

    Filters use the same shape as the query API:
        {"status": "open"}                               equality
        {"age": {"op": "gt", "value": 28}}               operator
        {"address.city": {"op": "in", "value": [...]}}   nested field

    All conditions must hold. None or an empty filter matches everything.
    """

    OPERATORS = ("eq", "ne", "gt", "gte", "lt", "lte", "like", "ilike", "in", "is_null")

    def validate(self, query: Mapping[str, Any] | None) -> None:
        """Check the shape of every condition without looking at documents.

        Raises:
            InvalidArgumentError: If the query is not a mapping, names an
                unknown operator, or gives 'in' something other than a list
        """
        if query is None:
            return
        if not isinstance(query, Mapping):
            raise InvalidArgumentError(
                f"Query must be a mapping, got {type(query).__name__}",
                {"query": repr(query)},
            )
        for field_name, condition in query.items():
            if isinstance(condition, Mapping) and "op" in condition:
                self._check_operator(field_name, condition["op"], condition.get("value"))

    def matches(self, document: Document, query: Mapping[str, Any] | None) -> bool:
        if not query:
            return True
        for field_name, condition in query.items():
            value = resolve_field(document, field_name)
            if isinstance(condition, Mapping) and "op" in condition:
                self._check_operator(field_name, condition["op"], condition.get("value"))
                if not self._apply(value, condition["op"], condition.get("value")):
                    return False
            elif value is MISSING or value != condition:
                return False
        return True

    def _check_operator(self, field_name: str, op: Any, operand: Any) -> None:
        if op not in self.OPERATORS:
            raise InvalidArgumentError(
                f"Unknown operator '{op}'. Supported: {', '.join(self.OPERATORS)}",
                {"field": field_name, "op": op, "supported": list(self.OPERATORS)},
            )
        if op == "in" and (isinstance(operand, (str, bytes)) or not hasattr(operand, "__iter__")):
            raise InvalidArgumentError(
                f"Operator 'in' expects a list, got {type(operand).__name__}",
                {"field": field_name, "op": op},
            )

    def _apply(self, value: Any, op: str, operand: Any) -> bool:
        """Apply a single operator to a field value."""
        if op == "is_null":
            is_null = value is MISSING or value is None
            return is_null if operand else not is_null
        if op == "ne":
            return value is MISSING or value != operand
        if value is MISSING:
            return False

        if op == "eq":
            return value == operand
        elif op in ("gt", "gte", "lt", "lte"):
            if value is None or operand is None:
                return False
            try:
                if op == "gt":
                    return value > operand
                elif op == "gte":
                    return value >= operand
                elif op == "lt":
                    return value < operand
                return value <= operand
            except TypeError:
                # Values of different types never compare
                return False
        elif op == "like":
            return isinstance(value, str) and str(operand) in value
        elif op == "ilike":
            return isinstance(value, str) and str(operand).lower() in value.lower()
        elif op == "in":
            return value in list(operand)
        return False
