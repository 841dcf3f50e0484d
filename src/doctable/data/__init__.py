"""Data operations for doctable."""

from doctable.data.codec import JsonCodec, to_query_value
from doctable.data.collection import Collection
from doctable.data.matcher import FilterMatcher, Matcher
from doctable.data.sort import order_by_clause, parse_sort_spec

__all__ = [
    "Collection",
    "FilterMatcher",
    "JsonCodec",
    "Matcher",
    "order_by_clause",
    "parse_sort_spec",
    "to_query_value",
]
