"""Tests for sort specification translation."""

import pytest

from doctable.core.types import SortKey
from doctable.exceptions import InvalidArgumentError
from doctable.data.sort import (
    JSON_TYPE_NAMES,
    order_by_clause,
    parse_sort_spec,
    sort_expressions,
)


class TestParseSortSpec:
    """Tests for sort spec validation."""

    def test_empty_means_natural(self):
        assert parse_sort_spec(None) == []
        assert parse_sort_spec({}) == []
        assert parse_sort_spec([]) == []

    def test_mapping_keeps_order(self):
        keys = parse_sort_spec({"b": 1, "a": -1})
        assert keys == [SortKey(field="b", direction=1), SortKey(field="a", direction=-1)]

    def test_pairs_accepted(self):
        keys = parse_sort_spec([("a", -1), ("$natural", 1)])
        assert [k.field for k in keys] == ["a", "$natural"]
        assert keys[1].is_natural

    @pytest.mark.parametrize("direction", [0, 2, -2, "1", 1.0, True, None, [1]])
    def test_invalid_direction_rejected(self, direction):
        with pytest.raises(InvalidArgumentError, match="Illegal sort value"):
            parse_sort_spec({"a": direction})

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            parse_sort_spec({"a": 0})


class TestOrderByClause:
    """Tests for ORDER BY generation."""

    def test_no_sort(self):
        assert order_by_clause(None, "postgresql") == ""

    def test_natural_order_uses_position(self):
        assert order_by_clause({"$natural": 1}, "postgresql") == "ORDER BY id ASC NULLS LAST"
        assert order_by_clause({"$natural": -1}, "sqlite") == "ORDER BY id DESC NULLS LAST"

    def test_descending_still_nulls_last(self):
        clause = order_by_clause({"total": -1}, "postgresql")
        parts = clause.removeprefix("ORDER BY ").split(" NULLS LAST, ")
        assert len(parts) == 3
        assert clause.count("DESC NULLS LAST") == 3
        assert "ASC" not in clause

    def test_multiple_keys_joined_in_order(self):
        clause = order_by_clause([("b", 1), ("a", -1), ("$natural", 1)], "sqlite")
        b_at = clause.index("'$.b'")
        a_at = clause.index("'$.a'")
        assert clause.startswith("ORDER BY CASE WHEN json_type(data, '$.b')")
        assert b_at < a_at
        assert "'$.b'" not in clause[a_at:]
        assert clause.endswith("id ASC NULLS LAST")
        assert clause.count("ASC NULLS LAST") == 4
        assert clause.count("DESC NULLS LAST") == 3

    def test_invalid_direction_fails_before_building(self):
        with pytest.raises(InvalidArgumentError):
            order_by_clause({"a": 1, "b": 5}, "postgresql")


class TestSortExpressions:
    """Tests for the per-field type, number and text sort keys."""

    def test_postgresql_expressions(self):
        rank, number, text = sort_expressions("total", "postgresql")
        kind = "json_typeof(data #> '{total}')"
        assert rank == (
            f"CASE WHEN {kind} IN ('number') THEN 1"
            f" WHEN {kind} IN ('string') THEN 2"
            f" WHEN {kind} IN ('boolean', 'object', 'array') THEN 3 END"
        )
        assert number == (
            f"CASE WHEN {kind} IN ('number') THEN CAST(data #>> '{{total}}' AS numeric) END"
        )
        assert text == (
            f"(CASE WHEN {kind} IN ('string', 'boolean', 'object', 'array')"
            " THEN data #>> '{total}' END) COLLATE \"C\""
        )

    def test_sqlite_expressions(self):
        rank, number, text = sort_expressions("total", "sqlite")
        kind = "json_type(data, '$.total')"
        value = "json_extract(data, '$.total')"
        assert rank == (
            f"CASE WHEN {kind} IN ('integer', 'real') THEN 1"
            f" WHEN {kind} IN ('text') THEN 2"
            f" WHEN {kind} IN ('true', 'false', 'object', 'array') THEN 3 END"
        )
        assert number == f"CASE WHEN {kind} IN ('integer', 'real') THEN {value} END"
        assert text == (
            f"CASE WHEN {kind} IN ('true', 'false') THEN {kind}"
            f" WHEN {kind} IN ('text', 'object', 'array') THEN {value} END"
        )

    def test_type_names_cover_both_dialects(self):
        assert set(JSON_TYPE_NAMES) == {"postgresql", "sqlite"}
        for names in JSON_TYPE_NAMES.values():
            assert set(names) == {"number", "string", "other"}
