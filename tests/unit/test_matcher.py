"""Tests for in-process filter matching."""

import pytest

from doctable.data.matcher import MISSING, FilterMatcher, resolve_field
from doctable.exceptions import InvalidArgumentError


@pytest.fixture
def matcher() -> FilterMatcher:
    return FilterMatcher()


@pytest.fixture
def document() -> dict:
    return {
        "_id": "o-1",
        "status": "open",
        "total": 42,
        "note": None,
        "customer": {"name": "Ada Lovelace", "address": {"city": "London"}},
        "tags": ["new", "priority"],
    }


class TestResolveField:
    """Tests for dotted field lookup."""

    def test_top_level(self, document):
        assert resolve_field(document, "total") == 42

    def test_nested(self, document):
        assert resolve_field(document, "customer.address.city") == "London"

    def test_missing_is_distinct_from_null(self, document):
        assert resolve_field(document, "note") is None
        assert resolve_field(document, "missing") is MISSING
        assert resolve_field(document, "total.value") is MISSING


class TestEquality:
    """Tests for plain equality filters."""

    def test_empty_query_matches(self, matcher, document):
        assert matcher.matches(document, None)
        assert matcher.matches(document, {})

    def test_all_conditions_must_hold(self, matcher, document):
        assert matcher.matches(document, {"status": "open", "total": 42})
        assert not matcher.matches(document, {"status": "open", "total": 41})

    def test_nested_equality(self, matcher, document):
        assert matcher.matches(document, {"customer.address.city": "London"})

    def test_missing_field_never_equal(self, matcher, document):
        assert not matcher.matches(document, {"missing": None})

    def test_null_equals_none(self, matcher, document):
        assert matcher.matches(document, {"note": None})

    def test_subdocument_equality(self, matcher, document):
        assert matcher.matches(document, {"customer.address": {"city": "London"}})


class TestOperators:
    """Tests for {"op": ..., "value": ...} conditions."""

    @pytest.mark.parametrize(
        ("op", "value", "expected"),
        [
            ("eq", 42, True),
            ("ne", 41, True),
            ("ne", 42, False),
            ("gt", 41, True),
            ("gt", 42, False),
            ("gte", 42, True),
            ("lt", 43, True),
            ("lte", 41, False),
            ("in", [1, 42], True),
            ("in", [1, 2], False),
        ],
    )
    def test_numeric(self, matcher, document, op, value, expected):
        assert matcher.matches(document, {"total": {"op": op, "value": value}}) is expected

    def test_like_is_substring(self, matcher, document):
        assert matcher.matches(document, {"customer.name": {"op": "like", "value": "Love"}})
        assert not matcher.matches(document, {"customer.name": {"op": "like", "value": "love"}})

    def test_ilike_ignores_case(self, matcher, document):
        assert matcher.matches(document, {"customer.name": {"op": "ilike", "value": "LOVE"}})

    def test_like_on_non_string(self, matcher, document):
        assert not matcher.matches(document, {"total": {"op": "like", "value": "4"}})

    def test_is_null(self, matcher, document):
        assert matcher.matches(document, {"note": {"op": "is_null", "value": True}})
        assert matcher.matches(document, {"missing": {"op": "is_null", "value": True}})
        assert matcher.matches(document, {"status": {"op": "is_null", "value": False}})
        assert not matcher.matches(document, {"status": {"op": "is_null", "value": True}})

    def test_ne_matches_missing(self, matcher, document):
        assert matcher.matches(document, {"missing": {"op": "ne", "value": 1}})

    def test_comparison_on_missing_or_null(self, matcher, document):
        assert not matcher.matches(document, {"missing": {"op": "gt", "value": 1}})
        assert not matcher.matches(document, {"note": {"op": "lt", "value": 1}})

    def test_mismatched_types_do_not_compare(self, matcher, document):
        assert not matcher.matches(document, {"status": {"op": "gt", "value": 1}})

    def test_unknown_operator(self, matcher, document):
        with pytest.raises(InvalidArgumentError, match="Unknown operator 'regex'"):
            matcher.matches(document, {"status": {"op": "regex", "value": "o.*"}})

    def test_in_requires_list(self, matcher, document):
        with pytest.raises(InvalidArgumentError, match="expects a list"):
            matcher.matches(document, {"status": {"op": "in", "value": "open"}})


class TestValidate:
    """Tests for query checks that run without any document."""

    def test_well_formed_queries_pass(self, matcher):
        matcher.validate(None)
        matcher.validate({})
        matcher.validate({"status": "open", "total": {"op": "in", "value": (1, 2)}})
        matcher.validate({"op": "plain field named op"})

    def test_unknown_operator(self, matcher):
        with pytest.raises(InvalidArgumentError, match="Unknown operator 'bogus'") as exc_info:
            matcher.validate({"a": {"op": "bogus", "value": 1}})
        assert exc_info.value.context["field"] == "a"

    @pytest.mark.parametrize("operand", ["open", b"open", 1, None])
    def test_in_requires_list(self, matcher, operand):
        with pytest.raises(InvalidArgumentError, match="expects a list"):
            matcher.validate({"status": {"op": "in", "value": operand}})

    def test_non_mapping_query(self, matcher):
        with pytest.raises(InvalidArgumentError, match="Query must be a mapping"):
            matcher.validate([("status", "open")])

    def test_later_condition_still_checked(self, matcher):
        with pytest.raises(InvalidArgumentError):
            matcher.validate({"status": "open", "total": {"op": "between", "value": [1, 2]}})
