"""Tests for frontmatter predicates and ordering."""

from __future__ import annotations

import pytest

from tasknotes.infrastructure.query import matches_where, parse_where, sort_records

FM = {"status": "open", "tags": ["task", "work"], "due": "2026-03-05", "estimate": 30}


class TestMatchesWhere:
    @pytest.mark.parametrize(
        "where",
        [
            None,
            {},
            {"status": "open"},
            {"status": {"eq": "open"}},
            {"status": {"neq": "done"}},
            {"tags": "work"},
            {"tags": {"contains": "task"}},
            {"status": {"in": ["open", "in-progress"]}},
            {"status": {"not_in": ["done", "cancelled"]}},
            {"due": {"lt": "2026-03-06"}},
            {"due": {"gte": "2026-03-05", "lte": "2026-03-05"}},
            {"estimate": {"gt": 15}},
            {"due": {"exists": True}},
            {"missing": {"exists": False}},
        ],
    )
    def test_matches(self, where: dict | None) -> None:
        assert matches_where(FM, where) is True

    @pytest.mark.parametrize(
        "where",
        [
            {"status": "done"},
            {"status": {"neq": "open"}},
            {"tags": {"contains": "home"}},
            {"status": {"not_in": ["open"]}},
            {"due": {"lt": "2026-03-05"}},
            {"missing": {"lt": "2026-03-05"}},
            {"missing": {"exists": True}},
            {"status": "open", "tags": {"contains": "home"}},
        ],
    )
    def test_rejects(self, where: dict) -> None:
        assert matches_where(FM, where) is False

    def test_contains_substring_on_strings(self) -> None:
        assert matches_where({"title": "Buy groceries"}, {"title": {"contains": "groc"}})

    def test_numbers_compare_numerically(self) -> None:
        assert matches_where({"n": 10}, {"n": {"gt": 9}})

    def test_unknown_operator(self) -> None:
        with pytest.raises(ValueError, match="regex"):
            matches_where(FM, {"status": {"regex": "o.*"}})


class TestParseWhere:
    def test_yaml_flow_mapping(self) -> None:
        assert parse_where("{status: {in: [open, done]}}") == {"status": {"in": ["open", "done"]}}

    def test_json(self) -> None:
        assert parse_where('{"priority": "high"}') == {"priority": "high"}

    def test_dates_become_iso_strings(self) -> None:
        assert parse_where("due: {lt: 2026-03-01}") == {"due": {"lt": "2026-03-01"}}

    @pytest.mark.parametrize("text", ["", "open", "[a, b]", "{a: [b"])
    def test_rejects_non_mappings(self, text: str) -> None:
        with pytest.raises(ValueError, match="Invalid where expression"):
            parse_where(text)


class TestSortRecords:
    def test_missing_last_both_directions(self) -> None:
        records = [{"due": None}, {"due": "2026-03-09"}, {}, {"due": "2026-03-01"}]
        asc = sort_records(records, [{"field": "due", "direction": "asc"}], key=lambda r: r)
        desc = sort_records(records, [{"field": "due", "direction": "desc"}], key=lambda r: r)
        assert [r.get("due") for r in asc] == ["2026-03-01", "2026-03-09", None, None]
        assert [r.get("due") for r in desc] == ["2026-03-09", "2026-03-01", None, None]

    def test_multi_key(self) -> None:
        records = [
            {"p": "b", "t": "2"},
            {"p": "a", "t": "9"},
            {"p": "b", "t": "1"},
        ]
        ordered = sort_records(records, [{"field": "p"}, {"field": "t"}], key=lambda r: r)
        assert ordered == [{"p": "a", "t": "9"}, {"p": "b", "t": "1"}, {"p": "b", "t": "2"}]

    def test_no_order(self) -> None:
        records = [{"a": 2}, {"a": 1}]
        assert sort_records(records, None, key=lambda r: r) == records
