"""Tests for the filter -> sort -> paginate pipeline."""

import copy
import random

import pandas as pd
import pytest

from datatable_engine import (
    Column,
    ColumnSchema,
    QueryState,
    SortDirection,
    SortRequest,
    evaluate,
)


def names(result):
    return [row["name"] for row in result.rows]


class TestFilter:
    """Case-insensitive substring match across every column."""

    def test_empty_filter_keeps_everything(self, people, people_schema):
        result = evaluate(people, people_schema, QueryState())
        assert names(result) == ["Charlie", "Alice", "Bob"]
        assert result.total_rows == 3

    def test_matches_numeric_column_by_string_form(self, people_schema):
        records = [{"id": 1, "name": "Alice", "age": 30}, {"id": 2, "name": "Bob", "age": 25}]
        result = evaluate(records, people_schema, QueryState(filter_text="30"))
        assert names(result) == ["Alice"]

    def test_case_insensitive(self, people, people_schema):
        result = evaluate(people, people_schema, QueryState(filter_text="aLi"))
        assert names(result) == ["Alice"]

    def test_substring_anywhere(self, people, people_schema):
        result = evaluate(people, people_schema, QueryState(filter_text="b"))
        assert names(result) == ["Bob"]

    def test_no_tokenisation(self, people, people_schema):
        # "ali bob" is one literal substring, not two terms
        result = evaluate(people, people_schema, QueryState(filter_text="ali bob"))
        assert result.rows == []
        assert result.total_pages == 1

    def test_unsortable_columns_still_searched(self, person_objects, person_columns):
        result = evaluate(person_objects, person_columns, QueryState(filter_text="chicago"))
        assert [p.name for p in result.rows] == ["Charlie"]

    def test_regex_characters_are_literal(self):
        schema = ColumnSchema([Column.from_key("code")])
        records = [{"id": 1, "code": "a.c"}, {"id": 2, "code": "abc"}]
        result = evaluate(records, schema, QueryState(filter_text="a.c"))
        assert [r["id"] for r in result.rows] == [1]

    def test_empty_schema_matches_nothing(self, people):
        result = evaluate(people, [], QueryState(filter_text="a"))
        assert result.rows == []
        assert result.total_rows == 0

    def test_empty_schema_without_filter(self, people):
        result = evaluate(people, [], QueryState())
        assert result.rows == people

    def test_none_values_formatted(self):
        schema = ColumnSchema([Column.from_key("note")])
        records = [{"id": 1, "note": None}, {"id": 2, "note": "x"}]
        result = evaluate(records, schema, QueryState(filter_text="none"))
        assert [r["id"] for r in result.rows] == [1]

    def test_filter_property(self, numbered_rows, numbered_schema):
        for text in ["1", "row_2", "B", "", "zz", "ROW"]:
            result = evaluate(
                numbered_rows, numbered_schema, QueryState(filter_text=text, items_per_page=100)
            )
            expected = [
                r for r in numbered_rows
                if not text
                or any(text.lower() in str(c.extract(r)).lower() for c in numbered_schema)
            ]
            assert result.rows == expected


class TestSort:
    """String-based stable sort on a single column."""

    def test_ascending(self, people, people_schema):
        query = QueryState(sort=SortRequest("name", SortDirection.ASCENDING))
        assert names(evaluate(people, people_schema, query)) == ["Alice", "Bob", "Charlie"]

    def test_descending(self, people, people_schema):
        query = QueryState(sort=SortRequest("name", SortDirection.DESCENDING))
        assert names(evaluate(people, people_schema, query)) == ["Charlie", "Bob", "Alice"]

    def test_numbers_sort_lexicographically(self):
        schema = ColumnSchema([Column.from_key("n")])
        records = [{"id": i, "n": n} for i, n in enumerate([2, 10, 33])]
        result = evaluate(records, schema, QueryState(sort=SortRequest("n")))
        assert [r["n"] for r in result.rows] == [10, 2, 33]

    def test_uppercase_before_lowercase(self):
        schema = ColumnSchema([Column.from_key("name")])
        records = [{"id": 1, "name": "bob"}, {"id": 2, "name": "Bob"}, {"id": 3, "name": "alice"}]
        result = evaluate(records, schema, QueryState(sort=SortRequest("name")))
        assert [r["name"] for r in result.rows] == ["Bob", "alice", "bob"]

    def test_unknown_column_is_ignored(self, people, people_schema):
        result = evaluate(people, people_schema, QueryState(sort=SortRequest("missing")))
        assert names(result) == ["Charlie", "Alice", "Bob"]
        assert result.sort is None

    def test_unsortable_column_is_ignored(self, person_objects, person_columns):
        query = QueryState(sort=SortRequest("city", SortDirection.ASCENDING))
        result = evaluate(person_objects, person_columns, query)
        assert [p.name for p in result.rows] == ["Alice", "Bob", "Charlie"]
        assert result.sort is None

    def test_applied_sort_reported(self, people, people_schema):
        sort = SortRequest("age", SortDirection.DESCENDING)
        assert evaluate(people, people_schema, QueryState(sort=sort)).sort == sort

    @pytest.mark.parametrize("direction", [SortDirection.ASCENDING, SortDirection.DESCENDING])
    def test_stable_for_equal_keys(self, numbered_rows, numbered_schema, direction):
        query = QueryState(sort=SortRequest("group", direction), items_per_page=100)
        result = evaluate(numbered_rows, numbered_schema, query)

        for group in "ABC":
            ids = [r["id"] for r in result.rows if r["group"] == group]
            assert ids == sorted(ids)

        groups = [r["group"] for r in result.rows]
        assert groups == sorted(groups, reverse=direction is SortDirection.DESCENDING)

    def test_stable_sort_matches_python_sorted(self, numbered_schema):
        rng = random.Random(7)
        records = [{"id": i, "group": rng.choice("xyz"), "label": "r"} for i in range(60)]
        query = QueryState(sort=SortRequest("group"), items_per_page=100)

        result = evaluate(records, numbered_schema, query)
        assert result.rows == sorted(records, key=lambda r: str(r["group"]))

    def test_shuffle_then_restore_gives_same_order(self, numbered_rows, numbered_schema):
        query = QueryState(sort=SortRequest("group"), items_per_page=100)
        shuffled = list(numbered_rows)
        random.Random(3).shuffle(shuffled)
        restored = sorted(shuffled, key=lambda r: r["id"])

        assert evaluate(restored, numbered_schema, query).rows == evaluate(
            numbered_rows, numbered_schema, query
        ).rows


class TestPaginate:
    """Page window and page count."""

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 10, 25, 30])
    def test_bounds(self, numbered_rows, numbered_schema, size):
        total = len(numbered_rows)
        expected_pages = max(1, -(-total // size))
        for page in range(1, expected_pages + 1):
            result = evaluate(
                numbered_rows, numbered_schema, QueryState(items_per_page=size, current_page=page)
            )
            assert result.total_pages == expected_pages
            assert len(result.rows) <= size
            assert result.rows == numbered_rows[(page - 1) * size: page * size]

    def test_page_past_end_returns_empty(self, numbered_rows, numbered_schema):
        result = evaluate(
            numbered_rows, numbered_schema, QueryState(items_per_page=10, current_page=9)
        )
        assert result.rows == []
        assert result.total_pages == 3
        assert result.page == 9
        assert not result.is_page_in_range

    def test_filter_shrinks_below_current_page(self, numbered_rows, numbered_schema):
        query = QueryState(items_per_page=5, current_page=4)
        assert len(evaluate(numbered_rows, numbered_schema, query).rows) == 5

        query.set_filter_text("row_1")
        result = evaluate(numbered_rows, numbered_schema, query)
        # row_1, row_10..row_19: 11 rows, 3 pages; page 4 is out of range
        assert result.total_rows == 11
        assert result.total_pages == 3
        assert result.rows == []
        assert query.current_page == 4

    def test_empty_collection(self, people_schema):
        result = evaluate([], people_schema, QueryState())
        assert result.rows == []
        assert result.total_pages == 1
        assert result.total_rows == 0

    def test_navigation_flags(self, numbered_rows, numbered_schema):
        first = evaluate(numbered_rows, numbered_schema, QueryState(current_page=1))
        middle = evaluate(numbered_rows, numbered_schema, QueryState(current_page=2))
        last = evaluate(numbered_rows, numbered_schema, QueryState(current_page=3))

        assert (first.has_previous, first.has_next) == (False, True)
        assert (middle.has_previous, middle.has_next) == (True, True)
        assert (last.has_previous, last.has_next) == (True, False)
        assert middle.page_label == "Page 2 of 3"


class TestUnencodableText:
    """Strings with lone surrogates are valid Python but not valid UTF-8."""

    @pytest.fixture
    def paths(self):
        schema = ColumnSchema([Column.from_key("path")])
        records = [{"id": 1, "path": "bad\udcffname"}, {"id": 2, "path": "ok"}]
        return records, schema

    def test_filter_does_not_crash(self, paths):
        records, schema = paths
        result = evaluate(records, schema, QueryState(filter_text="ok"))
        assert [r["id"] for r in result.rows] == [2]

    def test_surrogate_value_is_searchable(self, paths):
        records, schema = paths
        result = evaluate(records, schema, QueryState(filter_text="bad"))
        assert result.rows == [records[0]]
        assert result.rows[0]["path"] == "bad\udcffname"

    def test_surrogate_in_filter_text(self, paths):
        records, schema = paths
        result = evaluate(records, schema, QueryState(filter_text="\udcff"))
        assert [r["id"] for r in result.rows] == [1]

    def test_sort_does_not_crash(self, paths):
        records, schema = paths
        result = evaluate(records, schema, QueryState(sort=SortRequest("path")))
        assert [r["id"] for r in result.rows] == [1, 2]


class TestPurity:
    """evaluate() has no hidden state."""

    def test_idempotent(self, people, people_schema):
        query = QueryState(filter_text="a", sort=SortRequest("age"), items_per_page=1)
        first = evaluate(people, people_schema, query)
        second = evaluate(people, people_schema, query)

        assert first.rows == second.rows
        assert first.total_pages == second.total_pages
        assert first.data_hash == second.data_hash

    def test_inputs_not_mutated(self, people, people_schema):
        before = copy.deepcopy(people)
        query = QueryState(sort=SortRequest("name", SortDirection.DESCENDING))
        snapshot = query.to_dict()

        evaluate(people, people_schema, query)

        assert people == before
        assert query.to_dict() == snapshot

    def test_hash_changes_with_page(self, numbered_rows, numbered_schema):
        page1 = evaluate(numbered_rows, numbered_schema, QueryState(current_page=1))
        page2 = evaluate(numbered_rows, numbered_schema, QueryState(current_page=2))
        assert page1.data_hash != page2.data_hash

    def test_rows_are_original_objects(self, person_objects, person_columns):
        result = evaluate(person_objects, person_columns, QueryState())
        assert all(a is b for a, b in zip(result.rows, person_objects))

    def test_accepts_generators(self, people, people_schema):
        result = evaluate((p for p in people), people_schema, QueryState(filter_text="bob"))
        assert names(result) == ["Bob"]


class TestEndToEnd:
    """Three records, two sortable columns, two per page."""

    def test_sorted_pages(self, people, people_schema):
        query = QueryState(items_per_page=2)
        query.toggle_sort("name", people_schema)

        page1 = evaluate(people, people_schema, query)
        assert names(page1) == ["Alice", "Bob"]
        assert page1.total_pages == 2

        query.go_to_page(2, page1.total_pages)
        page2 = evaluate(people, people_schema, query)
        assert names(page2) == ["Charlie"]
        assert page2.total_pages == 2


class TestToPandas:
    """Hand-off frame for rendering."""

    def test_visible_window(self, people, people_schema):
        query = QueryState(sort=SortRequest("name"), items_per_page=2)
        df = evaluate(people, people_schema, query).to_pandas()

        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ["Name", "Age"]
        assert df["Name"].tolist() == ["Alice", "Bob"]
        assert df["Age"].tolist() == [30, 25]

    def test_empty_window_keeps_headers(self, people, people_schema):
        df = evaluate(people, people_schema, QueryState(filter_text="zzz")).to_pandas()
        assert list(df.columns) == ["Name", "Age"]
        assert len(df) == 0

    def test_custom_columns(self, people, people_schema):
        df = evaluate(people, people_schema, QueryState()).to_pandas(
            [people_schema.get("age")]
        )
        assert list(df.columns) == ["Age"]
