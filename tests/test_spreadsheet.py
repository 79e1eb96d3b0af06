"""
Unit tests for the spreadsheet module.

Tests cover:
- column_letter / letter_to_column: bijective base-26 column names
- Range: A1 parsing/formatting and slicing a grid
- grid_to_records: schema inference from a selection
- records_to_grid: header union and value rendering for output
- DataFrame helpers
"""

import json
import math

import pandas as pd
import pytest

from everyrow_sheets.exceptions import (
    DuplicateHeaderError,
    EmptyResultError,
    EmptySelectionError,
    NoDataError,
    ValidationError,
)
from everyrow_sheets.spreadsheet.converter import (
    dataframe_to_grid,
    grid_to_records,
    is_empty_cell,
    records_to_dataframe,
    records_to_grid,
)
from everyrow_sheets.spreadsheet.model import Range, column_letter, letter_to_column


class TestColumnLetters:
    """Test suite for column letter encoding."""

    @pytest.mark.parametrize("index,letters", [
        (0, "A"),
        (1, "B"),
        (25, "Z"),
        (26, "AA"),
        (27, "AB"),
        (51, "AZ"),
        (52, "BA"),
        (701, "ZZ"),
        (702, "AAA"),
    ])
    def test_column_letter(self, index, letters):
        """Indices map to bijective base-26 letters with no zero digit."""
        assert column_letter(index) == letters
        assert letter_to_column(letters) == index

    def test_negative_index_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            column_letter(-1)


class TestRange:
    """Test suite for Range."""

    def test_parse_single_cell(self):
        r = Range.from_a1("B5")
        assert (r.row, r.col, r.row_end, r.col_end) == (4, 1, 4, 1)
        assert r.to_a1() == "B5"

    def test_parse_range(self):
        r = Range.from_a1("A1:C10")
        assert (r.row, r.col, r.row_end, r.col_end) == (0, 0, 9, 2)
        assert r.num_rows == 10
        assert r.num_cols == 3
        assert r.to_a1() == "A1:C10"

    def test_parse_ignores_sheet_prefix_and_case(self):
        assert Range.from_a1("Data!b2:c3") == Range(1, 1, 2, 2)

    @pytest.mark.parametrize("notation", ["", "A", "1A", "A1:B2:C3", "A0B"])
    def test_invalid_notation(self, notation):
        with pytest.raises(ValueError):
            Range.from_a1(notation)

    def test_end_before_start_rejected(self):
        with pytest.raises(ValueError, match="End coordinates"):
            Range.from_a1("C3:A1")

    def test_slice_pads_beyond_grid(self):
        grid = [["a", "b"], ["c"]]
        assert Range.from_a1("B1:C3").slice(grid) == [
            ["b", None],
            [None, None],
            [None, None],
        ]


class TestIsEmptyCell:
    """Test suite for the empty-cell rule."""

    @pytest.mark.parametrize("value", [None, "", "   ", "\t\n", float("nan")])
    def test_empty_values(self, value):
        assert is_empty_cell(value)

    @pytest.mark.parametrize("value", [0, 0.0, False, "0", "x", " x "])
    def test_non_empty_values(self, value):
        """Numeric zero and False are data, not blanks."""
        assert not is_empty_cell(value)


class TestGridToRecords:
    """Test suite for selection -> records conversion."""

    def test_basic_conversion(self, companies_grid):
        assert grid_to_records(companies_grid) == [
            {"Name": "Apple", "Emp": 150000},
            {"Name": "Acme", "Emp": 500},
        ]

    def test_record_keys_follow_column_order(self, companies_grid):
        records = grid_to_records(companies_grid)
        assert list(records[0]) == ["Name", "Emp"]

    def test_headers_are_trimmed(self):
        grid = [["  Name ", "Emp\t"], ["Apple", 1]]
        assert grid_to_records(grid) == [{"Name": "Apple", "Emp": 1}]

    def test_blank_header_gets_placeholder(self):
        grid = [["Name", "", None], ["Apple", 1, "x"]]
        assert grid_to_records(grid) == [
            {"Name": "Apple", "Column B": 1, "Column C": "x"},
        ]

    def test_placeholder_uses_absolute_column_index(self):
        """Column 26 is named AA even when earlier columns are dropped."""
        header = [None] * 27
        header[0] = "Name"
        row = [None] * 27
        row[0] = "Apple"
        row[26] = 42
        assert grid_to_records([header, row]) == [{"Name": "Apple", "Column AA": 42}]

    def test_numeric_header_is_stringified(self):
        grid = [[2024, "Name"], [1, "a"]]
        assert grid_to_records(grid) == [{"2024": 1, "Name": "a"}]

    def test_empty_columns_are_dropped(self):
        """A column with a header but no data below it is not part of the schema."""
        grid = [
            ["Name", "Notes", "Emp"],
            ["Apple", "", 150000],
            ["Acme", None, 500],
        ]
        assert grid_to_records(grid) == [
            {"Name": "Apple", "Emp": 150000},
            {"Name": "Acme", "Emp": 500},
        ]

    def test_empty_rows_are_dropped(self):
        grid = [
            ["Name", "Emp"],
            ["", None],
            ["Apple", 150000],
            ["  ", ""],
            ["Acme", 500],
        ]
        assert [r["Name"] for r in grid_to_records(grid)] == ["Apple", "Acme"]

    def test_zero_is_data(self):
        grid = [["Name", "Count"], ["a", 0], ["", 0]]
        assert grid_to_records(grid) == [
            {"Name": "a", "Count": 0},
            {"Name": "", "Count": 0},
        ]

    def test_missing_cells_in_ragged_rows(self):
        grid = [["Name", "Emp", "City"], ["Apple"], ["Acme", 500, "Paris"]]
        assert grid_to_records(grid) == [
            {"Name": "Apple", "Emp": "", "City": ""},
            {"Name": "Acme", "Emp": 500, "City": "Paris"},
        ]

    def test_nan_cell_becomes_blank(self):
        """NaN in a data-bearing column is emitted as "" so the body stays valid JSON."""
        grid = [["a", "b"], ["x", math.nan], ["y", 1]]
        records = grid_to_records(grid)

        assert records == [{"a": "x", "b": ""}, {"a": "y", "b": 1}]
        json.dumps(records, allow_nan=False)

    @pytest.mark.parametrize("headers", [
        ["Name", "Name"],
        ["Name", " Name "],
        ["Column B", ""],
    ])
    def test_duplicate_headers(self, headers):
        """Duplicates after trimming (including synthesized names) are rejected."""
        grid = [headers, ["a", "b"]]
        with pytest.raises(DuplicateHeaderError) as exc_info:
            grid_to_records(grid)
        assert exc_info.value.header in ("Name", "Column B")

    def test_header_comparison_is_case_sensitive(self):
        grid = [["Name", "name"], ["a", "b"]]
        assert grid_to_records(grid) == [{"Name": "a", "name": "b"}]

    def test_duplicate_header_on_empty_column_is_ignored(self):
        grid = [["Name", "Name"], ["a", ""]]
        assert grid_to_records(grid) == [{"Name": "a"}]

    def test_no_valid_columns(self):
        grid = [["Name", "Emp"], ["", None], [" ", ""]]
        with pytest.raises(EmptySelectionError):
            grid_to_records(grid)

    def test_header_only(self):
        with pytest.raises(NoDataError):
            grid_to_records([["Name", "Emp"]])

    def test_errors_are_validation_errors(self):
        with pytest.raises(ValidationError):
            grid_to_records([])


class TestRecordsToGrid:
    """Test suite for records -> output grid conversion."""

    def test_header_union_in_first_seen_order(self):
        records = [
            {"Name": "Apple", "Emp": 150000},
            {"Name": "Acme", "score": 3, "Emp": 500},
            {"rank": 1},
        ]
        grid = records_to_grid(records)
        assert grid[0] == ["Name", "Emp", "score", "rank"]

    def test_missing_keys_render_empty(self):
        grid = records_to_grid([{"a": 1}, {"b": 2}])
        assert grid == [["a", "b"], [1, ""], ["", 2]]

    def test_none_renders_empty(self):
        assert records_to_grid([{"a": None}]) == [["a"], [""]]

    def test_structured_values_become_json(self):
        grid = records_to_grid([{"meta": {"k": [1, 2]}, "tags": ["x", "y"]}])
        assert grid[1] == ['{"k": [1, 2]}', '["x", "y"]']

    def test_scalars_pass_through(self):
        grid = records_to_grid([{"n": 1.5, "ok": False, "s": "text"}])
        assert grid[1] == [1.5, False, "text"]

    def test_empty_records(self):
        with pytest.raises(EmptyResultError):
            records_to_grid([])

    def test_round_trip(self):
        """forward then inverse reproduces the same values for well-formed input."""
        grid = [
            ["Name", "Industry", "Emp"],
            ["Apple", "Technology", 150000],
            ["Google", "Technology", 180000],
            ["Acme Corp", "Manufacturing", 500],
        ]
        assert records_to_grid(grid_to_records(grid)) == grid


class TestDataFrameHelpers:
    """Test suite for pandas interop."""

    def test_records_to_dataframe(self):
        df = records_to_dataframe([{"a": 1}, {"b": {"x": 1}}])
        assert list(df.columns) == ["a", "b"]
        assert df.iloc[1]["b"] == '{"x": 1}'
        assert df.iloc[1]["a"] == ""

    def test_dataframe_to_grid_missing_values(self):
        df = pd.DataFrame({"Name": ["Apple", None], "Emp": [150000, math.nan]})
        grid = dataframe_to_grid(df)
        assert grid[0] == ["Name", "Emp"]
        assert grid[1] == ["Apple", 150000.0]
        assert grid[2] == [None, None]

    def test_dataframe_selection_round_trip(self):
        df = pd.DataFrame({"Name": ["Apple", "Acme"], "Emp": [150000, 500]})
        assert grid_to_records(dataframe_to_grid(df)) == [
            {"Name": "Apple", "Emp": 150000},
            {"Name": "Acme", "Emp": 500},
        ]
