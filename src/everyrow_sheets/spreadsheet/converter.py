"""
Conversion between spreadsheet grids and records.

A grid is a 2D list of cell values as read from a selection: row 0 holds header
candidates and every later row is data. A record is an ordered dict mapping a
column header to a cell value.

``grid_to_records`` infers the schema of a selection, dropping columns and rows
that carry no data and synthesizing headers for data columns whose header cell
is blank. ``records_to_grid`` is the inverse used for output: the header row is
the union of record keys in first-seen order.
"""

import json
import math
from typing import Any, Dict, List

import pandas as pd

from everyrow_sheets.exceptions import (
    DuplicateHeaderError,
    EmptyResultError,
    EmptySelectionError,
    NoDataError,
)
from everyrow_sheets.spreadsheet.model import column_letter


Record = Dict[str, Any]


def is_empty_cell(value: Any) -> bool:
    """Return True for cells that hold no data.

    ``None``, blank/whitespace strings and NaN (as produced by pandas for
    missing CSV cells) are empty. Numeric zero and ``False`` are data.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, float) and math.isnan(value):
        return True
    return False


def placeholder_header(col: int) -> str:
    """Header used for a data column whose header cell is blank (``Column AA``)."""
    return f"Column {column_letter(col)}"


def _cell(row: List[Any], col: int) -> Any:
    # Ragged rows: a missing trailing cell is empty
    return row[col] if col < len(row) else None


def grid_to_records(grid: List[List[Any]]) -> List[Record]:
    """Convert a selection grid to a list of records.

    Args:
        grid: 2D list of cell values; row 0 holds headers

    Returns:
        One record per non-empty data row, in input order. Every record has
        the same keys (one per data-bearing column, left to right).

    Raises:
        NoDataError: If the grid has no data rows, or every data row is empty
        EmptySelectionError: If no column has data below the header row
        DuplicateHeaderError: If two data-bearing columns share a header
    """
    if len(grid) < 2:
        raise NoDataError(
            "Selection must include a header row and at least one data row."
        )

    header_row = grid[0]
    data_rows = grid[1:]
    width = max(len(row) for row in grid)

    # A column is valid when at least one data row has a value in it
    valid_cols = [
        col for col in range(width)
        if any(not is_empty_cell(_cell(row, col)) for row in data_rows)
    ]
    if not valid_cols:
        raise EmptySelectionError("Selection contains no data below the header row.")

    headers: List[str] = []
    seen = set()
    for col in valid_cols:
        raw = _cell(header_row, col)
        header = "" if is_empty_cell(raw) else str(raw).strip()
        if not header:
            header = placeholder_header(col)
        if header in seen:
            raise DuplicateHeaderError(header)
        seen.add(header)
        headers.append(header)

    records: List[Record] = []
    for row in data_rows:
        cells = [_cell(row, col) for col in valid_cols]
        if all(is_empty_cell(value) for value in cells):
            continue
        records.append({header: _input_value(value) for header, value in zip(headers, cells)})

    if not records:
        raise NoDataError("Selection contains no non-empty data rows.")

    return records


def _input_value(value: Any) -> Any:
    # NaN is not valid JSON; missing cells go out as blank strings
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return ""
    return value


def _collect_headers(records: List[Record]) -> List[str]:
    headers: List[str] = []
    seen = set()
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


def _output_value(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def records_to_grid(records: List[Record]) -> List[List[Any]]:
    """Convert records to a grid with a header row.

    Args:
        records: Records to render; key sets may differ between records

    Returns:
        2D list whose first row is the union of record keys in first-seen
        order. Missing keys render as ``""`` and structured values (dicts,
        lists) are rendered as JSON strings.

    Raises:
        EmptyResultError: If records is empty
    """
    if not records:
        raise EmptyResultError("No results to write.")

    headers = _collect_headers(records)
    grid: List[List[Any]] = [list(headers)]
    for record in records:
        grid.append([_output_value(record.get(header)) for header in headers])
    return grid


def records_to_dataframe(records: List[Record]) -> pd.DataFrame:
    """Build a DataFrame with the same columns and cell values as ``records_to_grid``."""
    grid = records_to_grid(records)
    return pd.DataFrame(grid[1:], columns=grid[0])


def dataframe_to_grid(df: pd.DataFrame) -> List[List[Any]]:
    """Convert a DataFrame to a grid (header row followed by data rows).

    Missing values become ``None`` so they read as empty cells.
    """
    grid: List[List[Any]] = [[str(col) for col in df.columns]]
    for row in df.astype(object).itertuples(index=False, name=None):
        grid.append([None if is_empty_cell(value) else value for value in row])
    return grid
