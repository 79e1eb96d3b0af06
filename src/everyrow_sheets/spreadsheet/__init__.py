"""
Spreadsheet module.

This module provides the spreadsheet-side data handling: A1 addressing and the
conversion between selection grids and records.
"""

from everyrow_sheets.spreadsheet.model import (
    Range,
    column_letter,
    letter_to_column,
)
from everyrow_sheets.spreadsheet.converter import (
    Record,
    dataframe_to_grid,
    grid_to_records,
    is_empty_cell,
    records_to_dataframe,
    records_to_grid,
)

__all__ = [
    "Range",
    "column_letter",
    "letter_to_column",
    "Record",
    "dataframe_to_grid",
    "grid_to_records",
    "is_empty_cell",
    "records_to_dataframe",
    "records_to_grid",
]
