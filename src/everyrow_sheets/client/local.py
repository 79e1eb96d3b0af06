"""
In-memory workbook.

LocalWorkbook stands in for a spreadsheet when no Google credentials are
available: it serves selections from in-memory grids and records every result
sheet written to it, using the same unique-naming rule as GoogleSheetsWriter.
Sheets can be seeded from CSV files or DataFrames via pandas.
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import pandas as pd

from everyrow_sheets.client.base import unique_sheet_name
from everyrow_sheets.spreadsheet.converter import dataframe_to_grid
from everyrow_sheets.spreadsheet.model import Range


class LocalWorkbook:
    """In-process workbook implementing SelectionProvider and SheetWriter.

    Usage::

        workbook = LocalWorkbook.from_csv("companies.csv")
        workbook.select("A1:C20")
        ...
        results = workbook.read_sheet("Rank Results")
    """

    def __init__(self, sheets: dict[str, list[list[Any]]] | None = None) -> None:
        self._sheets: dict[str, list[list[Any]]] = {}
        self.active_sheet: str | None = None
        self.selection: Range | None = None
        for name, grid in (sheets or {}).items():
            self.add_sheet(name, grid)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame, name: str = "Sheet1") -> LocalWorkbook:
        return cls({name: dataframe_to_grid(df)})

    @classmethod
    def from_csv(cls, path: str | Path, name: str | None = None, **kwargs: Any) -> LocalWorkbook:
        """Load a CSV file (via ``pandas.read_csv``) as the active sheet."""
        df = pd.read_csv(path, **kwargs)
        return cls.from_dataframe(df, name or Path(path).stem)

    @property
    def sheet_names(self) -> list[str]:
        return list(self._sheets)

    def add_sheet(self, name: str, grid: list[list[Any]]) -> None:
        """Add or replace a sheet. The first sheet added becomes active."""
        self._sheets[name] = copy.deepcopy(grid)
        if self.active_sheet is None:
            self.active_sheet = name

    def select(self, notation: str | None, sheet: str | None = None) -> None:
        """Set the selection to an A1 range (None selects the whole sheet)."""
        if sheet is not None:
            if sheet not in self._sheets:
                raise KeyError(f"Sheet '{sheet}' not found")
            self.active_sheet = sheet
        self.selection = Range.from_a1(notation) if notation else None

    def get_selection(self) -> list[list[Any]]:
        if self.active_sheet is None:
            return []
        grid = self._sheets[self.active_sheet]
        if self.selection is None:
            return copy.deepcopy(grid)
        return self.selection.slice(grid)

    def get_sheet(self, name: str) -> list[list[Any]]:
        if name not in self._sheets:
            raise KeyError(f"Sheet '{name}' not found")
        return copy.deepcopy(self._sheets[name])

    def write_sheet(self, grid: list[list[Any]], name: str) -> str:
        title = unique_sheet_name(name, self.sheet_names)
        self._sheets[title] = copy.deepcopy(grid)
        return title

    def read_sheet(self, name: str) -> list[list[Any]]:
        return self.get_sheet(name)
