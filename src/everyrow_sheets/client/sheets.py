"""
Google Sheets collaborators.

This module reads selections from and writes result sheets to a Google
spreadsheet via gspread, with error wrapping for the API calls involved.
"""

from typing import Any, List, Optional

import gspread
from gspread.exceptions import APIError, WorksheetNotFound
from gspread.utils import ValueRenderOption

from everyrow_sheets.client.base import unique_sheet_name
from everyrow_sheets.exceptions import SheetsAPIError


class GoogleSheetsSelection:
    """
    Reads input grids from a Google spreadsheet.

    Values are read unformatted so numbers arrive as numbers rather than as
    their displayed text.

    Attributes:
        spreadsheet: The gspread spreadsheet to read from
        worksheet_name: Worksheet holding the selection (first sheet if None)
        range_name: A1 range of the selection (whole sheet if None)
    """

    def __init__(
        self,
        spreadsheet: gspread.Spreadsheet,
        worksheet_name: Optional[str] = None,
        range_name: Optional[str] = None,
    ) -> None:
        self.spreadsheet = spreadsheet
        self.worksheet_name = worksheet_name
        self.range_name = range_name

    def get_selection(self) -> List[List[Any]]:
        """
        Read the configured selection.

        Raises:
            SheetsAPIError: If the worksheet is missing or the API call fails
        """
        worksheet = self._worksheet(self.worksheet_name)
        try:
            return worksheet.get_values(
                self.range_name,
                value_render_option=ValueRenderOption.unformatted,
            )
        except APIError as e:
            raise SheetsAPIError(
                f"Failed to read selection '{self.range_name or worksheet.title}': {e}"
            ) from e

    def get_sheet(self, name: str) -> List[List[Any]]:
        """
        Read every value of the named worksheet.

        Raises:
            SheetsAPIError: If the worksheet is missing or the API call fails
        """
        worksheet = self._worksheet(name)
        try:
            return worksheet.get_values(value_render_option=ValueRenderOption.unformatted)
        except APIError as e:
            raise SheetsAPIError(f"Failed to read worksheet '{name}': {e}") from e

    def _worksheet(self, name: Optional[str]) -> gspread.Worksheet:
        try:
            if name is None:
                return self.spreadsheet.sheet1
            return self.spreadsheet.worksheet(name)
        except WorksheetNotFound as e:
            raise SheetsAPIError(f"Worksheet '{name}' not found") from e
        except APIError as e:
            raise SheetsAPIError(f"Failed to open worksheet '{name}': {e}") from e


class GoogleSheetsWriter:
    """
    Writes result grids to new worksheets of a Google spreadsheet.

    Attributes:
        spreadsheet: The gspread spreadsheet to add worksheets to
    """

    def __init__(self, spreadsheet: gspread.Spreadsheet) -> None:
        self.spreadsheet = spreadsheet

    def write_sheet(self, grid: List[List[Any]], name: str) -> str:
        """
        Add a worksheet sized to ``grid`` and write the grid from A1.

        The header row is frozen. If ``name`` is taken a counter is appended.

        Args:
            grid: 2D list of values, header row first
            name: Desired worksheet title

        Returns:
            The title actually used

        Raises:
            SheetsAPIError: If any API call fails
        """
        try:
            existing = [ws.title for ws in self.spreadsheet.worksheets()]
        except APIError as e:
            raise SheetsAPIError(f"Failed to list worksheets: {e}") from e

        title = unique_sheet_name(name, existing)
        rows = max(len(grid), 1)
        cols = max((len(row) for row in grid), default=1) or 1

        try:
            worksheet = self.spreadsheet.add_worksheet(title=title, rows=rows, cols=cols)
        except APIError as e:
            raise SheetsAPIError(f"Failed to add worksheet '{title}' to spreadsheet: {e}") from e

        try:
            worksheet.update(grid, range_name="A1")
            worksheet.freeze(rows=1)
        except APIError as e:
            raise SheetsAPIError(f"Failed to write results to worksheet '{title}': {e}") from e

        return title
