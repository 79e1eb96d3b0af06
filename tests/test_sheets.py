"""
Unit tests for the spreadsheet collaborators.

GoogleSheetsSelection / GoogleSheetsWriter tests mock gspread - no real API
calls are made. LocalWorkbook tests run fully in memory.
"""

from unittest.mock import Mock

import gspread
import pandas as pd
import pytest
from gspread.exceptions import APIError, WorksheetNotFound
from gspread.utils import ValueRenderOption

from everyrow_sheets.client.base import (
    EnvCredentialProvider,
    StaticCredentialProvider,
    unique_sheet_name,
)
from everyrow_sheets.client.local import LocalWorkbook
from everyrow_sheets.client.sheets import GoogleSheetsSelection, GoogleSheetsWriter
from everyrow_sheets.exceptions import SheetsAPIError


def _api_error(code=429, message="Quota exceeded"):
    mock_response = Mock()
    mock_response.json.return_value = {
        "error": {"code": code, "message": message, "status": "RESOURCE_EXHAUSTED"}
    }
    return APIError(mock_response)


def _worksheet(title):
    ws = Mock(spec=gspread.Worksheet)
    ws.title = title
    return ws


class TestUniqueSheetName:
    """Test suite for unique_sheet_name."""

    def test_free_name_is_kept(self):
        assert unique_sheet_name("Rank Results", ["Sheet1"]) == "Rank Results"

    def test_counter_appended(self):
        assert unique_sheet_name("Rank Results", ["Rank Results"]) == "Rank Results (2)"

    def test_counter_skips_taken_numbers(self):
        existing = ["Rank Results", "Rank Results (2)", "Rank Results (3)"]
        assert unique_sheet_name("Rank Results", existing) == "Rank Results (4)"


class TestCredentialProviders:
    """Test suite for credential providers."""

    def test_static(self):
        assert StaticCredentialProvider("sk-cho-1").get_credential() == "sk-cho-1"
        assert StaticCredentialProvider("").get_credential() is None

    def test_env(self, monkeypatch):
        monkeypatch.setenv("EVERYROW_API_KEY", "  sk-cho-env ")
        assert EnvCredentialProvider().get_credential() == "sk-cho-env"

    def test_env_missing(self, monkeypatch):
        monkeypatch.delenv("EVERYROW_API_KEY", raising=False)
        assert EnvCredentialProvider().get_credential() is None


class TestGoogleSheetsSelection:
    """Test suite for GoogleSheetsSelection."""

    def test_reads_range_unformatted(self):
        spreadsheet = Mock(spec=gspread.Spreadsheet)
        ws = _worksheet("Data")
        ws.get_values.return_value = [["Name", "Emp"], ["Apple", 150000]]
        spreadsheet.worksheet.return_value = ws

        selection = GoogleSheetsSelection(spreadsheet, "Data", "A1:B2")
        assert selection.get_selection() == [["Name", "Emp"], ["Apple", 150000]]

        spreadsheet.worksheet.assert_called_once_with("Data")
        ws.get_values.assert_called_once_with(
            "A1:B2", value_render_option=ValueRenderOption.unformatted
        )

    def test_defaults_to_first_sheet(self):
        spreadsheet = Mock(spec=gspread.Spreadsheet)
        ws = _worksheet("Sheet1")
        ws.get_values.return_value = [["a"], [1]]
        spreadsheet.sheet1 = ws

        assert GoogleSheetsSelection(spreadsheet).get_selection() == [["a"], [1]]
        spreadsheet.worksheet.assert_not_called()

    def test_get_sheet(self):
        spreadsheet = Mock(spec=gspread.Spreadsheet)
        ws = _worksheet("Right")
        ws.get_values.return_value = [["Company"], ["Apple"]]
        spreadsheet.worksheet.return_value = ws

        assert GoogleSheetsSelection(spreadsheet).get_sheet("Right") == [["Company"], ["Apple"]]
        ws.get_values.assert_called_once_with(value_render_option=ValueRenderOption.unformatted)

    def test_missing_worksheet(self):
        spreadsheet = Mock(spec=gspread.Spreadsheet)
        spreadsheet.worksheet.side_effect = WorksheetNotFound("Nope")

        with pytest.raises(SheetsAPIError, match="Worksheet 'Nope' not found"):
            GoogleSheetsSelection(spreadsheet).get_sheet("Nope")

    def test_api_error_wrapped(self):
        spreadsheet = Mock(spec=gspread.Spreadsheet)
        ws = _worksheet("Data")
        ws.get_values.side_effect = _api_error()
        spreadsheet.worksheet.return_value = ws

        with pytest.raises(SheetsAPIError) as exc_info:
            GoogleSheetsSelection(spreadsheet, "Data", "A1:C9").get_selection()
        assert "A1:C9" in str(exc_info.value)
        assert "Quota exceeded" in str(exc_info.value)


class TestGoogleSheetsWriter:
    """Test suite for GoogleSheetsWriter."""

    def test_write_new_sheet(self):
        spreadsheet = Mock(spec=gspread.Spreadsheet)
        spreadsheet.worksheets.return_value = [_worksheet("Sheet1")]
        new_ws = _worksheet("Rank Results")
        spreadsheet.add_worksheet.return_value = new_ws
        grid = [["Name", "Emp", "score"], ["Apple", 150000, 9], ["Acme", 500, 2]]

        title = GoogleSheetsWriter(spreadsheet).write_sheet(grid, "Rank Results")

        assert title == "Rank Results"
        spreadsheet.add_worksheet.assert_called_once_with(title="Rank Results", rows=3, cols=3)
        new_ws.update.assert_called_once_with(grid, range_name="A1")
        new_ws.freeze.assert_called_once_with(rows=1)

    def test_write_avoids_name_collision(self):
        spreadsheet = Mock(spec=gspread.Spreadsheet)
        spreadsheet.worksheets.return_value = [_worksheet("Rank Results")]
        spreadsheet.add_worksheet.return_value = _worksheet("Rank Results (2)")

        title = GoogleSheetsWriter(spreadsheet).write_sheet([["a"], [1]], "Rank Results")

        assert title == "Rank Results (2)"
        spreadsheet.add_worksheet.assert_called_once_with(title="Rank Results (2)", rows=2, cols=1)

    def test_add_worksheet_error_wrapped(self):
        spreadsheet = Mock(spec=gspread.Spreadsheet)
        spreadsheet.worksheets.return_value = []
        spreadsheet.add_worksheet.side_effect = _api_error(400, "Sheet name already exists")

        with pytest.raises(SheetsAPIError) as exc_info:
            GoogleSheetsWriter(spreadsheet).write_sheet([["a"], [1]], "Results")
        assert "Failed to add worksheet 'Results'" in str(exc_info.value)
        assert "Sheet name already exists" in str(exc_info.value)

    def test_update_error_wrapped(self):
        spreadsheet = Mock(spec=gspread.Spreadsheet)
        spreadsheet.worksheets.return_value = []
        ws = _worksheet("Results")
        ws.update.side_effect = _api_error()
        spreadsheet.add_worksheet.return_value = ws

        with pytest.raises(SheetsAPIError, match="Failed to write results"):
            GoogleSheetsWriter(spreadsheet).write_sheet([["a"], [1]], "Results")


class TestLocalWorkbook:
    """Test suite for LocalWorkbook."""

    def test_first_sheet_is_active(self, companies_grid):
        workbook = LocalWorkbook({"Companies": companies_grid, "Other": [["x"]]})
        assert workbook.active_sheet == "Companies"
        assert workbook.get_selection() == companies_grid

    def test_selection_is_a_copy(self, workbook):
        workbook.get_selection()[0][0] = "changed"
        assert workbook.get_selection()[0][0] == "Name"

    def test_select_range(self, workbook):
        workbook.select("A1:A2")
        assert workbook.get_selection() == [["Name"], ["Apple"]]

    def test_select_other_sheet(self, workbook):
        workbook.add_sheet("Right", [["Company"], ["Apple"]])
        workbook.select(None, sheet="Right")
        assert workbook.get_selection() == [["Company"], ["Apple"]]

    def test_select_missing_sheet(self, workbook):
        with pytest.raises(KeyError):
            workbook.select("A1", sheet="Missing")

    def test_write_uses_unique_names(self, workbook):
        assert workbook.write_sheet([["a"]], "Results") == "Results"
        assert workbook.write_sheet([["b"]], "Results") == "Results (2)"
        assert workbook.read_sheet("Results (2)") == [["b"]]
        assert workbook.sheet_names == ["Companies", "Results", "Results (2)"]

    def test_empty_workbook(self):
        assert LocalWorkbook().get_selection() == []

    def test_from_csv(self, tmp_path):
        path = tmp_path / "companies.csv"
        path.write_text("Name,Emp\nApple,150000\nAcme,\n")

        workbook = LocalWorkbook.from_csv(path)

        assert workbook.active_sheet == "companies"
        assert workbook.get_selection() == [
            ["Name", "Emp"],
            ["Apple", 150000.0],
            ["Acme", None],
        ]

    def test_from_dataframe(self):
        df = pd.DataFrame({"Name": ["Apple"], "Emp": [150000]})
        workbook = LocalWorkbook.from_dataframe(df, name="Data")
        assert workbook.get_sheet("Data") == [["Name", "Emp"], ["Apple", 150000]]
