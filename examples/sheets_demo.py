"""
Demonstration of screening a Google Sheets range with everyrow.

Rows of the given range are screened against an instruction, and the rows that
pass are written to a new "Screen Results" worksheet in the same spreadsheet.
If the task outlives the poll budget, rerun with --resume to fetch it later.

Authentication: requires an everyrow API key in EVERYROW_API_KEY, plus either
a service account JSON at ~/.config/gspread/service_account.json or OAuth
credentials at ~/.config/gspread/credentials.json (browser flow on first use).

Usage:
    python examples/sheets_demo.py <spreadsheet-key> <range> "Only B2B software companies"
    python examples/sheets_demo.py <spreadsheet-key> --resume
"""

import logging
import sys

import gspread

from everyrow_sheets import GoogleSheetsSelection, GoogleSheetsWriter, OperationOrchestrator, Settings
from everyrow_sheets.exceptions import (
    APIError,
    ConfigurationError,
    NoPendingTaskError,
    RemoteTaskFailure,
    SheetsAPIError,
    ValidationError,
)


def _get_gspread_client() -> gspread.Client:
    """Authenticate with Google Sheets, trying service account then OAuth."""
    try:
        gc = gspread.service_account()
        print("✓ Authenticated via service account")
        return gc
    except Exception:
        pass
    try:
        gc = gspread.oauth()
        print("✓ Authenticated via OAuth")
        return gc
    except Exception as exc:
        print(f"✗ Could not authenticate with Google Sheets: {exc}")
        sys.exit(1)


def main():
    """Screen a range, or resume the last pending task with --resume."""
    args = sys.argv[1:]
    resume = len(args) == 2 and args[1] == "--resume"
    if not resume and len(args) != 3:
        print(__doc__)
        sys.exit(2)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    spreadsheet = _get_gspread_client().open_by_key(args[0])

    selection = GoogleSheetsSelection(spreadsheet, range_name=None if resume else args[1])
    orchestrator = OperationOrchestrator.from_settings(
        Settings.from_env(), selection, GoogleSheetsWriter(spreadsheet)
    )

    try:
        if resume:
            outcome = orchestrator.resume()
        else:
            outcome = orchestrator.screen(args[2])
    except (ConfigurationError, ValidationError, NoPendingTaskError) as exc:
        print(f"✗ {exc}")
        sys.exit(1)
    except (APIError, RemoteTaskFailure, SheetsAPIError) as exc:
        print(f"✗ {exc}")
        sys.exit(1)

    print(outcome.message)
    if outcome.session_id:
        print(f"Session: {outcome.session_id}")


if __name__ == "__main__":
    main()
