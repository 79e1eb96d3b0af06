"""
Demonstration of running an everyrow operation on a CSV file.

The CSV is loaded into an in-memory LocalWorkbook, ranked by the everyrow
service, and the result sheet is printed and saved next to the input.

Authentication: requires an everyrow API key in EVERYROW_API_KEY
(get one at https://everyrow.io/api-key).

Usage:
    python examples/local_workbook_demo.py companies.csv "Rank by number of employees"
"""

import logging
import sys
from pathlib import Path

from everyrow_sheets import OperationOrchestrator, OutcomeState, Settings
from everyrow_sheets.client import LocalWorkbook
from everyrow_sheets.exceptions import APIError, ConfigurationError, RemoteTaskFailure, ValidationError
from everyrow_sheets.spreadsheet import records_to_dataframe


def main():
    """Rank the rows of a CSV file and write the scored table back out."""
    if len(sys.argv) != 3:
        print(__doc__)
        sys.exit(2)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    csv_path = Path(sys.argv[1])
    task = sys.argv[2]

    workbook = LocalWorkbook.from_csv(csv_path)
    orchestrator = OperationOrchestrator.from_settings(Settings.from_env(), workbook, workbook)

    print(f"Ranking {csv_path.name}: {task}")
    try:
        outcome = orchestrator.rank(task)
    except (ConfigurationError, ValidationError) as exc:
        print(f"✗ {exc}")
        sys.exit(1)
    except (APIError, RemoteTaskFailure) as exc:
        print(f"✗ {exc}")
        sys.exit(1)

    print(outcome.message)
    if outcome.state != OutcomeState.WRITTEN:
        return

    df = records_to_dataframe(outcome.records)
    print(df.to_string(index=False))
    out_path = csv_path.with_name(f"{csv_path.stem}_ranked.csv")
    df.to_csv(out_path, index=False)
    print(f"✓ Saved {out_path}")


if __name__ == "__main__":
    main()
