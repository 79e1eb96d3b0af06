"""
Exception classes for everyrow_sheets.

These exceptions are used throughout the everyrow_sheets package to signal error
conditions while reading a selection, talking to the everyrow service, and writing
results back to a spreadsheet.

Timeouts and empty results are not errors: they are reported as outcomes by the
polling scheduler and the operation orchestrator.
"""

from typing import Optional


class ConfigurationError(Exception):
    """Raised when the client is not configured well enough to run.

    This error is raised before any network call is made. Examples:
        - No API key available from the credential provider
        - A numeric environment setting that cannot be parsed
    """
    pass


class ValidationError(Exception):
    """Raised when the input to an operation is unusable.

    Validation happens locally and the offending input is never sent to the
    remote service. Subclasses describe the specific selection problem.
    """
    pass


class EmptySelectionError(ValidationError):
    """Raised when no column of the selection holds any data below the header row."""
    pass


class NoDataError(ValidationError):
    """Raised when no data rows remain once empty rows are dropped."""
    pass


class DuplicateHeaderError(ValidationError):
    """Raised when two data-bearing columns resolve to the same header.

    Header comparison is exact and case-sensitive after trimming whitespace, so
    ``"Name"`` and ``" Name "`` collide while ``"Name"`` and ``"name"`` do not.
    """

    def __init__(self, header: str) -> None:
        super().__init__(
            f"Duplicate column header '{header}'. Each column must have a unique header."
        )
        self.header = header


class EmptyResultError(Exception):
    """Raised when a record sequence with no elements is converted to a grid.

    The orchestrator turns this into an "empty" outcome so that a task that ran
    and found nothing can be told apart from a crash.
    """
    pass


class APIError(Exception):
    """Raised when an everyrow API call fails.

    Wraps HTTP error responses and transport failures once retries are
    exhausted. Common causes include:
        - Server errors (HTTP 5xx) that persist across retries
        - Bad requests (HTTP 4xx) rejected by the service
        - Network connectivity issues

    Attributes:
        status_code: HTTP status of the failing response, or None for
            transport-level failures
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthError(APIError):
    """Raised when the service rejects the API key (HTTP 401 or 403).

    Authentication failures are surfaced verbatim and never retried.
    """
    pass


class RemoteTaskFailure(Exception):
    """Raised when a remote task reaches the terminal ``failed`` status.

    The persisted task id is cleared before this is raised: a failed task is
    final and cannot be resumed.

    Attributes:
        task_id: Id of the failed task
        detail: Error detail reported by the service
    """

    def __init__(self, task_id: str, detail: str) -> None:
        super().__init__(f"Task failed: {detail}")
        self.task_id = task_id
        self.detail = detail


class NoPendingTaskError(Exception):
    """Raised when a resume is requested but no task id is persisted."""
    pass


class SheetsAPIError(Exception):
    """Raised when a Google Sheets API call fails.

    This error wraps exceptions from the Google Sheets API (via gspread) and
    provides context about which read or write failed. Common causes include:
        - Authentication failures
        - Rate limiting (HTTP 429)
        - Invalid ranges or worksheet names
    """
    pass
