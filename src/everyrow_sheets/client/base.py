"""
Collaborator interfaces for the operation pipeline.

The orchestrator never talks to a spreadsheet, a settings store or the network
directly; it goes through these protocols. Concrete implementations include
EveryrowClient (everyrow API over httpx), GoogleSheetsSelection and
GoogleSheetsWriter (gspread), LocalWorkbook (in-memory sheets), and the task
stores in ``everyrow_sheets.tasks.store``.
"""

import os
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Protocol

from everyrow_sheets.exceptions import ConfigurationError

if TYPE_CHECKING:
    from everyrow_sheets.tasks.models import SubmittedTask, Task

API_KEY_ENV_VAR = "EVERYROW_API_KEY"
API_KEY_PREFIX = "sk-cho-"


class CredentialProvider(Protocol):
    """Supplies the API key, or None when the user has not configured one."""

    def get_credential(self) -> Optional[str]:
        ...


class TaskStatusSource(Protocol):
    """Anything that can report the status of a remote task."""

    def get_status(self, task_id: str) -> "Task":
        ...


class TaskService(TaskStatusSource, Protocol):
    """The remote operations service: submit, poll, fetch result."""

    def submit(self, path: str, body: Dict[str, Any]) -> "SubmittedTask":
        ...

    def get_result(self, task_id: str) -> Any:
        ...

    def close(self) -> None:
        ...


class SelectionProvider(Protocol):
    """Reads raw cell grids from the spreadsheet.

    Grids are read fresh on every call and never cached.
    """

    def get_selection(self) -> List[List[Any]]:
        """Return the user's current selection, header row first."""
        ...

    def get_sheet(self, name: str) -> List[List[Any]]:
        """Return every value of the named sheet, header row first."""
        ...


class SheetWriter(Protocol):
    """Writes a result grid to a new sheet."""

    def write_sheet(self, grid: List[List[Any]], name: str) -> str:
        """Write ``grid`` to a new sheet and return the name actually used.

        Implementations must never overwrite an existing sheet: when ``name``
        is taken they append a counter (``name (2)``, ``name (3)``, ...).
        """
        ...


class StaticCredentialProvider:
    """Credential provider holding a fixed key."""

    def __init__(self, api_key: Optional[str]) -> None:
        self.api_key = api_key

    def get_credential(self) -> Optional[str]:
        return self.api_key or None


class EnvCredentialProvider:
    """Credential provider reading the key from an environment variable."""

    def __init__(self, var_name: str = API_KEY_ENV_VAR) -> None:
        self.var_name = var_name

    def get_credential(self) -> Optional[str]:
        value = os.getenv(self.var_name, "").strip()
        return value or None


def unique_sheet_name(name: str, existing: List[str]) -> str:
    """Return ``name``, or ``name (n)`` with the smallest n >= 2 not in ``existing``."""
    taken = set(existing)
    if name not in taken:
        return name
    counter = 2
    while f"{name} ({counter})" in taken:
        counter += 1
    return f"{name} ({counter})"


def check_api_key(api_key: Optional[str]) -> str:
    """Return ``api_key`` if it looks like an everyrow key.

    Raises:
        ConfigurationError: If the key is missing or lacks the ``sk-cho-`` prefix
    """
    if not api_key:
        raise ConfigurationError(
            "No everyrow API key configured. Get one at https://everyrow.io/api-key"
        )
    if not api_key.startswith(API_KEY_PREFIX):
        raise ConfigurationError(f'everyrow API keys start with "{API_KEY_PREFIX}".')
    return api_key
