"""
Client module for everyrow_sheets.

This module provides the collaborators the operation pipeline talks to.
``EveryrowClient`` targets the everyrow API; ``GoogleSheetsSelection`` and
``GoogleSheetsWriter`` read and write Google Sheets via gspread;
``LocalWorkbook`` keeps sheets in memory (no network required).
"""

from everyrow_sheets.client.base import (
    CredentialProvider,
    EnvCredentialProvider,
    SelectionProvider,
    SheetWriter,
    StaticCredentialProvider,
    TaskService,
    TaskStatusSource,
    check_api_key,
    unique_sheet_name,
)
from everyrow_sheets.client.api_client import EveryrowClient
from everyrow_sheets.client.local import LocalWorkbook
from everyrow_sheets.client.sheets import GoogleSheetsSelection, GoogleSheetsWriter

__all__ = [
    "CredentialProvider",
    "EnvCredentialProvider",
    "SelectionProvider",
    "SheetWriter",
    "StaticCredentialProvider",
    "TaskService",
    "check_api_key",
    "TaskStatusSource",
    "unique_sheet_name",
    "EveryrowClient",
    "LocalWorkbook",
    "GoogleSheetsSelection",
    "GoogleSheetsWriter",
]
