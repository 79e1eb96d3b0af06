"""
everyrow_sheets - Run everyrow AI batch operations on spreadsheet data.

This package takes a spreadsheet selection, submits it to the everyrow service
as a rank, screen, dedupe, merge or agent operation, polls the resulting task
under a fixed time budget, and writes the results back as a new sheet. A task
that outlives the budget is remembered and can be resumed later.

Usage:
    >>> from everyrow_sheets import LocalWorkbook, OperationOrchestrator, Settings
    >>> workbook = LocalWorkbook({"Companies": [["Name", "Emp"], ["Apple", 150000]]})
    >>> orchestrator = OperationOrchestrator.from_settings(Settings.from_env(), workbook, workbook)
    >>> outcome = orchestrator.rank("Rank companies by size")
    >>> print(outcome.message)

Key components:
- spreadsheet: conversion between selection grids and records
- tasks: task status, resumable task store, polling scheduler, result normalizer
- client: everyrow API client and spreadsheet collaborators
- operations: request builders and the operation orchestrator
"""

from .config import Settings
from .exceptions import *
from .client import (
    EnvCredentialProvider,
    EveryrowClient,
    GoogleSheetsSelection,
    GoogleSheetsWriter,
    LocalWorkbook,
    StaticCredentialProvider,
)
from .operations import OperationKind, OperationOrchestrator, OperationOutcome, OutcomeState
from .tasks import BackoffPolicy, FileTaskStore, InMemoryTaskStore, PollingScheduler

# Version
__version__ = "0.1.0"

__all__ = [
    'Settings',
    'EnvCredentialProvider',
    'EveryrowClient',
    'GoogleSheetsSelection',
    'GoogleSheetsWriter',
    'LocalWorkbook',
    'StaticCredentialProvider',
    'OperationKind',
    'OperationOrchestrator',
    'OperationOutcome',
    'OutcomeState',
    'BackoffPolicy',
    'FileTaskStore',
    'InMemoryTaskStore',
    'PollingScheduler',
]
