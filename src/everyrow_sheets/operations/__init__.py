"""
Operations module for everyrow_sheets.

This module provides the per-kind request builders and the orchestrator that
runs an operation from spreadsheet selection to result sheet.
"""

from everyrow_sheets.operations.requests import (
    OperationKind,
    OperationRequest,
    agent_request,
    dedupe_request,
    merge_request,
    rank_request,
    response_schema,
    screen_request,
)
from everyrow_sheets.operations.orchestrator import (
    OperationOrchestrator,
    OperationOutcome,
    OutcomeState,
)

__all__ = [
    "OperationKind",
    "OperationRequest",
    "agent_request",
    "dedupe_request",
    "merge_request",
    "rank_request",
    "response_schema",
    "screen_request",
    "OperationOrchestrator",
    "OperationOutcome",
    "OutcomeState",
]
