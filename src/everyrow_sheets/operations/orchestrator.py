"""
End-to-end operation pipeline.

Each public method of ``OperationOrchestrator`` runs one operation kind through
the same stages:

    selection -> records -> request -> submit -> poll -> result
              -> normalized records -> grid -> new sheet

Everything kind-specific (request body, result post-processing, output sheet
name) is looked up by ``OperationKind``; the stages themselves are generic.

An operation ends in one of three outcomes: WRITTEN (results written to a new
sheet), EMPTY (the task completed but produced no rows) or PENDING (the poll
budget ran out; the task id stays stored and ``resume()`` picks it up later).
A remote failure raises ``RemoteTaskFailure``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from everyrow_sheets.client.api_client import EveryrowClient
from everyrow_sheets.client.base import (
    CredentialProvider,
    EnvCredentialProvider,
    SelectionProvider,
    SheetWriter,
    TaskService,
    check_api_key,
)
from everyrow_sheets.config import Settings
from everyrow_sheets.exceptions import (
    APIError,
    EmptyResultError,
    NoPendingTaskError,
    RemoteTaskFailure,
)
from everyrow_sheets.operations.requests import (
    OperationKind,
    OperationRequest,
    agent_request,
    dedupe_request,
    merge_request,
    rank_request,
    screen_request,
)
from everyrow_sheets.spreadsheet.converter import Record, grid_to_records, records_to_grid
from everyrow_sheets.tasks.models import PollOutcome, PollState
from everyrow_sheets.tasks.normalizer import normalize_result
from everyrow_sheets.tasks.scheduler import BackoffPolicy, PollingScheduler
from everyrow_sheets.tasks.store import FileTaskStore, TaskStateStore

logger = logging.getLogger(__name__)


class OutcomeState(Enum):
    """How an operation ended, from the caller's point of view."""
    WRITTEN = "written"
    EMPTY = "empty"
    PENDING = "pending"


@dataclass
class OperationOutcome:
    """Result of running or resuming an operation.

    Attributes:
        state: WRITTEN, EMPTY or PENDING
        task_id: Id of the remote task
        operation: Operation kind, if known (a resumed task may not record it)
        records: Normalized output records (empty unless WRITTEN)
        grid: Grid written to the output sheet (None unless WRITTEN)
        sheet_name: Name of the output sheet (None unless WRITTEN)
        session_id: Session reported when the task was submitted
    """
    state: OutcomeState
    task_id: str
    operation: Optional[OperationKind] = None
    records: list[Record] = field(default_factory=list)
    grid: Optional[list[list[Any]]] = None
    sheet_name: Optional[str] = None
    session_id: Optional[str] = None

    @property
    def message(self) -> str:
        """User-facing summary of the outcome."""
        if self.state == OutcomeState.WRITTEN:
            return f"Wrote {len(self.records)} rows to sheet '{self.sheet_name}'."
        if self.state == OutcomeState.EMPTY:
            return "The task completed but returned no results."
        return (
            f"Task {self.task_id} is still running. "
            "Check again later to fetch its results."
        )


class OperationOrchestrator:
    """Runs everyrow operations against spreadsheet selections.

    Usage::

        workbook = LocalWorkbook.from_csv("companies.csv")
        orchestrator = OperationOrchestrator(
            credentials=StaticCredentialProvider("sk-cho-..."),
            store=InMemoryTaskStore(),
            selection=workbook,
            writer=workbook,
        )
        outcome = orchestrator.rank("Rank companies by number of employees")

    Attributes:
        credentials: Source of the API key
        store: Persisted slot for the resumable task id
        selection: Source of input grids
        writer: Destination for result grids
        policy: Poll schedule and budget
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        store: TaskStateStore,
        selection: SelectionProvider,
        writer: SheetWriter,
        policy: Optional[BackoffPolicy] = None,
        client_factory: Callable[[str], TaskService] = EveryrowClient,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.credentials = credentials
        self.store = store
        self.selection = selection
        self.writer = writer
        self.policy = policy or BackoffPolicy()
        self._client_factory = client_factory
        self._clock = clock
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        selection: SelectionProvider,
        writer: SheetWriter,
        credentials: Optional[CredentialProvider] = None,
    ) -> OperationOrchestrator:
        """Wire an orchestrator with a file-backed task store and the real API client."""
        return cls(
            credentials=credentials or EnvCredentialProvider(),
            store=FileTaskStore(settings.state_path),
            selection=selection,
            writer=writer,
            policy=settings.polling.to_policy(),
            client_factory=lambda api_key: EveryrowClient.from_settings(api_key, settings.api),
        )

    # Operations

    def rank(
        self,
        task: str,
        field_name: str = "score",
        field_type: str = "number",
        ascending: bool = False,
    ) -> OperationOutcome:
        """Score every selected row and sort by the score."""
        return self._execute(
            lambda: rank_request(self._read_selection(), task, field_name, field_type, ascending)
        )

    def screen(self, task: str) -> OperationOutcome:
        """Keep the selected rows that pass the screening instruction."""
        return self._execute(lambda: screen_request(self._read_selection(), task))

    def dedupe(self, equivalence_relation: str) -> OperationOutcome:
        """Collapse selected rows that describe the same entity."""
        return self._execute(
            lambda: dedupe_request(self._read_selection(), equivalence_relation)
        )

    def merge(
        self,
        task: str,
        right_sheet: str,
        left_key: Optional[str] = None,
        right_key: Optional[str] = None,
    ) -> OperationOutcome:
        """Match the selected rows (left table) against every row of ``right_sheet``."""
        return self._execute(
            lambda: merge_request(
                self._read_selection(),
                grid_to_records(self.selection.get_sheet(right_sheet)),
                task,
                left_key,
                right_key,
            )
        )

    def agent(
        self,
        task: str,
        field_name: str = "answer",
        field_type: str = "string",
    ) -> OperationOutcome:
        """Research every selected row with an agent."""
        return self._execute(
            lambda: agent_request(self._read_selection(), task, field_name, field_type)
        )

    def resume(
        self,
        task_id: Optional[str] = None,
        operation: Optional[OperationKind] = None,
    ) -> OperationOutcome:
        """Check on the stored (or given) task and finish it if it is done.

        Args:
            task_id: Task to check; defaults to the stored one
            operation: Kind of the task, used when the stored slot does not
                record one (e.g. a task id obtained elsewhere)

        Raises:
            ConfigurationError: If the API key is missing or malformed
            NoPendingTaskError: If no task id is given or stored
            RemoteTaskFailure: If the task failed
        """
        api_key = self._require_credential()
        pending = self.store.load_pending()
        if task_id is None and pending is None:
            raise NoPendingTaskError("There is no pending task to check.")

        if pending is not None and (task_id is None or pending.task_id == task_id):
            operation = _parse_kind(pending.operation) or operation

        client = self._client_factory(api_key)
        try:
            outcome = self._scheduler(client).resume(
                task_id, operation.value if operation else None
            )
            return self._finish(client, outcome, operation)
        finally:
            client.close()

    # Pipeline stages

    def _require_credential(self) -> str:
        return check_api_key(self.credentials.get_credential())

    def _read_selection(self) -> list[Record]:
        return grid_to_records(self.selection.get_selection())

    def _scheduler(self, client: TaskService) -> PollingScheduler:
        return PollingScheduler(client, self.store, self.policy, clock=self._clock, sleep=self._sleep)

    def _execute(self, build: Callable[[], OperationRequest]) -> OperationOutcome:
        api_key = self._require_credential()
        request = build()

        client = self._client_factory(api_key)
        try:
            submitted = client.submit(request.path, request.body)
            outcome = self._scheduler(client).run(submitted.task_id, request.kind.value)
            return self._finish(client, outcome, request.kind, submitted.session_id)
        finally:
            client.close()

    def _finish(
        self,
        client: TaskService,
        outcome: PollOutcome,
        operation: Optional[OperationKind],
        session_id: Optional[str] = None,
    ) -> OperationOutcome:
        if outcome.state == PollState.TIMED_OUT:
            return OperationOutcome(
                state=OutcomeState.PENDING,
                task_id=outcome.task_id,
                operation=operation,
                session_id=session_id,
            )

        if outcome.state == PollState.FAILED:
            raise RemoteTaskFailure(outcome.task_id, outcome.error_detail or "Unknown error")

        try:
            raw = client.get_result(outcome.task_id)
        except APIError:
            # Keep the task resumable until its result has been fetched
            self.store.save(outcome.task_id, operation.value if operation else None)
            raise
        records = normalize_result(raw, operation.value if operation else None)
        try:
            grid = records_to_grid(records)
        except EmptyResultError:
            logger.info("Task %s completed with no result rows", outcome.task_id)
            return OperationOutcome(
                state=OutcomeState.EMPTY,
                task_id=outcome.task_id,
                operation=operation,
                session_id=session_id,
            )

        title = f"{operation.title} Results" if operation else "everyrow Results"
        sheet_name = self.writer.write_sheet(grid, title)
        logger.info("Wrote %d rows from task %s to '%s'", len(records), outcome.task_id, sheet_name)
        return OperationOutcome(
            state=OutcomeState.WRITTEN,
            task_id=outcome.task_id,
            operation=operation,
            records=records,
            grid=grid,
            sheet_name=sheet_name,
            session_id=session_id,
        )


def _parse_kind(value: Optional[str]) -> Optional[OperationKind]:
    try:
        return OperationKind(value) if value else None
    except ValueError:
        return None
