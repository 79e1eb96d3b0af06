"""
Polling scheduler for remote tasks.

Drives one task from submission to a terminal outcome:

    Submitted -> Polling -> {Completed, Failed, TimedOut}

The task id is persisted as soon as polling starts. Completed and Failed clear
the store; TimedOut leaves the id in place so a later invocation can resume the
task with a fresh wall-clock budget.

Waiting happens only in the injected ``sleep`` call between status requests.
The interval starts at ``initial_interval``, grows by ``growth_factor`` after
every non-terminal poll, and is capped at ``max_interval``.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from everyrow_sheets.client.base import TaskStatusSource
from everyrow_sheets.tasks.models import PollOutcome, PollState, TaskStatus
from everyrow_sheets.tasks.store import TaskStateStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackoffPolicy:
    """Poll interval schedule and wall-clock budget, in seconds.

    Attributes:
        initial_interval: Wait before the first status request
        growth_factor: Multiplier applied after each non-terminal poll
        max_interval: Ceiling for the wait between polls
        budget: Total time one invocation may spend polling
    """
    initial_interval: float = 2.0
    growth_factor: float = 1.5
    max_interval: float = 10.0
    budget: float = 120.0

    def __post_init__(self) -> None:
        if min(self.initial_interval, self.max_interval, self.budget) <= 0:
            raise ValueError("Poll intervals and budget must be positive")
        if self.growth_factor < 1:
            raise ValueError("growth_factor must be >= 1")
        if self.initial_interval > self.max_interval:
            raise ValueError("initial_interval must not exceed max_interval")

    def next_interval(self, interval: float) -> float:
        return min(interval * self.growth_factor, self.max_interval)

    def intervals(self) -> Iterator[float]:
        """Yield the (unbounded) sequence of waits between polls."""
        interval = self.initial_interval
        while True:
            yield interval
            interval = self.next_interval(interval)


class PollingScheduler:
    """Polls a task until it finishes or the budget runs out.

    Attributes:
        client: Source of task status (normally an EveryrowClient)
        store: Persisted slot for the resumable task id
        policy: Backoff schedule and budget
    """

    def __init__(
        self,
        client: TaskStatusSource,
        store: TaskStateStore,
        policy: Optional[BackoffPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.store = store
        self.policy = policy or BackoffPolicy()
        self._clock = clock
        self._sleep = sleep

    def run(self, task_id: str, operation: Optional[str] = None) -> PollOutcome:
        """Poll ``task_id`` until a terminal status or the budget is exhausted.

        Errors raised by the client propagate unchanged; the task id stays
        persisted so the task can still be resumed.

        Args:
            task_id: Id of the task to poll
            operation: Operation kind, persisted alongside the id

        Returns:
            PollOutcome with state COMPLETED, FAILED or TIMED_OUT
        """
        self.store.save(task_id, operation)

        start = self._clock()
        polls = 0
        intervals = self.policy.intervals()

        while self._clock() - start < self.policy.budget:
            self._sleep(next(intervals))

            task = self.client.get_status(task_id)
            polls += 1
            logger.debug("Task %s status after poll %d: %s", task_id, polls, task.status.value)

            if task.status == TaskStatus.COMPLETED:
                self.store.clear()
                elapsed = self._clock() - start
                logger.info("Task %s completed after %.1fs", task_id, elapsed)
                return PollOutcome(
                    state=PollState.COMPLETED,
                    task_id=task_id,
                    result_handle=task.result_handle,
                    elapsed=elapsed,
                    polls=polls,
                )

            if task.status == TaskStatus.FAILED:
                self.store.clear()
                elapsed = self._clock() - start
                detail = task.error_detail or "Unknown error"
                logger.info("Task %s failed after %.1fs: %s", task_id, elapsed, detail)
                return PollOutcome(
                    state=PollState.FAILED,
                    task_id=task_id,
                    error_detail=detail,
                    elapsed=elapsed,
                    polls=polls,
                )

        elapsed = self._clock() - start
        logger.info("Task %s still running after %.1fs; it can be resumed", task_id, elapsed)
        return PollOutcome(
            state=PollState.TIMED_OUT,
            task_id=task_id,
            elapsed=elapsed,
            polls=polls,
        )

    def resume(
        self, task_id: Optional[str] = None, operation: Optional[str] = None
    ) -> Optional[PollOutcome]:
        """Re-enter the poll loop for a given or persisted task.

        Each resume starts again from the initial interval with a full budget.

        Args:
            task_id: Task to resume; defaults to the persisted one
            operation: Operation kind to record when the persisted slot does
                not name one for this task

        Returns:
            PollOutcome, or None when no task id is given or persisted
        """
        pending = self.store.load_pending()
        if task_id is None:
            if pending is None:
                return None
            task_id = pending.task_id
        if pending is not None and pending.task_id == task_id and pending.operation:
            operation = pending.operation

        logger.info("Resuming task %s", task_id)
        return self.run(task_id, operation)
