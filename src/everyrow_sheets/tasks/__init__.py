"""
Task lifecycle module.

This module tracks remote everyrow tasks from submission to a terminal outcome:
- models: task status, poll outcomes and result payload shapes
- store: the persisted single-task slot used for resuming
- scheduler: bounded polling with exponential backoff
- normalizer: flattening of result payloads into records
"""

from everyrow_sheets.tasks.models import (
    FlatListPayload,
    GroupedPayload,
    PollOutcome,
    PollState,
    ScalarPayload,
    SubmittedTask,
    Task,
    TaskStatus,
    decode_payload,
)
from everyrow_sheets.tasks.store import (
    FileTaskStore,
    InMemoryTaskStore,
    PendingTask,
    TaskStateStore,
)
from everyrow_sheets.tasks.normalizer import (
    normalize_payload,
    normalize_result,
    postprocess_dedupe,
    postprocess_screen,
)
from everyrow_sheets.tasks.scheduler import BackoffPolicy, PollingScheduler

__all__ = [
    "FlatListPayload",
    "GroupedPayload",
    "PollOutcome",
    "PollState",
    "ScalarPayload",
    "SubmittedTask",
    "Task",
    "TaskStatus",
    "decode_payload",
    "FileTaskStore",
    "InMemoryTaskStore",
    "PendingTask",
    "TaskStateStore",
    "normalize_payload",
    "normalize_result",
    "postprocess_dedupe",
    "postprocess_screen",
    "BackoffPolicy",
    "PollingScheduler",
]
