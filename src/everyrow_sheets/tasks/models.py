"""
Task lifecycle and result payload types.

This module defines the data exchanged with the everyrow service while a task
runs:
- TaskStatus / Task: the remote task as reported by the status endpoint
- SubmittedTask: the acknowledgement returned when an operation is submitted
- PollState / PollOutcome: how one polling invocation ended
- FlatListPayload / ScalarPayload / GroupedPayload: the three result shapes,
  decoded from raw JSON by ``decode_payload``
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

Record = Dict[str, Any]


class TaskStatus(Enum):
    """Status of a remote task. COMPLETED and FAILED are terminal."""
    SUBMITTED = "submitted"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)

    @classmethod
    def parse(cls, value: Any) -> "TaskStatus":
        """Map a status string from the service onto a TaskStatus.

        ``queued`` and ``pending`` are reported before a worker picks the task
        up and count as SUBMITTED. Anything unrecognised is treated as still
        RUNNING so the caller keeps polling.
        """
        text = str(value or "").strip().lower()
        if text in ("submitted", "queued", "pending"):
            return cls.SUBMITTED
        for status in cls:
            if status.value == text:
                return status
        return cls.RUNNING


@dataclass
class Task:
    """A remote task as reported by ``GET /tasks/{id}/status``.

    Attributes:
        task_id: Opaque id, stable for the lifetime of the task
        status: Current status
        result_handle: Artifact id, present once the task has completed
        error_detail: Failure message, present once the task has failed
        session_id: Session the task belongs to, if the service reported one
    """
    task_id: str
    status: TaskStatus
    result_handle: Optional[str] = None
    error_detail: Optional[str] = None
    session_id: Optional[str] = None

    @classmethod
    def from_dict(cls, task_id: str, data: Dict[str, Any]) -> "Task":
        """Create from a status response body."""
        return cls(
            task_id=str(data.get("task_id") or task_id),
            status=TaskStatus.parse(data.get("status")),
            result_handle=data.get("artifact_id"),
            error_detail=data.get("error"),
            session_id=data.get("session_id"),
        )


@dataclass
class SubmittedTask:
    """Acknowledgement of a submitted operation."""
    task_id: str
    session_id: Optional[str] = None


class PollState(Enum):
    """How a polling invocation ended.

    COMPLETED and FAILED are acknowledged: the persisted task id is cleared.
    TIMED_OUT only ends this invocation; the remote task keeps running and the
    task id stays persisted for a later resume.
    """
    COMPLETED = "completed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class PollOutcome:
    """Result of driving one task through the poll loop.

    Attributes:
        state: Terminal state reached by this invocation
        task_id: Id of the polled task
        result_handle: Artifact id when COMPLETED
        error_detail: Failure message when FAILED
        elapsed: Seconds spent in the poll loop
        polls: Number of status requests made
    """
    state: PollState
    task_id: str
    result_handle: Optional[str] = None
    error_detail: Optional[str] = None
    elapsed: float = 0.0
    polls: int = 0


@dataclass
class FlatListPayload:
    """Result shape for table outputs: an ordered list of records."""
    records: List[Record] = field(default_factory=list)


@dataclass
class ScalarPayload:
    """Result shape for single-record outputs (not wrapped in a list)."""
    record: Record = field(default_factory=dict)


@dataclass
class GroupedPayload:
    """Result shape for artifact groups.

    Each child carries at most one record; children without a record are kept
    as ``None`` so the original ordering is visible.
    """
    children: List[Optional[Record]] = field(default_factory=list)


ResultPayload = Union[FlatListPayload, ScalarPayload, GroupedPayload]


def _decode_grouped(raw: Dict[str, Any]) -> GroupedPayload:
    children: List[Optional[Record]] = []
    for child in raw["artifacts"]:
        data = child.get("data") if isinstance(child, dict) else None
        children.append(data if isinstance(data, dict) else None)
    return GroupedPayload(children=children)


def _decode_flat(raw: Any) -> FlatListPayload:
    items = raw if isinstance(raw, list) else raw["data"]
    return FlatListPayload(records=[item for item in items if isinstance(item, dict)])


def _decode_scalar(raw: Dict[str, Any]) -> ScalarPayload:
    return ScalarPayload(record=raw["data"])


def payload_tag(raw: Any) -> Optional[str]:
    """Identify which result shape a raw JSON payload uses.

    Returns:
        ``"grouped"``, ``"flat-list"``, ``"scalar"``, or None when the payload
        matches none of them
    """
    if isinstance(raw, list):
        return "flat-list"
    if not isinstance(raw, dict):
        return None
    if isinstance(raw.get("artifacts"), list):
        return "grouped"
    data = raw.get("data")
    if isinstance(data, list):
        return "flat-list"
    if isinstance(data, dict):
        return "scalar"
    return None


_DECODERS = {
    "grouped": _decode_grouped,
    "flat-list": _decode_flat,
    "scalar": _decode_scalar,
}


def decode_payload(raw: Any) -> Optional[ResultPayload]:
    """Decode a raw ``GET /tasks/{id}/result`` body into a payload variant.

    Args:
        raw: Parsed JSON body

    Returns:
        The matching payload variant, or None if the body has no usable shape
    """
    tag = payload_tag(raw)
    if tag is None:
        return None
    return _DECODERS[tag](raw)
