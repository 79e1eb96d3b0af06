"""
Persistence of the resumable task slot.

At most one task is tracked at a time: the user's most recent operation. Saving
a new task overwrites the slot, and the slot is only cleared once a task reaches
an acknowledged terminal status. A process that dies mid-poll leaves the id in
place, which is what allows a later invocation to resume it.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol, Union

logger = logging.getLogger(__name__)


@dataclass
class PendingTask:
    """Content of the resumable slot.

    Attributes:
        task_id: Id of the in-flight task
        operation: Operation kind that submitted it, used to post-process
            the result on resume
    """
    task_id: str
    operation: Optional[str] = None


class TaskStateStore(Protocol):
    """Protocol for the persisted single-task slot."""

    def save(self, task_id: str, operation: Optional[str] = None) -> None:
        """Overwrite the slot with ``task_id``."""
        ...

    def load(self) -> Optional[str]:
        """Return the persisted task id, or None."""
        ...

    def load_pending(self) -> Optional[PendingTask]:
        """Return the full slot content, or None."""
        ...

    def clear(self) -> None:
        """Empty the slot."""
        ...


class InMemoryTaskStore:
    """Task slot held in memory. Used by tests and one-shot scripts."""

    def __init__(self) -> None:
        self._pending: Optional[PendingTask] = None

    def save(self, task_id: str, operation: Optional[str] = None) -> None:
        self._pending = PendingTask(task_id=task_id, operation=operation)

    def load(self) -> Optional[str]:
        return self._pending.task_id if self._pending else None

    def load_pending(self) -> Optional[PendingTask]:
        return self._pending

    def clear(self) -> None:
        self._pending = None


class FileTaskStore:
    """Task slot persisted as a small JSON file.

    The file holds ``{"task_id": ..., "operation": ...}``. Clearing the slot
    deletes the file. A file that cannot be read or parsed loads as an empty
    slot rather than blocking new operations.

    Attributes:
        path: Location of the JSON state file
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def save(self, task_id: str, operation: Optional[str] = None) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps({"task_id": task_id, "operation": operation}),
            encoding="utf-8",
        )

    def load(self) -> Optional[str]:
        pending = self.load_pending()
        return pending.task_id if pending else None

    def load_pending(self) -> Optional[PendingTask]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable task state file %s: %s", self.path, exc)
            return None

        if not isinstance(data, dict) or not data.get("task_id"):
            return None
        return PendingTask(task_id=str(data["task_id"]), operation=data.get("operation"))

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
