from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import TaskStatus
from .model import Task


class TaskRepository(Protocol):
    def get(self, task_id: int) -> Optional[Task]:
        raise NotImplementedError

    def list_all(self) -> Sequence[Task]:
        raise NotImplementedError

    def create(self, task: Task) -> int:
        """Insert the task with its initial history; the `id` field is ignored."""
        raise NotImplementedError

    def save_transition(self, task: Task, *, expected: TaskStatus) -> bool:
        """Persist the new status/remarks and append the last history entry.

        Returns False when the stored task is no longer at `expected`.
        """
        raise NotImplementedError

    def delete(self, task_id: int) -> bool:
        raise NotImplementedError
