"""Kanban task workflow.

The assignee accepts and completes; a manager, the creator or the super-admin
reviews. Every transition appends exactly one history entry.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional

from ..access.model import Identity
from ..core.enums import TaskAction, TaskStatus
from ..core.exceptions import AuthorizationError, TransitionError, ValidationError
from .model import Task, TaskHistory

_TODO = {TaskStatus.NEW, TaskStatus.ASSIGNED, TaskStatus.REOPENED}


def actor_key(actor: Identity) -> str:
    return str(actor.employee_id) if actor.employee_id is not None else actor.email


def is_assignee(task: Task, actor: Identity) -> bool:
    return task.assigned_to == actor_key(actor)


def can_review(task: Task, actor: Identity) -> bool:
    return actor.is_manager or task.created_by == actor.email


def _next_status(task: Task, action: TaskAction, actor: Identity, remarks: Optional[str]) -> TaskStatus:
    status = task.status
    if status == TaskStatus.CLOSED:
        raise TransitionError("Task is closed")

    if action == TaskAction.ACCEPT and status in _TODO:
        if not is_assignee(task, actor):
            raise AuthorizationError("Only the assignee can accept this task")
        return TaskStatus.IN_PROGRESS

    if action == TaskAction.COMPLETE and status == TaskStatus.IN_PROGRESS:
        if not is_assignee(task, actor):
            raise AuthorizationError("Only the assignee can complete this task")
        if not remarks:
            raise ValidationError("Please enter remarks to Complete this task.")
        return TaskStatus.PENDING_REVIEW

    if action in {TaskAction.APPROVE, TaskAction.REJECT} and status == TaskStatus.PENDING_REVIEW:
        if not can_review(task, actor):
            raise AuthorizationError("You cannot review this task")
        if action == TaskAction.REJECT:
            if not remarks:
                raise ValidationError("Please enter remarks to Reject this task.")
            return TaskStatus.REOPENED
        return TaskStatus.CLOSED

    raise TransitionError(f"Cannot {action.value} a task that is {status.value}")


def transition(task: Task, action: TaskAction, actor: Identity, remarks: Optional[str], *, at: datetime) -> Task:
    remarks = (remarks or "").strip() or None
    new_status = _next_status(task, action, actor, remarks)

    details = f"Status changed from {task.status.value} to {new_status.value}"
    if remarks:
        details += f". Remarks: {remarks}"
    entry = TaskHistory(action=action.value, by=actor.email, timestamp=at, details=details)

    changes: dict = {"status": new_status, "history": task.history + (entry,)}
    if action == TaskAction.COMPLETE:
        changes["completion_remarks"] = remarks
        changes["completed_date"] = at
    elif action == TaskAction.REJECT:
        changes["rejection_remarks"] = remarks
    return replace(task, **changes)
