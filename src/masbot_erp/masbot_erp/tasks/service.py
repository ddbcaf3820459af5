from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional

from ..access.model import Identity
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty
from ..core.enums import TaskAction, TaskCategory, TaskPriority, TaskStatus
from ..core.exceptions import AuthorizationError, NotFoundError, TransitionError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import Task, TaskAnalytics, TaskHistory
from .repository import TaskRepository
from .workflow import actor_key, can_review, transition

logger = logging.getLogger(__name__)

BOARD_COLUMNS = {
    "todo": {TaskStatus.NEW, TaskStatus.ASSIGNED, TaskStatus.REOPENED},
    "in_progress": {TaskStatus.IN_PROGRESS},
    "review": {TaskStatus.PENDING_REVIEW},
    "closed": {TaskStatus.CLOSED},
}

# (label, max age in days); the last bucket is open-ended
AGING_BUCKETS = (("0-3 days", 3), ("4-7 days", 7), ("Over 7 days", None))


def is_overdue(task: Task, today: date) -> bool:
    return task.due_date is not None and task.due_date < today and task.status != TaskStatus.CLOSED


class TaskService:
    def __init__(
        self,
        tasks: TaskRepository,
        employees: EmployeeRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._tasks = tasks
        self._employees = employees
        self._clock = clock

    def _get(self, task_id: int) -> Task:
        task = self._tasks.get(int(task_id))
        if not task:
            raise NotFoundError("Task not found")
        return task

    def create_task(
        self,
        *,
        actor: Identity,
        title: str,
        description: str = "",
        category: TaskCategory = TaskCategory.OPERATIONS,
        priority: TaskPriority = TaskPriority.MEDIUM,
        start_date: Optional[date] = None,
        due_date: Optional[date] = None,
        assigned_to_employee_id: Optional[int] = None,
    ) -> int:
        title = require_non_empty(title, "Title")
        if start_date and due_date and due_date < start_date:
            raise ValidationError("Due date cannot be earlier than start date")

        own_key = actor_key(actor)
        if actor.is_manager:
            if assigned_to_employee_id is None:
                raise ValidationError("Please select an employee to assign the task to.")
            emp = self._employees.get_by_id(int(assigned_to_employee_id))
            if not emp:
                raise NotFoundError("Employee not found")
            assigned_to, name, dept = str(emp.id), emp.full_name, emp.department
        else:
            assigned_to, name, dept = own_key, actor.display_name, actor.department

        status = TaskStatus.ASSIGNED if actor.is_manager and assigned_to != own_key else TaskStatus.NEW
        now = self._clock()
        task = Task(
            id=0,
            title=title,
            description=(description or "").strip(),
            category=category,
            priority=priority,
            assigned_to=assigned_to,
            assigned_to_name=name,
            assigned_to_department=dept,
            created_by=actor.email,
            start_date=start_date,
            due_date=due_date,
            created_at=now,
            status=status,
            history=(TaskHistory(action="Created", by=actor.email, timestamp=now, details=f"Task created and assigned to {name}"),),
        )
        task_id = self._tasks.create(task)
        logger.info("Task %s created by %s for %s (%s)", task_id, actor.email, name, status.value)
        return task_id

    def workflow_action(self, *, task_id: int, action: TaskAction, actor: Identity, remarks: Optional[str] = None) -> Task:
        task = self._get(task_id)
        updated = transition(task, action, actor, remarks, at=self._clock())
        if not self._tasks.save_transition(updated, expected=task.status):
            raise TransitionError("Task was changed by someone else, please reload")
        logger.info("Task %s: %s -> %s by %s", task.id, task.status.value, updated.status.value, actor.email)
        return updated

    def delete_task(self, *, task_id: int, actor: Identity) -> None:
        task = self._get(task_id)
        if not can_review(task, actor):
            raise AuthorizationError("Only a manager or the creator can delete this task")
        self._tasks.delete(task.id)
        logger.info("Task %s deleted by %s", task.id, actor.email)

    def visible_tasks(self, actor: Identity, *, mode: str = "my") -> list[Task]:
        tasks = list(self._tasks.list_all())
        if mode == "my":
            key = actor_key(actor)
            return [t for t in tasks if t.assigned_to == key]
        if not actor.is_manager:
            raise AuthorizationError("Team view is for managers only")
        if actor.is_super_admin:
            return tasks
        return [t for t in tasks if t.created_by == actor.email or t.assigned_to_department == actor.department]

    def board(self, actor: Identity, *, mode: str = "my") -> dict[str, list[Task]]:
        tasks = self.visible_tasks(actor, mode=mode)
        return {col: [t for t in tasks if t.status in statuses] for col, statuses in BOARD_COLUMNS.items()}

    def overdue(self, actor: Identity, *, mode: str = "my") -> list[Task]:
        today = self._clock().date()
        return [t for t in self.visible_tasks(actor, mode=mode) if is_overdue(t, today)]

    def reassign(self, *, task_id: int, employee_id: int, actor: Identity) -> Task:
        task = self._get(task_id)
        if not actor.is_manager:
            raise AuthorizationError("Only managers can reassign tasks")
        if task.status == TaskStatus.CLOSED:
            raise TransitionError("Task is closed")
        emp = self._employees.get_by_id(int(employee_id))
        if not emp:
            raise NotFoundError("Employee not found")
        if task.assigned_to == str(emp.id):
            return task
        now = self._clock()
        entry = TaskHistory(
            action="Reassigned",
            by=actor.email,
            timestamp=now,
            details=f"Reassigned from {task.assigned_to_name} to {emp.full_name}",
        )
        updated = replace(
            task,
            assigned_to=str(emp.id),
            assigned_to_name=emp.full_name,
            assigned_to_department=emp.department,
            status=TaskStatus.ASSIGNED if task.status == TaskStatus.NEW else task.status,
            history=task.history + (entry,),
        )
        if not self._tasks.save_transition(updated, expected=task.status):
            raise TransitionError("Task was changed by someone else, please reload")
        return updated

    def analytics(self, actor: Identity) -> TaskAnalytics:
        """Dashboard figures over the team view for managers, over own tasks otherwise."""
        tasks = self.visible_tasks(actor, mode="team" if actor.is_manager else "my")
        now = self._clock()

        completed = sum(1 for t in tasks if t.status in {TaskStatus.PENDING_REVIEW, TaskStatus.CLOSED})
        total = len(tasks)
        rate = (completed * 200 + total) // (2 * total) if total else 0

        aging = {label: 0 for label, _ in AGING_BUCKETS}
        for t in tasks:
            if t.status == TaskStatus.CLOSED:
                continue
            age = math.ceil(abs((now - t.created_at).total_seconds()) / 86400)
            label = next(label for label, limit in AGING_BUCKETS if limit is None or age <= limit)
            aging[label] += 1

        departments = Counter(t.assigned_to_department or "Unassigned" for t in tasks)
        return TaskAnalytics(
            total=total,
            completed=completed,
            completion_rate=rate,
            pending_review=sum(1 for t in tasks if t.status == TaskStatus.PENDING_REVIEW),
            in_progress=sum(1 for t in tasks if t.status == TaskStatus.IN_PROGRESS),
            overdue=tuple(sorted((t for t in tasks if is_overdue(t, now.date())), key=lambda t: t.due_date)),
            aging=tuple(aging.items()),
            by_department=tuple(sorted(departments.items(), key=lambda kv: (-kv[1], kv[0]))),
        )
