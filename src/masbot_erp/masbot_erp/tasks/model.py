from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Tuple

from ..core.enums import TaskCategory, TaskPriority, TaskStatus


@dataclass(frozen=True)
class TaskHistory:
    action: str
    by: str
    timestamp: datetime
    details: Optional[str] = None


@dataclass(frozen=True)
class Task:
    id: int
    title: str
    description: str
    category: TaskCategory
    priority: TaskPriority
    assigned_to: str  # employee id, or the login email for accounts without an employee record
    assigned_to_name: str
    created_by: str
    start_date: Optional[date]
    due_date: Optional[date]
    created_at: datetime
    status: TaskStatus
    history: Tuple[TaskHistory, ...] = ()
    assigned_to_department: Optional[str] = None
    completed_date: Optional[datetime] = None
    completion_remarks: Optional[str] = None
    rejection_remarks: Optional[str] = None


@dataclass(frozen=True)
class TaskAnalytics:
    total: int
    completed: int  # pending review or closed
    completion_rate: int  # whole percent
    pending_review: int
    in_progress: int
    overdue: Tuple[Task, ...]
    aging: Tuple[Tuple[str, int], ...]  # open tasks by age bucket
    by_department: Tuple[Tuple[str, int], ...]  # busiest first
