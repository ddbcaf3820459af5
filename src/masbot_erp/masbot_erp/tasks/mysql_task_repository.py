from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import TaskCategory, TaskPriority, TaskStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Task, TaskHistory
from .repository import TaskRepository

_COLUMNS = (
    "id, title, description, category, priority, assigned_to, assigned_to_name, assigned_to_department, "
    "created_by, start_date, due_date, created_at, status, completed_date, completion_remarks, rejection_remarks"
)


def _history_row(task_id: int, entry: TaskHistory) -> tuple:
    return (task_id, entry.action, entry.by, entry.timestamp, entry.details)


class MySQLTaskRepository(TaskRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @staticmethod
    def _to_task(row: Dict[str, Any], history: list[TaskHistory]) -> Task:
        return Task(
            id=int(row["id"]),
            title=row["title"],
            description=row.get("description") or "",
            category=TaskCategory(row["category"]),
            priority=TaskPriority(row["priority"]),
            assigned_to=str(row["assigned_to"]),
            assigned_to_name=row.get("assigned_to_name") or "",
            assigned_to_department=row.get("assigned_to_department"),
            created_by=row["created_by"],
            start_date=row.get("start_date"),
            due_date=row.get("due_date"),
            created_at=row["created_at"],
            status=TaskStatus(row["status"]),
            history=tuple(history),
            completed_date=row.get("completed_date"),
            completion_remarks=row.get("completion_remarks"),
            rejection_remarks=row.get("rejection_remarks"),
        )

    def _history(self, cur, task_ids: list[int]) -> dict[int, list[TaskHistory]]:
        out: dict[int, list[TaskHistory]] = {}
        if not task_ids:
            return out
        placeholders = ",".join(["%s"] * len(task_ids))
        cur.execute(
            f"SELECT task_id, action, actor, at, details FROM task_history WHERE task_id IN ({placeholders}) ORDER BY id",
            tuple(task_ids),
        )
        for r in fetchall(cur):
            out.setdefault(int(r["task_id"]), []).append(
                TaskHistory(action=r["action"], by=r["actor"], timestamp=r["at"], details=r.get("details"))
            )
        return out

    def get(self, task_id: int) -> Optional[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks WHERE id=%s", (int(task_id),))
            row = fetchone(cur)
            if not row:
                return None
            return self._to_task(row, self._history(cur, [int(row["id"])]).get(int(row["id"]), []))

    def list_all(self) -> Sequence[Task]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM tasks ORDER BY created_at DESC, id DESC")
            rows = fetchall(cur)
            history = self._history(cur, [int(r["id"]) for r in rows])
            return [self._to_task(r, history.get(int(r["id"]), [])) for r in rows]

    def create(self, task: Task) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO tasks(title, description, category, priority, assigned_to, assigned_to_name,
                                  assigned_to_department, created_by, start_date, due_date, created_at, status)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    task.title,
                    task.description,
                    task.category.value,
                    task.priority.value,
                    task.assigned_to,
                    task.assigned_to_name,
                    task.assigned_to_department,
                    task.created_by,
                    task.start_date,
                    task.due_date,
                    task.created_at,
                    task.status.value,
                ),
            )
            task_id = int(cur.lastrowid)
            cur.executemany(
                "INSERT INTO task_history(task_id, action, actor, at, details) VALUES (%s,%s,%s,%s,%s)",
                [_history_row(task_id, h) for h in task.history],
            )
            return task_id

    def save_transition(self, task: Task, *, expected: TaskStatus) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE tasks
                SET status=%s, assigned_to=%s, assigned_to_name=%s, assigned_to_department=%s,
                    completed_date=%s, completion_remarks=%s, rejection_remarks=%s
                WHERE id=%s AND status=%s
                """,
                (
                    task.status.value,
                    task.assigned_to,
                    task.assigned_to_name,
                    task.assigned_to_department,
                    task.completed_date,
                    task.completion_remarks,
                    task.rejection_remarks,
                    task.id,
                    expected.value,
                ),
            )
            if cur.rowcount != 1:
                return False
            if task.history:
                cur.execute(
                    "INSERT INTO task_history(task_id, action, actor, at, details) VALUES (%s,%s,%s,%s,%s)",
                    _history_row(task.id, task.history[-1]),
                )
            return True

    def delete(self, task_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM task_history WHERE task_id=%s", (int(task_id),))
            cur.execute("DELETE FROM tasks WHERE id=%s", (int(task_id),))
            return cur.rowcount > 0
