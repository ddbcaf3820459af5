from __future__ import annotations

import logging
from datetime import date

from flask import Flask, request

from ..common.web import current_identity, handle_errors, ok, optional_date, page_required, payload
from ..container import Container
from ..core.enums import PermissionAction, TaskAction, TaskCategory, TaskPriority
from .service import is_overdue

logger = logging.getLogger(__name__)

MODULE = "task_manager"
PAGE = "tasks"
ANALYTICS_PAGE = "analytics"


def register(app: Flask, container: Container) -> None:
    can_view = page_required(container.access, MODULE, PAGE, PermissionAction.VIEW)
    tasks = container.task_service

    @app.route("/api/tasks/board", methods=["GET"], endpoint="tasks_board")
    @can_view
    @handle_errors(logger)
    def tasks_board():
        mode = request.args.get("mode") or "my"
        board = tasks.board(current_identity(), mode=mode)
        today = date.today()
        overdue = [t.id for column in board.values() for t in column if is_overdue(t, today)]
        return ok(board=board, overdue=overdue)

    @app.route("/api/tasks", methods=["POST"], endpoint="tasks_create")
    @can_view
    @handle_errors(logger)
    def tasks_create():
        data = payload()
        assignee = data.get("assigned_to_employee_id")
        task_id = tasks.create_task(
            actor=current_identity(),
            title=data.get("title", ""),
            description=data.get("description", ""),
            category=TaskCategory(data.get("category") or TaskCategory.OPERATIONS.value),
            priority=TaskPriority(data.get("priority") or TaskPriority.MEDIUM.value),
            start_date=optional_date(data.get("start_date")),
            due_date=optional_date(data.get("due_date")),
            assigned_to_employee_id=int(assignee) if assignee not in (None, "") else None,
        )
        return ok("Task created successfully", 201, task_id=task_id)

    @app.route("/api/tasks/<int:task_id>/action", methods=["POST"], endpoint="tasks_action")
    @can_view
    @handle_errors(logger)
    def tasks_action(task_id: int):
        data = payload()
        task = tasks.workflow_action(
            task_id=task_id,
            action=TaskAction(data.get("action", "")),
            actor=current_identity(),
            remarks=data.get("remarks"),
        )
        return ok(f"Task moved to {task.status.value}", task=task)

    @app.route("/api/tasks/<int:task_id>/reassign", methods=["POST"], endpoint="tasks_reassign")
    @can_view
    @handle_errors(logger)
    def tasks_reassign(task_id: int):
        task = tasks.reassign(
            task_id=task_id,
            employee_id=int(payload().get("employee_id") or 0),
            actor=current_identity(),
        )
        return ok(f"Task reassigned to {task.assigned_to_name}", task=task)

    @app.route("/api/tasks/<int:task_id>", methods=["DELETE"], endpoint="tasks_delete")
    @can_view
    @handle_errors(logger)
    def tasks_delete(task_id: int):
        tasks.delete_task(task_id=task_id, actor=current_identity())
        return ok("Task deleted")

    @app.route("/api/tasks/analytics", methods=["GET"], endpoint="tasks_analytics")
    @page_required(container.access, MODULE, ANALYTICS_PAGE, PermissionAction.VIEW)
    @handle_errors(logger)
    def tasks_analytics():
        return ok(analytics=tasks.analytics(current_identity()))
