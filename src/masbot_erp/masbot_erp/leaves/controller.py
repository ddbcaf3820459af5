from __future__ import annotations

import logging

from flask import Flask

from ..common.web import current_identity, fail, handle_errors, login_required, ok, optional_date, payload
from ..container import Container
from ..core.enums import ApprovalAction, LeaveType

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leaves", methods=["POST"], endpoint="leaves_apply")
    @login_required
    @handle_errors(logger)
    def leaves_apply():
        identity = current_identity()
        if identity.employee_id is None:
            return fail("Only employees can apply for leave", 400)
        data = payload()
        request_id = container.leave_service.apply(
            employee_id=identity.employee_id,
            from_date=optional_date(data.get("from_date")),
            to_date=optional_date(data.get("to_date")),
            leave_type=LeaveType(data.get("leave_type") or LeaveType.CASUAL.value),
            reason=data.get("reason", ""),
        )
        return ok("Leave request submitted successfully!", 201, request_id=request_id)

    @app.route("/api/leaves/mine", methods=["GET"], endpoint="leaves_mine")
    @login_required
    @handle_errors(logger)
    def leaves_mine():
        identity = current_identity()
        if identity.employee_id is None:
            return ok(requests=[])
        return ok(
            requests=container.leave_service.my_requests(identity.employee_id),
            balance=container.employee_service.get(identity.employee_id).leave_balance.to_dict(),
        )

    @app.route("/api/leaves/actionable", methods=["GET"], endpoint="leaves_actionable")
    @login_required
    @handle_errors(logger)
    def leaves_actionable():
        return ok(requests=container.leave_service.actionable_for(current_identity()))

    @app.route("/api/leaves/<int:request_id>/action", methods=["POST"], endpoint="leaves_action")
    @login_required
    @handle_errors(logger)
    def leaves_action(request_id: int):
        action = ApprovalAction(payload().get("action", ""))
        status = container.leave_service.act(request_id=request_id, action=action, actor=current_identity())
        return ok(f"Leave request {status.value.lower()}", new_status=status)
