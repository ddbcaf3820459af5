from __future__ import annotations

import logging
from datetime import date

from flask import Flask, request

from ..common.web import handle_errors, ok, page_required, payload
from ..container import Container
from ..core.enums import PermissionAction

logger = logging.getLogger(__name__)

MODULE = "hr"
PAGE = "payroll"


def register(app: Flask, container: Container) -> None:
    can_view = page_required(container.access, MODULE, PAGE, PermissionAction.VIEW)
    can_update = page_required(container.access, MODULE, PAGE, PermissionAction.UPDATE)

    @app.route("/api/payroll", methods=["GET"], endpoint="payroll_history")
    @can_view
    @handle_errors(logger)
    def payroll_history():
        return ok(history=container.payroll_service.history())

    @app.route("/api/payroll/<int:payroll_id>", methods=["GET"], endpoint="payroll_get")
    @can_view
    @handle_errors(logger)
    def payroll_get(payroll_id: int):
        return ok(payroll=container.payroll_service.get(payroll_id))

    @app.route("/api/payroll/preview", methods=["GET"], endpoint="payroll_preview")
    @can_view
    @handle_errors(logger)
    def payroll_preview():
        month = request.args.get("month") or date.today().strftime("%Y-%m")
        return ok(payroll=container.payroll_service.preview(month))

    @app.route("/api/payroll/run", methods=["POST"], endpoint="payroll_run")
    @can_update
    @handle_errors(logger)
    def payroll_run():
        month = payload().get("month") or date.today().strftime("%Y-%m")
        record = container.payroll_service.run_payroll(month)
        return ok(f"Payroll for {record.month_year} processed successfully", 201, payroll=record)
