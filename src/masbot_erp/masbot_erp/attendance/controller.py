from __future__ import annotations

import logging
from datetime import date

from flask import Flask, request

from ..common.web import current_identity, date_arg, fail, handle_errors, login_required, ok, page_required
from ..container import Container
from ..core.enums import PermissionAction

logger = logging.getLogger(__name__)

MODULE = "hr"
PAGE = "attendance"


def register(app: Flask, container: Container) -> None:
    can_upload = page_required(container.access, MODULE, PAGE, PermissionAction.UPDATE)

    @app.route("/api/attendance/upload", methods=["POST"], endpoint="attendance_upload")
    @can_upload
    @handle_errors(logger)
    def attendance_upload():
        file = request.files.get("file")
        if file is None or not file.filename:
            return fail("Please choose a file to upload", 400)
        report = container.attendance_service.import_workbook(file.stream, file.filename)
        return ok(report.message, records=len(report.records), unmatched=report.unmatched)

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    @handle_errors(logger)
    def attendance_list():
        today = date.today()
        rows = container.attendance_service.visible_records(
            current_identity(),
            start_date=date_arg("from", today),
            end_date=date_arg("to", today),
            department=request.args.get("department") or None,
        )
        return ok(records=rows)
