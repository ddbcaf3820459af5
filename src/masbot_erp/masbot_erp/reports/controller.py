from __future__ import annotations

import logging
from datetime import date

from flask import Flask, request, send_file

from ..common.web import date_arg, handle_errors, ok, page_required
from ..container import Container
from ..core.enums import PermissionAction
from . import export

logger = logging.getLogger(__name__)

MODULE = "hr"
PAGE = "reports"


def _wants_xlsx() -> bool:
    return (request.args.get("format") or "").lower() == "xlsx"


def _xlsx(buf, filename: str):
    return send_file(buf, download_name=filename, as_attachment=True, mimetype=export.XLSX_MIMETYPE)


def register(app: Flask, container: Container) -> None:
    can_view = page_required(container.access, MODULE, PAGE, PermissionAction.VIEW)

    def _filters() -> dict:
        return {
            "department": request.args.get("department") or None,
            "search": request.args.get("search") or None,
        }

    @app.route("/api/reports/monthly", methods=["GET"], endpoint="reports_monthly")
    @can_view
    @handle_errors(logger)
    def reports_monthly():
        month = request.args.get("month") or date.today().strftime("%Y-%m")
        rows = container.report_service.monthly_performance(month, **_filters())
        if _wants_xlsx():
            return _xlsx(export.monthly_workbook(rows), export.monthly_filename(month))
        return ok(rows=rows)

    @app.route("/api/reports/attendance", methods=["GET"], endpoint="reports_attendance")
    @can_view
    @handle_errors(logger)
    def reports_attendance():
        start, end = date_arg("from", date.today()), date_arg("to", date.today())
        rows = container.report_service.attendance_log(start_date=start, end_date=end, **_filters())
        if _wants_xlsx():
            return _xlsx(export.attendance_workbook(rows), export.range_filename("Attendance", start, end))
        return ok(rows=rows)

    @app.route("/api/reports/absent", methods=["GET"], endpoint="reports_absent")
    @can_view
    @handle_errors(logger)
    def reports_absent():
        start, end = date_arg("from", date.today()), date_arg("to", date.today())
        rows = container.report_service.absentees(start_date=start, end_date=end, **_filters())
        if _wants_xlsx():
            return _xlsx(export.absent_workbook(rows), export.range_filename("Absent", start, end))
        return ok(rows=rows)
