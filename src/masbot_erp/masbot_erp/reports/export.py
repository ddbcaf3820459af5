from __future__ import annotations

import io
from datetime import date
from typing import Sequence

import pandas as pd

from ..attendance.model import AttendanceLogRow
from .model import AbsenteeRow, MonthlyPerformanceRow

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def to_workbook(rows: list[dict], *, sheet_name: str, columns: Sequence[str]) -> io.BytesIO:
    """Write rows into an in-memory .xlsx workbook, rewound and ready for send_file."""
    df = pd.DataFrame(rows, columns=list(columns))
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    output.seek(0)
    return output


MONTHLY_COLUMNS = ("#", "Employee ID", "Name", "Department", "Designation", "Month", "Days Present", "Attendance (%)", "Leaves Taken")


def monthly_workbook(rows: Sequence[MonthlyPerformanceRow]) -> io.BytesIO:
    data = [
        {
            "#": i,
            "Employee ID": r.employee_code,
            "Name": r.name,
            "Department": r.department,
            "Designation": r.designation,
            "Month": r.month,
            "Days Present": r.days_present,
            "Attendance (%)": f"{r.attendance_pct}%",
            "Leaves Taken": r.leaves_taken,
        }
        for i, r in enumerate(rows, start=1)
    ]
    return to_workbook(data, sheet_name="Monthly Report", columns=MONTHLY_COLUMNS)


ATTENDANCE_COLUMNS = ("Date", "Employee ID", "Name", "Department", "Time In", "Time Out", "Status")


def attendance_workbook(rows: Sequence[AttendanceLogRow]) -> io.BytesIO:
    data = [
        {
            "Date": r.record.date.isoformat(),
            "Employee ID": r.employee_code,
            "Name": r.employee_name,
            "Department": r.department,
            "Time In": r.record.time_in,
            "Time Out": r.record.time_out or "-",
            "Status": r.record.status.value,
        }
        for r in rows
    ]
    return to_workbook(data, sheet_name="Attendance", columns=ATTENDANCE_COLUMNS)


ABSENT_COLUMNS = ("Date", "Employee ID", "Name", "Department", "Status", "Remarks")


def absent_workbook(rows: Sequence[AbsenteeRow]) -> io.BytesIO:
    data = [
        {
            "Date": r.date.isoformat(),
            "Employee ID": r.employee_code,
            "Name": r.name,
            "Department": r.department,
            "Status": r.status.value,
            "Remarks": r.remarks,
        }
        for r in rows
    ]
    return to_workbook(data, sheet_name="Absent", columns=ABSENT_COLUMNS)


def monthly_filename(month: str) -> str:
    return f"HR_Monthly_Report_{month}.xlsx"


def range_filename(prefix: str, start: date, end: date) -> str:
    return f"{prefix}_Report_{start.isoformat()}_to_{end.isoformat()}.xlsx"
