from __future__ import annotations

from datetime import date

import pandas as pd
import pytest

from src.masbot_erp.masbot_erp.attendance.model import AttendanceLogRow, AttendanceRecord
from src.masbot_erp.masbot_erp.core.enums import AbsenceStatus, AttendanceStatus, EmployeeStatus, LeaveStatus, LeaveType
from src.masbot_erp.masbot_erp.core.exceptions import ValidationError
from src.masbot_erp.masbot_erp.leaves.model import LeaveRequest
from src.masbot_erp.masbot_erp.reports.export import MONTHLY_COLUMNS, absent_workbook, monthly_workbook
from src.masbot_erp.masbot_erp.reports.service import ReportService, attendance_pct


class FakeAttendanceRepo:
    def __init__(self, employees, records=()):
        self._employees = employees
        self.records = list(records)

    def list_between(self, *, start_date, end_date, employee_id=None, department=None):
        out = []
        for rec in self.records:
            emp = self._employees.get_by_id(rec.employee_id)
            if not (start_date <= rec.date <= end_date):
                continue
            if employee_id is not None and rec.employee_id != employee_id:
                continue
            if department is not None and emp.department != department:
                continue
            out.append(AttendanceLogRow(record=rec, employee_code=emp.employee_code,
                                        employee_name=emp.full_name, department=emp.department))
        return out


class FakeLeaveRepo:
    def __init__(self, requests=()):
        self.requests = list(requests)

    def list_between(self, *, start, end, status=None):
        return [
            r
            for r in self.requests
            if r.from_date <= end and r.to_date >= start and (status is None or r.status == status)
        ]


def _present(employee_id, day, status=AttendanceStatus.PRESENT):
    return AttendanceRecord(employee_id=employee_id, date=day, time_in="09:00", time_out="17:00", status=status)


def _leave(request_id, employee_id, start, end, status=LeaveStatus.APPROVED, leave_type=LeaveType.SICK):
    return LeaveRequest(id=request_id, employee_id=employee_id, from_date=start, to_date=end,
                        leave_type=leave_type, reason="", status=status)


def test_attendance_pct_rounds_half_up_and_caps():
    assert attendance_pct(0) == 0
    assert attendance_pct(15) == 50
    assert attendance_pct(20) == 67
    assert attendance_pct(30) == 100
    assert attendance_pct(31) == 100


def test_monthly_performance_counts_days_and_leaves(employee_repo):
    records = [_present(1, date(2024, 3, d)) for d in (1, 2, 4)]
    records += [_present(4, date(2024, 3, d)) for d in range(1, 21)]
    records.append(_present(1, date(2024, 2, 29)))
    leaves = [
        _leave(1, 1, date(2024, 2, 28), date(2024, 3, 2)),
        _leave(2, 1, date(2024, 3, 10), date(2024, 3, 11)),
        _leave(3, 3, date(2024, 3, 12), date(2024, 3, 12), status=LeaveStatus.PENDING_HR),
    ]
    employee_repo.set_status(employee_id=2, status=EmployeeStatus.RESIGNED)
    service = ReportService(employee_repo, FakeAttendanceRepo(employee_repo, records), FakeLeaveRepo(leaves))

    rows = {r.name: r for r in service.monthly_performance("2024-03")}

    assert set(rows) == {"Ali Khan", "Omar Raza", "Hina Malik"}
    assert (rows["Ali Khan"].days_present, rows["Ali Khan"].attendance_pct, rows["Ali Khan"].leaves_taken) == (3, 10, 1)
    assert (rows["Hina Malik"].days_present, rows["Hina Malik"].attendance_pct) == (20, 67)
    assert rows["Omar Raza"].leaves_taken == 0
    assert rows["Ali Khan"].month == "2024-03"


def test_monthly_performance_filters(employee_repo):
    service = ReportService(employee_repo, FakeAttendanceRepo(employee_repo), FakeLeaveRepo())

    assert [r.name for r in service.monthly_performance("2024-03", department="IT")] == ["Hina Malik"]
    assert [r.name for r in service.monthly_performance("2024-03", department="All", search="  RAZA ")] == ["Omar Raza"]
    with pytest.raises(ValidationError):
        service.monthly_performance("March 2024")


def test_absentees_marks_approved_leave(employee_repo):
    records = [_present(1, date(2024, 3, 1))]
    leaves = [
        _leave(1, 2, date(2024, 3, 1), date(2024, 3, 5)),
        _leave(2, 1, date(2024, 3, 2), date(2024, 3, 2), status=LeaveStatus.REJECTED, leave_type=LeaveType.CASUAL),
    ]
    service = ReportService(employee_repo, FakeAttendanceRepo(employee_repo, records), FakeLeaveRepo(leaves))

    rows = service.absentees(start_date=date(2024, 3, 1), end_date=date(2024, 3, 2), department="Kitchen")

    assert [(r.date.day, r.name, r.status, r.remarks) for r in rows] == [
        (1, "Sara Ahmed", AbsenceStatus.ON_LEAVE, "Sick Leave"),
        (2, "Ali Khan", AbsenceStatus.ABSENT, "-"),
        (2, "Sara Ahmed", AbsenceStatus.ON_LEAVE, "Sick Leave"),
    ]

    frame = pd.read_excel(absent_workbook(rows), engine="openpyxl")
    assert list(frame["Status"]) == ["On Leave", "Absent", "On Leave"]


def test_attendance_log_sorted_and_searchable(employee_repo):
    records = [
        _present(4, date(2024, 3, 2)),
        _present(1, date(2024, 3, 2), status=AttendanceStatus.LATE),
        _present(1, date(2024, 3, 1)),
    ]
    service = ReportService(employee_repo, FakeAttendanceRepo(employee_repo, records), FakeLeaveRepo())
    window = dict(start_date=date(2024, 3, 1), end_date=date(2024, 3, 31))

    rows = service.attendance_log(**window)
    assert [(r.record.date.day, r.employee_name) for r in rows] == [(1, "Ali Khan"), (2, "Ali Khan"), (2, "Hina Malik")]
    assert [r.employee_name for r in service.attendance_log(department="IT", **window)] == ["Hina Malik"]
    assert len(service.attendance_log(search="ali", **window)) == 2

    with pytest.raises(ValidationError):
        service.attendance_log(start_date=date(2024, 3, 5), end_date=date(2024, 3, 1))


def test_monthly_workbook_columns(employee_repo):
    records = [_present(1, date(2024, 3, d)) for d in range(1, 16)]
    service = ReportService(employee_repo, FakeAttendanceRepo(employee_repo, records), FakeLeaveRepo())

    frame = pd.read_excel(monthly_workbook(service.monthly_performance("2024-03")), engine="openpyxl")

    assert tuple(frame.columns) == MONTHLY_COLUMNS
    assert frame.loc[0, "Name"] == "Ali Khan"
    assert frame.loc[0, "Attendance (%)"] == "50%"
    assert list(frame["#"]) == [1, 2, 3, 4]
