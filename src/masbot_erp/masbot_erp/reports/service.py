from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Sequence

from ..attendance.model import AttendanceLogRow
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import iter_days, month_bounds, parse_month
from ..core.constants import PAYROLL_DAYS_PER_MONTH
from ..core.enums import AbsenceStatus, LeaveStatus
from ..core.exceptions import ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..leaves.repository import LeaveRepository
from .model import AbsenteeRow, MonthlyPerformanceRow

logger = logging.getLogger(__name__)


def attendance_pct(days_present: int) -> int:
    """Share of a 30-day month, rounded half-up and capped at 100."""
    if days_present <= 0:
        return 0
    pct = (days_present * 200 + PAYROLL_DAYS_PER_MONTH) // (2 * PAYROLL_DAYS_PER_MONTH)
    return min(pct, 100)


class ReportService:
    def __init__(self, employees: EmployeeRepository, attendance: AttendanceRepository, leaves: LeaveRepository):
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves

    def _employees_matching(self, department: Optional[str], search: Optional[str]) -> list[Employee]:
        dept = department if department and department != "All" else None
        needle = (search or "").strip().lower()
        return [
            e
            for e in self._employees.list_all(department=dept)
            if e.is_active and needle in e.full_name.lower()
        ]

    def monthly_performance(
        self,
        month: str,
        *,
        department: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[MonthlyPerformanceRow]:
        try:
            year, mon = parse_month(month)
        except ValueError as e:
            raise ValidationError("Month must be in YYYY-MM format") from e
        start, end = month_bounds(year, mon)

        present: dict[int, int] = {}
        for row in self._attendance.list_between(start_date=start, end_date=end):
            present[row.record.employee_id] = present.get(row.record.employee_id, 0) + 1

        leaves_taken: dict[int, int] = {}
        for req in self._leaves.list_between(start=start, end=end, status=LeaveStatus.APPROVED):
            # counted in the month the leave starts
            if start <= req.from_date <= end:
                leaves_taken[req.employee_id] = leaves_taken.get(req.employee_id, 0) + 1

        out = []
        for emp in self._employees_matching(department, search):
            days = present.get(emp.id, 0)
            out.append(
                MonthlyPerformanceRow(
                    employee_id=emp.id,
                    employee_code=emp.employee_code,
                    name=emp.full_name,
                    department=emp.department,
                    designation=emp.designation,
                    month=f"{year:04d}-{mon:02d}",
                    days_present=days,
                    attendance_pct=attendance_pct(days),
                    leaves_taken=leaves_taken.get(emp.id, 0),
                )
            )
        return out

    def attendance_log(
        self,
        *,
        start_date: date,
        end_date: date,
        department: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[AttendanceLogRow]:
        if end_date < start_date:
            raise ValidationError('"To Date" cannot be earlier than "From Date".')
        dept = department if department and department != "All" else None
        needle = (search or "").strip().lower()
        rows = [
            r
            for r in self._attendance.list_between(start_date=start_date, end_date=end_date, department=dept)
            if needle in r.employee_name.lower()
        ]
        return sorted(rows, key=lambda r: (r.record.date, r.employee_name))

    def absentees(
        self,
        *,
        start_date: date,
        end_date: date,
        department: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[AbsenteeRow]:
        """Every (day, employee) without an attendance record, marked On Leave when covered by approved leave."""
        if end_date < start_date:
            raise ValidationError('"To Date" cannot be earlier than "From Date".')

        employees = self._employees_matching(department, search)
        seen = {
            (r.record.employee_id, r.record.date)
            for r in self._attendance.list_between(start_date=start_date, end_date=end_date)
        }
        approved: Sequence = self._leaves.list_between(start=start_date, end=end_date, status=LeaveStatus.APPROVED)

        out = []
        for day in iter_days(start_date, end_date):
            for emp in employees:
                if (emp.id, day) in seen:
                    continue
                leave = next(
                    (
                        req
                        for req in approved
                        if req.employee_id == emp.id and req.from_date <= day <= req.to_date
                    ),
                    None,
                )
                out.append(
                    AbsenteeRow(
                        date=day,
                        employee_code=emp.employee_code,
                        name=emp.full_name,
                        department=emp.department,
                        designation=emp.designation,
                        status=AbsenceStatus.ON_LEAVE if leave else AbsenceStatus.ABSENT,
                        remarks=leave.leave_type.value if leave else "-",
                    )
                )
        out.sort(key=lambda r: (r.date, r.name))
        logger.debug("Absentee report %s..%s: %d rows", start_date, end_date, len(out))
        return out
