from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import iter_days, month_bounds, now_local, parse_month
from ..common.quantities import ZERO, to_money
from ..core.enums import LeaveStatus
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..leaves.repository import LeaveRepository
from .calculator.attendance_calculator import AttendancePayrollCalculator
from .calculator.base import PayrollCalculator
from .model import EmployeePayLine, PayrollRecord
from .repository import PayrollRepository

logger = logging.getLogger(__name__)


class PayrollService:
    def __init__(
        self,
        payroll: PayrollRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        leaves: LeaveRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._payroll = payroll
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves
        self._calculator = calculator or AttendancePayrollCalculator()
        self._clock = clock

    def preview(self, month: str) -> PayrollRecord:
        """Compute the payroll for YYYY-MM without storing it."""
        try:
            year, mon = parse_month(month)
        except ValueError as e:
            raise ValidationError("Month must be in YYYY-MM format") from e
        start, end = month_bounds(year, mon)

        present: dict[int, set[date]] = {}
        for row in self._attendance.list_between(start_date=start, end_date=end):
            present.setdefault(row.record.employee_id, set()).add(row.record.date)
        month_has_attendance = bool(present)

        on_leave: dict[int, set[date]] = {}
        for req in self._leaves.list_between(start=start, end=end, status=LeaveStatus.APPROVED):
            days = on_leave.setdefault(req.employee_id, set())
            days.update(d for d in iter_days(max(req.from_date, start), min(req.to_date, end)))

        lines = []
        for emp in self._employees.list_all():
            if not emp.is_active:
                continue
            days_present = present.get(emp.id, set())
            leave_days = on_leave.get(emp.id, set())
            result = self._calculator.calculate(
                salary=emp.salary,
                present_days=days_present,
                leave_days=leave_days,
                month_has_attendance=month_has_attendance,
            )
            lines.append(
                EmployeePayLine(
                    employee_id=emp.id,
                    employee_name=emp.full_name,
                    department=emp.department,
                    base_salary=to_money(emp.salary),
                    deductions=result.deductions,
                    net_pay=result.net_pay,
                    days_present=len(days_present),
                    leave_days=len(leave_days - days_present),
                )
            )

        return PayrollRecord(
            id=0,
            run_at=self._clock(),
            month=f"{year:04d}-{mon:02d}",
            month_year=start.strftime("%B %Y"),
            total_payroll=sum((line.base_salary for line in lines), to_money(ZERO)),
            total_deductions=sum((line.deductions for line in lines), to_money(ZERO)),
            total_net_pay=sum((line.net_pay for line in lines), to_money(ZERO)),
            lines=tuple(lines),
        )

    def run_payroll(self, month: str) -> PayrollRecord:
        record = self.preview(month)
        if not record.lines:
            raise ValidationError("No active employees to run payroll for")
        payroll_id = self._payroll.create(record)
        logger.info(
            "Payroll %s run for %s: %d employees, net %s",
            payroll_id,
            record.month_year,
            len(record.lines),
            record.total_net_pay,
        )
        return replace(record, id=payroll_id)

    def history(self) -> Sequence[PayrollRecord]:
        return self._payroll.list_all()

    def get(self, payroll_id: int) -> PayrollRecord:
        record = self._payroll.get(int(payroll_id))
        if not record:
            raise NotFoundError("Payroll record not found")
        return record
