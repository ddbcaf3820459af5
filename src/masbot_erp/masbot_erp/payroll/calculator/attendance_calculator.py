from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import AbstractSet

from ...common.quantities import ZERO, to_money
from ...core.constants import PAYROLL_DAYS_PER_MONTH
from .base import PayResult, PayrollCalculator


class AttendancePayrollCalculator(PayrollCalculator):
    """Pro-rata rule: salary / 30 per paid day, capped at the full salary.

    Paid days are days present plus approved leave days without a punch. A
    month with no attendance at all pays the full salary.
    """

    def calculate(
        self,
        *,
        salary: Decimal,
        present_days: AbstractSet[date],
        leave_days: AbstractSet[date],
        month_has_attendance: bool,
    ) -> PayResult:
        paid_days = len(present_days) + len(set(leave_days) - set(present_days))
        salary = to_money(salary)
        if not month_has_attendance:
            return PayResult(paid_days=paid_days, net_pay=salary, deductions=to_money(ZERO))

        effective = min(PAYROLL_DAYS_PER_MONTH, paid_days)
        pay = to_money(salary / PAYROLL_DAYS_PER_MONTH * effective)
        deductions = max(to_money(salary - pay), to_money(ZERO))
        return PayResult(paid_days=paid_days, net_pay=pay, deductions=deductions)
